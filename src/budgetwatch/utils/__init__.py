"""Utility functions for budgetwatch."""

from budgetwatch.utils.date_parser import parse_date
from budgetwatch.utils.amount_parser import parse_amount

__all__ = ["parse_date", "parse_amount"]
