"""Derived dashboard totals over categories and transactions."""

from decimal import Decimal
from typing import Iterable, Sequence

from budgetwatch.database.base import Database
from budgetwatch.domain.entities import (
    Category,
    CategoryUsage,
    DashboardSummary,
    Transaction,
)

ZERO = Decimal("0")


def total_spent(categories: Iterable[Category]) -> Decimal:
    """Sum of cached ``spent`` across categories."""
    return sum((cat.spent for cat in categories), ZERO)


def total_budget(categories: Iterable[Category]) -> Decimal:
    return sum((cat.budget for cat in categories), ZERO)


def total_income(transactions: Iterable[Transaction]) -> Decimal:
    return sum((txn.amount for txn in transactions if txn.amount > 0), ZERO)


def total_expenses(transactions: Iterable[Transaction]) -> Decimal:
    """Sum of absolute expense amounts, categorized or not."""
    return sum((abs(txn.amount) for txn in transactions if txn.amount < 0), ZERO)


def balance(transactions: Sequence[Transaction]) -> Decimal:
    return total_income(transactions) - total_expenses(transactions)


def budget_usage_percent(category: Category) -> Decimal:
    """Percentage of budget used, 0 for categories without a budget."""
    if category.budget <= 0:
        return ZERO
    return category.spent / category.budget * 100


def expense_share_percent(category: Category, expenses: Decimal) -> Decimal:
    """Share of all expenses that went to this category."""
    if expenses <= 0:
        return ZERO
    return category.spent / expenses * 100


def sort_transactions(transactions: Iterable[Transaction]) -> list[Transaction]:
    """Order transactions newest first.

    Ties on date are broken by write time, then ID.
    """
    return sorted(
        transactions,
        key=lambda txn: (txn.date, txn.created_at, txn.id),
        reverse=True,
    )


def recent_transactions(transactions: Iterable[Transaction], limit: int = 5) -> list[Transaction]:
    return sort_transactions(transactions)[:limit]


def build_dashboard(
    categories: Sequence[Category],
    transactions: Sequence[Transaction],
    recent_limit: int = 5,
) -> DashboardSummary:
    """Build dashboard totals from the current category and transaction sets.

    Args:
        categories: Categories with refreshed ``spent``
        transactions: All transactions of the owner
        recent_limit: Number of recent transactions to include

    Returns:
        DashboardSummary
    """
    expenses = total_expenses(transactions)
    usage = tuple(
        CategoryUsage(
            category=cat,
            percent_used=budget_usage_percent(cat),
            share_of_expenses=expense_share_percent(cat, expenses),
            remaining=cat.budget - cat.spent,
        )
        for cat in categories
    )
    return DashboardSummary(
        total_spent=total_spent(categories),
        total_budget=total_budget(categories),
        total_income=total_income(transactions),
        total_expenses=expenses,
        balance=balance(transactions),
        categories=usage,
        recent_transactions=tuple(recent_transactions(transactions, recent_limit)),
    )


class SummaryService:
    """Service for building dashboard summaries from the database."""

    def __init__(self, db: Database):
        """Initialize summary service.

        Args:
            db: Database instance
        """
        self.db = db

    def get_dashboard(self, owner_id: str, recent_limit: int = 5) -> DashboardSummary:
        """Build the dashboard for an owner from fresh store reads."""
        return build_dashboard(
            self.db.list_categories(owner_id),
            self.db.list_transactions(owner_id),
            recent_limit=recent_limit,
        )
