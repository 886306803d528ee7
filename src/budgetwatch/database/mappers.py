"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, so the engine never depends on
how a row is laid out in the database.
"""

from decimal import Decimal

from budgetwatch.domain import entities as domain
from budgetwatch.database.models import (
    Category as ORMCategory,
    Transaction as ORMTransaction,
)


def _as_decimal(value) -> Decimal:
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def category_to_domain(orm_category: ORMCategory) -> domain.Category:
    """Convert SQLAlchemy Category model to domain Category entity."""
    return domain.Category(
        id=orm_category.id,
        owner_id=orm_category.owner_id,
        name=orm_category.name,
        budget=_as_decimal(orm_category.budget),
        color=orm_category.color,
        icon=domain.CategoryIcon(orm_category.icon),
        spent=_as_decimal(orm_category.spent),
        created_at=orm_category.created_at,
    )


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    return domain.Transaction(
        id=orm_transaction.id,
        owner_id=orm_transaction.owner_id,
        name=orm_transaction.name,
        amount=_as_decimal(orm_transaction.amount),
        category_id=orm_transaction.category_id,
        date=orm_transaction.date,
        created_at=orm_transaction.created_at,
    )
