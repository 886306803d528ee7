"""Aggregation of transaction amounts into category spend."""

import logging
from collections import defaultdict
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable

from sqlalchemy.exc import SQLAlchemyError

from budgetwatch.database.base import Database
from budgetwatch.domain.entities import SpendingFailure, SpendingResult, Transaction
from budgetwatch.domain.errors import DomainError

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")


def to_cents(amount: Decimal) -> Decimal:
    """Quantize an amount to cents using half-up rounding."""
    return Decimal(amount).quantize(CENTS, rounding=ROUND_HALF_UP)


def compute_category_spending(transactions: Iterable[Transaction]) -> dict[int, Decimal]:
    """Sum absolute expense amounts per category.

    Income and uncategorized transactions are ignored. The sum is exact and
    only the final total is rounded to cents.

    Args:
        transactions: Transactions to fold over

    Returns:
        Mapping of category ID to accumulated spend
    """
    totals: dict[int, Decimal] = defaultdict(Decimal)
    for txn in transactions:
        if txn.category_id is None or txn.amount >= 0:
            continue
        totals[txn.category_id] += abs(txn.amount)
    return {category_id: to_cents(total) for category_id, total in totals.items()}


class SpendingService:
    """Service that keeps each category's ``spent`` in sync with the ledger."""

    def __init__(self, db: Database):
        """Initialize spending service.

        Args:
            db: Database instance
        """
        self.db = db

    def recompute_spending(self, owner_id: str) -> SpendingResult:
        """Recompute ``spent`` for every category of an owner.

        Categories and transactions are read fresh on every call. A category is
        written only when its stored value differs from the computed one, so a
        second pass without ledger changes performs no writes. Transactions
        pointing at a missing category are skipped.

        Args:
            owner_id: Owner whose categories are refreshed

        Returns:
            SpendingResult listing updated, unchanged and failed categories
        """
        categories = self.db.list_categories(owner_id)
        spending = compute_category_spending(self.db.list_transactions(owner_id))

        updated = []
        unchanged = []
        failures = []
        for category in categories:
            computed = spending.get(category.id, Decimal("0.00"))
            if to_cents(category.spent) == computed:
                unchanged.append(category.id)
                continue
            try:
                self.db.update_category(category.id, spent=computed)
            except (SQLAlchemyError, DomainError) as e:
                logger.error("Failed to update spent for category %s: %s", category.id, e)
                failures.append(SpendingFailure(category_id=category.id, message=str(e)))
                continue
            updated.append(category.id)

        if updated:
            logger.debug("Updated spent for %d categories of %s", len(updated), owner_id)

        return SpendingResult(
            updated=tuple(updated),
            unchanged=tuple(unchanged),
            failures=tuple(failures),
        )
