"""Transaction domain service."""

import logging
from typing import Optional
from datetime import date
from decimal import Decimal

from sqlalchemy.exc import SQLAlchemyError

from budgetwatch.database.base import Database
from budgetwatch.domain.entities import (
    NotificationOutcome,
    SpendingResult,
    Transaction,
    TransactionResult,
)
from budgetwatch.domain.errors import (
    NotFoundError,
    ValidationError,
    category_not_found,
    transaction_not_found,
)
from budgetwatch.domain.notifications import NotificationPolicy
from budgetwatch.domain.spending import SpendingService
from budgetwatch.domain.summary import sort_transactions

logger = logging.getLogger(__name__)


class TransactionService:
    """Service for managing transactions.

    Every mutation is followed by an aggregation pass so category ``spent``
    values are never read stale, and then by notification evaluation when a
    policy is configured. Notification problems are logged and never fail the
    mutation itself.
    """

    def __init__(
        self,
        db: Database,
        spending: Optional[SpendingService] = None,
        policy: Optional[NotificationPolicy] = None,
    ):
        """Initialize transaction service.

        Args:
            db: Database instance
            spending: Aggregation service, defaults to one over ``db``
            policy: Notification policy; None disables notifications
        """
        self.db = db
        self.spending = spending or SpendingService(db)
        self.policy = policy

    def _validate(self, name: Optional[str], amount: Optional[Decimal]) -> None:
        if name is not None and not name.strip():
            raise ValidationError("Transaction name must not be empty")
        if amount is not None and not Decimal(amount).is_finite():
            raise ValidationError(f"Amount must be a finite number, got {amount}")

    def _check_category(self, owner_id: str, category_id: Optional[int]) -> None:
        if category_id is None:
            return
        category = self.db.get_category(category_id)
        if category is None or category.owner_id != owner_id:
            raise NotFoundError(category_not_found(category_id))

    def _require_transaction(self, owner_id: str, transaction_id: int) -> Transaction:
        txn = self.db.get_transaction(transaction_id)
        if txn is None or txn.owner_id != owner_id:
            raise NotFoundError(transaction_not_found(transaction_id))
        return txn

    def _evaluate_thresholds(
        self, owner_id: str, notify_email: Optional[str]
    ) -> list[NotificationOutcome]:
        if self.policy is None:
            return []
        try:
            categories = self.db.list_categories(owner_id)
            return self.policy.evaluate_budget_thresholds(owner_id, notify_email, categories)
        except SQLAlchemyError as e:
            logger.error("Budget threshold evaluation failed for %s: %s", owner_id, e)
            return []

    def _evaluate_large(
        self, owner_id: str, notify_email: Optional[str], transaction_id: int
    ) -> list[NotificationOutcome]:
        if self.policy is None:
            return []
        try:
            txn = self.db.get_transaction(transaction_id)
            if txn is None:
                return []
            outcome = self.policy.evaluate_large_transaction(owner_id, notify_email, txn)
        except SQLAlchemyError as e:
            logger.error("Large transaction evaluation failed for %s: %s", transaction_id, e)
            return []
        return [outcome] if outcome is not None else []

    def create_transaction(
        self,
        owner_id: str,
        name: str,
        amount: Decimal,
        date: date,
        category_id: Optional[int] = None,
        notify_email: Optional[str] = None,
    ) -> TransactionResult:
        """Record a transaction, refresh category spend and evaluate alerts.

        Args:
            owner_id: Owner of the transaction
            name: Description shown to the user
            amount: Signed amount, negative for expenses
            date: Transaction date
            category_id: Optional category ID
            notify_email: Address for alerts; None skips sending

        Returns:
            TransactionResult with the new ID, aggregation result and alerts

        Raises:
            ValidationError: If name or amount is invalid
            NotFoundError: If the category does not exist for this owner
        """
        self._validate(name, amount)
        self._check_category(owner_id, category_id)

        transaction_id = self.db.create_transaction(
            owner_id=owner_id,
            name=name.strip(),
            amount=amount,
            date=date,
            category_id=category_id,
        )

        spending = self.spending.recompute_spending(owner_id)
        outcomes = self._evaluate_large(owner_id, notify_email, transaction_id)
        outcomes += self._evaluate_thresholds(owner_id, notify_email)
        return TransactionResult(transaction_id, spending, tuple(outcomes))

    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Get transaction by ID.

        Args:
            transaction_id: Transaction ID

        Returns:
            Transaction entity or None if not found
        """
        return self.db.get_transaction(transaction_id)

    def update_transaction(
        self,
        owner_id: str,
        transaction_id: int,
        name: Optional[str] = None,
        amount: Optional[Decimal] = None,
        date: Optional[date] = None,
        category_id: Optional[int] = None,
        clear_category: bool = False,
        notify_email: Optional[str] = None,
    ) -> TransactionResult:
        """Update transaction fields and refresh category spend.

        Args:
            clear_category: If True, clear the category (category_id must be None)

        Raises:
            NotFoundError: If the transaction or category doesn't exist
            ValidationError: If the new values are invalid
        """
        self._require_transaction(owner_id, transaction_id)
        self._validate(name, amount)

        if clear_category and category_id is not None:
            raise ValidationError("Cannot set both category_id and clear_category")
        self._check_category(owner_id, category_id)

        self.db.update_transaction(
            transaction_id,
            name=name.strip() if name is not None else None,
            amount=amount,
            date=date,
            category_id=category_id,
            update_category=clear_category,
        )

        spending = self.spending.recompute_spending(owner_id)
        outcomes = self._evaluate_thresholds(owner_id, notify_email)
        return TransactionResult(transaction_id, spending, tuple(outcomes))

    def delete_transaction(
        self,
        owner_id: str,
        transaction_id: int,
        notify_email: Optional[str] = None,
    ) -> TransactionResult:
        """Delete a transaction and refresh category spend.

        Raises:
            NotFoundError: If the transaction doesn't exist for this owner
        """
        self._require_transaction(owner_id, transaction_id)
        self.db.delete_transaction(transaction_id)

        spending = self.spending.recompute_spending(owner_id)
        outcomes = self._evaluate_thresholds(owner_id, notify_email)
        return TransactionResult(transaction_id, spending, tuple(outcomes))

    def list_transactions(self, owner_id: str) -> list[Transaction]:
        """List an owner's transactions, newest first."""
        return sort_transactions(self.db.list_transactions(owner_id))

    def refresh(self, owner_id: str, notify_email: Optional[str] = None) -> tuple[SpendingResult, list[NotificationOutcome]]:
        """Re-run aggregation and budget threshold evaluation without a mutation."""
        spending = self.spending.recompute_spending(owner_id)
        return spending, self._evaluate_thresholds(owner_id, notify_email)
