"""Abstract database interface."""

from abc import ABC, abstractmethod
from typing import Optional
from datetime import date
from decimal import Decimal

# Import entities directly to avoid circular import through domain/__init__.py
from budgetwatch.domain.entities import Category, CategoryIcon, Transaction


class Database(ABC):
    """Abstract ledger store for budgetwatch.

    Categories and transactions are scoped by ``owner_id``. Lookups by ID are
    not owner-scoped; services check ownership where it matters.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Category operations
    @abstractmethod
    def create_category(
        self,
        owner_id: str,
        name: str,
        budget: Decimal,
        color: str,
        icon: CategoryIcon,
    ) -> int:
        """Create a category with ``spent`` set to zero. Returns category ID."""
        pass

    @abstractmethod
    def get_category(self, category_id: int) -> Optional[Category]:
        """Get category by ID."""
        pass

    @abstractmethod
    def list_categories(self, owner_id: str) -> list[Category]:
        """List all categories belonging to an owner."""
        pass

    @abstractmethod
    def update_category(
        self,
        category_id: int,
        name: Optional[str] = None,
        budget: Optional[Decimal] = None,
        color: Optional[str] = None,
        icon: Optional[CategoryIcon] = None,
        spent: Optional[Decimal] = None,
    ) -> None:
        """Update the given category fields; ``None`` leaves a field untouched."""
        pass

    @abstractmethod
    def delete_category(self, category_id: int) -> None:
        """Delete a category. Its transactions are left in place."""
        pass

    # Transaction operations
    @abstractmethod
    def create_transaction(
        self,
        owner_id: str,
        name: str,
        amount: Decimal,
        date: date,
        category_id: Optional[int] = None,
    ) -> int:
        """Create a transaction. Returns transaction ID."""
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Get transaction by ID."""
        pass

    @abstractmethod
    def list_transactions(self, owner_id: str) -> list[Transaction]:
        """List all transactions belonging to an owner, in no particular order."""
        pass

    @abstractmethod
    def update_transaction(
        self,
        transaction_id: int,
        name: Optional[str] = None,
        amount: Optional[Decimal] = None,
        date: Optional[date] = None,
        category_id: Optional[int] = None,
        update_category: bool = False,
    ) -> None:
        """Update transaction fields.

        Args:
            update_category: If True, write ``category_id`` even when it is None
        """
        pass

    @abstractmethod
    def delete_transaction(self, transaction_id: int) -> None:
        """Delete a transaction."""
        pass
