"""Domain model entities for budgetwatch.

These are pure data classes representing business concepts, independent of
database schema. The engine only ever sees these objects, never ORM rows, so
the storage backend can change without touching aggregation or alert rules.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional


class CategoryIcon(str, Enum):
    """Icon tags available for categories."""

    HOME = "Home"
    SHOPPING_BAG = "ShoppingBag"
    CAR = "Car"
    COFFEE = "Coffee"
    SMARTPHONE = "Smartphone"
    DOLLAR_SIGN = "DollarSign"


DEFAULT_CATEGORY_COLOR = "#3b82f6"
DEFAULT_CATEGORY_ICON = CategoryIcon.COFFEE


@dataclass(frozen=True)
class Category:
    """Budget category domain entity.

    ``spent`` is a cached aggregate of the owner's expense transactions and is
    only ever written by the aggregation pass.
    """

    id: int
    owner_id: str
    name: str
    budget: Decimal
    color: str
    icon: CategoryIcon
    spent: Decimal
    created_at: datetime


@dataclass(frozen=True)
class Transaction:
    """Transaction domain entity. Positive amounts are income, negative expenses."""

    id: int
    owner_id: str
    name: str
    amount: Decimal
    category_id: Optional[int]
    date: date
    created_at: datetime

    @property
    def is_expense(self) -> bool:
        return self.amount < 0

    @property
    def is_income(self) -> bool:
        return self.amount > 0


class NotificationType(str, Enum):
    """Kinds of notifications the policy engine can emit."""

    BUDGET_THRESHOLD = "budget_threshold"
    LARGE_TRANSACTION = "large_transaction"


class SendStatus(str, Enum):
    """Outcome of a single transport send attempt."""

    SENT = "sent"
    SKIPPED_UNCONFIGURED = "skipped_unconfigured"
    FAILED_TRANSIENT = "failed_transient"


@dataclass(frozen=True)
class SendResult:
    """Result returned by a notification transport."""

    status: SendStatus
    detail: Optional[str] = None

    @property
    def sent(self) -> bool:
        return self.status is SendStatus.SENT


class OutcomeStatus(str, Enum):
    """What the policy engine did for one candidate notification."""

    SENT = "sent"
    ALREADY_SENT = "already_sent"
    SKIPPED_UNCONFIGURED = "skipped_unconfigured"
    FAILED_TRANSIENT = "failed_transient"


@dataclass(frozen=True)
class NotificationOutcome:
    """Decision record for a single dedup key."""

    key: str
    notification_type: NotificationType
    status: OutcomeStatus
    subject: Optional[str] = None
    body: Optional[str] = None
    detail: Optional[str] = None


@dataclass(frozen=True)
class SpendingFailure:
    """A category whose ``spent`` could not be written during aggregation."""

    category_id: int
    message: str


@dataclass(frozen=True)
class SpendingResult:
    """Outcome of one aggregation pass."""

    updated: tuple[int, ...] = ()
    unchanged: tuple[int, ...] = ()
    failures: tuple[SpendingFailure, ...] = ()

    @property
    def write_count(self) -> int:
        return len(self.updated)

    @property
    def ok(self) -> bool:
        return not self.failures


@dataclass(frozen=True)
class TransactionResult:
    """Outcome of a transaction mutation and the follow-up engine passes."""

    transaction_id: int
    spending: SpendingResult
    notifications: tuple[NotificationOutcome, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class CategoryUsage:
    """Per-category line of the dashboard."""

    category: Category
    percent_used: Decimal
    share_of_expenses: Decimal
    remaining: Decimal

    @property
    def is_over_budget(self) -> bool:
        return self.percent_used > 100


@dataclass(frozen=True)
class DashboardSummary:
    """Derived totals over the current category and transaction sets."""

    total_spent: Decimal
    total_budget: Decimal
    total_income: Decimal
    total_expenses: Decimal
    balance: Decimal
    categories: tuple[CategoryUsage, ...] = ()
    recent_transactions: tuple[Transaction, ...] = ()
