"""Shared pytest fixtures for budgetwatch tests."""

import tempfile
import os
from datetime import datetime, UTC
from decimal import Decimal
import pytest

from budgetwatch.database.factories import create_sqlite_database, create_dedup_store
from budgetwatch.domain.category import CategoryService
from budgetwatch.domain.entities import SendResult, SendStatus
from budgetwatch.domain.notifications import NotificationPolicy
from budgetwatch.domain.spending import SpendingService
from budgetwatch.domain.transaction import TransactionService
from budgetwatch.notifications.transport import NotificationTransport

OWNER = "user-1"
EMAIL = "owner@example.com"
FIXED_NOW = datetime(2024, 3, 15, 12, 0, tzinfo=UTC)


class RecordingTransport(NotificationTransport):
    """Transport that records messages instead of sending them."""

    def __init__(self, status: SendStatus = SendStatus.SENT, raises: Exception | None = None):
        self.status = status
        self.raises = raises
        self.sent: list[tuple[str, str, str]] = []
        self.attempts = 0

    def send(self, destination: str, subject: str, body: str) -> SendResult:
        self.attempts += 1
        if self.raises is not None:
            raise self.raises
        if self.status is SendStatus.SENT:
            self.sent.append((destination, subject, body))
        return SendResult(self.status)

    @property
    def subjects(self) -> list[str]:
        return [subject for _, subject, _ in self.sent]

    @property
    def bodies(self) -> list[str]:
        return [body for _, _, body in self.sent]


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def dedup_store(temp_db):
    """Create a database-backed dedup store."""
    return create_dedup_store(temp_db)


@pytest.fixture
def transport():
    """Create a transport that always succeeds."""
    return RecordingTransport()


@pytest.fixture
def policy(dedup_store, transport):
    """Create a NotificationPolicy with a fixed clock."""
    return NotificationPolicy(dedup_store, transport, clock=lambda: FIXED_NOW)


@pytest.fixture
def category_service(temp_db):
    """Create a CategoryService with a temporary database."""
    return CategoryService(temp_db)


@pytest.fixture
def spending_service(temp_db):
    """Create a SpendingService with a temporary database."""
    return SpendingService(temp_db)


@pytest.fixture
def transaction_service(temp_db, policy):
    """Create a TransactionService with notifications enabled."""
    return TransactionService(temp_db, policy=policy)


@pytest.fixture
def food_category(category_service):
    """Create a category with a budget of 500."""
    category_id = category_service.create_category(OWNER, "Food & Dining", Decimal("500"))
    return category_service.get_category(category_id)


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


@pytest.fixture
def cli_env(monkeypatch):
    """Keep the CLI away from real EmailJS settings in the environment."""
    for name in (
        "BUDGETWATCH_DB_PATH",
        "BUDGETWATCH_EMAIL",
        "BUDGETWATCH_EMAIL_TIMEOUT",
        "BUDGETWATCH_EMAILJS_SERVICE_ID",
        "BUDGETWATCH_EMAILJS_TEMPLATE_ID",
        "BUDGETWATCH_EMAILJS_PUBLIC_KEY",
        "BUDGETWATCH_OWNER",
        "BUDGETWATCH_REARM_POLICY",
        "BUDGETWATCH_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
