"""Budget-threshold and large-transaction notification rules."""

import logging
from dataclasses import dataclass
from datetime import date, datetime, UTC
from decimal import Decimal
from enum import Enum
from typing import Callable, Iterable, Optional

from sqlalchemy.exc import SQLAlchemyError

from budgetwatch.domain.dedup import DedupStore, dedup_key
from budgetwatch.domain.entities import (
    Category,
    NotificationOutcome,
    NotificationType,
    OutcomeStatus,
    SendResult,
    SendStatus,
    Transaction,
)
from budgetwatch.domain.summary import budget_usage_percent
from budgetwatch.notifications.transport import NotificationTransport

logger = logging.getLogger(__name__)

BUDGET_THRESHOLDS = (50, 75, 90, 100)
LARGE_TRANSACTION_MINIMUM = Decimal("100")

_OUTCOME_BY_SEND_STATUS = {
    SendStatus.SENT: OutcomeStatus.SENT,
    SendStatus.SKIPPED_UNCONFIGURED: OutcomeStatus.SKIPPED_UNCONFIGURED,
    SendStatus.FAILED_TRANSIENT: OutcomeStatus.FAILED_TRANSIENT,
}


class RearmPolicy(str, Enum):
    """When a budget threshold that already fired may fire again."""

    NEVER = "never"
    MONTHLY = "monthly"


@dataclass(frozen=True)
class NotificationSettings:
    """Tunable knobs of the notification rules."""

    thresholds: tuple[int, ...] = BUDGET_THRESHOLDS
    large_transaction_minimum: Decimal = LARGE_TRANSACTION_MINIMUM
    rearm_policy: RearmPolicy = RearmPolicy.NEVER


def format_money(amount: Decimal) -> str:
    return f"${amount:.2f}"


def budget_alert_message(category: Category, threshold: int) -> tuple[str, str]:
    """Compose subject and body for a budget threshold alert."""
    status = "over budget" if threshold >= 100 else f"at {threshold}% of budget"
    subject = f"Budget Alert: {category.name}"
    body = (
        f"Your {category.name} category is {status} with "
        f"{format_money(category.spent)} spent of {format_money(category.budget)} budget."
    )
    return subject, body


def large_transaction_message(transaction: Transaction) -> tuple[str, str]:
    """Compose subject and body for a large transaction alert."""
    kind = "income" if transaction.amount > 0 else "expense"
    subject = f"Large {kind.capitalize()} Alert"
    body = f"You have a new {kind} of {format_money(abs(transaction.amount))} recorded in your budget."
    return subject, body


class NotificationPolicy:
    """Decides which notifications to send and records the ones delivered.

    A dedup entry is written only after the transport confirms the send, so a
    failed or skipped send is retried on the next evaluation. Transport errors
    never propagate to the caller.
    """

    def __init__(
        self,
        dedup_store: DedupStore,
        transport: NotificationTransport,
        settings: Optional[NotificationSettings] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """Initialize notification policy.

        Args:
            dedup_store: Ledger of notifications already delivered
            transport: Transport used to deliver messages
            settings: Rule settings, defaults to NotificationSettings()
            clock: Returns the current time, defaults to UTC now
        """
        self.dedup_store = dedup_store
        self.transport = transport
        self.settings = settings or NotificationSettings()
        self.clock = clock or (lambda: datetime.now(UTC))

    def _threshold_discriminator(self, category_id: int, threshold: int, today: date) -> str:
        discriminator = f"{category_id}_{threshold}"
        if self.settings.rearm_policy is RearmPolicy.MONTHLY:
            discriminator = f"{discriminator}_{today:%Y-%m}"
        return discriminator

    def _send(self, destination: Optional[str], subject: str, body: str) -> SendResult:
        if not destination:
            return SendResult(SendStatus.SKIPPED_UNCONFIGURED, "no destination address")
        try:
            return self.transport.send(destination, subject, body)
        except Exception as e:
            logger.warning("Notification transport raised for '%s': %s", subject, e)
            return SendResult(SendStatus.FAILED_TRANSIENT, str(e))

    def _deliver(
        self,
        key: str,
        notification_type: NotificationType,
        destination: Optional[str],
        subject: str,
        body: str,
    ) -> NotificationOutcome:
        try:
            already_sent = self.dedup_store.has(key)
        except SQLAlchemyError as e:
            # Without the marker we cannot tell whether it went out; retry later
            logger.error("Dedup lookup failed for %s: %s", key, e)
            return NotificationOutcome(
                key, notification_type, OutcomeStatus.FAILED_TRANSIENT, subject, body, str(e)
            )
        if already_sent:
            return NotificationOutcome(key, notification_type, OutcomeStatus.ALREADY_SENT)

        result = self._send(destination, subject, body)
        detail = result.detail
        if result.sent:
            logger.info("Sent notification %s", key)
            try:
                self.dedup_store.mark_sent(key, self.clock())
            except SQLAlchemyError as e:
                logger.error("Sent notification %s but could not record it: %s", key, e)
                detail = f"sent but not recorded: {e}"
        else:
            logger.warning("Notification %s not sent (%s): %s", key, result.status.value, result.detail)

        return NotificationOutcome(
            key=key,
            notification_type=notification_type,
            status=_OUTCOME_BY_SEND_STATUS[result.status],
            subject=subject,
            body=body,
            detail=detail,
        )

    def evaluate_budget_thresholds(
        self,
        owner_id: str,
        destination: Optional[str],
        categories: Iterable[Category],
        today: Optional[date] = None,
    ) -> list[NotificationOutcome]:
        """Fire an alert for every threshold each category has reached.

        Every threshold at or below the current usage is considered, so a
        category that jumps past several thresholds at once gets one alert per
        threshold. Categories with a zero budget are skipped.

        Args:
            owner_id: Owner of the categories
            destination: Email address to notify
            categories: Categories with up-to-date ``spent``
            today: Date used for the monthly re-arm period

        Returns:
            One outcome per threshold reached, including deduplicated ones
        """
        if today is None:
            today = self.clock().date()

        outcomes = []
        for category in categories:
            if category.budget <= 0:
                continue

            percentage = budget_usage_percent(category)
            for threshold in self.settings.thresholds:
                if percentage < threshold:
                    continue
                key = dedup_key(
                    owner_id,
                    NotificationType.BUDGET_THRESHOLD,
                    self._threshold_discriminator(category.id, threshold, today),
                )
                subject, body = budget_alert_message(category, threshold)
                outcomes.append(
                    self._deliver(key, NotificationType.BUDGET_THRESHOLD, destination, subject, body)
                )
        return outcomes

    def evaluate_large_transaction(
        self,
        owner_id: str,
        destination: Optional[str],
        transaction: Transaction,
    ) -> Optional[NotificationOutcome]:
        """Fire an alert for a transaction at or above the large-amount minimum.

        Returns:
            The outcome, or None when the transaction is below the minimum
        """
        if abs(transaction.amount) < self.settings.large_transaction_minimum:
            return None

        key = dedup_key(owner_id, NotificationType.LARGE_TRANSACTION, transaction.id)
        subject, body = large_transaction_message(transaction)
        return self._deliver(key, NotificationType.LARGE_TRANSACTION, destination, subject, body)
