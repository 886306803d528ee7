"""Tests for the budget threshold and large transaction rules."""

from dataclasses import replace
from datetime import date, datetime, UTC
from decimal import Decimal

import pytest
from sqlalchemy.exc import OperationalError

from budgetwatch.domain.dedup import MemoryDedupStore, dedup_key
from budgetwatch.domain.entities import (
    Category,
    CategoryIcon,
    NotificationType,
    OutcomeStatus,
    SendStatus,
    Transaction,
)
from budgetwatch.domain.notifications import (
    NotificationPolicy,
    NotificationSettings,
    RearmPolicy,
    budget_alert_message,
    large_transaction_message,
)
from conftest import EMAIL, FIXED_NOW, OWNER, RecordingTransport


def _category(spent, budget="500", category_id=1, name="Food"):
    return Category(
        id=category_id,
        owner_id=OWNER,
        name=name,
        budget=Decimal(budget),
        color="#10b981",
        icon=CategoryIcon.COFFEE,
        spent=Decimal(spent),
        created_at=FIXED_NOW,
    )


def _txn(amount, txn_id=7, category_id=None):
    return Transaction(
        id=txn_id,
        owner_id=OWNER,
        name="Big one",
        amount=Decimal(amount),
        category_id=category_id,
        date=date(2024, 3, 15),
        created_at=FIXED_NOW,
    )


@pytest.fixture
def memory_store():
    return MemoryDedupStore()


@pytest.fixture
def memory_policy(memory_store, transport):
    return NotificationPolicy(memory_store, transport, clock=lambda: FIXED_NOW)


def _fired_thresholds(outcomes):
    return [o.key.rsplit("_", 1)[1] for o in outcomes if o.status is OutcomeStatus.SENT]


def test_sixty_percent_fires_fifty_only(memory_policy, transport):
    outcomes = memory_policy.evaluate_budget_thresholds(OWNER, EMAIL, [_category("300")])

    assert _fired_thresholds(outcomes) == ["50"]
    assert transport.subjects == ["Budget Alert: Food"]
    assert transport.bodies == ["Your Food category is at 50% of budget with $300.00 spent of $500.00 budget."]


def test_ninety_percent_fires_remaining_thresholds(memory_policy, transport):
    memory_policy.evaluate_budget_thresholds(OWNER, EMAIL, [_category("300")])

    outcomes = memory_policy.evaluate_budget_thresholds(OWNER, EMAIL, [_category("450")])

    assert _fired_thresholds(outcomes) == ["75", "90"]
    assert [o.status for o in outcomes][0] is OutcomeStatus.ALREADY_SENT
    assert len(transport.sent) == 3


def test_jump_past_every_threshold_fires_all(memory_policy, transport):
    outcomes = memory_policy.evaluate_budget_thresholds(OWNER, EMAIL, [_category("600")])

    assert _fired_thresholds(outcomes) == ["50", "75", "90", "100"]
    assert "is over budget with $600.00 spent" in transport.bodies[-1]


def test_exact_threshold_fires(memory_policy):
    outcomes = memory_policy.evaluate_budget_thresholds(OWNER, EMAIL, [_category("250")])

    assert _fired_thresholds(outcomes) == ["50"]


def test_below_first_threshold_fires_nothing(memory_policy, memory_store):
    outcomes = memory_policy.evaluate_budget_thresholds(OWNER, EMAIL, [_category("249.99")])

    assert outcomes == []
    assert len(memory_store) == 0


def test_zero_budget_is_skipped(memory_policy, transport):
    outcomes = memory_policy.evaluate_budget_thresholds(OWNER, EMAIL, [_category("50", budget="0")])

    assert outcomes == []
    assert transport.attempts == 0


def test_no_rearm_after_spend_drops(memory_policy, transport):
    memory_policy.evaluate_budget_thresholds(OWNER, EMAIL, [_category("300")])
    memory_policy.evaluate_budget_thresholds(OWNER, EMAIL, [_category("100")])
    outcomes = memory_policy.evaluate_budget_thresholds(OWNER, EMAIL, [_category("300")])

    assert [o.status for o in outcomes] == [OutcomeStatus.ALREADY_SENT]
    assert len(transport.sent) == 1


def test_repeated_calls_do_not_resend(memory_policy, transport):
    for _ in range(3):
        memory_policy.evaluate_budget_thresholds(OWNER, EMAIL, [_category("480")])

    assert len(transport.sent) == 3


def test_failed_send_is_retried(memory_store):
    failing = RecordingTransport(status=SendStatus.FAILED_TRANSIENT)
    policy = NotificationPolicy(memory_store, failing, clock=lambda: FIXED_NOW)

    outcomes = policy.evaluate_budget_thresholds(OWNER, EMAIL, [_category("300")])
    assert [o.status for o in outcomes] == [OutcomeStatus.FAILED_TRANSIENT]
    assert len(memory_store) == 0

    policy.transport = RecordingTransport()
    outcomes = policy.evaluate_budget_thresholds(OWNER, EMAIL, [_category("300")])
    assert [o.status for o in outcomes] == [OutcomeStatus.SENT]
    assert len(memory_store) == 1


def test_transport_exception_is_not_raised(memory_store):
    exploding = RecordingTransport(raises=ConnectionError("network down"))
    policy = NotificationPolicy(memory_store, exploding, clock=lambda: FIXED_NOW)

    outcomes = policy.evaluate_budget_thresholds(OWNER, EMAIL, [_category("300")])

    assert outcomes[0].status is OutcomeStatus.FAILED_TRANSIENT
    assert "network down" in outcomes[0].detail
    assert len(memory_store) == 0


def test_unconfigured_transport_leaves_key_unset(memory_store):
    policy = NotificationPolicy(memory_store, RecordingTransport(status=SendStatus.SKIPPED_UNCONFIGURED))

    outcomes = policy.evaluate_budget_thresholds(OWNER, EMAIL, [_category("300")])

    assert outcomes[0].status is OutcomeStatus.SKIPPED_UNCONFIGURED
    assert len(memory_store) == 0


def test_missing_destination_skips_send(memory_policy, transport, memory_store):
    outcomes = memory_policy.evaluate_budget_thresholds(OWNER, None, [_category("300")])

    assert outcomes[0].status is OutcomeStatus.SKIPPED_UNCONFIGURED
    assert transport.attempts == 0
    assert len(memory_store) == 0


def test_dedup_keys_are_per_owner_and_category(memory_policy, memory_store):
    memory_policy.evaluate_budget_thresholds(OWNER, EMAIL, [_category("300", category_id=3)])

    assert memory_store.has(dedup_key(OWNER, NotificationType.BUDGET_THRESHOLD, "3_50"))
    assert not memory_store.has(dedup_key("other", NotificationType.BUDGET_THRESHOLD, "3_50"))
    assert memory_store.sent_at(dedup_key(OWNER, "budget_threshold", "3_50")) == FIXED_NOW


def test_monthly_rearm_fires_again_next_month(memory_store, transport):
    policy = NotificationPolicy(
        memory_store,
        transport,
        settings=NotificationSettings(rearm_policy=RearmPolicy.MONTHLY),
        clock=lambda: FIXED_NOW,
    )

    policy.evaluate_budget_thresholds(OWNER, EMAIL, [_category("300")], today=date(2024, 3, 20))
    policy.evaluate_budget_thresholds(OWNER, EMAIL, [_category("300")], today=date(2024, 3, 31))
    policy.evaluate_budget_thresholds(OWNER, EMAIL, [_category("300")], today=date(2024, 4, 1))

    assert len(transport.sent) == 2
    assert memory_store.has(dedup_key(OWNER, NotificationType.BUDGET_THRESHOLD, "1_50_2024-04"))


@pytest.mark.parametrize(
    "amount, fires",
    [
        ("100", True),
        ("-100", True),
        ("99.99", False),
        ("-99.99", False),
        ("2500", True),
    ],
)
def test_large_transaction_boundary(memory_policy, transport, amount, fires):
    outcome = memory_policy.evaluate_large_transaction(OWNER, EMAIL, _txn(amount))

    assert (outcome is not None) is fires
    assert len(transport.sent) == (1 if fires else 0)


def test_large_expense_message(memory_policy, transport):
    memory_policy.evaluate_large_transaction(OWNER, EMAIL, _txn("-120"))

    assert transport.sent == [
        (EMAIL, "Large Expense Alert", "You have a new expense of $120.00 recorded in your budget.")
    ]


def test_large_income_message():
    subject, body = large_transaction_message(_txn("1500.5"))

    assert subject == "Large Income Alert"
    assert body == "You have a new income of $1500.50 recorded in your budget."


def test_large_transaction_sent_once(memory_policy, transport):
    txn = _txn("-250")

    first = memory_policy.evaluate_large_transaction(OWNER, EMAIL, txn)
    second = memory_policy.evaluate_large_transaction(OWNER, EMAIL, txn)

    assert first.status is OutcomeStatus.SENT
    assert second.status is OutcomeStatus.ALREADY_SENT
    assert len(transport.sent) == 1


def test_large_transaction_keys_by_transaction(memory_policy, transport):
    memory_policy.evaluate_large_transaction(OWNER, EMAIL, _txn("-250", txn_id=1))
    memory_policy.evaluate_large_transaction(OWNER, EMAIL, _txn("-250", txn_id=2))

    assert len(transport.sent) == 2


def test_custom_large_transaction_minimum(memory_store, transport):
    policy = NotificationPolicy(
        memory_store,
        transport,
        settings=NotificationSettings(large_transaction_minimum=Decimal("500")),
    )

    assert policy.evaluate_large_transaction(OWNER, EMAIL, _txn("-499")) is None
    assert policy.evaluate_large_transaction(OWNER, EMAIL, _txn("-500")) is not None


def test_budget_alert_message_wording():
    category = _category("520")

    assert budget_alert_message(category, 90)[1] == (
        "Your Food category is at 90% of budget with $520.00 spent of $500.00 budget."
    )
    assert budget_alert_message(category, 100)[1] == (
        "Your Food category is over budget with $520.00 spent of $500.00 budget."
    )


def test_policy_uses_database_dedup_store(policy, dedup_store, transport):
    category = replace(_category("300"), id=42)

    policy.evaluate_budget_thresholds(OWNER, EMAIL, [category])
    policy.evaluate_budget_thresholds(OWNER, EMAIL, [category])

    assert len(transport.sent) == 1
    assert dedup_store.has(dedup_key(OWNER, NotificationType.BUDGET_THRESHOLD, "42_50"))
    assert dedup_store.sent_at(dedup_key(OWNER, NotificationType.BUDGET_THRESHOLD, "42_50")) == datetime(
        2024, 3, 15, 12, 0, tzinfo=UTC
    )


class LockedDedupStore(MemoryDedupStore):
    """Dedup store whose lookups fail for one key."""

    def __init__(self, broken_key):
        super().__init__()
        self.broken_key = broken_key

    def has(self, key):
        if key == self.broken_key:
            raise OperationalError("SELECT notification_dedup", {}, Exception("database is locked"))
        return super().has(key)


def test_dedup_lookup_failure_is_per_key(transport):
    broken = dedup_key(OWNER, NotificationType.BUDGET_THRESHOLD, "1_50")
    policy = NotificationPolicy(LockedDedupStore(broken), transport, clock=lambda: FIXED_NOW)

    outcomes = policy.evaluate_budget_thresholds(
        OWNER, EMAIL, [_category("300", category_id=1, name="Food"), _category("300", category_id=2, name="Fun")]
    )

    assert [o.status for o in outcomes] == [OutcomeStatus.FAILED_TRANSIENT, OutcomeStatus.SENT]
    assert "database is locked" in outcomes[0].detail
    assert transport.subjects == ["Budget Alert: Fun"]
