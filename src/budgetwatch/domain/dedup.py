"""Notification dedup ledger interface and in-process implementation."""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta, UTC
from typing import Optional, Union

from budgetwatch.domain.entities import NotificationType

KEY_PREFIX = "notification_"
DEFAULT_RETENTION_DAYS = 30


def _encode_owner(owner_id: str) -> str:
    # "_" separates key fields, so it must never appear inside the owner part
    return owner_id.replace("%", "%25").replace("_", "%5F")


def dedup_key(
    owner_id: str,
    notification_type: Union[NotificationType, str],
    discriminator: Union[str, int],
) -> str:
    """Build the dedup key for a notification.

    Example: ``notification_u1_budget_threshold_7_50``. Underscores and
    percent signs in the owner ID are percent-encoded, so ``alice_work``
    becomes ``alice%5Fwork`` and never shares a prefix with ``alice``.
    """
    type_value = NotificationType(notification_type).value
    return f"{KEY_PREFIX}{_encode_owner(owner_id)}_{type_value}_{discriminator}"


def owner_prefix(owner_id: str) -> str:
    """Return the key prefix shared by all of an owner's dedup entries."""
    return f"{KEY_PREFIX}{_encode_owner(owner_id)}_"


class DedupStore(ABC):
    """Key-presence ledger of notifications that were delivered.

    Presence of a key means "already notified". Entries are only written after
    a confirmed send and are never updated.
    """

    @abstractmethod
    def has(self, key: str) -> bool:
        """Return True if a notification with this key was already sent."""
        pass

    @abstractmethod
    def mark_sent(self, key: str, sent_at: datetime) -> None:
        """Record a successful send. A key that already exists is left unchanged."""
        pass

    @abstractmethod
    def purge_older_than(self, cutoff: datetime) -> int:
        """Remove entries sent strictly before ``cutoff``. Returns count removed."""
        pass

    @abstractmethod
    def reset(self, prefix: Optional[str] = None) -> int:
        """Remove all entries, or only those whose key starts with ``prefix``."""
        pass


class MemoryDedupStore(DedupStore):
    """Dedup store held in a dict. Contents are lost when the process exits."""

    def __init__(self):
        self._entries: dict[str, datetime] = {}

    def has(self, key: str) -> bool:
        return key in self._entries

    def mark_sent(self, key: str, sent_at: datetime) -> None:
        self._entries.setdefault(key, sent_at)

    def sent_at(self, key: str) -> Optional[datetime]:
        return self._entries.get(key)

    def purge_older_than(self, cutoff: datetime) -> int:
        expired = [key for key, sent_at in self._entries.items() if sent_at < cutoff]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def reset(self, prefix: Optional[str] = None) -> int:
        if prefix is None:
            removed = len(self._entries)
            self._entries.clear()
            return removed
        matching = [key for key in self._entries if key.startswith(prefix)]
        for key in matching:
            del self._entries[key]
        return len(matching)

    def __len__(self) -> int:
        return len(self._entries)


def purge_expired(
    store: DedupStore,
    retention_days: int = DEFAULT_RETENTION_DAYS,
    now: Optional[datetime] = None,
) -> int:
    """Drop dedup entries older than the retention window.

    Args:
        store: Dedup store to clean up
        retention_days: Entries older than this many days are removed
        now: Reference time, defaults to the current UTC time

    Returns:
        Number of entries removed
    """
    if retention_days < 0:
        raise ValueError("retention_days must not be negative")
    if now is None:
        now = datetime.now(UTC)
    return store.purge_older_than(now - timedelta(days=retention_days))
