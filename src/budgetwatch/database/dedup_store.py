"""Notification dedup store backed by the budgetwatch database."""

from datetime import datetime, UTC
from typing import Optional

from sqlalchemy.exc import IntegrityError

from budgetwatch.database.models import NotificationDedup
from budgetwatch.database.sqlalchemy_db import SQLAlchemyDatabase
from budgetwatch.domain.dedup import DedupStore


def _to_utc_naive(value: datetime) -> datetime:
    # SQLite DateTime columns drop tzinfo, so everything is stored as naive UTC.
    if value.tzinfo is not None:
        value = value.astimezone(UTC).replace(tzinfo=None)
    return value


class SQLAlchemyDedupStore(DedupStore):
    """Dedup ledger stored in the ``notification_dedup`` table.

    Shares the session of the owning database so a single SQLite file holds
    both the ledger and the notification markers.
    """

    def __init__(self, db: SQLAlchemyDatabase):
        """Initialize dedup store.

        Args:
            db: Database whose session is used for reads and writes
        """
        self.db = db

    def _get(self, key: str) -> Optional[NotificationDedup]:
        # Always hit the database; other clients may have added or purged keys
        return self.db._get_session().get(NotificationDedup, key, populate_existing=True)

    def has(self, key: str) -> bool:
        return self._get(key) is not None

    def mark_sent(self, key: str, sent_at: datetime) -> None:
        session = self.db._get_session()
        if self.has(key):
            return
        session.add(NotificationDedup(key=key, sent_at=_to_utc_naive(sent_at)))
        try:
            self.db._commit(session)
        except IntegrityError:
            # Another client recorded the same key first; first write wins.
            pass

    def sent_at(self, key: str) -> Optional[datetime]:
        entry = self._get(key)
        if entry is None:
            return None
        return entry.sent_at.replace(tzinfo=UTC)

    def purge_older_than(self, cutoff: datetime) -> int:
        session = self.db._get_session()
        removed = (
            session.query(NotificationDedup)
            .filter(NotificationDedup.sent_at < _to_utc_naive(cutoff))
            .delete(synchronize_session=False)
        )
        self.db._commit(session)
        return removed

    def reset(self, prefix: Optional[str] = None) -> int:
        session = self.db._get_session()
        query = session.query(NotificationDedup)
        if prefix is not None:
            query = query.filter(NotificationDedup.key.startswith(prefix, autoescape=True))
        removed = query.delete(synchronize_session=False)
        self.db._commit(session)
        return removed
