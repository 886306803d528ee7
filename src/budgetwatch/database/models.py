"""SQLAlchemy models for budgetwatch database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    DateTime,
    Date,
    Numeric,
    create_engine,
)
from sqlalchemy.orm import declarative_base, sessionmaker, Session

Base = declarative_base()


class Category(Base):
    """Budget category model."""

    __tablename__ = "categories"

    id = Column(Integer, primary_key=True)
    owner_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    budget = Column(Numeric(12, 2), nullable=False, default=0)
    color = Column(String, nullable=False)
    icon = Column(String, nullable=False)
    spent = Column(Numeric(12, 2), nullable=False, default=0)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)


class Transaction(Base):
    """Transaction model.

    ``category_id`` is not a foreign key. Deleting a category
    leaves its transactions pointing at a missing id, and aggregation treats
    them as uncategorized.
    """

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True)
    owner_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    category_id = Column(Integer, nullable=True)
    date = Column(Date, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)


class NotificationDedup(Base):
    """Marker for a notification that has already been delivered."""

    __tablename__ = "notification_dedup"

    key = Column(String, primary_key=True)
    sent_at = Column(DateTime, nullable=False, index=True)


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
