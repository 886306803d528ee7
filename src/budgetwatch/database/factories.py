"""Database factory functions for creating database instances."""

import os
from pathlib import Path
from typing import Optional

from budgetwatch.database.sqlalchemy_db import SQLAlchemyDatabase
from budgetwatch.database.dedup_store import SQLAlchemyDedupStore


def create_sqlite_database(database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a SQLite database instance.

    Args:
        database_path: Path to SQLite database file. If None, checks BUDGETWATCH_DB_PATH
            environment variable, then defaults to ~/.budgetwatch/budgetwatch.db

    Returns:
        SQLAlchemyDatabase instance configured for SQLite
    """
    if database_path is None:
        # Check environment variable
        database_path = os.environ.get("BUDGETWATCH_DB_PATH")

    if database_path is None:
        # Default to ~/.budgetwatch/budgetwatch.db
        home = Path.home()
        db_dir = home / ".budgetwatch"
        db_dir.mkdir(exist_ok=True)
        database_path = str(db_dir / "budgetwatch.db")

    database_url = f"sqlite:///{database_path}"
    return SQLAlchemyDatabase(database_url)


def create_dedup_store(db: SQLAlchemyDatabase) -> SQLAlchemyDedupStore:
    """Create a dedup store that lives in the same database as the ledger."""
    return SQLAlchemyDedupStore(db)
