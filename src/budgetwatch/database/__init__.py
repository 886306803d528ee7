"""Database layer for budgetwatch application."""

from budgetwatch.database.base import Database
from budgetwatch.database.factories import create_sqlite_database, create_dedup_store

__all__ = ["Database", "create_sqlite_database", "create_dedup_store"]
