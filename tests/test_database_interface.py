"""Tests for Database interface returning domain models."""

import pytest
from datetime import date, datetime
from decimal import Decimal

from budgetwatch.database.factories import create_sqlite_database
from budgetwatch.domain import entities
from budgetwatch.domain.errors import NotFoundError


class TestDatabaseInterface:
    """Tests to verify Database interface returns domain models."""

    def test_get_category_returns_domain_model(self, temp_db):
        """Test that get_category returns a domain Category entity."""
        category_id = temp_db.create_category(
            owner_id="user-1",
            name="Food & Dining",
            budget=Decimal("500"),
            color="#10b981",
            icon=entities.CategoryIcon.COFFEE,
        )

        category = temp_db.get_category(category_id)

        assert isinstance(category, entities.Category)
        assert category.id == category_id
        assert category.budget == Decimal("500")
        assert category.spent == Decimal("0")
        assert isinstance(category.created_at, datetime)

    def test_list_categories_filters_by_owner(self, temp_db):
        """Test that list_categories only returns the owner's categories, in ID order."""
        first = temp_db.create_category("user-1", "A", Decimal("1"), "#000000", "Home")
        temp_db.create_category("user-2", "B", Decimal("1"), "#000000", "Home")
        second = temp_db.create_category("user-1", "C", Decimal("1"), "#000000", "Car")

        categories = temp_db.list_categories("user-1")

        assert [cat.id for cat in categories] == [first, second]
        assert all(isinstance(cat, entities.Category) for cat in categories)

    def test_update_category_spent(self, temp_db):
        """Test that spent keeps cent precision."""
        category_id = temp_db.create_category("user-1", "A", Decimal("100"), "#000000", "Home")

        temp_db.update_category(category_id, spent=Decimal("42.10"))

        category = temp_db.get_category(category_id)
        assert category.spent == Decimal("42.10")
        assert category.name == "A"

    def test_update_missing_category_raises(self, temp_db):
        with pytest.raises(NotFoundError):
            temp_db.update_category(999, spent=Decimal("1"))

    def test_get_missing_returns_none(self, temp_db):
        assert temp_db.get_category(999) is None
        assert temp_db.get_transaction(999) is None

    def test_transaction_round_trip(self, temp_db):
        """Test that transactions come back as domain entities."""
        txn_id = temp_db.create_transaction(
            owner_id="user-1",
            name="Salary",
            amount=Decimal("3200.00"),
            date=date(2024, 1, 31),
        )

        txn = temp_db.get_transaction(txn_id)

        assert isinstance(txn, entities.Transaction)
        assert txn.amount == Decimal("3200.00")
        assert txn.category_id is None
        assert txn.is_income

    def test_update_transaction_can_clear_category(self, temp_db):
        category_id = temp_db.create_category("user-1", "A", Decimal("100"), "#000000", "Home")
        txn_id = temp_db.create_transaction("user-1", "x", Decimal("-5"), date(2024, 1, 1), category_id)

        temp_db.update_transaction(txn_id, name="y")
        assert temp_db.get_transaction(txn_id).category_id == category_id

        temp_db.update_transaction(txn_id, category_id=None, update_category=True)
        assert temp_db.get_transaction(txn_id).category_id is None

    def test_delete_transaction(self, temp_db):
        txn_id = temp_db.create_transaction("user-1", "x", Decimal("-5"), date(2024, 1, 1))

        temp_db.delete_transaction(txn_id)

        assert temp_db.list_transactions("user-1") == []
        with pytest.raises(NotFoundError):
            temp_db.delete_transaction(txn_id)


def test_create_sqlite_database_uses_env_path(tmp_path, monkeypatch):
    """Test that BUDGETWATCH_DB_PATH selects the database file."""
    db_file = tmp_path / "budget.db"
    monkeypatch.setenv("BUDGETWATCH_DB_PATH", str(db_file))

    db = create_sqlite_database()
    db.create_category("user-1", "A", Decimal("1"), "#000000", "Home")
    db.disconnect()

    assert db_file.exists()
