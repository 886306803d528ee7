"""Category domain service."""

import re
from decimal import Decimal, InvalidOperation
from typing import Optional, Union

from budgetwatch.database.base import Database
from budgetwatch.domain.entities import (
    Category,
    CategoryIcon,
    DEFAULT_CATEGORY_COLOR,
    DEFAULT_CATEGORY_ICON,
)
from budgetwatch.domain.errors import (
    NotFoundError,
    ValidationError,
    category_name_not_found,
    category_not_found,
    invalid_budget,
)

HEX_COLOR_PATTERN = re.compile(r"^#[0-9a-fA-F]{6}$")

# (name, budget, color, icon)
PRESET_CATEGORIES = [
    ("Housing", Decimal("1200"), "#3b82f6", CategoryIcon.HOME),
    ("Transportation", Decimal("300"), "#f59e0b", CategoryIcon.CAR),
    ("Food & Dining", Decimal("500"), "#10b981", CategoryIcon.COFFEE),
    ("Shopping", Decimal("200"), "#8b5cf6", CategoryIcon.SHOPPING_BAG),
    ("Entertainment", Decimal("150"), "#ec4899", CategoryIcon.SMARTPHONE),
    ("Utilities", Decimal("150"), "#ef4444", CategoryIcon.DOLLAR_SIGN),
]


def _validate_name(name: str) -> str:
    name = (name or "").strip()
    if not name:
        raise ValidationError("Category name must not be empty")
    return name


def _validate_budget(budget) -> Decimal:
    try:
        value = Decimal(str(budget))
    except (InvalidOperation, ValueError):
        raise ValidationError(invalid_budget(budget))
    if not value.is_finite() or value < 0:
        raise ValidationError(invalid_budget(budget))
    return value


def _validate_color(color: str) -> str:
    if not HEX_COLOR_PATTERN.match(color):
        raise ValidationError(f"Color must be a hex value like '#3b82f6', got '{color}'")
    return color


def _validate_icon(icon: Union[CategoryIcon, str]) -> CategoryIcon:
    try:
        return CategoryIcon(icon)
    except ValueError:
        valid = ", ".join(i.value for i in CategoryIcon)
        raise ValidationError(f"Unknown icon '{icon}'. Valid icons: {valid}")


class CategoryService:
    """Service for managing budget categories."""

    def __init__(self, db: Database):
        """Initialize category service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_category(
        self,
        owner_id: str,
        name: str,
        budget: Decimal,
        color: str = DEFAULT_CATEGORY_COLOR,
        icon: Union[CategoryIcon, str] = DEFAULT_CATEGORY_ICON,
    ) -> int:
        """Create a category with nothing spent yet.

        Args:
            owner_id: Owner of the category
            name: Category name
            budget: Monthly budget, must be non-negative
            color: Hex display color
            icon: Icon tag

        Returns:
            Category ID

        Raises:
            ValidationError: If name, budget, color or icon is invalid
        """
        return self.db.create_category(
            owner_id=owner_id,
            name=_validate_name(name),
            budget=_validate_budget(budget),
            color=_validate_color(color),
            icon=_validate_icon(icon),
        )

    def get_category(self, category_id: int) -> Optional[Category]:
        """Get category by ID.

        Args:
            category_id: Category ID

        Returns:
            Category entity or None if not found
        """
        return self.db.get_category(category_id)

    def require_category(self, owner_id: str, category_id: int) -> Category:
        """Get a category of this owner or raise NotFoundError."""
        category = self.db.get_category(category_id)
        if category is None or category.owner_id != owner_id:
            raise NotFoundError(category_not_found(category_id))
        return category

    def get_category_by_name(self, owner_id: str, name: str) -> Optional[Category]:
        """Find a category by name, ignoring case."""
        wanted = name.strip().lower()
        for category in self.db.list_categories(owner_id):
            if category.name.lower() == wanted:
                return category
        return None

    def resolve_category(self, owner_id: str, identifier: str) -> Category:
        """Resolve a category from a name or numeric ID.

        Raises:
            NotFoundError: If no category matches
        """
        if identifier.isdigit():
            return self.require_category(owner_id, int(identifier))
        category = self.get_category_by_name(owner_id, identifier)
        if category is None:
            raise NotFoundError(category_name_not_found(identifier))
        return category

    def list_categories(self, owner_id: str) -> list[Category]:
        """List categories of an owner."""
        return self.db.list_categories(owner_id)

    def update_category(
        self,
        owner_id: str,
        category_id: int,
        name: Optional[str] = None,
        budget: Optional[Decimal] = None,
        color: Optional[str] = None,
        icon: Optional[Union[CategoryIcon, str]] = None,
    ) -> None:
        """Update user-editable category fields.

        ``spent`` is not editable here; it is maintained by aggregation.

        Raises:
            NotFoundError: If the category does not exist for this owner
            ValidationError: If a provided value is invalid
        """
        self.require_category(owner_id, category_id)
        self.db.update_category(
            category_id,
            name=_validate_name(name) if name is not None else None,
            budget=_validate_budget(budget) if budget is not None else None,
            color=_validate_color(color) if color is not None else None,
            icon=_validate_icon(icon) if icon is not None else None,
        )

    def delete_category(self, owner_id: str, category_id: int) -> None:
        """Delete a category.

        Transactions that referenced it stay in the ledger and count as
        uncategorized from then on.

        Raises:
            NotFoundError: If the category does not exist for this owner
        """
        self.require_category(owner_id, category_id)
        self.db.delete_category(category_id)

    def add_preset_categories(self, owner_id: str) -> list[int]:
        """Create the default category set, skipping names that already exist.

        Returns:
            IDs of the categories created
        """
        existing = {cat.name.lower() for cat in self.db.list_categories(owner_id)}
        created = []
        for name, budget, color, icon in PRESET_CATEGORIES:
            if name.lower() in existing:
                continue
            created.append(self.create_category(owner_id, name, budget, color, icon))
        return created
