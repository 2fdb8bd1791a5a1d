"""Category domain service."""

from typing import Optional

from moneymngr.database.base import Database
from moneymngr.domain.entities import Category as CategoryEntity, CategoryKind, CategorySuggestion
from moneymngr.domain.errors import NotFoundError, ValidationError, category_not_found

DEFAULT_CATEGORY_ICON = "🏷️"
DEFAULT_CATEGORY_COLOR = "#7c3aed"


class CategoryService:
    """Service for managing categories."""

    def __init__(self, db: Database, owner_id: str = "local"):
        """Initialize category service.

        Args:
            db: Database instance
            owner_id: Owner of the categories handled by this service
        """
        self.db = db
        self.owner_id = owner_id

    def create_category(
        self,
        name: str,
        kind: CategoryKind | str,
        icon: str = DEFAULT_CATEGORY_ICON,
        color: str = DEFAULT_CATEGORY_COLOR,
        parent_id: Optional[str] = None,
    ) -> str:
        """Create a category appended after the existing ones.

        Args:
            name: Category name
            kind: EXPENSE or INCOME
            icon: Display icon
            color: Display color
            parent_id: Optional parent category ID

        Returns:
            Category ID

        Raises:
            ValidationError: If the name is blank or the kind is not a category kind
            NotFoundError: If the parent category doesn't exist
        """
        name = name.strip()
        if not name:
            raise ValidationError("Category name is required")
        try:
            kind = CategoryKind(kind)
        except ValueError:
            raise ValidationError(f"Categories must be EXPENSE or INCOME, got '{kind}'")

        if parent_id is not None and self.db.get_category(parent_id) is None:
            raise NotFoundError(f"Parent category {parent_id} not found")

        max_order = self.db.get_max_category_sort_order(owner_id=self.owner_id)
        sort_order = 0 if max_order is None else max_order + 1

        return self.db.create_category(
            owner_id=self.owner_id,
            name=name,
            kind=kind,
            icon=icon,
            color=color,
            sort_order=sort_order,
            parent_id=parent_id,
        )

    def create_from_suggestion(self, suggestion: CategorySuggestion) -> str:
        """Materialize a resolver suggestion as a new category."""
        return self.create_category(name=suggestion.name, kind=suggestion.kind)

    def get_category(self, category_id: str) -> Optional[CategoryEntity]:
        """Get category by ID.

        Args:
            category_id: Category ID

        Returns:
            Category entity or None if not found
        """
        return self.db.get_category(category_id)

    def require_category(self, category_id: str) -> CategoryEntity:
        """Get category by ID or raise NotFoundError."""
        category = self.db.get_category(category_id)
        if category is None:
            raise NotFoundError(category_not_found(category_id))
        return category

    def find_by_name(self, name: str, kind: Optional[CategoryKind] = None) -> Optional[CategoryEntity]:
        """Find a category by exact (case-insensitive) name."""
        wanted = name.strip().lower()
        for cat in self.list_categories(kind=kind):
            if cat.name.lower() == wanted:
                return cat
        return None

    def list_categories(self, kind: Optional[CategoryKind] = None) -> list[CategoryEntity]:
        """List categories.

        Args:
            kind: Optional kind filter

        Returns:
            List of category entities in sort order
        """
        return self.db.list_categories(owner_id=self.owner_id, kind=kind)
