"""Category domain service."""

from typing import Optional

from momoetl.database.base import Database
from momoetl.domain.categorizer import DEFAULT_CATEGORIES
from momoetl.domain.entities import Category
from momoetl.domain.errors import ConflictError, ValidationError


class CategoryService:
    """Service for managing transaction categories."""

    def __init__(self, db: Database):
        """Initialize category service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_category(self, name: str, description: Optional[str] = None) -> int:
        """Create a category.

        Args:
            name: Category name
            description: Optional description

        Returns:
            Category ID

        Raises:
            ValidationError: If the name is empty
            ConflictError: If a category with the name already exists
        """
        if not name or not name.strip():
            raise ValidationError("category", "name must not be empty")
        name = name.strip()
        if self.db.get_category_by_name(name) is not None:
            raise ConflictError(f"Category '{name}' already exists")
        return self.db.create_category(name=name, description=description)

    def get_or_create(self, name: str, description: Optional[str] = None) -> int:
        """Return the ID of a category, creating it if it does not exist."""
        category = self.db.get_category_by_name(name)
        if category is not None:
            return category.id
        return self.db.create_category(name=name, description=description)

    def ensure_defaults(self) -> int:
        """Create the default categories that are missing.

        Returns:
            Number of categories created
        """
        created = 0
        for name, description in DEFAULT_CATEGORIES:
            if self.db.get_category_by_name(name) is None:
                self.db.create_category(name=name, description=description)
                created += 1
        return created

    def get_category_by_name(self, name: str) -> Optional[Category]:
        """Get category by name.

        Returns:
            Category entity or None if not found
        """
        return self.db.get_category_by_name(name)

    def list_categories(self) -> list[Category]:
        """List all categories."""
        return self.db.list_categories()
