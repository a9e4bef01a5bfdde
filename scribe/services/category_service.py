"""Category persistence rules: slugs, lookups and archiving."""

from __future__ import annotations

import logging
import uuid
from typing import Any

from scribe.errors import NotFoundError
from scribe.models.category import Category
from scribe.services.slugs import assign_slug
from scribe.services.store import Store
from scribe.validation import is_identifier

logger = logging.getLogger(__name__)


class CategoryService:
    """Category operations on top of a ``Store``."""

    def __init__(self, store: Store) -> None:
        self.store = store

    async def list_categories(self, include_inactive: bool = False) -> list[Category]:
        """List categories by name.

        Args:
            include_inactive: Also return archived categories

        Returns:
            Categories sorted alphabetically
        """
        criteria = () if include_inactive else (Category.is_active.is_(True),)
        return await self.store.find(
            Category, *criteria, order_by=(Category.name.asc(),)
        )

    async def lookup(self, id_or_slug: str) -> Category:
        """Find a category by id when the value is id-shaped, otherwise by slug.

        Raises:
            NotFoundError: No category matches
        """
        if is_identifier(id_or_slug):
            category = await self.store.find_one(
                Category, Category.id == uuid.UUID(id_or_slug)
            )
        else:
            category = await self.store.find_one(
                Category, Category.slug == id_or_slug
            )
        if category is None:
            raise NotFoundError("Category not found")
        return category

    async def create(self, payload: dict[str, Any]) -> Category:
        """Create a category from a validated payload.

        Args:
            payload: Output of the category creation rules

        Returns:
            The stored Category with a unique slug
        """
        category = Category(**payload)
        await assign_slug(self.store, category)
        return await self.store.insert(category)

    async def update(self, category: Category, changes: dict[str, Any]) -> Category:
        for key, value in changes.items():
            setattr(category, key, value)
        await assign_slug(self.store, category)
        return await self.store.update(category)

    async def archive(self, category: Category) -> Category:
        """Soft delete: the category stays but is hidden from default listings."""
        category.is_active = False
        category = await self.store.update(category)
        logger.info("Category archived", extra={"category_id": str(category.id)})
        return category
