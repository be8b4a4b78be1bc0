"""Category service for CRUD operations."""

import re
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.core.exceptions import DuplicateError, NotFoundError, ValidationFailedError
from catalog.models.category import Category
from catalog.models.product import Product
from catalog.schemas.category import CategoryCreate, CategoryUpdate

_NON_ALPHANUMERIC = re.compile(r"[^a-zA-Z0-9]")


def slugify(name: str) -> str:
    """Lowercase the name and replace every non-alphanumeric character with '-'."""
    return _NON_ALPHANUMERIC.sub("-", name.lower())


class CategoryService:
    """Service class for category operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_all(self, status: str | None = None) -> list[Category]:
        query = select(Category).order_by(Category.name.asc())
        if status is not None:
            query = query.where(Category.status == status)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_by_id(self, category_id: UUID) -> Category:
        result = await self.db.execute(
            select(Category).where(Category.category_id == category_id)
        )
        category = result.scalar_one_or_none()
        if category is None:
            raise NotFoundError(f"Category {category_id} not found")
        return category

    async def _ensure_parent(self, parent_id: UUID | None, category_id: UUID | None = None) -> None:
        if parent_id is None:
            return
        if parent_id == category_id:
            raise ValidationFailedError("A category cannot be its own parent")
        try:
            await self.get_by_id(parent_id)
        except NotFoundError as e:
            raise ValidationFailedError(f"Parent category {parent_id} does not exist") from e

    async def _commit(self, category: Category) -> Category:
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            raise DuplicateError("Category with this name already exists") from e
        await self.db.refresh(category)
        return category

    async def create(self, category_data: CategoryCreate) -> Category:
        """Create a category; the slug is derived from the name.

        Raises:
            ValidationFailedError: Parent does not exist
            DuplicateError: Name (or slug) already taken
        """
        await self._ensure_parent(category_data.parent_id)
        category = Category(
            name=category_data.name,
            description=category_data.description,
            slug=slugify(category_data.name),
            image_url=category_data.image_url,
            parent_id=category_data.parent_id,
            status=category_data.status,
        )
        self.db.add(category)
        return await self._commit(category)

    async def update(self, category_id: UUID, changes: CategoryUpdate) -> Category:
        category = await self.get_by_id(category_id)
        fields = changes.model_dump(exclude_unset=True)
        if "parent_id" in fields:
            await self._ensure_parent(fields["parent_id"], category_id)
        for name, value in fields.items():
            setattr(category, name, value)
        if "name" in fields:
            category.slug = slugify(category.name)
        return await self._commit(category)

    async def delete(self, category_id: UUID) -> None:
        """Delete a category that no product or subcategory refers to.

        Raises:
            NotFoundError: Category does not exist
            ValidationFailedError: Category is still in use
        """
        category = await self.get_by_id(category_id)
        in_use = await self.db.execute(
            select(Product.product_id).where(Product.category_id == category_id).limit(1)
        )
        children = await self.db.execute(
            select(Category.category_id).where(Category.parent_id == category_id).limit(1)
        )
        if in_use.scalar_one_or_none() or children.scalar_one_or_none():
            raise ValidationFailedError("Category is still referenced")
        await self.db.delete(category)
        await self.db.commit()
