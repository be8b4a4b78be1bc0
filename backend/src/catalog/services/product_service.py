"""Product service for CRUD operations."""

from typing import Any
from uuid import UUID, uuid4

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.core.exceptions import ConflictError, NotFoundError, ValidationFailedError
from catalog.domain.product import Product
from catalog.models.category import Category
from catalog.repositories.product_repository import ProductFilters, SqlProductRepository
from catalog.schemas.product import ProductCreate, ProductUpdate


class ProductService:
    """Service class for product create/read/update.

    Rating, image and delete operations live in ProductAggregateService.
    """

    def __init__(self, db: AsyncSession, repository: SqlProductRepository | None = None):
        self.db = db
        self.repository = repository or SqlProductRepository(db)

    async def _ensure_category(self, category_id: UUID | None) -> None:
        if category_id is None:
            return
        result = await self.db.execute(
            select(Category.category_id).where(Category.category_id == category_id)
        )
        if result.scalar_one_or_none() is None:
            raise ValidationFailedError(f"Category {category_id} does not exist")

    async def get_all(self, filters: ProductFilters) -> tuple[list[Product], int]:
        """Get a filtered page of products.

        Args:
            filters: Category, status, final price range, sort and paging

        Returns:
            Tuple of (products list, total count)
        """
        try:
            return await self.repository.list_products(filters)
        except ValueError as e:
            raise ValidationFailedError(str(e)) from e

    async def get_by_id(self, product_id: UUID) -> Product:
        """Get product by ID.

        Raises:
            NotFoundError: Product does not exist
        """
        product = await self.repository.find_by_id(product_id)
        if product is None:
            raise NotFoundError(f"Product {product_id} not found")
        return product

    async def create(self, product_data: ProductCreate) -> Product:
        """Create a new product.

        Raises:
            ValidationFailedError: Unknown category or invalid pricing
            DuplicateError: SKU already exists
        """
        await self._ensure_category(product_data.category_id)
        product = Product(
            product_id=uuid4(),
            sku=product_data.sku,
            name=product_data.name,
            description=product_data.description,
            price=product_data.price,
            category_id=product_data.category_id,
            discount=product_data.discount,
            quantity=product_data.quantity,
            status=product_data.status,
            features=list(product_data.features),
        )
        return await self.repository.create(product)

    async def update(self, product_id: UUID, changes: ProductUpdate) -> Product:
        """Apply a partial update; the final price follows price/discount.

        Raises:
            NotFoundError: Product does not exist
            ConflictError: ``changes.version`` is stale, or a concurrent save won
            ValidationFailedError: Unknown category or invalid pricing
        """
        product = await self.get_by_id(product_id)
        if changes.version is not None and changes.version != product.version:
            raise ConflictError(
                f"Product {product_id} is at version {product.version}, "
                f"not {changes.version}"
            )

        fields: dict[str, Any] = changes.model_dump(
            exclude_unset=True,
            exclude_none=True,
            exclude={"version", "price", "discount", "status"},
        )
        if "category_id" in fields:
            await self._ensure_category(fields["category_id"])
        for name, value in fields.items():
            setattr(product, name, value)

        if "price" in changes.model_fields_set or "discount" in changes.model_fields_set:
            product.set_pricing(price=changes.price, discount=changes.discount)
        if changes.status is not None:
            product.set_status(changes.status)

        return await self.repository.save(product)
