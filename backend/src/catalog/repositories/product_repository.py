"""Product persistence: the repository contract and its PostgreSQL implementation."""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Protocol
from uuid import UUID

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.core.exceptions import (
    ConflictError,
    DuplicateError,
    NotFoundError,
    PersistenceError,
)
from catalog.domain.product import (
    ImageCollection,
    Product,
    ProductImage,
    ProductRating,
    RatingCollection,
)
from catalog.models.product import Product as ProductRow

logger = logging.getLogger(__name__)

SORTABLE_FIELDS = {
    "created_at": ProductRow.created_at,
    "updated_at": ProductRow.updated_at,
    "name": ProductRow.name,
    "price": ProductRow.price,
    "final_price": ProductRow.final_price,
    "average_rating": ProductRow.average_rating,
}
DEFAULT_SORT = "-created_at"


class ProductRepository(Protocol):
    """What the aggregate service needs from storage."""

    async def find_by_id(self, product_id: UUID) -> Product | None: ...

    async def save(self, product: Product) -> Product: ...

    async def delete(self, product_id: UUID) -> None: ...


@dataclass
class ProductFilters:
    category_id: UUID | None = None
    status: str | None = None
    min_price: float | None = None
    max_price: float | None = None
    sort: str = DEFAULT_SORT
    skip: int = 0
    limit: int = 10


def images_to_documents(images: ImageCollection) -> list[dict[str, Any]]:
    return [
        {"image_id": str(image.image_id), "url": image.url, "asset_id": image.asset_id}
        for image in images
    ]


def ratings_to_documents(ratings: RatingCollection) -> list[dict[str, Any]]:
    return [
        {
            "user_id": str(rating.user_id),
            "score": rating.score,
            "review": rating.review,
            "rated_at": rating.rated_at.isoformat(),
        }
        for rating in ratings
    ]


def row_to_product(row: ProductRow) -> Product:
    """Build the aggregate from a stored row; derived fields are recomputed."""
    return Product(
        product_id=row.product_id,
        sku=row.sku,
        name=row.name,
        description=row.description,
        price=row.price,
        category_id=row.category_id,
        discount=row.discount,
        quantity=row.quantity,
        status=row.status,
        features=list(row.features or []),
        images=ImageCollection(
            ProductImage(
                image_id=UUID(doc["image_id"]),
                url=doc["url"],
                asset_id=doc.get("asset_id"),
            )
            for doc in row.images or []
        ),
        ratings=RatingCollection(
            ProductRating(
                user_id=UUID(doc["user_id"]),
                score=doc["score"],
                review=doc.get("review"),
                rated_at=datetime.fromisoformat(doc["rated_at"]),
            )
            for doc in row.ratings or []
        ),
        version=row.version,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def product_values(product: Product) -> dict[str, Any]:
    """Column values for an insert or update; sku is excluded."""
    return {
        "name": product.name,
        "description": product.description,
        "category_id": product.category_id,
        "price": product.price,
        "discount": product.discount,
        "final_price": product.final_price,
        "quantity": product.quantity,
        "status": product.status,
        "features": list(product.features),
        "images": images_to_documents(product.images),
        "ratings": ratings_to_documents(product.ratings),
        "average_rating": product.average_rating,
    }


def parse_sort(sort: str | None):
    """Turn ``-final_price`` style sort keys into an ORDER BY clause."""
    sort = sort or DEFAULT_SORT
    descending = sort.startswith("-")
    field_name = sort.lstrip("-")
    column = SORTABLE_FIELDS.get(field_name)
    if column is None:
        raise ValueError(f"Unsupported sort field: {field_name}")
    return column.desc() if descending else column.asc()


class SqlProductRepository:
    """ProductRepository backed by an AsyncSession.

    ``save`` is conditional on the product's version: the UPDATE only matches
    when the stored version equals the one the aggregate was loaded with.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_id(self, product_id: UUID) -> Product | None:
        try:
            result = await self.db.execute(
                select(ProductRow).where(ProductRow.product_id == product_id)
            )
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to load product {product_id}") from e
        row = result.scalar_one_or_none()
        return row_to_product(row) if row else None

    async def create(self, product: Product) -> Product:
        """Insert a new product.

        Raises:
            DuplicateError: SKU already exists
            PersistenceError: Any other database failure
        """
        row = ProductRow(
            product_id=product.product_id,
            sku=product.sku,
            version=0,
            **product_values(product),
        )
        try:
            self.db.add(row)
            await self.db.commit()
            await self.db.refresh(row)
        except IntegrityError as e:
            await self.db.rollback()
            raise DuplicateError("Product with this SKU already exists") from e
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise PersistenceError("Failed to create product") from e
        return row_to_product(row)

    async def save(self, product: Product) -> Product:
        """Persist the whole product document.

        Raises:
            NotFoundError: The row was deleted since it was loaded
            ConflictError: Another writer saved a newer version
            PersistenceError: Any other database failure
        """
        expected_version = product.version
        try:
            result = await self.db.execute(
                update(ProductRow)
                .where(ProductRow.product_id == product.product_id)
                .where(ProductRow.version == expected_version)
                .values(version=expected_version + 1, **product_values(product))
                .returning(ProductRow.version, ProductRow.updated_at)
            )
            updated = result.first()
            if updated is None:
                await self.db.rollback()
                exists = await self.db.execute(
                    select(ProductRow.version).where(
                        ProductRow.product_id == product.product_id
                    )
                )
                if exists.scalar_one_or_none() is None:
                    raise NotFoundError(f"Product {product.product_id} not found")
                logger.info(
                    f"Version conflict saving product {product.product_id} "
                    f"(expected {expected_version})"
                )
                raise ConflictError(
                    f"Product {product.product_id} was modified concurrently"
                )
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise PersistenceError(f"Failed to save product {product.product_id}") from e

        product.version = updated.version
        product.updated_at = updated.updated_at
        return product

    async def delete(self, product_id: UUID) -> None:
        try:
            result = await self.db.execute(
                delete(ProductRow).where(ProductRow.product_id == product_id)
            )
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise PersistenceError(f"Failed to delete product {product_id}") from e
        if result.rowcount == 0:
            raise NotFoundError(f"Product {product_id} not found")

    async def list_products(self, filters: ProductFilters) -> tuple[list[Product], int]:
        """Filtered, sorted page of products plus the total match count."""
        conditions = []
        if filters.category_id is not None:
            conditions.append(ProductRow.category_id == filters.category_id)
        if filters.status is not None:
            conditions.append(ProductRow.status == filters.status)
        if filters.min_price is not None:
            conditions.append(ProductRow.final_price >= filters.min_price)
        if filters.max_price is not None:
            conditions.append(ProductRow.final_price <= filters.max_price)

        order_by = parse_sort(filters.sort)
        try:
            count_result = await self.db.execute(
                select(func.count(ProductRow.product_id)).where(*conditions)
            )
            total = count_result.scalar_one()

            result = await self.db.execute(
                select(ProductRow)
                .where(*conditions)
                .order_by(order_by)
                .offset(filters.skip)
                .limit(filters.limit)
            )
        except SQLAlchemyError as e:
            raise PersistenceError("Failed to list products") from e

        return [row_to_product(row) for row in result.scalars().all()], total
