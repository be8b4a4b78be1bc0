"""Product model; images and ratings are embedded as JSONB documents."""

import uuid
from typing import TYPE_CHECKING, Any

from sqlalchemy import CheckConstraint, Float, ForeignKey, Index, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from catalog.core.database import Base
from catalog.models.base import TimestampMixin

if TYPE_CHECKING:
    from catalog.models.category import Category


class Product(Base, TimestampMixin):
    """Product row. Column values mirror catalog.domain.product.Product."""

    __tablename__ = "products"

    product_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    sku: Mapped[str] = mapped_column(
        String(100),
        unique=True,
        nullable=False,
    )
    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    description: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    category_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("categories.category_id"),
        nullable=True,
    )
    price: Mapped[float] = mapped_column(
        Float,
        nullable=False,
    )
    discount: Mapped[float] = mapped_column(
        Float,
        nullable=False,
        default=0,
    )
    final_price: Mapped[float] = mapped_column(
        Float,
        nullable=False,
    )
    quantity: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="active",
    )
    features: Mapped[list[str]] = mapped_column(
        JSONB,
        nullable=False,
        default=list,
    )
    # [{"image_id", "url", "asset_id"}]
    images: Mapped[list[dict[str, Any]]] = mapped_column(
        JSONB,
        nullable=False,
        default=list,
    )
    # [{"user_id", "score", "review", "rated_at"}]
    ratings: Mapped[list[dict[str, Any]]] = mapped_column(
        JSONB,
        nullable=False,
        default=list,
    )
    average_rating: Mapped[float] = mapped_column(
        Float,
        nullable=False,
        default=0,
    )
    version: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )

    category: Mapped["Category | None"] = relationship(
        "Category", back_populates="products"
    )

    __table_args__ = (
        CheckConstraint("price >= 0", name="chk_product_price_non_negative"),
        CheckConstraint(
            "discount >= 0 AND discount <= 100", name="chk_product_discount_range"
        ),
        CheckConstraint("quantity >= 0", name="chk_product_quantity_non_negative"),
        Index("idx_products_category", "category_id"),
        Index("idx_products_final_price", "final_price"),
        Index("idx_products_status", "status"),
    )
