"""Product schemas for request/response validation."""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from catalog.core.exceptions import UploadFailedError
from catalog.domain.product import DeleteFailure, Product

ProductStatus = Literal["active", "inactive", "outOfStock"]


class ProductCreate(BaseModel):
    """Schema for product creation request."""

    name: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    price: float = Field(..., ge=0)
    category_id: UUID
    quantity: int = Field(0, ge=0)
    sku: str = Field(..., min_length=1, max_length=100)
    discount: float = Field(0, ge=0, le=100)
    status: ProductStatus = "active"
    features: list[str] = Field(default_factory=list)


class ProductUpdate(BaseModel):
    """Partial update. SKU is immutable and therefore not accepted."""

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = Field(None, min_length=1)
    price: float | None = Field(None, ge=0)
    category_id: UUID | None = None
    quantity: int | None = Field(None, ge=0)
    discount: float | None = Field(None, ge=0, le=100)
    status: ProductStatus | None = None
    features: list[str] | None = None
    version: int | None = Field(None, ge=0)


class RatingCreate(BaseModel):
    """Schema for a rating submission."""

    rating: float = Field(..., ge=1, le=5)
    review: str | None = None


class ImageResponse(BaseModel):
    image_id: UUID
    url: str
    asset_id: str | None = None

    model_config = {"from_attributes": True}


class RatingResponse(BaseModel):
    user_id: UUID
    rating: float
    review: str | None
    rated_at: datetime


class ProductResponse(BaseModel):
    """Schema for product response."""

    product_id: UUID
    sku: str
    name: str
    description: str
    category_id: UUID | None
    price: float
    discount: float
    final_price: float
    quantity: int
    status: str
    features: list[str]
    images: list[ImageResponse]
    ratings: list[RatingResponse]
    average_rating: float
    version: int
    created_at: datetime | None
    updated_at: datetime | None

    @classmethod
    def from_product(cls, product: Product) -> "ProductResponse":
        return cls(
            product_id=product.product_id,
            sku=product.sku,
            name=product.name,
            description=product.description,
            category_id=product.category_id,
            price=product.price,
            discount=product.discount,
            final_price=product.final_price,
            quantity=product.quantity,
            status=product.status,
            features=list(product.features),
            images=[ImageResponse.model_validate(image) for image in product.images],
            ratings=[
                RatingResponse(
                    user_id=rating.user_id,
                    rating=rating.score,
                    review=rating.review,
                    rated_at=rating.rated_at,
                )
                for rating in product.ratings
            ],
            average_rating=product.average_rating,
            version=product.version,
            created_at=product.created_at,
            updated_at=product.updated_at,
        )


class Pagination(BaseModel):
    total: int
    page: int
    pages: int


class ProductListResponse(BaseModel):
    """Schema for product list response."""

    products: list[ProductResponse]
    pagination: Pagination


class UploadOutcomeResponse(BaseModel):
    index: int
    ok: bool
    image: ImageResponse | None = None
    error: str | None = None


class UploadFailureResponse(BaseModel):
    """Body returned when one or more uploads in a batch failed."""

    detail: str
    uploads: list[UploadOutcomeResponse]

    @classmethod
    def from_error(cls, error: UploadFailedError) -> "UploadFailureResponse":
        return cls(
            detail=str(error),
            uploads=[
                UploadOutcomeResponse(
                    index=outcome.index,
                    ok=outcome.ok,
                    image=(
                        ImageResponse.model_validate(outcome.image)
                        if outcome.image
                        else None
                    ),
                    error=outcome.error,
                )
                for outcome in error.outcomes
            ],
        )


class DeleteFailureResponse(BaseModel):
    image_id: UUID
    asset_id: str | None
    reason: str

    @classmethod
    def from_failure(cls, failure: DeleteFailure) -> "DeleteFailureResponse":
        return cls(
            image_id=failure.image_id, asset_id=failure.asset_id, reason=failure.reason
        )


class ImageReplaceResponse(BaseModel):
    """Persisted product plus whatever part of the batch failed."""

    product: ProductResponse
    failed_deletions: list[DeleteFailureResponse]
    upload_failure: UploadFailureResponse | None = None
    persist_error: str | None = None
    unattached_images: list[ImageResponse] = []


class ProductDeleteResponse(BaseModel):
    message: str
    orphaned_assets: list[DeleteFailureResponse]
