"""Product management API endpoints."""

import logging
import math
from uuid import UUID

from fastapi import APIRouter, File, Form, HTTPException, Query, UploadFile, status
from pydantic import ValidationError

from catalog.api.deps import (
    AdminUser,
    CurrentUser,
    ProductAggregateDep,
    ProductServiceDep,
    RedisServiceDep,
)
from catalog.core.config import settings
from catalog.repositories.product_repository import DEFAULT_SORT, ProductFilters
from catalog.schemas.product import (
    DeleteFailureResponse,
    ImageReplaceResponse,
    ImageResponse,
    Pagination,
    ProductCreate,
    ProductDeleteResponse,
    ProductListResponse,
    ProductResponse,
    ProductStatus,
    ProductUpdate,
    RatingCreate,
    UploadFailureResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


async def read_images(files: list[UploadFile]) -> list[bytes]:
    """Read uploaded files, enforcing count, type and size limits."""
    if len(files) > settings.MAX_UPLOAD_FILES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"At most {settings.MAX_UPLOAD_FILES} images per request",
        )
    buffers = []
    for upload in files:
        if not (upload.content_type or "").startswith("image/"):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"{upload.filename} is not an image",
            )
        data = await upload.read()
        if len(data) > settings.MAX_IMAGE_BYTES:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"{upload.filename} exceeds {settings.MAX_IMAGE_BYTES} bytes",
            )
        buffers.append(data)
    return buffers


@router.get("", response_model=ProductListResponse)
async def list_products(
    service: ProductServiceDep,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    category: UUID | None = Query(None),
    min_price: float | None = Query(None, ge=0, alias="minPrice"),
    max_price: float | None = Query(None, ge=0, alias="maxPrice"),
    product_status: ProductStatus | None = Query(None, alias="status"),
    sort: str = Query(DEFAULT_SORT),
):
    """Get products filtered by category, status and final price range."""
    filters = ProductFilters(
        category_id=category,
        status=product_status,
        min_price=min_price,
        max_price=max_price,
        sort=sort,
        skip=(page - 1) * limit,
        limit=limit,
    )
    products, total = await service.get_all(filters)
    return ProductListResponse(
        products=[ProductResponse.from_product(p) for p in products],
        pagination=Pagination(total=total, page=page, pages=math.ceil(total / limit)),
    )


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(
    product_id: UUID,
    service: ProductServiceDep,
    redis_service: RedisServiceDep,
):
    """Get product by ID, served from the Redis cache when warm."""
    cached = await redis_service.get_cached_product(str(product_id))
    if cached is not None:
        try:
            return ProductResponse.model_validate(cached)
        except ValidationError as e:
            logger.warning(f"Ignoring stale cache entry for {product_id}: {e}")

    response = ProductResponse.from_product(await service.get_by_id(product_id))
    await redis_service.cache_product(
        str(product_id),
        response.model_dump(mode="json"),
        ttl=settings.PRODUCT_CACHE_TTL,
    )
    return response


@router.post("", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
async def create_product(
    product_data: ProductCreate,
    service: ProductServiceDep,
    admin: AdminUser,
):
    """Create a new product (admin only)."""
    product = await service.create(product_data)
    return ProductResponse.from_product(product)


@router.put("/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: UUID,
    changes: ProductUpdate,
    service: ProductServiceDep,
    redis_service: RedisServiceDep,
    admin: AdminUser,
):
    """Update product fields (admin only); SKU cannot change."""
    try:
        product = await service.update(product_id, changes)
    finally:
        await redis_service.invalidate_product(str(product_id))
    return ProductResponse.from_product(product)


@router.delete("/{product_id}", response_model=ProductDeleteResponse)
async def delete_product(
    product_id: UUID,
    aggregate: ProductAggregateDep,
    redis_service: RedisServiceDep,
    admin: AdminUser,
):
    """Delete a product and release its images (admin only).

    Images the host failed to delete are listed but do not block removal.
    """
    try:
        result = await aggregate.delete_product_cascade(product_id)
    finally:
        await redis_service.invalidate_product(str(product_id))
    return ProductDeleteResponse(
        message="Product deleted successfully",
        orphaned_assets=[
            DeleteFailureResponse.from_failure(f) for f in result.orphaned_assets
        ],
    )


@router.post("/{product_id}/images", response_model=ProductResponse)
async def upload_product_images(
    product_id: UUID,
    aggregate: ProductAggregateDep,
    redis_service: RedisServiceDep,
    admin: AdminUser,
    images: list[UploadFile] = File(...),
):
    """Upload images and append them to the product (admin only)."""
    files = await read_images(images)
    try:
        product = await aggregate.add_images(product_id, files)
    finally:
        await redis_service.invalidate_product(str(product_id))
    return ProductResponse.from_product(product)


@router.delete("/{product_id}/images/{image_id}", response_model=ProductResponse)
async def delete_product_image(
    product_id: UUID,
    image_id: UUID,
    aggregate: ProductAggregateDep,
    redis_service: RedisServiceDep,
    admin: AdminUser,
):
    """Delete one product image (admin only)."""
    try:
        product = await aggregate.delete_image(product_id, image_id)
    finally:
        await redis_service.invalidate_product(str(product_id))
    return ProductResponse.from_product(product)


@router.put("/{product_id}/images", response_model=ImageReplaceResponse)
async def update_product_images(
    product_id: UUID,
    aggregate: ProductAggregateDep,
    redis_service: RedisServiceDep,
    admin: AdminUser,
    images: list[UploadFile] = File(default=[]),
    images_to_delete: list[UUID] = Form(default=[]),
):
    """Delete existing images and/or add new ones (admin only).

    Partial failures are reported in the body next to the persisted product.
    """
    if not images and not images_to_delete:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Nothing to update",
        )
    files = await read_images(images)
    try:
        result = await aggregate.replace_images(product_id, images_to_delete, files)
    finally:
        await redis_service.invalidate_product(str(product_id))
    return ImageReplaceResponse(
        product=ProductResponse.from_product(result.product),
        failed_deletions=[
            DeleteFailureResponse.from_failure(f) for f in result.failed_deletions
        ],
        upload_failure=(
            UploadFailureResponse.from_error(result.upload_error)
            if result.upload_error
            else None
        ),
        persist_error=str(result.persist_error) if result.persist_error else None,
        unattached_images=[
            ImageResponse.model_validate(image) for image in result.unattached_images
        ],
    )


@router.post("/{product_id}/ratings", response_model=ProductResponse)
async def add_product_rating(
    product_id: UUID,
    rating_data: RatingCreate,
    aggregate: ProductAggregateDep,
    redis_service: RedisServiceDep,
    current_user: CurrentUser,
):
    """Rate a product; a second rating by the same user replaces the first."""
    try:
        product = await aggregate.submit_rating(
            product_id,
            current_user.user_id,
            rating_data.rating,
            rating_data.review,
        )
    finally:
        await redis_service.invalidate_product(str(product_id))
    return ProductResponse.from_product(product)
