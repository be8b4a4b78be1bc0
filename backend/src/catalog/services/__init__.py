"""Business logic services."""

from catalog.services.asset_store import AssetStore, CloudinaryAssetStore
from catalog.services.product_aggregate import (
    CascadeDeleteResult,
    ImageReplaceResult,
    ProductAggregateService,
)
from catalog.services.redis_service import RedisService

__all__ = [
    "AssetStore",
    "CloudinaryAssetStore",
    "CascadeDeleteResult",
    "ImageReplaceResult",
    "ProductAggregateService",
    "RedisService",
]
