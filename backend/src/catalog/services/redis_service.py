"""Redis service for the product detail cache."""

import json
import logging
from typing import Any

from redis.asyncio import Redis
from redis.exceptions import RedisError

logger = logging.getLogger(__name__)


class RedisService:
    """Service class for Redis cache operations.

    Cache failures never fail a request: reads fall back to the database and
    write/invalidate errors are logged.
    """

    def __init__(self, redis: Redis):
        """Initialize Redis service with a Redis client.

        Args:
            redis: Async Redis client instance
        """
        self.redis = redis

    @staticmethod
    def product_key(product_id: str) -> str:
        return f"product:{product_id}"

    async def get_cached_product(self, product_id: str) -> dict[str, Any] | None:
        """Get a cached product payload.

        Args:
            product_id: Product UUID string

        Returns:
            Decoded JSON payload or None on miss or error
        """
        try:
            cached = await self.redis.get(self.product_key(product_id))
        except RedisError as e:
            logger.warning(f"Product cache read failed for {product_id}: {e}")
            return None
        if cached is None:
            return None
        try:
            return json.loads(cached)
        except ValueError as e:
            logger.warning(f"Discarding corrupt cache entry for {product_id}: {e}")
            return None

    async def cache_product(
        self, product_id: str, payload: dict[str, Any], ttl: int = 60
    ) -> None:
        """Store a product payload with a TTL.

        Args:
            product_id: Product UUID string
            payload: JSON-serializable product representation
            ttl: Time to live in seconds
        """
        try:
            await self.redis.setex(self.product_key(product_id), ttl, json.dumps(payload))
        except RedisError as e:
            logger.warning(f"Product cache write failed for {product_id}: {e}")

    async def invalidate_product(self, product_id: str) -> None:
        """Drop a product from the cache after it changes."""
        try:
            await self.redis.delete(self.product_key(product_id))
        except RedisError as e:
            logger.warning(f"Product cache invalidation failed for {product_id}: {e}")
