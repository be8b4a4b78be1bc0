"""Tests for the Redis product cache."""

import json
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from catalog.services.redis_service import RedisService


class TestProductCache:
    """Test product cache operations."""

    @pytest.mark.asyncio
    async def test_cache_miss(self, mock_redis):
        """Test a missing key returns None."""
        service = RedisService(mock_redis)
        product_id = str(uuid4())

        assert await service.get_cached_product(product_id) is None
        mock_redis.get.assert_called_once_with(f"product:{product_id}")

    @pytest.mark.asyncio
    async def test_cache_hit(self, mock_redis):
        """Test a cached payload is decoded."""
        payload = {"product_id": str(uuid4()), "name": "Headphones", "final_price": 75.0}
        mock_redis.get = AsyncMock(return_value=json.dumps(payload).encode())
        service = RedisService(mock_redis)

        assert await service.get_cached_product(payload["product_id"]) == payload

    @pytest.mark.asyncio
    async def test_cache_product_sets_ttl(self, mock_redis):
        """Test payloads are written with SETEX."""
        service = RedisService(mock_redis)
        product_id = str(uuid4())
        payload = {"product_id": product_id}

        await service.cache_product(product_id, payload, ttl=30)

        mock_redis.setex.assert_called_once_with(
            f"product:{product_id}", 30, json.dumps(payload)
        )

    @pytest.mark.asyncio
    async def test_invalidate(self, mock_redis):
        service = RedisService(mock_redis)
        product_id = str(uuid4())

        await service.invalidate_product(product_id)

        mock_redis.delete.assert_called_once_with(f"product:{product_id}")

    @pytest.mark.asyncio
    async def test_errors_do_not_propagate(self, mock_redis):
        """Test Redis outages degrade to cache misses."""
        error = RedisConnectionError("connection refused")
        mock_redis.get = AsyncMock(side_effect=error)
        mock_redis.setex = AsyncMock(side_effect=error)
        mock_redis.delete = AsyncMock(side_effect=error)
        service = RedisService(mock_redis)
        product_id = str(uuid4())

        assert await service.get_cached_product(product_id) is None
        await service.cache_product(product_id, {"product_id": product_id})
        await service.invalidate_product(product_id)

    @pytest.mark.asyncio
    async def test_corrupt_entry_is_a_miss(self, mock_redis, caplog):
        """Test an undecodable payload is treated as a cache miss."""
        mock_redis.get = AsyncMock(return_value=b'{"product_id": "trunc')
        service = RedisService(mock_redis)
        product_id = str(uuid4())

        assert await service.get_cached_product(product_id) is None
        assert f"Discarding corrupt cache entry for {product_id}" in caplog.text
