"""Pytest configuration and fixtures for testing."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from catalog.domain.product import Product
from catalog.services.product_aggregate import ProductAggregateService
from tests.fakes import (
    FakeAssetStore,
    FakeProductRepository,
    FixedClock,
    make_image,
    make_product,
)


# Mock Redis client fixture
@pytest.fixture
def mock_redis() -> AsyncMock:
    """Create a mock Redis client."""
    redis = AsyncMock()
    redis.get = AsyncMock(return_value=None)
    redis.setex = AsyncMock(return_value=True)
    redis.delete = AsyncMock(return_value=1)
    return redis


# Mock user fixture
@pytest.fixture
def mock_user() -> MagicMock:
    """Create a mock user object."""
    user = MagicMock()
    user.user_id = uuid4()
    user.email = "test@example.com"
    user.name = "testuser"
    user.role = "user"
    user.is_admin = False
    user.status = "active"
    return user


# Mock admin user fixture
@pytest.fixture
def mock_admin_user(mock_user: MagicMock) -> MagicMock:
    """Create a mock admin user object."""
    mock_user.role = "admin"
    mock_user.is_admin = True
    return mock_user


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def product() -> Product:
    """A product with three images a, b and c."""
    return make_product(images=[make_image("a"), make_image("b"), make_image("c")])


@pytest.fixture
def repository(product: Product) -> FakeProductRepository:
    return FakeProductRepository([product])


@pytest.fixture
def asset_store() -> FakeAssetStore:
    return FakeAssetStore()


@pytest.fixture
def service(
    repository: FakeProductRepository,
    asset_store: FakeAssetStore,
    clock: FixedClock,
) -> ProductAggregateService:
    return ProductAggregateService(repository, asset_store, clock=clock)
