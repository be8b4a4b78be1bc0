"""Tests for product create/update rules."""

from unittest.mock import AsyncMock

import pytest

from catalog.core.exceptions import ConflictError, ValidationFailedError
from catalog.repositories.product_repository import ProductFilters
from catalog.schemas.product import ProductUpdate
from catalog.services.product_service import ProductService


@pytest.fixture
def product_service(repository) -> ProductService:
    return ProductService(AsyncMock(), repository=repository)


class TestUpdate:
    """Test partial product updates."""

    @pytest.mark.asyncio
    async def test_discount_change_recomputes_final_price(
        self, product_service, repository, product
    ):
        updated = await product_service.update(
            product.product_id, ProductUpdate(discount=25)
        )

        assert updated.final_price == 75
        stored = repository.stored(product.product_id)
        assert stored.final_price == 75
        assert stored.price == 100.0

    @pytest.mark.asyncio
    async def test_plain_fields_keep_pricing(self, product_service, repository, product):
        await product_service.update(
            product.product_id, ProductUpdate(name="Studio Headphones", quantity=3)
        )

        stored = repository.stored(product.product_id)
        assert stored.name == "Studio Headphones"
        assert stored.quantity == 3
        assert stored.final_price == 100.0
        assert stored.sku == product.sku

    @pytest.mark.asyncio
    async def test_stale_version_rejected(self, product_service, repository, product):
        with pytest.raises(ConflictError):
            await product_service.update(
                product.product_id, ProductUpdate(name="New name", version=7)
            )

        assert repository.save_count == 0

    def test_invalid_status_rejected_by_schema(self):
        with pytest.raises(ValueError):
            ProductUpdate(status="archived")

    def test_sku_cannot_be_updated(self):
        with pytest.raises(ValueError):
            ProductUpdate(sku="NEW-SKU")

    @pytest.mark.asyncio
    async def test_set_status(self, product_service, repository, product):
        await product_service.update(product.product_id, ProductUpdate(status="inactive"))

        assert repository.stored(product.product_id).status == "inactive"


class TestGetAll:
    @pytest.mark.asyncio
    async def test_unknown_sort_field_is_validation_error(self):
        repository = AsyncMock()
        repository.list_products = AsyncMock(side_effect=ValueError("Unsupported sort field: x"))
        service = ProductService(AsyncMock(), repository=repository)

        with pytest.raises(ValidationFailedError):
            await service.get_all(ProductFilters(sort="x"))
