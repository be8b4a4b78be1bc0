"""Tests for the error to HTTP status mapping and slug generation."""

import json
from unittest.mock import MagicMock
from uuid import uuid4

import pytest

from catalog.api.errors import catalog_error_handler, status_code_for
from catalog.core.exceptions import (
    AssetNotFoundError,
    AssetStoreError,
    ConflictError,
    DuplicateError,
    NotFoundError,
    PersistenceError,
    UploadFailedError,
    ValidationFailedError,
)
from catalog.domain.product import ProductImage, UploadOutcome
from catalog.services.category_service import slugify


@pytest.mark.parametrize(
    "error,expected",
    [
        (NotFoundError("missing"), 404),
        (ValidationFailedError("bad"), 400),
        (DuplicateError("taken"), 400),
        (ConflictError("stale"), 409),
        (UploadFailedError([UploadOutcome(index=0, error="boom")]), 502),
        (AssetStoreError("host down"), 502),
        (AssetNotFoundError("gone"), 502),
        (PersistenceError("db down"), 500),
    ],
)
def test_status_code_for(error, expected):
    assert status_code_for(error) == expected


def make_request() -> MagicMock:
    request = MagicMock()
    request.method = "POST"
    request.url.path = "/api/v1/products/x/images"
    return request


class TestCatalogErrorHandler:
    @pytest.mark.asyncio
    async def test_plain_error_body(self):
        response = await catalog_error_handler(make_request(), NotFoundError("Product x not found"))

        assert response.status_code == 404
        assert json.loads(response.body) == {"detail": "Product x not found"}

    @pytest.mark.asyncio
    async def test_upload_failure_lists_every_file(self):
        image = ProductImage(
            image_id=uuid4(), url="https://img.example.com/a.jpg", asset_id="products/a"
        )
        error = UploadFailedError(
            [
                UploadOutcome(index=0, image=image),
                UploadOutcome(index=1, error="upload rejected"),
            ]
        )

        response = await catalog_error_handler(make_request(), error)

        assert response.status_code == 502
        body = json.loads(response.body)
        assert body["detail"] == "1 of 2 image uploads failed (indexes: [1])"
        assert [upload["ok"] for upload in body["uploads"]] == [True, False]
        assert body["uploads"][0]["image"]["asset_id"] == "products/a"
        assert body["uploads"][1]["error"] == "upload rejected"


class TestSlugify:
    """Test category slug generation."""

    def test_lowercases(self):
        assert slugify("Electronics") == "electronics"

    def test_replaces_each_non_alphanumeric(self):
        assert slugify("Home & Garden") == "home---garden"

    def test_keeps_digits(self):
        assert slugify("4K TVs") == "4k-tvs"
