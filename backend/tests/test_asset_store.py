"""Tests for the Cloudinary asset store client.

Requests go through httpx.MockTransport, so no network is touched.
"""

import hashlib
from urllib.parse import parse_qs

import httpx
import pytest

from catalog.core.exceptions import AssetNotFoundError, AssetStoreError
from catalog.services.asset_store import CloudinaryAssetStore

CLOUD = "demo"
BASE_URL = f"https://api.cloudinary.com/v1_1/{CLOUD}/image"


def make_store(handler) -> CloudinaryAssetStore:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return CloudinaryAssetStore(
        cloud_name=CLOUD,
        api_key="key-123",
        api_secret="s3cret",
        folder="products",
        client=client,
    )


def form_fields(request: httpx.Request) -> dict[str, str]:
    return {key: values[0] for key, values in parse_qs(request.content.decode()).items()}


class TestSignature:
    """Test request signing."""

    def test_sorted_params_followed_by_secret(self):
        store = make_store(lambda request: httpx.Response(200))

        signature = store.sign({"timestamp": 1700000000, "public_id": "products/abc"})

        expected = hashlib.sha1(
            b"public_id=products/abc&timestamp=1700000000s3cret"
        ).hexdigest()
        assert signature == expected

    def test_empty_values_skipped(self):
        store = make_store(lambda request: httpx.Response(200))

        assert store.sign({"a": "1", "b": "", "c": None}) == store.sign({"a": "1"})


class TestUpload:
    """Test image upload."""

    @pytest.mark.asyncio
    async def test_returns_secure_url_and_public_id(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(
                200,
                json={
                    "secure_url": "https://res.cloudinary.com/demo/products/abc.jpg",
                    "public_id": "products/abc",
                },
            )

        store = make_store(handler)

        asset = await store.upload(b"\x89PNG fake image")

        assert asset.url == "https://res.cloudinary.com/demo/products/abc.jpg"
        assert asset.asset_id == "products/abc"
        request = seen[0]
        assert request.method == "POST"
        assert str(request.url) == f"{BASE_URL}/upload"
        assert b"\x89PNG fake image" in request.content
        assert b'name="api_key"' in request.content
        assert b'name="signature"' in request.content

    @pytest.mark.asyncio
    async def test_http_error_raises_asset_store_error(self):
        store = make_store(lambda request: httpx.Response(500, json={"error": "boom"}))

        with pytest.raises(AssetStoreError):
            await store.upload(b"data")

    @pytest.mark.asyncio
    async def test_malformed_reply_raises_asset_store_error(self):
        store = make_store(lambda request: httpx.Response(200, json={"unexpected": True}))

        with pytest.raises(AssetStoreError):
            await store.upload(b"data")

    @pytest.mark.asyncio
    async def test_transport_error_raises_asset_store_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectTimeout("timed out", request=request)

        store = make_store(handler)

        with pytest.raises(AssetStoreError):
            await store.upload(b"data")


class TestDelete:
    """Test asset destroy."""

    @pytest.mark.asyncio
    async def test_ok(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"result": "ok"})

        store = make_store(handler)

        await store.delete("products/abc")

        assert str(seen[0].url) == f"{BASE_URL}/destroy"
        fields = form_fields(seen[0])
        assert fields["public_id"] == "products/abc"
        assert fields["api_key"] == "key-123"
        signed = {"public_id": fields["public_id"], "timestamp": fields["timestamp"]}
        assert fields["signature"] == store.sign(signed)

    @pytest.mark.asyncio
    async def test_not_found_result(self):
        store = make_store(lambda request: httpx.Response(200, json={"result": "not found"}))

        with pytest.raises(AssetNotFoundError):
            await store.delete("products/gone")

    @pytest.mark.asyncio
    async def test_404_status(self):
        store = make_store(lambda request: httpx.Response(404))

        with pytest.raises(AssetNotFoundError):
            await store.delete("products/gone")

    @pytest.mark.asyncio
    async def test_unexpected_result(self):
        store = make_store(lambda request: httpx.Response(200, json={"result": "error"}))

        with pytest.raises(AssetStoreError) as exc_info:
            await store.delete("products/abc")
        assert not isinstance(exc_info.value, AssetNotFoundError)

    @pytest.mark.asyncio
    async def test_server_error(self):
        store = make_store(lambda request: httpx.Response(503))

        with pytest.raises(AssetStoreError) as exc_info:
            await store.delete("products/abc")
        assert not isinstance(exc_info.value, AssetNotFoundError)


@pytest.mark.asyncio
async def test_aclose_leaves_injected_client_open():
    client = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
    store = CloudinaryAssetStore("demo", "key", "secret", client=client)

    await store.aclose()

    assert not client.is_closed
    await client.aclose()
