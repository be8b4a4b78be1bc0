"""Image hosting: the asset store contract and a Cloudinary client."""

import hashlib
import logging
import time
from typing import Any, Protocol

import httpx

from catalog.core.exceptions import AssetNotFoundError, AssetStoreError
from catalog.domain.product import UploadedAsset
from catalog.middleware.metrics import record_asset_store_operation

logger = logging.getLogger(__name__)


class AssetStore(Protocol):
    """Upload returns the stored asset; delete raises AssetNotFoundError when
    the asset is already gone and AssetStoreError for any other failure."""

    async def upload(self, data: bytes) -> UploadedAsset: ...

    async def delete(self, asset_id: str) -> None: ...


class CloudinaryAssetStore:
    """AssetStore backed by Cloudinary's upload API.

    Requests are signed with the account's API secret, so no SDK is needed;
    the shared httpx client is created once and reused for every call.
    """

    API_BASE_URL = "https://api.cloudinary.com/v1_1"
    # Fit within 1000x1000, automatic quality and format
    UPLOAD_TRANSFORMATION = "c_limit,h_1000,w_1000/q_auto,f_auto"

    def __init__(
        self,
        cloud_name: str,
        api_key: str,
        api_secret: str,
        folder: str = "products",
        client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ):
        self.cloud_name = cloud_name
        self.api_key = api_key
        self.api_secret = api_secret
        self.folder = folder
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=timeout)

    @property
    def base_url(self) -> str:
        return f"{self.API_BASE_URL}/{self.cloud_name}/image"

    def sign(self, params: dict[str, Any]) -> str:
        """Cloudinary signature: SHA-1 of the sorted params followed by the secret."""
        to_sign = "&".join(
            f"{key}={value}"
            for key, value in sorted(params.items())
            if value not in (None, "")
        )
        return hashlib.sha1(f"{to_sign}{self.api_secret}".encode("utf-8")).hexdigest()

    def _signed(self, params: dict[str, Any]) -> dict[str, Any]:
        params = {**params, "timestamp": int(time.time())}
        params["signature"] = self.sign(params)
        params["api_key"] = self.api_key
        return params

    async def upload(self, data: bytes) -> UploadedAsset:
        """Upload raw image bytes.

        Args:
            data: Image file content

        Returns:
            The secure URL and public id of the stored asset

        Raises:
            AssetStoreError: Transport failure, non-2xx status or malformed reply
        """
        params = self._signed(
            {"folder": self.folder, "transformation": self.UPLOAD_TRANSFORMATION}
        )
        start_time = time.perf_counter()
        try:
            response = await self.client.post(
                f"{self.base_url}/upload",
                data=params,
                files={"file": ("image", data)},
            )
            response.raise_for_status()
            payload = response.json()
            asset = UploadedAsset(url=payload["secure_url"], asset_id=payload["public_id"])
        except (httpx.HTTPError, ValueError, KeyError) as e:
            record_asset_store_operation("upload", "error", time.perf_counter() - start_time)
            logger.warning(f"Image upload failed: {e}")
            raise AssetStoreError(f"Image upload failed: {e}") from e

        record_asset_store_operation("upload", "ok", time.perf_counter() - start_time)
        return asset

    async def delete(self, asset_id: str) -> None:
        """Destroy a stored asset.

        Raises:
            AssetNotFoundError: Cloudinary reports the asset as absent
            AssetStoreError: Any other failure
        """
        params = self._signed({"public_id": asset_id})
        start_time = time.perf_counter()
        try:
            response = await self.client.post(f"{self.base_url}/destroy", data=params)
            if response.status_code == 404:
                result = "not found"
            else:
                response.raise_for_status()
                result = response.json().get("result")
        except (httpx.HTTPError, ValueError) as e:
            record_asset_store_operation("delete", "error", time.perf_counter() - start_time)
            logger.warning(f"Deleting asset {asset_id} failed: {e}")
            raise AssetStoreError(f"Deleting asset {asset_id} failed: {e}") from e

        elapsed = time.perf_counter() - start_time
        if result == "ok":
            record_asset_store_operation("delete", "ok", elapsed)
            return
        if result == "not found":
            record_asset_store_operation("delete", "not_found", elapsed)
            raise AssetNotFoundError(f"Asset {asset_id} not found")

        record_asset_store_operation("delete", "error", elapsed)
        raise AssetStoreError(f"Unexpected destroy result for {asset_id}: {result}")

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()
