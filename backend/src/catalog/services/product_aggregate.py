"""Product aggregate operations: ratings, images and cascade deletion.

Each operation loads the product through the repository, applies one
mutation (derived fields are refreshed by the aggregate itself), and
persists the whole document. Calls to the image host for a single request
run concurrently and every outcome is collected before deciding; there is
no fail-fast and no internal retry.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Awaitable, Callable, Iterable, Sequence
from uuid import UUID, uuid4

from catalog.core.exceptions import (
    AssetNotFoundError,
    CatalogError,
    NotFoundError,
    UploadFailedError,
    ValidationFailedError,
)
from catalog.domain.product import (
    DeleteFailure,
    Product,
    ProductImage,
    UploadOutcome,
    validate_rating,
)
from catalog.middleware.metrics import record_orphaned_assets
from catalog.repositories.product_repository import ProductRepository
from catalog.services.asset_store import AssetStore

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ImageReplaceResult:
    """Outcome of a batch delete-then-add on a product's images.

    ``product`` is the state actually persisted: it reflects only the
    deletions that succeeded plus the additions, if the upload phase and its
    save succeeded. When that save fails, ``persist_error`` holds the error and
    ``unattached_images`` the uploaded assets no product refers to.
    """

    product: Product
    failed_deletions: list[DeleteFailure] = field(default_factory=list)
    upload_error: UploadFailedError | None = None
    persist_error: CatalogError | None = None
    unattached_images: list[ProductImage] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return (
            not self.failed_deletions
            and self.upload_error is None
            and self.persist_error is None
        )


@dataclass
class CascadeDeleteResult:
    product_id: UUID
    orphaned_assets: list[DeleteFailure] = field(default_factory=list)


async def _gather_outcomes(calls: Iterable[Awaitable]) -> list:
    """Await every call, returning results and raised Exceptions in order."""
    results = await asyncio.gather(*calls, return_exceptions=True)
    for result in results:
        # Cancellation and other BaseExceptions are not outcomes
        if isinstance(result, BaseException) and not isinstance(result, Exception):
            raise result
    return results


def _describe(error: Exception) -> str:
    return str(error) or type(error).__name__


class ProductAggregateService:
    """Mutations of the product aggregate.

    Collaborators are injected so the service holds no global state.
    """

    def __init__(
        self,
        repository: ProductRepository,
        asset_store: AssetStore,
        clock: Clock = utc_now,
        id_factory: Callable[[], UUID] = uuid4,
    ):
        self.repository = repository
        self.asset_store = asset_store
        self.clock = clock
        self.id_factory = id_factory

    async def _load(self, product_id: UUID) -> Product:
        product = await self.repository.find_by_id(product_id)
        if product is None:
            raise NotFoundError(f"Product {product_id} not found")
        return product

    async def submit_rating(
        self,
        product_id: UUID,
        user_id: UUID,
        score: float,
        review: str | None = None,
    ) -> Product:
        """Insert or replace a user's rating and refresh the average.

        Raises:
            ValidationFailedError: Score outside [1, 5] or review too short
            NotFoundError: Product does not exist
        """
        review = validate_rating(score, review)
        product = await self._load(product_id)
        product.rate(user_id, score, rated_at=self.clock(), review=review)
        return await self.repository.save(product)

    def _new_image_ids(
        self, count: int, reserved: Iterable[UUID], product: Product
    ) -> list[UUID]:
        image_ids = [self.id_factory() for _ in range(count)]
        taken = set(reserved)
        for image_id in image_ids:
            if image_id in taken or image_id in product.images:
                raise ValidationFailedError(f"Image id {image_id} is already in use")
            taken.add(image_id)
        return image_ids

    async def _upload_all(
        self, files: Sequence[bytes], image_ids: Sequence[UUID]
    ) -> list[ProductImage]:
        results = await _gather_outcomes(
            self.asset_store.upload(data) for data in files
        )

        outcomes = []
        for index, (image_id, result) in enumerate(zip(image_ids, results)):
            if isinstance(result, Exception):
                outcomes.append(UploadOutcome(index=index, error=_describe(result)))
            else:
                image = ProductImage(
                    image_id=image_id, url=result.url, asset_id=result.asset_id
                )
                outcomes.append(UploadOutcome(index=index, image=image))

        if not all(outcome.ok for outcome in outcomes):
            error = UploadFailedError(outcomes)
            logger.warning(
                f"{error}; {len(error.succeeded)} uploaded assets are not attached"
            )
            raise error
        return [outcome.image for outcome in outcomes]

    async def add_images(self, product_id: UUID, files: Sequence[bytes]) -> Product:
        """Upload every file and append the images in input order.

        Raises:
            NotFoundError: Product does not exist
            ValidationFailedError: No files given
            UploadFailedError: Any upload failed; nothing was persisted
        """
        if not files:
            raise ValidationFailedError("Please upload at least one image")
        product = await self._load(product_id)
        image_ids = self._new_image_ids(len(files), (), product)
        images = await self._upload_all(files, image_ids)
        product.add_images(images)
        return await self.repository.save(product)

    async def _release_asset(self, image: ProductImage) -> None:
        """Delete the image's remote asset; an already-absent asset is fine."""
        if image.asset_id is None:
            return
        try:
            await self.asset_store.delete(image.asset_id)
        except AssetNotFoundError:
            logger.info(f"Asset {image.asset_id} already absent from the image host")

    async def delete_image(self, product_id: UUID, image_id: UUID) -> Product:
        """Release one image's asset and remove it from the product.

        Raises:
            NotFoundError: Product or image entry does not exist
            AssetStoreError: The image host failed; the entry is kept
        """
        product = await self._load(product_id)
        image = product.images.get(image_id)
        await self._release_asset(image)
        product.remove_image(image_id)
        return await self.repository.save(product)

    async def replace_images(
        self,
        product_id: UUID,
        delete_ids: Sequence[UUID],
        files: Sequence[bytes],
    ) -> ImageReplaceResult:
        """Delete the listed images, then upload and append the new files.

        A failed deletion does not stop the other deletions or the upload
        phase. Failed deletions, failed uploads and a failed save of the new
        images are all reported on the result.

        Raises:
            ValidationFailedError: Repeated or re-used image ids
            NotFoundError: Product does not exist
        """
        delete_ids = list(delete_ids)
        if len(set(delete_ids)) != len(delete_ids):
            raise ValidationFailedError("Duplicate image ids in delete list")

        product = await self._load(product_id)
        new_ids = self._new_image_ids(len(files), delete_ids, product)

        failures: dict[UUID, DeleteFailure] = {}
        targets = []
        for image_id in delete_ids:
            if image_id in product.images:
                targets.append(product.images.get(image_id))
            else:
                failures[image_id] = DeleteFailure(image_id, None, "image not found")

        results = await _gather_outcomes(self._release_asset(image) for image in targets)
        removed = 0
        for image, outcome in zip(targets, results):
            if isinstance(outcome, Exception):
                failures[image.image_id] = DeleteFailure(
                    image.image_id, image.asset_id, _describe(outcome)
                )
            else:
                product.remove_image(image.image_id)
                removed += 1
        if removed:
            product = await self.repository.save(product)

        result = ImageReplaceResult(
            product=product,
            failed_deletions=[failures[i] for i in delete_ids if i in failures],
        )
        if files:
            try:
                images = await self._upload_all(files, new_ids)
            except UploadFailedError as e:
                result.upload_error = e
            else:
                product.add_images(images)
                try:
                    result.product = await self.repository.save(product)
                except CatalogError as e:
                    # Keep the reported product at its last persisted state
                    for image in images:
                        product.remove_image(image.image_id)
                    result.persist_error = e
                    result.unattached_images = images
                    logger.warning(
                        f"Saving new images for product {product_id} failed: {e}; "
                        f"{len(images)} uploaded assets are not attached"
                    )
        return result

    async def delete_product_cascade(self, product_id: UUID) -> CascadeDeleteResult:
        """Release every image asset, then delete the product record.

        Assets the image host fails to delete are reported as orphaned but do
        not block removal of the product.

        Raises:
            NotFoundError: Product does not exist
            PersistenceError: The record could not be deleted
        """
        product = await self._load(product_id)
        images = list(product.images)
        results = await _gather_outcomes(self._release_asset(image) for image in images)

        orphaned = [
            DeleteFailure(image.image_id, image.asset_id, _describe(result))
            for image, result in zip(images, results)
            if isinstance(result, Exception)
        ]
        if orphaned:
            record_orphaned_assets(len(orphaned))
            logger.warning(
                f"Deleting product {product_id} leaves {len(orphaned)} orphaned "
                f"assets: {[failure.asset_id for failure in orphaned]}"
            )

        await self.repository.delete(product_id)
        return CascadeDeleteResult(product_id=product_id, orphaned_assets=orphaned)
