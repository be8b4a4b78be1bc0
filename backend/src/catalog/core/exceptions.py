"""Error taxonomy shared by the services and the HTTP layer.

Every failure surfaced by a catalog operation is a subclass of CatalogError,
so the API can map them to status codes in one place.
"""

from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:
    from catalog.domain.product import UploadOutcome


class CatalogError(Exception):
    """Base class for all catalog errors."""


class NotFoundError(CatalogError):
    """A product, image entry, category or user does not exist."""


class ValidationFailedError(CatalogError):
    """Input violates a business rule (rating range, review length, ids)."""


class DuplicateError(CatalogError):
    """A unique key (SKU, email, category name) is already taken."""


class ConflictError(CatalogError):
    """The stored version no longer matches the one being saved."""


class PersistenceError(CatalogError):
    """The repository failed to read or write a record."""


class AssetStoreError(CatalogError):
    """The external image host failed an upload or delete."""


class AssetNotFoundError(AssetStoreError):
    """The image host reports the asset as already absent."""


class UploadFailedError(CatalogError):
    """One or more image uploads failed; nothing was persisted.

    ``outcomes`` holds one entry per input file, in input order, so callers
    can see which uploads succeeded (and may need cleanup) and which failed.
    """

    def __init__(self, outcomes: Sequence["UploadOutcome"]):
        self.outcomes = list(outcomes)
        failed = [o.index for o in self.outcomes if not o.ok]
        super().__init__(
            f"{len(failed)} of {len(self.outcomes)} image uploads failed "
            f"(indexes: {failed})"
        )

    @property
    def succeeded(self) -> list["UploadOutcome"]:
        return [o for o in self.outcomes if o.ok]

    @property
    def failed(self) -> list["UploadOutcome"]:
        return [o for o in self.outcomes if not o.ok]
