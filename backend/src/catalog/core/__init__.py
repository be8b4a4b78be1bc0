from catalog.core.config import settings
from catalog.core.exceptions import (
    AssetNotFoundError,
    AssetStoreError,
    CatalogError,
    ConflictError,
    DuplicateError,
    NotFoundError,
    PersistenceError,
    UploadFailedError,
    ValidationFailedError,
)

__all__ = [
    "settings",
    "CatalogError",
    "NotFoundError",
    "ValidationFailedError",
    "DuplicateError",
    "ConflictError",
    "PersistenceError",
    "AssetStoreError",
    "AssetNotFoundError",
    "UploadFailedError",
]
