"""Map catalog errors to HTTP responses."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from catalog.core.exceptions import (
    AssetStoreError,
    CatalogError,
    ConflictError,
    DuplicateError,
    NotFoundError,
    PersistenceError,
    UploadFailedError,
    ValidationFailedError,
)
from catalog.schemas.product import UploadFailureResponse

logger = logging.getLogger(__name__)

# Checked in order; subclasses first
STATUS_CODES: list[tuple[type[CatalogError], int]] = [
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ValidationFailedError, status.HTTP_400_BAD_REQUEST),
    (DuplicateError, status.HTTP_400_BAD_REQUEST),
    (ConflictError, status.HTTP_409_CONFLICT),
    (UploadFailedError, status.HTTP_502_BAD_GATEWAY),
    (AssetStoreError, status.HTTP_502_BAD_GATEWAY),
    (PersistenceError, status.HTTP_500_INTERNAL_SERVER_ERROR),
]


def status_code_for(error: CatalogError) -> int:
    for error_type, status_code in STATUS_CODES:
        if isinstance(error, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def catalog_error_handler(request: Request, exc: CatalogError) -> JSONResponse:
    status_code = status_code_for(exc)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc!r}")

    if isinstance(exc, UploadFailedError):
        content = UploadFailureResponse.from_error(exc).model_dump(mode="json")
    else:
        content = {"detail": str(exc)}
    return JSONResponse(status_code=status_code, content=content)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(CatalogError, catalog_error_handler)
