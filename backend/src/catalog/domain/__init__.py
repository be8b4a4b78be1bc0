"""Domain model for the product aggregate."""

from catalog.domain.product import (
    PRODUCT_STATUSES,
    DeleteFailure,
    ImageCollection,
    Product,
    ProductImage,
    ProductRating,
    RatingCollection,
    UploadedAsset,
    UploadOutcome,
    compute_average_rating,
    compute_final_price,
    validate_rating,
)

__all__ = [
    "PRODUCT_STATUSES",
    "DeleteFailure",
    "ImageCollection",
    "Product",
    "ProductImage",
    "ProductRating",
    "RatingCollection",
    "UploadedAsset",
    "UploadOutcome",
    "compute_average_rating",
    "compute_final_price",
    "validate_rating",
]
