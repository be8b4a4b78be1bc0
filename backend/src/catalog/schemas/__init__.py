"""Pydantic schemas for request/response validation."""

from catalog.schemas.category import (
    CategoryCreate,
    CategoryListResponse,
    CategoryResponse,
    CategoryUpdate,
)
from catalog.schemas.product import (
    ImageReplaceResponse,
    ProductCreate,
    ProductDeleteResponse,
    ProductListResponse,
    ProductResponse,
    ProductUpdate,
    RatingCreate,
    UploadFailureResponse,
)
from catalog.schemas.user import TokenResponse, UserLogin, UserRegister, UserResponse

__all__ = [
    "UserRegister",
    "UserLogin",
    "UserResponse",
    "TokenResponse",
    "CategoryCreate",
    "CategoryUpdate",
    "CategoryResponse",
    "CategoryListResponse",
    "ProductCreate",
    "ProductUpdate",
    "ProductResponse",
    "ProductListResponse",
    "ProductDeleteResponse",
    "RatingCreate",
    "ImageReplaceResponse",
    "UploadFailureResponse",
]
