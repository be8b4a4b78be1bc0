"""SQLAlchemy ORM models."""

from catalog.models.base import TimestampMixin
from catalog.models.category import Category
from catalog.models.product import Product
from catalog.models.user import User

__all__ = [
    "TimestampMixin",
    "User",
    "Category",
    "Product",
]
