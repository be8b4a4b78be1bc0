"""Persistence adapters."""

from catalog.repositories.product_repository import (
    ProductFilters,
    ProductRepository,
    SqlProductRepository,
)

__all__ = [
    "ProductFilters",
    "ProductRepository",
    "SqlProductRepository",
]
