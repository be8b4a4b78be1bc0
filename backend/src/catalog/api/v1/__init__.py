"""API v1 routers."""

from catalog.api.v1 import auth, categories, products, users

__all__ = ["auth", "categories", "products", "users"]
