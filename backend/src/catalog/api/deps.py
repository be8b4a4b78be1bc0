"""API dependencies for authentication, database access and services."""

from typing import Annotated, Any
from uuid import UUID

from cachetools import TTLCache
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.core.database import get_db
from catalog.core.redis import get_redis
from catalog.core.security import decode_access_token
from catalog.models.user import User
from catalog.repositories.product_repository import SqlProductRepository
from catalog.services.asset_store import AssetStore
from catalog.services.product_aggregate import ProductAggregateService
from catalog.services.product_service import ProductService
from catalog.services.redis_service import RedisService
from catalog.services.user_service import UserService

security = HTTPBearer()

# Decoded JWT payloads, keyed by token, to skip signature checks on bursts
JWT_CACHE_TTL = 10
_jwt_payload_cache: TTLCache = TTLCache(maxsize=10000, ttl=JWT_CACHE_TTL)


def decode_token_cached(token: str) -> dict[str, Any] | None:
    """Decode a bearer token, reusing a recent decode of the same token."""
    payload = _jwt_payload_cache.get(token)
    if payload is None:
        payload = decode_access_token(token)
        if payload is not None:
            _jwt_payload_cache[token] = payload
    return payload


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(security)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """Get current authenticated user from JWT token.

    Raises:
        HTTPException: If token is invalid, user not found or inactive
    """
    payload = decode_token_cached(credentials.credentials)
    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Please authenticate",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        user_id = UUID(payload.get("sub", ""))
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid user ID in token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = await UserService(db).get_by_id(user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Please authenticate",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if user.status != "active":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is not active",
        )

    return user


async def get_current_admin_user(
    current_user: Annotated[User, Depends(get_current_user)],
) -> User:
    """Get current user and verify they are an admin."""
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied. Admin only.",
        )
    return current_user


async def get_redis_service() -> RedisService:
    """Get RedisService instance with shared Redis connection pool."""
    redis = await get_redis()
    return RedisService(redis)


def get_asset_store(request: Request) -> AssetStore:
    """The asset store client created at startup."""
    return request.app.state.asset_store


def get_product_service(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ProductService:
    return ProductService(db)


def get_product_aggregate_service(
    db: Annotated[AsyncSession, Depends(get_db)],
    asset_store: Annotated[AssetStore, Depends(get_asset_store)],
) -> ProductAggregateService:
    """ProductAggregateService wired to this request's session."""
    return ProductAggregateService(SqlProductRepository(db), asset_store)


# Type aliases for cleaner dependency injection
CurrentUser = Annotated[User, Depends(get_current_user)]
AdminUser = Annotated[User, Depends(get_current_admin_user)]
DbSession = Annotated[AsyncSession, Depends(get_db)]
RedisServiceDep = Annotated[RedisService, Depends(get_redis_service)]
ProductServiceDep = Annotated[ProductService, Depends(get_product_service)]
ProductAggregateDep = Annotated[
    ProductAggregateService, Depends(get_product_aggregate_service)
]
