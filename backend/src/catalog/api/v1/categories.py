"""Category management API endpoints."""

from typing import Literal
from uuid import UUID

from fastapi import APIRouter, Query, status

from catalog.api.deps import AdminUser, DbSession
from catalog.schemas.category import (
    CategoryCreate,
    CategoryListResponse,
    CategoryResponse,
    CategoryUpdate,
)
from catalog.services.category_service import CategoryService

router = APIRouter()


@router.get("", response_model=CategoryListResponse)
async def list_categories(
    db: DbSession,
    category_status: Literal["active", "inactive"] | None = Query(None, alias="status"),
):
    """Get all categories, optionally filtered by status."""
    service = CategoryService(db)
    categories = await service.get_all(status=category_status)
    return CategoryListResponse(categories=categories, total=len(categories))


@router.get("/{category_id}", response_model=CategoryResponse)
async def get_category(category_id: UUID, db: DbSession):
    """Get category by ID."""
    return await CategoryService(db).get_by_id(category_id)


@router.post("", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
async def create_category(category_data: CategoryCreate, db: DbSession, admin: AdminUser):
    """Create a new category (admin only)."""
    return await CategoryService(db).create(category_data)


@router.put("/{category_id}", response_model=CategoryResponse)
async def update_category(
    category_id: UUID,
    changes: CategoryUpdate,
    db: DbSession,
    admin: AdminUser,
):
    """Update a category (admin only)."""
    return await CategoryService(db).update(category_id, changes)


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_category(category_id: UUID, db: DbSession, admin: AdminUser):
    """Delete an unused category (admin only)."""
    await CategoryService(db).delete(category_id)
