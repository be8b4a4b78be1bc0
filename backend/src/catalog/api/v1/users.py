"""User profile API endpoints."""

from typing import Any

from fastapi import APIRouter, Body

from catalog.api.deps import CurrentUser, DbSession
from catalog.schemas.user import UserResponse
from catalog.services.user_service import UserService

router = APIRouter()


@router.get("/me", response_model=UserResponse)
async def get_profile(current_user: CurrentUser):
    """Get the current user's profile."""
    return current_user


@router.patch("/me", response_model=UserResponse)
async def update_profile(
    current_user: CurrentUser,
    db: DbSession,
    updates: dict[str, Any] = Body(...),
):
    """Update name and/or email; any other field is rejected with 400."""
    service = UserService(db)
    return await service.update_profile(current_user, updates)
