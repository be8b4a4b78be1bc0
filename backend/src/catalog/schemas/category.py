"""Category schemas for request/response validation."""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

CategoryStatus = Literal["active", "inactive"]


class CategoryCreate(BaseModel):
    """Schema for category creation request."""

    name: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1)
    image_url: str | None = Field(None, max_length=500)
    parent_id: UUID | None = None
    status: CategoryStatus = "active"


class CategoryUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(None, min_length=1, max_length=100)
    description: str | None = Field(None, min_length=1)
    image_url: str | None = Field(None, max_length=500)
    parent_id: UUID | None = None
    status: CategoryStatus | None = None


class CategoryResponse(BaseModel):
    """Schema for category response."""

    category_id: UUID
    name: str
    description: str
    slug: str
    image_url: str | None
    parent_id: UUID | None
    status: str
    created_at: datetime

    model_config = {"from_attributes": True}


class CategoryListResponse(BaseModel):
    categories: list[CategoryResponse]
    total: int
