"""Tests for category creation, updates and deletion rules."""

from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
from sqlalchemy.exc import IntegrityError

from catalog.core.exceptions import DuplicateError, NotFoundError, ValidationFailedError
from catalog.schemas.category import CategoryCreate, CategoryUpdate
from catalog.services.category_service import CategoryService, slugify


def lookup_result(row=None) -> MagicMock:
    result = MagicMock()
    result.scalar_one_or_none.return_value = row
    return result


@pytest.fixture
def mock_db() -> AsyncMock:
    db = AsyncMock()
    db.add = MagicMock()
    db.execute = AsyncMock(return_value=lookup_result())
    return db


@pytest.fixture
def category() -> MagicMock:
    category = MagicMock()
    category.category_id = uuid4()
    category.name = "Audio"
    return category


def test_slugify():
    assert slugify("Home & Garden") == "home---garden"


class TestCreateCategory:
    @pytest.mark.asyncio
    async def test_unknown_parent_rejected(self, mock_db):
        service = CategoryService(mock_db)

        with pytest.raises(ValidationFailedError, match="does not exist"):
            await service.create(
                CategoryCreate(name="Headphones", description="Over-ear", parent_id=uuid4())
            )

        mock_db.add.assert_not_called()
        mock_db.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_duplicate_name(self, mock_db):
        mock_db.commit = AsyncMock(
            side_effect=IntegrityError("INSERT INTO categories", {}, Exception("unique"))
        )
        service = CategoryService(mock_db)

        with pytest.raises(DuplicateError):
            await service.create(CategoryCreate(name="Audio", description="Sound"))

        mock_db.rollback.assert_awaited_once()
        mock_db.refresh.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_slug_derived_from_name(self, mock_db):
        service = CategoryService(mock_db)

        category = await service.create(CategoryCreate(name="Smart Home", description="Hubs"))

        assert category.slug == "smart-home"
        mock_db.add.assert_called_once_with(category)
        mock_db.commit.assert_awaited_once()


class TestUpdateCategory:
    @pytest.mark.asyncio
    async def test_self_parent_rejected(self, mock_db, category):
        mock_db.execute = AsyncMock(return_value=lookup_result(category))
        service = CategoryService(mock_db)

        with pytest.raises(ValidationFailedError, match="own parent"):
            await service.update(
                category.category_id, CategoryUpdate(parent_id=category.category_id)
            )

        mock_db.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_rename_updates_slug(self, mock_db, category):
        mock_db.execute = AsyncMock(return_value=lookup_result(category))
        service = CategoryService(mock_db)

        updated = await service.update(category.category_id, CategoryUpdate(name="Hi Fi"))

        assert updated.name == "Hi Fi"
        assert updated.slug == "hi-fi"

    @pytest.mark.asyncio
    async def test_unknown_category(self, mock_db):
        service = CategoryService(mock_db)

        with pytest.raises(NotFoundError):
            await service.update(uuid4(), CategoryUpdate(name="Hi Fi"))


class TestDeleteCategory:
    @pytest.mark.asyncio
    async def test_category_with_products_rejected(self, mock_db, category):
        mock_db.execute = AsyncMock(
            side_effect=[lookup_result(category), lookup_result(uuid4()), lookup_result()]
        )
        service = CategoryService(mock_db)

        with pytest.raises(ValidationFailedError, match="still referenced"):
            await service.delete(category.category_id)

        mock_db.delete.assert_not_awaited()
        mock_db.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_category_with_children_rejected(self, mock_db, category):
        mock_db.execute = AsyncMock(
            side_effect=[lookup_result(category), lookup_result(), lookup_result(uuid4())]
        )
        service = CategoryService(mock_db)

        with pytest.raises(ValidationFailedError):
            await service.delete(category.category_id)

        mock_db.delete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unused_category_deleted(self, mock_db, category):
        mock_db.execute = AsyncMock(
            side_effect=[lookup_result(category), lookup_result(), lookup_result()]
        )
        service = CategoryService(mock_db)

        await service.delete(category.category_id)

        mock_db.delete.assert_awaited_once_with(category)
        mock_db.commit.assert_awaited_once()
