"""Seed data script for development.

Creates:
- 1 admin + SEED_USER_COUNT regular users
- 1 category: Electronics
- SEED_PRODUCT_COUNT sample products in that category (no images)

Environment Variables:
    SEED_USER_COUNT: Number of regular users (default: 10)
    SEED_PRODUCT_COUNT: Number of sample products (default: 5)

Usage:
    cd backend && uv run python -m scripts.seed_data
"""

import asyncio
import os
import random
import uuid

SEED_USER_COUNT = int(os.getenv("SEED_USER_COUNT", "10"))
SEED_PRODUCT_COUNT = int(os.getenv("SEED_PRODUCT_COUNT", "5"))

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.core.database import async_session_maker, engine
from catalog.core.exceptions import DuplicateError
from catalog.core.security import get_password_hash
from catalog.domain.product import Product
from catalog.models import Category, User
from catalog.repositories.product_repository import SqlProductRepository
from catalog.services.category_service import slugify


async def seed_users(session: AsyncSession) -> None:
    """Create the admin (admin@test.com / admin123) and regular users.

    Regular users: user0001@test.com ... with password password123.
    """
    print("Seeding users...")

    result = await session.execute(select(User).limit(1))
    if result.scalar_one_or_none():
        print("  Users already exist, skipping...")
        return

    users = [
        User(
            email="admin@test.com",
            password_hash=get_password_hash("admin123"),
            name="admin",
            role="admin",
            status="active",
        )
    ]
    print("  Created admin: admin@test.com / admin123")

    password_hash = get_password_hash("password123")
    for i in range(1, SEED_USER_COUNT + 1):
        users.append(
            User(
                email=f"user{i:04d}@test.com",
                password_hash=password_hash,
                name=f"user{i:04d}",
                role="user",
                status="active",
            )
        )

    session.add_all(users)
    await session.commit()
    print(f"  Created {len(users)} users")


async def seed_category(session: AsyncSession) -> Category:
    print("Seeding category...")

    result = await session.execute(select(Category).where(Category.name == "Electronics"))
    category = result.scalar_one_or_none()
    if category:
        print("  Category already exists, skipping...")
        return category

    category = Category(
        name="Electronics",
        description="Phones, audio and accessories",
        slug=slugify("Electronics"),
        status="active",
    )
    session.add(category)
    await session.commit()
    await session.refresh(category)
    print(f"  Created category: {category.name} ({category.slug})")
    return category


async def seed_products(session: AsyncSession, category: Category) -> int:
    print("Seeding products...")

    repository = SqlProductRepository(session)
    created = 0
    for i in range(1, SEED_PRODUCT_COUNT + 1):
        sku = f"ELEC-{i:04d}"
        product = Product(
            product_id=uuid.uuid4(),
            sku=sku,
            name=f"Wireless Headphones Model {i}",
            description="Over-ear noise cancelling headphones",
            price=float(random.choice([79, 129, 199, 249])),
            category_id=category.category_id,
            discount=float(random.choice([0, 10, 25])),
            quantity=random.randint(0, 50),
            features=["bluetooth", "noise cancelling"],
        )
        try:
            await repository.create(product)
            created += 1
        except DuplicateError as e:
            print(f"  Skipped {sku}: {e}")

    print(f"  Created {created} products")
    return created


async def main():
    print("=" * 60)
    print("Product Catalog - Seed Data Script")
    print("=" * 60)

    async with async_session_maker() as session:
        await seed_users(session)
        category = await seed_category(session)
        await seed_products(session, category)

    print("=" * 60)
    print("Seed data complete!")
    print("=" * 60)

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
