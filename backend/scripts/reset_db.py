"""Reset database and cache to an empty state.

Clears products, categories and users, then flushes the Redis database
(product cache and rate limit windows). Remote images are not touched.

Usage:
    cd backend && uv run python -m scripts.reset_db
"""

import asyncio

from redis.exceptions import RedisError
from sqlalchemy import text

from catalog.core.database import async_session_maker, engine
from catalog.core.redis import close_redis, get_redis

# Children before parents
TABLES = ["products", "categories", "users"]


async def reset_database():
    print("Resetting database...")

    async with async_session_maker() as session:
        for table in TABLES:
            result = await session.execute(text(f"DELETE FROM {table}"))
            print(f"  Deleted {result.rowcount} rows from {table}")
        await session.commit()


async def reset_redis():
    print("Resetting Redis...")

    try:
        redis = await get_redis()
        await redis.flushdb()
        print("  Redis flushed")
    except RedisError as e:
        print(f"  Warning: Could not clear Redis: {e}")
    finally:
        await close_redis()


async def main():
    await reset_database()
    await reset_redis()
    print("Reset complete. Re-seed with: uv run python -m scripts.seed_data")
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
