"""Tests for the sliding-window rate limiting middleware."""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI
from redis.exceptions import ConnectionError as RedisConnectionError

from catalog.middleware.rate_limit import RateLimitMiddleware


def redis_with_script(script: AsyncMock) -> AsyncMock:
    redis = AsyncMock()
    redis.register_script = MagicMock(return_value=script)
    return redis


@pytest.fixture
def app() -> FastAPI:
    app = FastAPI()
    app.add_middleware(RateLimitMiddleware, user_limit=2, ip_limit=5)

    @app.get("/ping")
    async def ping():
        return {"ok": True}

    @app.get("/health")
    async def health():
        return {"status": "healthy"}

    return app


@pytest_asyncio.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.mark.asyncio
async def test_allowed_request_passes(client):
    script = AsyncMock(return_value=[1, 0])
    redis = redis_with_script(script)

    with patch("catalog.middleware.rate_limit.get_redis", AsyncMock(return_value=redis)):
        response = await client.get("/ping")

    assert response.status_code == 200
    script.assert_awaited_once()
    assert script.call_args.kwargs["keys"][0].startswith("ratelimit:ip:")


@pytest.mark.asyncio
async def test_limit_exceeded_returns_429(client):
    redis = redis_with_script(AsyncMock(return_value=[0, 3]))

    with patch("catalog.middleware.rate_limit.get_redis", AsyncMock(return_value=redis)):
        response = await client.get("/ping")

    assert response.status_code == 429
    assert response.headers["Retry-After"] == "3"
    assert response.json()["detail"] == "Too many requests from this IP"


@pytest.mark.asyncio
async def test_bearer_token_checked_against_user_limit(client):
    script = AsyncMock(side_effect=[[1, 0], [0, 1]])
    redis = redis_with_script(script)

    with patch("catalog.middleware.rate_limit.get_redis", AsyncMock(return_value=redis)):
        response = await client.get("/ping", headers={"Authorization": "Bearer abc"})

    assert response.status_code == 429
    assert response.json()["detail"] == "Too many requests from this user"
    user_call = script.call_args_list[1].kwargs
    assert user_call["keys"][0].startswith("ratelimit:user:")
    assert user_call["args"][2] == 2


@pytest.mark.asyncio
async def test_redis_outage_lets_request_through(client):
    redis = redis_with_script(AsyncMock(side_effect=RedisConnectionError("connection refused")))

    with patch("catalog.middleware.rate_limit.get_redis", AsyncMock(return_value=redis)):
        response = await client.get("/ping")

    assert response.status_code == 200
    assert response.json() == {"ok": True}


@pytest.mark.asyncio
async def test_health_is_exempt(client):
    get_redis = AsyncMock()

    with patch("catalog.middleware.rate_limit.get_redis", get_redis):
        response = await client.get("/health")

    assert response.status_code == 200
    get_redis.assert_not_awaited()
