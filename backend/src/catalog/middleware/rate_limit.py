"""Sliding-window rate limiting middleware backed by a Redis Lua script."""

import hashlib
import logging
import random
import time
from typing import Callable

from fastapi import Request, Response
from redis.exceptions import RedisError
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

from catalog.core.redis import get_redis

logger = logging.getLogger(__name__)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Per-IP limit for every request, plus a per-token limit for bearer requests.

    When Redis is unreachable the request is let through.
    """

    # Prune, count and record in one atomic call
    RATE_LIMIT_SCRIPT = """
    local key = KEYS[1]
    local now = tonumber(ARGV[1])
    local window = tonumber(ARGV[2])
    local limit = tonumber(ARGV[3])
    local request_id = ARGV[4]

    redis.call('ZREMRANGEBYSCORE', key, 0, now - window)
    local count = redis.call('ZCARD', key)

    if count < limit then
        redis.call('ZADD', key, now, request_id)
        redis.call('EXPIRE', key, window + 1)
        return {1, 0}
    end

    local oldest = redis.call('ZRANGE', key, 0, 0, 'WITHSCORES')
    local retry_after = 1
    if oldest and #oldest >= 2 then
        retry_after = math.ceil(oldest[2] + window - now)
        if retry_after < 1 then retry_after = 1 end
    end
    return {0, retry_after}
    """

    EXEMPT_PATHS = ("/health", "/metrics")

    def __init__(self, app, user_limit: int = 10, ip_limit: int = 100, window: int = 1):
        super().__init__(app)
        self.user_limit = user_limit
        self.ip_limit = ip_limit
        self.window = window
        self._script = None

    def _get_script(self, redis):
        if self._script is None:
            self._script = redis.register_script(self.RATE_LIMIT_SCRIPT)
        return self._script

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path in self.EXEMPT_PATHS:
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        checks = [(f"ratelimit:ip:{client_ip}", self.ip_limit, "this IP")]

        auth_header = request.headers.get("Authorization", "")
        if auth_header.startswith("Bearer "):
            token_hash = hashlib.sha256(auth_header[7:].encode()).hexdigest()[:16]
            checks.append((f"ratelimit:user:{token_hash}", self.user_limit, "this user"))

        try:
            redis = await get_redis()
            for key, limit, subject in checks:
                allowed, retry_after = await self._check(redis, key, limit)
                if not allowed:
                    return JSONResponse(
                        status_code=429,
                        content={"detail": f"Too many requests from {subject}"},
                        headers={"Retry-After": str(retry_after)},
                    )
        except RedisError as e:
            logger.warning(f"Rate limiter unavailable, allowing request: {e}")

        return await call_next(request)

    async def _check(self, redis, key: str, limit: int) -> tuple[bool, int]:
        """Run the sliding-window script for one key.

        Returns:
            Tuple of (allowed, retry_after_seconds)
        """
        now = time.time()
        request_id = f"{now}:{random.randint(0, 999999)}"
        result = await self._get_script(redis)(
            keys=[key],
            args=[now, self.window, limit, request_id],
        )
        return bool(result[0]), int(result[1])
