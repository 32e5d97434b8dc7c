# backend/app/middleware/rate_limit.py
"""
Per-IP fixed-window rate limiting backed by Redis.

Counters live under rl:ip:{ip} with a window-long TTL. When Redis is
unreachable the request is let through (fail open): the limiter protects
capacity, it is not part of booking correctness.
"""

import logging
from typing import Optional

from fastapi import Request
from fastapi.responses import JSONResponse

from ..config import settings
from ..redis_client import redis_client

logger = logging.getLogger(__name__)

WINDOW_SECONDS = 60
EXEMPT_PATHS = {"/health", "/docs", "/openapi.json"}


def check_limit(key: str, limit: int, window: int) -> tuple[bool, Optional[int]]:
    """
    Count one hit against `key`. Returns (allowed, retry_after).

    limit <= 0 disables the check.
    """
    if limit <= 0:
        return True, None

    try:
        pipe = redis_client.pipeline()
        pipe.incr(key)
        pipe.ttl(key)
        count, ttl = pipe.execute()

        if ttl == -1:
            redis_client.expire(key, window)
            ttl = window

        if count > limit:
            return False, ttl

        return True, None

    except Exception as e:
        logger.error(f"Rate limit check failed: {e}")
        return True, None  # fail open


def client_ip(request: Request) -> str:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.headers.get("X-Real-IP") or (request.client.host if request.client else "unknown")


async def rate_limit_middleware(request: Request, call_next):
    if not settings.rate_limit_enabled or request.url.path in EXEMPT_PATHS:
        return await call_next(request)

    ip = client_ip(request)
    allowed, retry = check_limit(f"rl:ip:{ip}", settings.rate_limit_per_minute, WINDOW_SECONDS)
    if not allowed:
        logger.warning(f"Rate limit exceeded for {ip} on {request.url.path}")
        return JSONResponse(
            status_code=429,
            content={"detail": "Rate limit exceeded", "code": "RATE_LIMIT_EXCEEDED"},
            headers={"Retry-After": str(retry or WINDOW_SECONDS)},
        )

    return await call_next(request)
