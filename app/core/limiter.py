# File: app/core/limiter.py

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from app.core.config import settings

# Requests are counted per client address; counters live in Redis unless
# RATE_LIMIT_STORAGE_URI points elsewhere (memory:// for tests)
limiter = Limiter(
    key_func=get_remote_address,
    storage_uri=settings.rate_limit_storage_uri,
    default_limits=[settings.default_rate_limit],
    enabled=settings.rate_limit_enabled,
)


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    """Answer throttled requests with the usual {message} error body."""
    return JSONResponse(
        status_code=429,
        content={
            "message": f"Too many requests, please try again later ({exc.detail})",
        },
    )
