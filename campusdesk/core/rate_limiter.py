"""
Rate Limiting for CampusDesk API
================================
slowapi limiter keyed by user id when known, otherwise client IP.

Storage defaults to in-process memory; point RATE_LIMIT_STORAGE_URI at
redis:// when running more than one worker.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from fastapi import Request
from fastapi.responses import JSONResponse

from campusdesk.core.config import settings
from campusdesk.core.logging_config import logger


def get_user_identifier(request: Request) -> str:
    """Rate limit key: authenticated user when known, else client IP"""
    user_id = getattr(request.state, 'user_id', None)
    if user_id:
        return f"user:{user_id}"
    return f"ip:{get_remote_address(request)}"


limiter = Limiter(
    key_func=get_user_identifier,
    default_limits=[f"{settings.RATE_LIMIT_PER_MINUTE}/minute"],
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    strategy="fixed-window",
    enabled=settings.RATE_LIMIT_ENABLED,
)


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    """Turn slowapi's exception into a 429 with a Retry-After header"""
    retry_after = exc.detail.split(":")[-1].strip() if exc.detail else "60"

    logger.warning(
        f"[RateLimit] Exceeded for {get_user_identifier(request)}: {exc.detail}"
    )

    return JSONResponse(
        status_code=429,
        content={
            "success": False,
            "error": {
                "code": "RATE_LIMIT_EXCEEDED",
                "message": "Too many requests. Please slow down.",
                "details": {"limit": str(exc.detail)},
            },
        },
        headers={"Retry-After": retry_after if retry_after.isdigit() else "60"}
    )


def auth_rate_limit():
    """Rate limit for auth endpoints"""
    return limiter.limit(
        f"{settings.RATE_LIMIT_LOGIN_PER_MINUTE}/minute",
        key_func=get_user_identifier
    )
