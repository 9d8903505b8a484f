"""Per-endpoint rate limiting for the public authentication endpoints.

Uses Redis for shared counters when REDIS_URL is configured, otherwise an
in-process store. Disabled in the testing environment.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette.requests import Request

from src.backoffice.core.config import get_settings
from src.backoffice.core.logging import get_logger

logger = get_logger(__name__)

# Applied to the public code and token endpoints
CODE_REQUEST_LIMIT = "3/minute"
CODE_VERIFY_LIMIT = "10/minute"
TOKEN_REFRESH_LIMIT = "30/minute"


def get_rate_limit_key(request: Request) -> str:
    """Key on client IP only.

    Never key on request bodies or headers the client controls: rotating phone
    numbers would otherwise open a fresh bucket per request.
    """
    return get_remote_address(request) or "unknown"


def create_limiter() -> Limiter:
    settings = get_settings()

    if settings.app_env == "testing":
        return Limiter(key_func=get_rate_limit_key, enabled=False)

    if settings.redis_url:
        logger.info("Rate limiter using Redis backend")
        return Limiter(key_func=get_rate_limit_key, storage_uri=settings.redis_url)

    logger.info("Rate limiter using in-memory backend (not distributed)")
    return Limiter(key_func=get_rate_limit_key)


limiter = create_limiter()
