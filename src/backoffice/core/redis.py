"""Optional Redis client.

Redis only accelerates refresh-token revocation checks and backs the rate
limiter. When it is not configured or unreachable, ``get_redis`` returns None
and callers fall back to the database.
"""

from redis.asyncio import ConnectionPool, Redis

from src.backoffice.core.config import get_settings
from src.backoffice.core.logging import get_logger

logger = get_logger(__name__)

_pool: ConnectionPool | None = None
_redis: Redis | None = None
_connection_attempted: bool = False


async def get_redis() -> Redis | None:
    """Lazily connect once and reuse the client. Returns None if unavailable."""
    global _pool, _redis, _connection_attempted

    if _redis is not None:
        return _redis
    if _connection_attempted:
        return None

    _connection_attempted = True
    settings = get_settings()
    if not settings.redis_url:
        logger.info("Redis not configured (REDIS_URL not set)")
        return None

    try:
        _pool = ConnectionPool.from_url(
            settings.redis_url,
            max_connections=settings.redis_pool_size,
            decode_responses=True,
        )
        _redis = Redis(connection_pool=_pool)
        await _redis.ping()  # type: ignore[misc]
    except Exception as e:
        logger.warning("Redis connection failed, continuing without it", error=str(e))
        await close_redis()
        _connection_attempted = True
        return None

    logger.info("Redis connected")
    return _redis


async def close_redis() -> None:
    """Close the pool. Called on application shutdown."""
    global _pool, _redis, _connection_attempted

    if _redis is not None:
        await _redis.aclose()
    if _pool is not None:
        await _pool.disconnect()

    _redis = None
    _pool = None
    _connection_attempted = False


def reset_redis_state() -> None:
    """Forget the client without closing it (tests switch event loops)."""
    global _pool, _redis, _connection_attempted
    _redis = None
    _pool = None
    _connection_attempted = False
