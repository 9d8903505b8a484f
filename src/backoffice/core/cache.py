"""Revoked refresh-token cache.

Rotated and logged-out refresh tokens are remembered in Redis until they would
have expired anyway. The database stays authoritative: a ``None`` answer means
"ask the database".
"""

from collections.abc import Iterable

from src.backoffice.core.redis import get_redis

PREFIX_REVOKED_REFRESH = "revoked_refresh"


def _key(token_hash: str) -> str:
    return f"{PREFIX_REVOKED_REFRESH}:{token_hash}"


async def remember_revoked(token_hash: str, ttl: int) -> bool:
    """Cache a revoked token hash. Returns False when Redis is unavailable."""
    redis = await get_redis()
    if not redis or ttl <= 0:
        return False
    await redis.setex(_key(token_hash), ttl, "1")
    return True


async def remember_revoked_many(tokens_with_ttls: Iterable[tuple[str, int]]) -> int:
    """Cache several revoked hashes in one pipeline. Returns how many were written."""
    redis = await get_redis()
    if not redis:
        return 0

    pipe = redis.pipeline()
    written = 0
    for token_hash, ttl in tokens_with_ttls:
        if ttl > 0:
            pipe.setex(_key(token_hash), ttl, "1")
            written += 1
    if written:
        await pipe.execute()
    return written


async def is_revoked(token_hash: str) -> bool | None:
    """True/False when Redis answered, None when the caller must check the database."""
    redis = await get_redis()
    if not redis:
        return None
    return await redis.exists(_key(token_hash)) > 0
