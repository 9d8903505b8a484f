"""Root test fixtures shared across all test types.

Service and HTTP fixtures live in tests/integration/conftest.py.
"""

import os

# Environment must be in place before any application import
os.environ.setdefault("APP_ENV", "testing")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("ACCESS_TOKEN_SECRET", "test-access-secret-0123456789abcdef0123456789")
os.environ.setdefault("REFRESH_TOKEN_SECRET", "test-refresh-secret-fedcba9876543210fedcba987")
os.environ.setdefault("REFRESH_COOKIE_SECURE", "false")

# ruff: noqa: E402 - Imports must be after env var setup
from collections.abc import AsyncGenerator

import pytest
from fakeredis import aioredis as fakeredis_aio
from redis.asyncio import Redis

from src.backoffice.core import redis as redis_core
from src.backoffice.core.config import get_settings
from src.backoffice.models import utc_now
from tests.helpers import FakeNotifier, FrozenClock

# Clear settings cache to ensure test environment variables are picked up
get_settings.cache_clear()


@pytest.fixture
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(utc_now())


# --- Redis Test Fixtures (shared) ---


@pytest.fixture
async def fake_redis() -> AsyncGenerator[Redis]:
    """In-memory Redis that needs no server."""
    client = fakeredis_aio.FakeRedis(decode_responses=True)
    yield client
    await client.aclose()


@pytest.fixture
async def mock_redis(fake_redis: Redis, monkeypatch: pytest.MonkeyPatch) -> AsyncGenerator[Redis]:
    """Patches get_redis() to return the fakeredis client.

    Patches both src.backoffice.core.redis and src.backoffice.core.cache so the
    fake is used everywhere.
    """
    redis_core.reset_redis_state()

    async def _get_fake_redis() -> Redis:
        return fake_redis

    monkeypatch.setattr("src.backoffice.core.redis.get_redis", _get_fake_redis)
    monkeypatch.setattr("src.backoffice.core.cache.get_redis", _get_fake_redis)
    yield fake_redis
    redis_core.reset_redis_state()


@pytest.fixture
async def mock_redis_unavailable(monkeypatch: pytest.MonkeyPatch) -> AsyncGenerator[None]:
    """Patches get_redis() to return None (Redis not configured or down)."""
    redis_core.reset_redis_state()

    async def _get_none() -> None:
        return None

    monkeypatch.setattr("src.backoffice.core.redis.get_redis", _get_none)
    monkeypatch.setattr("src.backoffice.core.cache.get_redis", _get_none)
    yield
    redis_core.reset_redis_state()
