"""Integration test fixtures for database, service and HTTP client operations.

Each test gets its own SQLite database file, created from the model metadata.
Services share the test's session so assertions see what they committed.
"""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.pool import NullPool
from sqlmodel import SQLModel

import src.backoffice.models  # noqa: F401 - registers tables on the metadata
from src.backoffice.api.dependencies import get_db_session, get_notifier
from src.backoffice.core import db
from src.backoffice.core import redis as redis_core
from src.backoffice.core.db import get_session
from src.backoffice.main import app, reset_health_cache
from src.backoffice.repositories import (
    AccountRepository,
    InviteRepository,
    OneTimeCodeRepository,
    RefreshTokenRepository,
    RoleGrantRepository,
)
from src.backoffice.services import (
    AccountService,
    AuthorizationGate,
    InviteService,
    OneTimeCodeService,
    RoleAuthority,
    TokenService,
)
from tests.helpers import FakeNotifier, FrozenClock


@pytest.fixture(autouse=True)
async def _reset_redis_between_tests() -> AsyncGenerator[None]:
    """Reset Redis state between tests.

    Redis clients hold references to their event loop, and pytest creates a new
    loop for each test.
    """
    redis_core.reset_redis_state()
    yield
    await redis_core.close_redis()


@pytest.fixture
async def engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine]:
    """Fresh database with every table created."""
    test_engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'backoffice.db'}", poolclass=NullPool
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield test_engine
    await test_engine.dispose()


@pytest.fixture
async def db_session(engine: AsyncEngine) -> AsyncGenerator[AsyncSession]:
    """Provide an async session for database operations.

    IMPORTANT: Test helpers only flush. Commit before calling a service that is
    expected to fail: services roll back on every error, which would discard
    uncommitted test data and expire loaded objects.
    """
    async with AsyncSession(engine, expire_on_commit=False, autoflush=False) as session:
        yield session


# --- Services on the test session ---


@pytest.fixture
def account_repo(db_session: AsyncSession) -> AccountRepository:
    return AccountRepository(db_session)


@pytest.fixture
def authority(db_session: AsyncSession, clock: FrozenClock) -> RoleAuthority:
    return RoleAuthority(
        RoleGrantRepository(db_session), AccountRepository(db_session), db_session, clock
    )


@pytest.fixture
def otp_service(
    db_session: AsyncSession, notifier: FakeNotifier, clock: FrozenClock
) -> OneTimeCodeService:
    return OneTimeCodeService(
        OneTimeCodeRepository(db_session),
        AccountRepository(db_session),
        db_session,
        notifier,
        clock,
    )


@pytest.fixture
def token_service(db_session: AsyncSession, clock: FrozenClock) -> TokenService:
    return TokenService(
        RefreshTokenRepository(db_session), AccountRepository(db_session), db_session, clock
    )


@pytest.fixture
def account_service(
    db_session: AsyncSession, token_service: TokenService, clock: FrozenClock
) -> AccountService:
    return AccountService(AccountRepository(db_session), token_service, db_session, clock)


@pytest.fixture
def invite_service(
    db_session: AsyncSession,
    authority: RoleAuthority,
    notifier: FakeNotifier,
    clock: FrozenClock,
) -> InviteService:
    return InviteService(
        InviteRepository(db_session),
        RoleGrantRepository(db_session),
        authority,
        db_session,
        notifier,
        clock,
    )


@pytest.fixture
def gate(account_repo: AccountRepository, authority: RoleAuthority) -> AuthorizationGate:
    return AuthorizationGate(account_repo, authority)


# --- HTTP ---


@pytest.fixture
async def client(engine: AsyncEngine, notifier: FakeNotifier) -> AsyncGenerator[AsyncClient]:
    """HTTP client against the app, bound to the test database and notifier."""

    async def _test_session() -> AsyncGenerator[AsyncSession]:
        async with get_session(engine) as session:
            yield session

    app.dependency_overrides[get_db_session] = _test_session
    app.dependency_overrides[get_notifier] = lambda: notifier
    reset_health_cache()

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
    reset_health_cache()
    await db.dispose_engine()
