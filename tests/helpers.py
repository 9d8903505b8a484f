"""Test helper functions for common data creation patterns."""

from datetime import datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from src.backoffice.core.security import create_access_token
from src.backoffice.models import Account, Invite, RoleGrant, RoleLevel, Scope
from tests.factories import AccountFactory, InviteFactory, RoleGrantFactory


async def create_account(session: AsyncSession, **account_kwargs) -> Account:
    """Create and flush an account."""
    account = AccountFactory.build(**account_kwargs)
    session.add(account)
    await session.flush()
    return account


async def create_superuser(session: AsyncSession, **account_kwargs) -> Account:
    return await create_account(session, is_superuser=True, **account_kwargs)


async def create_staff(
    session: AsyncSession,
    role: RoleLevel,
    scope: Scope,
    **account_kwargs,
) -> tuple[Account, RoleGrant]:
    """Create an account holding one active grant.

    Returns:
        Tuple of (account, grant)
    """
    account = await create_account(session, **account_kwargs)
    grant = await create_grant(session, account, role, scope)
    return account, grant


async def create_grant(
    session: AsyncSession, account: Account, role: RoleLevel, scope: Scope, **grant_kwargs
) -> RoleGrant:
    grant = RoleGrantFactory.for_scope(account.id, role, scope, **grant_kwargs)
    session.add(grant)
    await session.flush()
    return grant


async def create_invite(
    session: AsyncSession,
    creator: Account,
    role: RoleLevel,
    scope: Scope,
    **invite_kwargs,
) -> Invite:
    """Create a PENDING invite directly, bypassing the delegation checks."""
    invite = InviteFactory.for_scope(creator.id, role, scope, **invite_kwargs)
    session.add(invite)
    await session.flush()
    return invite


def auth_headers(account: Account) -> dict[str, str]:
    """Bearer header with a fresh access token for ``account``."""
    token = create_access_token(account.id, account.phone, account.is_superuser)
    return {"Authorization": f"Bearer {token}"}


# --- Collaborators ---


class FakeNotifier:
    """Records outbound messages instead of sending them."""

    def __init__(self) -> None:
        self.codes: list[tuple[str, str]] = []
        self.invites: list[tuple[str, str, str | None]] = []
        self.fail = False

    async def send_code(self, phone: str, code: str) -> bool:
        if self.fail:
            return False
        self.codes.append((phone, code))
        return True

    async def send_invite(self, phone: str, role: str, inviter_name: str | None) -> bool:
        if self.fail:
            return False
        self.invites.append((phone, role, inviter_name))
        return True

    def last_code(self, phone: str) -> str:
        return next(code for sent_to, code in reversed(self.codes) if sent_to == phone)


class FrozenClock:
    """Injectable clock that only moves when told to."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)
