"""Repository for RefreshToken entity."""

from datetime import datetime
from uuid import UUID

from sqlalchemy import update
from sqlmodel import select

from src.backoffice.models import RefreshToken
from src.backoffice.models.base import utc_now
from src.backoffice.repositories.base import BaseRepository


class RefreshTokenRepository(BaseRepository[RefreshToken]):
    model = RefreshToken

    async def get_by_hash(self, token_hash: str) -> RefreshToken | None:
        result = await self.session.execute(
            select(RefreshToken).where(RefreshToken.token_hash == token_hash)
        )
        return result.scalar_one_or_none()

    async def get_valid_by_hash(
        self, token_hash: str, for_update: bool = False, now: datetime | None = None
    ) -> RefreshToken | None:
        """Get a non-revoked, non-expired token by hash.

        Args:
            for_update: Lock the row so two rotations of the same token cannot
                both succeed.
            now: Expiry reference; defaults to the current time.
        """
        query = select(RefreshToken).where(
            RefreshToken.token_hash == token_hash,
            RefreshToken.revoked == False,  # noqa: E712
            RefreshToken.expires_at > (now or utc_now()),
        )
        if for_update:
            query = query.with_for_update()
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def get_active_for_account(
        self, account_id: UUID, now: datetime | None = None
    ) -> list[RefreshToken]:
        result = await self.session.execute(
            select(RefreshToken).where(
                RefreshToken.account_id == account_id,
                RefreshToken.revoked == False,  # noqa: E712
                RefreshToken.expires_at > (now or utc_now()),
            )
        )
        return list(result.scalars().all())

    async def revoke(self, token: RefreshToken, now: datetime) -> RefreshToken:
        token.revoked = True
        token.revoked_at = now
        self.session.add(token)
        await self.session.flush()
        return token

    async def revoke_all_for_account(self, account_id: UUID, now: datetime) -> int:
        """Revoke every active token of an account. Returns the number revoked."""
        stmt = (
            update(RefreshToken)
            .where(RefreshToken.account_id == account_id)  # type: ignore[arg-type]
            .where(RefreshToken.revoked == False)  # type: ignore[arg-type]  # noqa: E712
            .values(revoked=True, revoked_at=now)
        )
        result = await self.session.execute(stmt)
        return result.rowcount or 0  # type: ignore[attr-defined]
