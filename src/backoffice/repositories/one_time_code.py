"""Repository for OneTimeCode entity."""

from datetime import datetime

from sqlalchemy import delete
from sqlmodel import select

from src.backoffice.models import OneTimeCode
from src.backoffice.repositories.base import BaseRepository


class OneTimeCodeRepository(BaseRepository[OneTimeCode]):
    model = OneTimeCode

    async def get_active(
        self, phone: str, now: datetime, for_update: bool = False
    ) -> OneTimeCode | None:
        """Get the unused, unexpired code for a phone.

        Args:
            for_update: Lock the row so concurrent verifications serialize.
        """
        query = select(OneTimeCode).where(
            OneTimeCode.phone == phone,
            OneTimeCode.is_used == False,  # noqa: E712
            OneTimeCode.expires_at > now,
        )
        if for_update:
            query = query.with_for_update()
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def purge_expired(self, phone: str, now: datetime) -> int:
        """Delete every expired code for a phone. Returns the number deleted."""
        result = await self.session.execute(
            delete(OneTimeCode).where(
                OneTimeCode.phone == phone,  # type: ignore[arg-type]
                OneTimeCode.expires_at <= now,  # type: ignore[arg-type]
            )
        )
        return result.rowcount or 0  # type: ignore[attr-defined]

    async def mark_used(self, code: OneTimeCode, now: datetime) -> OneTimeCode:
        code.is_used = True
        code.used_at = now
        self.session.add(code)
        await self.session.flush()
        return code

    async def record_failed_attempt(
        self, code: OneTimeCode, max_attempts: int, now: datetime
    ) -> OneTimeCode:
        """Count a wrong guess; burn the code once ``max_attempts`` is reached."""
        code.attempts += 1
        if code.attempts >= max_attempts:
            code.is_used = True
            code.used_at = now
        self.session.add(code)
        await self.session.flush()
        return code
