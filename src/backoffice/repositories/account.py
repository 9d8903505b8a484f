"""Repository for Account entity."""

from sqlmodel import select

from src.backoffice.models import Account
from src.backoffice.repositories.base import BaseRepository


class AccountRepository(BaseRepository[Account]):
    model = Account

    async def get_by_phone(self, phone: str) -> Account | None:
        """Get account by canonical phone identity."""
        result = await self.session.execute(select(Account).where(Account.phone == phone))
        return result.scalar_one_or_none()
