"""Account profile and administration."""

from collections.abc import Callable
from datetime import datetime
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.backoffice.core.exceptions import Conflict, IdentityError, NotFound
from src.backoffice.core.logging import get_logger
from src.backoffice.core.phone import normalize_phone
from src.backoffice.models import Account, utc_now
from src.backoffice.repositories import AccountRepository
from src.backoffice.schemas.account import AccountCreate, AccountUpdate
from src.backoffice.services.token_service import TokenService

logger = get_logger(__name__)


class AccountService:
    def __init__(
        self,
        account_repo: AccountRepository,
        token_service: TokenService,
        session: AsyncSession,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.account_repo = account_repo
        self.token_service = token_service
        self.session = session
        self.clock = clock

    async def get_by_id(self, account_id: UUID) -> Account | None:
        return await self.account_repo.get_by_id(account_id)

    async def get_by_phone(self, phone: str) -> Account | None:
        return await self.account_repo.get_by_phone(normalize_phone(phone))

    async def create_account(self, data: AccountCreate) -> Account:
        """Create an account ahead of its first login (superuser only).

        Raises:
            Conflict: The phone already has an account.
        """
        try:
            if await self.account_repo.get_by_phone(data.phone) is not None:
                raise Conflict("An account with this phone already exists")

            now = self.clock()
            account = Account(
                phone=data.phone,
                first_name=data.first_name,
                last_name=data.last_name,
                email=data.email,
                is_superuser=data.is_superuser,
                created_at=now,
                updated_at=now,
            )
            self.account_repo.add(account)
            await self.session.flush()
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            raise Conflict("An account with this phone already exists") from e
        except IdentityError:
            await self.session.rollback()
            raise

        logger.info("Account created", account_id=str(account.id), is_superuser=data.is_superuser)
        return account

    async def update_profile(self, account: Account, data: AccountUpdate) -> Account:
        """Apply profile changes.

        Only the fields declared on AccountUpdate can change; phone, activity
        and superuser status are not reachable from here.
        """
        changes = data.model_dump(exclude_unset=True)
        try:
            for field, value in changes.items():
                setattr(account, field, value)
            account.updated_at = self.clock()
            self.account_repo.add(account)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info("Profile updated", account_id=str(account.id), fields=sorted(changes))
        return account

    async def deactivate(self, account_id: UUID, actor: Account) -> Account:
        """Deactivate an account and revoke its refresh tokens.

        Raises:
            NotFound: No such account.
            Conflict: An account cannot deactivate itself.
        """
        try:
            account = await self.account_repo.get_by_id(account_id)
            if account is None:
                raise NotFound("Account not found")
            if account.id == actor.id:
                raise Conflict("Cannot deactivate your own account")

            if account.is_active:
                now = self.clock()
                account.is_active = False
                account.deactivated_at = now
                account.updated_at = now
                self.account_repo.add(account)
            await self.session.commit()
        except IdentityError:
            await self.session.rollback()
            raise

        revoked = await self.token_service.revoke_all_for_account(account.id)
        logger.info(
            "Account deactivated",
            account_id=str(account.id),
            deactivated_by=str(actor.id),
            revoked_tokens=revoked,
        )
        return account
