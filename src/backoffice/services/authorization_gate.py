"""Per-request guard: token verification followed by a scoped role check."""

from collections.abc import Iterable
from dataclasses import dataclass, field
from uuid import UUID

from src.backoffice.core.exceptions import Forbidden, InvalidToken
from src.backoffice.core.security import verify_access_token
from src.backoffice.models import Account, RoleGrant, RoleLevel, Scope
from src.backoffice.repositories import AccountRepository
from src.backoffice.services.role_authority import RoleAuthority


@dataclass(frozen=True)
class Principal:
    """The caller as other modules see it."""

    account_id: UUID
    phone: str
    is_super: bool
    active_roles: tuple[RoleGrant, ...] = field(default_factory=tuple)


class AuthorizationGate:
    def __init__(self, account_repo: AccountRepository, authority: RoleAuthority):
        self.account_repo = account_repo
        self.authority = authority

    async def authenticate(self, token: str) -> Account:
        """Resolve an access token to its active account.

        Every failure is the same InvalidToken, whether the signature was bad
        or the account is gone.
        """
        claims = verify_access_token(token)
        account = await self.account_repo.get_by_id(claims.account_id)
        if account is None or not account.is_active:
            raise InvalidToken()
        return account

    async def current_principal(self, token: str) -> Principal:
        account = await self.authenticate(token)
        return await self.principal_for(account)

    async def principal_for(self, account: Account) -> Principal:
        grants = await self.authority.list_account_grants(account.id)
        return Principal(
            account_id=account.id,
            phone=account.phone,
            is_super=account.is_superuser,
            active_roles=tuple(grants),
        )

    async def authorize(
        self, account: Account, allowed_roles: Iterable[RoleLevel], scope: Scope
    ) -> None:
        """Raise Forbidden unless the account holds an allowed role covering ``scope``."""
        if not await self.authority.has_grant(account, allowed_roles, scope):
            raise Forbidden("Insufficient role for this shop or warehouse")
