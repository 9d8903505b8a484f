"""Authentication and authorization dependencies."""

from typing import Annotated
from uuid import UUID

from fastapi import Depends, Header, Query

from src.backoffice.api.dependencies.services import AuthorizationGateDep, RoleAuthorityDep
from src.backoffice.core.exceptions import Forbidden, InvalidToken
from src.backoffice.core.logging import bind_account_context
from src.backoffice.models import Account, RoleLevel, Scope
from src.backoffice.services import Principal


def _bearer_token(authorization: str | None) -> str:
    if not authorization or not authorization.startswith("Bearer "):
        raise InvalidToken("Missing or invalid authorization header")
    token = authorization[7:].strip()
    if not token:
        raise InvalidToken("Missing or invalid authorization header")
    return token


async def get_current_account(
    gate: AuthorizationGateDep,
    authorization: Annotated[str | None, Header()] = None,
) -> Account:
    """Validate the bearer access token and return its active account."""
    account = await gate.authenticate(_bearer_token(authorization))
    bind_account_context(account.id, account.phone)
    return account


CurrentAccount = Annotated[Account, Depends(get_current_account)]


async def get_current_principal(
    account: CurrentAccount, gate: AuthorizationGateDep
) -> Principal:
    return await gate.principal_for(account)


CurrentPrincipal = Annotated[Principal, Depends(get_current_principal)]


async def require_superuser(account: CurrentAccount) -> Account:
    """Require a superuser for platform-wide administration."""
    if not account.is_superuser:
        raise Forbidden("Superuser privileges required")
    return account


SuperAccount = Annotated[Account, Depends(require_superuser)]


def get_request_scope(
    shop_id: Annotated[UUID | None, Query()] = None,
    warehouse_id: Annotated[UUID | None, Query()] = None,
) -> Scope:
    """Scope a request targets, from the ``shop_id``/``warehouse_id`` query params."""
    return Scope(shop_id=shop_id, warehouse_id=warehouse_id)


RequestScope = Annotated[Scope, Depends(get_request_scope)]


class RequireRoles:
    """Endpoint guard: the caller must hold one of ``roles`` at the request scope.

    Usage::

        @router.get("/staff")
        async def staff(account: Annotated[Account, Depends(RequireRoles(RoleLevel.OWNER))]):
            ...

    Superusers always pass.
    """

    def __init__(self, *roles: RoleLevel):
        self.roles = frozenset(roles)

    async def __call__(
        self,
        account: CurrentAccount,
        scope: RequestScope,
        authority: RoleAuthorityDep,
    ) -> Account:
        await authority.ensure_grant(account, self.roles, scope)
        return account


ScopeAdmin = Annotated[Account, Depends(RequireRoles(RoleLevel.OWNER, RoleLevel.MANAGER))]
