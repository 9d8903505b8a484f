"""Role grant endpoints."""

from uuid import UUID

from fastapi import APIRouter, Query, status

from src.backoffice.api.dependencies import (
    CurrentAccount,
    RequestScope,
    RoleAuthorityDep,
    ScopeAdmin,
)
from src.backoffice.models import Scope
from src.backoffice.schemas import GrantCreate, GrantListResponse, GrantRead

router = APIRouter(prefix="/grants", tags=["grants"])


@router.post(
    "",
    response_model=GrantRead,
    status_code=status.HTTP_201_CREATED,
    responses={
        403: {"description": "Actor may not hand out this role here"},
        409: {"description": "Account already holds this role here"},
        422: {"description": "Scope does not fit the role"},
    },
)
async def create_grant(
    data: GrantCreate, actor: CurrentAccount, authority: RoleAuthorityDep
) -> GrantRead:
    """Grant a role directly, under the same delegation rules as invites."""
    scope = Scope(shop_id=data.shop_id, warehouse_id=data.warehouse_id)
    grant = await authority.grant_role(actor, data.account_id, data.role, scope)
    return GrantRead.model_validate(grant)


@router.get("/me", response_model=GrantListResponse)
async def list_my_grants(
    account: CurrentAccount, authority: RoleAuthorityDep
) -> GrantListResponse:
    grants = await authority.list_account_grants(account.id)
    return GrantListResponse(
        grants=[GrantRead.model_validate(grant) for grant in grants], total=len(grants)
    )


@router.get("", response_model=GrantListResponse)
async def list_scope_grants(
    _: ScopeAdmin,
    scope: RequestScope,
    authority: RoleAuthorityDep,
    include_inactive: bool = Query(False),
) -> GrantListResponse:
    """Staff of a shop or warehouse. Owners and managers of the scope only."""
    grants = await authority.list_scope_grants(scope, include_inactive)
    return GrantListResponse(
        grants=[GrantRead.model_validate(grant) for grant in grants], total=len(grants)
    )


@router.delete("/{grant_id}", response_model=GrantRead)
async def revoke_grant(
    grant_id: UUID, actor: CurrentAccount, authority: RoleAuthorityDep
) -> GrantRead:
    """Deactivate a grant. Revoking an already inactive grant changes nothing."""
    grant = await authority.revoke_grant(grant_id, actor)
    return GrantRead.model_validate(grant)
