"""Staff invite endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Query, status

from src.backoffice.api.dependencies import (
    CurrentAccount,
    InviteServiceDep,
    RequestScope,
    ScopeAdmin,
)
from src.backoffice.models import InviteStatus, Scope
from src.backoffice.schemas import (
    InviteAcceptResponse,
    InviteCreateRequest,
    InviteListResponse,
    InviteRead,
    InviteStatsRead,
    PaginatedResponse,
)

router = APIRouter(prefix="/invites", tags=["invites"])


# =============================================================================
# Scope administration (owners and managers)
# =============================================================================


@router.post(
    "",
    response_model=InviteRead,
    status_code=status.HTTP_201_CREATED,
    responses={
        403: {"description": "Creator may not hand out this role here"},
        409: {"description": "A pending invite or an active grant already exists"},
        422: {"description": "Scope does not fit the role"},
    },
)
async def create_invite(
    data: InviteCreateRequest, creator: CurrentAccount, service: InviteServiceDep
) -> InviteRead:
    """Invite a phone number to join a shop or warehouse with a role."""
    invite = await service.create_invite(
        creator,
        data.phone,
        data.role,
        Scope(shop_id=data.shop_id, warehouse_id=data.warehouse_id),
        email=data.email,
    )
    return InviteRead.model_validate(invite)


@router.get("", response_model=PaginatedResponse[InviteRead])
async def list_invites(
    _: ScopeAdmin,
    scope: RequestScope,
    service: InviteServiceDep,
    invite_status: Annotated[InviteStatus | None, Query(alias="status")] = None,
    cursor: str | None = None,
    limit: Annotated[int, Query(ge=1, le=100)] = 50,
) -> PaginatedResponse[InviteRead]:
    """Invites of a shop (``shop_id`` required), newest first."""
    invites, next_cursor, has_more = await service.list_scope_invites(
        scope, invite_status, cursor, limit
    )
    return PaginatedResponse[InviteRead](
        items=[InviteRead.model_validate(invite) for invite in invites],
        next_cursor=next_cursor,
        has_more=has_more,
    )


@router.get("/stats", response_model=InviteStatsRead)
async def invite_stats(
    _: ScopeAdmin, scope: RequestScope, service: InviteServiceDep
) -> InviteStatsRead:
    stats = await service.invite_stats(scope)
    return InviteStatsRead(
        total=stats.total,
        by_status=stats.by_status,
        by_role=stats.by_role,
        average_acceptance_seconds=stats.average_acceptance_seconds,
    )


# =============================================================================
# Invitee endpoints
# =============================================================================


@router.get("/pending", response_model=InviteListResponse)
async def list_my_pending_invites(
    account: CurrentAccount, service: InviteServiceDep
) -> InviteListResponse:
    """Pending invites addressed to the caller's phone number."""
    invites = await service.list_pending_for_account(account)
    return InviteListResponse(
        invites=[InviteRead.model_validate(invite) for invite in invites],
        total=len(invites),
    )


@router.get("/{invite_id}", response_model=InviteRead)
async def get_invite(
    invite_id: UUID, account: CurrentAccount, service: InviteServiceDep
) -> InviteRead:
    invite = await service.get_invite(invite_id, account)
    return InviteRead.model_validate(invite)


@router.post(
    "/{invite_id}/accept",
    response_model=InviteAcceptResponse,
    responses={
        403: {"description": "Invite is addressed to another phone number"},
        409: {"description": "Invite is no longer pending, or the role is already held"},
    },
)
async def accept_invite(
    invite_id: UUID, account: CurrentAccount, service: InviteServiceDep
) -> InviteAcceptResponse:
    """Accept an invite and receive its role grant."""
    invite, grant = await service.accept_invite(invite_id, account)
    return InviteAcceptResponse(invite=InviteRead.model_validate(invite), grant_id=grant.id)


@router.post("/{invite_id}/reject", response_model=InviteRead)
async def reject_invite(
    invite_id: UUID, account: CurrentAccount, service: InviteServiceDep
) -> InviteRead:
    invite = await service.reject_invite(invite_id, account)
    return InviteRead.model_validate(invite)


@router.post("/{invite_id}/cancel", response_model=InviteRead)
async def cancel_invite(
    invite_id: UUID, actor: CurrentAccount, service: InviteServiceDep
) -> InviteRead:
    """Withdraw a pending invite. Creator, superuser, or a delegator at its scope."""
    invite = await service.cancel_invite(invite_id, actor)
    return InviteRead.model_validate(invite)
