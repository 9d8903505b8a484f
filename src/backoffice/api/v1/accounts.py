"""Account endpoints: own profile and superuser administration."""

from uuid import UUID

from fastapi import APIRouter, status

from src.backoffice.api.dependencies import AccountServiceDep, CurrentAccount, SuperAccount
from src.backoffice.core.exceptions import NotFound
from src.backoffice.schemas import AccountCreate, AccountRead, AccountUpdate

router = APIRouter(prefix="/accounts", tags=["accounts"])


@router.get("/me", response_model=AccountRead)
async def get_me(account: CurrentAccount) -> AccountRead:
    return AccountRead.model_validate(account)


@router.patch("/me", response_model=AccountRead)
async def update_me(
    data: AccountUpdate, account: CurrentAccount, service: AccountServiceDep
) -> AccountRead:
    """Update own name and contact email. Phone and roles are not editable here."""
    account = await service.update_profile(account, data)
    return AccountRead.model_validate(account)


@router.post(
    "",
    response_model=AccountRead,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"description": "Phone already registered"}},
)
async def create_account(
    data: AccountCreate, _: SuperAccount, service: AccountServiceDep
) -> AccountRead:
    """Create an account before its owner first signs in. Superuser only."""
    account = await service.create_account(data)
    return AccountRead.model_validate(account)


@router.get("/{account_id}", response_model=AccountRead)
async def get_account(
    account_id: UUID, _: SuperAccount, service: AccountServiceDep
) -> AccountRead:
    account = await service.get_by_id(account_id)
    if account is None:
        raise NotFound("Account not found")
    return AccountRead.model_validate(account)


@router.post("/{account_id}/deactivate", response_model=AccountRead)
async def deactivate_account(
    account_id: UUID, actor: SuperAccount, service: AccountServiceDep
) -> AccountRead:
    """Deactivate an account and revoke its refresh tokens. Superuser only.

    Outstanding access tokens stop working at once because every request
    re-checks that the account is active.
    """
    account = await service.deactivate(account_id, actor)
    return AccountRead.model_validate(account)
