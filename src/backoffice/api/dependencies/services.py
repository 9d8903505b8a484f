"""Service factory dependencies."""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from src.backoffice.api.dependencies.db import DBSession
from src.backoffice.api.dependencies.repositories import (
    AccountRepo,
    CodeRepo,
    GrantRepo,
    InviteRepo,
    TokenRepo,
)
from src.backoffice.core.notifications import Notifier, WhatsAppNotifier
from src.backoffice.services import (
    AccountService,
    AuthorizationGate,
    InviteService,
    OneTimeCodeService,
    RoleAuthority,
    TokenService,
)


@lru_cache
def get_notifier() -> Notifier:
    """Shared WhatsApp notifier (overridden in tests)."""
    return WhatsAppNotifier()


NotifierDep = Annotated[Notifier, Depends(get_notifier)]


def get_role_authority(
    grant_repo: GrantRepo, account_repo: AccountRepo, session: DBSession
) -> RoleAuthority:
    return RoleAuthority(grant_repo, account_repo, session)


RoleAuthorityDep = Annotated[RoleAuthority, Depends(get_role_authority)]


def get_code_service(
    code_repo: CodeRepo,
    account_repo: AccountRepo,
    session: DBSession,
    notifier: NotifierDep,
) -> OneTimeCodeService:
    return OneTimeCodeService(code_repo, account_repo, session, notifier)


def get_token_service(
    token_repo: TokenRepo, account_repo: AccountRepo, session: DBSession
) -> TokenService:
    return TokenService(token_repo, account_repo, session)


TokenServiceDep = Annotated[TokenService, Depends(get_token_service)]


def get_account_service(
    account_repo: AccountRepo, token_service: TokenServiceDep, session: DBSession
) -> AccountService:
    return AccountService(account_repo, token_service, session)


def get_invite_service(
    invite_repo: InviteRepo,
    grant_repo: GrantRepo,
    authority: RoleAuthorityDep,
    session: DBSession,
    notifier: NotifierDep,
) -> InviteService:
    return InviteService(invite_repo, grant_repo, authority, session, notifier)


def get_authorization_gate(
    account_repo: AccountRepo, authority: RoleAuthorityDep
) -> AuthorizationGate:
    return AuthorizationGate(account_repo, authority)


CodeServiceDep = Annotated[OneTimeCodeService, Depends(get_code_service)]
AccountServiceDep = Annotated[AccountService, Depends(get_account_service)]
InviteServiceDep = Annotated[InviteService, Depends(get_invite_service)]
AuthorizationGateDep = Annotated[AuthorizationGate, Depends(get_authorization_gate)]
