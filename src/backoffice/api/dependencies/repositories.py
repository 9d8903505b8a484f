"""Repository factory dependencies."""

from typing import Annotated

from fastapi import Depends

from src.backoffice.api.dependencies.db import DBSession
from src.backoffice.repositories import (
    AccountRepository,
    InviteRepository,
    OneTimeCodeRepository,
    RefreshTokenRepository,
    RoleGrantRepository,
)


def get_account_repository(session: DBSession) -> AccountRepository:
    return AccountRepository(session)


def get_code_repository(session: DBSession) -> OneTimeCodeRepository:
    return OneTimeCodeRepository(session)


def get_token_repository(session: DBSession) -> RefreshTokenRepository:
    return RefreshTokenRepository(session)


def get_grant_repository(session: DBSession) -> RoleGrantRepository:
    return RoleGrantRepository(session)


def get_invite_repository(session: DBSession) -> InviteRepository:
    return InviteRepository(session)


AccountRepo = Annotated[AccountRepository, Depends(get_account_repository)]
CodeRepo = Annotated[OneTimeCodeRepository, Depends(get_code_repository)]
TokenRepo = Annotated[RefreshTokenRepository, Depends(get_token_repository)]
GrantRepo = Annotated[RoleGrantRepository, Depends(get_grant_repository)]
InviteRepo = Annotated[InviteRepository, Depends(get_invite_repository)]
