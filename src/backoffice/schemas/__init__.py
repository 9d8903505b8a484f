from src.backoffice.schemas.account import AccountCreate, AccountRead, AccountUpdate
from src.backoffice.schemas.auth import (
    AccessTokenResponse,
    CodeRequest,
    CodeRequestResponse,
    CodeVerifyRequest,
    LogoutResponse,
    PrincipalRead,
    RefreshRequest,
)
from src.backoffice.schemas.grant import GrantCreate, GrantListResponse, GrantRead
from src.backoffice.schemas.invite import (
    InviteAcceptResponse,
    InviteCreateRequest,
    InviteListResponse,
    InviteRead,
    InviteStatsRead,
)
from src.backoffice.schemas.pagination import PaginatedResponse

__all__ = [
    # Accounts
    "AccountCreate",
    "AccountRead",
    "AccountUpdate",
    # Auth
    "AccessTokenResponse",
    "CodeRequest",
    "CodeRequestResponse",
    "CodeVerifyRequest",
    "LogoutResponse",
    "PrincipalRead",
    "RefreshRequest",
    # Grants
    "GrantCreate",
    "GrantListResponse",
    "GrantRead",
    # Invites
    "InviteAcceptResponse",
    "InviteCreateRequest",
    "InviteListResponse",
    "InviteRead",
    "InviteStatsRead",
    # Pagination
    "PaginatedResponse",
]
