"""FastAPI dependency injection definitions."""

# Database
from src.backoffice.api.dependencies.db import DBSession, get_db_session

# Repositories
from src.backoffice.api.dependencies.repositories import (
    AccountRepo,
    CodeRepo,
    GrantRepo,
    InviteRepo,
    TokenRepo,
    get_account_repository,
    get_code_repository,
    get_grant_repository,
    get_invite_repository,
    get_token_repository,
)

# Services
from src.backoffice.api.dependencies.services import (
    AccountServiceDep,
    AuthorizationGateDep,
    CodeServiceDep,
    InviteServiceDep,
    NotifierDep,
    RoleAuthorityDep,
    TokenServiceDep,
    get_account_service,
    get_authorization_gate,
    get_code_service,
    get_invite_service,
    get_notifier,
    get_role_authority,
    get_token_service,
)

# Auth
from src.backoffice.api.dependencies.auth import (
    CurrentAccount,
    CurrentPrincipal,
    RequestScope,
    RequireRoles,
    ScopeAdmin,
    SuperAccount,
    get_current_account,
    get_current_principal,
    get_request_scope,
    require_superuser,
)

__all__ = [
    # Database
    "DBSession",
    "get_db_session",
    # Repositories
    "AccountRepo",
    "CodeRepo",
    "GrantRepo",
    "InviteRepo",
    "TokenRepo",
    "get_account_repository",
    "get_code_repository",
    "get_grant_repository",
    "get_invite_repository",
    "get_token_repository",
    # Services
    "AccountServiceDep",
    "AuthorizationGateDep",
    "CodeServiceDep",
    "InviteServiceDep",
    "NotifierDep",
    "RoleAuthorityDep",
    "TokenServiceDep",
    "get_account_service",
    "get_authorization_gate",
    "get_code_service",
    "get_invite_service",
    "get_notifier",
    "get_role_authority",
    "get_token_service",
    # Auth
    "CurrentAccount",
    "CurrentPrincipal",
    "RequestScope",
    "RequireRoles",
    "ScopeAdmin",
    "SuperAccount",
    "get_current_account",
    "get_current_principal",
    "get_request_scope",
    "require_superuser",
]
