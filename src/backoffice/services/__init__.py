"""Service layer - business logic."""

from src.backoffice.services.account_service import AccountService
from src.backoffice.services.authorization_gate import AuthorizationGate, Principal
from src.backoffice.services.delegation import (
    DELEGATION_TABLE,
    can_delegate,
    delegators_of,
    ensure_can_delegate,
    validate_scope_for_role,
)
from src.backoffice.services.invite_service import InviteService, InviteStats
from src.backoffice.services.otp_service import OneTimeCodeService, generate_code
from src.backoffice.services.role_authority import RoleAuthority
from src.backoffice.services.token_service import TokenPair, TokenService

__all__ = [
    "DELEGATION_TABLE",
    "AccountService",
    "AuthorizationGate",
    "InviteService",
    "InviteStats",
    "OneTimeCodeService",
    "Principal",
    "RoleAuthority",
    "TokenPair",
    "TokenService",
    "can_delegate",
    "delegators_of",
    "ensure_can_delegate",
    "generate_code",
    "validate_scope_for_role",
]
