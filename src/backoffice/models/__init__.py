"""Model exports.

Import from here: `from src.backoffice.models import Account, RoleGrant`
"""

from src.backoffice.models.account import Account
from src.backoffice.models.auth import OneTimeCode, RefreshToken
from src.backoffice.models.base import utc_now
from src.backoffice.models.enums import InviteStatus, RoleLevel
from src.backoffice.models.grant import RoleGrant
from src.backoffice.models.invite import Invite
from src.backoffice.models.scope import Scope

__all__ = [
    # Enums and value objects
    "InviteStatus",
    "RoleLevel",
    "Scope",
    "utc_now",
    # Tables
    "Account",
    "Invite",
    "OneTimeCode",
    "RefreshToken",
    "RoleGrant",
]
