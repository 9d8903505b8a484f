"""Repository layer - data access abstraction."""

from src.backoffice.repositories.account import AccountRepository
from src.backoffice.repositories.base import BaseRepository
from src.backoffice.repositories.grant import RoleGrantRepository
from src.backoffice.repositories.invite import InviteRepository
from src.backoffice.repositories.one_time_code import OneTimeCodeRepository
from src.backoffice.repositories.token import RefreshTokenRepository

__all__ = [
    "AccountRepository",
    "BaseRepository",
    "InviteRepository",
    "OneTimeCodeRepository",
    "RefreshTokenRepository",
    "RoleGrantRepository",
]
