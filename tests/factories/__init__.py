"""Test factories for generating test data.

Re-exports all factories for convenient imports:
    from tests.factories import AccountFactory, RoleGrantFactory, ...
"""

from tests.factories.account import AccountFactory
from tests.factories.auth import InviteFactory, OneTimeCodeFactory, RoleGrantFactory
from tests.factories.base import BaseFactory, generate_phone, generate_uuid, utc_now

__all__ = [
    # Base
    "BaseFactory",
    "generate_phone",
    "generate_uuid",
    "utc_now",
    # Accounts
    "AccountFactory",
    # Auth and roles
    "InviteFactory",
    "OneTimeCodeFactory",
    "RoleGrantFactory",
]
