"""Shared enums for models."""

from enum import Enum


class RoleLevel(str, Enum):
    """Staff role. Listed from least to most privileged."""

    CASHIER = "cashier"
    MANAGER = "manager"
    OWNER = "owner"
    SUPERADMIN = "superadmin"


class InviteStatus(str, Enum):
    """Invite lifecycle state. Everything but PENDING is terminal."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self is not InviteStatus.PENDING
