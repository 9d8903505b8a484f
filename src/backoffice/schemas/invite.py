from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from src.backoffice.core.phone import PhoneNumber
from src.backoffice.models import InviteStatus, RoleLevel


class InviteCreateRequest(BaseModel):
    phone: PhoneNumber
    role: RoleLevel
    shop_id: UUID
    warehouse_id: UUID | None = None
    email: EmailStr | None = Field(None, description="Contact email, not used for login")


class InviteRead(BaseModel):
    id: UUID
    phone: str
    email: str | None
    role: RoleLevel
    shop_id: UUID
    warehouse_id: UUID | None
    status: InviteStatus
    created_by_id: UUID
    invited_account_id: UUID | None
    created_at: datetime
    status_changed_at: datetime | None

    model_config = {"from_attributes": True}


class InviteListResponse(BaseModel):
    invites: list[InviteRead]
    total: int


class InviteAcceptResponse(BaseModel):
    invite: InviteRead
    grant_id: UUID
    message: str = "Invite accepted"


class InviteStatsRead(BaseModel):
    """Invite counts for a shop (optionally one warehouse)."""

    total: int
    by_status: dict[InviteStatus, int]
    by_role: dict[RoleLevel, int]
    average_acceptance_seconds: float | None = Field(
        None, description="Mean time from creation to acceptance. None if nothing was accepted."
    )
