"""Invite model - an offer of a role at a scope, addressed to a phone."""

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import Index, text
from sqlmodel import Field, SQLModel

from src.backoffice.models.base import utc_now
from src.backoffice.models.enums import InviteStatus, RoleLevel
from src.backoffice.models.scope import Scope


class Invite(SQLModel, table=True):
    """Staff invitation. PENDING until accepted, rejected or cancelled."""

    __tablename__ = "invites"
    __table_args__ = (
        Index(
            "uq_invites_pending",
            "phone",
            "role",
            "scope_key",
            unique=True,
            postgresql_where=text("status = 'pending'"),
            sqlite_where=text("status = 'pending'"),
        ),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    phone: str = Field(max_length=20, index=True)
    email: str | None = Field(default=None, max_length=255)
    role: str = Field(max_length=20)
    shop_id: UUID = Field(index=True)
    warehouse_id: UUID | None = Field(default=None, index=True)
    scope_key: str = Field(max_length=80)
    status: str = Field(default=InviteStatus.PENDING.value, max_length=20, index=True)
    created_by_id: UUID = Field(foreign_key="accounts.id", index=True)
    invited_account_id: UUID | None = Field(default=None, foreign_key="accounts.id")
    grant_id: UUID | None = Field(default=None, foreign_key="role_grants.id")
    created_at: datetime = Field(default_factory=utc_now)
    status_changed_at: datetime | None = Field(default=None)

    @property
    def scope(self) -> Scope:
        return Scope(shop_id=self.shop_id, warehouse_id=self.warehouse_id)

    @property
    def role_level(self) -> RoleLevel:
        return RoleLevel(self.role)

    @property
    def invite_status(self) -> InviteStatus:
        return InviteStatus(self.status)
