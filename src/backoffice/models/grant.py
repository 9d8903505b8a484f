"""Role grant model - who holds which role where."""

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import Index, text
from sqlmodel import Field, SQLModel

from src.backoffice.models.base import utc_now
from src.backoffice.models.enums import RoleLevel
from src.backoffice.models.scope import Scope


class RoleGrant(SQLModel, table=True):
    """An account holding a role at a shop and/or warehouse.

    ``scope_key`` mirrors (shop_id, warehouse_id) without NULLs so the partial
    unique index can reject a second active grant for the same tuple.
    Deactivation is permanent; a later grant is a new row.
    """

    __tablename__ = "role_grants"
    __table_args__ = (
        Index(
            "uq_role_grants_active",
            "account_id",
            "role",
            "scope_key",
            unique=True,
            postgresql_where=text("is_active"),
            sqlite_where=text("is_active = 1"),
        ),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    account_id: UUID = Field(foreign_key="accounts.id", index=True)
    role: str = Field(max_length=20)
    shop_id: UUID | None = Field(default=None, index=True)
    warehouse_id: UUID | None = Field(default=None, index=True)
    scope_key: str = Field(max_length=80)
    is_active: bool = Field(default=True)
    granted_by_id: UUID | None = Field(default=None, foreign_key="accounts.id")
    created_at: datetime = Field(default_factory=utc_now)
    deactivated_at: datetime | None = Field(default=None)

    @property
    def scope(self) -> Scope:
        return Scope(shop_id=self.shop_id, warehouse_id=self.warehouse_id)

    @property
    def role_level(self) -> RoleLevel:
        return RoleLevel(self.role)
