from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from src.backoffice.models import RoleLevel


class GrantCreate(BaseModel):
    account_id: UUID
    role: RoleLevel
    shop_id: UUID | None = None
    warehouse_id: UUID | None = None


class GrantRead(BaseModel):
    id: UUID
    account_id: UUID
    role: RoleLevel
    shop_id: UUID | None
    warehouse_id: UUID | None
    is_active: bool
    created_at: datetime
    deactivated_at: datetime | None

    model_config = {"from_attributes": True}


class GrantListResponse(BaseModel):
    grants: list[GrantRead]
    total: int
