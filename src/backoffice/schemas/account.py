from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from src.backoffice.core.phone import PhoneNumber


class AccountRead(BaseModel):
    id: UUID
    phone: str
    first_name: str | None
    last_name: str | None
    email: str | None
    is_active: bool
    is_superuser: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class AccountCreate(BaseModel):
    """Administrative account creation."""

    phone: PhoneNumber
    first_name: str | None = Field(None, min_length=1, max_length=100)
    last_name: str | None = Field(None, min_length=1, max_length=100)
    email: EmailStr | None = None
    is_superuser: bool = False


class AccountUpdate(BaseModel):
    """Self-service profile changes. Nothing else on an account is writable here."""

    first_name: str | None = Field(None, min_length=1, max_length=100)
    last_name: str | None = Field(None, min_length=1, max_length=100)
    email: EmailStr | None = None

    model_config = {"extra": "forbid"}
