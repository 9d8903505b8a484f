from uuid import UUID

from pydantic import BaseModel, Field

from src.backoffice.core.phone import PhoneNumber
from src.backoffice.schemas.grant import GrantRead


class CodeRequest(BaseModel):
    phone: PhoneNumber


class CodeRequestResponse(BaseModel):
    message: str = "If the number can receive messages, a code has been sent"
    expires_in: int


class CodeVerifyRequest(BaseModel):
    phone: PhoneNumber
    code: str = Field(pattern=r"^[0-9]{4}$")


class AccessTokenResponse(BaseModel):
    """Token response body. The refresh token travels only in the HTTP-only cookie."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int


class RefreshRequest(BaseModel):
    """Fallback for clients that cannot use the cookie."""

    refresh_token: str | None = None


class LogoutResponse(BaseModel):
    message: str = "Logged out"


class PrincipalRead(BaseModel):
    """Who is calling: the authenticated account and its active roles."""

    account_id: UUID
    phone: str
    is_super: bool
    active_roles: list[GrantRead]
