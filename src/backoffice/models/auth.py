"""Authentication models - one-time codes and refresh tokens."""

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import Index, text
from sqlmodel import Field, SQLModel

from src.backoffice.models.base import utc_now


class OneTimeCode(SQLModel, table=True):
    """Short-lived login code delivered to a phone.

    At most one unused code per phone; the partial unique index enforces it
    even when two requests race.
    """

    __tablename__ = "one_time_codes"
    __table_args__ = (
        Index(
            "uq_one_time_codes_phone_unused",
            "phone",
            unique=True,
            postgresql_where=text("NOT is_used"),
            sqlite_where=text("is_used = 0"),
        ),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    phone: str = Field(max_length=20, index=True)
    code: str = Field(max_length=8)
    expires_at: datetime = Field(index=True)
    is_used: bool = Field(default=False)
    used_at: datetime | None = Field(default=None)
    attempts: int = Field(default=0)
    created_at: datetime = Field(default_factory=utc_now)


class RefreshToken(SQLModel, table=True):
    """Refresh token storage. Only the SHA-256 hash is kept."""

    __tablename__ = "refresh_tokens"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    account_id: UUID = Field(foreign_key="accounts.id", index=True)
    token_hash: str = Field(max_length=255, unique=True, index=True)
    expires_at: datetime = Field(index=True)
    created_at: datetime = Field(default_factory=utc_now)
    revoked: bool = Field(default=False)
    revoked_at: datetime | None = Field(default=None)
