"""JWT access/refresh tokens and token hashing.

Access and refresh tokens are signed with different secrets and carry a
``type`` claim, so a refresh token can never pass as an access token.
"""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from hashlib import sha256
from typing import Any
from uuid import UUID, uuid4

from jose import JWTError, jwt

from src.backoffice.core.config import get_settings
from src.backoffice.core.exceptions import InvalidToken


class TokenType:
    """Token type constants."""

    ACCESS = "access"
    REFRESH = "refresh"


@dataclass(frozen=True)
class TokenClaims:
    """Verified claim set of an access or refresh token."""

    account_id: UUID
    phone: str
    is_super: bool
    token_type: str
    expires_at: datetime
    jti: str | None = None


def hash_token(token: str) -> str:
    """Hash a token using SHA256 for secure storage."""
    return sha256(token.encode()).hexdigest()


def _secret_for(token_type: str) -> str:
    settings = get_settings()
    if token_type == TokenType.REFRESH:
        return settings.refresh_token_secret
    return settings.access_token_secret


def _issue_time(issued_at: datetime | None) -> datetime:
    """Aware UTC issue time. Naive datetimes are taken as UTC."""
    if issued_at is None:
        return datetime.now(UTC)
    if issued_at.tzinfo is None:
        return issued_at.replace(tzinfo=UTC)
    return issued_at


def create_access_token(
    account_id: str | UUID,
    phone: str,
    is_super: bool = False,
    expires_delta: timedelta | None = None,
    issued_at: datetime | None = None,
) -> str:
    """Create JWT access token."""
    settings = get_settings()
    now = _issue_time(issued_at)
    expire = now + (expires_delta or timedelta(minutes=settings.access_token_expire_minutes))

    to_encode = {
        "sub": str(account_id),
        "phone": phone,
        "is_super": is_super,
        "type": TokenType.ACCESS,
        "iat": now,
        "exp": expire,
    }
    return jwt.encode(  # type: ignore[no-any-return]
        to_encode,
        _secret_for(TokenType.ACCESS),
        algorithm=settings.jwt_algorithm,
    )


def create_refresh_token(
    account_id: str | UUID,
    phone: str,
    is_super: bool = False,
    expires_delta: timedelta | None = None,
    issued_at: datetime | None = None,
) -> tuple[str, datetime]:
    """Create refresh token. Returns (token, expiry as naive UTC datetime).

    Each token carries a unique ``jti`` so two tokens minted in the same second
    for the same account still hash differently.
    """
    settings = get_settings()
    now = _issue_time(issued_at)
    expire = now + (expires_delta or timedelta(days=settings.refresh_token_expire_days))

    to_encode = {
        "sub": str(account_id),
        "phone": phone,
        "is_super": is_super,
        "type": TokenType.REFRESH,
        "iat": now,
        "exp": expire,
        "jti": str(uuid4()),
    }
    token: str = jwt.encode(  # type: ignore[assignment]
        to_encode,
        _secret_for(TokenType.REFRESH),
        algorithm=settings.jwt_algorithm,
    )
    return token, expire.replace(tzinfo=None)


def decode_token(token: str, token_type: str) -> dict[str, Any] | None:
    """Decode and validate a JWT of the given type. Returns None on any error."""
    settings = get_settings()
    try:
        payload: dict[str, Any] = jwt.decode(
            token,
            _secret_for(token_type),
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError:
        return None
    if payload.get("type") != token_type:
        return None
    return payload


def _verify(token: str, token_type: str) -> TokenClaims:
    payload = decode_token(token, token_type)
    if payload is None:
        raise InvalidToken()

    try:
        account_id = UUID(str(payload["sub"]))
        phone = str(payload["phone"])
        expires_at = datetime.fromtimestamp(int(payload["exp"]), UTC).replace(tzinfo=None)
    except (KeyError, TypeError, ValueError) as e:
        raise InvalidToken() from e

    return TokenClaims(
        account_id=account_id,
        phone=phone,
        is_super=bool(payload.get("is_super", False)),
        token_type=token_type,
        expires_at=expires_at,
        jti=payload.get("jti"),
    )


def verify_access_token(token: str) -> TokenClaims:
    """Verify an access token.

    Raises:
        InvalidToken: Bad signature, wrong type, malformed claims or expired.
    """
    return _verify(token, TokenType.ACCESS)


def verify_refresh_token(token: str) -> TokenClaims:
    """Verify a refresh token.

    Raises:
        InvalidToken: Bad signature, wrong type, malformed claims or expired.
    """
    return _verify(token, TokenType.REFRESH)
