"""Access/refresh token issuance, rotation and revocation."""

import hmac
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from src.backoffice.core.cache import is_revoked, remember_revoked, remember_revoked_many
from src.backoffice.core.exceptions import InvalidToken
from src.backoffice.core.logging import get_logger
from src.backoffice.core.security import (
    create_access_token,
    create_refresh_token,
    hash_token,
    verify_refresh_token,
)
from src.backoffice.models import Account, RefreshToken, utc_now
from src.backoffice.repositories import AccountRepository, RefreshTokenRepository

logger = get_logger(__name__)


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str
    refresh_expires_at: datetime


def _remaining_seconds(expires_at: datetime, now: datetime) -> int:
    return max(int((expires_at - now).total_seconds()), 0)


class TokenService:
    """Mints token pairs and keeps the refresh-token ledger.

    Only SHA-256 hashes of refresh tokens are stored. Each refresh token is
    good for exactly one rotation; presenting it again is rejected.
    """

    def __init__(
        self,
        token_repo: RefreshTokenRepository,
        account_repo: AccountRepository,
        session: AsyncSession,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.token_repo = token_repo
        self.account_repo = account_repo
        self.session = session
        self.clock = clock

    def _mint(self, account: Account, now: datetime) -> tuple[TokenPair, RefreshToken]:
        access_token = create_access_token(
            account.id, account.phone, account.is_superuser, issued_at=now
        )
        refresh_token, expires_at = create_refresh_token(
            account.id, account.phone, account.is_superuser, issued_at=now
        )
        record = RefreshToken(
            account_id=account.id,
            token_hash=hash_token(refresh_token),
            expires_at=expires_at,
            created_at=now,
        )
        return TokenPair(access_token, refresh_token, expires_at), record

    async def issue(self, account: Account) -> TokenPair:
        """Mint a pair for a freshly authenticated account."""
        try:
            pair, record = self._mint(account, self.clock())
            self.token_repo.add(record)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        return pair

    async def rotate(self, refresh_token: str) -> tuple[TokenPair, Account]:
        """Exchange a refresh token for a new pair, revoking the old one.

        Raises:
            InvalidToken: Bad/expired token, already rotated or revoked, or the
                account is gone or deactivated.
        """
        claims = verify_refresh_token(refresh_token)
        token_hash = hash_token(refresh_token)

        if await is_revoked(token_hash) is True:
            raise InvalidToken()

        now = self.clock()
        try:
            # Row lock: two rotations of one token cannot both pass this point
            stored = await self.token_repo.get_valid_by_hash(
                token_hash, for_update=True, now=now
            )
            if stored is None or not hmac.compare_digest(token_hash, stored.token_hash):
                raise InvalidToken()
            if stored.account_id != claims.account_id:
                raise InvalidToken()

            account = await self.account_repo.get_by_id(claims.account_id)
            if account is None or not account.is_active:
                raise InvalidToken()

            await self.token_repo.revoke(stored, now)
            pair, record = self._mint(account, now)
            self.token_repo.add(record)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        await self._cache_revoked(token_hash, _remaining_seconds(stored.expires_at, now))
        logger.info("Refresh token rotated", account_id=str(account.id))
        return pair, account

    async def revoke(self, refresh_token: str) -> bool:
        """Revoke one refresh token (logout). Returns False if it was unknown."""
        token_hash = hash_token(refresh_token)
        try:
            stored = await self.token_repo.get_by_hash(token_hash)
            if stored is None or stored.revoked:
                await self.session.commit()
                return False
            now = self.clock()
            await self.token_repo.revoke(stored, now)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        await self._cache_revoked(token_hash, _remaining_seconds(stored.expires_at, now))
        logger.info("Refresh token revoked", account_id=str(stored.account_id))
        return True

    async def revoke_all_for_account(self, account_id: UUID) -> int:
        """Revoke every active refresh token of an account (deactivation)."""
        now = self.clock()
        try:
            active = await self.token_repo.get_active_for_account(account_id, now)
            count = await self.token_repo.revoke_all_for_account(account_id, now)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        await self._cache_revoked_many(
            [(token.token_hash, _remaining_seconds(token.expires_at, now)) for token in active]
        )
        return count

    async def _cache_revoked(self, token_hash: str, ttl: int) -> None:
        # Cache failures never undo a committed revocation; the database decides
        try:
            await remember_revoked(token_hash, ttl)
        except Exception as e:
            logger.warning("Failed to cache revoked refresh token", error=str(e))

    async def _cache_revoked_many(self, tokens_with_ttls: list[tuple[str, int]]) -> None:
        if not tokens_with_ttls:
            return
        try:
            await remember_revoked_many(tokens_with_ttls)
        except Exception as e:
            logger.warning(
                "Failed to cache revoked refresh tokens",
                error=str(e),
                token_count=len(tokens_with_ttls),
            )
