"""Passwordless login: one-time codes delivered to a phone."""

import hmac
import secrets
from collections.abc import Callable
from datetime import datetime, timedelta

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.backoffice.core.config import get_settings
from src.backoffice.core.exceptions import CodeDeliveryError, IdentityError, InvalidCredentials
from src.backoffice.core.logging import get_logger, loggable_phone
from src.backoffice.core.notifications import Notifier
from src.backoffice.core.phone import normalize_phone
from src.backoffice.models import Account, OneTimeCode, utc_now
from src.backoffice.repositories import AccountRepository, OneTimeCodeRepository

logger = get_logger(__name__)

CODE_MIN = 1111
CODE_MAX = 9999


def generate_code() -> str:
    """Uniformly random 4-digit code in [1111, 9999]."""
    return str(CODE_MIN + secrets.randbelow(CODE_MAX - CODE_MIN + 1))


class OneTimeCodeService:
    """Issues and verifies one-time login codes.

    One unused code per phone at a time. Repeated requests while a code is
    still valid return that code without sending it again.
    """

    def __init__(
        self,
        code_repo: OneTimeCodeRepository,
        account_repo: AccountRepository,
        session: AsyncSession,
        notifier: Notifier,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.code_repo = code_repo
        self.account_repo = account_repo
        self.session = session
        self.notifier = notifier
        self.clock = clock

    async def request_code(self, phone: str) -> OneTimeCode:
        """Make sure the phone has a live code, delivering a fresh one if needed.

        Raises:
            CodeDeliveryError: The notifier failed; no code is stored.
        """
        settings = get_settings()
        phone = normalize_phone(phone)
        now = self.clock()

        try:
            existing = await self.code_repo.get_active(phone, now)
            if existing is not None:
                await self.session.commit()
                logger.info("One-time code still active", phone=loggable_phone(phone))
                return existing

            purged = await self.code_repo.purge_expired(phone, now)
            if purged:
                logger.debug(
                    "Expired one-time codes purged", phone=loggable_phone(phone), count=purged
                )

            code = OneTimeCode(
                phone=phone,
                code=generate_code(),
                expires_at=now + timedelta(seconds=settings.otp_expire_seconds),
                created_at=now,
            )
            self.code_repo.add(code)
            await self.session.flush()
        except IntegrityError:
            # A concurrent request inserted the phone's code first
            await self.session.rollback()
            winner = await self.code_repo.get_active(phone, now)
            if winner is None:
                raise
            await self.session.commit()
            return winner
        except Exception:
            await self.session.rollback()
            raise

        try:
            delivered = await self.notifier.send_code(phone, code.code)
            if not delivered:
                raise CodeDeliveryError()
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            logger.warning("One-time code not delivered", phone=loggable_phone(phone))
            raise

        logger.info("One-time code issued", phone=loggable_phone(phone))
        return code

    async def verify_code(self, phone: str, code: str) -> Account:
        """Consume a code and return the phone's account, creating it on first login.

        Raises:
            InvalidCredentials: No live code, wrong code, or a deactivated account.
        """
        settings = get_settings()
        phone = normalize_phone(phone)
        now = self.clock()

        try:
            stored = await self.code_repo.get_active(phone, now, for_update=True)
            if stored is None:
                raise InvalidCredentials()

            if not hmac.compare_digest(stored.code.encode(), code.encode()):
                await self.code_repo.record_failed_attempt(stored, settings.otp_max_attempts, now)
                await self.session.commit()
                logger.info(
                    "One-time code mismatch",
                    phone=loggable_phone(phone),
                    attempts=stored.attempts,
                    burned=stored.is_used,
                )
                raise InvalidCredentials()

            await self.code_repo.mark_used(stored, now)

            account = await self.account_repo.get_by_phone(phone)
            if account is None:
                account = Account(phone=phone, created_at=now, updated_at=now)
                self.account_repo.add(account)
                await self.session.flush()
                logger.info("Account created on first login", account_id=str(account.id))
            elif not account.is_active:
                raise InvalidCredentials()

            await self.session.commit()
        except IdentityError:
            await self.session.rollback()
            raise
        except Exception as e:
            await self.session.rollback()
            logger.error("Failed to verify one-time code", error=str(e))
            raise

        logger.info("One-time code verified", account_id=str(account.id))
        return account
