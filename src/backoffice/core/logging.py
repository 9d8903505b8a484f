"""Logging configuration using structlog."""

import logging
import sys
from uuid import UUID

import structlog
from structlog.contextvars import bind_contextvars, clear_contextvars


def setup_logging(debug: bool = False) -> None:
    """Configure structlog for structured logging.

    Args:
        debug: If True, render colored console lines. Otherwise emit JSON.
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=logging.DEBUG if debug else logging.INFO,
    )

    shared_processors: list[structlog.typing.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]
    renderer: structlog.typing.Processor = (
        structlog.dev.ConsoleRenderer(colors=True) if debug else structlog.processors.JSONRenderer()
    )

    structlog.configure(
        processors=[*shared_processors, renderer],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Library noise
    for name in ("sqlalchemy.engine", "aiosqlite", "httpx", "httpcore"):
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger instance."""
    return structlog.get_logger(name)


def mask_phone(phone: str) -> str:
    """Hide everything but the last four digits of a phone identity.

    >>> mask_phone("+79991234567")
    '+*******4567'
    """
    if len(phone) <= 5:
        return "*" * len(phone)
    return phone[0] + "*" * (len(phone) - 5) + phone[-4:]


def loggable_phone(phone: str) -> str:
    """Phone as it may appear in logs under the current privacy setting."""
    from src.backoffice.core.config import get_settings

    return phone if get_settings().log_user_phones else mask_phone(phone)


def bind_request_context(request_id: str | None) -> None:
    """Bind the correlation ID to all subsequent log calls."""
    if request_id:
        bind_contextvars(request_id=request_id)


def bind_account_context(account_id: UUID, phone: str | None = None) -> None:
    """Bind the authenticated account to all subsequent log calls.

    The phone is masked unless ``LOG_USER_PHONES`` is enabled.
    """
    bind_contextvars(account_id=str(account_id))
    if phone:
        bind_contextvars(phone=loggable_phone(phone))


def clear_request_context() -> None:
    """Clear all request-scoped context."""
    clear_contextvars()
