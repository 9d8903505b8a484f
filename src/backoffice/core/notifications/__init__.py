"""Outbound notifications - WhatsApp."""

from src.backoffice.core.notifications.base import Notifier
from src.backoffice.core.notifications.whatsapp import (
    WhatsAppNotifier,
    code_message,
    invite_message,
)

__all__ = [
    "Notifier",
    "WhatsAppNotifier",
    "code_message",
    "invite_message",
]
