"""WhatsApp gateway client.

The gateway accepts ``POST {WHATSAPP_SERVICE_URL}`` with a bearer token and a
JSON body ``{"to": <phone>, "msg": <text>}``.
"""

import httpx

from src.backoffice.core.config import Settings, get_settings
from src.backoffice.core.logging import get_logger, loggable_phone

logger = get_logger(__name__)


def code_message(app_name: str, code: str) -> str:
    return f"{app_name} one time password: {code}"


def invite_message(app_name: str, role: str, inviter_name: str | None) -> str:
    inviter = inviter_name or "A colleague"
    return (
        f"{inviter} invited you to join {app_name} as {role}. "
        "Sign in with this phone number to accept."
    )


class WhatsAppNotifier:
    """Sends login codes and invitation notices through the WhatsApp gateway."""

    def __init__(
        self,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.settings = settings or get_settings()
        self.transport = transport

    async def send_code(self, phone: str, code: str) -> bool:
        if not self.settings.whatsapp_service_url:
            # Dev mode: nothing to deliver to
            logger.warning(
                "WHATSAPP_SERVICE_URL not set - code not sent",
                phone=loggable_phone(phone),
            )
            if self.settings.debug:
                logger.debug("One-time code for local login", phone=phone, code=code)
            return True
        return await self._post(phone, code_message(self.settings.app_name, code), "code")

    async def send_invite(self, phone: str, role: str, inviter_name: str | None) -> bool:
        if not self.settings.whatsapp_service_url:
            logger.warning(
                "WHATSAPP_SERVICE_URL not set - invite notice not sent",
                phone=loggable_phone(phone),
            )
            return True
        message = invite_message(self.settings.app_name, role, inviter_name)
        return await self._post(phone, message, "invite")

    async def _post(self, phone: str, message: str, message_type: str) -> bool:
        headers = {}
        if self.settings.whatsapp_service_token:
            headers["Authorization"] = f"Bearer {self.settings.whatsapp_service_token}"

        try:
            async with httpx.AsyncClient(
                timeout=self.settings.message_send_timeout_seconds,
                transport=self.transport,
            ) as client:
                response = await client.post(
                    self.settings.whatsapp_service_url,  # type: ignore[arg-type]
                    json={"to": phone, "msg": message},
                    headers=headers,
                )
                response.raise_for_status()
        except httpx.TimeoutException:
            logger.error(
                "WhatsApp send timed out",
                phone=loggable_phone(phone),
                message_type=message_type,
                timeout=self.settings.message_send_timeout_seconds,
            )
            return False
        except httpx.HTTPError as e:
            logger.error(
                "Failed to send WhatsApp message",
                phone=loggable_phone(phone),
                message_type=message_type,
                error=str(e),
            )
            return False

        logger.info("WhatsApp message sent", phone=loggable_phone(phone), message_type=message_type)
        return True
