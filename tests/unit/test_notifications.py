"""Tests for the WhatsApp notifier (httpx mocked via MockTransport)."""

import json

import httpx
import pytest

from src.backoffice.core.config import get_settings
from src.backoffice.core.notifications import WhatsAppNotifier, code_message, invite_message

pytestmark = pytest.mark.unit

PHONE = "+79991234567"


@pytest.fixture
def gateway_settings():
    return get_settings().model_copy(
        update={
            "whatsapp_service_url": "https://gateway.test/send",
            "whatsapp_service_token": "gateway-token",
        }
    )


def _transport(requests: list[httpx.Request], status_code: int = 200) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(status_code, json={"ok": status_code < 400})

    return httpx.MockTransport(handler)


class TestSendCode:
    async def test_posts_code_message(self, gateway_settings):
        requests: list[httpx.Request] = []
        notifier = WhatsAppNotifier(gateway_settings, transport=_transport(requests))

        assert await notifier.send_code(PHONE, "4821") is True

        assert len(requests) == 1
        request = requests[0]
        assert str(request.url) == "https://gateway.test/send"
        assert request.headers["Authorization"] == "Bearer gateway-token"
        body = json.loads(request.content)
        assert body == {"to": PHONE, "msg": code_message(gateway_settings.app_name, "4821")}

    async def test_gateway_error_returns_false(self, gateway_settings):
        requests: list[httpx.Request] = []
        notifier = WhatsAppNotifier(gateway_settings, transport=_transport(requests, 502))

        assert await notifier.send_code(PHONE, "4821") is False

    async def test_timeout_returns_false(self, gateway_settings):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("gateway too slow", request=request)

        notifier = WhatsAppNotifier(gateway_settings, transport=httpx.MockTransport(handler))

        assert await notifier.send_code(PHONE, "4821") is False

    async def test_without_gateway_nothing_is_sent(self):
        settings = get_settings().model_copy(update={"whatsapp_service_url": None})
        requests: list[httpx.Request] = []
        notifier = WhatsAppNotifier(settings, transport=_transport(requests))

        assert await notifier.send_code(PHONE, "4821") is True
        assert requests == []


class TestSendInvite:
    async def test_posts_invite_message(self, gateway_settings):
        requests: list[httpx.Request] = []
        notifier = WhatsAppNotifier(gateway_settings, transport=_transport(requests))

        assert await notifier.send_invite(PHONE, "cashier", "Anna Petrova") is True

        body = json.loads(requests[0].content)
        assert body["to"] == PHONE
        assert "Anna Petrova" in body["msg"]
        assert "cashier" in body["msg"]


def test_invite_message_without_inviter_name():
    assert invite_message("Shop", "manager", None).startswith("A colleague invited you")


def test_code_message_contains_code():
    assert "4821" in code_message("Shop", "4821")
