"""Unit tests for the WhatsApp Cloud API provider"""

import io
import json
from unittest.mock import AsyncMock

import httpx
import pytest

from messaging.whatsapp_provider import LID_UNSUPPORTED_ERROR, WhatsAppProvider, jid_to_number
from models.reminder import EligibleUser
from reminders.error_classifier import get_error_category, is_transient_error
from reminders.sender import send_reminder_with_retry


def _provider(handler) -> tuple[WhatsAppProvider, list[httpx.Request]]:
    requests = []

    def record(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return handler(request)

    client = httpx.AsyncClient(base_url="https://graph.test/v19.0", transport=httpx.MockTransport(record))
    return WhatsAppProvider(token="token", phone_number_id="42", client=client), requests


def test_jid_to_number_drops_server_and_device():
    assert jid_to_number("5511999999999@s.whatsapp.net") == "5511999999999"
    assert jid_to_number("5511999999999:3@s.whatsapp.net") == "5511999999999"


@pytest.mark.asyncio
async def test_send_text_posts_phone_number():
    provider, requests = _provider(lambda request: httpx.Response(200, json={"messages": [{"id": "wamid.9"}]}))

    result = await provider.send_text("5511999999999@s.whatsapp.net", "Olá")

    assert result.success and result.message_id == "wamid.9"
    body = json.loads(requests[0].content)
    assert body["to"] == "5511999999999"
    assert requests[0].headers["Authorization"] == "Bearer token"


@pytest.mark.asyncio
async def test_lid_recipient_is_refused_without_request():
    provider, requests = _provider(lambda request: httpx.Response(200, json={"messages": [{"id": "x"}]}))

    text = await provider.send_text("123456789@lid", "Olá")
    photo = await provider.send_photo("123456789@lid", io.BytesIO(b"png"))

    assert requests == []
    for result in (text, photo):
        assert not result.success
        assert result.error == LID_UNSUPPORTED_ERROR
    assert not is_transient_error(text.error)
    assert get_error_category(text.error) == "invalid_number"


@pytest.mark.asyncio
async def test_rejected_send_reports_status():
    provider, _ = _provider(lambda request: httpx.Response(403, text="blocked"))

    result = await provider.send_text("5511999999999@s.whatsapp.net", "Olá")

    assert not result.success
    assert result.error.startswith("403")


@pytest.mark.asyncio
async def test_network_error_is_reported():
    def fail(request):
        raise httpx.ConnectError("connection refused", request=request)

    provider, _ = _provider(fail)

    result = await provider.send_text("5511999999999@s.whatsapp.net", "Olá")

    assert not result.success
    assert is_transient_error(result.error)


@pytest.mark.asyncio
async def test_reminder_to_lid_only_user_is_not_retried():
    provider, requests = _provider(lambda request: httpx.Response(200, json={"messages": [{"id": "x"}]}))
    user = EligibleUser(user_id=1, payment_method_id=1, payment_method_name="Nubank",
                        statement_closing_day=5, whatsapp_lid="123456789@lid")

    result = await send_reminder_with_retry(provider, user, "Sua fatura fecha em 3 dias", sleep=AsyncMock())

    assert not result.success
    assert result.attempts == 1
    assert result.error_category == "invalid_number"
    assert requests == []
