"""Unit tests for the retrying reminder sender"""

import asyncio
from unittest.mock import AsyncMock

import pytest

from messaging.base import MessageResult
from models.reminder import EligibleUser
from reminders.sender import exponential_backoff, get_user_jid, send_reminder_with_retry


@pytest.mark.asyncio
async def test_retries_transient_failures_until_success(provider, eligible_user):
    """Two timeouts then a success: delivered on the third attempt"""
    provider.send_text.side_effect = [
        MessageResult(success=False, error="ETIMEDOUT"),
        MessageResult(success=False, error="ETIMEDOUT"),
        MessageResult(success=True, message_id="wamid.3"),
    ]
    sleep = AsyncMock()

    result = await send_reminder_with_retry(provider, eligible_user, "oi", sleep=sleep,
                                            backoff=lambda attempt: attempt * 10)

    assert result.success is True
    assert result.attempts == 3
    assert [c.args[0] for c in sleep.await_args_list] == [10, 20]


@pytest.mark.asyncio
async def test_permanent_failure_is_not_retried(provider, eligible_user):
    provider.send_text.return_value = MessageResult(success=False, error="401 Unauthorized")
    sleep = AsyncMock()

    result = await send_reminder_with_retry(provider, eligible_user, "oi", sleep=sleep)

    assert result.success is False
    assert result.attempts == 1
    assert result.error_category == "auth_error"
    sleep.assert_not_awaited()


@pytest.mark.asyncio
async def test_gives_up_after_max_attempts(provider, eligible_user):
    provider.send_text.return_value = MessageResult(success=False, error="503 Service Unavailable")
    sleep = AsyncMock()

    result = await send_reminder_with_retry(provider, eligible_user, "oi", max_attempts=3, sleep=sleep)

    assert result.success is False
    assert result.attempts == 3
    assert provider.send_text.await_count == 3
    assert sleep.await_count == 2


@pytest.mark.asyncio
async def test_provider_exception_is_caught(provider, eligible_user):
    """A raising provider is treated like a failed send; nothing escapes"""
    provider.send_text.side_effect = ConnectionError("connection reset")

    result = await send_reminder_with_retry(provider, eligible_user, "oi", sleep=AsyncMock())

    assert result.success is False
    assert result.attempts == 3
    assert "connection reset" in result.error


@pytest.mark.asyncio
async def test_user_without_identifier_is_skipped(provider):
    user = EligibleUser(user_id=2, payment_method_id=20, payment_method_name="Inter",
                        statement_closing_day=10)

    result = await send_reminder_with_retry(provider, user, "oi")

    assert result.success is False
    assert result.attempts == 0
    assert result.error_category == "invalid_number"
    provider.send_text.assert_not_awaited()


def test_jid_preference_order():
    """Stored JID first, then LID, then a JID built from the number"""
    user = EligibleUser(user_id=1, payment_method_id=1, payment_method_name="x",
                        statement_closing_day=5, whatsapp_jid="jid@s.whatsapp.net",
                        whatsapp_lid="123@lid", whatsapp_number="+55 11 99999-9999")
    assert get_user_jid(user) == "jid@s.whatsapp.net"

    user.whatsapp_jid = None
    assert get_user_jid(user) == "123@lid"

    user.whatsapp_lid = None
    assert get_user_jid(user) == "5511999999999@s.whatsapp.net"


def test_backoff_grows_with_attempt():
    assert exponential_backoff(1) < exponential_backoff(2) < exponential_backoff(3)


@pytest.mark.asyncio
async def test_bare_timeouts_are_retried(provider, eligible_user):
    """A provider raising asyncio.TimeoutError() without a message still gets retried"""
    provider.send_text.side_effect = [
        asyncio.TimeoutError(),
        asyncio.TimeoutError(),
        MessageResult(success=True, message_id="wamid.9"),
    ]

    result = await send_reminder_with_retry(provider, eligible_user, "oi", sleep=AsyncMock())

    assert result.success is True
    assert result.attempts == 3
