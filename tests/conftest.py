"""Shared pytest fixtures"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from messaging.base import MessageResult
from models.reminder import EligibleUser


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def provider() -> MagicMock:
    """Connected messaging provider whose sends succeed"""
    mock = MagicMock()
    mock.platform = "whatsapp"
    mock.is_connected.return_value = True
    mock.send_text = AsyncMock(return_value=MessageResult(success=True, message_id="wamid.1"))
    return mock


@pytest.fixture
def eligible_user() -> EligibleUser:
    return EligibleUser(
        user_id=1,
        payment_method_id=10,
        payment_method_name="Nubank",
        statement_closing_day=5,
        whatsapp_jid="5511999999999@s.whatsapp.net",
        monthly_budget=2000.0,
    )
