"""Unit tests for the batched credit card reminder jobs"""

import asyncio
from datetime import date
from unittest.mock import AsyncMock, patch

import pytest

from models.reminder import BudgetData, EligiblePaymentReminder, EligibleUser, SendResult
from scheduler.reminder_jobs import _run_in_batches, send_credit_card_payment_reminders, send_statement_reminders

TODAY = date(2025, 1, 2)


def _user(user_id: int) -> EligibleUser:
    return EligibleUser(user_id=user_id, payment_method_id=user_id * 10, payment_method_name="Nubank",
                        statement_closing_day=5, whatsapp_jid=f"55{user_id}@s.whatsapp.net")


def _budget(*args, **kwargs) -> BudgetData:
    return BudgetData(total_spent=100.0, budget=None, remaining=None, percentage=None,
                      period_start=date(2024, 12, 6), period_end=date(2025, 1, 5),
                      next_closing=date(2025, 1, 5))


@pytest.mark.asyncio
async def test_statement_job_isolates_failures(provider):
    """A user whose data fails to load does not stop the others"""
    def budget_for(user_id, *args, **kwargs):
        if user_id == 2:
            raise RuntimeError("db down")
        return _budget()

    with patch("scheduler.reminder_jobs.get_eligible_users_for_statement_reminders",
               return_value=[_user(1), _user(2), _user(3)]), \
         patch("scheduler.reminder_jobs.calculate_budget_data", side_effect=budget_for):
        result = await send_statement_reminders(provider, TODAY)

    assert result.eligible_users == 3
    assert result.successful_deliveries == 2
    assert result.failed_deliveries == 1
    assert result.errors[0]["user_id"] == 2
    assert result.errors[0]["error_category"] == "processing_error"
    assert provider.send_text.await_count == 2


@pytest.mark.asyncio
async def test_statement_message_mentions_days_left(provider):
    with patch("scheduler.reminder_jobs.get_eligible_users_for_statement_reminders", return_value=[_user(1)]), \
         patch("scheduler.reminder_jobs.calculate_budget_data", side_effect=_budget):
        await send_statement_reminders(provider, TODAY)

    chat_id, text = provider.send_text.await_args.args
    assert chat_id == "551@s.whatsapp.net"
    assert "fecha em 3 dias" in text


@pytest.mark.asyncio
async def test_disconnected_provider_skips_job(provider):
    provider.is_connected.return_value = False

    with patch("scheduler.reminder_jobs.get_eligible_users_for_statement_reminders") as eligible:
        result = await send_statement_reminders(provider, TODAY)

    eligible.assert_not_called()
    assert result.eligible_users == 0


@pytest.mark.asyncio
async def test_payment_job_sends_statement_total(provider):
    reminder = EligiblePaymentReminder(
        user_id=1, payment_method_id=10, payment_method_name="Nubank",
        statement_closing_day=5, payment_due_day=10, due_date=date(2025, 1, 15),
        statement_period_start=date(2024, 12, 6), statement_period_end=date(2025, 1, 5),
        whatsapp_jid="551@s.whatsapp.net",
    )
    with patch("scheduler.reminder_jobs.get_eligible_payment_reminders", return_value=[reminder]), \
         patch("scheduler.reminder_jobs.calculate_statement_total", return_value=1234.5) as total:
        result = await send_credit_card_payment_reminders(provider, date(2025, 1, 13))

    total.assert_called_once_with(1, 10, date(2024, 12, 6), date(2025, 1, 5))
    assert result.successful_deliveries == 1
    assert "R$ 1.234,50" in provider.send_text.await_args.args[1]


@pytest.mark.asyncio
async def test_batches_respect_batch_size():
    """Targets are processed in groups and every outcome is counted"""
    async def process(user):
        return SendResult(success=user.user_id % 2 == 0, attempts=1, error="x", error_category="unknown")

    real_gather = asyncio.gather
    users = [_user(i) for i in range(1, 26)]
    with patch("scheduler.reminder_jobs.asyncio.gather", wraps=real_gather) as gather:
        result = await _run_in_batches("test", users, process, batch_size=10)

    assert [len(c.args) for c in gather.call_args_list] == [10, 10, 5]
    assert result.eligible_users == 25
    assert result.successful_deliveries == 12
    assert result.failed_deliveries == 13


@pytest.mark.asyncio
async def test_empty_run_has_full_success_rate():
    result = await _run_in_batches("test", [], AsyncMock())

    assert result.success_rate == 100.0
