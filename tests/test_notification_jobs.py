"""Unit tests for recurring payment reminders, the weekly report and retention cleanup (metrics, cache, learned patterns)"""

from datetime import date
from unittest.mock import MagicMock, patch

import pytest

from db.maintenance import main as maintenance_main, run_retention_cleanup
from messaging.base import MessageResult
from models.recurring import RecurringPayment
from scheduler.notification_jobs import send_recurring_reminders, send_weekly_report


def _payment(payment_id, user_id):
    return RecurringPayment(user_id=user_id, description="Netflix", amount=55.9,
                            day_of_month=20, next_due_date=date(2025, 1, 20), id=payment_id)


@pytest.mark.asyncio
async def test_recurring_reminders_go_to_telegram_ids(provider):
    recurring = MagicMock()
    recurring.get_due_reminders.return_value = [_payment(1, 10), _payment(2, 11)]
    users = MagicMock()
    users.get_telegram_id.side_effect = [555, None]

    sent = await send_recurring_reminders(provider, recurring=recurring, users=users)

    assert sent == 1
    provider.send_text.assert_awaited_once()
    recipient, text = provider.send_text.await_args.args
    assert recipient == "555"
    assert "Netflix" in text
    assert "20/01/2025" in text


@pytest.mark.asyncio
async def test_one_failing_reminder_does_not_stop_the_rest(provider):
    recurring = MagicMock()
    recurring.get_due_reminders.return_value = [_payment(1, 10), _payment(2, 11)]
    users = MagicMock()
    users.get_telegram_id.side_effect = [RuntimeError("db down"), 777]

    assert await send_recurring_reminders(provider, recurring=recurring, users=users) == 1


@pytest.mark.asyncio
async def test_weekly_report_counts_only_delivered(provider):
    users = MagicMock()
    users.get_telegram_users.return_value = [
        {"id": 1, "telegram_id": 100, "first_name": "Ana"},
        {"id": 2, "telegram_id": 200, "first_name": "Bia"},
    ]
    transactions = MagicMock()
    transactions.get_week_summary.return_value = "Gastos: R$ 10,00"
    provider.send_text.side_effect = [
        MessageResult(success=True, message_id="1"),
        MessageResult(success=False, error="Forbidden: bot was blocked by the user"),
    ]

    sent = await send_weekly_report(provider, transactions=transactions, users=users)

    assert sent == 1
    assert transactions.get_week_summary.call_count == 2
    assert "Relatório semanal" in provider.send_text.await_args_list[0].args[1]


def test_retention_cleanup_reports_removed_rows():
    metrics_repo = MagicMock()
    metrics_repo.delete_older_than.return_value = 12
    cache_repo = MagicMock()
    cache_repo.delete_unused_older_than.return_value = 3
    pattern_repo = MagicMock()
    pattern_repo.archive_low_usage.return_value = 4
    pattern_repo.delete_failed.return_value = 1

    removed = run_retention_cleanup(30, metrics_repo=metrics_repo, cache_repo=cache_repo,
                                    pattern_repo=pattern_repo)

    assert removed == {
        "parsing_metrics": 12,
        "message_embeddings": 3,
        "archived_patterns": 4,
        "deleted_patterns": 1,
    }
    metrics_repo.delete_older_than.assert_called_once_with(30)
    cache_repo.delete_unused_older_than.assert_called_once_with(30)
    pattern_repo.archive_low_usage.assert_called_once_with(age_days=30)
    pattern_repo.delete_failed.assert_called_once_with()


def test_maintenance_exit_code_on_failure():
    with patch("db.maintenance.init_pool"), \
         patch("db.maintenance.close_pool") as close_pool, \
         patch("db.maintenance.run_retention_cleanup", side_effect=RuntimeError("boom")):
        assert maintenance_main() == 1
    close_pool.assert_called_once()
