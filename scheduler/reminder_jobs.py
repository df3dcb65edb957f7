"""
scheduler/reminder_jobs.py
--------------------------
Daily credit card reminder jobs.

Each job loads the eligible users, then works through them in fixed-size
batches; every user in a batch is processed concurrently and one user's
failure never affects another's.
"""

import asyncio
import time
from datetime import date
from typing import Awaitable, Callable, Optional, TypeVar

from config import (
    PAYMENT_REMINDER_DAYS_BEFORE,
    REMINDER_BATCH_SIZE,
    REMINDER_MAX_DURATION_SECONDS,
    REMINDER_MIN_SUCCESS_RATE,
)
from messaging.base import MessagingProvider
from models.reminder import EligiblePaymentReminder, EligibleUser, ReminderJobResult, SendResult
from reminders.budget_calculator import calculate_budget_data, calculate_statement_total
from reminders.eligibility import (
    get_eligible_payment_reminders,
    get_eligible_users_for_statement_reminders,
)
from reminders.message_builder import build_payment_reminder, build_statement_reminder
from reminders.sender import send_reminder_with_retry
from utils.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


async def _run_in_batches(
    job_name: str,
    targets: list[T],
    process: Callable[[T], Awaitable[SendResult]],
    batch_size: int = REMINDER_BATCH_SIZE,
) -> ReminderJobResult:
    """Process targets batch by batch and aggregate the outcomes."""
    started = time.monotonic()
    result = ReminderJobResult(eligible_users=len(targets))

    for offset in range(0, len(targets), batch_size):
        batch = targets[offset:offset + batch_size]
        outcomes = await asyncio.gather(*(process(t) for t in batch), return_exceptions=True)

        for target, outcome in zip(batch, outcomes):
            if isinstance(outcome, BaseException):
                outcome = SendResult(False, 0, str(outcome), "unknown")
            if outcome.success:
                result.successful_deliveries += 1
            else:
                result.failed_deliveries += 1
                result.errors.append({
                    "user_id": target.user_id,
                    "payment_method_id": target.payment_method_id,
                    "error": outcome.error,
                    "error_category": outcome.error_category,
                })

    result.duration_ms = int((time.monotonic() - started) * 1000)

    logger.info(
        f"{job_name}: {result.successful_deliveries}/{result.eligible_users} delivered, "
        f"{result.failed_deliveries} failed in {result.duration_ms} ms"
    )
    if result.success_rate < REMINDER_MIN_SUCCESS_RATE:
        logger.warning(f"{job_name}: success rate {result.success_rate:.1f}% is below target")
    if result.duration_ms > REMINDER_MAX_DURATION_SECONDS * 1000:
        logger.warning(f"{job_name}: run took {result.duration_ms} ms")
    return result


async def send_statement_reminders(provider: MessagingProvider,
                                   today: Optional[date] = None) -> ReminderJobResult:
    """Remind users that their card statement closes soon, with spending so far."""
    today = today or date.today()
    if not provider.is_connected():
        logger.warning("Statement reminders skipped: messaging provider not connected")
        return ReminderJobResult()

    users = get_eligible_users_for_statement_reminders(today)

    async def process(user: EligibleUser) -> SendResult:
        try:
            budget = calculate_budget_data(
                user.user_id, user.payment_method_id, user.statement_closing_day,
                user.monthly_budget, today,
            )
            message = build_statement_reminder(
                user.locale,
                user.payment_method_name,
                (budget.next_closing - today).days,
                budget.next_closing,
                budget,
            )
            return await send_reminder_with_retry(provider, user, message)
        except Exception as e:
            logger.error(f"Statement reminder for user {user.user_id} failed before sending: {e}")
            return SendResult(False, 0, str(e), "processing_error")

    return await _run_in_batches("send-statement-reminders", users, process)


async def send_credit_card_payment_reminders(provider: MessagingProvider,
                                             today: Optional[date] = None) -> ReminderJobResult:
    """Remind users that a closed statement's payment is due soon."""
    today = today or date.today()
    if not provider.is_connected():
        logger.warning("Payment reminders skipped: messaging provider not connected")
        return ReminderJobResult()

    reminders = get_eligible_payment_reminders(today)

    async def process(reminder: EligiblePaymentReminder) -> SendResult:
        try:
            amount = calculate_statement_total(
                reminder.user_id, reminder.payment_method_id,
                reminder.statement_period_start, reminder.statement_period_end,
            )
            message = build_payment_reminder(
                reminder.locale,
                reminder.payment_method_name,
                PAYMENT_REMINDER_DAYS_BEFORE,
                reminder.due_date,
                amount,
                reminder.statement_period_start,
                reminder.statement_period_end,
            )
            return await send_reminder_with_retry(provider, reminder, message)
        except Exception as e:
            logger.error(f"Payment reminder for user {reminder.user_id} failed before sending: {e}")
            return SendResult(False, 0, str(e), "processing_error")

    return await _run_in_batches("send-credit-card-payment-reminders", reminders, process)
