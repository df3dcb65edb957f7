"""
reminders/sender.py
-------------------
Delivers one reminder with bounded retries.

Transient failures (network, rate limits, unknown) are retried with an
exponential backoff; permanent failures (blocked, unauthorized, invalid
number) stop immediately. The caller always gets a SendResult back.
"""

import asyncio
from typing import Awaitable, Callable, Optional, Union

from config import (
    REMINDER_BACKOFF_BASE_SECONDS,
    REMINDER_BACKOFF_FACTOR,
    REMINDER_MAX_ATTEMPTS,
)
from messaging.base import MessagingProvider
from models.errors import MessageDeliveryError
from models.reminder import EligiblePaymentReminder, EligibleUser, SendResult
from reminders.error_classifier import get_error_category, is_transient_error
from utils.logger import get_logger

logger = get_logger(__name__)

ReminderTarget = Union[EligibleUser, EligiblePaymentReminder]


def exponential_backoff(attempt: int) -> float:
    """Seconds to wait after failed attempt number `attempt` (1 s, 5 s, 25 s, ...)."""
    return REMINDER_BACKOFF_BASE_SECONDS * REMINDER_BACKOFF_FACTOR ** (attempt - 1)


def get_user_jid(user: ReminderTarget) -> Optional[str]:
    """
    Pick the WhatsApp address to deliver to.

    Preference: stored JID, then LID, then a JID derived from the phone number.
    """
    if user.whatsapp_jid:
        return user.whatsapp_jid
    if user.whatsapp_lid:
        return user.whatsapp_lid
    if user.whatsapp_number:
        digits = "".join(ch for ch in user.whatsapp_number if ch.isdigit())
        return f"{digits}@s.whatsapp.net" if digits else None
    return None


async def send_reminder_with_retry(
    provider: MessagingProvider,
    user: ReminderTarget,
    message: str,
    max_attempts: int = REMINDER_MAX_ATTEMPTS,
    backoff: Callable[[int], float] = exponential_backoff,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> SendResult:
    """
    Send a reminder, retrying transient failures.

    Args:
        provider: Any MessagingProvider implementation.
        user: Eligible user or payment reminder carrying WhatsApp identifiers.
        message: Text to send.
        max_attempts: Upper bound on delivery attempts.
        backoff: Maps a failed attempt number to seconds to wait.
        sleep: Awaitable sleep, replaceable in tests.

    Returns:
        SendResult with the number of attempts made and, on failure, the
        last error and its category. Never raises.
    """
    jid = get_user_jid(user)
    if not jid:
        logger.warning(f"User {user.user_id} has no WhatsApp identifier, reminder skipped")
        return SendResult(
            success=False,
            attempts=0,
            error="No valid WhatsApp identifier",
            error_category="invalid_number",
        )

    last_error: Optional[Exception] = None
    attempt = 0

    while attempt < max_attempts:
        attempt += 1
        try:
            result = await provider.send_text(jid, message)
            if not result.success:
                raise MessageDeliveryError(result.error or "delivery failed")

            logger.info(
                f"Reminder delivered to user {user.user_id} "
                f"via {provider.platform} (attempt {attempt}/{max_attempts})"
            )
            return SendResult(success=True, attempts=attempt)

        except Exception as e:
            last_error = e
            category = get_error_category(e)
            transient = is_transient_error(e)
            logger.warning(
                f"Reminder attempt {attempt}/{max_attempts} for user {user.user_id} failed "
                f"[{category}, {'transient' if transient else 'permanent'}]: {e}"
            )
            if not transient:
                break
            if attempt < max_attempts:
                await sleep(backoff(attempt))

    logger.error(f"Giving up on reminder for user {user.user_id} after {attempt} attempt(s): {last_error}")
    return SendResult(
        success=False,
        attempts=attempt,
        error=str(last_error),
        error_category=get_error_category(last_error),
    )
