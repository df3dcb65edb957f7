"""
scheduler/notification_jobs.py
------------------------------
Telegram notifications that are not credit card reminders: upcoming
recurring payments and the Sunday weekly summary.
"""

from messaging.base import MessagingProvider
from repositories.user_repo import UserRepository
from services.recurring_service import RecurringService
from services.transaction_service import TransactionService
from utils.formatters import format_currency
from utils.logger import get_logger

logger = get_logger(__name__)


async def send_recurring_reminders(provider: MessagingProvider,
                                   recurring: RecurringService | None = None,
                                   users: UserRepository | None = None) -> int:
    """
    Warn users about recurring payments due in the next two days.

    Returns:
        How many reminders were delivered.
    """
    recurring = recurring or RecurringService()
    users = users or UserRepository()
    sent = 0

    for payment in recurring.get_due_reminders():
        try:
            telegram_id = users.get_telegram_id(payment.user_id)
            if telegram_id is None:
                continue
            text = (
                f"⏰ *Pagamento chegando!*\n\n"
                f"📌 {payment.description}\n"
                f"💵 {format_currency(payment.amount)}\n"
                f"📅 Vencimento: {payment.next_due_date:%d/%m/%Y}"
            )
            result = await provider.send_text(str(telegram_id), text)
            if result.success:
                sent += 1
                logger.info(f"Sent recurring reminder #{payment.id} to user {payment.user_id}")
            else:
                logger.warning(f"Recurring reminder #{payment.id} not delivered: {result.error}")
        except Exception as e:
            logger.error(f"Failed to send recurring reminder #{payment.id}: {e}")
    return sent


async def send_weekly_report(provider: MessagingProvider,
                             transactions: TransactionService | None = None,
                             users: UserRepository | None = None) -> int:
    """Send the last-7-days summary to every Telegram user. Returns deliveries."""
    transactions = transactions or TransactionService()
    users = users or UserRepository()
    sent = 0

    for user in users.get_telegram_users():
        try:
            summary = transactions.get_week_summary(user["id"])
            result = await provider.send_text(
                str(user["telegram_id"]),
                f"📬 *Relatório semanal*\n\n{summary}",
            )
            if result.success:
                sent += 1
            else:
                logger.warning(f"Weekly report for user {user['id']} not delivered: {result.error}")
        except Exception as e:
            logger.error(f"Failed to send weekly report to user {user['id']}: {e}")
    logger.info(f"Weekly report delivered to {sent} users")
    return sent
