"""
reminders/eligibility.py
------------------------
Finds who should receive a reminder today.

Two queries share the same filtering: a user is only eligible with at
least one WhatsApp identifier, and is dropped when they explicitly turned
that reminder type off. A missing profile means reminders are on and the
default locale applies.
"""

from datetime import date, timedelta
from typing import Optional

from config import PAYMENT_REMINDER_DAYS_BEFORE, STATEMENT_REMINDER_DAYS_BEFORE
from localization import normalize_locale
from models.reminder import EligiblePaymentReminder, EligibleUser
from repositories.payment_method_repo import PaymentMethodRepository
from repositories.user_repo import UserRepository
from utils.logger import get_logger
from utils.statement_period import get_previous_period, get_statement_period

logger = get_logger(__name__)

payment_method_repo = PaymentMethodRepository()
user_repo = UserRepository()


def _closing_days_matching(target: date) -> list[int]:
    """
    Closing days that fall on `target`.

    On the last day of a month, closing days past the month's length clamp
    onto it, so 29-31 all match on February 28.
    """
    is_last_day = (target + timedelta(days=1)).month != target.month
    if is_last_day:
        return list(range(target.day, 32))
    return [target.day]


def _resolve_recipients(user_ids: list[int], enabled_flag: str) -> dict[int, dict]:
    """
    Apply identifier and opt-out filters.

    Args:
        user_ids: Candidate users.
        enabled_flag: Profile column to honour ('statement_reminders_enabled', ...).

    Returns:
        {user_id: {'whatsapp_jid', 'whatsapp_lid', 'whatsapp_number', 'locale'}}
        for users who should be reminded.
    """
    identifiers: dict[int, dict] = {}
    for row in user_repo.get_whatsapp_identifiers(user_ids):
        # rows arrive primary-first; keep the first per user
        identifiers.setdefault(row["user_id"], row)

    profiles = user_repo.get_profiles(user_ids)
    recipients: dict[int, dict] = {}

    for user_id in user_ids:
        ident = identifiers.get(user_id)
        if not ident or not (ident.get("whatsapp_jid") or ident.get("whatsapp_lid") or ident.get("whatsapp_number")):
            logger.info(f"User {user_id} has no WhatsApp identifier, skipping")
            continue

        profile = profiles.get(user_id) or {}
        if profile.get(enabled_flag) is False:
            logger.info(f"User {user_id} opted out ({enabled_flag}), skipping")
            continue

        recipients[user_id] = {
            "whatsapp_jid": ident.get("whatsapp_jid"),
            "whatsapp_lid": ident.get("whatsapp_lid"),
            "whatsapp_number": ident.get("whatsapp_number"),
            "locale": normalize_locale(profile.get("locale")),
        }
    return recipients


def get_eligible_users_for_statement_reminders(today: Optional[date] = None) -> list[EligibleUser]:
    """
    Cards whose statement closes STATEMENT_REMINDER_DAYS_BEFORE days from today.

    Returns:
        One EligibleUser per (user, card); a user with two cards closing the
        same day gets two entries.
    """
    today = today or date.today()
    target = today + timedelta(days=STATEMENT_REMINDER_DAYS_BEFORE)
    closing_days = _closing_days_matching(target)

    try:
        cards = payment_method_repo.get_credit_cards_closing_on(closing_days)
        logger.info(f"Statement reminders for {target}: {len(cards)} card(s) closing on day(s) {closing_days}")
        if not cards:
            return []
        recipients = _resolve_recipients(
            sorted({c.user_id for c in cards}), "statement_reminders_enabled"
        )
    except Exception as e:
        logger.error(f"Failed to load statement reminder targets for {target}: {e}")
        return []

    eligible = [
        EligibleUser(
            user_id=card.user_id,
            payment_method_id=card.id,
            payment_method_name=card.name,
            statement_closing_day=card.statement_closing_day,
            monthly_budget=card.monthly_budget,
            **recipients[card.user_id],
        )
        for card in cards
        if card.user_id in recipients
    ]
    logger.info(f"{len(eligible)} statement reminder(s) eligible")
    return eligible


def get_eligible_payment_reminders(today: Optional[date] = None) -> list[EligiblePaymentReminder]:
    """
    Cards whose statement payment is due PAYMENT_REMINDER_DAYS_BEFORE days from today.

    A statement's payment is due `payment_due_day` days after it closes, so
    the due date may belong to the statement that already closed or to the
    one still open; both are checked.
    """
    today = today or date.today()
    target = today + timedelta(days=PAYMENT_REMINDER_DAYS_BEFORE)

    due_cards = []
    try:
        for card in payment_method_repo.get_credit_cards_with_due_day():
            current = get_statement_period(today, card.statement_closing_day)
            for period in (get_previous_period(current, card.statement_closing_day), current):
                due_date = period.period_end + timedelta(days=card.payment_due_day)
                if due_date == target:
                    due_cards.append((card, period, due_date))
                    break

        logger.info(f"Payment reminders for {target}: {len(due_cards)} card(s) due")
        if not due_cards:
            return []
        recipients = _resolve_recipients(
            sorted({card.user_id for card, _, _ in due_cards}), "payment_reminders_enabled"
        )
    except Exception as e:
        logger.error(f"Failed to load payment reminder targets for {target}: {e}")
        return []

    eligible = [
        EligiblePaymentReminder(
            user_id=card.user_id,
            payment_method_id=card.id,
            payment_method_name=card.name,
            statement_closing_day=card.statement_closing_day,
            payment_due_day=card.payment_due_day,
            due_date=due_date,
            statement_period_start=period.period_start,
            statement_period_end=period.period_end,
            **recipients[card.user_id],
        )
        for card, period, due_date in due_cards
        if card.user_id in recipients
    ]
    logger.info(f"{len(eligible)} payment reminder(s) eligible")
    return eligible
