"""Unit tests for reminder eligibility queries"""

from datetime import date
from unittest.mock import patch

from config import DEFAULT_LOCALE
from models.payment_method import PaymentMethod
from reminders.eligibility import (
    get_eligible_payment_reminders,
    get_eligible_users_for_statement_reminders,
)


def _card(user_id, card_id, closing_day=8, due_day=None, budget=None):
    return PaymentMethod(user_id=user_id, name=f"Cartão {card_id}", id=card_id,
                         credit_mode=True, statement_closing_day=closing_day,
                         payment_due_day=due_day, monthly_budget=budget)


def test_statement_reminders_filter_opt_out_and_missing_identifier():
    """Opted-out users and users with no WhatsApp identifier are excluded"""
    with patch("reminders.eligibility.payment_method_repo") as pm_repo, \
         patch("reminders.eligibility.user_repo") as user_repo:
        pm_repo.get_credit_cards_closing_on.return_value = [_card(1, 10), _card(2, 20), _card(3, 30)]
        user_repo.get_whatsapp_identifiers.return_value = [
            {"user_id": 1, "whatsapp_jid": "5511@s.whatsapp.net", "whatsapp_lid": None, "whatsapp_number": None},
            {"user_id": 2, "whatsapp_jid": None, "whatsapp_lid": None, "whatsapp_number": "5521"},
        ]
        user_repo.get_profiles.return_value = {
            2: {"locale": "en", "statement_reminders_enabled": False, "payment_reminders_enabled": True},
        }

        eligible = get_eligible_users_for_statement_reminders(date(2025, 1, 5))

    pm_repo.get_credit_cards_closing_on.assert_called_once_with([8])
    assert [u.user_id for u in eligible] == [1]
    assert eligible[0].payment_method_id == 10
    assert eligible[0].locale == DEFAULT_LOCALE


def test_statement_reminders_profile_locale_is_used():
    with patch("reminders.eligibility.payment_method_repo") as pm_repo, \
         patch("reminders.eligibility.user_repo") as user_repo:
        pm_repo.get_credit_cards_closing_on.return_value = [_card(1, 10, budget=1500.0)]
        user_repo.get_whatsapp_identifiers.return_value = [
            {"user_id": 1, "whatsapp_jid": None, "whatsapp_lid": "99@lid", "whatsapp_number": None},
        ]
        user_repo.get_profiles.return_value = {1: {"locale": "en", "statement_reminders_enabled": True}}

        eligible = get_eligible_users_for_statement_reminders(date(2025, 1, 5))

    assert eligible[0].locale == "en"
    assert eligible[0].whatsapp_lid == "99@lid"
    assert eligible[0].monthly_budget == 1500.0


def test_last_day_of_month_matches_clamped_closing_days():
    """On February 28, cards closing on 28-31 are all due"""
    with patch("reminders.eligibility.payment_method_repo") as pm_repo, \
         patch("reminders.eligibility.user_repo"):
        pm_repo.get_credit_cards_closing_on.return_value = []

        assert get_eligible_users_for_statement_reminders(date(2025, 2, 25)) == []

    pm_repo.get_credit_cards_closing_on.assert_called_once_with([28, 29, 30, 31])


def test_statement_reminders_repository_failure_yields_empty_list():
    with patch("reminders.eligibility.payment_method_repo") as pm_repo, \
         patch("reminders.eligibility.user_repo"):
        pm_repo.get_credit_cards_closing_on.side_effect = RuntimeError("db down")

        assert get_eligible_users_for_statement_reminders(date(2025, 1, 5)) == []


def test_payment_reminder_for_closed_statement():
    """Closing day 5 + 10 days: the December statement is due on January 15"""
    with patch("reminders.eligibility.payment_method_repo") as pm_repo, \
         patch("reminders.eligibility.user_repo") as user_repo:
        pm_repo.get_credit_cards_with_due_day.return_value = [_card(1, 10, closing_day=5, due_day=10)]
        user_repo.get_whatsapp_identifiers.return_value = [
            {"user_id": 1, "whatsapp_jid": "5511@s.whatsapp.net", "whatsapp_lid": None, "whatsapp_number": None},
        ]
        user_repo.get_profiles.return_value = {}

        reminders = get_eligible_payment_reminders(date(2025, 1, 13))

    assert len(reminders) == 1
    reminder = reminders[0]
    assert reminder.due_date == date(2025, 1, 15)
    assert reminder.statement_period_start == date(2024, 12, 6)
    assert reminder.statement_period_end == date(2025, 1, 5)


def test_payment_reminder_respects_opt_out():
    with patch("reminders.eligibility.payment_method_repo") as pm_repo, \
         patch("reminders.eligibility.user_repo") as user_repo:
        pm_repo.get_credit_cards_with_due_day.return_value = [_card(1, 10, closing_day=5, due_day=10)]
        user_repo.get_whatsapp_identifiers.return_value = [
            {"user_id": 1, "whatsapp_jid": "5511@s.whatsapp.net", "whatsapp_lid": None, "whatsapp_number": None},
        ]
        user_repo.get_profiles.return_value = {1: {"payment_reminders_enabled": False}}

        assert get_eligible_payment_reminders(date(2025, 1, 13)) == []


def test_no_payment_due_on_target_date():
    with patch("reminders.eligibility.payment_method_repo") as pm_repo, \
         patch("reminders.eligibility.user_repo") as user_repo:
        pm_repo.get_credit_cards_with_due_day.return_value = [_card(1, 10, closing_day=5, due_day=10)]

        assert get_eligible_payment_reminders(date(2025, 1, 20)) == []

    user_repo.get_whatsapp_identifiers.assert_not_called()
