"""
reminders/message_builder.py
----------------------------
Composes the reminder texts in the recipient's language.
"""

from datetime import date

from localization import get_locale_pack
from models.reminder import BudgetData
from utils.formatters import format_closing_date, format_currency, format_period_dates


def build_statement_reminder(locale: str, payment_method_name: str, days_until_closing: int,
                             closing_date: date, budget: BudgetData) -> str:
    """
    Statement-closing reminder.

    Budget lines are included only when the card has a budget; the closing
    line switches between "remaining" and "over budget".

    Raises:
        ValueError: For unsupported locales.
    """
    t = get_locale_pack(locale)
    start, end = format_period_dates(budget.period_start, budget.period_end, locale)

    lines = [
        t.STATEMENT_GREETING,
        "",
        t.STATEMENT_CLOSING_IN.format(
            payment_method=payment_method_name,
            days=days_until_closing,
            date=format_closing_date(closing_date, locale),
        ),
        "",
        t.STATEMENT_PERIOD.format(start=start, end=end),
        t.STATEMENT_TOTAL.format(amount=format_currency(budget.total_spent, locale)),
    ]

    if budget.budget and budget.budget > 0 and budget.percentage is not None:
        lines.append(t.STATEMENT_BUDGET.format(
            budget=format_currency(budget.budget, locale),
            percentage=budget.percentage,
        ))
        lines.append("")
        if budget.remaining is not None and budget.remaining >= 0:
            lines.append(t.STATEMENT_REMAINING.format(amount=format_currency(budget.remaining, locale)))
        else:
            over = abs(budget.remaining or 0)
            lines.append(t.STATEMENT_EXCEEDED.format(amount=format_currency(over, locale)))

    lines += ["", t.STATEMENT_CTA]
    return "\n".join(lines)


def build_payment_reminder(locale: str, payment_method_name: str, days_until_due: int,
                           due_date: date, amount: float,
                           period_start: date, period_end: date) -> str:
    """
    Credit card payment-due reminder.

    Raises:
        ValueError: For unsupported locales.
    """
    t = get_locale_pack(locale)
    start, end = format_period_dates(period_start, period_end, locale)

    lines = [
        t.PAYMENT_TITLE,
        "",
        t.PAYMENT_DUE_IN.format(days=days_until_due, date=format_closing_date(due_date, locale)),
        t.PAYMENT_AMOUNT.format(amount=format_currency(amount, locale)),
        "",
        t.PAYMENT_CARD.format(name=payment_method_name),
        t.PAYMENT_PERIOD.format(start=start, end=end),
        "",
        t.PAYMENT_FOOTER,
    ]
    return "\n".join(lines)
