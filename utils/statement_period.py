"""
utils/statement_period.py
-------------------------
Credit card statement period arithmetic.

A card with closing day N has statements running from the day after the
N-th of one month through the N-th of the next. Closing days past the end
of a short month clamp to that month's last day, so consecutive periods
always touch with no gap and no overlap.
"""

from datetime import date, timedelta
from typing import Optional

from dateutil.relativedelta import relativedelta

from config import DEFAULT_CLOSING_DAY
from models.statement import StatementPeriod, StatementPeriodInfo
from utils.formatters import format_long_date, format_short_date


def _validate_closing_day(closing_day: int) -> None:
    if not isinstance(closing_day, int) or not 1 <= closing_day <= 31:
        raise ValueError(f"closing_day must be between 1 and 31, got {closing_day!r}")


def _closing_date(month_anchor: date, closing_day: int) -> date:
    """Closing date inside the month of `month_anchor`, clamped to the month's last day."""
    return month_anchor.replace(day=1) + relativedelta(day=closing_day)


def get_statement_period(today: Optional[date] = None,
                         closing_day: int = DEFAULT_CLOSING_DAY) -> StatementPeriod:
    """
    Compute the statement period that contains `today`.

    Args:
        today: Reference date (defaults to the current date).
        closing_day: Day of month the statement closes (1-31).

    Returns:
        StatementPeriod with inclusive start and end.

    Raises:
        ValueError: If closing_day is outside 1-31.

    Example:
        >>> get_statement_period(date(2025, 1, 3), 5)
        StatementPeriod(period_start=datetime.date(2024, 12, 6), period_end=datetime.date(2025, 1, 5))
    """
    _validate_closing_day(closing_day)
    today = today or date.today()
    this_month_close = _closing_date(today, closing_day)

    if today <= this_month_close:
        previous_close = _closing_date(today - relativedelta(months=1), closing_day)
        return StatementPeriod(previous_close + timedelta(days=1), this_month_close)

    next_close = _closing_date(today + relativedelta(months=1), closing_day)
    return StatementPeriod(this_month_close + timedelta(days=1), next_close)


def get_next_period(period: StatementPeriod, closing_day: int) -> StatementPeriod:
    """The statement immediately after `period`."""
    _validate_closing_day(closing_day)
    return StatementPeriod(
        period.period_end + timedelta(days=1),
        _closing_date(period.period_end + relativedelta(months=1), closing_day),
    )


def get_previous_period(period: StatementPeriod, closing_day: int) -> StatementPeriod:
    """The statement immediately before `period`."""
    _validate_closing_day(closing_day)
    previous_end = period.period_start - timedelta(days=1)
    before_that = _closing_date(previous_end - relativedelta(months=1), closing_day)
    return StatementPeriod(before_that + timedelta(days=1), previous_end)


def is_date_in_period(day: date, period: StatementPeriod) -> bool:
    """Inclusive on both boundaries."""
    return period.period_start <= day <= period.period_end


def get_statement_period_for_date(closing_day: int, transaction_date: date,
                                  reference_date: Optional[date] = None) -> StatementPeriodInfo:
    """
    Classify a transaction date against the statement that is open on `reference_date`.

    Returns:
        StatementPeriodInfo with period 'current', 'next' (any date after the
        open statement) or 'past', and the boundaries of the matching statement.
    """
    current = get_statement_period(reference_date or date.today(), closing_day)

    if is_date_in_period(transaction_date, current):
        return StatementPeriodInfo("current", current.period_start, current.period_end)

    if transaction_date > current.period_end:
        upcoming = get_next_period(current, closing_day)
        return StatementPeriodInfo("next", upcoming.period_start, upcoming.period_end)

    past = get_statement_period(transaction_date, closing_day)
    return StatementPeriodInfo("past", past.period_start, past.period_end)


def get_month_bounds(year: int, month: int) -> tuple[date, date]:
    """First and last day of a calendar month."""
    start = date(year, month, 1)
    return start, start + relativedelta(day=31)


def days_until_closing(today: date, closing_day: int) -> int:
    """Days left until the open statement closes (0 on the closing day)."""
    return (get_statement_period(today, closing_day).period_end - today).days


def format_statement_date(day: date, locale: str = "pt-BR", short: bool = False) -> str:
    """'6 de dezembro' / 'December 6', or '6 Dez' / 'Dec 6' when short."""
    if short:
        return format_short_date(day, locale)
    return format_long_date(day, locale)


def format_statement_period(period: StatementPeriod, locale: str = "pt-BR") -> str:
    """
    Human-readable period label.

    Periods that cross a year boundary carry the year on both ends:
    '6 de dezembro de 2024 - 5 de janeiro de 2025'.
    """
    crosses_year = period.period_start.year != period.period_end.year
    start = format_long_date(period.period_start, locale, with_year=crosses_year)
    end = format_long_date(period.period_end, locale, with_year=crosses_year)
    return f"{start} - {end}"
