"""
utils/formatters.py
-------------------
Locale-aware formatting of dates and BRL amounts for chat messages.
"""

from datetime import date

from localization import get_locale_pack


def format_currency(amount: float, locale: str = "pt-BR") -> str:
    """
    Format a BRL amount.

    Examples:
        pt-BR → "R$ 1.700,00"
        en    → "R$1,700.00"
    """
    pack = get_locale_pack(locale)
    sign = "-" if amount < 0 else ""
    grouped = f"{abs(amount):,.2f}"
    if pack.CODE == "pt-BR":
        grouped = grouped.replace(",", "_").replace(".", ",").replace("_", ".")
        return f"{sign}R$ {grouped}"
    return f"{sign}R${grouped}"


_ORDINAL_SUFFIXES = {1: "st", 2: "nd", 3: "rd"}


def _ordinal(day: int) -> str:
    if 11 <= day % 100 <= 13:
        return f"{day}th"
    return f"{day}{_ORDINAL_SUFFIXES.get(day % 10, 'th')}"


def format_long_date(day: date, locale: str = "pt-BR", with_year: bool = False) -> str:
    """
    "6 de dezembro" / "December 6", optionally followed by the year.
    """
    pack = get_locale_pack(locale)
    month = pack.MONTHS[day.month - 1]
    if pack.CODE == "pt-BR":
        text = f"{day.day} de {month}"
        return f"{text} de {day.year}" if with_year else text
    text = f"{month} {day.day}"
    return f"{text}, {day.year}" if with_year else text


def format_short_date(day: date, locale: str = "pt-BR") -> str:
    """"6 Dez" / "Dec 6"."""
    pack = get_locale_pack(locale)
    month = pack.MONTHS_SHORT[day.month - 1]
    if pack.CODE == "pt-BR":
        return f"{day.day} {month}"
    return f"{month} {day.day}"


def format_closing_date(day: date, locale: str = "pt-BR") -> str:
    """Closing date inside reminders: "5 de Janeiro" / "January 5th"."""
    pack = get_locale_pack(locale)
    month = pack.MONTHS[day.month - 1]
    if pack.CODE == "pt-BR":
        return f"{day.day} de {month.capitalize()}"
    return f"{month} {_ordinal(day.day)}"


def format_period_dates(start: date, end: date, locale: str = "pt-BR") -> tuple[str, str]:
    """Short start and end labels for a statement period."""
    return format_short_date(start, locale), format_short_date(end, locale)
