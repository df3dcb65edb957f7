"""Unit tests for locale-aware formatting"""

from datetime import date

import pytest

from localization import normalize_locale
from utils.formatters import format_closing_date, format_currency, format_long_date, format_short_date


@pytest.mark.parametrize("amount, locale, expected", [
    (1700, "pt-BR", "R$ 1.700,00"),
    (0.5, "pt-BR", "R$ 0,50"),
    (1234567.891, "pt-BR", "R$ 1.234.567,89"),
    (-45.9, "pt-BR", "-R$ 45,90"),
    (1700, "en", "R$1,700.00"),
])
def test_format_currency(amount, locale, expected):
    assert format_currency(amount, locale) == expected


def test_dates_in_portuguese():
    assert format_long_date(date(2024, 12, 6)) == "6 de dezembro"
    assert format_long_date(date(2024, 12, 6), with_year=True) == "6 de dezembro de 2024"
    assert format_short_date(date(2024, 12, 6)) == "6 Dez"
    assert format_closing_date(date(2025, 3, 5)) == "5 de Março"


def test_dates_in_english():
    assert format_long_date(date(2024, 12, 6), "en") == "December 6"
    assert format_short_date(date(2024, 12, 6), "en") == "Dec 6"
    assert format_closing_date(date(2025, 1, 1), "en") == "January 1st"
    assert format_closing_date(date(2025, 1, 12), "en") == "January 12th"
    assert format_closing_date(date(2025, 1, 23), "en") == "January 23rd"


def test_locale_normalization():
    assert normalize_locale("PT-br") == "pt-BR"
    assert normalize_locale("en-US") == "en"
    assert normalize_locale("de") == normalize_locale(None)
