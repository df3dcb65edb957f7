"""
localization/ - User-facing text
================================
One module per supported language. Each exposes month names and the
message templates used by scheduled reminders and date formatting.
"""

from types import ModuleType
from typing import Optional

from config import DEFAULT_LOCALE
from localization import en, pt_br

_PACKS: dict[str, ModuleType] = {
    "pt-br": pt_br,
    "pt": pt_br,
    "en": en,
    "en-us": en,
}


def is_supported(locale: Optional[str]) -> bool:
    return bool(locale) and locale.lower() in _PACKS


def normalize_locale(locale: Optional[str]) -> str:
    """Map any stored locale value to 'pt-BR' or 'en', falling back to the default."""
    if not is_supported(locale):
        return DEFAULT_LOCALE
    return _PACKS[locale.lower()].CODE


def get_locale_pack(locale: str) -> ModuleType:
    """
    Return the text module for a locale.

    Raises:
        ValueError: If the locale has no translation.
    """
    if not is_supported(locale):
        raise ValueError(f"Unsupported locale: {locale}")
    return _PACKS[locale.lower()]
