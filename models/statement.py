"""
models/statement.py
-------------------
Credit-card statement (billing) period shapes.
"""

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class StatementPeriod:
    """
    A closed date interval ending on a card's closing day.

    Attributes:
        period_start: First day of the period (day after the previous closing).
        period_end: Closing date of the statement.
    """
    period_start: date
    period_end: date

    def __contains__(self, day: date) -> bool:
        return self.period_start <= day <= self.period_end


@dataclass(frozen=True)
class StatementPeriodInfo:
    """Which statement a given date falls into, relative to a reference date."""
    period: str  # 'current' | 'next' | 'past'
    period_start: date
    period_end: date
