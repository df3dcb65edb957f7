"""
models/reminder.py
------------------
Read-only projections and results used by the reminder pipeline.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Optional


@dataclass
class EligibleUser:
    """
    A user whose credit card statement closes on the reminder target date.

    Attributes:
        user_id: Internal user ID.
        whatsapp_jid: Full WhatsApp JID, if known.
        whatsapp_lid: WhatsApp LID, if known.
        whatsapp_number: Bare phone number, if known.
        locale: 'pt-BR' or 'en'.
        payment_method_id: The card being reminded about.
        payment_method_name: Display name of the card.
        statement_closing_day: Day of month the statement closes.
        monthly_budget: Optional card budget for the period.
    """
    user_id: int
    payment_method_id: int
    payment_method_name: str
    statement_closing_day: int
    locale: str = "pt-BR"
    whatsapp_jid: Optional[str] = None
    whatsapp_lid: Optional[str] = None
    whatsapp_number: Optional[str] = None
    monthly_budget: Optional[float] = None


@dataclass
class EligiblePaymentReminder:
    """A credit card whose statement payment is due on the reminder target date."""
    user_id: int
    payment_method_id: int
    payment_method_name: str
    statement_closing_day: int
    payment_due_day: int
    due_date: date
    statement_period_start: date
    statement_period_end: date
    locale: str = "pt-BR"
    whatsapp_jid: Optional[str] = None
    whatsapp_lid: Optional[str] = None
    whatsapp_number: Optional[str] = None


@dataclass
class SendResult:
    """Outcome of delivering one reminder, after all retries."""
    success: bool
    attempts: int
    error: Optional[str] = None
    error_category: Optional[str] = None


@dataclass
class BudgetData:
    """Spending within the current statement period versus the card budget."""
    total_spent: float
    budget: Optional[float]
    remaining: Optional[float]
    percentage: Optional[int]
    period_start: date
    period_end: date
    next_closing: date


@dataclass
class ReminderJobResult:
    """Aggregate outcome of one reminder job run."""
    eligible_users: int = 0
    successful_deliveries: int = 0
    failed_deliveries: int = 0
    duration_ms: int = 0
    errors: list[dict] = field(default_factory=list)

    @property
    def success_rate(self) -> float:
        if self.eligible_users == 0:
            return 100.0
        return self.successful_deliveries / self.eligible_users * 100
