"""
models/payment_method.py
------------------------
Domain model for a user's payment methods (cards, pix, cash).
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class PaymentMethod:
    """
    A payment method owned by a user.

    Attributes:
        id: Database primary key.
        user_id: Owner.
        name: Display name, e.g. 'Nubank'.
        type: 'credit', 'debit', 'pix' or 'cash'.
        credit_mode: True when tracked by statement period instead of calendar month.
        statement_closing_day: Day of month the statement closes (1-31).
        payment_due_day: Days after closing until the payment is due.
        monthly_budget: Optional spending limit per statement period.
    """
    user_id: int
    name: str
    type: str = "credit"
    credit_mode: bool = False
    statement_closing_day: Optional[int] = None
    payment_due_day: Optional[int] = None
    monthly_budget: Optional[float] = None
    id: Optional[int] = None

    def is_credit_card(self) -> bool:
        return self.type == "credit" and self.credit_mode
