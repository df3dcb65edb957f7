"""
models/recurring.py
-------------------
Domain model for recurring (scheduled) transactions.
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional


@dataclass
class RecurringPayment:
    """
    Represents a recurring transaction (rent, subscription, salary, ...).

    Attributes:
        id: Database primary key (None for new records).
        user_id: Internal user ID.
        description: Friendly name of the payment (e.g., 'Aluguel', 'Netflix').
        amount: Payment amount.
        type: 'expense' or 'income'.
        day_of_month: Day the transaction happens each month (1-31).
        next_due_date: The next date a transaction will be generated.
        category_id: Optional category for generated transactions.
        payment_method: Optional payment method for generated transactions.
        active: Whether this recurring payment is currently active.
        created_at: Timestamp when the record was created.
    """
    user_id: int
    description: str
    amount: float
    day_of_month: int
    next_due_date: date
    type: str = "expense"
    category_id: Optional[int] = None
    category_name: Optional[str] = None
    payment_method: Optional[str] = None
    active: bool = True
    id: Optional[int] = None
    created_at: Optional[datetime] = None

    def __str__(self) -> str:
        status = "✅" if self.active else "❌"
        return f"{status} {self.description}: R$ {self.amount:.2f} (dia {self.day_of_month}) - Próximo: {self.next_due_date:%d/%m/%Y}"
