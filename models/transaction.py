"""
models/transaction.py
---------------------
Domain model for financial transactions (expenses and income).
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional


@dataclass
class Transaction:
    """
    Represents a single financial transaction.

    Attributes:
        id: Database primary key (None for new records).
        user_id: Internal user ID.
        type: Either 'expense' or 'income'.
        amount: Transaction amount in BRL.
        category_id: Category foreign key, if categorized.
        category_name: Denormalized category name for display.
        payment_method: Free-text payment method ("pix", "nubank", ...).
        payment_method_id: Linked payment method row, when known.
        description: Optional human-readable note.
        date: Date of the transaction.
        installment_plan_id: Set when the row is one installment of a plan.
        installment_number: 1-based installment position in its plan.
        raw_text: The original message text from the user.
        created_at: Timestamp when the record was created.
    """
    user_id: int
    type: str  # 'expense' | 'income'
    amount: float
    date: date = field(default_factory=date.today)
    category_id: Optional[int] = None
    category_name: Optional[str] = None
    payment_method: Optional[str] = None
    payment_method_id: Optional[int] = None
    description: Optional[str] = None
    installment_plan_id: Optional[int] = None
    installment_number: Optional[int] = None
    raw_text: Optional[str] = None
    id: Optional[int] = None
    created_at: Optional[datetime] = None

    def is_expense(self) -> bool:
        """Returns True if this is an expense transaction."""
        return self.type == "expense"

    def is_income(self) -> bool:
        """Returns True if this is an income transaction."""
        return self.type == "income"

    def __str__(self) -> str:
        sign = "-" if self.is_expense() else "+"
        return f"{sign}R$ {self.amount:.2f} | {self.category_name or 'Sem Categoria'} | {self.date}"
