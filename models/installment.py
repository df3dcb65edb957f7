"""
models/installment.py
---------------------
Domain model for purchases split into monthly installments ("parcelas").
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional


@dataclass
class InstallmentPlan:
    """
    A purchase paid over N months.

    Attributes:
        id: Database primary key.
        user_id: Owner.
        description: What was bought.
        total_amount: Full purchase price.
        total_installments: Number of monthly payments.
        first_payment_date: Date of installment #1.
        status: 'active', 'paid_off' or 'cancelled'.
        category_id: Optional category applied to each installment.
        payment_method_id: Card the purchase was made on.
    """
    user_id: int
    description: str
    total_amount: float
    total_installments: int
    first_payment_date: date
    status: str = "active"
    category_id: Optional[int] = None
    payment_method_id: Optional[int] = None
    id: Optional[int] = None
    created_at: Optional[datetime] = None

    @property
    def installment_amount(self) -> float:
        return round(self.total_amount / self.total_installments, 2)
