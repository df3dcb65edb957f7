"""
models/budget.py
----------------
Statement-period budget aggregation shapes.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Optional


@dataclass
class InstallmentInfo:
    payment_number: int
    total_installments: int
    plan_description: Optional[str] = None


@dataclass
class TransactionDetail:
    """One spending row inside a statement period."""
    date: date
    description: Optional[str]
    amount: float
    category_name: str
    category_emoji: Optional[str] = None
    installment_info: Optional[InstallmentInfo] = None


@dataclass
class CategoryBreakdown:
    """Spending of one category inside a statement period."""
    category_id: Optional[int]
    category_name: str
    category_emoji: Optional[str]
    category_total: float = 0.0
    regular_count: int = 0
    installment_count: int = 0
    transactions: list[TransactionDetail] = field(default_factory=list)


@dataclass
class BudgetBreakdown:
    """Everything spent in one statement period, grouped by category."""
    total_spent: float = 0.0
    regular_transactions: int = 0
    installment_payments: int = 0
    categories: list[CategoryBreakdown] = field(default_factory=list)
    transaction_details: list[TransactionDetail] = field(default_factory=list)
