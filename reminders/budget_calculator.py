"""
reminders/budget_calculator.py
------------------------------
Spending-versus-budget figures for a card's open statement.
"""

import math
from datetime import date
from typing import Optional

from models.reminder import BudgetData
from repositories.transaction_repo import TransactionRepository
from utils.logger import get_logger
from utils.statement_period import get_statement_period

logger = get_logger(__name__)

transaction_repo = TransactionRepository()


def calculate_statement_total(user_id: int, payment_method_id: int,
                              period_start: date, period_end: date) -> float:
    """Sum of expenses charged to a card within a statement period."""
    total = transaction_repo.sum_expenses_for_payment_method(
        user_id, payment_method_id, period_start, period_end
    )
    logger.debug(
        f"Statement total for user {user_id}, card {payment_method_id} "
        f"({period_start}..{period_end}): {total:.2f}"
    )
    return total


def calculate_budget_data(user_id: int, payment_method_id: int, closing_day: int,
                          monthly_budget: Optional[float],
                          today: Optional[date] = None) -> BudgetData:
    """
    Spending in the statement open on `today`, compared to the card budget.

    Remaining and percentage are only filled in when a positive budget is set;
    remaining goes negative once the budget is exceeded.
    """
    period = get_statement_period(today or date.today(), closing_day)
    total_spent = calculate_statement_total(
        user_id, payment_method_id, period.period_start, period.period_end
    )

    remaining = None
    percentage = None
    if monthly_budget and monthly_budget > 0:
        remaining = monthly_budget - total_spent
        # Half up, so 12.5% shows as 13%
        percentage = math.floor(total_spent / monthly_budget * 100 + 0.5)

    return BudgetData(
        total_spent=total_spent,
        budget=monthly_budget,
        remaining=remaining,
        percentage=percentage,
        period_start=period.period_start,
        period_end=period.period_end,
        next_closing=period.period_end,
    )


def get_budget_status(percentage: float) -> str:
    """'exceeded' at 100% or more, 'near-limit' from 80%, otherwise 'on-track'."""
    if percentage >= 100:
        return "exceeded"
    if percentage >= 80:
        return "near-limit"
    return "on-track"
