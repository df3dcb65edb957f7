"""Unit tests for statement-period budget aggregation"""

from datetime import date
from unittest.mock import patch

import pytest

from reminders.budget_calculator import calculate_budget_data, get_budget_status
from services.budget_service import UNCATEGORIZED, build_budget_breakdown


def _row(amount, category_id, category_name, installment=None, description=None):
    row = {
        "date": date(2025, 1, 10),
        "description": description,
        "amount": amount,
        "category_id": category_id,
        "category_name": category_name,
        "category_emoji": None,
        "is_installment": installment is not None,
    }
    if installment:
        row["installment_number"], row["total_installments"] = installment
    return row


def test_breakdown_totals_and_counts():
    """One regular purchase and two installment payments"""
    rows = [
        _row(80, 1, "Mercado"),
        _row(100, 2, "Compras", installment=(1, 12), description="Celular"),
        _row(200, 3, "Casa", installment=(3, 8), description="Sofá"),
    ]

    breakdown = build_budget_breakdown(rows)

    assert breakdown.total_spent == 380
    assert breakdown.regular_transactions == 1
    assert breakdown.installment_payments == 2
    assert [c.category_name for c in breakdown.categories] == ["Casa", "Compras", "Mercado"]
    assert [c.category_total for c in breakdown.categories] == [200, 100, 80]


def test_breakdown_keeps_installment_positions():
    breakdown = build_budget_breakdown([_row(200, 3, "Casa", installment=(3, 8))])

    info = breakdown.transaction_details[0].installment_info
    assert (info.payment_number, info.total_installments) == (3, 8)
    assert breakdown.categories[0].installment_count == 1
    assert breakdown.categories[0].regular_count == 0


def test_uncategorized_rows_are_grouped():
    breakdown = build_budget_breakdown([_row(10.5, None, None), _row(4.25, None, None)])

    assert len(breakdown.categories) == 1
    assert breakdown.categories[0].category_name == UNCATEGORIZED
    assert breakdown.categories[0].category_total == 14.75


def test_empty_period():
    breakdown = build_budget_breakdown([])

    assert breakdown.total_spent == 0
    assert breakdown.categories == []


def test_budget_status_thresholds():
    assert get_budget_status(50) == "on-track"
    assert get_budget_status(80) == "near-limit"
    assert get_budget_status(100) == "exceeded"
    assert get_budget_status(135) == "exceeded"


@pytest.mark.parametrize("spent,expected", [(125.0, 13), (25.0, 3), (124.9, 12), (1000.0, 100)])
def test_budget_percentage_rounds_half_up(spent, expected):
    with patch("reminders.budget_calculator.calculate_statement_total", return_value=spent):
        data = calculate_budget_data(1, 10, closing_day=5, monthly_budget=1000.0, today=date(2025, 1, 10))

    assert data.percentage == expected
    assert data.remaining == 1000.0 - spent


def test_budget_percentage_needs_positive_budget():
    with patch("reminders.budget_calculator.calculate_statement_total", return_value=125.0):
        data = calculate_budget_data(1, 10, closing_day=5, monthly_budget=0, today=date(2025, 1, 10))

    assert data.percentage is None
    assert data.remaining is None
