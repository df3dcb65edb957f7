"""Unit tests for reminder message composition"""

from datetime import date

import pytest

from models.reminder import BudgetData
from reminders.message_builder import build_payment_reminder, build_statement_reminder


def _budget(total, budget):
    remaining = budget - total if budget else None
    percentage = round(total / budget * 100) if budget else None
    return BudgetData(total_spent=total, budget=budget, remaining=remaining, percentage=percentage,
                      period_start=date(2024, 12, 6), period_end=date(2025, 1, 5),
                      next_closing=date(2025, 1, 5))


def test_statement_reminder_with_budget_remaining():
    text = build_statement_reminder("pt-BR", "Nubank", 3, date(2025, 1, 5), _budget(1200, 2000))

    assert "Sua fatura do *Nubank* fecha em 3 dias (5 de Janeiro)." in text
    assert "📅 Período atual: 6 Dez - 5 Jan" in text
    assert "💳 Total até agora: R$ 1.200,00" in text
    assert "📊 Orçamento: R$ 2.000,00 (60% usado)" in text
    assert "Restam R$ 800,00" in text


def test_statement_reminder_over_budget():
    text = build_statement_reminder("pt-BR", "Nubank", 3, date(2025, 1, 5), _budget(2300, 2000))

    assert "R$ 300,00 acima do planejado" in text
    assert "Restam" not in text


def test_statement_reminder_without_budget_has_no_budget_lines():
    text = build_statement_reminder("pt-BR", "Inter", 3, date(2025, 1, 5), _budget(450, None))

    assert "Orçamento" not in text
    assert "R$ 450,00" in text


def test_statement_reminder_in_english():
    text = build_statement_reminder("en", "Nubank", 3, date(2025, 1, 5), _budget(1200, 2000))

    assert "January 5th" in text
    assert "R$1,200.00" in text


def test_payment_reminder():
    text = build_payment_reminder("pt-BR", "Nubank", 2, date(2025, 1, 15), 1234.5,
                                  date(2024, 12, 6), date(2025, 1, 5))

    assert text.startswith("💳 Lembrete: Pagamento do cartão")
    assert "Vence em 2 dias (15 de Janeiro)" in text
    assert "💰 Valor: R$ 1.234,50" in text
    assert "Cartão Nubank" in text
    assert "Período: 6 Dez - 5 Jan" in text


def test_unsupported_locale_raises():
    with pytest.raises(ValueError):
        build_payment_reminder("fr", "Nubank", 2, date(2025, 1, 15), 10,
                               date(2024, 12, 6), date(2025, 1, 5))
