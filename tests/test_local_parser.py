"""Unit tests for the keyword-based local parser"""

from datetime import date

import pytest

from nlp.local_parser import parse_local
from nlp.text_utils import extract_amount, extract_date, normalize, parse_amount

TODAY = date(2025, 1, 15)


def test_expense_with_amount_and_category():
    intent = parse_local("gastei 50 no mercado", TODAY)

    assert intent.action == "add_expense"
    assert intent.strategy == "local_nlp"
    assert intent.confidence >= 0.8
    assert intent.entities["amount"] == 50.0
    assert intent.entities["category"] == "Mercado"
    assert intent.entities["description"] == "mercado"


def test_expense_with_date_and_payment_method():
    intent = parse_local("paguei 23,90 de uber ontem no pix", TODAY)

    assert intent.entities["amount"] == 23.9
    assert intent.entities["date"] == "2025-01-14"
    assert intent.entities["payment_method"] == "pix"
    assert intent.entities["category"] == "Transporte"


def test_expense_without_amount_has_low_confidence():
    intent = parse_local("gastei no mercado", TODAY)

    assert intent.action == "add_expense"
    assert intent.confidence < 0.8


def test_income():
    intent = parse_local("recebi 3000 de salário", TODAY)

    assert intent.action == "add_income"
    assert intent.entities["amount"] == 3000.0
    assert intent.entities["category"] == "Salário"


def test_amount_with_category_keyword_only():
    intent = parse_local("50 uber", TODAY)

    assert intent.action == "add_expense"
    assert intent.entities["category"] == "Transporte"


def test_installment_total():
    intent = parse_local("celular 1200 em 12x no nubank", TODAY)

    assert intent.action == "create_installment"
    assert intent.entities["installments"] == 12
    assert intent.entities["amount"] == 1200.0
    assert intent.entities["payment_method"] == "nubank"


def test_installment_value_per_month():
    intent = parse_local("12x de 100 na geladeira", TODAY)

    assert intent.action == "create_installment"
    assert intent.entities["installment_amount"] == 100.0
    assert "amount" not in intent.entities


def test_recurring_with_day():
    intent = parse_local("aluguel 1500 todo dia 5 recorrente", TODAY)

    assert intent.action == "add_recurring"
    assert intent.entities["amount"] == 1500.0
    assert intent.entities["day_of_month"] == 5
    assert intent.entities["category"] == "Moradia"


def test_show_recurring():
    assert parse_local("meus gastos fixos", TODAY).action == "show_recurring"


def test_budget_show_and_set():
    assert parse_local("mostrar orçamento", TODAY).action == "show_budget"

    intent = parse_local("orçamento de 500 para mercado", TODAY)
    assert intent.action == "set_budget"
    assert intent.entities == {"amount": 500.0, "category": "Mercado"}


def test_report_for_explicit_month():
    intent = parse_local("relatório 03/2025", TODAY)

    assert intent.action == "show_report"
    assert intent.entities == {"month": 3, "year": 2025}


def test_spending_question_for_last_month():
    intent = parse_local("quanto gastei no mês passado?", TODAY)

    assert intent.action == "show_report"
    assert intent.entities == {"month": 12, "year": 2024}


@pytest.mark.parametrize("text, action", [
    ("ajuda", "help"),
    ("parar lembretes", "reminders_opt_out"),
    ("ativar lembretes", "reminders_opt_in"),
    ("desfazer", "undo_last"),
    ("resumo da fatura", "view_statement_summary"),
    ("parcelas futuras", "view_future_commitments"),
    ("analisar meus gastos", "analyze_spending"),
    ("listar categorias", "list_categories"),
])
def test_keyword_actions(text, action):
    assert parse_local(text, TODAY).action == action


def test_search_query():
    intent = parse_local("buscar netflix", TODAY)

    assert intent.action == "search_transactions"
    assert intent.entities["query"] == "netflix"


def test_unrelated_text_is_not_understood():
    assert parse_local("bom dia", TODAY) is None
    assert parse_local("   ", TODAY) is None


def test_text_helpers():
    assert normalize("Orçamento Salário") == "orcamento salario"
    assert parse_amount("R$ 1.234,56") == 1234.56
    assert parse_amount("12.5") == 12.5
    assert parse_amount("-3") is None
    assert extract_amount("dia 10 paguei 35") == 35.0
    assert extract_date("comprei anteontem", TODAY) == date(2025, 1, 13)
    assert extract_date("em 20/12/24", TODAY) == date(2024, 12, 20)
