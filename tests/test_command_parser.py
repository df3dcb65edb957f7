"""Unit tests for explicit slash commands"""

from datetime import date, timedelta

import pytest

from nlp.command_parser import get_command_help, parse_command


def test_add_with_amount_and_category():
    intent = parse_command("/add 50 comida")

    assert intent.action == "add_expense"
    assert intent.confidence == 1.0
    assert intent.strategy == "explicit_command"
    assert intent.entities == {"amount": 50.0, "category": "comida", "description": "comida"}


def test_add_with_date_word_and_payment_method():
    intent = parse_command("/add 100 mercado ontem cartão")

    assert intent.entities["date"] == (date.today() - timedelta(days=1)).isoformat()
    assert intent.entities["payment_method"] == "cartão"
    assert intent.entities["amount"] == 100.0


def test_add_with_explicit_date_and_description():
    intent = parse_command("/add 30,50 transporte 15/10/2024 uber aeroporto")

    assert intent.entities["amount"] == 30.5
    assert intent.entities["date"] == "2024-10-15"
    assert intent.entities["description"] == "uber aeroporto"


def test_bot_mention_is_ignored():
    assert parse_command("/add@MeuFinanceiroBot 10 cafe").action == "add_expense"


@pytest.mark.parametrize("text", ["/add", "/add abc comida", "/add 0 comida", "/budget lazer", "/list foo"])
def test_malformed_commands_are_not_recognized(text):
    assert parse_command(text) is None


def test_plain_text_and_unknown_commands():
    assert parse_command("gastei 50 no mercado") is None
    assert parse_command("/desconhecido 1 2") is None


def test_budget_commands():
    assert parse_command("/budget").action == "show_budget"

    intent = parse_command("/budget lazer 300")
    assert intent.action == "set_budget"
    assert intent.entities == {"category": "lazer", "amount": 300.0}


def test_recurring_commands():
    assert parse_command("/recurring").action == "show_recurring"

    intent = parse_command("/recurring aluguel 1200 dia 5")
    assert intent.action == "add_recurring"
    assert intent.entities == {"description": "aluguel", "amount": 1200.0, "day_of_month": 5}

    assert parse_command("/recurring aluguel 1200 dia 40") is None


def test_report_with_month_name_and_year():
    intent = parse_command("/report janeiro 2025")

    assert intent.action == "show_report"
    assert intent.entities == {"month": 1, "year": 2025}


def test_report_with_category_only():
    intent = parse_command("/report mercado")

    assert intent.entities == {"category": "mercado"}


@pytest.mark.parametrize("text, action", [
    ("/list", "show_expenses"),
    ("/list categories", "list_categories"),
    ("/list recurring", "list_recurring"),
    ("/list budgets", "list_budgets"),
    ("/list transactions", "list_transactions"),
    ("/categories", "list_categories"),
    ("/statement", "view_statement_summary"),
    ("/undo", "undo_last"),
])
def test_simple_commands(text, action):
    assert parse_command(text).action == action


def test_categories_add_and_remove():
    assert parse_command("/categories add Pets").entities == {"category": "Pets"}
    removed = parse_command("/categories remove Pets")
    assert removed.action == "remove_category"
    assert removed.entities == {"category": "Pets"}


def test_installment_command():
    intent = parse_command("/installment 1200 12x celular nubank")

    assert intent.action == "create_installment"
    assert intent.entities == {
        "amount": 1200.0,
        "installments": 12,
        "description": "celular",
        "payment_method": "nubank",
    }


def test_help_texts():
    assert parse_command("/help budget").entities == {"command": "budget"}
    assert "/budget" in get_command_help("budget")
    assert "/installment" in get_command_help()
