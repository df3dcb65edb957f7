"""
nlp/local_parser.py
-------------------
Keyword-based interpretation of everyday messages in Portuguese and
English ("gastei 50 no mercado", "mostrar orçamento", "parar lembretes").

Rules run in a fixed order and the first that applies wins. The returned
confidence says how complete the extraction was; the cascade decides
whether that is good enough.
"""

import re
from datetime import date
from typing import Optional

from dateutil.relativedelta import relativedelta

from models.intent import Intent
from nlp.text_utils import (
    PAYMENT_METHOD_KEYWORDS,
    contains_word,
    extract_amount,
    extract_date,
    extract_month,
    extract_payment_method,
    guess_category,
    normalize,
    parse_amount,
    strip_keywords,
)

HELP_WORDS = ("ajuda", "help", "comandos", "o que voce faz", "como usar")
UNDO_WORDS = ("desfazer", "desfaz", "undo", "apagar ultima", "cancelar ultima")
OPT_OUT_WORDS = ("parar lembretes", "desativar lembretes", "sem lembretes", "stop reminders",
                 "nao quero lembretes", "desligar lembretes")
OPT_IN_WORDS = ("ativar lembretes", "voltar lembretes", "quero lembretes", "start reminders",
                "ligar lembretes")
STATEMENT_WORDS = ("resumo da fatura", "minha fatura", "fatura atual", "statement", "ver fatura")
COMMITMENT_WORDS = ("parcelas futuras", "proximas parcelas", "compromissos futuros",
                    "future commitments", "quanto devo de parcelas")
INSTALLMENT_WORDS = ("parcelado", "parcelada", "parcelas", "vezes")
RECURRING_WORDS = ("recorrente", "recorrentes", "mensal", "todo mes", "recurring", "fixa", "fixo", "fixos")
EXPENSE_WORDS = ("gastei", "gastar", "paguei", "pagar", "comprei", "comprar", "despesa",
                 "spent", "paid", "bought")
INCOME_WORDS = ("recebi", "receber", "ganhei", "ganhar", "receita", "salario", "entrou",
                "received", "earned")
BUDGET_WORDS = ("orcamento", "budget", "limite")
REPORT_WORDS = ("relatorio", "resumo", "report", "balanco")
SPENDING_QUESTIONS = ("quanto gastei", "quanto eu gastei", "how much did i spend")
ANALYSIS_WORDS = ("analise", "analisar", "analyze", "analysis")
CATEGORY_WORDS = ("categoria", "categorias", "category", "categories")
STATS_WORDS = ("estatisticas", "stats", "resumo rapido")
SEARCH_WORDS = ("buscar", "procurar", "pesquisar", "search")

SHOW_WORDS = ("mostrar", "ver", "listar", "status", "show", "list", "quais", "meus", "minhas")
DELETE_WORDS = ("deletar", "remover", "cancelar", "apagar", "excluir", "delete", "remove")

_DESCRIPTION_NOISE = EXPENSE_WORDS + INCOME_WORDS + PAYMENT_METHOD_KEYWORDS + ("hoje", "ontem", "anteontem", "hj")


def _intent(action: str, confidence: float, **entities) -> Intent:
    return Intent(
        action=action,
        confidence=confidence,
        entities={k: v for k, v in entities.items() if v is not None},
        strategy="local_nlp",
    )


def _parse_transaction(message: str, tx_type: str, today: date) -> Intent:
    amount = extract_amount(message)
    tx_date = extract_date(message, today)
    category = guess_category(message)
    description = strip_keywords(message, _DESCRIPTION_NOISE) or None
    return _intent(
        "add_income" if tx_type == "income" else "add_expense",
        0.85 if amount else 0.5,
        amount=amount,
        category=category,
        description=description,
        date=tx_date.isoformat() if tx_date else None,
        payment_method=extract_payment_method(message),
    )


def _parse_installment(message: str) -> Optional[Intent]:
    match = re.search(r"\b(\d{1,2})\s*(?:x|vezes|parcelas)\b", normalize(message))
    if not match:
        return None
    # "12x de 100" gives the installment value, not the purchase total
    per_installment = re.search(r"\b\d{1,2}\s*x\s*de\s*(?:r\$\s*)?(\d+(?:[.,]\d{1,2})?)", normalize(message))
    amount = extract_amount(message)
    installment_amount = None
    if per_installment:
        installment_amount = parse_amount(per_installment.group(1))
        amount = None
    description = strip_keywords(
        re.sub(r"\b\d{1,2}\s*(?:x|vezes|parcelas)\b", " ", message, flags=re.IGNORECASE),
        _DESCRIPTION_NOISE + INSTALLMENT_WORDS,
    ) or None
    return _intent(
        "create_installment",
        0.9 if amount or installment_amount else 0.6,
        amount=amount,
        installment_amount=installment_amount,
        installments=int(match.group(1)),
        description=description,
        category=guess_category(message),
        payment_method=extract_payment_method(message),
    )


def _parse_recurring(message: str) -> Intent:
    if contains_word(message, DELETE_WORDS):
        ref = re.search(r"#(\d+)", message)
        return _intent("delete_recurring", 0.85 if ref else 0.6,
                       payment_id=int(ref.group(1)) if ref else None)

    amount = extract_amount(message)
    if amount is None or contains_word(message, SHOW_WORDS):
        return _intent("show_recurring", 0.9)

    day_match = re.search(r"\b(?:todo\s+)?dia\s+(\d{1,2})\b", normalize(message))
    day = int(day_match.group(1)) if day_match else None
    tx_type = "income" if contains_word(message, ("receita", "recebo", "recebi", "salario")) else "expense"
    description = strip_keywords(
        re.sub(r"\b(?:todo\s+)?dia\s+\d{1,2}\b", " ", message, flags=re.IGNORECASE),
        RECURRING_WORDS + _DESCRIPTION_NOISE + ("mes", "mês", "todo"),
    ) or None
    return _intent(
        "add_recurring",
        0.85 if day else 0.6,
        amount=amount,
        day_of_month=day,
        description=description,
        category=guess_category(message),
        type=tx_type,
    )


def _parse_budget(message: str) -> Intent:
    amount = extract_amount(message)
    if contains_word(message, DELETE_WORDS):
        return _intent("delete_budget", 0.8, category=guess_category(message))
    if amount is None or contains_word(message, SHOW_WORDS):
        return _intent("show_budget", 0.9)
    category = guess_category(message)
    if category is None and contains_word(message, ("geral", "total")):
        category = "geral"
    return _intent("set_budget", 0.85 if category else 0.6, amount=amount, category=category)


def _parse_report(message: str, today: date) -> Intent:
    normalized = normalize(message)
    month = year = None
    explicit = re.search(r"\b(\d{1,2})/(\d{4})\b", message)
    if explicit:
        month, year = int(explicit.group(1)), int(explicit.group(2))
    elif re.search(r"\b(mes passado|ultimo mes|last month)\b", normalized):
        last = today - relativedelta(months=1)
        month, year = last.month, last.year
    else:
        month = extract_month(message)
        year_match = re.search(r"\b(20\d{2})\b", message)
        year = int(year_match.group(1)) if year_match else None
    return _intent("show_report", 0.9, month=month, year=year)


def _parse_category(message: str) -> Intent:
    match = re.search(r"(?:adicionar|criar|nova|add|new)\s+categoria\s+(.+)", message, re.IGNORECASE)
    if match:
        return _intent("add_category", 0.85, category=match.group(1).strip())
    match = re.search(r"(?:remover|apagar|excluir|deletar)\s+(?:a\s+)?categoria\s+(.+)", message, re.IGNORECASE)
    if match:
        return _intent("remove_category", 0.85, category=match.group(1).strip())
    if contains_word(message, SHOW_WORDS):
        return _intent("list_categories", 0.9)
    return _intent("list_categories", 0.7)


def parse_local(message: str, today: Optional[date] = None) -> Optional[Intent]:
    """
    Interpret a message with keyword rules.

    Returns:
        An Intent tagged 'local_nlp', or None when no rule applies.
    """
    today = today or date.today()
    text = message.strip()
    if not text:
        return None

    if contains_word(text, HELP_WORDS):
        return _intent("help", 0.95)
    if contains_word(text, OPT_OUT_WORDS):
        return _intent("reminders_opt_out", 0.95)
    if contains_word(text, OPT_IN_WORDS):
        return _intent("reminders_opt_in", 0.95)
    if contains_word(text, UNDO_WORDS):
        return _intent("undo_last", 0.9)
    if contains_word(text, STATEMENT_WORDS):
        return _intent("view_statement_summary", 0.9, payment_method=extract_payment_method(text))
    if contains_word(text, COMMITMENT_WORDS):
        return _intent("view_future_commitments", 0.9)
    if contains_word(text, STATS_WORDS):
        return _intent("quick_stats", 0.85)
    if contains_word(text, SEARCH_WORDS):
        query = re.sub(r"^\s*(buscar|procurar|pesquisar|search)\s*(por)?\s*", "", text, flags=re.IGNORECASE)
        return _intent("search_transactions", 0.85 if query else 0.5, query=query or None)

    if contains_word(text, SPENDING_QUESTIONS):
        return _parse_report(text, today)

    installment = _parse_installment(text)
    if installment is not None:
        return installment
    if contains_word(text, RECURRING_WORDS):
        return _parse_recurring(text)
    if contains_word(text, INCOME_WORDS):
        return _parse_transaction(text, "income", today)
    if contains_word(text, EXPENSE_WORDS):
        return _parse_transaction(text, "expense", today)
    if contains_word(text, BUDGET_WORDS):
        return _parse_budget(text)
    if contains_word(text, ANALYSIS_WORDS):
        return _intent("analyze_spending", 0.85)
    if contains_word(text, REPORT_WORDS):
        return _parse_report(text, today)
    if contains_word(text, CATEGORY_WORDS):
        return _parse_category(text)

    # "50 mercado" / "uber 23,90": an amount and a known category keyword
    amount = extract_amount(text)
    if amount is not None and guess_category(text):
        return _intent(
            "add_expense",
            0.7,
            amount=amount,
            category=guess_category(text),
            description=strip_keywords(text, _DESCRIPTION_NOISE) or None,
        )
    return None
