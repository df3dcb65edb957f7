"""
nlp/command_parser.py
---------------------
Parser for explicit slash commands typed in the chat, e.g.
"/add 50 mercado ontem pix" or "/budget lazer 300".

Commands are deterministic, so a recognized one always has confidence 1.0.
Malformed arguments make the command unrecognized (None), letting the
rest of the cascade have a go at the text.
"""

import re
from datetime import date
from typing import Callable, Optional

from models.intent import Intent
from nlp.text_utils import (
    MONTHS_PT,
    PAYMENT_METHOD_KEYWORDS,
    extract_date,
    normalize,
    parse_amount,
    parse_date_token,
)

_MONTH_ABBR = tuple(m[:3] for m in MONTHS_PT)
_DATE_WORDS = ("hoje", "ontem", "anteontem", "today", "yesterday")


def _command(action: str, **entities) -> Intent:
    return Intent(
        action=action,
        confidence=1.0,
        entities={k: v for k, v in entities.items() if v is not None},
        strategy="explicit_command",
    )


def _is_payment_method(token: str) -> bool:
    return normalize(token) in PAYMENT_METHOD_KEYWORDS


def _month_number(token: str) -> Optional[int]:
    normalized = normalize(token)
    if normalized in MONTHS_PT:
        return MONTHS_PT.index(normalized) + 1
    if normalized in _MONTH_ABBR:
        return _MONTH_ABBR.index(normalized) + 1
    if normalized.isdigit() and 1 <= int(normalized) <= 12:
        return int(normalized)
    return None


def _is_year(token: str) -> bool:
    return token.isdigit() and 2000 <= int(token) <= 2100


# ── Individual commands ──────────────────────────────────

def _parse_add(args: list[str]) -> Optional[Intent]:
    """/add <valor> <categoria> [data] [descrição] [método_pagamento]"""
    if len(args) < 2:
        return None
    amount = parse_amount(args[0])
    if amount is None:
        return None

    category = args[1]
    tx_date: Optional[date] = None
    payment_method = None
    description_parts = []
    for arg in args[2:]:
        if re.fullmatch(r"\d{1,2}/\d{1,2}(?:/\d{2,4})?", arg):
            tx_date = parse_date_token(arg)
        elif normalize(arg) in _DATE_WORDS:
            tx_date = extract_date(arg)
        elif _is_payment_method(arg):
            payment_method = arg
        else:
            description_parts.append(arg.strip('"'))

    return _command(
        "add_expense",
        amount=amount,
        category=category,
        description=" ".join(description_parts) or category,
        date=tx_date.isoformat() if tx_date else None,
        payment_method=payment_method,
    )


def _parse_budget(args: list[str]) -> Optional[Intent]:
    """/budget <categoria> <valor> [período]; bare /budget shows the budgets."""
    if not args:
        return _command("show_budget")
    if len(args) < 2:
        return None
    amount = parse_amount(args[1])
    if amount is None:
        return None
    return _command(
        "set_budget",
        category=args[0],
        amount=amount,
        period=" ".join(args[2:]) or None,
    )


def _parse_recurring(args: list[str]) -> Optional[Intent]:
    """/recurring <nome> <valor> dia <dia>; bare /recurring lists them."""
    if not args:
        return _command("show_recurring")
    if len(args) < 4:
        return None
    amount = parse_amount(args[1])
    if amount is None:
        return None

    lowered = [a.lower() for a in args]
    if "dia" not in lowered:
        return None
    day_index = lowered.index("dia") + 1
    if day_index >= len(args) or not args[day_index].isdigit():
        return None
    day = int(args[day_index])
    if not 1 <= day <= 31:
        return None

    return _command("add_recurring", description=args[0], amount=amount, day_of_month=day)


def _parse_report(args: list[str]) -> Optional[Intent]:
    """/report [mês] [ano] [categoria]"""
    month = year = category = None
    if args:
        month = _month_number(args[0])
        rest = args[1:] if month else args
        if month and rest and _is_year(rest[0]):
            year = int(rest[0])
            rest = rest[1:]
        category = " ".join(rest) or None
    return _command("show_report", month=month, year=year, category=category)


_LIST_ACTIONS = {
    "categories": "list_categories",
    "recurring": "list_recurring",
    "budgets": "list_budgets",
    "transactions": "list_transactions",
}


def _parse_list(args: list[str]) -> Optional[Intent]:
    """/list [categories|recurring|budgets|transactions]"""
    if not args:
        return _command("show_expenses")
    action = _LIST_ACTIONS.get(args[0].lower())
    return _command(action) if action else None


def _parse_help(args: list[str]) -> Optional[Intent]:
    """/help [comando]"""
    return _command("help", command=args[0].lower().lstrip("/") if args else None)


def _parse_categories(args: list[str]) -> Optional[Intent]:
    """/categories [add|remove] [nome]"""
    if not args:
        return _command("list_categories")
    sub = args[0].lower()
    name = " ".join(args[1:]) or None
    if sub == "add" and name:
        return _command("add_category", category=name)
    if sub == "remove" and name:
        return _command("remove_category", category=name)
    return None


def _parse_installment(args: list[str]) -> Optional[Intent]:
    """/installment <valor total> <N>x <descrição> [método_pagamento]"""
    if len(args) < 2:
        return None
    amount = parse_amount(args[0])
    match = re.fullmatch(r"(\d{1,2})x", args[1].lower())
    if amount is None or not match:
        return None

    payment_method = None
    description_parts = []
    for arg in args[2:]:
        if payment_method is None and _is_payment_method(arg):
            payment_method = arg
        else:
            description_parts.append(arg)

    return _command(
        "create_installment",
        amount=amount,
        installments=int(match.group(1)),
        description=" ".join(description_parts) or None,
        payment_method=payment_method,
    )


def _parse_statement(args: list[str]) -> Optional[Intent]:
    """/statement [cartão]"""
    return _command("view_statement_summary", payment_method=" ".join(args) or None)


def _parse_undo(args: list[str]) -> Optional[Intent]:
    return _command("undo_last")


_COMMANDS: dict[str, Callable[[list[str]], Optional[Intent]]] = {
    "add": _parse_add,
    "budget": _parse_budget,
    "recurring": _parse_recurring,
    "report": _parse_report,
    "list": _parse_list,
    "help": _parse_help,
    "categories": _parse_categories,
    "installment": _parse_installment,
    "statement": _parse_statement,
    "undo": _parse_undo,
}


def parse_command(message: str) -> Optional[Intent]:
    """
    Parse a message starting with '/'.

    Returns:
        The command's Intent, or None for plain text, unknown commands or
        commands with unusable arguments.
    """
    trimmed = message.strip()
    if not trimmed.startswith("/"):
        return None

    parts = trimmed.split()
    # Telegram appends "@botname" to commands in some clients
    name = parts[0][1:].split("@", 1)[0].lower()
    parser = _COMMANDS.get(name)
    if parser is None:
        return None
    return parser(parts[1:])


# ── Help texts ───────────────────────────────────────────

_HELP_TEXTS = {
    "add": (
        "/add <valor> <categoria> [data] [descrição] [pagamento]\n\n"
        "Exemplos:\n/add 50 comida\n/add 30 transporte 15/10\n/add 100 mercado ontem cartão"
    ),
    "budget": (
        "/budget <categoria> <valor>\n\n"
        "Exemplos:\n/budget comida 500\n/budget geral 3000\n/budget (mostra seus orçamentos)"
    ),
    "recurring": (
        "/recurring <nome> <valor> dia <dia>\n\n"
        "Exemplos:\n/recurring aluguel 1200 dia 5\n/recurring academia 80 dia 15"
    ),
    "report": (
        "/report [mês] [ano] [categoria]\n\n"
        "Exemplos:\n/report\n/report janeiro 2025\n/report 3"
    ),
    "list": "/list [categories|recurring|budgets|transactions]",
    "categories": (
        "/categories [add|remove] [nome]\n\n"
        "Exemplos:\n/categories\n/categories add Pets\n/categories remove Pets"
    ),
    "installment": (
        "/installment <valor total> <N>x <descrição> [cartão]\n\n"
        "Exemplo:\n/installment 1200 12x celular nubank"
    ),
    "statement": "/statement [cartão] - resumo da fatura atual",
    "undo": "/undo - desfaz a última transação registrada",
}


def get_command_help(command: Optional[str] = None) -> str:
    """Usage of one command, or the list of all commands."""
    if command and command in _HELP_TEXTS:
        return _HELP_TEXTS[command]
    lines = ["📖 *Comandos disponíveis*\n"]
    lines += [f"/{name}" for name in _HELP_TEXTS]
    lines.append("\nUse /help <comando> para ver exemplos.")
    lines.append("Você também pode escrever normalmente: \"gastei 50 no mercado\".")
    return "\n".join(lines)
