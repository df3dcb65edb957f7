"""Unit tests for turning AI-understood messages into learned patterns"""

import pytest

from models.intent import Intent
from nlp.intent_parser import apply_learned_pattern
from nlp.pattern_learning import build_pattern


def _learned(message: str, intent: Intent) -> dict:
    pattern = build_pattern(message, intent)
    assert pattern is not None
    return {"id": 1, "regex_pattern": pattern["regex_pattern"], "parsed_output": pattern["parsed_output"]}


def test_amount_becomes_a_group():
    intent = Intent("add_expense", 0.95, {"amount": 25.0, "category": "Transporte"})
    learned = _learned("uber 25", intent)

    matched = apply_learned_pattern(learned, "Uber   R$ 40,50")

    assert matched.action == "add_expense"
    assert matched.entities == {"category": "Transporte", "amount": 40.5}
    assert matched.strategy == "learned_pattern"


def test_pattern_is_anchored_to_whole_message():
    learned = _learned("uber 25", Intent("add_expense", 0.95, {"amount": 25.0}))

    assert apply_learned_pattern(learned, "uber 25 e almoço 30") is None
    assert apply_learned_pattern(learned, "paguei uber 25") is None


def test_message_without_amount_is_learned_literally():
    learned = _learned("como tá o mês?", Intent("quick_stats", 0.95, {}))

    assert apply_learned_pattern(learned, "Como tá o mês?").action == "quick_stats"
    assert apply_learned_pattern(learned, "como tá o ano?") is None


@pytest.mark.parametrize("message,entities", [
    ("almoço 30 ontem", {"amount": 30.0, "date": "2026-10-17"}),
    ("apagar #12", {"transaction_id": 12}),
    ("almoço 30 e uber 15", {"transactions": [{"amount": 30.0}, {"amount": 15.0}]}),
])
def test_variable_entities_are_not_learned(message, entities):
    assert build_pattern(message, Intent("add_expense", 0.95, entities)) is None


@pytest.mark.parametrize("message,entities", [
    ("mercado 30 40", {"amount": 30.0}),
    ("mercado 30", {"amount": 35.0}),
    ("mercado 30", {}),
    ("tv 1200 em 10x", {"amount": 1200.0}),
    ("50", {"amount": 50.0}),
])
def test_ambiguous_messages_are_not_learned(message, entities):
    assert build_pattern(message, Intent("add_expense", 0.95, entities)) is None
