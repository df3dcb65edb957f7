"""
nlp/pattern_learning.py
-----------------------
Turns a message the AI understood into a reusable per-user regex.

The message is kept word for word (case-insensitive, any whitespace) with
its amount replaced by a named group, so "uber 25" learns a pattern that
also matches "uber 40". Entities that change from message to message
(dates, record ids, lists of transactions) make a message unlearnable.
"""

import re
from typing import Optional

from models.intent import Intent
from nlp.text_utils import parse_amount

AMOUNT_GROUP = r"(?:r\$\s*)?(?P<amount>\d+(?:[.,]\d+)*)"

_AMOUNT_TOKEN_RE = re.compile(r"(?:r\$)?\d+(?:[.,]\d+)*", re.IGNORECASE)
_VARIABLE_ENTITIES = ("date", "transactions", "transaction_id", "payment_id", "plan_id")


def build_pattern(message: str, intent: Intent) -> Optional[dict]:
    """
    Pattern for messages shaped like `message`.

    Returns:
        {'regex_pattern': str, 'parsed_output': {'action', 'entities'}}, or
        None when the message cannot be generalized safely.
    """
    entities = intent.entities or {}
    if any(entities.get(key) for key in _VARIABLE_ENTITIES):
        return None

    tokens = message.split()
    amount = entities.get("amount")
    numeric = [i for i, token in enumerate(tokens) if _AMOUNT_TOKEN_RE.fullmatch(token)]
    stray_digits = any(
        ch.isdigit() for i, token in enumerate(tokens) if i not in numeric for ch in token
    )
    if stray_digits:
        return None

    if amount is None:
        if numeric:
            return None
        amount_index = None
    else:
        if len(numeric) != 1 or parse_amount(tokens[numeric[0]]) != float(amount):
            return None
        amount_index = numeric[0]

    words = [token for i, token in enumerate(tokens) if i != amount_index]
    if not words:
        return None

    parts = [AMOUNT_GROUP if i == amount_index else re.escape(token) for i, token in enumerate(tokens)]
    return {
        "regex_pattern": r"^\s*" + r"\s+".join(parts) + r"\s*$",
        "parsed_output": {
            "action": intent.action,
            "entities": {k: v for k, v in entities.items() if k != "amount"},
        },
    }
