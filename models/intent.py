"""
models/intent.py
----------------
The structured result of interpreting a chat message.
"""

from dataclasses import dataclass, field
from typing import Any

SUPPORTED_ACTIONS: tuple[str, ...] = (
    "add_expense", "add_income", "show_expenses", "list_transactions",
    "edit_transaction", "delete_transaction", "change_category",
    "show_transaction_details", "search_transactions", "quick_stats", "undo_last",
    "set_budget", "show_budget", "list_budgets", "delete_budget",
    "add_recurring", "show_recurring", "list_recurring", "delete_recurring",
    "edit_recurring", "make_expense_recurring",
    "show_report", "analyze_spending",
    "list_categories", "add_category", "remove_category",
    "create_installment", "view_future_commitments", "payoff_installment",
    "delete_installment", "view_statement_summary", "switch_credit_mode",
    "reminders_opt_out", "reminders_opt_in", "help", "show_help",
)


@dataclass
class Intent:
    """
    A financial action extracted from free-form text.

    Attributes:
        action: Name of the action, e.g. 'add_expense', 'set_budget'.
        confidence: Parser confidence in [0, 1].
        entities: Action parameters (amount, category, date, ...).
        strategy: Which parser produced the intent.
    """
    action: str
    confidence: float = 0.0
    entities: dict[str, Any] = field(default_factory=dict)
    strategy: str = "unknown"

    @classmethod
    def unknown(cls) -> "Intent":
        return cls(action="unknown", confidence=0.0, entities={}, strategy="unknown")

    def is_unknown(self) -> bool:
        return self.action == "unknown"

    def to_dict(self) -> dict:
        return {
            "action": self.action,
            "confidence": self.confidence,
            "entities": self.entities,
        }

    @classmethod
    def from_dict(cls, data: dict, strategy: str) -> "Intent":
        return cls(
            action=data.get("action", "unknown"),
            confidence=float(data.get("confidence", 0.0)),
            entities=dict(data.get("entities") or {}),
            strategy=strategy,
        )
