"""
services/intent_executor.py
---------------------------
Turns a parsed Intent into an action and a reply.

One action maps to one handler method. Around the add actions it also
fills in the user's usual payment method for the category and, after a
successful add, learns the pairing in a background task. Both are
best-effort: their failures are logged and never reach the user.
"""

import asyncio
from typing import Any, Callable, Optional

from models.errors import FinanceBotError
from models.intent import Intent
from models.transaction import Transaction
from nlp.command_parser import get_command_help
from services.budget_service import BudgetService
from services.category_service import CategoryService
from services.conversation_state import LAST_TRANSACTION, ConversationStateStore, conversation_state
from services.installment_service import InstallmentService
from services.preference_service import PreferenceService
from services.recurring_service import RecurringService
from services.statement_service import StatementService
from services.transaction_service import TransactionService
from utils.formatters import format_currency
from utils.logger import get_logger

logger = get_logger(__name__)

UNKNOWN_COMMAND_MESSAGE = (
    "🤔 Não entendi. Tente algo como \"gastei 50 no mercado\" ou digite /help para ver os comandos."
)
GENERIC_ERROR_MESSAGE = "😕 Algo deu errado ao processar seu pedido. Tente novamente em instantes."


class IntentExecutor:
    """Dispatches intents to the domain services."""

    def __init__(self, transactions: Optional[TransactionService] = None,
                 budgets: Optional[BudgetService] = None,
                 recurring: Optional[RecurringService] = None,
                 categories: Optional[CategoryService] = None,
                 installments: Optional[InstallmentService] = None,
                 statements: Optional[StatementService] = None,
                 preferences: Optional[PreferenceService] = None,
                 state: Optional[ConversationStateStore] = None):
        self.state = state or conversation_state
        self.transactions = transactions or TransactionService()
        self.budgets = budgets or BudgetService()
        self.recurring = recurring or RecurringService()
        self.categories = categories or CategoryService()
        self.installments = installments or InstallmentService(self.state)
        self.statements = statements or StatementService()
        self.preferences = preferences or PreferenceService()
        self._background: set[asyncio.Task] = set()

        self._handlers: dict[str, Callable[[int, dict, Optional[str]], Any]] = {
            "add_expense": self._add_expense,
            "add_income": self._add_income,
            "show_expenses": lambda u, e, _: self.transactions.show_expenses(u, e.get("period", "month")),
            "list_transactions": lambda u, e, _: self.transactions.list_transactions(u, int(e.get("limit") or 10)),
            "edit_transaction": self._edit_transaction,
            "delete_transaction": lambda u, e, _: self.transactions.delete_transaction(u, e.get("transaction_id")),
            "change_category": lambda u, e, _: self.transactions.change_category(
                u, e.get("transaction_id"), e.get("category")),
            "show_transaction_details": lambda u, e, _: self.transactions.get_details(u, e.get("transaction_id")),
            "search_transactions": lambda u, e, _: self.transactions.search(u, e.get("query") or e.get("description")),
            "quick_stats": lambda u, e, _: self.transactions.quick_stats(u),
            "undo_last": self._undo_last,
            "set_budget": lambda u, e, _: self.budgets.set_budget(u, e.get("category"), e.get("amount")),
            "show_budget": lambda u, e, _: self.budgets.show_budget(u, e.get("category")),
            "list_budgets": lambda u, e, _: self.budgets.list_budgets(u),
            "delete_budget": lambda u, e, _: self.budgets.delete_budget(u, e.get("category")),
            "add_recurring": self._add_recurring,
            "show_recurring": lambda u, e, _: self.recurring.list_recurring(u),
            "list_recurring": lambda u, e, _: self.recurring.list_recurring(u),
            "delete_recurring": self._delete_recurring,
            "edit_recurring": lambda u, e, _: self.recurring.edit_recurring(
                u, e.get("payment_id"), e.get("amount"), e.get("day_of_month"), e.get("description")),
            "make_expense_recurring": self._make_expense_recurring,
            "show_report": lambda u, e, _: self.transactions.monthly_report(u, e.get("year"), e.get("month")),
            "analyze_spending": lambda u, e, _: self.transactions.analyze_spending(u),
            "list_categories": lambda u, e, _: self.categories.list_categories(u),
            "add_category": lambda u, e, _: self.categories.add_category(
                u, e.get("category") or e.get("description"), e.get("type", "expense"), e.get("icon")),
            "remove_category": lambda u, e, _: self.categories.remove_category(u, e.get("category")),
            "create_installment": self._create_installment,
            "view_future_commitments": lambda u, e, _: self.installments.view_future_commitments(u),
            "payoff_installment": lambda u, e, _: self.installments.payoff_installment(u, e.get("plan_id")),
            "delete_installment": lambda u, e, _: self.installments.delete_installment(u, e.get("plan_id")),
            "view_statement_summary": lambda u, e, _: self.statements.view_statement_summary(
                u, e.get("payment_method")),
            "switch_credit_mode": lambda u, e, _: self.statements.switch_credit_mode(
                u, e.get("payment_method"), bool(e.get("enabled", True)), e.get("closing_day"), e.get("due_day")),
            "reminders_opt_out": lambda u, e, _: self.preferences.set_reminders(u, False, e.get("reminder_type")),
            "reminders_opt_in": lambda u, e, _: self.preferences.set_reminders(u, True, e.get("reminder_type")),
            "help": lambda u, e, _: get_command_help(e.get("command")),
            "show_help": lambda u, e, _: get_command_help(e.get("command")),
        }

    @property
    def supported_actions(self) -> list[str]:
        return list(self._handlers)

    async def execute(self, user_id: int, intent: Intent, raw_text: Optional[str] = None) -> str:
        """
        Run the handler of an intent and return the reply text.

        Expected failures (validation, missing records) become their own
        message; anything else is logged and answered with a generic error.
        """
        handler = self._handlers.get(intent.action)
        if handler is None:
            return UNKNOWN_COMMAND_MESSAGE

        logger.info(f"Executing {intent.action} for user {user_id} (via {intent.strategy})")
        try:
            result = handler(user_id, intent.entities or {}, raw_text)
            if asyncio.iscoroutine(result):
                result = await result
            return result
        except FinanceBotError as e:
            return f"⚠️ {e}"
        except Exception as e:
            logger.error(f"Handler {intent.action} failed for user {user_id}: {e}", exc_info=True)
            return GENERIC_ERROR_MESSAGE

    def handle_pending(self, user_id: int, text: str) -> Optional[str]:
        """Reply to an open confirmation, or None when nothing is pending."""
        try:
            return self.installments.handle_pending(user_id, text)
        except FinanceBotError as e:
            return f"⚠️ {e}"

    # ── Transactions ──────────────────────────────────────

    async def _add_expense(self, user_id: int, entities: dict, raw_text: Optional[str]) -> str:
        return await self._add(user_id, entities, raw_text, "expense")

    async def _add_income(self, user_id: int, entities: dict, raw_text: Optional[str]) -> str:
        return await self._add(user_id, entities, raw_text, "income")

    async def _add(self, user_id: int, entities: dict, raw_text: Optional[str], tx_type: str) -> str:
        items = entities.get("transactions")
        if not items:
            tx = self._add_one(user_id, entities, raw_text, tx_type)
            return self._added_reply(user_id, tx)

        lines = [f"🧾 {len(items)} transações:"]
        added = 0
        for index, item in enumerate(items, start=1):
            try:
                tx = self._add_one(user_id, item, raw_text, item.get("type") or tx_type)
                lines.append(f"  ✅ {index}. {tx.description or tx.category_name or ''} "
                             f"{format_currency(tx.amount)} (#{tx.id})")
                added += 1
            except FinanceBotError as e:
                lines.append(f"  ❌ {index}. {e}")
            except Exception as e:
                logger.error(f"Failed to add item {index} for user {user_id}: {e}")
                lines.append(f"  ❌ {index}. não foi possível registrar")
        lines.append(f"\n{added} de {len(items)} registradas.")
        return "\n".join(lines)

    def _add_one(self, user_id: int, entities: dict, raw_text: Optional[str], tx_type: str) -> Transaction:
        payment_method = entities.get("payment_method") or self._preferred_payment_method(
            user_id, entities.get("category"))

        tx = self.transactions.add_transaction(
            user_id,
            tx_type,
            entities.get("amount"),
            category=entities.get("category"),
            description=entities.get("description"),
            tx_date=entities.get("date"),
            payment_method=payment_method,
            raw_text=raw_text,
        )
        self.state.set(user_id, LAST_TRANSACTION, tx.id)
        if tx.payment_method and tx.category_id:
            self._spawn(self._learn_payment_method(user_id, tx.category_id, tx.payment_method))
        return tx

    def _added_reply(self, user_id: int, tx: Transaction) -> str:
        reply = self.transactions.format_added(tx)
        if tx.is_expense():
            try:
                alert = self.budgets.check_budget_alert(user_id, tx.category_id)
                if alert:
                    reply += f"\n\n{alert}"
            except Exception as e:
                logger.warning(f"Budget alert check failed for user {user_id}: {e}")
        return reply

    def _preferred_payment_method(self, user_id: int, category: Optional[str]) -> Optional[str]:
        if not category:
            return None
        try:
            resolved = self.categories.resolve(user_id, category)
            if resolved is None:
                return None
            return self.preferences.get_preferred_payment_method(user_id, resolved["id"])
        except Exception as e:
            logger.warning(f"Payment method preference lookup failed for user {user_id}: {e}")
            return None

    async def _learn_payment_method(self, user_id: int, category_id: int, payment_method: str) -> None:
        try:
            self.preferences.learn_payment_method(user_id, category_id, payment_method)
        except Exception as e:
            logger.warning(f"Could not learn payment method for user {user_id}: {e}")

    def _spawn(self, coro) -> None:
        task = asyncio.create_task(coro)
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    def _edit_transaction(self, user_id: int, entities: dict, raw_text: Optional[str]) -> str:
        tx_id = entities.get("transaction_id") or self.state.get(user_id, LAST_TRANSACTION)
        if tx_id is None:
            return "⚠️ Qual transação? Informe o número, ex: #12"
        return self.transactions.edit_transaction(
            user_id, tx_id,
            amount=entities.get("amount"),
            description=entities.get("description"),
            tx_date=entities.get("date"),
            category=entities.get("category"),
        )

    def _undo_last(self, user_id: int, entities: dict, raw_text: Optional[str]) -> str:
        tx_id = self.state.pop(user_id, LAST_TRANSACTION)
        if tx_id is None:
            return "ℹ️ Não há nada recente para desfazer."
        return f"↩️ Desfeito. {self.transactions.delete_transaction(user_id, tx_id)}"

    # ── Recurring / installments ──────────────────────────

    def _add_recurring(self, user_id: int, entities: dict, raw_text: Optional[str]) -> str:
        return self.recurring.add_recurring(
            user_id,
            entities.get("description") or entities.get("category"),
            entities.get("amount"),
            entities.get("day_of_month"),
            tx_type=entities.get("type", "expense"),
            category=entities.get("category"),
            payment_method=entities.get("payment_method"),
        )

    def _delete_recurring(self, user_id: int, entities: dict, raw_text: Optional[str]) -> str:
        if entities.get("payment_id") is None:
            return f"{self.recurring.list_recurring(user_id)}\n\nQual deles? Ex: \"remover recorrente #3\""
        return self.recurring.delete_recurring(user_id, entities["payment_id"])

    def _make_expense_recurring(self, user_id: int, entities: dict, raw_text: Optional[str]) -> str:
        tx_id = entities.get("transaction_id") or self.state.get(user_id, LAST_TRANSACTION)
        if tx_id is None:
            return "⚠️ Qual transação deve virar recorrente? Informe o número, ex: #12"
        return self.recurring.make_expense_recurring(user_id, tx_id, entities.get("day_of_month"))

    def _create_installment(self, user_id: int, entities: dict, raw_text: Optional[str]) -> str:
        return self.installments.create_installment(
            user_id,
            entities.get("description"),
            entities.get("installments"),
            total_amount=entities.get("amount"),
            installment_amount=entities.get("installment_amount"),
            category=entities.get("category"),
            payment_method=entities.get("payment_method"),
        )
