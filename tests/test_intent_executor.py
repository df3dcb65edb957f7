"""Unit tests for intent dispatch"""

import asyncio
from datetime import date
from unittest.mock import MagicMock

import pytest

from models.errors import NotFoundError
from models.intent import SUPPORTED_ACTIONS, Intent
from models.transaction import Transaction
from services.conversation_state import LAST_TRANSACTION, ConversationStateStore
from services.intent_executor import GENERIC_ERROR_MESSAGE, UNKNOWN_COMMAND_MESSAGE, IntentExecutor


def _tx(**overrides) -> Transaction:
    values = dict(id=7, user_id=1, type="expense", amount=50.0, date=date(2025, 1, 10),
                  category_id=3, category_name="Mercado", payment_method=None)
    values.update(overrides)
    return Transaction(**values)


@pytest.fixture
def services():
    transactions = MagicMock()
    transactions.add_transaction.return_value = _tx()
    transactions.format_added.return_value = "💸 Despesa registrada"
    budgets = MagicMock()
    budgets.check_budget_alert.return_value = None
    categories = MagicMock()
    categories.resolve.return_value = {"id": 3, "name": "Mercado"}
    preferences = MagicMock()
    preferences.get_preferred_payment_method.return_value = None
    return {
        "transactions": transactions,
        "budgets": budgets,
        "recurring": MagicMock(),
        "categories": categories,
        "installments": MagicMock(),
        "statements": MagicMock(),
        "preferences": preferences,
        "state": ConversationStateStore(),
    }


@pytest.fixture
def executor(services) -> IntentExecutor:
    return IntentExecutor(**services)


def test_every_supported_action_has_a_handler(executor):
    assert set(executor.supported_actions) == set(SUPPORTED_ACTIONS)


@pytest.mark.asyncio
async def test_unknown_action(executor):
    assert await executor.execute(1, Intent.unknown()) == UNKNOWN_COMMAND_MESSAGE
    assert await executor.execute(1, Intent("launch_rocket", 0.9)) == UNKNOWN_COMMAND_MESSAGE


@pytest.mark.asyncio
async def test_dispatch_returns_handler_reply(executor, services):
    services["transactions"].quick_stats.return_value = "📊 stats"

    assert await executor.execute(1, Intent("quick_stats", 1.0)) == "📊 stats"
    services["transactions"].quick_stats.assert_called_once_with(1)


@pytest.mark.asyncio
async def test_domain_error_becomes_warning(executor, services):
    services["transactions"].delete_transaction.side_effect = NotFoundError("Transação #9 não encontrada.")

    reply = await executor.execute(1, Intent("delete_transaction", 1.0, {"transaction_id": 9}))

    assert reply == "⚠️ Transação #9 não encontrada."


@pytest.mark.asyncio
async def test_unexpected_error_becomes_generic_message(executor, services):
    services["budgets"].list_budgets.side_effect = RuntimeError("connection lost")

    assert await executor.execute(1, Intent("list_budgets", 1.0)) == GENERIC_ERROR_MESSAGE


@pytest.mark.asyncio
async def test_preferred_payment_method_is_injected(executor, services):
    """Without a payment method, the learned one for the category is used"""
    services["preferences"].get_preferred_payment_method.return_value = "nubank"
    services["transactions"].add_transaction.return_value = _tx(payment_method="nubank")

    await executor.execute(1, Intent("add_expense", 0.9, {"amount": 50, "category": "mercado"}), "gastei 50 mercado")
    await asyncio.sleep(0)

    assert services["transactions"].add_transaction.call_args.kwargs["payment_method"] == "nubank"
    services["preferences"].learn_payment_method.assert_called_once_with(1, 3, "nubank")


@pytest.mark.asyncio
async def test_explicit_payment_method_is_kept(executor, services):
    await executor.execute(1, Intent("add_expense", 0.9, {"amount": 50, "category": "mercado",
                                                         "payment_method": "pix"}))

    assert services["transactions"].add_transaction.call_args.kwargs["payment_method"] == "pix"
    services["preferences"].get_preferred_payment_method.assert_not_called()


@pytest.mark.asyncio
async def test_preference_failures_never_reach_the_user(executor, services):
    services["preferences"].get_preferred_payment_method.side_effect = RuntimeError("db down")
    services["preferences"].learn_payment_method.side_effect = RuntimeError("db down")
    services["transactions"].add_transaction.return_value = _tx(payment_method="pix")

    reply = await executor.execute(1, Intent("add_expense", 0.9, {"amount": 50, "category": "mercado"}))
    await asyncio.sleep(0)

    assert reply == "💸 Despesa registrada"
    assert services["transactions"].add_transaction.call_args.kwargs["payment_method"] is None


@pytest.mark.asyncio
async def test_budget_alert_is_appended(executor, services):
    services["budgets"].check_budget_alert.return_value = "🟡 Orçamento de Mercado em 85%"

    reply = await executor.execute(1, Intent("add_expense", 0.9, {"amount": 50, "category": "mercado"}))

    assert reply == "💸 Despesa registrada\n\n🟡 Orçamento de Mercado em 85%"


@pytest.mark.asyncio
async def test_multiple_transactions_are_added_independently(executor, services):
    services["transactions"].add_transaction.side_effect = [
        _tx(id=1, description="uber"),
        RuntimeError("boom"),
    ]
    entities = {"transactions": [
        {"type": "expense", "amount": 25, "category": "Transporte", "description": "uber"},
        {"type": "expense", "amount": 40, "category": "Alimentação", "description": "ifood"},
    ]}

    reply = await executor.execute(1, Intent("add_expense", 0.9, entities))

    assert "1 de 2 registradas." in reply
    assert services["transactions"].add_transaction.call_count == 2


@pytest.mark.asyncio
async def test_undo_deletes_last_added_transaction(executor, services):
    services["transactions"].delete_transaction.return_value = "🗑️ Transação #7 removida."
    await executor.execute(1, Intent("add_expense", 0.9, {"amount": 50, "category": "mercado"}))

    reply = await executor.execute(1, Intent("undo_last", 0.9))

    assert reply.startswith("↩️ Desfeito.")
    services["transactions"].delete_transaction.assert_called_once_with(1, 7)
    assert services["state"].get(1, LAST_TRANSACTION) is None


@pytest.mark.asyncio
async def test_undo_with_nothing_to_undo(executor, services):
    reply = await executor.execute(1, Intent("undo_last", 0.9))

    assert "nada" in reply
    services["transactions"].delete_transaction.assert_not_called()


@pytest.mark.asyncio
async def test_help_lists_commands(executor):
    reply = await executor.execute(1, Intent("help", 1.0))

    assert "/add" in reply


def test_pending_confirmation_is_delegated(executor, services):
    services["installments"].handle_pending.return_value = "✅ Parcelamento removido."

    assert executor.handle_pending(1, "sim") == "✅ Parcelamento removido."
    services["installments"].handle_pending.assert_called_once_with(1, "sim")
