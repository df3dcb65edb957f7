"""Unit tests for the chat message entry point"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from handlers.message_handler import handle_message
from services.intent_executor import GENERIC_ERROR_MESSAGE

# Skip the authorization and rate limiting decorators
_handle = handle_message.__wrapped__.__wrapped__


def _update(text: str) -> MagicMock:
    update = MagicMock()
    update.message.text = text
    update.message.reply_text = AsyncMock()
    update.effective_user.id = 123
    update.effective_user.first_name = "Ana"
    return update


@pytest.mark.asyncio
async def test_unexpected_error_gets_generic_reply():
    update = _update("gastei 50")
    with patch("handlers.message_handler.user_repo") as user_repo:
        user_repo.ensure_user.side_effect = RuntimeError("connection pool exhausted")
        await _handle(update, MagicMock())

    update.message.reply_text.assert_awaited_once_with(GENERIC_ERROR_MESSAGE, parse_mode="Markdown")


@pytest.mark.asyncio
async def test_parser_crash_gets_generic_reply():
    update = _update("gastei 50")
    with patch("handlers.message_handler.user_repo") as user_repo, \
         patch("handlers.message_handler.executor") as executor, \
         patch("handlers.message_handler.parser") as parser, \
         patch("handlers.message_handler.build_parse_context", return_value={}):
        user_repo.ensure_user.return_value = {"id": 1}
        executor.handle_pending.return_value = None
        parser.parse = AsyncMock(side_effect=ValueError("bad state"))
        await _handle(update, MagicMock())

    update.message.reply_text.assert_awaited_once_with(GENERIC_ERROR_MESSAGE, parse_mode="Markdown")


@pytest.mark.asyncio
async def test_message_is_parsed_and_executed():
    update = _update("gastei 50")
    with patch("handlers.message_handler.user_repo") as user_repo, \
         patch("handlers.message_handler.executor") as executor, \
         patch("handlers.message_handler.parser") as parser, \
         patch("handlers.message_handler.build_parse_context", return_value={}):
        user_repo.ensure_user.return_value = {"id": 1}
        executor.handle_pending.return_value = None
        parser.parse = AsyncMock(return_value=MagicMock(action="add_expense", strategy="local_nlp",
                                                        confidence=0.85))
        executor.execute = AsyncMock(return_value="✅ Gasto registrado")
        await _handle(update, MagicMock())

    executor.execute.assert_awaited_once()
    update.message.reply_text.assert_awaited_once_with("✅ Gasto registrado", parse_mode="Markdown")
