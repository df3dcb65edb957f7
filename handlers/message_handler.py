"""
handlers/message_handler.py
---------------------------
Entry point for chat text: free-form messages and the slash commands the
command parser understands (/add, /budget, /report, ...).

Flow: register user → answer a pending confirmation if there is one →
parse the intent → execute it → reply.
"""

from telegram import Update
from telegram.error import BadRequest
from telegram.ext import ContextTypes

from nlp.intent_parser import IntentParser
from repositories.category_repo import CategoryRepository
from repositories.payment_method_repo import PaymentMethodRepository
from repositories.user_repo import UserRepository
from security.auth import authorized_only
from security.rate_limiter import rate_limited
from services.intent_executor import GENERIC_ERROR_MESSAGE, IntentExecutor
from utils.logger import get_logger

logger = get_logger(__name__)

user_repo = UserRepository()
category_repo = CategoryRepository()
payment_method_repo = PaymentMethodRepository()
parser = IntentParser()
executor = IntentExecutor()

# Commands routed here instead of to a CommandHandler.
PARSED_COMMANDS = [
    "add", "budget", "recurring", "report", "list",
    "categories", "installment", "statement", "undo",
]


def build_parse_context(user_id: int) -> dict:
    """The user's category and payment method names, given to the AI parser."""
    try:
        return {
            "categories": [c["name"] for c in category_repo.get_for_user(user_id)],
            "payment_methods": [pm.name for pm in payment_method_repo.get_by_user(user_id)],
        }
    except Exception as e:
        logger.warning(f"Could not load parse context for user {user_id}: {e}")
        return {}


async def reply(update: Update, text: str) -> None:
    """Reply with Markdown, falling back to plain text when Telegram rejects the markup."""
    try:
        await update.message.reply_text(text, parse_mode="Markdown")
    except BadRequest as e:
        logger.debug(f"Markdown rejected ({e}); sending plain text")
        await update.message.reply_text(text)


@authorized_only
@rate_limited
async def handle_message(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    text = (update.message.text or "").strip()
    if not text:
        return

    user = update.effective_user
    try:
        user_id = user_repo.ensure_user(user.id, user.first_name)["id"]

        pending = executor.handle_pending(user_id, text)
        if pending is not None:
            await reply(update, pending)
            return

        intent = await parser.parse(user_id, text, build_parse_context(user_id))
        logger.info(
            f"User {user_id}: '{text[:50]}' → {intent.action} "
            f"({intent.strategy}, {intent.confidence:.2f})"
        )
        await reply(update, await executor.execute(user_id, intent, raw_text=text))
    except Exception as e:
        logger.error(f"Failed to handle message from telegram user {user.id}: {e}", exc_info=True)
        await reply(update, GENERIC_ERROR_MESSAGE)
