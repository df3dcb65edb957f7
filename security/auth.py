"""
security/auth.py
-----------------
Authentication middleware for the Telegram bot.
Blocks any user not in the allowed whitelist.
"""

from functools import wraps
from typing import Callable

from telegram import Update
from telegram.ext import ContextTypes

from config import ALLOWED_USER_IDS
from utils.logger import get_logger

logger = get_logger(__name__)

UNAUTHORIZED_MESSAGE = "⛔ Desculpe, este bot é privado e não está disponível para uso público."


def is_authorized(telegram_id: int, allowed: list[int] = ALLOWED_USER_IDS) -> bool:
    """An empty whitelist allows everyone (dev mode)."""
    return not allowed or telegram_id in allowed


def authorized_only(func: Callable):
    """
    Decorator that restricts a handler to whitelisted users only.

    Usage:
        @authorized_only
        async def my_handler(update, context):
            ...
    """
    @wraps(func)
    async def wrapper(update: Update, context: ContextTypes.DEFAULT_TYPE, *args, **kwargs):
        user = update.effective_user
        if not user:
            return

        if not is_authorized(user.id):
            logger.warning(
                f"Unauthorized access attempt: user_id={user.id}, "
                f"username={user.username}, name={user.first_name}"
            )
            await update.message.reply_text(UNAUTHORIZED_MESSAGE)
            return

        return await func(update, context, *args, **kwargs)

    return wrapper
