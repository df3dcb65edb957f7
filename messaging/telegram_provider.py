"""
messaging/telegram_provider.py
------------------------------
Outbound messaging through the Telegram Bot API (python-telegram-bot).
"""

import io
from typing import Optional

from telegram import Bot
from telegram.error import TelegramError

from messaging.base import MessageResult, MessagingProvider
from utils.logger import get_logger

logger = get_logger(__name__)


class TelegramProvider(MessagingProvider):
    """Sends messages with the bot instance owned by the running Application."""

    platform = "telegram"

    def __init__(self, bot: Bot):
        self.bot = bot

    def is_connected(self) -> bool:
        return self.bot is not None

    async def send_text(self, chat_id: str, text: str) -> MessageResult:
        try:
            message = await self.bot.send_message(
                chat_id=chat_id,
                text=text,
                parse_mode="Markdown",
            )
            return MessageResult(success=True, message_id=str(message.message_id))
        except TelegramError as e:
            logger.warning(f"Telegram send to {chat_id} failed: {e}")
            return MessageResult(success=False, error=str(e))

    async def send_photo(self, chat_id: str, photo: io.BytesIO,
                         caption: Optional[str] = None) -> MessageResult:
        try:
            message = await self.bot.send_photo(chat_id=chat_id, photo=photo, caption=caption)
            return MessageResult(success=True, message_id=str(message.message_id))
        except TelegramError as e:
            logger.warning(f"Telegram photo to {chat_id} failed: {e}")
            return MessageResult(success=False, error=str(e))
