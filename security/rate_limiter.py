"""
security/rate_limiter.py
-------------------------
Rate limiting middleware: every message can trigger an AI call, so each
user gets a fixed number of messages per sliding window.
"""

import time
from collections import defaultdict
from functools import wraps
from typing import Callable, Optional

from telegram import Update
from telegram.ext import ContextTypes

from config import RATE_LIMIT_MESSAGES, RATE_LIMIT_WINDOW_SECONDS
from utils.logger import get_logger

logger = get_logger(__name__)

RATE_LIMITED_MESSAGE = "⚠️ Você está enviando mensagens rápido demais. Espere um pouco e tente de novo."

# {user_id: [timestamp1, timestamp2, ...]}
_user_timestamps: dict[int, list[float]] = defaultdict(list)


def allow_message(user_id: int, now: Optional[float] = None,
                  limit: int = RATE_LIMIT_MESSAGES,
                  window: float = RATE_LIMIT_WINDOW_SECONDS) -> bool:
    """Record a message and say whether it is within the user's budget."""
    now = time.monotonic() if now is None else now
    cutoff = now - window
    recent = [t for t in _user_timestamps[user_id] if t > cutoff]

    if len(recent) >= limit:
        _user_timestamps[user_id] = recent
        return False

    recent.append(now)
    _user_timestamps[user_id] = recent
    return True


def reset(user_id: Optional[int] = None) -> None:
    """Forget tracked timestamps (one user, or everyone)."""
    if user_id is None:
        _user_timestamps.clear()
    else:
        _user_timestamps.pop(user_id, None)


def rate_limited(func: Callable):
    """
    Decorator that enforces rate limiting per user.

    Configuration (via .env):
        RATE_LIMIT_MESSAGES: Max messages per window (default: 30).
        RATE_LIMIT_WINDOW_SECONDS: Window duration in seconds (default: 60).
    """
    @wraps(func)
    async def wrapper(update: Update, context: ContextTypes.DEFAULT_TYPE, *args, **kwargs):
        user = update.effective_user
        if not user:
            return

        if not allow_message(user.id):
            logger.warning(f"Rate limit hit for user {user.id}")
            await update.message.reply_text(RATE_LIMITED_MESSAGE)
            return

        return await func(update, context, *args, **kwargs)

    return wrapper
