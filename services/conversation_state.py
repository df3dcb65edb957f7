"""
services/conversation_state.py
------------------------------
Short-lived per-user conversation state (undo target, pending confirmations).
Entries expire after CONVERSATION_STATE_TTL_SECONDS and are swept by the scheduler.
"""

import time
from typing import Any, Callable, Optional

from config import CONVERSATION_STATE_TTL_SECONDS
from utils.logger import get_logger

logger = get_logger(__name__)

LAST_TRANSACTION = "last_transaction"
PENDING_INSTALLMENT_DELETE = "pending_installment_delete"
PENDING_PAYOFF = "pending_payoff"


class ConversationStateStore:
    """In-memory store keyed by (user_id, state_key) with a TTL per entry."""

    def __init__(self, ttl_seconds: float = CONVERSATION_STATE_TTL_SECONDS,
                 clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[tuple[int, str], tuple[float, Any]] = {}

    def set(self, user_id: int, key: str, value: Any) -> None:
        self._entries[(user_id, key)] = (self._clock() + self.ttl_seconds, value)

    def get(self, user_id: int, key: str) -> Optional[Any]:
        """Stored value, or None when missing or expired."""
        entry = self._entries.get((user_id, key))
        if entry is None:
            return None
        expires_at, value = entry
        if self._clock() >= expires_at:
            del self._entries[(user_id, key)]
            return None
        return value

    def pop(self, user_id: int, key: str) -> Optional[Any]:
        value = self.get(user_id, key)
        self._entries.pop((user_id, key), None)
        return value

    def has(self, user_id: int, key: str) -> bool:
        return self.get(user_id, key) is not None

    def sweep_expired(self) -> int:
        """Drop every expired entry and return how many were removed."""
        now = self._clock()
        expired = [k for k, (expires_at, _) in self._entries.items() if now >= expires_at]
        for k in expired:
            del self._entries[k]
        if expired:
            logger.info(f"Swept {len(expired)} expired conversation state entries")
        return len(expired)


conversation_state = ConversationStateStore()
