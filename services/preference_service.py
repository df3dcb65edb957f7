"""
services/preference_service.py
------------------------------
Per-user preferences: the learned category → payment method pairing and
the reminder opt-in/opt-out switches.
"""

from typing import Optional

from repositories.preference_repo import PreferenceRepository
from repositories.user_repo import UserRepository
from utils.logger import get_logger

logger = get_logger(__name__)

_REMINDER_TYPES = {"statement": "de fechamento de fatura", "payment": "de vencimento"}


class PreferenceService:
    """Learned payment habits and notification settings."""

    def __init__(self):
        self.preference_repo = PreferenceRepository()
        self.user_repo = UserRepository()

    def get_preferred_payment_method(self, user_id: int, category_id: Optional[int]) -> Optional[str]:
        if category_id is None:
            return None
        return self.preference_repo.get_preferred_payment_method(user_id, category_id)

    def learn_payment_method(self, user_id: int, category_id: Optional[int],
                             payment_method: Optional[str]) -> None:
        if category_id is None or not payment_method:
            return
        self.preference_repo.record(user_id, category_id, payment_method)
        logger.info(f"Learned payment method '{payment_method}' for category {category_id} (user {user_id})")

    def set_reminders(self, user_id: int, enabled: bool, reminder_type: Optional[str] = None) -> str:
        """Turn statement and/or payment reminders on or off."""
        if reminder_type not in _REMINDER_TYPES:
            reminder_type = None
        self.user_repo.set_reminders_enabled(user_id, enabled, reminder_type)

        which = f"Lembretes {_REMINDER_TYPES[reminder_type]}" if reminder_type else "Lembretes"
        if enabled:
            return f"🔔 {which} ativados."
        return f"🔕 {which} desativados. Para voltar a receber, diga \"ativar lembretes\"."
