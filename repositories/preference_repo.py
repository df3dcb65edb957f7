"""
repositories/preference_repo.py
-------------------------------
Data access layer for learned (category → payment method) preferences.
"""

from typing import Optional

from db.connection import get_connection, release_connection
from utils.logger import get_logger

logger = get_logger(__name__)


class PreferenceRepository:
    """Repository for the payment_method_preferences table."""

    def get_preferred_payment_method(self, user_id: int, category_id: int,
                                     min_usage: int = 2) -> Optional[str]:
        """
        The payment method a user picks most often for a category.

        Args:
            min_usage: Pairings seen fewer times than this are ignored.

        Returns:
            The payment method name or None.
        """
        sql = """
            SELECT payment_method FROM payment_method_preferences
            WHERE user_id = %s AND category_id = %s AND usage_count >= %s
            ORDER BY usage_count DESC, last_used_at DESC
            LIMIT 1;
        """
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (user_id, category_id, min_usage))
                row = cur.fetchone()
                return row[0] if row else None
        finally:
            release_connection(conn)

    def record(self, user_id: int, category_id: int, payment_method: str) -> None:
        """Count one more use of a payment method for a category."""
        sql = """
            INSERT INTO payment_method_preferences (user_id, category_id, payment_method)
            VALUES (%s, %s, %s)
            ON CONFLICT (user_id, category_id, payment_method)
            DO UPDATE SET usage_count = payment_method_preferences.usage_count + 1,
                          last_used_at = NOW();
        """
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (user_id, category_id, payment_method.lower()))
            conn.commit()
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to record payment preference for user {user_id}: {e}")
            raise
        finally:
            release_connection(conn)
