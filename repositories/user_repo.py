"""
repositories/user_repo.py
--------------------------
Data access layer for users, their profiles and WhatsApp identifiers.
"""

from typing import Optional

from db.connection import get_connection, release_connection
from utils.logger import get_logger

logger = get_logger(__name__)

_REMINDER_COLUMNS = {
    "statement": "statement_reminders_enabled",
    "payment": "payment_reminders_enabled",
}


class UserRepository:
    """Repository for the users, user_profiles and authorized_whatsapp_numbers tables."""

    # ── USERS ─────────────────────────────────────────────

    def ensure_user(self, telegram_id: int, first_name: Optional[str] = None) -> dict:
        """
        Insert a user (and default profile) if they don't exist, or return the existing record.

        Args:
            telegram_id: The Telegram user ID.
            first_name: Optional first name from Telegram.

        Returns:
            Dict with user data: {'id', 'telegram_id', 'first_name', 'locale'}.
        """
        upsert_user = """
            INSERT INTO users (telegram_id, first_name)
            VALUES (%s, %s)
            ON CONFLICT (telegram_id) DO UPDATE SET first_name = EXCLUDED.first_name
            RETURNING id, telegram_id, first_name;
        """
        ensure_profile = """
            INSERT INTO user_profiles (user_id) VALUES (%s)
            ON CONFLICT (user_id) DO NOTHING;
        """
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(upsert_user, (telegram_id, first_name))
                user_id, tg_id, name = cur.fetchone()
                cur.execute(ensure_profile, (user_id,))
                cur.execute("SELECT locale FROM user_profiles WHERE user_id = %s;", (user_id,))
                locale = cur.fetchone()[0]
            conn.commit()
            return {"id": user_id, "telegram_id": tg_id, "first_name": name, "locale": locale}
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to ensure user {telegram_id}: {e}")
            raise
        finally:
            release_connection(conn)

    def get_telegram_users(self) -> list[dict]:
        """All users reachable on Telegram (used by the weekly report)."""
        sql = "SELECT id, telegram_id, first_name FROM users WHERE telegram_id IS NOT NULL;"
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql)
                return [
                    {"id": r[0], "telegram_id": r[1], "first_name": r[2]}
                    for r in cur.fetchall()
                ]
        finally:
            release_connection(conn)

    def get_telegram_id(self, user_id: int) -> Optional[int]:
        sql = "SELECT telegram_id FROM users WHERE id = %s;"
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (user_id,))
                row = cur.fetchone()
                return row[0] if row else None
        finally:
            release_connection(conn)

    # ── PROFILES ──────────────────────────────────────────

    def get_profiles(self, user_ids: list[int]) -> dict[int, dict]:
        """
        Fetch reminder preferences for a set of users.

        Returns:
            {user_id: {'locale', 'statement_reminders_enabled', 'payment_reminders_enabled'}}.
            Users without a profile row are absent.
        """
        if not user_ids:
            return {}
        sql = """
            SELECT user_id, locale, statement_reminders_enabled, payment_reminders_enabled
            FROM user_profiles
            WHERE user_id = ANY(%s);
        """
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (list(user_ids),))
                return {
                    r[0]: {
                        "locale": r[1],
                        "statement_reminders_enabled": r[2],
                        "payment_reminders_enabled": r[3],
                    }
                    for r in cur.fetchall()
                }
        finally:
            release_connection(conn)

    def set_reminders_enabled(self, user_id: int, enabled: bool,
                              reminder_type: Optional[str] = None) -> None:
        """
        Opt a user in or out of scheduled reminders.

        Args:
            user_id: Internal user ID.
            enabled: New value.
            reminder_type: 'statement', 'payment', or None for both.
        """
        columns = (
            [_REMINDER_COLUMNS[reminder_type]] if reminder_type else list(_REMINDER_COLUMNS.values())
        )
        assignments = ", ".join(f"{c} = %s" for c in columns)
        sql = f"""
            INSERT INTO user_profiles (user_id) VALUES (%s)
            ON CONFLICT (user_id) DO NOTHING;
            UPDATE user_profiles SET {assignments}, updated_at = NOW() WHERE user_id = %s;
        """
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (user_id, *([enabled] * len(columns)), user_id))
            conn.commit()
            logger.info(f"User {user_id} reminders ({reminder_type or 'all'}) set to {enabled}")
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to update reminder preference for user {user_id}: {e}")
            raise
        finally:
            release_connection(conn)

    # ── WHATSAPP IDENTIFIERS ──────────────────────────────

    def get_whatsapp_identifiers(self, user_ids: list[int]) -> list[dict]:
        """
        Fetch WhatsApp identifiers for a set of users, primary numbers first.

        Returns:
            List of dicts: [{'user_id', 'whatsapp_number', 'whatsapp_jid', 'whatsapp_lid'}, ...].
        """
        if not user_ids:
            return []
        sql = """
            SELECT user_id, whatsapp_number, whatsapp_jid, whatsapp_lid
            FROM authorized_whatsapp_numbers
            WHERE user_id = ANY(%s)
            ORDER BY is_primary DESC, id ASC;
        """
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (list(user_ids),))
                return [
                    {
                        "user_id": r[0],
                        "whatsapp_number": r[1],
                        "whatsapp_jid": r[2],
                        "whatsapp_lid": r[3],
                    }
                    for r in cur.fetchall()
                ]
        finally:
            release_connection(conn)
