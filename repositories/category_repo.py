"""
repositories/category_repo.py
-----------------------------
Data access layer for spending/income categories.
Built-in categories have a NULL user_id and are visible to everyone.
"""

from typing import Optional

from db.connection import get_connection, release_connection
from utils.logger import get_logger

logger = get_logger(__name__)


class CategoryRepository:
    """Repository for the categories table."""

    def get_for_user(self, user_id: int) -> list[dict]:
        """
        Built-in plus user-defined categories.

        Returns:
            List of dicts: [{'id', 'name', 'type', 'icon', 'custom'}, ...].
        """
        sql = """
            SELECT id, name, type, icon, user_id IS NOT NULL
            FROM categories
            WHERE user_id IS NULL OR user_id = %s
            ORDER BY type, name;
        """
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (user_id,))
                return [
                    {"id": r[0], "name": r[1], "type": r[2], "icon": r[3], "custom": r[4]}
                    for r in cur.fetchall()
                ]
        finally:
            release_connection(conn)

    def find_by_name(self, user_id: int, name: str) -> Optional[dict]:
        """Case- and accent-insensitive lookup; the user's own category wins over a built-in one."""
        sql = """
            SELECT id, name, type, icon
            FROM categories
            WHERE (user_id IS NULL OR user_id = %s)
              AND LOWER(TRANSLATE(name, 'áàâãéêíóôõúçÁÀÂÃÉÊÍÓÔÕÚÇ', 'aaaaeeiooouc')) =
                  LOWER(TRANSLATE(%s, 'áàâãéêíóôõúçÁÀÂÃÉÊÍÓÔÕÚÇ', 'aaaaeeiooouc'))
            ORDER BY user_id NULLS LAST
            LIMIT 1;
        """
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (user_id, name.strip()))
                row = cur.fetchone()
                if row:
                    return {"id": row[0], "name": row[1], "type": row[2], "icon": row[3]}
                return None
        finally:
            release_connection(conn)

    def add(self, user_id: int, name: str, category_type: str = "expense",
            icon: Optional[str] = None) -> dict:
        """Create a user-defined category."""
        sql = """
            INSERT INTO categories (user_id, name, type, icon)
            VALUES (%s, %s, %s, %s)
            RETURNING id;
        """
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (user_id, name.strip(), category_type, icon))
                category_id = cur.fetchone()[0]
            conn.commit()
            logger.info(f"Added category '{name}' #{category_id} for user {user_id}")
            return {"id": category_id, "name": name.strip(), "type": category_type, "icon": icon}
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to add category '{name}': {e}")
            raise
        finally:
            release_connection(conn)

    def delete(self, category_id: int, user_id: int) -> bool:
        """Delete a user-defined category. Built-in categories are never deleted."""
        sql = "DELETE FROM categories WHERE id = %s AND user_id = %s;"
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (category_id, user_id))
                deleted = cur.rowcount > 0
            conn.commit()
            return deleted
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to delete category #{category_id}: {e}")
            raise
        finally:
            release_connection(conn)
