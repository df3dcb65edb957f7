"""
repositories/budget_repo.py
---------------------------
Data access layer for monthly category budgets.
A NULL category_id is the user's overall monthly budget.
"""

from typing import Optional

from db.connection import get_connection, release_connection
from utils.logger import get_logger

logger = get_logger(__name__)


class BudgetRepository:
    """Repository for CRUD operations on the budgets table."""

    def set_budget(self, user_id: int, category_id: Optional[int], limit_amount: float) -> dict:
        """Set or update the budget limit for a category (None = overall)."""
        sql = """
            INSERT INTO budgets (user_id, category_id, limit_amount)
            VALUES (%s, %s, %s)
            ON CONFLICT (user_id, category_id)
            DO UPDATE SET limit_amount = EXCLUDED.limit_amount
            RETURNING id;
        """
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (user_id, category_id, limit_amount))
                row = cur.fetchone()
            conn.commit()
            logger.info(f"Budget for user {user_id}, category {category_id}: {limit_amount:.2f}")
            return {"id": row[0], "category_id": category_id, "limit_amount": limit_amount}
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to set budget: {e}")
            raise
        finally:
            release_connection(conn)

    def get_budget(self, user_id: int, category_id: Optional[int]) -> Optional[dict]:
        """Get the budget for one category (None = overall)."""
        sql = """
            SELECT id, category_id, limit_amount FROM budgets
            WHERE user_id = %s AND category_id IS NOT DISTINCT FROM %s;
        """
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (user_id, category_id))
                row = cur.fetchone()
                if row:
                    return {"id": row[0], "category_id": row[1], "limit_amount": float(row[2])}
                return None
        finally:
            release_connection(conn)

    def get_all_budgets(self, user_id: int) -> list[dict]:
        """
        Get all budget limits for a user.

        Returns:
            List of dicts: [{'id', 'category_id', 'category', 'limit_amount'}, ...];
            the overall budget has category None.
        """
        sql = """
            SELECT b.id, b.category_id, c.name, b.limit_amount
            FROM budgets b
            LEFT JOIN categories c ON c.id = b.category_id
            WHERE b.user_id = %s
            ORDER BY b.category_id NULLS FIRST, c.name;
        """
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (user_id,))
                return [
                    {"id": r[0], "category_id": r[1], "category": r[2], "limit_amount": float(r[3])}
                    for r in cur.fetchall()
                ]
        finally:
            release_connection(conn)

    def delete_budget(self, user_id: int, category_id: Optional[int]) -> bool:
        """Delete the budget limit for a category (None = overall)."""
        sql = "DELETE FROM budgets WHERE user_id = %s AND category_id IS NOT DISTINCT FROM %s;"
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (user_id, category_id))
                deleted = cur.rowcount > 0
            conn.commit()
            return deleted
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to delete budget: {e}")
            raise
        finally:
            release_connection(conn)
