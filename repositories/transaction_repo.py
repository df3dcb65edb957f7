"""
repositories/transaction_repo.py
--------------------------------
Data access layer for expense/income transactions.
All SQL queries related to the `transactions` table live here.
"""

from datetime import date
from typing import Optional

from db.connection import get_connection, release_connection
from models.transaction import Transaction
from utils.logger import get_logger

logger = get_logger(__name__)

_SELECT = """
    SELECT t.id, t.user_id, t.type, t.amount, t.category_id, c.name,
           t.payment_method, t.payment_method_id, t.description, t.date,
           t.installment_plan_id, t.installment_number, t.raw_text, t.created_at
    FROM transactions t
    LEFT JOIN categories c ON c.id = t.category_id
"""


class TransactionRepository:
    """Repository for CRUD operations on the transactions table."""

    # ── CREATE ────────────────────────────────────────────

    def add(self, tx: Transaction) -> Transaction:
        """
        Insert a new expense/income record.

        Args:
            tx: The Transaction domain object to persist.

        Returns:
            The same Transaction with its `id` and `created_at` populated.
        """
        sql = """
            INSERT INTO transactions
                (user_id, type, amount, category_id, payment_method, payment_method_id,
                 description, date, installment_plan_id, installment_number, raw_text)
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
            RETURNING id, created_at;
        """
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (
                    tx.user_id, tx.type, tx.amount, tx.category_id, tx.payment_method,
                    tx.payment_method_id, tx.description, tx.date,
                    tx.installment_plan_id, tx.installment_number, tx.raw_text,
                ))
                tx.id, tx.created_at = cur.fetchone()
            conn.commit()
            logger.info(f"Added {tx.type} #{tx.id} for user {tx.user_id}")
            return tx
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to add transaction: {e}")
            raise
        finally:
            release_connection(conn)

    # ── READ ──────────────────────────────────────────────

    def get_by_id(self, tx_id: int, user_id: int) -> Optional[Transaction]:
        """Fetch a single transaction by ID, scoped to a user."""
        sql = _SELECT + " WHERE t.id = %s AND t.user_id = %s;"
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (tx_id, user_id))
                row = cur.fetchone()
                return self._row_to_transaction(row) if row else None
        finally:
            release_connection(conn)

    def get_recent(self, user_id: int, limit: int = 10) -> list[Transaction]:
        """Most recent transactions up to today, newest first."""
        sql = _SELECT + """
            WHERE t.user_id = %s AND t.date <= CURRENT_DATE
            ORDER BY t.date DESC, t.id DESC
            LIMIT %s;
        """
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (user_id, limit))
                return [self._row_to_transaction(r) for r in cur.fetchall()]
        finally:
            release_connection(conn)

    def get_by_date_range(
        self, user_id: int, start: date, end: date, tx_type: Optional[str] = None
    ) -> list[Transaction]:
        """
        Fetch all transactions for a user within a date range.

        Args:
            user_id: Internal user ID.
            start: Start date (inclusive).
            end: End date (inclusive).
            tx_type: Optional filter ('expense' or 'income').

        Returns:
            List of Transaction objects ordered by date descending.
        """
        sql = _SELECT + " WHERE t.user_id = %s AND t.date BETWEEN %s AND %s"
        params: list = [user_id, start, end]
        if tx_type:
            sql += " AND t.type = %s"
            params.append(tx_type)
        sql += " ORDER BY t.date DESC, t.id DESC;"

        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, params)
                return [self._row_to_transaction(r) for r in cur.fetchall()]
        finally:
            release_connection(conn)

    def search(self, user_id: int, query: str, limit: int = 20) -> list[Transaction]:
        """Case-insensitive search over description and category name."""
        pattern = f"%{query.strip()}%"
        sql = _SELECT + """
            WHERE t.user_id = %s AND (t.description ILIKE %s OR c.name ILIKE %s)
            ORDER BY t.date DESC, t.id DESC
            LIMIT %s;
        """
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (user_id, pattern, pattern, limit))
                return [self._row_to_transaction(r) for r in cur.fetchall()]
        finally:
            release_connection(conn)

    def get_category_summary(
        self, user_id: int, start: date, end: date
    ) -> list[dict]:
        """
        Get total spending grouped by category for a date range.

        Returns:
            List of dicts: [{'category_id', 'category', 'total'}, ...], largest first.
        """
        sql = """
            SELECT t.category_id, COALESCE(c.name, 'Sem Categoria'), SUM(t.amount) AS total
            FROM transactions t
            LEFT JOIN categories c ON c.id = t.category_id
            WHERE t.user_id = %s AND t.type = 'expense' AND t.date BETWEEN %s AND %s
            GROUP BY t.category_id, c.name
            ORDER BY total DESC;
        """
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (user_id, start, end))
                return [
                    {"category_id": r[0], "category": r[1], "total": float(r[2])}
                    for r in cur.fetchall()
                ]
        finally:
            release_connection(conn)

    def get_totals(self, user_id: int, start: date, end: date) -> dict:
        """
        Get total income and expenses for a date range.

        Returns:
            Dict with keys 'total_expenses', 'total_income', 'net', 'count'.
        """
        sql = """
            SELECT type, SUM(amount), COUNT(*)
            FROM transactions
            WHERE user_id = %s AND date BETWEEN %s AND %s
            GROUP BY type;
        """
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (user_id, start, end))
                result = {"total_expenses": 0.0, "total_income": 0.0, "net": 0.0, "count": 0}
                for tx_type, total, count in cur.fetchall():
                    if tx_type == "expense":
                        result["total_expenses"] = float(total)
                    elif tx_type == "income":
                        result["total_income"] = float(total)
                    result["count"] += count
                result["net"] = result["total_income"] - result["total_expenses"]
                return result
        finally:
            release_connection(conn)

    def sum_expenses_for_payment_method(
        self, user_id: int, payment_method_id: int, start: date, end: date
    ) -> float:
        """Total spent on one card inside a statement period (inclusive)."""
        sql = """
            SELECT COALESCE(SUM(amount), 0)
            FROM transactions
            WHERE user_id = %s AND payment_method_id = %s
              AND type = 'expense' AND date BETWEEN %s AND %s;
        """
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (user_id, payment_method_id, start, end))
                return float(cur.fetchone()[0])
        finally:
            release_connection(conn)

    def get_period_rows(
        self, user_id: int, payment_method_id: int, start: date, end: date
    ) -> list[dict]:
        """
        Expense rows of one card in a statement period, with category and installment data.

        Returns:
            List of dicts with keys: date, description, amount, category_id,
            category_name, category_emoji, is_installment, installment_number,
            total_installments, plan_description.
        """
        sql = """
            SELECT t.date, t.description, t.amount, t.category_id, c.name, c.icon,
                   t.installment_plan_id IS NOT NULL, t.installment_number,
                   p.total_installments, p.description
            FROM transactions t
            LEFT JOIN categories c ON c.id = t.category_id
            LEFT JOIN installment_plans p ON p.id = t.installment_plan_id
            WHERE t.user_id = %s AND t.payment_method_id = %s
              AND t.type = 'expense' AND t.date BETWEEN %s AND %s
            ORDER BY t.date ASC, t.id ASC;
        """
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (user_id, payment_method_id, start, end))
                return [
                    {
                        "date": r[0],
                        "description": r[1],
                        "amount": float(r[2]),
                        "category_id": r[3],
                        "category_name": r[4],
                        "category_emoji": r[5],
                        "is_installment": r[6],
                        "installment_number": r[7],
                        "total_installments": r[8],
                        "plan_description": r[9],
                    }
                    for r in cur.fetchall()
                ]
        finally:
            release_connection(conn)

    # ── UPDATE ────────────────────────────────────────────

    def update(self, tx: Transaction) -> bool:
        """
        Update an existing transaction.

        Returns:
            True if a row was updated, False otherwise.
        """
        sql = """
            UPDATE transactions
            SET amount = %s, category_id = %s, description = %s, date = %s,
                type = %s, payment_method = %s
            WHERE id = %s AND user_id = %s;
        """
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (
                    tx.amount, tx.category_id, tx.description, tx.date,
                    tx.type, tx.payment_method, tx.id, tx.user_id,
                ))
                updated = cur.rowcount > 0
            conn.commit()
            return updated
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to update transaction #{tx.id}: {e}")
            raise
        finally:
            release_connection(conn)

    # ── DELETE ────────────────────────────────────────────

    def delete(self, tx_id: int, user_id: int) -> bool:
        """
        Delete a transaction by ID, scoped to a user.

        Returns:
            True if a row was deleted, False otherwise.
        """
        sql = "DELETE FROM transactions WHERE id = %s AND user_id = %s;"
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (tx_id, user_id))
                deleted = cur.rowcount > 0
            conn.commit()
            if deleted:
                logger.info(f"Deleted transaction #{tx_id} for user {user_id}")
            return deleted
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to delete transaction #{tx_id}: {e}")
            raise
        finally:
            release_connection(conn)

    # ── HELPERS ───────────────────────────────────────────

    @staticmethod
    def _row_to_transaction(row: tuple) -> Transaction:
        """Convert a database row tuple to a Transaction domain object."""
        return Transaction(
            id=row[0],
            user_id=row[1],
            type=row[2],
            amount=float(row[3]),
            category_id=row[4],
            category_name=row[5],
            payment_method=row[6],
            payment_method_id=row[7],
            description=row[8],
            date=row[9],
            installment_plan_id=row[10],
            installment_number=row[11],
            raw_text=row[12],
            created_at=row[13],
        )
