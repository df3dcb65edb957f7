"""
repositories/payment_method_repo.py
-----------------------------------
Data access layer for payment methods (credit cards, debit, pix, cash).
"""

from typing import Optional

from db.connection import get_connection, release_connection
from models.payment_method import PaymentMethod
from utils.logger import get_logger

logger = get_logger(__name__)

_COLUMNS = """
    id, user_id, name, type, credit_mode,
    statement_closing_day, payment_due_day, monthly_budget
"""


class PaymentMethodRepository:
    """Repository for the payment_methods table."""

    # ── READ ──────────────────────────────────────────────

    def get_credit_cards_closing_on(self, closing_days: list[int]) -> list[PaymentMethod]:
        """
        Credit-mode cards whose statement closes on any of the given days.

        Args:
            closing_days: Days of month to match.

        Returns:
            List of PaymentMethod objects.
        """
        sql = f"""
            SELECT {_COLUMNS} FROM payment_methods
            WHERE credit_mode = TRUE
              AND statement_closing_day IS NOT NULL
              AND statement_closing_day = ANY(%s);
        """
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (list(closing_days),))
                return [self._row_to_payment_method(r) for r in cur.fetchall()]
        finally:
            release_connection(conn)

    def get_credit_cards_with_due_day(self) -> list[PaymentMethod]:
        """Credit-mode cards that have both a closing day and a payment due day."""
        sql = f"""
            SELECT {_COLUMNS} FROM payment_methods
            WHERE credit_mode = TRUE
              AND statement_closing_day IS NOT NULL
              AND payment_due_day IS NOT NULL;
        """
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql)
                return [self._row_to_payment_method(r) for r in cur.fetchall()]
        finally:
            release_connection(conn)

    def get_by_user(self, user_id: int, credit_only: bool = False) -> list[PaymentMethod]:
        sql = f"SELECT {_COLUMNS} FROM payment_methods WHERE user_id = %s"
        if credit_only:
            sql += " AND credit_mode = TRUE AND statement_closing_day IS NOT NULL"
        sql += " ORDER BY name;"
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (user_id,))
                return [self._row_to_payment_method(r) for r in cur.fetchall()]
        finally:
            release_connection(conn)

    def find_by_name(self, user_id: int, name: str) -> Optional[PaymentMethod]:
        """Case-insensitive lookup of a user's payment method by name."""
        sql = f"""
            SELECT {_COLUMNS} FROM payment_methods
            WHERE user_id = %s AND LOWER(name) = LOWER(%s)
            LIMIT 1;
        """
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (user_id, name.strip()))
                row = cur.fetchone()
                return self._row_to_payment_method(row) if row else None
        finally:
            release_connection(conn)

    # ── WRITE ─────────────────────────────────────────────

    def upsert_credit_mode(self, user_id: int, name: str, credit_mode: bool,
                           closing_day: Optional[int] = None,
                           due_day: Optional[int] = None) -> PaymentMethod:
        """
        Create or update a credit card, toggling statement-period tracking.

        Returns:
            The stored PaymentMethod.
        """
        sql = f"""
            INSERT INTO payment_methods (user_id, name, type, credit_mode, statement_closing_day, payment_due_day)
            VALUES (%s, %s, 'credit', %s, %s, %s)
            ON CONFLICT (user_id, name) DO UPDATE SET
                credit_mode = EXCLUDED.credit_mode,
                statement_closing_day = COALESCE(EXCLUDED.statement_closing_day, payment_methods.statement_closing_day),
                payment_due_day = COALESCE(EXCLUDED.payment_due_day, payment_methods.payment_due_day)
            RETURNING {_COLUMNS};
        """
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (user_id, name, credit_mode, closing_day, due_day))
                row = cur.fetchone()
            conn.commit()
            logger.info(f"Payment method '{name}' for user {user_id}: credit_mode={credit_mode}")
            return self._row_to_payment_method(row)
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to update payment method '{name}': {e}")
            raise
        finally:
            release_connection(conn)

    # ── HELPERS ───────────────────────────────────────────

    @staticmethod
    def _row_to_payment_method(row: tuple) -> PaymentMethod:
        """Convert a database row tuple to a PaymentMethod domain object."""
        return PaymentMethod(
            id=row[0],
            user_id=row[1],
            name=row[2],
            type=row[3],
            credit_mode=row[4],
            statement_closing_day=row[5],
            payment_due_day=row[6],
            monthly_budget=float(row[7]) if row[7] is not None else None,
        )
