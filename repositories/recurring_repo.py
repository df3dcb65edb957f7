"""
repositories/recurring_repo.py
------------------------------
Data access layer for recurring payments.
All SQL queries related to the `recurring_payments` table live here.
"""

from datetime import date, timedelta
from typing import Optional

from db.connection import get_connection, release_connection
from models.recurring import RecurringPayment
from utils.logger import get_logger

logger = get_logger(__name__)

_SELECT = """
    SELECT r.id, r.user_id, r.description, r.amount, r.type, r.day_of_month,
           r.next_due_date, r.category_id, c.name, r.payment_method, r.active, r.created_at
    FROM recurring_payments r
    LEFT JOIN categories c ON c.id = r.category_id
"""


class RecurringRepository:
    """Repository for CRUD operations on recurring_payments table."""

    # ── CREATE ────────────────────────────────────────────

    def add(self, payment: RecurringPayment) -> RecurringPayment:
        """
        Insert a new recurring payment.

        Returns:
            The same object with its `id` and `created_at` populated.
        """
        sql = """
            INSERT INTO recurring_payments
                (user_id, description, amount, type, day_of_month, next_due_date,
                 category_id, payment_method, active)
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s)
            RETURNING id, created_at;
        """
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (
                    payment.user_id, payment.description, payment.amount, payment.type,
                    payment.day_of_month, payment.next_due_date, payment.category_id,
                    payment.payment_method, payment.active,
                ))
                payment.id, payment.created_at = cur.fetchone()
            conn.commit()
            logger.info(f"Added recurring payment '{payment.description}' #{payment.id}")
            return payment
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to add recurring payment: {e}")
            raise
        finally:
            release_connection(conn)

    # ── READ ──────────────────────────────────────────────

    def get_all(self, user_id: int, active_only: bool = True) -> list[RecurringPayment]:
        """Get all recurring payments for a user, soonest first."""
        sql = _SELECT + " WHERE r.user_id = %s"
        if active_only:
            sql += " AND r.active = TRUE"
        sql += " ORDER BY r.next_due_date ASC;"

        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (user_id,))
                return [self._row_to_payment(r) for r in cur.fetchall()]
        finally:
            release_connection(conn)

    def get_due_soon(self, days_ahead: int = 2) -> list[RecurringPayment]:
        """
        Active recurring payments due within the next N days.
        Used by the scheduler to send reminders.
        """
        target_date = date.today() + timedelta(days=days_ahead)
        sql = _SELECT + """
            WHERE r.active = TRUE AND r.next_due_date BETWEEN CURRENT_DATE AND %s
            ORDER BY r.next_due_date ASC;
        """
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (target_date,))
                return [self._row_to_payment(r) for r in cur.fetchall()]
        finally:
            release_connection(conn)

    def get_due_for_generation(self, today: date) -> list[RecurringPayment]:
        """Active recurring payments whose next_due_date has arrived."""
        sql = _SELECT + " WHERE r.active = TRUE AND r.next_due_date <= %s ORDER BY r.next_due_date;"
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (today,))
                return [self._row_to_payment(r) for r in cur.fetchall()]
        finally:
            release_connection(conn)

    def get_by_id(self, payment_id: int, user_id: int) -> Optional[RecurringPayment]:
        """Fetch a single recurring payment by ID, scoped to user."""
        sql = _SELECT + " WHERE r.id = %s AND r.user_id = %s;"
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (payment_id, user_id))
                row = cur.fetchone()
                return self._row_to_payment(row) if row else None
        finally:
            release_connection(conn)

    # ── UPDATE ────────────────────────────────────────────

    def update(self, payment: RecurringPayment) -> bool:
        """Persist amount, day, description and next due date changes."""
        sql = """
            UPDATE recurring_payments
            SET description = %s, amount = %s, day_of_month = %s, next_due_date = %s,
                category_id = %s, payment_method = %s
            WHERE id = %s AND user_id = %s;
        """
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (
                    payment.description, payment.amount, payment.day_of_month,
                    payment.next_due_date, payment.category_id, payment.payment_method,
                    payment.id, payment.user_id,
                ))
                updated = cur.rowcount > 0
            conn.commit()
            return updated
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to update recurring #{payment.id}: {e}")
            raise
        finally:
            release_connection(conn)

    def set_next_due_date(self, payment_id: int, next_due_date: date) -> None:
        """Move a payment to its next cycle after a transaction was generated."""
        sql = "UPDATE recurring_payments SET next_due_date = %s WHERE id = %s;"
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (next_due_date, payment_id))
            conn.commit()
            logger.info(f"Recurring #{payment_id} next due date is now {next_due_date}")
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to advance due date of recurring #{payment_id}: {e}")
            raise
        finally:
            release_connection(conn)

    # ── DELETE ────────────────────────────────────────────

    def delete(self, payment_id: int, user_id: int) -> bool:
        """Delete a recurring payment by ID, scoped to user."""
        sql = "DELETE FROM recurring_payments WHERE id = %s AND user_id = %s;"
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (payment_id, user_id))
                deleted = cur.rowcount > 0
            conn.commit()
            if deleted:
                logger.info(f"Deleted recurring payment #{payment_id}")
            return deleted
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to delete recurring #{payment_id}: {e}")
            raise
        finally:
            release_connection(conn)

    # ── HELPERS ───────────────────────────────────────────

    @staticmethod
    def _row_to_payment(row: tuple) -> RecurringPayment:
        """Convert a database row tuple to a RecurringPayment domain object."""
        return RecurringPayment(
            id=row[0],
            user_id=row[1],
            description=row[2],
            amount=float(row[3]),
            type=row[4],
            day_of_month=row[5],
            next_due_date=row[6],
            category_id=row[7],
            category_name=row[8],
            payment_method=row[9],
            active=row[10],
            created_at=row[11],
        )
