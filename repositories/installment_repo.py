"""
repositories/installment_repo.py
--------------------------------
Data access layer for installment plans and their per-month transactions.
Creating, paying off and cancelling a plan touch both tables, so those
writes run inside a single database transaction.
"""

from datetime import date
from typing import Optional

from dateutil.relativedelta import relativedelta

from db.connection import get_connection, release_connection, transaction
from models.installment import InstallmentPlan
from utils.logger import get_logger

logger = get_logger(__name__)

_COLUMNS = """
    id, user_id, description, total_amount, total_installments,
    first_payment_date, status, category_id, payment_method_id, created_at
"""


def split_amount(total_amount: float, installments: int) -> list[float]:
    """
    Split a purchase into installment values that add up exactly.

    The rounding remainder goes to the first installment.
    """
    base = round(total_amount / installments, 2)
    amounts = [base] * installments
    amounts[0] = round(total_amount - base * (installments - 1), 2)
    return amounts


class InstallmentRepository:
    """Repository for the installment_plans table and its linked transactions."""

    # ── CREATE ────────────────────────────────────────────

    def create_plan(self, plan: InstallmentPlan) -> InstallmentPlan:
        """
        Insert a plan and one expense transaction per installment.

        Returns:
            The plan with `id` and `created_at` populated.
        """
        plan_sql = """
            INSERT INTO installment_plans
                (user_id, description, total_amount, total_installments,
                 first_payment_date, status, category_id, payment_method_id)
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
            RETURNING id, created_at;
        """
        tx_sql = """
            INSERT INTO transactions
                (user_id, type, amount, category_id, payment_method_id, description,
                 date, installment_plan_id, installment_number)
            VALUES (%s, 'expense', %s, %s, %s, %s, %s, %s, %s);
        """
        try:
            with transaction() as cur:
                cur.execute(plan_sql, (
                    plan.user_id, plan.description, plan.total_amount, plan.total_installments,
                    plan.first_payment_date, plan.status, plan.category_id, plan.payment_method_id,
                ))
                plan.id, plan.created_at = cur.fetchone()

                amounts = split_amount(plan.total_amount, plan.total_installments)
                for number, amount in enumerate(amounts, start=1):
                    cur.execute(tx_sql, (
                        plan.user_id, amount, plan.category_id, plan.payment_method_id,
                        f"{plan.description} ({number}/{plan.total_installments})",
                        plan.first_payment_date + relativedelta(months=number - 1),
                        plan.id, number,
                    ))
            logger.info(
                f"Created installment plan #{plan.id} ({plan.total_installments}x) "
                f"for user {plan.user_id}"
            )
            return plan
        except Exception as e:
            logger.error(f"Failed to create installment plan: {e}")
            raise

    # ── READ ──────────────────────────────────────────────

    def get_active_plans(self, user_id: int) -> list[InstallmentPlan]:
        sql = f"""
            SELECT {_COLUMNS} FROM installment_plans
            WHERE user_id = %s AND status = 'active'
            ORDER BY created_at DESC;
        """
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (user_id,))
                return [self._row_to_plan(r) for r in cur.fetchall()]
        finally:
            release_connection(conn)

    def get_plan(self, plan_id: int, user_id: int) -> Optional[InstallmentPlan]:
        sql = f"SELECT {_COLUMNS} FROM installment_plans WHERE id = %s AND user_id = %s;"
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (plan_id, user_id))
                row = cur.fetchone()
                return self._row_to_plan(row) if row else None
        finally:
            release_connection(conn)

    def get_remaining(self, plan_id: int, after: date) -> dict:
        """
        Installments of a plan dated after `after`.

        Returns:
            Dict with 'count' and 'amount'.
        """
        sql = """
            SELECT COUNT(*), COALESCE(SUM(amount), 0)
            FROM transactions
            WHERE installment_plan_id = %s AND date > %s;
        """
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (plan_id, after))
                count, amount = cur.fetchone()
                return {"count": count, "amount": float(amount)}
        finally:
            release_connection(conn)

    def get_future_commitments(self, user_id: int, after: date, months: int = 12) -> list[dict]:
        """
        Installment totals per month for the coming months.

        Returns:
            List of dicts: [{'month': date (first day), 'total', 'count'}, ...] in order.
        """
        sql = """
            SELECT DATE_TRUNC('month', t.date)::date AS month, SUM(t.amount), COUNT(*)
            FROM transactions t
            JOIN installment_plans p ON p.id = t.installment_plan_id
            WHERE t.user_id = %s AND p.status = 'active'
              AND t.date > %s AND t.date < %s
            GROUP BY month
            ORDER BY month;
        """
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (user_id, after, after + relativedelta(months=months)))
                return [
                    {"month": r[0], "total": float(r[1]), "count": r[2]}
                    for r in cur.fetchall()
                ]
        finally:
            release_connection(conn)

    # ── UPDATE / DELETE ───────────────────────────────────

    def close_plan(self, plan_id: int, user_id: int, status: str, after: date) -> int:
        """
        Remove the plan's installments dated after `after` and set its final status.

        Args:
            status: 'paid_off' or 'cancelled'.

        Returns:
            Number of future installments removed.
        """
        delete_sql = """
            DELETE FROM transactions
            WHERE installment_plan_id = %s AND user_id = %s AND date > %s;
        """
        status_sql = "UPDATE installment_plans SET status = %s WHERE id = %s AND user_id = %s;"
        try:
            with transaction() as cur:
                cur.execute(delete_sql, (plan_id, user_id, after))
                removed = cur.rowcount
                cur.execute(status_sql, (status, plan_id, user_id))
            logger.info(f"Installment plan #{plan_id} {status}, {removed} future installment(s) removed")
            return removed
        except Exception as e:
            logger.error(f"Failed to close installment plan #{plan_id}: {e}")
            raise

    # ── HELPERS ───────────────────────────────────────────

    @staticmethod
    def _row_to_plan(row: tuple) -> InstallmentPlan:
        """Convert a database row tuple to an InstallmentPlan domain object."""
        return InstallmentPlan(
            id=row[0],
            user_id=row[1],
            description=row[2],
            total_amount=float(row[3]),
            total_installments=row[4],
            first_payment_date=row[5],
            status=row[6],
            category_id=row[7],
            payment_method_id=row[8],
            created_at=row[9],
        )
