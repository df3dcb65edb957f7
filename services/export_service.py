"""
services/export_service.py
--------------------------
Month exports as CSV or Excel, built with pandas.
"""

import io

import pandas as pd

from repositories.transaction_repo import TransactionRepository
from utils.logger import get_logger
from utils.statement_period import get_month_bounds

logger = get_logger(__name__)

COLUMNS = ["Data", "Tipo", "Valor", "Categoria", "Forma de pagamento", "Descrição"]


class ExportService:
    """Builds downloadable files with a user's transactions."""

    def __init__(self, repo: TransactionRepository | None = None):
        self.repo = repo or TransactionRepository()

    def build_frame(self, user_id: int, year: int, month: int) -> pd.DataFrame:
        """One row per transaction of the month, oldest first."""
        start, end = get_month_bounds(year, month)
        transactions = self.repo.get_by_date_range(user_id, start, end)

        rows = [
            {
                "Data": tx.date.isoformat(),
                "Tipo": "Despesa" if tx.is_expense() else "Receita",
                "Valor": tx.amount,
                "Categoria": tx.category_name or "Sem Categoria",
                "Forma de pagamento": tx.payment_method or "",
                "Descrição": tx.description or "",
            }
            for tx in reversed(transactions)
        ]
        return pd.DataFrame(rows, columns=COLUMNS)

    def export_month_csv(self, user_id: int, year: int, month: int) -> io.BytesIO:
        df = self.build_frame(user_id, year, month)
        buffer = io.BytesIO()
        df.to_csv(buffer, index=False, encoding="utf-8-sig")
        buffer.seek(0)
        logger.info(f"Exported {len(df)} records as CSV for user {user_id}")
        return buffer

    def export_month_excel(self, user_id: int, year: int, month: int) -> io.BytesIO:
        """
        Excel workbook with a 'Transações' sheet and, when there are
        expenses, a 'Resumo' sheet with totals per category.
        """
        df = self.build_frame(user_id, year, month)

        buffer = io.BytesIO()
        with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
            df.to_excel(writer, sheet_name="Transações", index=False)

            expenses = df[df["Tipo"] == "Despesa"]
            if not expenses.empty:
                summary = (
                    expenses.groupby("Categoria")["Valor"].sum()
                    .sort_values(ascending=False)
                    .reset_index()
                )
                summary.columns = ["Categoria", "Total"]
                summary.to_excel(writer, sheet_name="Resumo", index=False)

        buffer.seek(0)
        logger.info(f"Exported {len(df)} records as Excel for user {user_id}")
        return buffer
