"""Unit tests for report arguments and spreadsheet exports"""

from datetime import date
from unittest.mock import MagicMock

import pytest

from handlers.report_handler import parse_year_month
from models.transaction import Transaction
from services.export_service import COLUMNS, ExportService


def test_parse_year_month_defaults_to_today():
    assert parse_year_month([], today=date(2025, 3, 9)) == (2025, 3)
    assert parse_year_month(["2024", "12"]) == (2024, 12)


def test_parse_year_month_rejects_bad_input():
    with pytest.raises(ValueError):
        parse_year_month(["2024", "13"])
    with pytest.raises(ValueError):
        parse_year_month(["abc", "1"])


def test_frame_lists_oldest_first():
    repo = MagicMock()
    repo.get_by_date_range.return_value = [
        Transaction(user_id=1, type="income", amount=3000.0, date=date(2025, 1, 20), description="Salário"),
        Transaction(user_id=1, type="expense", amount=42.5, date=date(2025, 1, 3), category_name="Alimentação"),
    ]

    df = ExportService(repo=repo).build_frame(1, 2025, 1)

    assert list(df.columns) == COLUMNS
    assert df["Data"].tolist() == ["2025-01-03", "2025-01-20"]
    assert df["Tipo"].tolist() == ["Despesa", "Receita"]
    assert df["Categoria"].tolist() == ["Alimentação", "Sem Categoria"]
    repo.get_by_date_range.assert_called_once_with(1, date(2025, 1, 1), date(2025, 1, 31))


def test_csv_has_header_row():
    repo = MagicMock()
    repo.get_by_date_range.return_value = []

    content = ExportService(repo=repo).export_month_csv(1, 2025, 1).getvalue().decode("utf-8-sig")

    assert content.strip() == ",".join(COLUMNS)
