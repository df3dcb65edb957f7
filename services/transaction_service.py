"""
services/transaction_service.py
-------------------------------
Business logic for expenses and income: recording, editing, listing,
searching and the text reports built on top of them.
"""

from datetime import date, timedelta
from typing import Optional

from dateutil.relativedelta import relativedelta

from models.errors import NotFoundError, ValidationError
from models.transaction import Transaction
from repositories.payment_method_repo import PaymentMethodRepository
from repositories.transaction_repo import TransactionRepository
from services.category_service import CategoryService
from utils.formatters import format_currency
from utils.logger import get_logger
from utils.statement_period import get_month_bounds

logger = get_logger(__name__)

_MONTH_NAMES = (
    "Janeiro", "Fevereiro", "Março", "Abril", "Maio", "Junho",
    "Julho", "Agosto", "Setembro", "Outubro", "Novembro", "Dezembro",
)


def _coerce_amount(value) -> float:
    try:
        amount = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Valor inválido: {value!r}")
    if amount <= 0:
        raise ValidationError("O valor precisa ser maior que zero.")
    return round(amount, 2)


def _coerce_date(value) -> date:
    if value is None or value == "":
        return date.today()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except ValueError:
        raise ValidationError(f"Data inválida: {value!r}")


def _line(tx: Transaction) -> str:
    sign = "🔴" if tx.is_expense() else "🟢"
    desc = f" - {tx.description}" if tx.description else ""
    return (
        f"  {sign} #{tx.id} | {tx.date:%d/%m} | {tx.category_name or 'Sem Categoria'} | "
        f"{format_currency(tx.amount)}{desc}"
    )


class TransactionService:
    """
    Handles all business logic related to financial transactions.

    Every public method except add_transaction() returns a ready-to-send
    Portuguese reply.
    """

    def __init__(self):
        self.repo = TransactionRepository()
        self.payment_method_repo = PaymentMethodRepository()
        self.categories = CategoryService()

    # ── WRITE ─────────────────────────────────────────────

    def add_transaction(self, user_id: int, tx_type: str, amount, category: Optional[str] = None,
                        description: Optional[str] = None, tx_date=None,
                        payment_method: Optional[str] = None,
                        raw_text: Optional[str] = None) -> Transaction:
        """
        Validate and persist one expense or income.

        Raises:
            ValidationError: For a non-positive amount, a bad date or type.
        """
        if tx_type not in ("expense", "income"):
            raise ValidationError(f"Tipo inválido: {tx_type!r}")

        resolved = self.categories.resolve(user_id, category)
        payment_method_id = None
        if payment_method:
            method = self.payment_method_repo.find_by_name(user_id, payment_method)
            payment_method_id = method.id if method else None

        tx = Transaction(
            user_id=user_id,
            type=tx_type,
            amount=_coerce_amount(amount),
            date=_coerce_date(tx_date),
            category_id=resolved["id"] if resolved else None,
            category_name=resolved["name"] if resolved else None,
            payment_method=payment_method,
            payment_method_id=payment_method_id,
            description=description,
            raw_text=raw_text,
        )
        return self.repo.add(tx)

    @staticmethod
    def format_added(tx: Transaction) -> str:
        title = "💸 Despesa registrada" if tx.is_expense() else "💰 Receita registrada"
        lines = [
            f"{title}:",
            f"  💵 Valor: {format_currency(tx.amount)}",
            f"  🏷️ Categoria: {tx.category_name or 'Sem Categoria'}",
            f"  📅 Data: {tx.date:%d/%m/%Y}",
        ]
        if tx.description:
            lines.append(f"  📝 Descrição: {tx.description}")
        if tx.payment_method:
            lines.append(f"  💳 Pagamento: {tx.payment_method}")
        lines.append(f"  🔖 #{tx.id}")
        return "\n".join(lines)

    def edit_transaction(self, user_id: int, tx_id, amount=None, description: Optional[str] = None,
                         tx_date=None, category: Optional[str] = None) -> str:
        tx = self._require(user_id, tx_id)

        changes = []
        if amount is not None:
            tx.amount = _coerce_amount(amount)
            changes.append(f"💵 Valor: {format_currency(tx.amount)}")
        if description is not None:
            tx.description = description
            changes.append(f"📝 Descrição: {description}")
        if tx_date is not None:
            tx.date = _coerce_date(tx_date)
            changes.append(f"📅 Data: {tx.date:%d/%m/%Y}")
        if category is not None:
            resolved = self.categories.require(user_id, category)
            tx.category_id = resolved["id"]
            changes.append(f"🏷️ Categoria: {resolved['name']}")

        if not changes:
            return "⚠️ Nada para alterar. Diga o que mudar (valor, descrição, data ou categoria)."

        if not self.repo.update(tx):
            return f"⚠️ Não consegui alterar a transação #{tx.id}."
        return f"✏️ Transação #{tx.id} alterada:\n" + "\n".join(f"  {c}" for c in changes)

    def change_category(self, user_id: int, tx_id, category: Optional[str]) -> str:
        if not category:
            return "⚠️ Para qual categoria devo mover a transação?"
        return self.edit_transaction(user_id, tx_id, category=category)

    def delete_transaction(self, user_id: int, tx_id) -> str:
        tx_id = self._coerce_id(tx_id)
        if self.repo.delete(tx_id, user_id):
            return f"🗑️ Transação #{tx_id} removida."
        return f"⚠️ Transação #{tx_id} não encontrada."

    # ── READ ──────────────────────────────────────────────

    def get_details(self, user_id: int, tx_id) -> str:
        tx = self._require(user_id, tx_id)
        lines = [
            f"🔎 *Transação #{tx.id}*",
            f"  Tipo: {'Despesa' if tx.is_expense() else 'Receita'}",
            f"  Valor: {format_currency(tx.amount)}",
            f"  Categoria: {tx.category_name or 'Sem Categoria'}",
            f"  Data: {tx.date:%d/%m/%Y}",
        ]
        if tx.description:
            lines.append(f"  Descrição: {tx.description}")
        if tx.payment_method:
            lines.append(f"  Pagamento: {tx.payment_method}")
        if tx.installment_plan_id:
            lines.append(f"  Parcela nº {tx.installment_number} do parcelamento #{tx.installment_plan_id}")
        return "\n".join(lines)

    def list_transactions(self, user_id: int, limit: int = 10) -> str:
        transactions = self.repo.get_recent(user_id, limit)
        if not transactions:
            return "📭 Nenhuma transação registrada ainda."
        lines = [f"🧾 Últimas {len(transactions)} transações:\n"]
        lines += [_line(tx) for tx in transactions]
        return "\n".join(lines)

    def show_expenses(self, user_id: int, period: str = "month") -> str:
        """Expense list for 'today', 'week' (last 7 days) or 'month' (current month)."""
        today = date.today()
        if period == "today":
            start, label = today, "hoje"
        elif period == "week":
            start, label = today - timedelta(days=6), "últimos 7 dias"
        else:
            start, label = today.replace(day=1), f"{_MONTH_NAMES[today.month - 1]}/{today.year}"

        expenses = self.repo.get_by_date_range(user_id, start, today, tx_type="expense")
        if not expenses:
            return f"📭 Nenhuma despesa em {label}."

        total = sum(e.amount for e in expenses)
        lines = [f"💸 Despesas - {label}:\n"]
        lines += [_line(e) for e in expenses]
        lines.append(f"\n💰 Total: {format_currency(total)} ({len(expenses)} despesas)")
        return "\n".join(lines)

    def search(self, user_id: int, query: Optional[str]) -> str:
        if not query or not query.strip():
            return "⚠️ O que você quer procurar?"
        results = self.repo.search(user_id, query.strip())
        if not results:
            return f"📭 Nada encontrado para \"{query}\"."

        total = sum(tx.amount for tx in results if tx.is_expense())
        lines = [f"🔍 Resultados para \"{query}\" ({len(results)}):\n"]
        lines += [_line(tx) for tx in results]
        lines.append(f"\n💸 Total em despesas: {format_currency(total)}")
        return "\n".join(lines)

    def quick_stats(self, user_id: int) -> str:
        today = date.today()
        month_start = today.replace(day=1)
        day_totals = self.repo.get_totals(user_id, today, today)
        week_totals = self.repo.get_totals(user_id, today - timedelta(days=6), today)
        month_totals = self.repo.get_totals(user_id, month_start, today)
        daily_avg = month_totals["total_expenses"] / today.day

        return "\n".join([
            "⚡ *Resumo rápido*\n",
            f"📅 Hoje: {format_currency(day_totals['total_expenses'])}",
            f"📆 Últimos 7 dias: {format_currency(week_totals['total_expenses'])}",
            f"🗓️ Este mês: {format_currency(month_totals['total_expenses'])}",
            f"📊 Média diária no mês: {format_currency(daily_avg)}",
            f"💰 Receitas no mês: {format_currency(month_totals['total_income'])}",
            f"🧾 Transações no mês: {month_totals['count']}",
        ])

    def get_week_summary(self, user_id: int) -> str:
        """Summary of the last 7 days, grouped by category."""
        today = date.today()
        week_start = today - timedelta(days=6)
        totals = self.repo.get_totals(user_id, week_start, today)
        if totals["count"] == 0:
            return "📭 Nenhuma transação nos últimos 7 dias."

        lines = [f"📊 Resumo de {week_start:%d/%m} a {today:%d/%m}:\n"]
        lines += self._totals_lines(totals)
        lines += self._category_lines(user_id, week_start, today, totals["total_expenses"])
        return "\n".join(lines)

    def monthly_report(self, user_id: int, year: Optional[int] = None,
                       month: Optional[int] = None) -> str:
        today = date.today()
        year = int(year or today.year)
        month = int(month or today.month)
        if not 1 <= month <= 12:
            return "⚠️ Mês inválido. Use um número de 1 a 12."

        start, end = get_month_bounds(year, month)
        totals = self.repo.get_totals(user_id, start, end)
        if totals["count"] == 0:
            return f"📭 Nenhuma transação em {_MONTH_NAMES[month - 1]}/{year}."

        lines = [f"📊 *Relatório de {_MONTH_NAMES[month - 1]}/{year}*\n"]
        lines += self._totals_lines(totals)
        lines += self._category_lines(user_id, start, end, totals["total_expenses"])
        return "\n".join(lines)

    def analyze_spending(self, user_id: int) -> str:
        """Current month against the previous one, by category, with a month-end projection."""
        today = date.today()
        current_start = today.replace(day=1)
        last_month = today - relativedelta(months=1)
        previous_start, previous_end = get_month_bounds(last_month.year, last_month.month)

        current = {c["category"]: c["total"] for c in self.repo.get_category_summary(user_id, current_start, today)}
        previous = {c["category"]: c["total"] for c in self.repo.get_category_summary(user_id, previous_start, previous_end)}
        if not current and not previous:
            return "📭 Ainda não há despesas suficientes para uma análise."

        spent = sum(current.values())
        _, month_end = get_month_bounds(today.year, today.month)
        projection = spent / today.day * month_end.day

        lines = ["🧠 *Análise de gastos*\n"]
        lines.append(f"💸 Gasto no mês até agora: {format_currency(spent)}")
        lines.append(f"📈 Projeção para o fim do mês: {format_currency(projection)}")
        lines.append(f"📆 Mês anterior: {format_currency(sum(previous.values()))}\n")

        if current:
            top = max(current, key=current.get)
            lines.append(f"🏆 Maior categoria: {top} ({format_currency(current[top])})\n")

        lines.append("Comparação por categoria:")
        for category in sorted(set(current) | set(previous), key=lambda c: -current.get(c, 0)):
            now, before = current.get(category, 0.0), previous.get(category, 0.0)
            diff = now - before
            arrow = "📈" if diff > 0 else ("📉" if diff < 0 else "➡️")
            lines.append(
                f"  {arrow} {category}: {format_currency(before)} → {format_currency(now)}"
            )
        return "\n".join(lines)

    # ── HELPERS ───────────────────────────────────────────

    @staticmethod
    def _coerce_id(tx_id) -> int:
        try:
            return int(str(tx_id).lstrip("#"))
        except (TypeError, ValueError):
            raise ValidationError("Informe o número da transação. Ex: #12")

    def _require(self, user_id: int, tx_id) -> Transaction:
        tx_id = self._coerce_id(tx_id)
        tx = self.repo.get_by_id(tx_id, user_id)
        if tx is None:
            raise NotFoundError(f"Transação #{tx_id} não encontrada.")
        return tx

    @staticmethod
    def _totals_lines(totals: dict) -> list[str]:
        return [
            f"💸 Despesas: {format_currency(totals['total_expenses'])}",
            f"💰 Receitas: {format_currency(totals['total_income'])}",
            f"📈 Saldo: {format_currency(totals['net'])}\n",
        ]

    def _category_lines(self, user_id: int, start: date, end: date, total_expenses: float) -> list[str]:
        categories = self.repo.get_category_summary(user_id, start, end)
        if not categories:
            return []
        lines = ["🏷️ Despesas por categoria:"]
        for c in categories:
            pct = (c["total"] / total_expenses * 100) if total_expenses > 0 else 0
            lines.append(f"  • {c['category']}: {format_currency(c['total'])} ({pct:.0f}%)")
        return lines
