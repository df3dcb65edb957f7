"""
services/budget_service.py
---------------------------
Business logic for budget limits: monthly category budgets, the overall
budget and the per-statement breakdown of a credit card.
"""

from datetime import date
from typing import Optional

from models.budget import BudgetBreakdown, CategoryBreakdown, InstallmentInfo, TransactionDetail
from reminders.budget_calculator import get_budget_status
from repositories.budget_repo import BudgetRepository
from repositories.transaction_repo import TransactionRepository
from services.category_service import CategoryService
from utils.formatters import format_currency
from utils.logger import get_logger
from utils.statement_period import get_month_bounds

logger = get_logger(__name__)

UNCATEGORIZED = "Sem Categoria"

_STATUS_ICONS = {"exceeded": "🔴", "near-limit": "🟡", "on-track": "🟢"}
_STATUS_LABELS = {"exceeded": "estourado!", "near-limit": "atenção", "on-track": "ok"}


def build_budget_breakdown(rows: list[dict]) -> BudgetBreakdown:
    """
    Aggregate statement-period rows into per-category totals.

    Rows come from TransactionRepository.get_period_rows(). Uncategorized
    rows are grouped under "Sem Categoria"; categories are ordered by total,
    largest first.
    """
    breakdown = BudgetBreakdown()
    by_category: dict[Optional[int], CategoryBreakdown] = {}

    for row in rows:
        amount = float(row["amount"])
        name = row.get("category_name") or UNCATEGORIZED
        info = None
        if row.get("is_installment"):
            info = InstallmentInfo(
                payment_number=row.get("installment_number") or 0,
                total_installments=row.get("total_installments") or 0,
                plan_description=row.get("plan_description"),
            )

        detail = TransactionDetail(
            date=row["date"],
            description=row.get("description"),
            amount=amount,
            category_name=name,
            category_emoji=row.get("category_emoji"),
            installment_info=info,
        )

        category = by_category.get(row.get("category_id"))
        if category is None:
            category = CategoryBreakdown(
                category_id=row.get("category_id"),
                category_name=name,
                category_emoji=row.get("category_emoji"),
            )
            by_category[row.get("category_id")] = category

        category.category_total += amount
        category.transactions.append(detail)
        if info:
            category.installment_count += 1
            breakdown.installment_payments += 1
        else:
            category.regular_count += 1
            breakdown.regular_transactions += 1

        breakdown.total_spent += amount
        breakdown.transaction_details.append(detail)

    breakdown.total_spent = round(breakdown.total_spent, 2)
    breakdown.categories = sorted(by_category.values(), key=lambda c: c.category_total, reverse=True)
    return breakdown


class BudgetService:
    """Manages monthly budget limits and alerts."""

    def __init__(self):
        self.budget_repo = BudgetRepository()
        self.transaction_repo = TransactionRepository()
        self.categories = CategoryService()

    def set_budget(self, user_id: int, category: Optional[str], amount) -> str:
        """Set the monthly limit for a category, or the overall limit when no category is given."""
        try:
            limit = float(amount)
        except (TypeError, ValueError):
            return "⚠️ Informe um valor válido. Ex: `/budget Mercado 800`"
        if limit <= 0:
            return "⚠️ O orçamento precisa ser maior que zero."

        category_id, label = self._resolve(user_id, category)
        self.budget_repo.set_budget(user_id, category_id, limit)
        return f"✅ Orçamento de {label} definido: {format_currency(limit)} por mês."

    def delete_budget(self, user_id: int, category: Optional[str]) -> str:
        category_id, label = self._resolve(user_id, category)
        if self.budget_repo.delete_budget(user_id, category_id):
            return f"🗑️ Orçamento de {label} removido."
        return f"⚠️ Não há orçamento definido para {label}."

    def list_budgets(self, user_id: int) -> str:
        budgets = self.budget_repo.get_all_budgets(user_id)
        if not budgets:
            return self._no_budgets_message()
        lines = ["📋 *Seus orçamentos*\n"]
        for b in budgets:
            lines.append(f"  • {b['category'] or 'Geral'}: {format_currency(b['limit_amount'])}/mês")
        return "\n".join(lines)

    def show_budget(self, user_id: int, category: Optional[str] = None) -> str:
        """Current month spending against every budget (or just one category's)."""
        budgets = self.budget_repo.get_all_budgets(user_id)
        if category:
            resolved = self.categories.resolve(user_id, category)
            wanted = resolved["id"] if resolved else -1
            budgets = [b for b in budgets if b["category_id"] == wanted]
        if not budgets:
            return self._no_budgets_message()

        today = date.today()
        start, end = get_month_bounds(today.year, today.month)
        spending = {c["category_id"]: c["total"]
                    for c in self.transaction_repo.get_category_summary(user_id, start, end)}
        total_spent = sum(spending.values())

        lines = [f"💰 *Orçamento - {today:%m/%Y}*"]
        for b in budgets:
            limit = b["limit_amount"]
            spent = total_spent if b["category_id"] is None else spending.get(b["category_id"], 0.0)
            pct = (spent / limit * 100) if limit > 0 else 0
            status = get_budget_status(pct)
            remaining = max(0.0, limit - spent)
            lines.append(
                f"{_STATUS_ICONS[status]} *{b['category'] or 'Geral'}*: "
                f"{format_currency(spent)} / {format_currency(limit)} ({pct:.0f}%)\n"
                f"  {self._progress_bar(pct)}\n"
                f"  Restante: {format_currency(remaining)} | {_STATUS_LABELS[status]}"
            )
        return "\n\n".join(lines)

    def check_budget_alert(self, user_id: int, category_id: Optional[int]) -> Optional[str]:
        """
        Alert text when this month's spending reached 80% of a budget.
        Called after each expense is added; returns None when nothing to say.
        """
        today = date.today()
        start, end = get_month_bounds(today.year, today.month)
        spending = {c["category_id"]: c["total"]
                    for c in self.transaction_repo.get_category_summary(user_id, start, end)}

        alerts = []
        checks = [(None, sum(spending.values()), "geral")]
        if category_id is not None:
            checks.insert(0, (category_id, spending.get(category_id, 0.0), None))

        for budget_category, spent, label in checks:
            budget = self.budget_repo.get_budget(user_id, budget_category)
            if not budget or budget["limit_amount"] <= 0:
                continue
            pct = spent / budget["limit_amount"] * 100
            name = label or "desta categoria"
            status = get_budget_status(pct)
            if status == "exceeded":
                alerts.append(f"🔴 Você estourou o orçamento {name}! ({pct:.0f}%)")
            elif status == "near-limit":
                alerts.append(f"🟡 Você já usou {pct:.0f}% do orçamento {name}.")

        return "\n".join(alerts) if alerts else None

    def get_statement_breakdown(self, user_id: int, payment_method_id: int,
                                period_start: date, period_end: date) -> BudgetBreakdown:
        rows = self.transaction_repo.get_period_rows(user_id, payment_method_id, period_start, period_end)
        return build_budget_breakdown(rows)

    # ── HELPERS ───────────────────────────────────────────

    def _resolve(self, user_id: int, category: Optional[str]) -> tuple[Optional[int], str]:
        if not category or category.strip().lower() in ("geral", "total", "overall"):
            return None, "geral"
        resolved = self.categories.require(user_id, category)
        return resolved["id"], f"\"{resolved['name']}\""

    @staticmethod
    def _no_budgets_message() -> str:
        return (
            "📭 Nenhum orçamento definido.\n\n"
            "💡 Use `/budget <categoria> <valor>` para definir um.\n"
            "Ex: `/budget Mercado 800`"
        )

    @staticmethod
    def _progress_bar(pct: float, length: int = 15) -> str:
        filled = int(min(pct, 100) / 100 * length)
        empty = length - filled
        if pct >= 100:
            return "█" * length + " ⚠️"
        if pct >= 80:
            return "█" * filled + "░" * empty + " ⚡"
        return "█" * filled + "░" * empty
