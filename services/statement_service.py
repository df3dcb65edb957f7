"""
services/statement_service.py
-----------------------------
Credit card statement views: the open statement of each card with its
category breakdown, and switching a card in or out of statement tracking.
"""

from datetime import date
from typing import Optional

from models.errors import ValidationError
from models.payment_method import PaymentMethod
from repositories.payment_method_repo import PaymentMethodRepository
from services.budget_service import BudgetService
from utils.formatters import format_currency
from utils.logger import get_logger
from utils.statement_period import days_until_closing, format_statement_period, get_statement_period

logger = get_logger(__name__)


class StatementService:
    """Statement-period summaries for credit cards in credit mode."""

    def __init__(self):
        self.payment_method_repo = PaymentMethodRepository()
        self.budget_service = BudgetService()

    def view_statement_summary(self, user_id: int, payment_method: Optional[str] = None,
                               today: Optional[date] = None) -> str:
        today = today or date.today()
        cards = self.payment_method_repo.get_by_user(user_id, credit_only=True)
        if payment_method:
            wanted = payment_method.strip().lower()
            cards = [c for c in cards if c.name.lower() == wanted]
        if not cards:
            return (
                "📭 Nenhum cartão com controle de fatura.\n\n"
                "💡 Ative com: `modo crédito nubank fecha dia 5 vence 10`"
            )
        return "\n\n".join(self._card_summary(card, today) for card in cards)

    def switch_credit_mode(self, user_id: int, payment_method: Optional[str], enabled: bool = True,
                           closing_day=None, due_day=None) -> str:
        """
        Turn statement-period tracking on or off for a card.

        Enabling a card for the first time needs its closing day.
        """
        if not payment_method:
            return "⚠️ Qual cartão? Ex: `modo crédito nubank fecha dia 5`"

        closing_day = self._coerce_day(closing_day, "fechamento")
        due_day = self._coerce_day(due_day, "vencimento")
        existing = self.payment_method_repo.find_by_name(user_id, payment_method)
        if enabled and closing_day is None and (existing is None or existing.statement_closing_day is None):
            return f"📅 Em que dia fecha a fatura do {payment_method}? Ex: `modo crédito {payment_method} fecha dia 5`"

        card = self.payment_method_repo.upsert_credit_mode(
            user_id, payment_method, enabled, closing_day, due_day
        )
        if not enabled:
            return f"🗓️ {card.name}: gastos voltam a ser contados por mês calendário."

        period = get_statement_period(date.today(), card.statement_closing_day)
        lines = [
            f"💳 Modo crédito ativado para {card.name}.",
            f"  Fechamento: dia {card.statement_closing_day}",
        ]
        if card.payment_due_day:
            lines.append(f"  Vencimento: {card.payment_due_day} dias após o fechamento")
        lines.append(f"  Fatura atual: {format_statement_period(period)}")
        return "\n".join(lines)

    def _card_summary(self, card: PaymentMethod, today: date) -> str:
        period = get_statement_period(today, card.statement_closing_day)
        breakdown = self.budget_service.get_statement_breakdown(
            card.user_id, card.id, period.period_start, period.period_end
        )
        days = days_until_closing(today, card.statement_closing_day)

        lines = [
            f"💳 *{card.name}*",
            f"📅 {format_statement_period(period)} (fecha em {days} dia(s))",
            f"💸 Total: {format_currency(breakdown.total_spent)}",
        ]
        if card.monthly_budget:
            pct = breakdown.total_spent / card.monthly_budget * 100
            lines.append(f"🎯 Orçamento: {format_currency(card.monthly_budget)} ({pct:.0f}% usado)")
        lines.append(
            f"🧾 {breakdown.regular_transactions} compra(s), "
            f"{breakdown.installment_payments} parcela(s)"
        )
        if breakdown.categories:
            lines.append("")
            for category in breakdown.categories:
                emoji = category.category_emoji or "•"
                lines.append(f"  {emoji} {category.category_name}: {format_currency(category.category_total)}")
        return "\n".join(lines)

    @staticmethod
    def _coerce_day(value, label: str) -> Optional[int]:
        if value is None or value == "":
            return None
        try:
            day = int(value)
        except (TypeError, ValueError):
            raise ValidationError(f"Dia de {label} inválido: {value!r}")
        if not 1 <= day <= 31:
            raise ValidationError(f"O dia de {label} precisa estar entre 1 e 31.")
        return day
