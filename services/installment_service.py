"""
services/installment_service.py
-------------------------------
Purchases split into monthly installments ("parcelas"): creation, the
future-commitments view, early payoff and deletion. Payoff and delete
ask the user to confirm through the conversation state store.
"""

from datetime import date
from typing import Optional

from models.errors import NotFoundError, ValidationError
from models.installment import InstallmentPlan
from repositories.installment_repo import InstallmentRepository, split_amount
from repositories.payment_method_repo import PaymentMethodRepository
from services.category_service import CategoryService
from services.conversation_state import (
    PENDING_INSTALLMENT_DELETE,
    PENDING_PAYOFF,
    ConversationStateStore,
    conversation_state,
)
from utils.formatters import format_currency
from utils.logger import get_logger

logger = get_logger(__name__)

MAX_INSTALLMENTS = 60
_YES = ("sim", "s", "yes", "y", "confirmo", "confirmar")
_NO = ("nao", "não", "n", "no", "cancelar")

_MONTH_ABBR = ("jan", "fev", "mar", "abr", "mai", "jun", "jul", "ago", "set", "out", "nov", "dez")


class InstallmentService:
    """Business logic for installment plans."""

    def __init__(self, state: Optional[ConversationStateStore] = None):
        self.repo = InstallmentRepository()
        self.payment_method_repo = PaymentMethodRepository()
        self.categories = CategoryService()
        self.state = state or conversation_state

    def create_installment(self, user_id: int, description: Optional[str], installments,
                           total_amount=None, installment_amount=None,
                           category: Optional[str] = None, payment_method: Optional[str] = None,
                           first_payment_date: Optional[date] = None) -> str:
        """
        Register a purchase paid in N months.

        Either the total or the per-installment amount must be given.
        """
        try:
            count = int(installments)
        except (TypeError, ValueError):
            raise ValidationError("Em quantas parcelas? Ex: `/installment 1200 12x Celular`")
        if not 2 <= count <= MAX_INSTALLMENTS:
            raise ValidationError(f"O número de parcelas precisa estar entre 2 e {MAX_INSTALLMENTS}.")

        if total_amount is None and installment_amount is not None:
            total_amount = float(installment_amount) * count
        try:
            total = round(float(total_amount), 2)
        except (TypeError, ValueError):
            raise ValidationError("Informe o valor da compra.")
        if total <= 0:
            raise ValidationError("O valor precisa ser maior que zero.")

        resolved = self.categories.resolve(user_id, category)
        method = self.payment_method_repo.find_by_name(user_id, payment_method) if payment_method else None

        plan = self.repo.create_plan(InstallmentPlan(
            user_id=user_id,
            description=(description or "Compra parcelada").strip(),
            total_amount=total,
            total_installments=count,
            first_payment_date=first_payment_date or date.today(),
            category_id=resolved["id"] if resolved else None,
            payment_method_id=method.id if method else None,
        ))

        first = split_amount(total, count)[0]
        lines = [
            "💳 Compra parcelada registrada:",
            f"  📌 {plan.description}",
            f"  💵 Total: {format_currency(plan.total_amount)}",
            f"  🔢 {count}x de {format_currency(plan.installment_amount)}",
        ]
        if first != plan.installment_amount:
            lines.append(f"  (1ª parcela: {format_currency(first)})")
        lines.append(f"  🔖 Parcelamento #{plan.id}")
        return "\n".join(lines)

    def view_future_commitments(self, user_id: int, months: int = 12) -> str:
        commitments = self.repo.get_future_commitments(user_id, date.today(), months)
        if not commitments:
            return "📭 Nenhuma parcela futura. Você está livre! 🎉"

        total = sum(c["total"] for c in commitments)
        lines = ["📅 *Parcelas futuras*\n"]
        for c in commitments:
            month = c["month"]
            lines.append(
                f"  {_MONTH_ABBR[month.month - 1]}/{month.year}: "
                f"{format_currency(c['total'])} ({c['count']} parcela(s))"
            )
        lines.append(f"\n💸 Total comprometido: {format_currency(total)}")
        return "\n".join(lines)

    # ── PAYOFF / DELETE ───────────────────────────────────

    def payoff_installment(self, user_id: int, plan_id=None) -> str:
        """
        Pay off a plan early. With several active plans and no id, the user
        picks one from a numbered list.
        """
        if plan_id is None:
            plans = self.repo.get_active_plans(user_id)
            if not plans:
                return "📭 Você não tem parcelamentos ativos."
            if len(plans) > 1:
                self.state.set(user_id, PENDING_PAYOFF, [p.id for p in plans])
                lines = ["Qual parcelamento você quer quitar? Responda com o número:\n"]
                lines += [f"  {i}. {p.description} ({format_currency(p.total_amount)})"
                          for i, p in enumerate(plans, start=1)]
                return "\n".join(lines)
            plan_id = plans[0].id
        return self._payoff(user_id, self._require(user_id, plan_id))

    def delete_installment(self, user_id: int, plan_id=None) -> str:
        """Ask for confirmation before cancelling a plan and its future installments."""
        if plan_id is None:
            plans = self.repo.get_active_plans(user_id)
            if len(plans) != 1:
                return "⚠️ Informe o número do parcelamento. Ex: `apagar parcelamento #3`"
            plan = plans[0]
        else:
            plan = self._require(user_id, plan_id)

        remaining = self.repo.get_remaining(plan.id, date.today())
        self.state.set(user_id, PENDING_INSTALLMENT_DELETE, plan.id)
        return (
            f"⚠️ Apagar o parcelamento \"{plan.description}\"?\n"
            f"{remaining['count']} parcela(s) futura(s) ({format_currency(remaining['amount'])}) "
            f"serão removidas. Responda *sim* ou *não*."
        )

    def handle_pending(self, user_id: int, text: str) -> Optional[str]:
        """
        Answer a pending payoff choice or delete confirmation.
        Returns None when nothing is pending for this user.
        """
        reply = text.strip().lower()

        if self.state.has(user_id, PENDING_INSTALLMENT_DELETE):
            if reply in _YES:
                plan_id = self.state.pop(user_id, PENDING_INSTALLMENT_DELETE)
                removed = self.repo.close_plan(plan_id, user_id, "cancelled", date.today())
                return f"🗑️ Parcelamento #{plan_id} apagado ({removed} parcela(s) futura(s) removidas)."
            if reply in _NO:
                self.state.pop(user_id, PENDING_INSTALLMENT_DELETE)
                return "👍 Ok, nada foi apagado."
            return None

        if self.state.has(user_id, PENDING_PAYOFF):
            options = self.state.get(user_id, PENDING_PAYOFF)
            if not reply.isdigit() or not 1 <= int(reply) <= len(options):
                return None
            self.state.pop(user_id, PENDING_PAYOFF)
            return self._payoff(user_id, self._require(user_id, options[int(reply) - 1]))

        return None

    # ── HELPERS ───────────────────────────────────────────

    def _payoff(self, user_id: int, plan: InstallmentPlan) -> str:
        if plan.status != "active":
            return f"ℹ️ O parcelamento \"{plan.description}\" não está ativo."
        today = date.today()
        remaining = self.repo.get_remaining(plan.id, today)
        self.repo.close_plan(plan.id, user_id, "paid_off", today)
        return (
            f"✅ Parcelamento \"{plan.description}\" quitado!\n"
            f"{remaining['count']} parcela(s) futura(s) removida(s), "
            f"total de {format_currency(remaining['amount'])}."
        )

    def _require(self, user_id: int, plan_id) -> InstallmentPlan:
        try:
            plan_id = int(str(plan_id).lstrip("#"))
        except (TypeError, ValueError):
            raise ValidationError("Informe o número do parcelamento. Ex: #3")
        plan = self.repo.get_plan(plan_id, user_id)
        if plan is None:
            raise NotFoundError(f"Parcelamento #{plan_id} não encontrado.")
        return plan
