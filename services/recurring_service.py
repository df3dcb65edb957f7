"""
services/recurring_service.py
------------------------------
Business logic for recurring payments: registration, listing, editing,
and the daily generation of their transactions.
"""

from datetime import date
from typing import Optional

from dateutil.relativedelta import relativedelta

from models.errors import NotFoundError, ValidationError
from models.recurring import RecurringPayment
from models.transaction import Transaction
from repositories.recurring_repo import RecurringRepository
from repositories.transaction_repo import TransactionRepository
from services.category_service import CategoryService
from utils.formatters import format_currency
from utils.logger import get_logger

logger = get_logger(__name__)


def next_occurrence(day_of_month: int, today: Optional[date] = None) -> date:
    """
    The next date (today included) falling on `day_of_month`.
    Days past a short month's end land on its last day.
    """
    today = today or date.today()
    this_month = today + relativedelta(day=day_of_month)
    if this_month >= today:
        return this_month
    return today + relativedelta(months=1, day=day_of_month)


def _coerce_day(value) -> int:
    try:
        day = int(value)
    except (TypeError, ValueError):
        raise ValidationError("Informe o dia do mês (1 a 31).")
    if not 1 <= day <= 31:
        raise ValidationError("O dia precisa estar entre 1 e 31.")
    return day


class RecurringService:
    """
    Handles all business logic for recurring payments.

    Responsibilities:
        - Register, edit and remove recurring payments.
        - List upcoming reminders for the scheduler.
        - Generate the monthly transactions once a payment is due.
    """

    def __init__(self):
        self.repo = RecurringRepository()
        self.transaction_repo = TransactionRepository()
        self.categories = CategoryService()

    def add_recurring(self, user_id: int, description: Optional[str], amount, day_of_month=None,
                      tx_type: str = "expense", category: Optional[str] = None,
                      payment_method: Optional[str] = None) -> str:
        if not description:
            return "⚠️ Dê um nome para o pagamento recorrente. Ex: `/recurring Aluguel 1500 dia 5`"
        try:
            value = float(amount)
        except (TypeError, ValueError):
            return "⚠️ Informe o valor do pagamento recorrente."
        if value <= 0:
            return "⚠️ O valor precisa ser maior que zero."

        day = _coerce_day(day_of_month if day_of_month is not None else date.today().day)
        resolved = self.categories.resolve(user_id, category)

        saved = self.repo.add(RecurringPayment(
            user_id=user_id,
            description=description.strip(),
            amount=round(value, 2),
            day_of_month=day,
            next_due_date=next_occurrence(day),
            type=tx_type if tx_type in ("expense", "income") else "expense",
            category_id=resolved["id"] if resolved else None,
            payment_method=payment_method,
        ))
        return (
            f"🔁 Pagamento recorrente registrado:\n"
            f"  📌 {saved.description}\n"
            f"  💵 {format_currency(saved.amount)} todo dia {saved.day_of_month}\n"
            f"  📅 Próximo: {saved.next_due_date:%d/%m/%Y}\n"
            f"  🔖 #{saved.id}"
        )

    def make_expense_recurring(self, user_id: int, tx_id, day_of_month=None) -> str:
        """Turn an existing transaction into a monthly recurring payment."""
        try:
            tx_id = int(str(tx_id).lstrip("#"))
        except (TypeError, ValueError):
            return "⚠️ Informe o número da transação. Ex: #12"
        tx = self.transaction_repo.get_by_id(tx_id, user_id)
        if tx is None:
            raise NotFoundError(f"Transação #{tx_id} não encontrada.")

        day = _coerce_day(day_of_month if day_of_month is not None else tx.date.day)
        saved = self.repo.add(RecurringPayment(
            user_id=user_id,
            description=tx.description or tx.category_name or "Recorrente",
            amount=tx.amount,
            day_of_month=day,
            next_due_date=next_occurrence(day, tx.date + relativedelta(months=1, day=1)),
            type=tx.type,
            category_id=tx.category_id,
            payment_method=tx.payment_method,
        ))
        return (
            f"🔁 Transação #{tx_id} agora é recorrente (#{saved.id}), "
            f"todo dia {saved.day_of_month}. Próximo: {saved.next_due_date:%d/%m/%Y}."
        )

    def list_recurring(self, user_id: int) -> str:
        payments = self.repo.get_all(user_id, active_only=True)
        if not payments:
            return "📭 Nenhum pagamento recorrente cadastrado."

        lines = ["🔁 *Pagamentos recorrentes*\n"]
        total = 0.0
        for p in payments:
            lines.append(
                f"  #{p.id} {p.description}: {format_currency(p.amount)} "
                f"(dia {p.day_of_month}) - próximo {p.next_due_date:%d/%m}"
            )
            if p.type == "expense":
                total += p.amount
        if total > 0:
            lines.append(f"\n💸 Compromisso mensal: {format_currency(total)}")
        return "\n".join(lines)

    def edit_recurring(self, user_id: int, payment_id, amount=None, day_of_month=None,
                       description: Optional[str] = None) -> str:
        payment = self._require(user_id, payment_id)

        changes = []
        if amount is not None:
            try:
                payment.amount = round(float(amount), 2)
            except (TypeError, ValueError):
                return "⚠️ Valor inválido."
            changes.append(f"💵 Valor: {format_currency(payment.amount)}")
        if day_of_month is not None:
            payment.day_of_month = _coerce_day(day_of_month)
            payment.next_due_date = next_occurrence(payment.day_of_month)
            changes.append(f"📅 Dia: {payment.day_of_month}")
        if description:
            payment.description = description
            changes.append(f"📌 Nome: {description}")

        if not changes:
            return "⚠️ Nada para alterar. Informe valor, dia ou nome."
        self.repo.update(payment)
        return f"✏️ Recorrente #{payment.id} alterado:\n" + "\n".join(f"  {c}" for c in changes)

    def delete_recurring(self, user_id: int, payment_id) -> str:
        payment = self._require(user_id, payment_id)
        self.repo.delete(payment.id, user_id)
        return f"🗑️ Pagamento recorrente \"{payment.description}\" removido."

    # ── SCHEDULER SUPPORT ─────────────────────────────────

    def get_due_reminders(self, days_ahead: int = 2) -> list[RecurringPayment]:
        return self.repo.get_due_soon(days_ahead)

    def generate_due_transactions(self, today: Optional[date] = None) -> int:
        """
        Create the transaction of every recurring payment whose date has
        arrived and move it to the next month. Returns how many were created.

        A payment several months behind produces one transaction per missed month.
        """
        today = today or date.today()
        created = 0
        for payment in self.repo.get_due_for_generation(today):
            due = payment.next_due_date
            try:
                while due <= today:
                    self.transaction_repo.add(Transaction(
                        user_id=payment.user_id,
                        type=payment.type,
                        amount=payment.amount,
                        date=due,
                        category_id=payment.category_id,
                        payment_method=payment.payment_method,
                        description=payment.description,
                        raw_text=f"recorrente #{payment.id}",
                    ))
                    created += 1
                    due = due + relativedelta(months=1, day=payment.day_of_month)
                self.repo.set_next_due_date(payment.id, due)
            except Exception as e:
                logger.error(f"Failed to generate transactions for recurring #{payment.id}: {e}")
        logger.info(f"Generated {created} recurring transactions")
        return created

    def _require(self, user_id: int, payment_id) -> RecurringPayment:
        try:
            payment_id = int(str(payment_id).lstrip("#"))
        except (TypeError, ValueError):
            raise ValidationError("Informe o número do recorrente. Ex: #3")
        payment = self.repo.get_by_id(payment_id, user_id)
        if payment is None:
            raise NotFoundError(f"Pagamento recorrente #{payment_id} não encontrado.")
        return payment
