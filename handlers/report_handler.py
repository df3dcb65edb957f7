"""
handlers/report_handler.py
--------------------------
File and image reports: /chart, /export_csv and /export_excel.
"""

from datetime import date

from telegram import Update
from telegram.ext import ContextTypes

from repositories.user_repo import UserRepository
from security.auth import authorized_only
from security.rate_limiter import rate_limited
from services.chart_service import ChartService
from services.export_service import ExportService
from utils.logger import get_logger

logger = get_logger(__name__)
user_repo = UserRepository()
chart_service = ChartService()
export_service = ExportService()


def parse_year_month(args: list[str], today: date | None = None) -> tuple[int, int]:
    """
    '[ano mês]' arguments → (year, month), defaulting to the current month.

    Raises:
        ValueError: arguments are not numbers or the month is out of range.
    """
    today = today or date.today()
    if len(args) < 2:
        return today.year, today.month
    year, month = int(args[0]), int(args[1])
    if not 1 <= month <= 12:
        raise ValueError(f"invalid month {month}")
    return year, month


def _internal_id(update: Update) -> int:
    user = update.effective_user
    return user_repo.ensure_user(user.id, user.first_name)["id"]


@authorized_only
@rate_limited
async def chart_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    /chart          → current month by category
    /chart 3 2025   → March 2025
    /chart semana   → last 7 days, per day
    """
    user_id = _internal_id(update)
    args = context.args or []

    if args and args[0].lower() in ("semana", "week"):
        buf = chart_service.generate_weekly_bar(user_id)
        caption = "📈 Gastos diários - últimos 7 dias"
    else:
        try:
            month = int(args[0]) if args else None
            year = int(args[1]) if len(args) >= 2 else None
        except ValueError:
            await update.message.reply_text("⚠️ Uso: /chart [mês] [ano] ou /chart semana")
            return
        if month is not None and not 1 <= month <= 12:
            await update.message.reply_text("⚠️ Mês inválido. Use de 1 a 12.")
            return
        buf = chart_service.generate_monthly_pie(user_id, year, month)
        caption = "📊 Gastos por categoria"

    if buf:
        await update.message.reply_photo(photo=buf, caption=caption)
    else:
        await update.message.reply_text("📭 Nenhum gasto registrado nesse período.")


async def _send_export(update: Update, context: ContextTypes.DEFAULT_TYPE, kind: str) -> None:
    try:
        year, month = parse_year_month(context.args or [])
    except ValueError:
        await update.message.reply_text(f"⚠️ Uso: /export_{kind} [ano mês]\nExemplo: /export_{kind} 2025 1")
        return

    user_id = _internal_id(update)
    try:
        if kind == "csv":
            buffer = export_service.export_month_csv(user_id, year, month)
            extension = "csv"
        else:
            buffer = export_service.export_month_excel(user_id, year, month)
            extension = "xlsx"
        await update.message.reply_document(
            document=buffer,
            filename=f"transacoes_{year}_{month:02d}.{extension}",
            caption=f"📊 Transações de {month:02d}/{year}",
        )
    except Exception as e:
        logger.error(f"{kind} export failed for user {user_id}: {e}")
        await update.message.reply_text("❌ Não foi possível gerar o arquivo. Tente novamente.")


@authorized_only
@rate_limited
async def export_csv_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await _send_export(update, context, "csv")


@authorized_only
@rate_limited
async def export_excel_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await _send_export(update, context, "excel")
