"""
handlers/start_handler.py
-------------------------
/start, /help and /myid.
"""

from telegram import Update
from telegram.ext import ContextTypes

from nlp.command_parser import get_command_help
from repositories.user_repo import UserRepository
from security.auth import authorized_only
from security.rate_limiter import rate_limited
from utils.logger import get_logger

logger = get_logger(__name__)
user_repo = UserRepository()

WELCOME_TEXT = """
Olá, {name}! 👋
Sou seu assistente de finanças pessoais.

*📝 Registre gastos escrevendo normalmente:*
• "gastei 50 no mercado"
• "uber 23,90 ontem"
• "recebi 3000 de salário"
• "celular 1200 em 12x no nubank"

*📊 Consulte:*
• "quanto gastei esse mês?"
• "resumo da fatura"
• "mostrar orçamento"

Digite /help para ver todos os comandos.
"""

EXTRA_COMMANDS = (
    "\n\n*📈 Relatórios:*\n"
    "/chart [mês] [ano] - gráfico por categoria\n"
    "/chart semana - gastos dos últimos 7 dias\n"
    "/export\\_csv [ano mês] - exportar CSV\n"
    "/export\\_excel [ano mês] - exportar Excel\n"
    "/myid - seu ID do Telegram"
)


@authorized_only
@rate_limited
async def start_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Register the user and show the welcome message."""
    user = update.effective_user
    user_repo.ensure_user(user.id, user.first_name)
    logger.info(f"User {user.id} ({user.first_name}) started the bot.")
    await update.message.reply_text(
        WELCOME_TEXT.format(name=user.first_name or ""),
        parse_mode="Markdown",
    )


@authorized_only
@rate_limited
async def help_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """/help or /help <comando>."""
    if context.args:
        await update.message.reply_text(get_command_help(context.args[0].lstrip("/").lower()))
        return
    await update.message.reply_text(get_command_help() + EXTRA_COMMANDS, parse_mode="Markdown")


@authorized_only
async def myid_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Show the Telegram ID to put in ALLOWED_USER_IDS."""
    user = update.effective_user
    await update.message.reply_text(
        f"🆔 Seu ID do Telegram: `{user.id}`\n"
        f"Adicione em `ALLOWED_USER_IDS` no arquivo `.env` para liberar o acesso.",
        parse_mode="Markdown",
    )
