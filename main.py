"""
main.py
-------
Entry point for the personal finance bot.

Responsibilities:
    - Initialize the database connection pool and schema.
    - Build the Telegram application and register all handlers.
    - Create the outbound messaging providers and schedule the cron jobs.
"""

import httpx
from telegram import BotCommand
from telegram.ext import Application, CommandHandler, MessageHandler, filters

from config import REMINDER_PROVIDER, TELEGRAM_BOT_TOKEN, WHATSAPP_API_BASE, WHATSAPP_TIMEOUT_SECONDS
from db.connection import close_pool, init_pool
from db.init_db import create_tables
from handlers.message_handler import PARSED_COMMANDS, handle_message
from handlers.report_handler import chart_command, export_csv_command, export_excel_command
from handlers.start_handler import help_command, myid_command, start_command
from messaging.telegram_provider import TelegramProvider
from messaging.whatsapp_provider import WhatsAppProvider
from scheduler.cron import JobDependencies, register_jobs
from utils.logger import get_logger

logger = get_logger(__name__)

BOT_COMMANDS = [
    BotCommand("start", "🚀 Começar"),
    BotCommand("help", "📖 Ajuda e comandos"),
    BotCommand("add", "➕ Registrar gasto"),
    BotCommand("budget", "🎯 Orçamentos"),
    BotCommand("recurring", "🔁 Pagamentos recorrentes"),
    BotCommand("report", "📊 Relatório do mês"),
    BotCommand("list", "📋 Listar dados"),
    BotCommand("categories", "🏷️ Categorias"),
    BotCommand("installment", "💳 Compra parcelada"),
    BotCommand("statement", "🧾 Resumo da fatura"),
    BotCommand("undo", "↩️ Desfazer última"),
    BotCommand("chart", "📈 Gráfico de gastos"),
    BotCommand("export_csv", "📄 Exportar CSV"),
    BotCommand("export_excel", "📊 Exportar Excel"),
    BotCommand("myid", "🆔 Seu ID"),
]


async def on_startup(application: Application) -> None:
    """Register the command menu, create providers and schedule jobs."""
    await application.bot.set_my_commands(BOT_COMMANDS)

    telegram_provider = TelegramProvider(application.bot)
    if REMINDER_PROVIDER == "whatsapp":
        reminder_provider = WhatsAppProvider(
            client=httpx.AsyncClient(base_url=WHATSAPP_API_BASE, timeout=WHATSAPP_TIMEOUT_SECONDS),
        )
    else:
        reminder_provider = telegram_provider
    application.bot_data["providers"] = [telegram_provider, reminder_provider]
    logger.info(f"Card reminders will be sent via {reminder_provider.platform}")

    if application.job_queue is None:
        logger.warning("JobQueue unavailable; install python-telegram-bot[job-queue]. No jobs scheduled.")
        return
    register_jobs(application.job_queue, JobDependencies(telegram_provider, reminder_provider))


async def on_shutdown(application: Application) -> None:
    for provider in set(application.bot_data.get("providers", [])):
        await provider.close()
    close_pool()
    logger.info("Bot stopped.")


def main() -> None:
    """Initialize and run the bot."""

    # ── 1. Database setup ─────────────────────────────────
    logger.info("Initializing database...")
    init_pool()
    create_tables()

    # ── 2. Build the Telegram application ─────────────────
    app = (
        Application.builder()
        .token(TELEGRAM_BOT_TOKEN)
        .post_init(on_startup)
        .post_shutdown(on_shutdown)
        .build()
    )

    # ── 3. Command handlers ───────────────────────────────
    app.add_handler(CommandHandler("start", start_command))
    app.add_handler(CommandHandler("help", help_command))
    app.add_handler(CommandHandler("myid", myid_command))
    app.add_handler(CommandHandler("chart", chart_command))
    app.add_handler(CommandHandler("export_csv", export_csv_command))
    app.add_handler(CommandHandler("export_excel", export_excel_command))
    app.add_handler(CommandHandler(PARSED_COMMANDS, handle_message))

    # ── 4. Free text (catch-all) ──────────────────────────
    app.add_handler(MessageHandler(filters.TEXT & ~filters.COMMAND, handle_message))

    # ── 5. Start polling ──────────────────────────────────
    logger.info("🚀 Bot is running! Press Ctrl+C to stop.")
    app.run_polling(drop_pending_updates=True, allowed_updates=["message"])


if __name__ == "__main__":
    main()
