"""
scheduler/cron.py
-----------------
The job table and its registration on the python-telegram-bot JobQueue.

Jobs that need a live messaging transport run inside the bot process.
Pure database work runs as a separate `python -m` process so a slow or
crashing run cannot stall the event loop. All schedules are UTC.
"""

import asyncio
import sys
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

from apscheduler.triggers.cron import CronTrigger
from telegram.ext import ContextTypes, JobQueue

from messaging.base import MessagingProvider
from scheduler.notification_jobs import send_recurring_reminders, send_weekly_report
from scheduler.reminder_jobs import send_credit_card_payment_reminders, send_statement_reminders
from services.conversation_state import conversation_state
from utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class JobDependencies:
    """Live objects handed to in-process jobs."""
    telegram_provider: MessagingProvider
    reminder_provider: MessagingProvider


@dataclass
class ScheduledJob:
    """
    One cron entry.

    Exactly one of `handler` (coroutine run in the bot process) or
    `command` (argv run as a subprocess) is set.
    """
    name: str
    schedule: str
    description: str
    handler: Optional[Callable[[JobDependencies], Awaitable[Any]]] = None
    command: Optional[list[str]] = None


async def _sweep_conversation_state(deps: JobDependencies) -> int:
    removed = conversation_state.sweep_expired()
    if removed:
        logger.debug(f"Swept {removed} expired conversation states")
    return removed


JOBS: list[ScheduledJob] = [
    ScheduledJob(
        name="send-statement-reminders",
        schedule="0 12 * * *",
        description="Avisa que a fatura do cartão fecha em 3 dias",
        handler=lambda deps: send_statement_reminders(deps.reminder_provider),
    ),
    ScheduledJob(
        name="send-credit-card-payment-reminders",
        schedule="0 12 * * *",
        description="Avisa que o pagamento da fatura vence em 2 dias",
        handler=lambda deps: send_credit_card_payment_reminders(deps.reminder_provider),
    ),
    ScheduledJob(
        name="send-recurring-reminders",
        schedule="0 9 * * *",
        description="Lembra dos pagamentos recorrentes dos próximos dias",
        handler=lambda deps: send_recurring_reminders(deps.telegram_provider),
    ),
    ScheduledJob(
        name="weekly-report",
        schedule="0 20 * * 0",
        description="Resumo semanal aos domingos",
        handler=lambda deps: send_weekly_report(deps.telegram_provider),
    ),
    ScheduledJob(
        name="conversation-state-sweep",
        schedule="*/5 * * * *",
        description="Remove confirmações pendentes expiradas",
        handler=_sweep_conversation_state,
    ),
    ScheduledJob(
        name="generate-recurring-transactions",
        schedule="0 3 * * *",
        description="Lança as transações recorrentes do dia",
        command=[sys.executable, "-m", "scheduler.recurring_jobs"],
    ),
    ScheduledJob(
        name="data-retention-cleanup",
        schedule="0 2 * * *",
        description="Apaga métricas e cache antigos",
        command=[sys.executable, "-m", "db.maintenance"],
    ),
]


async def run_command(job: ScheduledJob) -> bool:
    """Run a command job to completion. Returns True on exit code 0."""
    process = await asyncio.create_subprocess_exec(
        *job.command,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.STDOUT,
    )
    output, _ = await process.communicate()
    if process.returncode != 0:
        tail = output.decode(errors="replace")[-1000:] if output else ""
        logger.error(f"Job {job.name} exited with code {process.returncode}: {tail}")
        return False
    return True


async def run_job(job: ScheduledJob, deps: JobDependencies) -> Optional[Any]:
    """Execute one job; errors are logged and never escape."""
    logger.info(f"Running scheduled job {job.name}")
    try:
        if job.handler is not None:
            return await job.handler(deps)
        return await run_command(job)
    except Exception as e:
        logger.error(f"Scheduled job {job.name} failed: {e}", exc_info=True)
        return None


def register_jobs(job_queue: JobQueue, deps: JobDependencies,
                  jobs: Optional[list[ScheduledJob]] = None) -> list[str]:
    """
    Put every job on the queue with its cron trigger.

    Returns:
        Names of the jobs that were scheduled. Jobs with an invalid
        cron expression are logged and left out.
    """
    scheduled = []
    for job in JOBS if jobs is None else jobs:
        try:
            trigger = CronTrigger.from_crontab(job.schedule, timezone="UTC")
        except ValueError as e:
            logger.error(f"Invalid cron expression for {job.name} ({job.schedule!r}): {e}")
            continue

        async def callback(context: ContextTypes.DEFAULT_TYPE) -> None:
            await run_job(context.job.data, deps)

        job_queue.run_custom(callback, job_kwargs={"trigger": trigger}, name=job.name, data=job)
        scheduled.append(job.name)

    logger.info(f"Scheduled {len(scheduled)} jobs: {', '.join(scheduled)}")
    return scheduled
