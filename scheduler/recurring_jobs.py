"""
scheduler/recurring_jobs.py
---------------------------
Daily generation of recurring transactions. Runs as its own process:

    python -m scheduler.recurring_jobs
"""

import sys

from db.connection import close_pool, init_pool
from services.recurring_service import RecurringService
from utils.logger import get_logger

logger = get_logger(__name__)


def main() -> int:
    init_pool()
    try:
        created = RecurringService().generate_due_transactions()
        logger.info(f"Recurring generation finished: {created} transactions")
        return 0
    except Exception as e:
        logger.error(f"Recurring generation failed: {e}", exc_info=True)
        return 1
    finally:
        close_pool()


if __name__ == "__main__":
    sys.exit(main())
