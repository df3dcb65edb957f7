"""
db/maintenance.py
-----------------
Data retention: prunes parsing metrics and unused semantic cache entries
older than DATA_RETENTION_DAYS, archives learned patterns that were barely
used and deletes the ones that kept producing unusable intents. Runs as
its own process:

    python -m db.maintenance
"""

import sys

from config import DATA_RETENTION_DAYS
from db.connection import close_pool, init_pool
from repositories.cache_repo import EmbeddingCacheRepository
from repositories.metrics_repo import MetricsRepository
from repositories.pattern_repo import PatternRepository
from utils.logger import get_logger

logger = get_logger(__name__)


def run_retention_cleanup(days: int = DATA_RETENTION_DAYS,
                          metrics_repo: MetricsRepository | None = None,
                          cache_repo: EmbeddingCacheRepository | None = None,
                          pattern_repo: PatternRepository | None = None) -> dict[str, int]:
    """Delete expired rows. Returns the number of rows affected per step."""
    metrics_repo = metrics_repo or MetricsRepository()
    cache_repo = cache_repo or EmbeddingCacheRepository()
    pattern_repo = pattern_repo or PatternRepository()

    removed = {
        "parsing_metrics": metrics_repo.delete_older_than(days),
        "message_embeddings": cache_repo.delete_unused_older_than(days),
        "archived_patterns": pattern_repo.archive_low_usage(age_days=days),
        "deleted_patterns": pattern_repo.delete_failed(),
    }
    logger.info(
        f"Retention cleanup ({days} days): {removed['parsing_metrics']} metrics, "
        f"{removed['message_embeddings']} cache entries removed; "
        f"{removed['archived_patterns']} patterns archived, "
        f"{removed['deleted_patterns']} failing patterns deleted"
    )
    return removed


def main() -> int:
    init_pool()
    try:
        run_retention_cleanup()
        return 0
    except Exception as e:
        logger.error(f"Retention cleanup failed: {e}", exc_info=True)
        return 1
    finally:
        close_pool()


if __name__ == "__main__":
    sys.exit(main())
