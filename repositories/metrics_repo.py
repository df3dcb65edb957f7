"""
repositories/metrics_repo.py
----------------------------
Data access layer for intent-parsing metrics.
"""

from typing import Optional

from db.connection import get_connection, release_connection
from utils.logger import get_logger

logger = get_logger(__name__)


class MetricsRepository:
    """Repository for the parsing_metrics table."""

    def record(self, user_id: Optional[int], message_text: str, strategy: str,
               action: Optional[str], confidence: Optional[float], success: bool,
               duration_ms: int, error_message: Optional[str] = None) -> None:
        sql = """
            INSERT INTO parsing_metrics
                (user_id, message_text, strategy, action, confidence, success, error_message, duration_ms)
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s);
        """
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (
                    user_id, message_text[:500], strategy, action,
                    confidence, success, error_message, duration_ms,
                ))
            conn.commit()
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to record parsing metric: {e}")
            raise
        finally:
            release_connection(conn)

    def delete_older_than(self, days: int) -> int:
        """Drop metrics older than `days` days. Returns rows removed."""
        sql = "DELETE FROM parsing_metrics WHERE created_at < NOW() - make_interval(days => %s);"
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (days,))
                removed = cur.rowcount
            conn.commit()
            return removed
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to prune parsing metrics: {e}")
            raise
        finally:
            release_connection(conn)
