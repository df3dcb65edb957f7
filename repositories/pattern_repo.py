"""
repositories/pattern_repo.py
----------------------------
Data access layer for per-user learned message patterns: lookup, usage
stats, saving patterns learned from AI parses, and periodic cleanup.
"""

from psycopg2.extras import Json

from db.connection import get_connection, release_connection
from utils.logger import get_logger

logger = get_logger(__name__)


class PatternRepository:
    """Repository for the learned_patterns table."""

    def get_active(self, user_id: int) -> list[dict]:
        """
        Active patterns of a user, most used first.

        Returns:
            List of dicts: [{'id', 'pattern_type', 'regex_pattern', 'parsed_output', 'confidence'}, ...].
        """
        sql = """
            SELECT id, pattern_type, regex_pattern, parsed_output, confidence
            FROM learned_patterns
            WHERE user_id = %s AND is_active = TRUE
            ORDER BY usage_count DESC, id ASC;
        """
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (user_id,))
                return [
                    {
                        "id": r[0],
                        "pattern_type": r[1],
                        "regex_pattern": r[2],
                        "parsed_output": r[3],
                        "confidence": float(r[4]),
                    }
                    for r in cur.fetchall()
                ]
        finally:
            release_connection(conn)

    def record_usage(self, pattern_id: int, success: bool = True) -> None:
        """Bump usage counters after a pattern matched."""
        sql = """
            UPDATE learned_patterns
            SET usage_count = usage_count + 1,
                success_count = success_count + %s,
                last_used_at = NOW()
            WHERE id = %s;
        """
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (1 if success else 0, pattern_id))
            conn.commit()
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to record usage of pattern #{pattern_id}: {e}")
            raise
        finally:
            release_connection(conn)

    def save(self, user_id: int, pattern_type: str, regex_pattern: str, example_input: str,
             parsed_output: dict, confidence: float) -> int:
        """
        Store a new pattern, or reactivate an archived identical one.

        Returns:
            The pattern id.
        """
        sql = """
            INSERT INTO learned_patterns
                (user_id, pattern_type, regex_pattern, example_input, parsed_output, confidence)
            VALUES (%s, %s, %s, %s, %s, %s)
            ON CONFLICT (user_id, regex_pattern)
            DO UPDATE SET parsed_output = EXCLUDED.parsed_output,
                          confidence = EXCLUDED.confidence,
                          is_active = TRUE
            RETURNING id;
        """
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (user_id, pattern_type, regex_pattern, example_input,
                                  Json(parsed_output), round(confidence, 2)))
                pattern_id = cur.fetchone()[0]
            conn.commit()
            logger.info(f"Learned pattern #{pattern_id} ({pattern_type}) for user {user_id}")
            return pattern_id
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to save pattern for user {user_id}: {e}")
            raise
        finally:
            release_connection(conn)

    # ── MAINTENANCE ───────────────────────────────────────

    def archive_low_usage(self, max_usage: int = 5, age_days: int = 30) -> int:
        """Deactivate patterns used fewer than `max_usage` times after `age_days` days."""
        sql = """
            UPDATE learned_patterns SET is_active = FALSE
            WHERE is_active = TRUE
              AND usage_count < %s
              AND created_at < NOW() - make_interval(days => %s);
        """
        return self._execute_count(sql, (max_usage, age_days), "archive low-usage patterns")

    def delete_failed(self, min_usage: int = 10, min_success_rate: float = 0.3) -> int:
        """Delete well-used patterns whose success rate stayed below `min_success_rate`."""
        sql = """
            DELETE FROM learned_patterns
            WHERE is_active = TRUE
              AND usage_count > %s
              AND success_count::float / usage_count < %s;
        """
        return self._execute_count(sql, (min_usage, min_success_rate), "delete failed patterns")

    def _execute_count(self, sql: str, params: tuple, what: str) -> int:
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, params)
                affected = cur.rowcount
            conn.commit()
            return affected
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to {what}: {e}")
            raise
        finally:
            release_connection(conn)
