"""
repositories/cache_repo.py
--------------------------
Data access layer for the semantic cache (message embeddings).
"""

from psycopg2.extras import Json

from db.connection import get_connection, release_connection
from utils.logger import get_logger

logger = get_logger(__name__)


class EmbeddingCacheRepository:
    """Repository for the message_embeddings table."""

    def get_user_entries(self, user_id: int, limit: int = 500) -> list[dict]:
        """
        Most recently used cache entries of a user.

        Returns:
            List of dicts: [{'id', 'message_text', 'embedding', 'parsed_intent'}, ...].
        """
        sql = """
            SELECT id, message_text, embedding, parsed_intent
            FROM message_embeddings
            WHERE user_id = %s
            ORDER BY last_used_at DESC
            LIMIT %s;
        """
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (user_id, limit))
                return [
                    {"id": r[0], "message_text": r[1], "embedding": r[2], "parsed_intent": r[3]}
                    for r in cur.fetchall()
                ]
        finally:
            release_connection(conn)

    def save(self, user_id: int, message_text: str, embedding: list[float],
             parsed_intent: dict) -> None:
        sql = """
            INSERT INTO message_embeddings (user_id, message_text, embedding, parsed_intent)
            VALUES (%s, %s, %s, %s);
        """
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (user_id, message_text, list(embedding), Json(parsed_intent)))
            conn.commit()
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to cache embedding for user {user_id}: {e}")
            raise
        finally:
            release_connection(conn)

    def touch(self, entry_id: int) -> None:
        sql = """
            UPDATE message_embeddings
            SET usage_count = usage_count + 1, last_used_at = NOW()
            WHERE id = %s;
        """
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (entry_id,))
            conn.commit()
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to update cache entry #{entry_id}: {e}")
            raise
        finally:
            release_connection(conn)

    def delete_unused_older_than(self, days: int) -> int:
        """Drop entries not used for `days` days. Returns rows removed."""
        sql = "DELETE FROM message_embeddings WHERE last_used_at < NOW() - make_interval(days => %s);"
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (days,))
                removed = cur.rowcount
            conn.commit()
            return removed
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to prune semantic cache: {e}")
            raise
        finally:
            release_connection(conn)
