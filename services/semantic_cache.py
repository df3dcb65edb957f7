"""
services/semantic_cache.py
--------------------------
Reuses earlier AI interpretations for messages that mean the same thing.
Each user's cached messages are compared to the new one by cosine
similarity of their Gemini embeddings.
"""

from typing import Awaitable, Callable, Optional

import numpy as np

from ai.gemini_parser import embed_text
from config import SEMANTIC_CACHE_THRESHOLD
from models.intent import Intent
from repositories.cache_repo import EmbeddingCacheRepository
from utils.logger import get_logger

logger = get_logger(__name__)


def cosine_similarities(query: list[float], vectors: list[list[float]]) -> np.ndarray:
    """Cosine similarity of `query` against each row of `vectors`; zero vectors score 0."""
    matrix = np.asarray(vectors, dtype=float)
    q = np.asarray(query, dtype=float)
    norms = np.linalg.norm(matrix, axis=1) * np.linalg.norm(q)
    dots = matrix @ q
    return np.divide(dots, norms, out=np.zeros_like(dots), where=norms > 0)


class SemanticCache:
    """Per-user nearest-neighbour lookup over cached (message, intent) pairs."""

    def __init__(self, repo: Optional[EmbeddingCacheRepository] = None,
                 embedder: Callable[[str], Awaitable[Optional[list[float]]]] = embed_text,
                 threshold: float = SEMANTIC_CACHE_THRESHOLD):
        self.repo = repo or EmbeddingCacheRepository()
        self.embedder = embedder
        self.threshold = threshold

    async def lookup(self, user_id: int, message: str) -> tuple[Optional[Intent], Optional[list[float]]]:
        """
        Find a cached intent for a similar message.

        Returns:
            (intent or None, the message embedding or None). The embedding is
            handed back so store() does not need to compute it again.
        """
        embedding = await self.embedder(message)
        if embedding is None:
            return None, None

        entries = [e for e in self.repo.get_user_entries(user_id)
                   if e["embedding"] and len(e["embedding"]) == len(embedding)]
        if not entries:
            return None, embedding

        scores = cosine_similarities(embedding, [e["embedding"] for e in entries])
        best = int(np.argmax(scores))
        score = float(scores[best])
        if score < self.threshold:
            logger.debug(f"Semantic cache miss for user {user_id} (best {score:.3f})")
            return None, embedding

        entry = entries[best]
        self.repo.touch(entry["id"])
        intent = Intent.from_dict(entry["parsed_intent"], strategy="semantic_cache")
        intent.confidence = score
        logger.info(f"Semantic cache hit for user {user_id}: '{entry['message_text']}' ({score:.3f})")
        return intent, embedding

    async def store(self, user_id: int, message: str, intent: Intent,
                    embedding: Optional[list[float]] = None) -> None:
        embedding = embedding or await self.embedder(message)
        if embedding is None:
            return
        self.repo.save(user_id, message, embedding, intent.to_dict())
