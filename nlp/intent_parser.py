"""
nlp/intent_parser.py
--------------------
The parsing cascade: explicit command → learned pattern → local keywords
→ semantic cache → Gemini. The first stage that produces an acceptable
intent wins and tags it with its strategy name.

A stage that raises is logged and skipped; it never aborts the message.
"""

import re
import time
from typing import Optional

from ai.gemini_parser import parse_with_ai
from config import (
    LOCAL_NLP_CONFIDENCE_THRESHOLD,
    PATTERN_LEARNING_ENABLED,
    PATTERN_LEARNING_MIN_CONFIDENCE,
    SEMANTIC_CACHE_ENABLED,
)
from models.intent import Intent
from nlp.command_parser import parse_command
from nlp.local_parser import parse_local
from nlp.pattern_learning import build_pattern
from nlp.text_utils import parse_amount
from repositories.metrics_repo import MetricsRepository
from repositories.pattern_repo import PatternRepository
from services.semantic_cache import SemanticCache
from utils.logger import get_logger

logger = get_logger(__name__)

_ACTIONS_NEEDING_AMOUNT = ("add_expense", "add_income", "set_budget", "add_recurring", "create_installment")


def apply_learned_pattern(pattern: dict, message: str) -> Optional[Intent]:
    """
    Match one stored user pattern against a message.

    The pattern's parsed_output holds the action and fixed entities; named
    regex groups fill in the rest (an 'amount' group is parsed as a number).
    """
    try:
        match = re.search(pattern["regex_pattern"], message, re.IGNORECASE)
    except re.error as e:
        logger.warning(f"Invalid learned pattern #{pattern['id']}: {e}")
        return None
    if not match:
        return None

    output = pattern.get("parsed_output") or {}
    if not output.get("action"):
        return None

    entities = dict(output.get("entities") or {})
    for name, value in match.groupdict().items():
        if value is None:
            continue
        entities[name] = parse_amount(value) if name == "amount" else value.strip()

    return Intent(
        action=output["action"],
        confidence=pattern.get("confidence", 0.9),
        entities=entities,
        strategy="learned_pattern",
    )


def _is_usable(intent: Intent) -> bool:
    """A matched pattern that lost its amount cannot be executed."""
    if intent.action not in _ACTIONS_NEEDING_AMOUNT:
        return True
    return intent.entities.get("amount") is not None or bool(intent.entities.get("transactions"))


class IntentParser:
    """Runs the cascade for one message at a time."""

    def __init__(self, pattern_repo: Optional[PatternRepository] = None,
                 semantic_cache: Optional[SemanticCache] = None,
                 metrics_repo: Optional[MetricsRepository] = None,
                 ai_parser=parse_with_ai,
                 local_threshold: float = LOCAL_NLP_CONFIDENCE_THRESHOLD,
                 cache_enabled: bool = SEMANTIC_CACHE_ENABLED,
                 learning_enabled: bool = PATTERN_LEARNING_ENABLED,
                 learning_min_confidence: float = PATTERN_LEARNING_MIN_CONFIDENCE):
        self.pattern_repo = pattern_repo or PatternRepository()
        self.semantic_cache = semantic_cache or SemanticCache()
        self.metrics_repo = metrics_repo or MetricsRepository()
        self.ai_parser = ai_parser
        self.local_threshold = local_threshold
        self.cache_enabled = cache_enabled
        self.learning_enabled = learning_enabled
        self.learning_min_confidence = learning_min_confidence

    async def parse(self, user_id: int, message: str, context: Optional[dict] = None) -> Intent:
        """
        Interpret a message.

        Returns:
            The winning Intent, or Intent.unknown() when every stage fails.
        """
        started = time.monotonic()
        intent = await self._cascade(user_id, message, context)
        self._record_metric(user_id, message, intent, started)
        return intent

    async def _cascade(self, user_id: int, message: str, context: Optional[dict]) -> Intent:
        # 1. Explicit command
        try:
            intent = parse_command(message)
            if intent is not None:
                return intent
        except Exception as e:
            logger.error(f"Command parser failed for user {user_id}: {e}")

        # 2. Learned patterns
        try:
            for pattern in self.pattern_repo.get_active(user_id):
                intent = apply_learned_pattern(pattern, message)
                if intent is None:
                    continue
                usable = _is_usable(intent)
                self._record_pattern_usage(pattern["id"], usable)
                if usable:
                    return intent
        except Exception as e:
            logger.error(f"Learned pattern lookup failed for user {user_id}: {e}")

        # 3. Local keyword parser
        try:
            intent = parse_local(message)
            if intent is not None and intent.confidence >= self.local_threshold:
                return intent
        except Exception as e:
            logger.error(f"Local parser failed for user {user_id}: {e}")

        # 4. Semantic cache
        embedding = None
        if self.cache_enabled:
            try:
                intent, embedding = await self.semantic_cache.lookup(user_id, message)
                if intent is not None:
                    return intent
            except Exception as e:
                logger.error(f"Semantic cache lookup failed for user {user_id}: {e}")

        # 5. Gemini
        try:
            intent = await self.ai_parser(message, context)
        except Exception as e:
            logger.error(f"AI parser failed for user {user_id}: {e}")
            intent = None

        if intent is None:
            logger.info(f"No parser understood message from user {user_id}")
            return Intent.unknown()

        intent.strategy = "ai_function_calling"
        if self.learning_enabled and intent.confidence >= self.learning_min_confidence:
            self._learn_pattern(user_id, message, intent)
        if self.cache_enabled:
            try:
                await self.semantic_cache.store(user_id, message, intent, embedding)
            except Exception as e:
                logger.error(f"Failed to cache AI result for user {user_id}: {e}")
        return intent

    def _learn_pattern(self, user_id: int, message: str, intent: Intent) -> None:
        try:
            pattern = build_pattern(message, intent)
            if pattern is None:
                return
            self.pattern_repo.save(
                user_id, intent.action, pattern["regex_pattern"], message,
                pattern["parsed_output"], intent.confidence,
            )
        except Exception as e:
            logger.warning(f"Could not learn pattern for user {user_id}: {e}")

    def _record_pattern_usage(self, pattern_id: int, success: bool) -> None:
        try:
            self.pattern_repo.record_usage(pattern_id, success=success)
        except Exception as e:
            logger.warning(f"Could not update usage of pattern #{pattern_id}: {e}")

    def _record_metric(self, user_id: int, message: str, intent: Intent, started: float) -> None:
        try:
            self.metrics_repo.record(
                user_id=user_id,
                message_text=message,
                strategy=intent.strategy,
                action=intent.action,
                confidence=intent.confidence,
                success=not intent.is_unknown(),
                duration_ms=int((time.monotonic() - started) * 1000),
            )
        except Exception as e:
            logger.warning(f"Could not record parsing metric for user {user_id}: {e}")
