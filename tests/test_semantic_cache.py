"""Unit tests for the embedding-based semantic cache"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from models.intent import Intent
from services.semantic_cache import SemanticCache, cosine_similarities


def _entry(entry_id, embedding, action="show_report"):
    return {
        "id": entry_id,
        "message_text": f"mensagem {entry_id}",
        "embedding": embedding,
        "parsed_intent": {"action": action, "confidence": 0.9, "entities": {}},
    }


def test_cosine_similarities():
    scores = cosine_similarities([1.0, 0.0], [[1.0, 0.0], [0.0, 1.0], [0.0, 0.0]])

    assert scores.tolist() == pytest.approx([1.0, 0.0, 0.0])


@pytest.mark.asyncio
async def test_lookup_returns_closest_intent_above_threshold():
    repo = MagicMock()
    repo.get_user_entries.return_value = [_entry(1, [0.0, 1.0], "quick_stats"), _entry(2, [1.0, 0.1])]
    cache = SemanticCache(repo=repo, embedder=AsyncMock(return_value=[1.0, 0.0]), threshold=0.9)

    intent, embedding = await cache.lookup(1, "relatório do mês")

    assert intent.action == "show_report"
    assert intent.strategy == "semantic_cache"
    assert intent.confidence > 0.9
    assert embedding == [1.0, 0.0]
    repo.touch.assert_called_once_with(2)


@pytest.mark.asyncio
async def test_lookup_miss_below_threshold():
    repo = MagicMock()
    repo.get_user_entries.return_value = [_entry(1, [0.0, 1.0])]
    cache = SemanticCache(repo=repo, embedder=AsyncMock(return_value=[1.0, 0.0]), threshold=0.85)

    intent, embedding = await cache.lookup(1, "qualquer")

    assert intent is None
    assert embedding == [1.0, 0.0]
    repo.touch.assert_not_called()


@pytest.mark.asyncio
async def test_entries_with_other_dimensions_are_ignored():
    repo = MagicMock()
    repo.get_user_entries.return_value = [_entry(1, [1.0, 0.0, 0.0])]
    cache = SemanticCache(repo=repo, embedder=AsyncMock(return_value=[1.0, 0.0]))

    assert await cache.lookup(1, "x") == (None, [1.0, 0.0])


@pytest.mark.asyncio
async def test_no_embedding_means_no_lookup():
    repo = MagicMock()
    cache = SemanticCache(repo=repo, embedder=AsyncMock(return_value=None))

    assert await cache.lookup(1, "x") == (None, None)
    repo.get_user_entries.assert_not_called()


@pytest.mark.asyncio
async def test_store_reuses_given_embedding():
    repo = MagicMock()
    embedder = AsyncMock()
    cache = SemanticCache(repo=repo, embedder=embedder)
    intent = Intent("quick_stats", 0.8, {}, "ai_function_calling")

    await cache.store(1, "como estou", intent, [0.5, 0.5])

    embedder.assert_not_awaited()
    repo.save.assert_called_once_with(1, "como estou", [0.5, 0.5],
                                      {"action": "quick_stats", "confidence": 0.8, "entities": {}})


@pytest.mark.asyncio
async def test_store_embeds_when_no_embedding_given():
    repo = MagicMock()
    cache = SemanticCache(repo=repo, embedder=AsyncMock(return_value=[0.3, 0.4]))

    await cache.store(1, "como estou", Intent("quick_stats", 0.8), None)

    assert repo.save.call_args.args[2] == [0.3, 0.4]
