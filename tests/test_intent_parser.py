"""Unit tests for the intent parsing cascade"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from models.intent import Intent
from nlp.intent_parser import IntentParser, apply_learned_pattern


@pytest.fixture
def deps():
    pattern_repo = MagicMock()
    pattern_repo.get_active.return_value = []
    cache = MagicMock()
    cache.lookup = AsyncMock(return_value=(None, [0.1, 0.2]))
    cache.store = AsyncMock()
    return {
        "pattern_repo": pattern_repo,
        "semantic_cache": cache,
        "metrics_repo": MagicMock(),
        "ai_parser": AsyncMock(return_value=None),
    }


def _parser(deps, **kwargs) -> IntentParser:
    return IntentParser(local_threshold=0.8, cache_enabled=True, **deps, **kwargs)


@pytest.mark.asyncio
async def test_explicit_command_wins(deps):
    intent = await _parser(deps).parse(1, "/add 50 comida")

    assert intent.strategy == "explicit_command"
    deps["pattern_repo"].get_active.assert_not_called()
    deps["ai_parser"].assert_not_awaited()


@pytest.mark.asyncio
async def test_learned_pattern_before_local_parser(deps):
    deps["pattern_repo"].get_active.return_value = [{
        "id": 7,
        "regex_pattern": r"^cafe (?P<amount>\d+)$",
        "parsed_output": {"action": "add_expense", "entities": {"category": "Alimentação"}},
        "confidence": 0.95,
    }]

    intent = await _parser(deps).parse(1, "cafe 12")

    assert intent.strategy == "learned_pattern"
    assert intent.entities == {"category": "Alimentação", "amount": 12.0}
    deps["pattern_repo"].record_usage.assert_called_once_with(7, success=True)


@pytest.mark.asyncio
async def test_confident_local_result_skips_cache_and_ai(deps):
    intent = await _parser(deps).parse(1, "gastei 50 no mercado")

    assert intent.strategy == "local_nlp"
    deps["semantic_cache"].lookup.assert_not_called()
    deps["ai_parser"].assert_not_awaited()


@pytest.mark.asyncio
async def test_semantic_cache_hit(deps):
    cached = Intent("show_report", 0.93, {}, "semantic_cache")
    deps["semantic_cache"].lookup.return_value = (cached, [0.1, 0.2])

    intent = await _parser(deps).parse(1, "como estão minhas finanças")

    assert intent is cached
    deps["ai_parser"].assert_not_awaited()


@pytest.mark.asyncio
async def test_low_confidence_local_falls_through_to_ai(deps):
    deps["ai_parser"].return_value = Intent("add_expense", 0.9, {"amount": 40.0}, "ai_function_calling")

    intent = await _parser(deps).parse(1, "gastei no mercado", {"categories": ["Mercado"]})

    assert intent.action == "add_expense"
    assert intent.strategy == "ai_function_calling"
    deps["ai_parser"].assert_awaited_once_with("gastei no mercado", {"categories": ["Mercado"]})
    deps["semantic_cache"].store.assert_called_once_with(1, "gastei no mercado", intent, [0.1, 0.2])


@pytest.mark.asyncio
async def test_ai_failure_gives_unknown(deps):
    deps["ai_parser"].side_effect = TimeoutError("deadline exceeded")

    intent = await _parser(deps).parse(1, "como estão minhas finanças")

    assert intent.is_unknown()
    deps["semantic_cache"].store.assert_not_called()


@pytest.mark.asyncio
async def test_failing_stages_are_skipped(deps):
    """Broken pattern repo and cache never abort the cascade"""
    deps["pattern_repo"].get_active.side_effect = RuntimeError("db down")
    deps["semantic_cache"].lookup.side_effect = RuntimeError("embedding error")
    deps["ai_parser"].return_value = Intent("quick_stats", 0.8)

    intent = await _parser(deps).parse(1, "como estão minhas finanças")

    assert intent.action == "quick_stats"


@pytest.mark.asyncio
async def test_cache_disabled_goes_straight_to_ai(deps):
    parser = IntentParser(local_threshold=0.8, cache_enabled=False, **deps)
    await parser.parse(1, "como estão minhas finanças")

    deps["semantic_cache"].lookup.assert_not_called()
    deps["ai_parser"].assert_awaited()


@pytest.mark.asyncio
async def test_metric_recorded_and_failure_ignored(deps):
    deps["metrics_repo"].record.side_effect = RuntimeError("db down")

    intent = await _parser(deps).parse(1, "/undo")

    assert intent.action == "undo_last"
    kwargs = deps["metrics_repo"].record.call_args.kwargs
    assert kwargs["strategy"] == "explicit_command"
    assert kwargs["success"] is True


def test_invalid_learned_regex_is_ignored():
    pattern = {"id": 1, "regex_pattern": "([", "parsed_output": {"action": "add_expense"}}

    assert apply_learned_pattern(pattern, "qualquer coisa") is None


@pytest.mark.asyncio
async def test_pattern_without_amount_counts_as_failure_and_falls_through(deps):
    deps["pattern_repo"].get_active.return_value = [{
        "id": 9,
        "regex_pattern": r"^uber (?P<amount>\d+)$",
        "parsed_output": {"action": "add_expense", "entities": {"category": "Transporte"}},
    }]
    deps["ai_parser"].return_value = Intent("show_help", 0.5, {}, "ai_function_calling")

    intent = await _parser(deps, learning_enabled=False).parse(1, "uber 0")

    assert intent.strategy == "ai_function_calling"
    deps["pattern_repo"].record_usage.assert_called_once_with(9, success=False)


@pytest.mark.asyncio
async def test_confident_ai_result_is_learned(deps):
    deps["ai_parser"].return_value = Intent(
        "add_expense", 0.95, {"amount": 25.0, "category": "Transporte"}, "ai_function_calling")

    await _parser(deps, learning_enabled=True, learning_min_confidence=0.9).parse(1, "corrida 25")

    deps["pattern_repo"].save.assert_called_once()
    user_id, action, regex, example, output, confidence = deps["pattern_repo"].save.call_args.args
    assert (user_id, action, example, confidence) == (1, "add_expense", "corrida 25", 0.95)
    assert output == {"action": "add_expense", "entities": {"category": "Transporte"}}
    learned = {"id": 1, "regex_pattern": regex, "parsed_output": output}
    assert apply_learned_pattern(learned, "Corrida 40").entities["amount"] == 40.0


@pytest.mark.asyncio
async def test_unsure_ai_result_is_not_learned(deps):
    deps["ai_parser"].return_value = Intent("add_expense", 0.6, {"amount": 25.0}, "ai_function_calling")

    await _parser(deps, learning_enabled=True, learning_min_confidence=0.9).parse(1, "corrida 25")

    deps["pattern_repo"].save.assert_not_called()


@pytest.mark.asyncio
async def test_pattern_save_failure_keeps_ai_result(deps):
    deps["pattern_repo"].save.side_effect = RuntimeError("db down")
    deps["ai_parser"].return_value = Intent("list_budgets", 0.95, {}, "ai_function_calling")

    intent = await _parser(deps, learning_enabled=True).parse(1, "e aí, tudo certo?")

    assert intent.action == "list_budgets"
    deps["semantic_cache"].store.assert_awaited_once()
