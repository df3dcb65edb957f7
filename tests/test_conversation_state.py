"""Unit tests for the TTL conversation state store"""

from services.conversation_state import LAST_TRANSACTION, PENDING_PAYOFF, ConversationStateStore


def test_value_available_until_ttl(clock):
    store = ConversationStateStore(ttl_seconds=300, clock=clock)
    store.set(1, LAST_TRANSACTION, 42)

    clock.advance(299)
    assert store.get(1, LAST_TRANSACTION) == 42

    clock.advance(1)
    assert store.get(1, LAST_TRANSACTION) is None


def test_keys_are_per_user(clock):
    store = ConversationStateStore(ttl_seconds=300, clock=clock)
    store.set(1, LAST_TRANSACTION, 42)

    assert store.get(2, LAST_TRANSACTION) is None
    assert not store.has(1, PENDING_PAYOFF)


def test_pop_removes_value(clock):
    store = ConversationStateStore(ttl_seconds=300, clock=clock)
    store.set(1, PENDING_PAYOFF, [3, 4])

    assert store.pop(1, PENDING_PAYOFF) == [3, 4]
    assert store.pop(1, PENDING_PAYOFF) is None


def test_set_refreshes_expiry(clock):
    store = ConversationStateStore(ttl_seconds=10, clock=clock)
    store.set(1, LAST_TRANSACTION, 1)
    clock.advance(8)
    store.set(1, LAST_TRANSACTION, 2)
    clock.advance(8)

    assert store.get(1, LAST_TRANSACTION) == 2


def test_sweep_removes_only_expired(clock):
    store = ConversationStateStore(ttl_seconds=10, clock=clock)
    store.set(1, LAST_TRANSACTION, 1)
    clock.advance(5)
    store.set(2, LAST_TRANSACTION, 2)
    clock.advance(6)

    assert store.sweep_expired() == 1
    assert store.has(2, LAST_TRANSACTION)
    assert store.sweep_expired() == 0
