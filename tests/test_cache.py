import pytest

from app.core.cache import TTLCache


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


def test_entries_expire_after_ttl(clock):
    cache = TTLCache(ttl_seconds=60, clock=clock)
    cache.set("attendance:a", [1, 2])
    clock.now = 59
    assert cache.get("attendance:a") == [1, 2]
    clock.now = 60
    assert cache.get("attendance:a") is None
    assert len(cache) == 0


def test_get_or_set_calls_factory_once(clock):
    cache = TTLCache(ttl_seconds=60, clock=clock)
    calls = []

    def factory():
        calls.append(1)
        return "value"

    assert cache.get_or_set("k", factory) == "value"
    assert cache.get_or_set("k", factory) == "value"
    assert len(calls) == 1

    clock.now = 61
    cache.get_or_set("k", factory)
    assert len(calls) == 2


def test_falsy_values_are_cached(clock):
    cache = TTLCache(ttl_seconds=60, clock=clock)
    calls = []
    cache.get_or_set("empty", lambda: calls.append(1) or [])
    cache.get_or_set("empty", lambda: calls.append(1) or [])
    assert len(calls) == 1


def test_invalidation(clock):
    cache = TTLCache(ttl_seconds=60, clock=clock)
    cache.set("attendance:1", 1)
    cache.set("attendance:2", 2)
    cache.set("builders:1", 3)

    cache.invalidate("attendance:1")
    assert cache.get("attendance:1") is None

    assert cache.invalidate_prefix("attendance:") == 1
    assert cache.get("builders:1") == 3

    cache.clear()
    assert len(cache) == 0


def test_purge_expired_and_per_entry_ttl(clock):
    cache = TTLCache(ttl_seconds=60, clock=clock)
    cache.set("short", 1, ttl_seconds=5)
    cache.set("long", 2)
    clock.now = 10
    assert cache.purge_expired() == 1
    assert cache.get("long") == 2


def test_ttl_must_be_positive():
    with pytest.raises(ValueError):
        TTLCache(ttl_seconds=0)


def test_writes_drop_expired_entries(clock):
    cache = TTLCache(ttl_seconds=10, clock=clock)
    for i in range(1000):
        cache.set(f"attendance:{i}", [i])
    assert len(cache) == 1000

    clock.now = 100
    cache.get_or_set("attendance:new", lambda: [])
    assert len(cache) == 1
    assert cache.get("attendance:new") == []
