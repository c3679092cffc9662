"""
Tests for the day, keyed-TTL and week caches.
"""
from datetime import date

import pytest

from day_cache import TODAY_TTL_SECONDS, DayCache, TTLCache, WeekCache

TODAY = date(2026, 1, 8)


class Clock:
    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return Clock()


@pytest.fixture
def cache(clock):
    return DayCache(clock=clock, today=lambda: TODAY)


def test_today_expires_after_ttl(cache, clock):
    cache.set("2026-01-08", {"sleep_hours": 7})
    clock.now = TODAY_TTL_SECONDS - 1
    assert cache.has("2026-01-08")
    clock.now = TODAY_TTL_SECONDS
    assert not cache.has("2026-01-08")
    # stale entries are dropped, not just hidden
    assert len(cache) == 0


def test_past_days_never_expire(cache, clock):
    cache.set("2026-01-07", {"sleep_hours": 6})
    clock.now = 10 ** 6
    assert cache.get("2026-01-07") == {"sleep_hours": 6}


def test_cached_none_is_a_hit(cache):
    """A day known to have no record is still cached."""
    cache.set("2026-01-05", None)
    assert cache.has("2026-01-05")
    assert cache.get("2026-01-05", "missing") is None
    assert cache.get("2026-01-04", "missing") == "missing"


def test_invalidate_and_clear(cache):
    cache.set("2026-01-05", 1)
    cache.set("2026-01-06", 2)
    cache.invalidate("2026-01-05")
    assert not cache.has("2026-01-05")
    cache.clear()
    assert len(cache) == 0


def test_seed_skips_records_without_key(cache):
    records = [{"date": "2026-01-06"}, {"date": ""}, {"date": "2026-01-07"}]
    assert cache.seed(records, key=lambda r: r["date"]) == 2
    assert cache.get("2026-01-07") == {"date": "2026-01-07"}


def test_storage_can_be_any_mapping(clock):
    storage = {}
    cache = DayCache(storage=storage, clock=clock, today=lambda: TODAY)
    cache.set("2026-01-06", 5)
    assert storage == {"2026-01-06": {"value": 5, "ts": 0.0}}


def test_ttl_cache_expiry(clock):
    cache = TTLCache(60, clock=clock)
    cache.set("fees", [1])
    clock.now = 60
    assert cache.get("fees") == [1]
    clock.now = 61
    assert cache.get("fees") is None


def test_ttl_cache_max_entries_drops_oldest(clock):
    cache = TTLCache(60, clock=clock, max_entries=2)
    cache.set("a", 1)
    cache.set("b", 2)
    cache.set("c", 3)
    assert cache.get("a") is None
    assert cache.get("b") == 2 and cache.get("c") == 3


def test_get_or_fetch_fetches_once(clock):
    cache = TTLCache(60, clock=clock)
    calls = []

    def fetch():
        calls.append(1)
        return "value"

    assert cache.get_or_fetch("k", fetch) == "value"
    assert cache.get_or_fetch("k", fetch) == "value"
    assert len(calls) == 1


def test_week_cache_skips_current_week():
    weeks = WeekCache()
    assert weeks.set(0, "current") is False
    assert not weeks.has(0)
    assert weeks.set(3, "past") is True
    assert weeks.get(3) == "past"
    weeks.clear()
    assert not weeks.has(3)
