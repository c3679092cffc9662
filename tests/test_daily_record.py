"""
Tests for the daily check-in helpers and the cached sleep lookup.
"""
from datetime import date

import pytest

import daily_record
from coach_api.schemas import SleepLog
from day_cache import DayCache
from exceptions import ApiError, FormValidationError

TODAY = date(2026, 1, 8)


@pytest.fixture
def cache():
    return DayCache(clock=lambda: 0.0, today=lambda: TODAY)


def sleep_log(id, day, hours=7, minutes=0):
    return SleepLog(id=id, date=day, sleep_hours=hours, sleep_minutes=minutes)


@pytest.mark.parametrize(
    "hours, minutes, label",
    [(8, 0, "Óptimo"), (7, 59, "Bien"), (6, 0, "Medio"), (5, 30, "Bajo"), (4, 59, "Déficit")],
)
def test_sleep_bands(hours, minutes, label):
    assert daily_record.sleep_label(hours, minutes) == label


def test_sleep_color():
    assert daily_record.sleep_color(9, 0) == "#22c55e"
    assert daily_record.sleep_color(3, 0) == "#ef4444"


def test_format_sleep():
    assert daily_record.format_sleep(7, 0) == "7h"
    assert daily_record.format_sleep(7, 30) == "7h 30m"


def test_validate_sleep():
    assert daily_record.validate_sleep(7, 30) == (7, 30)
    with pytest.raises(FormValidationError):
        daily_record.validate_sleep(0, 0)
    with pytest.raises(FormValidationError):
        daily_record.validate_sleep(25, 0)


def test_validate_weight():
    assert daily_record.validate_weight("72,5") == 72.5
    for bad in ("0", "600", "abc", ""):
        with pytest.raises(FormValidationError):
            daily_record.validate_weight(bad)


def test_validate_steps():
    assert daily_record.validate_steps(" 8500 ") == 8500
    for bad in ("-1", "100001", "8.5k"):
        with pytest.raises(FormValidationError):
            daily_record.validate_steps(bad)


def test_next_pending_tab_order():
    """Weight first, then sleep, then steps."""
    assert daily_record.next_pending_tab(False, False, False) == "weight"
    assert daily_record.next_pending_tab(True, False, False) == "sleep"
    assert daily_record.next_pending_tab(True, False, True) == "steps"
    assert daily_record.next_pending_tab(True, True, True) is None


def test_zero_weight_or_steps_is_still_pending():
    logged = {"weight": {"weight": 0.0, "id": 1}, "steps": {"steps": 0, "id": 2}, "sleep": None}
    done = daily_record.logged_flags(logged)
    assert done == {"weight": False, "steps": False, "sleep": False}
    assert daily_record.next_pending_tab(done["weight"], done["steps"], done["sleep"]) == "weight"

    logged = {"weight": {"weight": 81.5, "id": 1}, "steps": {"steps": 0, "id": 2}, "sleep": {"id": 3}}
    done = daily_record.logged_flags(logged)
    assert done == {"weight": True, "steps": False, "sleep": True}
    assert daily_record.next_pending_tab(done["weight"], done["steps"], done["sleep"]) == "steps"

    assert daily_record.logged_flags({"weight": None, "steps": None, "sleep": None}) == {
        "weight": False,
        "steps": False,
        "sleep": False,
    }


def test_already_logged_calls_each_lookup_with_day():
    seen = []

    def lookup(name, result):
        def _lookup(day):
            seen.append((name, day))
            return result

        return _lookup

    logged = daily_record.already_logged(
        "2026-01-08",
        lookup("weight", {"weight": 80, "id": 1}),
        lookup("steps", None),
        lookup("sleep", None),
    )
    assert logged == {"weight": {"weight": 80, "id": 1}, "steps": None, "sleep": None}
    assert seen == [("weight", "2026-01-08"), ("steps", "2026-01-08"), ("sleep", "2026-01-08")]


def test_sleep_record_shape():
    record = daily_record.sleep_record(sleep_log(4, "2026-01-07T03:00:00.000Z", 6, 45))
    assert record["date"] == "2026-01-07"
    assert record["sleep_minutes"] == 45
    assert record["quality"] == "PLENO"


def test_preload_does_not_overwrite_cached_days(cache):
    cache.set("2026-01-07", {"id": 99})
    seeded = daily_record.preload_sleep(cache, [sleep_log(1, "2026-01-07"), sleep_log(2, "2026-01-06")])
    assert seeded == 1
    assert cache.get("2026-01-07") == {"id": 99}
    assert cache.get("2026-01-06")["id"] == 2


def test_load_sleep_record_fetches_once_per_day(cache):
    calls = []

    def fetch():
        calls.append(1)
        return [sleep_log(1, "2026-01-06")]

    assert daily_record.load_sleep_record(cache, fetch, "2026-01-06")["id"] == 1
    assert daily_record.load_sleep_record(cache, fetch, "2026-01-06")["id"] == 1
    # a day without a record is remembered as None
    assert daily_record.load_sleep_record(cache, fetch, "2026-01-05") is None
    assert daily_record.load_sleep_record(cache, fetch, "2026-01-05") is None
    assert len(calls) == 2


def test_load_sleep_record_errors_are_not_cached(cache):
    def fetch():
        raise ApiError("offline")

    with pytest.raises(ApiError):
        daily_record.load_sleep_record(cache, fetch, "2026-01-06")
    assert not cache.has("2026-01-06")


def test_new_session_cache_refetches_a_night_cached_as_empty():
    """A day remembered as empty lasts only as long as the session's cache."""
    logs = []
    calls = []

    def fetch():
        calls.append(1)
        return list(logs)

    first_session = DayCache(clock=lambda: 0.0, today=lambda: TODAY)
    assert daily_record.load_sleep_record(first_session, fetch, "2026-01-05") is None

    # the night is logged from another device
    logs.append(sleep_log(7, "2026-01-05"))
    assert daily_record.load_sleep_record(first_session, fetch, "2026-01-05") is None
    assert len(calls) == 1

    second_session = DayCache(clock=lambda: 0.0, today=lambda: TODAY)
    assert len(second_session) == 0
    assert daily_record.load_sleep_record(second_session, fetch, "2026-01-05")["id"] == 7
    assert len(calls) == 2
