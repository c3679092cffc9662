"""
Tests for local-date parsing and display helpers.
"""
from datetime import date, datetime

import pytest

import date_utils


@pytest.mark.parametrize(
    "value, expected",
    [
        ("2026-01-08", date(2026, 1, 8)),
        # the UTC time part never moves the day
        ("2026-01-08T03:00:00.000Z", date(2026, 1, 8)),
        ("2026-01-08T23:59:59-03:00", date(2026, 1, 8)),
        (datetime(2026, 1, 8, 22, 0), date(2026, 1, 8)),
        (date(2026, 1, 8), date(2026, 1, 8)),
        ("", None),
        (None, None),
        ("mañana", None),
    ],
)
def test_parse_local_date(value, expected):
    assert date_utils.parse_local_date(value) == expected


def test_iso_day():
    assert date_utils.iso_day("2026-01-08T03:00:00.000Z") == "2026-01-08"
    assert date_utils.iso_day(None) == ""


def test_add_days_crosses_month_and_year():
    assert date_utils.add_days("2025-12-31", 1) == "2026-01-01"
    assert date_utils.add_days("2024-03-01", -1) == "2024-02-29"


def test_display_round_trip():
    assert date_utils.to_display("2026-01-08") == "08/01/2026"
    assert date_utils.from_display("8/1/2026") == "2026-01-08"
    assert date_utils.from_display("garbage", today=date(2026, 1, 8)) == "2026-01-08"


def test_is_today():
    today = date(2026, 1, 8)
    assert date_utils.is_today("2026-01-08T02:00:00Z", today=today)
    assert not date_utils.is_today("2026-01-07", today=today)
    assert not date_utils.is_today(None, today=today)


def test_format_date():
    assert date_utils.format_date("2026-01-08") == "8 ene 26"
    assert date_utils.format_date("2026-01-08", with_weekday=True) == "jue, 8 ene 26"
    assert date_utils.format_date(None) == "—"


def test_month_name():
    assert date_utils.month_name(1) == "enero"
    assert date_utils.month_name(12) == "diciembre"
    assert date_utils.month_name(13) == "13"
