"""
Tests for cardio calorie estimates, duration formatting and step summaries.
"""
import pytest

import cardio_stats
from coach_api.schemas import CardioLog


def test_estimate_calories_uses_met_table():
    # 9.5 MET * 70 kg * 0.5 h = 332.5
    assert cardio_stats.estimate_calories("running", 30) == 333
    assert cardio_stats.estimate_calories("yoga", 60, weight_kg=80) == 200


def test_estimate_calories_unknown_activity():
    assert cardio_stats.estimate_calories("parkour", 60) == 350
    assert cardio_stats.activity_info("parkour")["label"] == "parkour"


@pytest.mark.parametrize("minutes, text", [(0, "0min"), (45, "45min"), (60, "1h"), (90, "1h 30min"), (125, "2h 5min")])
def test_format_duration(minutes, text):
    assert cardio_stats.format_duration(minutes) == text


@pytest.mark.parametrize("seconds, text", [(0, "00:00"), (65, "01:05"), (3599, "59:59"), (3725, "1:02:05")])
def test_format_elapsed(seconds, text):
    assert cardio_stats.format_elapsed(seconds) == text


def test_month_range():
    assert cardio_stats.month_range(2024, 2) == ("2024-02-01", "2024-02-29")
    assert cardio_stats.month_range(2026, 1) == ("2026-01-01", "2026-01-31")


def test_monthly_steps_keeps_walk_logs_with_steps():
    logs = [
        {"id": 1, "activityType": "walk", "date": "2026-01-05T03:00:00.000Z", "steps": 8000},
        {"id": 2, "activityType": "walk", "date": "2026-01-06", "steps": 0},
        {"id": 3, "activityType": "running", "date": "2026-01-06", "steps": 4000},
        "junk",
    ]
    assert cardio_stats.monthly_steps(logs) == [{"date": "2026-01-05", "steps": 8000, "id": 1}]


def test_activity_breakdown():
    logs = [
        CardioLog(id=1, date="2026-01-05", activity_type="running", duration_minutes=30, calories_burned=300),
        CardioLog(id=2, date="2026-01-06", activity_type="yoga", duration_minutes=60),
        CardioLog(id=3, date="2026-01-07", activity_type="running", duration_minutes=40, calories_burned=380),
        CardioLog(id=4, date="2026-01-07", activity_type="walk", duration_minutes=0, steps=9000),
    ]
    df = cardio_stats.activity_breakdown(logs)
    assert list(df["activity"]) == ["running", "yoga"]
    assert list(df["label"]) == ["Correr", "Yoga"]
    assert df.loc[0, "sessions"] == 2
    assert df.loc[0, "minutes"] == 70
    assert df.loc[0, "calories"] == 680


def test_activity_breakdown_empty():
    df = cardio_stats.activity_breakdown([])
    assert df.empty
    assert "sessions" in df.columns
