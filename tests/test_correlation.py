"""
Tests for the steps/weight dashboard data shaping.
"""
from datetime import date

import pandas as pd
import pytest

import correlation

THURSDAY = date(2026, 1, 8)


def test_week_bounds_monday_to_sunday():
    assert correlation.week_bounds(THURSDAY, 0) == (date(2026, 1, 5), date(2026, 1, 11))
    assert correlation.week_bounds(THURSDAY, 1) == (date(2025, 12, 29), date(2026, 1, 4))
    # a Monday is the start of its own week
    assert correlation.week_bounds(date(2026, 1, 5), 0)[0] == date(2026, 1, 5)


@pytest.mark.parametrize("offset, expected", [(-1, 0), (0, 0), (12, 12), (30, correlation.MAX_WEEK_OFFSET)])
def test_clamp_offset(offset, expected):
    assert correlation.clamp_offset(offset) == expected


def test_steps_domain_pads_and_clamps_at_zero():
    assert correlation.steps_domain([5000, 7000]) == pytest.approx((4600, 7400))
    # zero and missing mean "no data"
    assert correlation.steps_domain([0, 5000, None]) == (4000, 6000)
    assert correlation.steps_domain([]) == (0, 12000)


def test_weight_domain_rounds_outwards():
    assert correlation.weight_domain([80.0, 82.0]) == (79, 83)
    assert correlation.weight_domain([75.0]) == (73, 77)


def test_weekly_overview_pairs_weeks():
    steps = {"hasData": True, "weeks": [{"weekStart": "2025-12-29", "averageSteps": 8000}, {"averageSteps": 0}]}
    weight = {"hasData": True, "weeks": [{"weekStart": "2025-12-29", "averageWeight": 80.5, "variationGrams": -300}]}
    df = correlation.weekly_overview(steps, weight)
    assert list(df["name"]) == ["S1", "S2"]
    assert df.loc[0, "pasos"] == 8000
    assert df.loc[0, "weight_variation"] == -300
    assert pd.isna(df.loc[1, "pasos"])
    assert pd.isna(df.loc[1, "peso"])


def test_has_weekly_data():
    assert correlation.has_weekly_data({"hasData": True, "weeks": [{}]}, None)
    assert not correlation.has_weekly_data({"hasData": False, "weeks": [{}]}, {"hasData": True, "weeks": []})


def test_daily_overview_joins_weight_by_date():
    steps_week = {
        "stepsByDay": [
            {"dayShort": "Lun", "date": "2026-01-05", "steps": 9000},
            {"day": "Martes", "date": "2026-01-06", "steps": 0},
        ]
    }
    weight_week = {"weightsByDay": [{"date": "2026-01-05", "weight": 80.2}]}
    df = correlation.daily_overview(steps_week, weight_week)
    assert list(df.columns) == ["name", "date", "pasos", "peso"]
    assert list(df["name"]) == ["Lun", "Mar"]
    assert df.loc[0, "peso"] == 80.2
    assert df.loc[1, "peso"] is None
    assert df.loc[1, "pasos"] is None


def test_daily_overview_without_steps_is_empty():
    assert correlation.daily_overview(None, {"weightsByDay": [{"date": "2026-01-05", "weight": 80}]}).empty


def test_week_summary():
    nutrition = {
        "weeklyAverages": {"calories": 2000, "protein": 150, "carbs": 0, "fat": 60},
        "days": [{"consumed": {"calories": 2000}}, {"consumed": {"calories": 0}}, {"consumed": {"calories": 1800}}, {}],
    }
    weight_week = {"weightsByDay": [{"weight": 80}, {"weight": None}, {"weight": 79}]}
    steps_week = {"averageSteps": 8000, "dailyGoal": 10000, "totalSteps": 56000, "daysWithData": 7}

    summary = correlation.week_summary(nutrition, weight_week, steps_week, offset=2, today=THURSDAY)
    assert summary["week_number"] == 6
    assert summary["week_start"] == "2025-12-22"
    assert summary["avg_calories"] == 2000
    assert summary["avg_carbs"] is None
    assert summary["days_with_nutrition"] == 2
    assert summary["start_weight"] == 80
    assert summary["end_weight"] == 79
    assert summary["avg_weight"] == 79.5
    assert summary["weight_change"] == -1
    assert summary["weight_change_percent"] == pytest.approx(-1.25)
    assert summary["steps_goal_percent"] == 80
    assert summary["total_steps"] == 56000


def test_week_summary_without_data():
    summary = correlation.week_summary(None, None, None, today=THURSDAY)
    assert summary["avg_weight"] is None
    assert summary["weight_change"] is None
    assert summary["steps_goal_percent"] is None
    assert summary["total_steps"] == 0


def test_combined_week_has_seven_days():
    nutrition = {"days": [{"date": "2026-01-05", "consumed": {"calories": 1900, "protein": 140}}]}
    df = correlation.combined_week(nutrition, None, {"stepsByDay": [{"date": "2026-01-05", "steps": 7000}]})
    assert len(df) == 7
    assert list(df["day"]) == correlation.WEEKDAYS_SHORT
    assert df.loc[0, "calories"] == 1900
    assert df.loc[0, "steps"] == 7000
    assert df.loc[1, "date"] == ""
