from __future__ import annotations

import math
from datetime import date, timedelta
from typing import Any, Dict, Iterable, List, Optional, Tuple

import pandas as pd

MAX_WEEK_OFFSET = 24
WEEKDAYS_SHORT = ["Lun", "Mar", "Mié", "Jue", "Vie", "Sáb", "Dom"]

STEPS_DEFAULT_DOMAIN = (0.0, 10000.0)
WEIGHT_DEFAULT_DOMAIN = (0.0, 100.0)


def _or_none(value: Any) -> Optional[float]:
    """Zero, empty and missing all mean "no data" on the charts."""
    if not value:
        return None
    return float(value)


def _at(items: List[Any], index: int) -> Dict[str, Any]:
    if index < len(items) and isinstance(items[index], dict):
        return items[index]
    return {}


def weekly_overview(steps_stats: Optional[Dict[str, Any]], weight_stats: Optional[Dict[str, Any]]) -> pd.DataFrame:
    """
    One row per week (S1..Sn) pairing the average steps with the average weight.

    Both stats payloads carry a "weeks" list ordered oldest first; the longer of
    the two decides the number of rows.
    """
    steps_weeks = (steps_stats or {}).get("weeks") or []
    weight_weeks = (weight_stats or {}).get("weeks") or []
    rows = []
    for i in range(max(len(steps_weeks), len(weight_weeks))):
        steps_week = _at(steps_weeks, i)
        weight_week = _at(weight_weeks, i)
        rows.append(
            {
                "name": f"S{i + 1}",
                "week_start": steps_week.get("weekStart") or weight_week.get("weekStart"),
                "week_end": steps_week.get("weekEnd") or weight_week.get("weekEnd"),
                "pasos": _or_none(steps_week.get("averageSteps")),
                "peso": _or_none(weight_week.get("averageWeight")),
                "steps_variation": steps_week.get("variationSteps"),
                "weight_variation": weight_week.get("variationGrams"),
            }
        )
    return pd.DataFrame(
        rows,
        columns=["name", "week_start", "week_end", "pasos", "peso", "steps_variation", "weight_variation"],
    )


def has_weekly_data(steps_stats: Optional[Dict[str, Any]], weight_stats: Optional[Dict[str, Any]]) -> bool:
    def _has(stats):
        return bool(stats and stats.get("hasData") and stats.get("weeks"))

    return _has(steps_stats) or _has(weight_stats)


def daily_overview(steps_week: Optional[Dict[str, Any]], weight_week: Optional[Dict[str, Any]]) -> pd.DataFrame:
    """Per-day steps with the weight logged on the same date."""
    steps_days = (steps_week or {}).get("stepsByDay") or []
    weight_days = (weight_week or {}).get("weightsByDay") or []
    columns = ["name", "date", "pasos", "peso"]
    if not steps_days:
        return pd.DataFrame(columns=columns)

    steps_df = pd.DataFrame(
        [
            {
                "name": day.get("dayShort") or (day.get("day") or "")[:3],
                "date": day.get("date"),
                "pasos": _or_none(day.get("steps")),
            }
            for day in steps_days
        ]
    )
    weight_df = pd.DataFrame(
        [{"date": w.get("date"), "peso": _or_none(w.get("weight"))} for w in weight_days],
        columns=["date", "peso"],
    ).drop_duplicates(subset="date", keep="first")
    merged = steps_df.merge(weight_df, on="date", how="left")
    merged = merged.astype(object).where(merged.notna(), None)
    return merged[columns]


def axis_domain(
    values: Iterable[Optional[float]],
    padding_ratio: float,
    fallback_pad: float,
    default: Tuple[float, float],
) -> Tuple[float, float]:
    """
    Y-axis bounds: data range padded by ``padding_ratio`` of its span, or by
    ``fallback_pad`` when the span is zero. Empty series use ``default``.
    """
    present = [float(v) for v in values if v]
    low = min(present) if present else default[0]
    high = max(present) if present else default[1]
    pad = (high - low) * padding_ratio or fallback_pad
    return low - pad, high + pad


def steps_domain(values: Iterable[Optional[float]]) -> Tuple[float, float]:
    low, high = axis_domain(values, 0.2, 1000, STEPS_DEFAULT_DOMAIN)
    return max(0.0, low), high


def weight_domain(values: Iterable[Optional[float]]) -> Tuple[int, int]:
    low, high = axis_domain(values, 0.3, 2, WEIGHT_DEFAULT_DOMAIN)
    return math.floor(low), math.ceil(high)


def week_bounds(today: Optional[date] = None, offset: int = 0) -> Tuple[date, date]:
    """Monday and Sunday of the week ``offset`` weeks before the current one."""
    today = today or date.today()
    monday = today - timedelta(days=today.weekday() + 7 * offset)
    return monday, monday + timedelta(days=6)


def clamp_offset(offset: int) -> int:
    return max(0, min(MAX_WEEK_OFFSET, offset))


def week_summary(
    nutrition: Optional[Dict[str, Any]],
    weight_week: Optional[Dict[str, Any]],
    steps_week: Optional[Dict[str, Any]],
    offset: int = 0,
    today: Optional[date] = None,
    weeks_shown: int = 8,
) -> Dict[str, Any]:
    """Averages, weight change and steps goal completion for one week."""
    nutrition = nutrition or {}
    steps_week = steps_week or {}
    weights = [d["weight"] for d in (weight_week or {}).get("weightsByDay") or [] if d.get("weight") is not None]

    avg_weight = sum(weights) / len(weights) if weights else None
    start_weight = weights[0] if weights else None
    end_weight = weights[-1] if weights else None
    change = end_weight - start_weight if start_weight and end_weight else None
    change_pct = change / start_weight * 100 if start_weight and change else None

    averages = nutrition.get("weeklyAverages") or {}
    average_steps = steps_week.get("averageSteps")
    daily_goal = steps_week.get("dailyGoal")
    monday, sunday = week_bounds(today, offset)

    return {
        "week_number": weeks_shown - offset,
        "week_start": monday.isoformat(),
        "week_end": sunday.isoformat(),
        "avg_calories": _or_none(averages.get("calories")),
        "avg_protein": _or_none(averages.get("protein")),
        "avg_carbs": _or_none(averages.get("carbs")),
        "avg_fat": _or_none(averages.get("fat")),
        "days_with_nutrition": sum(
            1 for d in nutrition.get("days") or [] if ((d.get("consumed") or {}).get("calories") or 0) > 0
        ),
        "start_weight": start_weight,
        "end_weight": end_weight,
        "avg_weight": avg_weight,
        "weight_change": change,
        "weight_change_percent": change_pct,
        "avg_steps": _or_none(average_steps),
        "total_steps": steps_week.get("totalSteps") or 0,
        "days_with_steps": steps_week.get("daysWithData") or 0,
        "steps_goal_percent": average_steps / daily_goal * 100 if average_steps and daily_goal else None,
    }


def combined_week(
    nutrition: Optional[Dict[str, Any]],
    weight_week: Optional[Dict[str, Any]],
    steps_week: Optional[Dict[str, Any]],
) -> pd.DataFrame:
    """Seven rows (Lun..Dom) with consumed macros, weight and steps side by side."""
    nutrition_days = (nutrition or {}).get("days") or []
    weight_days = (weight_week or {}).get("weightsByDay") or []
    steps_days = (steps_week or {}).get("stepsByDay") or []
    rows = []
    for i, label in enumerate(WEEKDAYS_SHORT):
        nutrition_day = _at(nutrition_days, i)
        weight_day = _at(weight_days, i)
        steps_day = _at(steps_days, i)
        consumed = nutrition_day.get("consumed") or {}
        rows.append(
            {
                "day": label,
                "date": nutrition_day.get("date") or weight_day.get("date") or steps_day.get("date") or "",
                "calories": _or_none(consumed.get("calories")),
                "protein": _or_none(consumed.get("protein")),
                "carbs": _or_none(consumed.get("carbs")),
                "fat": _or_none(consumed.get("fat")),
                "weight": _or_none(weight_day.get("weight")),
                "steps": _or_none(steps_day.get("steps")),
            }
        )
    return pd.DataFrame(rows)
