from __future__ import annotations

import calendar
from typing import Any, Dict, Iterable, List, Tuple

import pandas as pd

from macros import js_round

# activity type -> label, emoji, MET and whether a distance makes sense
ACTIVITIES: Dict[str, Dict[str, Any]] = {
    "treadmill": {"label": "Cinta", "emoji": "🚶‍♂️", "met": 8.0, "has_distance": True},
    "stationary_bike": {"label": "Bici Fija", "emoji": "🚲", "met": 7.0, "has_distance": True},
    "swimming": {"label": "Natación", "emoji": "🏊", "met": 8.0, "has_distance": True},
    "elliptical": {"label": "Elíptica", "emoji": "🏃‍♀️", "met": 5.0, "has_distance": False},
    "rowing": {"label": "Remo", "emoji": "🚣", "met": 7.0, "has_distance": True},
    "hiit": {"label": "HIIT", "emoji": "🏋️", "met": 8.0, "has_distance": False},
    "yoga": {"label": "Yoga", "emoji": "🧘", "met": 2.5, "has_distance": False},
    "stretching": {"label": "Stretching", "emoji": "🤸", "met": 2.0, "has_distance": False},
    "dance": {"label": "Baile", "emoji": "💃", "met": 6.0, "has_distance": False},
    "stairs": {"label": "Escaleras", "emoji": "🪜", "met": 9.0, "has_distance": False},
    "jump_rope": {"label": "Saltar Soga", "emoji": "🪢", "met": 11.0, "has_distance": False},
    "walking": {"label": "Caminata", "emoji": "🚶", "met": 3.5, "has_distance": True},
    "running": {"label": "Correr", "emoji": "🏃", "met": 9.5, "has_distance": True},
    "cycling": {"label": "Ciclismo", "emoji": "🚴", "met": 7.0, "has_distance": True},
}

INTENSITY_LEVELS: Dict[str, Dict[str, str]] = {
    "low": {"label": "Baja", "description": "Recuperación activa"},
    "medium": {"label": "Media", "description": "Zona aeróbica"},
    "high": {"label": "Alta", "description": "Intervalos / sprints"},
}

DEFAULT_MET = 5.0
DEFAULT_WEIGHT_KG = 70
STEPS_ACTIVITY = "walk"


def activity_info(activity_type: str) -> Dict[str, Any]:
    return ACTIVITIES.get(
        activity_type,
        {"label": activity_type, "emoji": "🏃", "met": DEFAULT_MET, "has_distance": False},
    )


def estimate_calories(activity_type: str, duration_minutes: float, weight_kg: float = DEFAULT_WEIGHT_KG) -> int:
    met = ACTIVITIES.get(activity_type, {}).get("met") or DEFAULT_MET
    return int(js_round(met * weight_kg * (duration_minutes / 60)))


def format_duration(minutes: int) -> str:
    if minutes < 60:
        return f"{minutes}min"
    hours, mins = divmod(int(minutes), 60)
    return f"{hours}h {mins}min" if mins > 0 else f"{hours}h"


def format_elapsed(seconds: int) -> str:
    """MM:SS, or H:MM:SS past the hour."""
    hours, rest = divmod(int(seconds), 3600)
    mins, secs = divmod(rest, 60)
    if hours > 0:
        return f"{hours}:{mins:02d}:{secs:02d}"
    return f"{mins:02d}:{secs:02d}"


def month_range(year: int, month: int) -> Tuple[str, str]:
    last_day = calendar.monthrange(year, month)[1]
    return f"{year}-{month:02d}-01", f"{year}-{month:02d}-{last_day:02d}"


def monthly_steps(logs: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Step entries (walk logs with steps) as [{date, steps, id}] for the calendar."""
    result = []
    for log in logs:
        if not isinstance(log, dict) or log.get("activityType") != STEPS_ACTIVITY:
            continue
        steps = int(log.get("steps") or 0)
        if steps <= 0:
            continue
        day = log["date"].split("T")[0] if isinstance(log.get("date"), str) else ""
        result.append({"date": day, "steps": steps, "id": log.get("id")})
    return result


def activity_breakdown(logs: Iterable[Any]) -> pd.DataFrame:
    """Sessions and minutes per activity, most minutes first (steps entries excluded)."""
    rows = [
        {"activity": log.activity_type, "minutes": log.duration_minutes or 0, "calories": log.calories_burned or 0}
        for log in logs
        if log.activity_type != STEPS_ACTIVITY
    ]
    if not rows:
        return pd.DataFrame(columns=["activity", "label", "sessions", "minutes", "calories"])
    df = pd.DataFrame(rows)
    summary = (
        df.groupby("activity")
        .agg(sessions=("minutes", "size"), minutes=("minutes", "sum"), calories=("calories", "sum"))
        .reset_index()
        .sort_values("minutes", ascending=False, kind="stable")
        .reset_index(drop=True)
    )
    summary.insert(1, "label", summary["activity"].map(lambda a: activity_info(a)["label"]))
    return summary
