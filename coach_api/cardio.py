from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, List, Optional

import backend_client
from exceptions import ApiError

from .schemas import CardioLog

logger = logging.getLogger("fitcoach.cardio")


def get_cardio_logs(
    student_id: int,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    limit: Optional[int] = None,
) -> List[CardioLog]:
    data = backend_client.get(
        f"/cardio/{student_id}",
        params={"startDate": start_date, "endDate": end_date, "limit": limit},
    )
    return [CardioLog.model_validate(c) for c in backend_client.unwrap_list(data)]


def create_cardio(
    student_id: int,
    activity_type: str,
    duration_minutes: Optional[float] = None,
    distance_km: Optional[float] = None,
    steps: Optional[int] = None,
    intensity: Optional[str] = None,
    day: Optional[str] = None,
    notes: Optional[str] = None,
) -> Dict[str, Any]:
    payload = {
        "activityType": activity_type,
        "durationMinutes": duration_minutes,
        "distanceKm": distance_km,
        "steps": steps,
        "intensity": intensity,
        "date": day or date.today().isoformat(),
        "notes": notes,
    }
    return backend_client.post(f"/cardio/{student_id}", json={k: v for k, v in payload.items() if v is not None}) or {}


def delete_cardio(cardio_id: int) -> None:
    backend_client.delete(f"/cardio/{cardio_id}")


def get_today_cardio(student_id: int) -> List[CardioLog]:
    data = backend_client.get(f"/cardio/{student_id}/today")
    return [CardioLog.model_validate(c) for c in backend_client.unwrap_list(data)]


def get_week_cardio(student_id: int) -> Dict[str, Any]:
    """-> {totalSessions, totalMinutes, totalDistance, totalSteps, byActivity}"""
    return backend_client.get(f"/cardio/{student_id}/week") or {}


# ========== STEPS ==========


def get_steps_weekly(student_id: int, week_offset: int = 0) -> Optional[Dict[str, Any]]:
    """Daily steps of one week (0 = current, 1 = last week, ...)."""
    return backend_client.get(f"/cardio/{student_id}/steps-weekly", params={"weekOffset": week_offset})


def get_steps_weekly_stats(student_id: int, weeks: int = 12) -> Dict[str, Any]:
    return backend_client.get(f"/cardio/{student_id}/steps-weekly-stats", params={"weeks": weeks}) or {}


def add_manual_steps(
    student_id: int,
    steps: int,
    day: Optional[str] = None,
    notes: Optional[str] = None,
    replace: bool = False,
) -> Dict[str, Any]:
    """Log steps for a day; ``replace`` overwrites instead of adding."""
    payload: Dict[str, Any] = {"steps": steps, "date": day or date.today().isoformat()}
    if notes:
        payload["notes"] = notes
    if replace:
        payload["replace"] = True
    return backend_client.post(f"/cardio/{student_id}/manual-steps", json=payload) or {}


def delete_steps_by_date(student_id: int, day: str) -> None:
    backend_client.delete(f"/cardio/{student_id}/steps-by-date/{day}")


def get_steps_by_date(student_id: int, day: str) -> Optional[Dict[str, Any]]:
    """Walk log for ``day`` as {steps, id}, or None (also on lookup errors)."""
    try:
        data = backend_client.get(f"/cardio/{student_id}", params={"limit": 100})
    except ApiError as exc:
        logger.warning("Steps lookup for %s failed: %s", day, exc.message)
        return None
    for log in backend_client.unwrap_list(data):
        if not isinstance(log, dict) or not isinstance(log.get("date"), str):
            continue
        if log["date"].split("T")[0] == day and log.get("activityType") == "walk":
            return {"steps": int(log.get("steps") or 0), "id": log.get("id")}
    return None


def get_monthly_steps(student_id: int, year: int, month: int) -> List[Dict[str, Any]]:
    """Walk logs of a calendar month as [{date, steps, id}]; [] on errors."""
    from cardio_stats import month_range, monthly_steps

    start, end = month_range(year, month)
    try:
        data = backend_client.get(
            f"/cardio/{student_id}",
            params={"startDate": start, "endDate": end, "limit": 100},
        )
    except ApiError as exc:
        logger.warning("Monthly steps for %s-%02d failed: %s", year, month, exc.message)
        return []
    return monthly_steps(backend_client.unwrap_list(data))
