from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, List, Optional

import backend_client
from exceptions import ApiError

from .schemas import Anthropometry, SleepLog, WeightLog

logger = logging.getLogger("fitcoach.health")


def _day(value: Any) -> str:
    return value.split("T")[0] if isinstance(value, str) else ""


# ========== WEIGHT ==========


def get_weight_history(student_id: int, limit: int = 30) -> List[WeightLog]:
    data = backend_client.get(f"/health/weight/{student_id}", params={"limit": limit})
    return [WeightLog.model_validate(w) for w in backend_client.unwrap_list(data)]


def create_weight(student_id: int, weight: float, day: Optional[str] = None, notes: Optional[str] = None) -> Dict[str, Any]:
    payload = {"weight": weight, "date": day or date.today().isoformat()}
    if notes:
        payload["notes"] = notes
    return backend_client.post(f"/health/weight/{student_id}", json=payload) or {}


def update_weight(weight_id: int, weight: float) -> Dict[str, Any]:
    return backend_client.put(f"/health/weight/{weight_id}", json={"weight": weight}) or {}


def delete_weight(weight_id: int) -> None:
    backend_client.delete(f"/health/weight/{weight_id}")


def get_weight_by_date(student_id: int, day: str) -> Optional[Dict[str, Any]]:
    """Weight logged on ``day`` as {weight, id}, or None (also on lookup errors)."""
    try:
        data = backend_client.get(f"/health/weight/{student_id}", params={"limit": 100})
    except ApiError as exc:
        logger.warning("Weight lookup for %s failed: %s", day, exc.message)
        return None
    for log in backend_client.unwrap_list(data):
        if isinstance(log, dict) and _day(log.get("date")) == day:
            return {"weight": float(log.get("weight") or 0), "id": log.get("id")}
    return None


def get_weight_stats(student_id: int) -> Dict[str, Any]:
    return backend_client.get(f"/health/weight/{student_id}/stats") or {}


def get_weight_weekly_stats(student_id: int) -> Dict[str, Any]:
    return backend_client.get(f"/health/weight/{student_id}/weekly-stats") or {}


def get_weight_daily_week(student_id: int, week_offset: int = 0) -> Optional[Dict[str, Any]]:
    """Per-day weights for one week; {weightsByDay, startDate, endDate, ...}"""
    return backend_client.get(f"/health/weight/{student_id}/daily-week", params={"weekOffset": week_offset})


# ========== SLEEP ==========


def get_sleep_logs(student_id: int, limit: int = 30) -> List[SleepLog]:
    data = backend_client.get(f"/health/sleep/{student_id}", params={"limit": limit})
    return [SleepLog.model_validate(s) for s in backend_client.unwrap_list(data)]


def add_sleep_log(
    student_id: int,
    sleep_hours: int,
    sleep_minutes: int,
    quality: str = "PLENO",
    day: Optional[str] = None,
    bedtime: Optional[str] = None,
    notes: Optional[str] = None,
) -> SleepLog:
    payload = {
        "date": day or date.today().isoformat(),
        "sleepHours": sleep_hours,
        "sleepMinutes": sleep_minutes,
        "quality": quality,
        "bedtime": bedtime,
        "notes": notes,
    }
    data = backend_client.post(f"/health/sleep/{student_id}", json={k: v for k, v in payload.items() if v is not None})
    return SleepLog.model_validate(data)


def get_sleep_by_date(student_id: int, day: str) -> Optional[SleepLog]:
    for log in get_sleep_logs(student_id, limit=30):
        if _day(log.date) == day:
            return log
    return None


# ========== ANTHROPOMETRY / DASHBOARDS ==========


def get_anthropometry_history(student_id: int) -> List[Anthropometry]:
    data = backend_client.get(f"/health/anthropometry/{student_id}")
    records = [Anthropometry.model_validate(a) for a in backend_client.unwrap_list(data)]
    return sorted(records, key=lambda r: r.date, reverse=True)


def add_anthropometry(student_id: int, record: Anthropometry) -> Anthropometry:
    payload = record.to_payload()
    for key in ("id", "studentId", "createdAt", "updatedAt"):
        payload.pop(key, None)
    return Anthropometry.model_validate(backend_client.post(f"/health/anthropometry/{student_id}", json=payload))


def get_dashboard(student_id: int) -> Dict[str, Any]:
    return backend_client.get(f"/health/dashboard/{student_id}") or {}


def get_correlation(student_id: int, weeks: int = 8) -> Dict[str, Any]:
    """Weekly steps/weight correlation -> {weeks: [...], correlation, ...}"""
    return backend_client.get(f"/health/correlation/{student_id}", params={"weeks": weeks}) or {}
