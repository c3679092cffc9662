from __future__ import annotations

import logging
import math
import re
import time
from typing import Any, Callable, Dict, List, Optional, Sequence, TypeVar

import pandas as pd

from coach_api.schemas import Exercise, WorkoutSet
from exceptions import ApiError, FormValidationError
from macros import js_round

T = TypeVar("T")

logger = logging.getLogger("fitcoach.workout")

DEFAULT_REST_SECONDS = 120
MAX_EXTRA_SETS = 5
HISTORY_SESSIONS_LIMIT = 10
SET_STATUSES = ("completed", "failed", "skipped")

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def _parse_int(value: Any) -> Optional[int]:
    """Leading integer of a value ("2-3 min" -> 2), None when there is none."""
    if value is None:
        return None
    match = _LEADING_INT.match(str(value))
    return int(match.group(1)) if match else None


def _parse_float(value: Any) -> Optional[float]:
    try:
        return float(str(value).replace(",", "."))
    except (TypeError, ValueError):
        return None


# ========== ORDERING ==========


def array_move(items: Sequence[T], old_index: int, new_index: int) -> List[T]:
    """Copy of ``items`` with the element at old_index moved to new_index."""
    moved = list(items)
    if not moved:
        return moved
    item = moved.pop(old_index)
    moved.insert(new_index, item)
    return moved


def reorder_payload(exercises: Sequence[Exercise]) -> List[Dict[str, int]]:
    return [{"id": ex.id, "orden": index + 1} for index, ex in enumerate(exercises)]


def move_exercise(
    exercises: List[Exercise],
    exercise_id: int,
    target_id: int,
    persist: Callable[[List[Dict[str, int]]], Any],
) -> List[Exercise]:
    """
    Move one exercise onto another's position and persist the new order.

    Returns the new list, or the original one when saving fails.
    """
    ids = [ex.id for ex in exercises]
    if exercise_id == target_id or exercise_id not in ids or target_id not in ids:
        return exercises
    reordered = array_move(exercises, ids.index(exercise_id), ids.index(target_id))
    try:
        persist(reorder_payload(reordered))
    except ApiError as exc:
        logger.warning("Could not save exercise order: %s", exc.message)
        return exercises
    return reordered


# ========== REST TIMER ==========


class RestTimer:
    """
    Countdown stored as an absolute end time, so it survives reruns and
    restarts: remaining time is always recomputed from the clock.
    """

    def __init__(self, end_time: Optional[float] = None, clock: Callable[[], float] = time.time):
        self.end_time = end_time
        self.clock = clock

    @property
    def active(self) -> bool:
        return self.end_time is not None and self.remaining() > 0

    def start(self, seconds: int = DEFAULT_REST_SECONDS) -> None:
        self.end_time = self.clock() + seconds

    reset = start

    def stop(self) -> None:
        self.end_time = None

    def remaining(self) -> int:
        if self.end_time is None:
            return 0
        return max(0, math.ceil(self.end_time - self.clock()))

    def expired(self) -> bool:
        """True once a started timer has run out; clears it."""
        if self.end_time is not None and self.remaining() == 0:
            self.stop()
            return True
        return False

    def to_dict(self) -> Dict[str, Any]:
        return {"end_time": self.end_time}

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]], clock: Callable[[], float] = time.time) -> "RestTimer":
        timer = cls(end_time=(data or {}).get("end_time"), clock=clock)
        # a timer that ran out while nobody was looking is dropped
        if timer.end_time is not None and timer.remaining() == 0:
            timer.stop()
        return timer


def rest_seconds_for(exercise: Exercise) -> int:
    minutes = _parse_int(exercise.descanso or "2")
    return (minutes or 0) * 60 or DEFAULT_REST_SECONDS


def format_clock(seconds: int) -> str:
    mins, secs = divmod(max(0, int(seconds)), 60)
    return f"{mins}:{secs:02d}"


# ========== SETS ==========


def build_set_payload(form: Dict[str, Any], status: str = "completed") -> Dict[str, Any]:
    """Normalize the edit-set form: blank fields become None, load defaults to 0."""
    if status not in SET_STATUSES:
        raise FormValidationError(f"Estado de serie inválido: {status}", field="status")
    return {
        "load": _parse_float(form.get("load")) or 0,
        "reps": form.get("reps") or None,
        "actualRir": _parse_int(form.get("actual_rir")) if form.get("actual_rir") else None,
        "actualRpe": _parse_int(form.get("actual_rpe")) if form.get("actual_rpe") else None,
        "notes": form.get("notes") or None,
        "status": status,
    }


def apply_set_update(
    exercises: List[Exercise], exercise_id: int, set_id: int, payload: Dict[str, Any]
) -> List[Exercise]:
    """Local copy of ``exercises`` with the saved values merged into one set."""
    updated = []
    for ex in exercises:
        if ex.id != exercise_id:
            updated.append(ex)
            continue
        sets = [
            WorkoutSet.model_validate({**s.model_dump(by_alias=True), **payload})
            if s.id == set_id
            else s
            for s in ex.sets
        ]
        updated.append(ex.model_copy(update={"sets": sets}))
    return updated


def append_set(exercises: List[Exercise], exercise_id: int, new_set: WorkoutSet) -> List[Exercise]:
    return [
        ex.model_copy(update={"sets": [*ex.sets, new_set]}) if ex.id == exercise_id else ex
        for ex in exercises
    ]


def extra_set_payload(exercise: Exercise) -> Dict[str, Any]:
    existing = exercise.sets or []
    extras = sum(1 for s in existing if s.is_extra)
    if extras >= MAX_EXTRA_SETS:
        raise FormValidationError(f"Máximo {MAX_EXTRA_SETS} sets extra por ejercicio", field="sets")
    return {
        "reps": exercise.repeticiones or "8-10",
        "expectedRir": exercise.rir_esperado or "2",
        "isExtra": True,
        "order": len(existing) + 1,
        "load": 0,
        "status": "pending",
    }


def progress(exercises: Sequence[Exercise]) -> Dict[str, int]:
    sets = [s for ex in exercises for s in ex.sets]
    return {
        "completed": sum(1 for s in sets if s.status == "completed"),
        "total": len(sets),
    }


# ========== HISTORY ==========


def _safe_mean(series: pd.Series):
    series = series.dropna()
    if series.empty:
        return None
    val = series.mean()
    if pd.isna(val):
        return None
    return float(val)


def _safe_max(series: pd.Series):
    series = series.dropna()
    if series.empty:
        return None
    val = series.max()
    if pd.isna(val):
        return None
    return float(val)


def _sets_frame(sets: List[Dict[str, Any]]) -> pd.DataFrame:
    df = pd.DataFrame(sets, columns=["load", "actualLoad", "reps", "actualReps", "actualRir"])
    load = pd.to_numeric(df["load"], errors="coerce")
    actual_load = pd.to_numeric(df["actualLoad"], errors="coerce")
    # load wins unless it is missing or zero
    df["load_value"] = load.where(load > 0, actual_load)
    reps_text = df["reps"].where(df["reps"].notna() & (df["reps"] != ""), df["actualReps"])
    df["reps_value"] = pd.to_numeric(reps_text.astype(str).str.extract(r"^\s*(\d+)")[0], errors="coerce")
    df["rir_value"] = pd.to_numeric(df["actualRir"], errors="coerce")
    return df


def summarise_exercise_history(
    records: List[Dict[str, Any]], limit: int = HISTORY_SESSIONS_LIMIT
) -> Dict[str, Any]:
    """
    Per-session summary of an exercise's history, newest first as returned by
    the API: number of sets, top load, average reps and average RIR.
    """
    sessions = []
    all_sets = []
    for entry in records[:limit]:
        sets = entry.get("sets") or []
        all_sets.extend(sets)
        df = _sets_frame(sets)
        avg_reps = _safe_mean(df["reps_value"].fillna(0)) if sets else None
        avg_rir = _safe_mean(df["rir_value"])
        sessions.append(
            {
                "date": entry.get("fecha") or entry.get("date"),
                "sets": len(sets),
                "max_load": _safe_max(df["load_value"]) or 0.0,
                "avg_reps": int(js_round(avg_reps)) if avg_reps else None,
                "avg_rir": int(js_round(avg_rir)) if avg_rir is not None else None,
            }
        )

    overall_df = _sets_frame(all_sets)
    return {
        "total_sessions": len(sessions),
        "total_sets": len(all_sets),
        "last_session_date": sessions[0]["date"] if sessions else None,
        "best_load": _safe_max(overall_df["load_value"]),
        "sessions": sessions,
    }
