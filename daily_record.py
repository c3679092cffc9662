from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from coach_api.schemas import SleepLog
from date_utils import iso_day
from day_cache import DayCache
from exceptions import FormValidationError

SLEEP_QUALITIES: Dict[str, Dict[str, str]] = {
    "PLENO": {"label": "Pleno", "description": "Dormí de corrido"},
    "ENTRECORTADO": {"label": "Irregular", "description": "Me desperté varias veces"},
    "DIFICULTAD_DORMIR": {"label": "Difícil", "description": "Me costó conciliar el sueño"},
}

# (min hours, color, label), checked top-down
SLEEP_BANDS: List[Tuple[float, str, str]] = [
    (8, "#22c55e", "Óptimo"),
    (7, "#4ade80", "Bien"),
    (6, "#eab308", "Medio"),
    (5, "#f97316", "Bajo"),
]
SLEEP_DEFICIT = ("#ef4444", "Déficit")

# order the daily check-in walks through
METRIC_TABS = ["weight", "sleep", "steps"]

MAX_WEIGHT_KG = 500
MAX_STEPS = 100_000
SLEEP_PRELOAD_LIMIT = 30


def _band(hours: int, minutes: int) -> Tuple[str, str]:
    decimal = hours + minutes / 60
    for threshold, color, label in SLEEP_BANDS:
        if decimal >= threshold:
            return color, label
    return SLEEP_DEFICIT


def sleep_color(hours: int, minutes: int) -> str:
    return _band(hours, minutes)[0]


def sleep_label(hours: int, minutes: int) -> str:
    return _band(hours, minutes)[1]


def format_sleep(hours: int, minutes: int) -> str:
    return f"{hours}h {minutes}m" if minutes > 0 else f"{hours}h"


def validate_sleep(hours: int, minutes: int) -> Tuple[int, int]:
    if hours == 0 and minutes == 0:
        raise FormValidationError("Ingresá las horas de sueño", field="sleep_hours")
    if not (0 <= hours <= 24) or not (0 <= minutes < 60):
        raise FormValidationError("Duración de sueño inválida", field="sleep_hours")
    return hours, minutes


def validate_weight(text: str) -> float:
    try:
        weight = float(str(text).replace(",", "."))
    except (TypeError, ValueError):
        raise FormValidationError("Ingresá un peso válido", field="weight")
    if weight <= 0 or weight > MAX_WEIGHT_KG:
        raise FormValidationError("Ingresá un peso válido", field="weight")
    return weight


def validate_steps(text: str) -> int:
    try:
        steps = int(str(text).strip())
    except (TypeError, ValueError):
        raise FormValidationError("Ingresá una cantidad de pasos válida", field="steps")
    if steps < 0 or steps > MAX_STEPS:
        raise FormValidationError("Ingresá una cantidad de pasos válida", field="steps")
    return steps


def next_pending_tab(weight_done: bool, steps_done: bool, sleep_done: bool) -> Optional[str]:
    """First metric still missing today, or None when everything is logged."""
    done = {"weight": weight_done, "sleep": sleep_done, "steps": steps_done}
    for tab in METRIC_TABS:
        if not done[tab]:
            return tab
    return None


def already_logged(
    day: str,
    weight_lookup: Callable[[str], Optional[Dict[str, Any]]],
    steps_lookup: Callable[[str], Optional[Dict[str, Any]]],
    sleep_lookup: Callable[[str], Optional[SleepLog]],
) -> Dict[str, Any]:
    """Existing weight/steps/sleep records for ``day`` (None where nothing was logged)."""
    return {
        "weight": weight_lookup(day),
        "steps": steps_lookup(day),
        "sleep": sleep_lookup(day),
    }


def logged_flags(logged: Dict[str, Any]) -> Dict[str, bool]:
    """
    Which metrics count as done for the day.

    Weight and steps need a positive value; a stored 0 is still pending.
    Sleep is done as soon as a record exists.
    """
    weight = (logged.get("weight") or {}).get("weight") or 0
    steps = (logged.get("steps") or {}).get("steps") or 0
    return {"weight": weight > 0, "steps": steps > 0, "sleep": logged.get("sleep") is not None}


def sleep_record(log: SleepLog) -> Dict[str, Any]:
    """The JSON-friendly shape kept in the sleep cache."""
    return {
        "id": log.id,
        "date": iso_day(log.date),
        "sleep_hours": log.sleep_hours,
        "sleep_minutes": log.sleep_minutes,
        "bedtime": log.bedtime,
        "quality": log.quality,
        "notes": log.notes,
    }


def preload_sleep(cache: DayCache, logs: Iterable[SleepLog]) -> int:
    """Seed the cache with recent logs without overwriting days already cached."""
    fresh = [log for log in logs if not cache.has(iso_day(log.date))]
    return cache.seed((sleep_record(log) for log in fresh), key=lambda record: record["date"])


def load_sleep_record(
    cache: DayCache,
    fetch: Callable[[], Iterable[SleepLog]],
    iso_date: str,
) -> Optional[Dict[str, Any]]:
    """
    Cache-first lookup of the sleep record for ``iso_date``.

    On a miss the recent logs are fetched once; the day is cached either way,
    so a day without a record is not fetched again (until today's TTL runs out).
    """
    if cache.has(iso_date):
        return cache.get(iso_date)

    record = None
    for log in fetch():
        if iso_day(log.date) == iso_date:
            record = sleep_record(log)
            break
    cache.set(iso_date, record)
    return record
