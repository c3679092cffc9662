from __future__ import annotations

import re
from datetime import date, datetime, timedelta
from typing import Optional, Union

DateLike = Union[str, date, datetime, None]

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

_MONTHS_ES = [
    "ene", "feb", "mar", "abr", "may", "jun",
    "jul", "ago", "sep", "oct", "nov", "dic",
]
MONTH_NAMES_ES = [
    "enero", "febrero", "marzo", "abril", "mayo", "junio",
    "julio", "agosto", "septiembre", "octubre", "noviembre", "diciembre",
]
_WEEKDAYS_ES = ["lun", "mar", "mié", "jue", "vie", "sáb", "dom"]


def parse_local_date(value: DateLike) -> Optional[date]:
    """
    Parse a date-only value as a local calendar date.

    "2026-01-08" and "2026-01-08T03:00:00.000Z" both map to 8 Jan 2026; the
    time part is ignored so UTC offsets never shift the day.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if _ISO_DATE.match(text):
        return date.fromisoformat(text)
    if len(text) >= 10 and _ISO_DATE.match(text[:10]):
        return date.fromisoformat(text[:10])
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        return None


def iso_day(value: DateLike) -> str:
    """Return the yyyy-mm-dd part of a date value, or "" when unparseable."""
    parsed = parse_local_date(value)
    return parsed.isoformat() if parsed else ""


def today_string(today: Optional[date] = None) -> str:
    return (today or date.today()).isoformat()


def add_days(iso_date: str, days: int) -> str:
    return (date.fromisoformat(iso_date) + timedelta(days=days)).isoformat()


def to_display(iso_date: str) -> str:
    """yyyy-mm-dd -> dd/mm/yyyy"""
    year, month, day = iso_date.split("-")
    return f"{day}/{month}/{year}"


def from_display(display: str, today: Optional[date] = None) -> str:
    """dd/mm/yyyy -> yyyy-mm-dd, falling back to today for malformed input."""
    parts = display.split("/")
    if len(parts) == 3:
        day, month, year = parts
        return f"{year}-{month.zfill(2)}-{day.zfill(2)}"
    return today_string(today)


def is_today(value: DateLike, today: Optional[date] = None) -> bool:
    parsed = parse_local_date(value)
    if parsed is None:
        return False
    return parsed == (today or date.today())


def format_date(value: DateLike, with_weekday: bool = False) -> str:
    """Short es-AR style date ("8 ene 26"), or an em dash when missing."""
    parsed = parse_local_date(value)
    if parsed is None:
        return "—"
    text = f"{parsed.day} {_MONTHS_ES[parsed.month - 1]} {parsed.year % 100:02d}"
    if with_weekday:
        text = f"{_WEEKDAYS_ES[parsed.weekday()]}, {text}"
    return text


def month_name(month: int) -> str:
    if 1 <= month <= 12:
        return MONTH_NAMES_ES[month - 1]
    return str(month)
