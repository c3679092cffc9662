"""
Small memo caches used by the Streamlit pages.

DayCache keys entries by ISO date. Past days never change once logged, so only
today's entry expires; a cached None means "nothing logged that day".
"""

from __future__ import annotations

import time
from datetime import date
from typing import Any, Callable, Dict, Hashable, Iterable, MutableMapping, Optional

TODAY_TTL_SECONDS = 120

HISTORY_TTL_SECONDS = 10 * 60
SUMMARY_TTL_SECONDS = 5 * 60
FEES_TTL_SECONDS = 5 * 60
WEIGHT_TTL_SECONDS = 5 * 60
STUDENTS_SUMMARY_TTL_SECONDS = 5 * 60
SEARCH_CACHE_SIZE = 20

_MISSING = object()


class DayCache:
    def __init__(
        self,
        storage: Optional[MutableMapping[str, Any]] = None,
        today_ttl: float = TODAY_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
        today: Callable[[], date] = date.today,
    ):
        # storage holds {iso_date: {"value": ..., "ts": epoch_seconds}}
        self.storage = storage if storage is not None else {}
        self.today_ttl = today_ttl
        self.clock = clock
        self.today = today

    def _fresh(self, iso_date: str, entry: Dict[str, Any]) -> bool:
        if iso_date != self.today().isoformat():
            return True
        return self.clock() - float(entry.get("ts", 0)) < self.today_ttl

    def has(self, iso_date: str) -> bool:
        entry = self.storage.get(iso_date)
        if entry is None:
            return False
        if not self._fresh(iso_date, entry):
            del self.storage[iso_date]
            return False
        return True

    def get(self, iso_date: str, default: Any = None) -> Any:
        if not self.has(iso_date):
            return default
        return self.storage[iso_date].get("value")

    def set(self, iso_date: str, value: Any) -> None:
        self.storage[iso_date] = {"value": value, "ts": self.clock()}

    def invalidate(self, iso_date: str) -> None:
        self.storage.pop(iso_date, None)

    def clear(self) -> None:
        self.storage.clear()

    def seed(self, records: Iterable[Any], key: Callable[[Any], str]) -> int:
        """Cache a batch of fetched records under key(record); returns how many were stored."""
        count = 0
        for record in records:
            iso_date = key(record)
            if iso_date:
                self.set(iso_date, record)
                count += 1
        return count

    def __len__(self) -> int:
        return len(self.storage)


class TTLCache:
    """Keyed cache where every entry expires ``ttl`` seconds after being set."""

    def __init__(self, ttl: float, clock: Callable[[], float] = time.time, max_entries: Optional[int] = None):
        self.ttl = ttl
        self.clock = clock
        self.max_entries = max_entries
        self._entries: Dict[Hashable, Dict[str, Any]] = {}

    def get(self, key: Hashable, default: Any = None) -> Any:
        entry = self._entries.get(key)
        if entry is None:
            return default
        if self.clock() - entry["ts"] > self.ttl:
            del self._entries[key]
            return default
        return entry["value"]

    def set(self, key: Hashable, value: Any) -> None:
        self._entries.pop(key, None)
        self._entries[key] = {"value": value, "ts": self.clock()}
        if self.max_entries is not None:
            while len(self._entries) > self.max_entries:
                # dicts keep insertion order: drop the oldest
                del self._entries[next(iter(self._entries))]

    def get_or_fetch(self, key: Hashable, fetch: Callable[[], Any]) -> Any:
        value = self.get(key, _MISSING)
        if value is _MISSING:
            value = fetch()
            self.set(key, value)
        return value

    def invalidate(self, key: Hashable) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()


class WeekCache:
    """Week-offset cache; only past weeks (offset > 0) are stored."""

    def __init__(self):
        self._weeks: Dict[int, Any] = {}

    def get(self, offset: int) -> Any:
        return self._weeks.get(offset)

    def has(self, offset: int) -> bool:
        return offset in self._weeks

    def set(self, offset: int, value: Any) -> bool:
        if offset <= 0:
            return False
        self._weeks[offset] = value
        return True

    def clear(self) -> None:
        self._weeks.clear()
