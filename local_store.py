import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv

load_dotenv()

STATE_DIR = Path(os.getenv("FITCOACH_STATE_DIR", "~/.fitcoach")).expanduser()
STORE_PATH = STATE_DIR / "store.json"

logger = logging.getLogger("fitcoach.store")

# Holds device-wide state only. Login tokens and per-visit caches live in
# st.session_state, which is scoped to one browser session.
DEFAULT_STORE: Dict[str, Any] = {
    "schema_version": 2,
    "workout": {
        # student id -> {"end_time": epoch seconds or None}
        "rest_timers": {},
    },
}

SECTIONS = ("workout",)


def _ensure_sections(store: Dict[str, Any]) -> Dict[str, Any]:
    """
    Merge what is on disk with DEFAULT_STORE so every section exists.
    Disk values win for existing keys; defaults fill the gaps.
    """
    merged: Dict[str, Any] = {}

    disk_version = store.get("schema_version")
    if isinstance(disk_version, int):
        merged["schema_version"] = disk_version
    else:
        merged["schema_version"] = DEFAULT_STORE["schema_version"]

    for section_name in SECTIONS:
        default_section = DEFAULT_STORE.get(section_name, {})
        disk_section = store.get(section_name) or {}

        if not isinstance(disk_section, dict):
            disk_section = {}

        merged[section_name] = {**json.loads(json.dumps(default_section)), **disk_section}

    return merged


def load_store(path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load the store from disk. A missing or unreadable file yields the defaults.
    """
    path = Path(path or STORE_PATH)
    if not path.exists():
        return _ensure_sections({})

    try:
        with path.open("r", encoding="utf-8") as f:
            raw = json.load(f)
        if not isinstance(raw, dict):
            raise ValueError(f"{path.name} is not a JSON object")
    except (OSError, ValueError) as exc:
        logger.warning("Ignoring unreadable store %s: %s", path, exc)
        raw = {}

    return _ensure_sections(raw)


def save_store(store: Dict[str, Any], path: Optional[Path] = None) -> None:
    path = Path(path or STORE_PATH)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(store, f, indent=2, ensure_ascii=False)


def get_section(section: str, path: Optional[Path] = None) -> Dict[str, Any]:
    return load_store(path).get(section) or {}


def update_section(section: str, values: Dict[str, Any], path: Optional[Path] = None) -> Dict[str, Any]:
    """Merge ``values`` into one section, write to disk, and return the section."""
    store = load_store(path)
    store.setdefault(section, {}).update(values)
    save_store(store, path)
    return store[section]


# ---------------------------------------------------------------------------
# Rest timer
# ---------------------------------------------------------------------------


def load_rest_timer(student_id: int, path: Optional[Path] = None) -> Dict[str, Any]:
    timers = get_section("workout", path).get("rest_timers")
    timer = timers.get(str(student_id)) if isinstance(timers, dict) else None
    return timer if isinstance(timer, dict) else {}


def save_rest_timer(student_id: int, timer: Dict[str, Any], path: Optional[Path] = None) -> None:
    timers = get_section("workout", path).get("rest_timers")
    timers = dict(timers) if isinstance(timers, dict) else {}
    timers[str(student_id)] = timer
    update_section("workout", {"rest_timers": timers}, path)
