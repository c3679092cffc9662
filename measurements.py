from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

import pandas as pd

from coach_api.schemas import Anthropometry, WeightLog
from date_utils import parse_local_date

CompareSlots = Tuple[Optional[int], Optional[int]]

# field -> (section, label, unit, inverse); inverse means lower is better
MEASUREMENT_FIELDS: Dict[str, Dict[str, Any]] = {
    "weight": {"section": "basic", "label": "Peso", "unit": "kg", "inverse": True},
    "height_cm": {"section": "basic", "label": "Altura", "unit": "cm", "inverse": False},
    "pliegue_triceps": {"section": "pliegues", "label": "Tríceps", "unit": "mm", "inverse": True},
    "pliegue_subescapular": {"section": "pliegues", "label": "Subescapular", "unit": "mm", "inverse": True},
    "pliegue_supraespinal": {"section": "pliegues", "label": "Supraespinal", "unit": "mm", "inverse": True},
    "pliegue_abdominal": {"section": "pliegues", "label": "Abdominal", "unit": "mm", "inverse": True},
    "pliegue_muslo_medial": {"section": "pliegues", "label": "Muslo medial", "unit": "mm", "inverse": True},
    "pliegue_pantorrilla": {"section": "pliegues", "label": "Pantorrilla", "unit": "mm", "inverse": True},
    "suma_pliegues": {"section": "pliegues", "label": "Σ Pliegues", "unit": "mm", "inverse": True},
    "perimetro_brazo_relajado": {"section": "perimetros", "label": "Brazo relajado", "unit": "cm", "inverse": False},
    "perimetro_brazo_contraido": {"section": "perimetros", "label": "Brazo contraído", "unit": "cm", "inverse": False},
    "perimetro_antebrazo": {"section": "perimetros", "label": "Antebrazo", "unit": "cm", "inverse": False},
    "perimetro_torax": {"section": "perimetros", "label": "Tórax", "unit": "cm", "inverse": False},
    "perimetro_cintura": {"section": "perimetros", "label": "Cintura", "unit": "cm", "inverse": True},
    "perimetro_caderas": {"section": "perimetros", "label": "Caderas", "unit": "cm", "inverse": False},
    "perimetro_muslo_superior": {"section": "perimetros", "label": "Muslo superior", "unit": "cm", "inverse": False},
    "perimetro_muslo_medial": {"section": "perimetros", "label": "Muslo medial", "unit": "cm", "inverse": False},
    "perimetro_pantorrilla": {"section": "perimetros", "label": "Pantorrilla", "unit": "cm", "inverse": False},
    "tejido_muscular_kg": {"section": "composicion", "label": "Tejido Muscular", "unit": "kg", "inverse": False},
    "tejido_muscular_pct": {"section": "composicion", "label": "Tejido Muscular", "unit": "%", "inverse": False},
    "tejido_adiposo_kg": {"section": "composicion", "label": "Tejido Adiposo", "unit": "kg", "inverse": True},
    "tejido_adiposo_pct": {"section": "composicion", "label": "Tejido Adiposo", "unit": "%", "inverse": True},
    "porcentaje_grasa": {"section": "composicion", "label": "% Grasa", "unit": "%", "inverse": True},
    "porcentaje_muscular": {"section": "composicion", "label": "% Muscular", "unit": "%", "inverse": False},
    "masa_grasa_kg": {"section": "composicion", "label": "Masa grasa", "unit": "kg", "inverse": True},
    "masa_magra_kg": {"section": "composicion", "label": "Masa magra", "unit": "kg", "inverse": False},
    "indice_muscular_oseo": {"section": "composicion", "label": "Índice músculo/óseo", "unit": "", "inverse": False},
}

# rows of the side-by-side comparison table
COMPARISON_ROWS = ["weight", "tejido_adiposo_pct", "suma_pliegues", "tejido_muscular_kg"]

PHOTO_FIELDS = [("photo_front", "Frente"), ("photo_side", "Lateral"), ("photo_back", "Espalda")]


def get_change(current: Optional[float], previous: Optional[float]) -> Optional[float]:
    if current is None or previous is None:
        return None
    return current - previous


def trend(diff: Optional[float], inverse: bool = False) -> str:
    if diff is None or diff == 0:
        return "flat"
    improved = diff < 0 if inverse else diff > 0
    direction = "up" if diff > 0 else "down"
    return f"{direction}-{'good' if improved else 'bad'}"


def fields_in(section: str) -> List[str]:
    return [name for name, meta in MEASUREMENT_FIELDS.items() if meta["section"] == section]


def history_deltas(records: Sequence[Anthropometry], fields: Optional[Iterable[str]] = None) -> pd.DataFrame:
    """
    One row per record (newest first) with each field's value and its change
    against the next older record. Missing values give NaN deltas.
    """
    fields = list(fields or MEASUREMENT_FIELDS)
    if not records:
        return pd.DataFrame(columns=["id", "date"] + fields + [f"{f}_change" for f in fields])

    df = pd.DataFrame([{"id": r.id, "date": r.date, **{f: getattr(r, f) for f in fields}} for r in records])
    for field in fields:
        values = pd.to_numeric(df[field], errors="coerce")
        df[field] = values
        df[f"{field}_change"] = values - values.shift(-1)
    return df


def toggle_compare(selection: CompareSlots, record_id: int) -> CompareSlots:
    """Two-slot selection: clicking a selected record frees its slot, otherwise it fills one."""
    first, second = selection
    if first == record_id:
        return second, None
    if second == record_id:
        return first, None
    if first is None:
        return record_id, second
    return first, record_id


def ordered_comparison(
    history: Sequence[Anthropometry], selection: CompareSlots
) -> Tuple[Optional[Anthropometry], Optional[Anthropometry]]:
    """The selected pair, oldest first once both are picked."""
    by_id = {r.id: r for r in history}
    first = by_id.get(selection[0]) if selection[0] is not None else None
    second = by_id.get(selection[1]) if selection[1] is not None else None
    if first is None or second is None:
        return first, second
    if parse_local_date(first.date) <= parse_local_date(second.date):
        return first, second
    return second, first


def comparison_table(before: Anthropometry, after: Anthropometry) -> List[Dict[str, Any]]:
    rows = []
    for field in COMPARISON_ROWS:
        meta = MEASUREMENT_FIELDS[field]
        value_before, value_after = getattr(before, field), getattr(after, field)
        diff = get_change(value_after, value_before)
        rows.append(
            {
                "field": field,
                "label": meta["label"],
                "unit": meta["unit"],
                "before": value_before,
                "after": value_after,
                "change": diff,
                "trend": trend(diff, meta["inverse"]),
            }
        )
    return rows


def photos_for(record: Anthropometry) -> List[Dict[str, Any]]:
    return [
        {"type": label, "url": getattr(record, field), "item_id": record.id}
        for field, label in PHOTO_FIELDS
        if getattr(record, field)
    ]


def photos_by_date(history: Iterable[Anthropometry]) -> List[Dict[str, Any]]:
    groups = []
    for record in history:
        photos = photos_for(record)
        if photos:
            groups.append({"date": record.date, "photos": photos})
    return groups


def weight_series(weight_logs: Iterable[WeightLog]) -> pd.Series:
    """Weight indexed by day, oldest first; the last log of a day wins."""
    rows = [(parse_local_date(w.date), w.weight) for w in weight_logs]
    rows = [(d, w) for d, w in rows if d is not None]
    if not rows:
        return pd.Series(dtype="float64", name="weight")
    df = pd.DataFrame(rows, columns=["date", "weight"])
    df["date"] = pd.to_datetime(df["date"])
    series = df.groupby("date")["weight"].last().sort_index()
    series.name = "weight"
    return series
