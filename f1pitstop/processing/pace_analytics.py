"""
Session pace analytics: lap and sector times per driver.

Laps from ``/laps`` are flattened into one DataFrame (one row per driver and
lap) and every statistic is computed from it. Outputs are plain dicts and
lists of Python floats (None for gaps) so they can go straight to Plotly
or JSON.
"""
import math
from typing import Any, Optional

import numpy as np
import pandas as pd

from f1pitstop.processing.constants import color_for_driver


SECTORS = (1, 2, 3)

# Field names differ between OpenF1 payload versions; first present wins.
SECTOR_FIELDS: dict[int, tuple[str, ...]] = {
    s: (f"duration_sector_{s}", f"lap_duration_sector_{s}", f"sector{s}_time") for s in SECTORS
}

LAP_COLUMNS = ["driver_number", "lap_number", "lap_duration", "s1", "s2", "s3"]

AVERAGE_LABEL = "Average (selected)"
DEFAULT_SELECTION_SIZE = 5


def parse_number(value: Any) -> Optional[float]:
    """Finite float, or None for missing/non-numeric values."""
    if value is None or isinstance(value, bool):
        return None
    try:
        n = float(value)
    except (TypeError, ValueError):
        return None
    return n if math.isfinite(n) else None


def _first_present(record: dict, fields: tuple[str, ...]) -> Any:
    for f in fields:
        if record.get(f) is not None:
            return record[f]
    return None


def _py(value: Any) -> Optional[float]:
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return None
    if isinstance(value, (np.floating, np.integer)):
        value = value.item()
        if isinstance(value, float) and math.isnan(value):
            return None
    return value


def laps_frame(laps: Any) -> pd.DataFrame:
    """
    Flatten lap records into a typed DataFrame.

    Rows without a numeric driver number are dropped. Rows keep API order
    within a driver after a stable sort by lap number.
    """
    rows = []
    for lap in laps if isinstance(laps, (list, tuple)) else []:
        num = parse_number(lap.get("driver_number"))
        if num is None:
            continue
        row = {
            "driver_number": int(num),
            "lap_number": parse_number(lap.get("lap_number")),
            "lap_duration": parse_number(lap.get("lap_duration")),
        }
        for s in SECTORS:
            row[f"s{s}"] = parse_number(_first_present(lap, SECTOR_FIELDS[s]))
        rows.append(row)

    df = pd.DataFrame(rows, columns=LAP_COLUMNS)
    if df.empty:
        return df
    df[["lap_number", "lap_duration", "s1", "s2", "s3"]] = df[
        ["lap_number", "lap_duration", "s1", "s2", "s3"]
    ].astype(float)
    df["_order"] = df["lap_number"].fillna(0)
    df = df.sort_values(["driver_number", "_order"], kind="stable").drop(columns="_order")
    return df.reset_index(drop=True)


def laps_by_driver(laps: Any) -> dict[int, list[dict]]:
    """Lap records grouped by driver number, each sorted by lap number."""
    grouped: dict[int, list[dict]] = {}
    for lap in laps if isinstance(laps, (list, tuple)) else []:
        num = parse_number(lap.get("driver_number"))
        if num is None:
            continue
        grouped.setdefault(int(num), []).append(lap)
    for rows in grouped.values():
        rows.sort(key=lambda r: parse_number(r.get("lap_number")) or 0)
    return grouped


def lap_labels(df: pd.DataFrame) -> list[int]:
    """Sorted unique lap numbers across all drivers."""
    if df.empty:
        return []
    return sorted(int(n) for n in df["lap_number"].dropna().unique())


def drivers_map(drivers: Any) -> dict[int, str]:
    """Driver number -> display name, ordered by driver number."""
    names: dict[int, str] = {}
    for d in drivers if isinstance(drivers, (list, tuple)) else []:
        num = parse_number(d.get("driver_number"))
        if num is None:
            continue
        num = int(num)
        names[num] = d.get("broadcast_name") or d.get("driver_name") or d.get("full_name") or f"#{num}"
    return dict(sorted(names.items()))


def default_selection(names: dict[int, str], size: int = DEFAULT_SELECTION_SIZE) -> list[int]:
    """The first ``size`` drivers by car number."""
    return sorted(names)[:size]


def _label(names: dict[int, str], num: int) -> str:
    return names.get(num) or f"#{num}"


def _best(df: pd.DataFrame, column: str) -> Optional[dict]:
    valid = df.dropna(subset=[column])
    if valid.empty:
        return None
    row = valid.loc[valid[column].idxmin()]
    return {"lap_number": _lap_number(row["lap_number"]), "duration": float(row[column])}


def _lap_number(value: Any) -> Optional[int]:
    value = _py(value)
    return int(value) if value is not None else None


def fastest_lap_by_driver(df: pd.DataFrame) -> dict[int, Optional[dict]]:
    """Per driver: ``{"lap_number", "duration"}`` of the quickest lap, or None."""
    if df.empty:
        return {}
    return {int(num): _best(group, "lap_duration") for num, group in df.groupby("driver_number", sort=True)}


def fastest_sector_by_driver(df: pd.DataFrame) -> dict[int, dict[str, Optional[dict]]]:
    """Per driver: quickest lap for each of s1, s2 and s3."""
    if df.empty:
        return {}
    return {
        int(num): {f"s{s}": _best(group, f"s{s}") for s in SECTORS}
        for num, group in df.groupby("driver_number", sort=True)
    }


def per_driver_sector_stats(df: pd.DataFrame, selected: list[int]) -> dict[int, dict]:
    """
    Sector summary for the selected drivers.

    Returns:
        ``{num: {avgS1..avgS3 (3 dp), lowestS1..lowestS3, fastestLap}}``;
        values are None when the driver has no valid time for a sector.
    """
    fastest = fastest_lap_by_driver(df)
    stats: dict[int, dict] = {}
    for num in selected:
        rows = df[df["driver_number"] == num] if not df.empty else df
        entry: dict[str, Any] = {}
        for s in SECTORS:
            values = rows[f"s{s}"].dropna() if not rows.empty else pd.Series(dtype=float)
            entry[f"avgS{s}"] = round(float(values.mean()), 3) if len(values) else None
            entry[f"lowestS{s}"] = float(values.min()) if len(values) else None
        best = fastest.get(num)
        entry["fastestLap"] = dict(best) if best else None
        stats[num] = entry
    return stats


def _aligned(df: pd.DataFrame, num: int, column: str, labels: list[int]) -> list[Optional[float]]:
    """Values of ``column`` for one driver, one slot per lap label."""
    if df.empty:
        return [None] * len(labels)
    rows = df[df["driver_number"] == num].dropna(subset=["lap_number"])
    # First record per lap wins when the API repeats a lap
    per_lap = rows.drop_duplicates(subset="lap_number", keep="first").set_index("lap_number")[column]
    return [_py(per_lap.get(float(lap))) for lap in labels]


def _marker_indices(labels: list[int], best: Optional[dict]) -> list[int]:
    if not best or best.get("lap_number") is None:
        return []
    return [i for i, lap in enumerate(labels) if lap == best["lap_number"]]


def sector_series(
    df: pd.DataFrame,
    sector: int,
    selected: list[int],
    names: dict[int, str] | None = None,
) -> dict[str, Any]:
    """
    Per-lap times for one sector plus the average across selected drivers.

    Returns:
        ``{"labels": [...], "series": [{driver_number, label, color, values,
        markers}], "average": {label, values}}``; ``series`` is empty when
        nothing is selected.
    """
    if sector not in SECTORS:
        raise ValueError(f"Unknown sector {sector!r}. Choose from {SECTORS}.")
    names = names or {}
    labels = lap_labels(df)
    if not selected:
        return {"labels": labels, "series": [], "average": None}

    column = f"s{sector}"
    fastest = fastest_sector_by_driver(df)
    series = []
    for num in selected:
        series.append({
            "driver_number": num,
            "label": _label(names, num),
            "color": color_for_driver(num),
            "values": _aligned(df, num, column, labels),
            "markers": _marker_indices(labels, fastest.get(num, {}).get(column)),
        })

    average = []
    for i in range(len(labels)):
        values = [s["values"][i] for s in series if s["values"][i] is not None]
        average.append(round(sum(values) / len(values), 3) if values else None)

    return {"labels": labels, "series": series, "average": {"label": AVERAGE_LABEL, "values": average}}


def pace_series(df: pd.DataFrame, selected: list[int], names: dict[int, str] | None = None) -> dict[str, Any]:
    """Lap duration per lap for each selected driver, with fastest-lap markers."""
    names = names or {}
    labels = lap_labels(df)
    fastest = fastest_lap_by_driver(df)
    series = [
        {
            "driver_number": num,
            "label": _label(names, num),
            "color": color_for_driver(num),
            "values": _aligned(df, num, "lap_duration", labels),
            "markers": _marker_indices(labels, fastest.get(num)),
        }
        for num in selected
    ]
    return {"labels": labels, "series": series}


def delta_series(df: pd.DataFrame, selected: list[int], names: dict[int, str] | None = None) -> Optional[dict]:
    """
    Lap-by-lap gap between exactly two drivers (A minus B, seconds).

    Positive values mean A was slower. Returns None unless two drivers
    are selected.
    """
    if len(selected) != 2:
        return None
    names = names or {}
    a, b = selected
    labels = lap_labels(df)

    def _last_per_lap(num: int) -> dict[float, Optional[float]]:
        rows = df[df["driver_number"] == num] if not df.empty else df
        return {lap: _py(dur) for lap, dur in zip(rows.get("lap_number", []), rows.get("lap_duration", []))}

    map_a, map_b = _last_per_lap(a), _last_per_lap(b)
    values = []
    for lap in labels:
        va, vb = map_a.get(float(lap)), map_b.get(float(lap))
        values.append(round(va - vb, 3) if va is not None and vb is not None else None)

    return {
        "labels": labels,
        "label": f"{_label(names, a)} − {_label(names, b)} (Δs)",
        "values": values,
    }


def session_pace_summary(laps: Any, drivers: Any, selected: list[int] | None = None) -> dict[str, Any]:
    """Everything the pace analytics panel shows, in one bundle."""
    df = laps_frame(laps)
    names = drivers_map(drivers)
    chosen = list(selected) if selected else default_selection(names)
    return {
        "drivers": names,
        "selected": chosen,
        "stats": per_driver_sector_stats(df, chosen),
        "sectors": {f"s{s}": sector_series(df, s, chosen, names) for s in SECTORS},
        "pace": pace_series(df, chosen, names),
        "delta": delta_series(df, chosen, names),
    }
