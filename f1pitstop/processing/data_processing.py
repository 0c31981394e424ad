"""
Reshaping helpers for OpenF1 records.

All functions take plain record lists as returned by the API, never mutate
them, and return [] / {} / None for missing input rather than raising.
"""
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

from f1pitstop.utils.time_utils import parse_openf1_timestamp


_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _as_list(records: Any) -> list:
    return list(records) if isinstance(records, (list, tuple)) else []


def _ts(value: Any) -> datetime:
    """Sort key for a date field; missing or invalid dates sort as oldest."""
    return parse_openf1_timestamp(value) or _EPOCH


def _number_key(value: Any) -> Any:
    """Normalise driver/session numbers so 44 and '44' compare equal."""
    try:
        return int(value)
    except (TypeError, ValueError):
        return value


def _sort_position(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return float("inf")


# --- Events ------------------------------------------------------------------

def sort_events_by_date(events: Any) -> list[dict]:
    """Sort events newest first by ``date_start``."""
    return sorted(_as_list(events), key=lambda e: _ts(e.get("date_start")), reverse=True)


def get_latest_event(events: Any) -> Optional[dict]:
    ordered = sort_events_by_date(events)
    return ordered[0] if ordered else None


def get_older_events(events: Any) -> list[dict]:
    return sort_events_by_date(events)[1:]


def find_event(events: Any, meeting_key: Any) -> Optional[dict]:
    target = _number_key(meeting_key)
    for event in _as_list(events):
        if _number_key(event.get("meeting_key")) == target:
            return event
    return None


# --- Positions ----------------------------------------------------------------

def _latest_by(records: Iterable[dict], field: str) -> dict[Any, dict]:
    latest: dict[Any, dict] = {}
    for rec in records:
        key = _number_key(rec.get(field))
        current = latest.get(key)
        if current is None or _ts(rec.get("date")) > _ts(current.get("date")):
            latest[key] = rec
    return latest


def get_latest_session_from_positions(positions: Any, meeting_key: Any) -> Optional[dict]:
    """
    Latest position record of the most recent session in a meeting.

    Args:
        positions: Position records for one or more meetings.
        meeting_key: Meeting to look at.

    Returns:
        The newest record among each session's newest record, or None.
    """
    if not positions or meeting_key is None:
        return None
    target = _number_key(meeting_key)
    in_meeting = [p for p in _as_list(positions) if _number_key(p.get("meeting_key")) == target]
    per_session = _latest_by(in_meeting, "session_key").values()
    ordered = sorted(per_session, key=lambda p: _ts(p.get("date")), reverse=True)
    return ordered[0] if ordered else None


def get_latest_positions_for_drivers(positions: Any, session_key: Any) -> list[dict]:
    """Most recent position record per driver within a session."""
    if not positions or session_key is None:
        return []
    target = _number_key(session_key)
    in_session = [p for p in _as_list(positions) if _number_key(p.get("session_key")) == target]
    return list(_latest_by(in_session, "driver_number").values())


def merge_drivers_with_positions(drivers: Any, positions: Any) -> list[dict]:
    """
    Attach ``position`` to each driver from its position record.

    Drivers without a position are dropped; the rest are sorted by position.
    """
    if drivers is None or positions is None:
        return []
    by_number: dict[Any, dict] = {}
    for pos in _as_list(positions):
        by_number.setdefault(_number_key(pos.get("driver_number")), pos)

    merged = []
    for driver in _as_list(drivers):
        pos = by_number.get(_number_key(driver.get("driver_number")))
        if pos is None or pos.get("position") is None:
            continue
        merged.append({**driver, "position": pos["position"]})
    return sorted(merged, key=lambda d: _sort_position(d["position"]))


def driver_standings(positions: Any) -> list[dict]:
    """Latest position per driver, sorted by position."""
    latest = _latest_by(_as_list(positions), "driver_number").values()
    return sorted(latest, key=lambda p: _sort_position(p.get("position")))


# --- Sessions -----------------------------------------------------------------

def process_sessions_data(positions: Any) -> dict[Any, dict]:
    """
    Group position records into sessions with start and finish per driver.

    Returns:
        ``{session_key: {session_key, session_name, circuit_short_name, date,
        drivers: {driver_number: {...record, startingPosition, startingDate,
        finalPosition, finalDate}}}}``. The driver entry carries the fields
        of its newest record.
    """
    if not isinstance(positions, (list, tuple)):
        return {}

    sessions: dict[Any, dict] = {}
    for pos in positions:
        session_key = _number_key(pos.get("session_key"))
        session = sessions.setdefault(session_key, {
            "session_key": session_key,
            "session_name": pos.get("session_name"),
            "circuit_short_name": pos.get("circuit_short_name"),
            "date": pos.get("date"),
            "drivers": {},
        })

        driver_key = _number_key(pos.get("driver_number"))
        current = session["drivers"].get(driver_key)
        pos_date = _ts(pos.get("date"))

        if current is None:
            session["drivers"][driver_key] = {
                **pos,
                "finalPosition": pos.get("position"),
                "startingPosition": pos.get("position"),
                "finalDate": pos.get("date"),
                "startingDate": pos.get("date"),
            }
            continue

        if pos_date > _ts(current.get("finalDate") or current.get("date")):
            current = {
                **current,
                **pos,
                "finalPosition": pos.get("position"),
                "finalDate": pos.get("date"),
            }
        if pos_date < _ts(current.get("startingDate") or current.get("date")):
            current = {
                **current,
                "startingPosition": pos.get("position"),
                "startingDate": pos.get("date"),
            }
        session["drivers"][driver_key] = current

    return sessions


def sort_sessions(sessions_data: dict[Any, dict]) -> list[dict]:
    """Sessions newest first."""
    return sorted((sessions_data or {}).values(), key=lambda s: _ts(s.get("date")), reverse=True)


def session_driver_rows(session: dict) -> list[dict]:
    """Drivers of a processed session ordered by final position."""
    drivers = (session or {}).get("drivers") or {}

    def _key(d: dict) -> float:
        pos = d.get("finalPosition") or d.get("position")
        return _sort_position(pos) if pos else 999.0

    return sorted(drivers.values(), key=_key)


# --- Stints -------------------------------------------------------------------

def stints_by_driver(stints: Any) -> dict[Any, list[dict]]:
    """Group stints by driver number, each list sorted by ``lap_start``."""
    grouped: dict[Any, list[dict]] = {}
    for stint in _as_list(stints):
        grouped.setdefault(_number_key(stint.get("driver_number")), []).append(stint)
    return {
        num: sorted(rows, key=lambda s: _sort_position(s.get("lap_start")))
        for num, rows in grouped.items()
    }


def stint_lap_count(stint: dict) -> int:
    """Laps covered by a stint, inclusive; 0 when the bounds are unknown."""
    try:
        return max(0, int(stint["lap_end"]) - int(stint["lap_start"]) + 1)
    except (KeyError, TypeError, ValueError):
        return 0


def total_laps_from_stints(stints: Any, default: int = 0) -> int:
    ends = [s.get("lap_end") for s in _as_list(stints) if isinstance(s.get("lap_end"), (int, float))]
    return int(max(ends)) if ends else default


# --- Drivers & results ----------------------------------------------------------

def dedupe_by_driver_number(records: Any) -> list[dict]:
    """Keep the first record per driver number, preserving order."""
    seen: set = set()
    unique = []
    for rec in _as_list(records):
        key = _number_key(rec.get("driver_number"))
        if key in seen:
            continue
        seen.add(key)
        unique.append(rec)
    return unique


def session_driver_grid(drivers: Any) -> list[dict]:
    """Deduped drivers sorted by car number."""
    return sorted(dedupe_by_driver_number(drivers), key=lambda d: _sort_position(d.get("driver_number")))


def clean_race_results(results: Any) -> list[dict]:
    """Dedupe results by driver (first entry wins) and sort by position."""
    return sorted(dedupe_by_driver_number(results), key=lambda r: _sort_position(r.get("position")))


def podium_order(results: list[dict]) -> list[dict]:
    """Podium laid out for display: P2, P1, P3."""
    podium = (results or [])[:3]
    order = [podium[i] if i < len(podium) else None for i in (1, 0, 2)]
    return [r for r in order if r is not None]


def filter_drivers(drivers: Any, term: Optional[str]) -> list[dict]:
    """Case-insensitive search over full name, team and car number."""
    drivers = _as_list(drivers)
    term = (term or "").strip().lower()
    if not term:
        return drivers

    def _matches(d: dict) -> bool:
        fields = (d.get("full_name"), d.get("team_name"), d.get("driver_number"))
        return any(v is not None and term in str(v).lower() for v in fields)

    return [d for d in drivers if _matches(d)]


def find_driver(drivers: Any, driver_number: Any) -> dict:
    """Driver whose number matches (compared as strings), or {}."""
    target = str(driver_number)
    for d in _as_list(drivers):
        if str(d.get("driver_number")) == target:
            return d
    return {}


def enrich_results(results: list[dict], drivers: Any) -> list[dict]:
    """Attach driver metadata (name, team, colour, headshot) to result rows."""
    enriched = []
    for row in results:
        info = find_driver(drivers, row.get("driver_number"))
        enriched.append({
            **row,
            "full_name": info.get("full_name") or f"Driver #{row.get('driver_number')}",
            "team_name": info.get("team_name") or "Unknown Team",
            "team_colour": info.get("team_colour"),
            "headshot_url": info.get("headshot_url"),
        })
    return enriched
