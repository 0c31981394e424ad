"""
FastAPI backend for F1 PitStop.
Serves the same reshaped OpenF1 views as the Streamlit dashboard, as JSON.
"""
from functools import lru_cache
from typing import Optional

import numpy as np
import pandas as pd
from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware

from f1pitstop.config import cfg
from f1pitstop.openf1.queries import Queries
from f1pitstop.openf1.query_client import QueryResult
from f1pitstop.processing import data_processing as dp
from f1pitstop.processing import pace_analytics as pa
from f1pitstop.processing.constants import get_session_title
from f1pitstop.utils.logger import logger

app = FastAPI(title=f"{cfg.app.name} API", version=cfg.app.version, description=cfg.app.description)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://127.0.0.1:3000", "http://localhost:8501"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@lru_cache(maxsize=1)
def get_queries() -> Queries:
    return Queries()


def _clean(obj):
    """Recursively clean NaN/Inf/Timestamp for JSON serialization."""
    if isinstance(obj, dict):
        return {k: _clean(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_clean(v) for v in obj]
    if isinstance(obj, float) and (np.isnan(obj) or np.isinf(obj)):
        return None
    if isinstance(obj, (np.integer,)):
        return int(obj)
    if isinstance(obj, (np.floating,)):
        return _clean(float(obj))
    if isinstance(obj, pd.Timestamp):
        return obj.isoformat()
    return obj


def _data(result: QueryResult, what: str):
    """Unwrap a query result; upstream failures become 502."""
    if result.is_error:
        logger.warning(f"{what} failed: {result.error}")
        raise HTTPException(502, f"Upstream OpenF1 request failed: {what}")
    return result.data


def _parse_drivers(raw: Optional[str]) -> list[int]:
    if not raw:
        return []
    try:
        return [int(part) for part in raw.split(",") if part.strip()]
    except ValueError:
        raise HTTPException(422, "drivers must be a comma-separated list of car numbers")


# ── Events ───────────────────────────────────────────────────────────────────

@app.get("/api/events")
def list_events(
    year: Optional[str] = None,
    country_name: Optional[str] = None,
    queries: Queries = Depends(get_queries),
):
    """Latest event of the season plus the older ones, newest first."""
    events = _data(queries.events(year, country_name), "events")
    return _clean({
        "latest": dp.get_latest_event(events),
        "older": dp.get_older_events(events),
    })


@app.get("/api/events/{meeting_key}")
def event_details(meeting_key: int, year: Optional[str] = None, queries: Queries = Depends(get_queries)):
    """Event record, its sessions with titles and the latest session's tyre stints."""
    events = _data(queries.events(year), "events")
    positions = _data(queries.positions(meeting_key), "positions")

    sessions = dp.sort_sessions(dp.process_sessions_data(positions))
    total = len(sessions)
    titled = [
        {**s, "title": get_session_title(i, total), "drivers": dp.session_driver_rows(s)}
        for i, s in enumerate(sessions)
    ]

    latest_session_key = sessions[0]["session_key"] if sessions else None
    stints = _data(queries.stints(latest_session_key), "stints") if latest_session_key else []

    return _clean({
        "event": dp.find_event(events, meeting_key),
        "sessions": titled,
        "latest_session_key": latest_session_key,
        "stints": {str(k): v for k, v in dp.stints_by_driver(stints).items()},
    })


# ── Results & drivers ─────────────────────────────────────────────────────────

@app.get("/api/results")
def race_results(
    session_key: str = "latest",
    positions: int = Query(default=cfg.app.results_positions, ge=1, le=30),
    queries: Queries = Depends(get_queries),
):
    """Podium (P2, P1, P3) and remaining finishers, enriched with driver info."""
    results = dp.clean_race_results(_data(queries.race_results(session_key, positions), "race results"))
    drivers = queries.drivers()
    known = drivers.data if drivers.is_success and drivers.data else queries.cached_drivers()
    enriched = dp.enrich_results(results, known)
    return _clean({
        "podium": dp.podium_order(enriched),
        "rest": enriched[3:],
    })


@app.get("/api/drivers")
def list_drivers(search: Optional[str] = None, queries: Queries = Depends(get_queries)):
    drivers = _data(queries.drivers(), "drivers")
    return _clean(dp.filter_drivers(dp.dedupe_by_driver_number(drivers), search))


@app.get("/api/drivers/{driver_number}")
def driver_profile(driver_number: int, session_key: str = "latest", queries: Queries = Depends(get_queries)):
    """Driver record plus every per-session section of the profile page."""
    profile = queries.driver_profile(driver_number, session_key)
    driver = dp.find_driver(_data(profile.pop("drivers"), "drivers"), driver_number)
    if not driver:
        raise HTTPException(404, f"Driver {driver_number} not found")

    sections = {name: _data(result, name) for name, result in profile.items()}
    return _clean({"driver": driver, **sections})


# ── Sessions ─────────────────────────────────────────────────────────────────

@app.get("/api/sessions/{session_key}/pace")
def session_pace(
    session_key: int,
    drivers: Optional[str] = Query(default=None, description="Comma-separated car numbers, e.g. 1,44"),
    queries: Queries = Depends(get_queries),
):
    """Sector, pace and delta series for the selected drivers of a session."""
    selected = _parse_drivers(drivers)
    laps = _data(queries.session_laps(session_key), "session laps")
    entrants = _data(queries.drivers(None, session_key), "drivers")
    summary = pa.session_pace_summary(laps or [], entrants or [], selected)
    summary["drivers"] = {str(k): v for k, v in summary["drivers"].items()}
    summary["stats"] = {str(k): v for k, v in summary["stats"].items()}
    return _clean(summary)


@app.get("/api/health")
def health():
    return {"status": "ok", "version": cfg.app.version}
