"""
Endpoint-specific fetchers for the OpenF1 API.

Each fetcher returns the raw record dicts for one resource. "Safe" fetchers
log failures and return an empty list so a dashboard section can degrade
on its own; the rest let OpenF1Error propagate to the query layer.
"""
from typing import Any, Optional

import requests

from f1pitstop.openf1.api_client import OpenF1Client, OpenF1Error
from f1pitstop.utils.logger import logger


def _safe_get(
    client: OpenF1Client,
    endpoint: str,
    params: dict[str, Any],
    max_items: int = 1000,
) -> list[dict]:
    """Fetch and slice locally instead of passing a limit to the API."""
    try:
        data = client.get(endpoint, params=params)
    except (OpenF1Error, requests.exceptions.RequestException) as e:
        logger.warning(f"Fetch error for {endpoint} {params}: {e}")
        return []
    return data[:max_items]


def fetch_events(
    client: OpenF1Client,
    year: Optional[str | int] = "2025",
    country_name: Optional[str] = None,
) -> list[dict]:
    """
    Fetch meetings (events) for a season.

    Args:
        client: OpenF1Client instance.
        year: Season year; None fetches every season.
        country_name: Optional country filter.

    Returns:
        List of meeting dicts.
    """
    logger.info(f"Fetching events for {year} (country={country_name})...")
    return client.get("/meetings", params={"year": year or None, "country_name": country_name or None})


def fetch_session_drivers(
    client: OpenF1Client,
    meeting_key: Optional[int] = None,
    session_key: Optional[int | str] = None,
) -> list[dict]:
    """Fetch driver entries for a meeting and/or a single session."""
    logger.debug(f"Fetching drivers for meeting {meeting_key} session {session_key}...")
    return client.get(
        "/drivers",
        params={"meeting_key": meeting_key or None, "session_key": session_key or None},
    )


def fetch_positions(
    client: OpenF1Client,
    meeting_key: Optional[int] = None,
    driver_number: Optional[int] = None,
    position: Optional[int] = None,
) -> list[dict]:
    """Fetch position records for a meeting, optionally for one driver or place."""
    logger.debug(f"Fetching positions for meeting {meeting_key}...")
    return client.get(
        "/position",
        params={
            "meeting_key": meeting_key or None,
            "driver_number": driver_number or None,
            "position": position or None,
        },
    )


def fetch_stints(client: OpenF1Client, session_key: Optional[int | str]) -> list[dict]:
    """Fetch every driver's stints for a session."""
    logger.debug(f"Fetching stints for session {session_key}...")
    return client.get("/stints", params={"session_key": session_key or None})


def fetch_race_results(
    client: OpenF1Client,
    session_key: int | str = "latest",
    positions: int = 20,
) -> list[dict]:
    """
    Fetch classified results for a session, limited to the top ``positions``.

    Raises:
        OpenF1Error: If the API answers with a non-OK status.
    """
    logger.debug(f"Fetching results for session {session_key} (top {positions})...")
    return client.get(
        "/session_result",
        params={"session_key": session_key, "position<": positions},
    )


def fetch_drivers(
    client: OpenF1Client,
    driver_number: Optional[int | str] = "all",
    session_key: Optional[int | str] = "latest",
) -> list[dict]:
    """
    Fetch driver metadata. Never raises: failures are logged and yield [].

    ``session_key="latest"`` and ``driver_number="all"`` are left out of the
    request, so the API falls back to its own defaults.
    """
    params: dict[str, Any] = {}
    if session_key and session_key != "latest":
        params["session_key"] = session_key
    if driver_number and driver_number != "all":
        params["driver_number"] = driver_number
    try:
        return client.get("/drivers", params=params)
    except (OpenF1Error, requests.exceptions.RequestException) as e:
        logger.error(f"fetch_drivers error: {e}")
        return []


def fetch_driver_laps(
    client: OpenF1Client,
    session_key: Optional[int | str],
    driver_number: Optional[int | str],
) -> list[dict]:
    """Fetch one driver's laps. Returns [] when either key is missing."""
    if not session_key or not driver_number:
        return []
    return client.get("/laps", params={"session_key": session_key, "driver_number": driver_number})


def fetch_driver_stints(
    client: OpenF1Client,
    session_key: Optional[int | str],
    driver_number: Optional[int | str],
) -> list[dict]:
    """Fetch one driver's stints. Returns [] when either key is missing."""
    if not session_key or not driver_number:
        return []
    return client.get("/stints", params={"session_key": session_key, "driver_number": driver_number})


def fetch_session_laps(client: OpenF1Client, session_key: Optional[int | str]) -> list[dict]:
    """Fetch every driver's laps for a session."""
    if not session_key:
        return []
    logger.debug(f"Fetching laps for session {session_key}...")
    return client.get("/laps", params={"session_key": session_key})


def fetch_event_summary(client: OpenF1Client, session_key: int | str) -> dict:
    """Fetch the meeting a session belongs to, or {} if unavailable."""
    data = _safe_get(client, "/meetings", {"session_key": session_key}, max_items=1)
    return data[0] if data else {}


def fetch_telemetry(client: OpenF1Client, session_key: int | str, driver_number: int | str) -> list[dict]:
    """Car data samples (speed, rpm, gear...). Heavy, so capped at 2000 rows."""
    return _safe_get(
        client, "/car_data", {"session_key": session_key, "driver_number": driver_number}, max_items=2000
    )


def fetch_position_trend(client: OpenF1Client, session_key: int | str, driver_number: int | str) -> list[dict]:
    return _safe_get(
        client, "/position", {"session_key": session_key, "driver_number": driver_number}, max_items=1000
    )


def fetch_pit_stops(client: OpenF1Client, session_key: int | str, driver_number: int | str) -> list[dict]:
    return _safe_get(
        client, "/pit", {"session_key": session_key, "driver_number": driver_number}, max_items=300
    )


def fetch_race_control(client: OpenF1Client, session_key: int | str, driver_number: int | str) -> list[dict]:
    return _safe_get(
        client, "/race_control", {"session_key": session_key, "driver_number": driver_number}, max_items=500
    )
