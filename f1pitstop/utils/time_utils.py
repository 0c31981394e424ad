"""
Timezone-aware datetime helpers.
OpenF1 timestamps are ISO 8601 strings; everything is compared in UTC.
"""
from datetime import datetime, timezone
from typing import Any, Optional

import pandas as pd


def to_utc(dt: datetime) -> datetime:
    """Convert a datetime to UTC. If naive, assume it is already UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_openf1_timestamp(ts: Any) -> Optional[datetime]:
    """
    Parse an OpenF1 API timestamp to a UTC-aware datetime.

    OpenF1 returns strings like '2024-03-02T15:00:00.000000+00:00'.
    Datetime objects are passed through (normalised to UTC).

    Returns:
        UTC-aware datetime, or None if the value is missing or unparseable.
    """
    if ts is None or ts == "":
        return None
    if isinstance(ts, datetime):
        return to_utc(ts)
    parsed = pd.to_datetime(ts, utc=True, errors="coerce")
    if pd.isna(parsed):
        return None
    return parsed.to_pydatetime()


def format_date(value: Any, fmt: str = "%b %d, %Y") -> str:
    """
    Format an OpenF1 date for display, e.g. 'Mar 02, 2025'.

    Returns an empty string for missing or invalid values.
    """
    dt = parse_openf1_timestamp(value)
    if dt is None:
        return ""
    return dt.strftime(fmt)
