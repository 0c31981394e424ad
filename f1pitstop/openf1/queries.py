"""
Cached OpenF1 queries used by the dashboard and the JSON API.

Every method binds one fetcher to a query key and cache lifetimes and
returns a QueryResult, so views can tell "no data" apart from "failed"
and "not requested yet".
"""
from typing import Any, Optional

from f1pitstop.config import MINUTE, cfg
from f1pitstop.openf1 import fetchers
from f1pitstop.openf1.api_client import OpenF1Client
from f1pitstop.openf1.query_client import QueryClient, QueryResult
from f1pitstop.storage.local_storage import LocalStorageManager


FIVE_MINUTES = 5 * MINUTE
TEN_MINUTES = 10 * MINUTE
THIRTY_MINUTES = 30 * MINUTE

DRIVERS_FALLBACK_KEY = "drivers"


class Queries:
    """OpenF1 resources behind a shared QueryClient."""

    def __init__(
        self,
        client: OpenF1Client | None = None,
        query_client: QueryClient | None = None,
        storage: LocalStorageManager | None = None,
    ) -> None:
        self.client = client or OpenF1Client()
        self.query_client = query_client or QueryClient(
            storage=LocalStorageManager(cfg.cache.query_namespace)
        )
        self.storage = storage or LocalStorageManager(cfg.storage.namespace)

    # --- Events & meetings --------------------------------------------------

    def events(self, year: Optional[str | int] = None, country_name: Optional[str] = None) -> QueryResult:
        year = cfg.app.default_year if year is None else year
        return self.query_client.query(
            ("events", str(year), country_name),
            lambda: fetchers.fetch_events(self.client, year, country_name),
        )

    def session_drivers(
        self,
        meeting_key: Optional[int],
        session_key: Optional[int | str] = None,
        enabled: Optional[bool] = None,
    ) -> QueryResult:
        return self.query_client.query(
            ("latestSessionDrivers", meeting_key, session_key),
            lambda: fetchers.fetch_session_drivers(self.client, meeting_key, session_key),
            enabled=bool(meeting_key) if enabled is None else enabled,
        )

    def positions(
        self,
        meeting_key: Optional[int],
        driver_number: Optional[int] = None,
        position: Optional[int] = None,
        enabled: Optional[bool] = None,
    ) -> QueryResult:
        return self.query_client.query(
            ("positions", meeting_key, driver_number, position),
            lambda: fetchers.fetch_positions(self.client, meeting_key, driver_number, position),
            enabled=bool(meeting_key) if enabled is None else enabled,
        )

    def stints(self, session_key: Optional[int | str], enabled: Optional[bool] = None) -> QueryResult:
        return self.query_client.query(
            ("stints", session_key),
            lambda: fetchers.fetch_stints(self.client, session_key),
            enabled=bool(session_key) if enabled is None else enabled,
        )

    def event_summary(self, session_key: Optional[int | str]) -> QueryResult:
        return self.query_client.query(
            ("eventSummary", session_key),
            lambda: fetchers.fetch_event_summary(self.client, session_key),
            stale_time=TEN_MINUTES,
            retry=2,
            enabled=bool(session_key),
        )

    # --- Results & drivers --------------------------------------------------

    def race_results(self, session_key: int | str = "latest", positions: Optional[int] = None) -> QueryResult:
        positions = positions or cfg.app.results_positions
        return self.query_client.query(
            ("raceResults", session_key, positions),
            lambda: fetchers.fetch_race_results(self.client, session_key, positions),
            stale_time=FIVE_MINUTES,
            retry=1,
            enabled=bool(session_key and positions),
        )

    def drivers(self, driver_number: Optional[int | str] = "all", session_key: Optional[int | str] = "latest") -> QueryResult:
        """Driver metadata; a non-empty answer also refreshes the stored fallback list."""

        def _fetch() -> list[dict]:
            data = fetchers.fetch_drivers(self.client, driver_number, session_key)
            if data:
                self.storage.set(DRIVERS_FALLBACK_KEY, data)
            return data

        return self.query_client.query(
            ("drivers", driver_number, session_key),
            _fetch,
            stale_time=FIVE_MINUTES,
            retry=1,
            enabled=bool(session_key),
        )

    def cached_drivers(self) -> list[dict]:
        """Last non-empty driver list fetched by ``drivers``, or []."""
        return self.storage.get(DRIVERS_FALLBACK_KEY) or []

    # --- Per-driver session data -------------------------------------------

    def driver_laps(self, session_key: Optional[int | str], driver_number: Optional[int | str]) -> QueryResult:
        return self.query_client.query(
            ("driverLaps", session_key, driver_number),
            lambda: fetchers.fetch_driver_laps(self.client, session_key, driver_number),
            stale_time=FIVE_MINUTES,
            enabled=bool(session_key and driver_number),
        )

    def driver_stints(self, session_key: Optional[int | str], driver_number: Optional[int | str]) -> QueryResult:
        return self.query_client.query(
            ("driver-stints", session_key, driver_number),
            lambda: fetchers.fetch_driver_stints(self.client, session_key, driver_number),
            stale_time=FIVE_MINUTES,
            enabled=bool(session_key and driver_number),
        )

    def session_laps(self, session_key: Optional[int | str]) -> QueryResult:
        return self.query_client.query(
            ("sessionLaps", session_key),
            lambda: fetchers.fetch_session_laps(self.client, session_key),
            stale_time=FIVE_MINUTES,
            enabled=bool(session_key),
        )

    def telemetry(self, session_key: Optional[int | str], driver_number: Optional[int | str]) -> QueryResult:
        return self.query_client.query(
            ("telemetry", session_key, driver_number),
            lambda: fetchers.fetch_telemetry(self.client, session_key, driver_number),
            stale_time=FIVE_MINUTES,
            gc_time=THIRTY_MINUTES,
            retry=2,
            enabled=bool(session_key and driver_number),
        )

    def position_trend(self, session_key: Optional[int | str], driver_number: Optional[int | str]) -> QueryResult:
        return self.query_client.query(
            ("positionTrend", session_key, driver_number),
            lambda: fetchers.fetch_position_trend(self.client, session_key, driver_number),
            stale_time=FIVE_MINUTES,
            retry=2,
            enabled=bool(session_key and driver_number),
        )

    def pit_stops(self, session_key: Optional[int | str], driver_number: Optional[int | str]) -> QueryResult:
        return self.query_client.query(
            ("pitStops", session_key, driver_number),
            lambda: fetchers.fetch_pit_stops(self.client, session_key, driver_number),
            stale_time=TEN_MINUTES,
            retry=2,
            enabled=bool(session_key and driver_number),
        )

    def race_control(self, session_key: Optional[int | str], driver_number: Optional[int | str]) -> QueryResult:
        return self.query_client.query(
            ("raceControl", session_key, driver_number),
            lambda: fetchers.fetch_race_control(self.client, session_key, driver_number),
            stale_time=TEN_MINUTES,
            retry=2,
            enabled=bool(session_key and driver_number),
        )

    def driver_comparison(
        self,
        session_key: Optional[int | str],
        driver_a: Optional[int | str],
        driver_b: Optional[int | str],
    ) -> dict[str, QueryResult]:
        """Driver, lap and stint queries for two drivers side by side."""
        return {
            "driver_a": self.drivers(driver_a, session_key),
            "driver_b": self.drivers(driver_b, session_key),
            "laps_a": self.driver_laps(session_key, driver_a),
            "laps_b": self.driver_laps(session_key, driver_b),
            "stints_a": self.driver_stints(session_key, driver_a),
            "stints_b": self.driver_stints(session_key, driver_b),
        }

    def driver_profile(self, driver_number: int | str, session_key: int | str = "latest") -> dict[str, Any]:
        """Everything the driver profile page shows, keyed by section."""
        return {
            "drivers": self.drivers(None, session_key),
            "laps": self.driver_laps(session_key, driver_number),
            "stints": self.driver_stints(session_key, driver_number),
            "event": self.event_summary(session_key),
            "telemetry": self.telemetry(session_key, driver_number),
            "positions": self.position_trend(session_key, driver_number),
            "pit_stops": self.pit_stops(session_key, driver_number),
            "race_control": self.race_control(session_key, driver_number),
        }
