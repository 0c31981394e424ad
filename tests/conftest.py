"""
Pytest fixtures for F1 PitStop tests.
"""
import pytest

from f1pitstop.config import cfg
from f1pitstop.openf1.query_client import QueryClient, QueryOptions
from f1pitstop.storage.local_storage import LocalStorageManager


@pytest.fixture(autouse=True)
def no_rate_limit(monkeypatch):
    """Requests in tests never wait between calls."""
    monkeypatch.setattr(cfg.api, "rate_limit_delay", 0.0)


@pytest.fixture
def storage(tmp_path) -> LocalStorageManager:
    return LocalStorageManager("test", root=tmp_path, quota_bytes=1024 * 1024)


class FakeClock:
    """Manually advanced clock; sleeping advances it too."""

    def __init__(self, start: float = 1_000_000.0):
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def query_client(tmp_path, clock) -> QueryClient:
    store = LocalStorageManager("test-query", root=tmp_path)
    defaults = QueryOptions(stale_time=60, gc_time=600, retry=1, retry_delay=0.5)
    return QueryClient(storage=store, defaults=defaults, max_age=3600, clock=clock, sleep=clock.sleep)


@pytest.fixture
def sample_events() -> list[dict]:
    return [
        {"meeting_key": 1250, "meeting_name": "Bahrain Grand Prix", "location": "Sakhir",
         "country_name": "Bahrain", "circuit_short_name": "Sakhir", "date_start": "2025-04-11T11:30:00+00:00"},
        {"meeting_key": 1256, "meeting_name": "Monaco Grand Prix", "location": "Monaco",
         "country_name": "Monaco", "circuit_short_name": "Monte Carlo", "date_start": "2025-05-23T11:30:00+00:00"},
        {"meeting_key": 1999, "meeting_name": "Pre-Season Testing", "location": "Sakhir",
         "country_name": "Bahrain", "circuit_short_name": "Sakhir", "date_start": None},
        {"meeting_key": 1254, "meeting_name": "Miami Grand Prix", "location": "Miami",
         "country_name": "United States", "circuit_short_name": "Miami", "date_start": "2025-05-02T16:30:00+00:00"},
    ]


@pytest.fixture
def sample_drivers() -> list[dict]:
    return [
        {"driver_number": 1, "full_name": "Max VERSTAPPEN", "broadcast_name": "M VERSTAPPEN",
         "name_acronym": "VER", "team_name": "Red Bull Racing", "team_colour": "3671C6",
         "headshot_url": "https://example.org/ver.png", "country_code": "NED"},
        {"driver_number": 44, "full_name": "Lewis HAMILTON", "broadcast_name": "L HAMILTON",
         "name_acronym": "HAM", "team_name": "Ferrari", "team_colour": "E8002D",
         "headshot_url": "https://example.org/ham.png", "country_code": "GBR"},
        {"driver_number": 16, "full_name": "Charles LECLERC", "broadcast_name": "C LECLERC",
         "name_acronym": "LEC", "team_name": "Ferrari", "team_colour": "E8002D",
         "headshot_url": None, "country_code": "MON"},
        {"driver_number": "44", "full_name": "Lewis HAMILTON", "broadcast_name": "L HAMILTON",
         "name_acronym": "HAM", "team_name": "Ferrari", "team_colour": "E8002D"},
    ]


@pytest.fixture
def sample_positions() -> list[dict]:
    """Two sessions of meeting 1256: practice (9001) then race (9002)."""
    def rec(session_key, name, driver, position, date):
        return {"meeting_key": 1256, "session_key": session_key, "session_name": name,
                "circuit_short_name": "Monte Carlo", "driver_number": driver,
                "position": position, "date": date}

    return [
        rec(9001, "Practice 1", 1, 2, "2025-05-23T11:30:00+00:00"),
        rec(9001, "Practice 1", 44, 1, "2025-05-23T11:30:00+00:00"),
        rec(9001, "Practice 1", 1, 1, "2025-05-23T12:25:00+00:00"),
        rec(9001, "Practice 1", 44, 2, "2025-05-23T12:25:00+00:00"),
        rec(9002, "Race", 16, 1, "2025-05-25T13:00:00+00:00"),
        rec(9002, "Race", 44, 2, "2025-05-25T13:00:00+00:00"),
        rec(9002, "Race", 1, 3, "2025-05-25T13:00:00+00:00"),
        rec(9002, "Race", 1, 2, "2025-05-25T14:40:00+00:00"),
        rec(9002, "Race", 44, 4, "2025-05-25T14:40:00+00:00"),
        rec(9002, "Race", 16, 1, "2025-05-25T14:41:00+00:00"),
    ]


@pytest.fixture
def sample_laps() -> list[dict]:
    return [
        {"driver_number": 1, "lap_number": 1, "lap_duration": 80.5,
         "duration_sector_1": 26.1, "duration_sector_2": 28.2, "duration_sector_3": 26.2},
        {"driver_number": 1, "lap_number": 2, "lap_duration": 78.0,
         "duration_sector_1": 25.0, "duration_sector_2": 27.5, "duration_sector_3": 25.5},
        {"driver_number": 1, "lap_number": 3, "lap_duration": 79.0,
         "duration_sector_1": 25.5, "duration_sector_2": 27.9, "duration_sector_3": 25.6},
        {"driver_number": 44, "lap_number": 1, "lap_duration": 81.0,
         "duration_sector_1": 26.5, "duration_sector_2": 28.0, "duration_sector_3": 26.5},
        {"driver_number": 44, "lap_number": 2, "lap_duration": 78.5,
         "duration_sector_1": 25.2, "duration_sector_2": 27.6, "duration_sector_3": 25.7},
        {"driver_number": 44, "lap_number": 3, "lap_duration": None,
         "duration_sector_1": 25.4, "duration_sector_2": None, "duration_sector_3": None},
        {"driver_number": "16", "lap_number": 2, "lap_duration": 79.2,
         "duration_sector_1": 25.3, "duration_sector_2": 27.8, "duration_sector_3": 26.1},
    ]


@pytest.fixture
def sample_stints() -> list[dict]:
    return [
        {"driver_number": 1, "stint_number": 2, "compound": "HARD", "lap_start": 31, "lap_end": 78,
         "tyre_age_at_start": 0},
        {"driver_number": 1, "stint_number": 1, "compound": "MEDIUM", "lap_start": 1, "lap_end": 30,
         "tyre_age_at_start": 0},
        {"driver_number": 44, "stint_number": 1, "compound": "SOFT", "lap_start": 1, "lap_end": None,
         "tyre_age_at_start": 3},
    ]


@pytest.fixture
def sample_results() -> list[dict]:
    return [
        {"position": 3, "driver_number": 1, "duration": 5940.2, "gap_to_leader": 12.3},
        {"position": 1, "driver_number": 16, "duration": 5927.9, "gap_to_leader": 0},
        {"position": 2, "driver_number": 44, "duration": 5931.0, "gap_to_leader": 3.1},
        {"position": 4, "driver_number": 81, "duration": None, "gap_to_leader": "+1 LAP"},
        {"position": 2, "driver_number": 44, "duration": 5931.0, "gap_to_leader": 3.1},
    ]
