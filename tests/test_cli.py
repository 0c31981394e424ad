"""
Tests for the click CLI, with OpenF1 replaced by canned records.
"""
from unittest.mock import MagicMock

import pytest
from click.testing import CliRunner

from f1pitstop import cli as cli_module
from f1pitstop.config import PathConfig
from f1pitstop.openf1.api_client import OpenF1Error
from f1pitstop.openf1.queries import Queries


@pytest.fixture
def openf1(sample_events, sample_positions, sample_stints, sample_results, sample_drivers, sample_laps):
    by_endpoint = {
        "/meetings": sample_events,
        "/position": sample_positions,
        "/stints": sample_stints,
        "/session_result": sample_results,
        "/drivers": sample_drivers,
        "/laps": sample_laps,
    }
    client = MagicMock()
    client.get.side_effect = lambda endpoint, params=None: list(by_endpoint.get(endpoint, []))
    return client


@pytest.fixture
def queries(openf1, query_client, storage) -> Queries:
    return Queries(client=openf1, query_client=query_client, storage=storage)


@pytest.fixture
def run(monkeypatch, queries):
    monkeypatch.setattr(cli_module, "_queries", lambda: queries)
    monkeypatch.setattr(cli_module, "setup_logger", lambda **kwargs: None)
    runner = CliRunner()

    def _run(*args):
        return runner.invoke(cli_module.cli, list(args))

    return _run


class TestSetup:
    def test_setup_creates_directories(self, run, monkeypatch):
        calls = []
        monkeypatch.setattr(PathConfig, "setup", lambda self: calls.append(True))
        result = run("setup")
        assert result.exit_code == 0
        assert calls == [True]


class TestListings:
    def test_events_newest_first(self, run):
        result = run("events", "--year", "2025")
        assert result.exit_code == 0
        lines = result.output.strip().splitlines()
        assert "Monaco Grand Prix" in lines[0]
        assert "Pre-Season Testing" in lines[-1]

    def test_results(self, run):
        result = run("results", "--positions", "5")
        assert result.exit_code == 0
        lines = result.output.strip().splitlines()
        assert lines[0].startswith("P1")
        assert "Charles LECLERC" in lines[0]
        assert "Driver #81" in lines[-1]

    def test_drivers_search(self, run):
        result = run("drivers", "--search", "ham")
        assert result.exit_code == 0
        assert "Lewis HAMILTON" in result.output
        assert "VERSTAPPEN" not in result.output

    def test_drivers_no_match(self, run):
        result = run("drivers", "--search", "nobody")
        assert result.output.strip() == "No drivers found."

    def test_upstream_error_exits_nonzero(self, run, openf1):
        openf1.get.side_effect = OpenF1Error(500, "Server Error", "u")
        result = run("events")
        assert result.exit_code != 0
        assert "Could not load events" in result.output


class TestCache:
    def test_prefetch_warms_sessions(self, run, openf1, queries):
        result = run("prefetch", "--year", "2025")
        assert result.exit_code == 0
        endpoints = {c.args[0] for c in openf1.get.call_args_list}
        assert {"/meetings", "/position", "/drivers", "/stints", "/laps"} <= endpoints
        assert queries.query_client.get_query_data(("sessionLaps", 9002)) is not None

    def test_clear_cache(self, run, queries):
        queries.query_client.set_query_data(("k",), 1)
        queries.storage.set("drivers", [1])
        result = run("clear-cache")
        assert result.exit_code == 0
        assert queries.query_client.storage.keys() == []
        assert queries.cached_drivers() == []


class TestServers:
    def test_serve_runs_uvicorn(self, run, monkeypatch):
        import uvicorn

        fake = MagicMock()
        monkeypatch.setattr(uvicorn, "run", fake)
        result = run("serve", "--port", "9000")
        assert result.exit_code == 0
        fake.assert_called_once_with("api.main:app", host="127.0.0.1", port=9000, reload=False, log_config=None)

    def test_app_launches_streamlit(self, run, monkeypatch):
        import subprocess

        fake = MagicMock()
        monkeypatch.setattr(subprocess, "run", fake)
        result = run("app")
        assert result.exit_code == 0
        cmd = fake.call_args.args[0]
        assert cmd[1:4] == ["-m", "streamlit", "run"]
        assert cmd[4].endswith("main.py")
