"""
Click-based CLI for F1 PitStop.

Usage:
    python -m f1pitstop.cli setup
    python -m f1pitstop.cli app
    python -m f1pitstop.cli serve --port 8000
    python -m f1pitstop.cli events --year 2025
    python -m f1pitstop.cli results --session-key latest --positions 10
    python -m f1pitstop.cli drivers --search ferrari
    python -m f1pitstop.cli prefetch --year 2025
    python -m f1pitstop.cli clear-cache
"""
import click
from tqdm import tqdm

from f1pitstop.config import cfg
from f1pitstop.utils.logger import setup_logger, logger
from f1pitstop.utils.time_utils import format_date


def _queries():
    from f1pitstop.openf1.queries import Queries

    return Queries()


def _fail(result, what: str) -> None:
    if result.is_error:
        raise click.ClickException(f"Could not load {what}: {result.error}")


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Log debug output.")
@click.option("--json-logs", is_flag=True, help="Write the log file as JSON lines.")
def cli(verbose: bool, json_logs: bool) -> None:
    """🏎️  F1 PitStop: OpenF1 results, drivers and events"""
    setup_logger(log_dir=cfg.paths.logs, level="DEBUG" if verbose else "INFO", serialize=json_logs)


@cli.command()
def setup() -> None:
    """Initialize storage, cache and log directories."""
    logger.info("Setting up project directories...")
    cfg.paths.setup()
    logger.success("✅ All directories created.")


@cli.command()
def app() -> None:
    """Launch Streamlit dashboard."""
    import subprocess
    import sys
    from pathlib import Path

    main = Path(__file__).resolve().parent / "app" / "main.py"
    try:
        subprocess.run([sys.executable, "-m", "streamlit", "run", str(main)], check=True)
    except KeyboardInterrupt:
        sys.exit(0)


@cli.command()
@click.option("--host", default="127.0.0.1", show_default=True)
@click.option("--port", default=8000, show_default=True, type=int)
@click.option("--reload", is_flag=True, help="Auto-reload on code changes.")
def serve(host: str, port: int, reload: bool) -> None:
    """Run the JSON API with uvicorn."""
    import uvicorn

    logger.info(f"Serving API on http://{host}:{port}")
    # log_config=None keeps the loguru bridge installed by setup_logger
    uvicorn.run("api.main:app", host=host, port=port, reload=reload, log_config=None)


@cli.command()
@click.option("--year", default=cfg.app.default_year, show_default=True, help="Season year.")
@click.option("--country", default=None, help="Filter by country name.")
def events(year: str, country: str | None) -> None:
    """List a season's events, newest first."""
    from f1pitstop.processing.data_processing import sort_events_by_date

    result = _queries().events(year, country)
    _fail(result, "events")
    ordered = sort_events_by_date(result.data)
    if not ordered:
        click.echo("No events found.")
        return
    for e in ordered:
        click.echo(
            f"{str(e.get('meeting_key')):>6}  {format_date(e.get('date_start')):<13}  "
            f"{e.get('meeting_name', '')} ({e.get('location', '')}, {e.get('country_name', '')})"
        )


@cli.command()
@click.option("--session-key", default="latest", show_default=True)
@click.option("--positions", default=cfg.app.results_positions, show_default=True, type=int)
def results(session_key: str, positions: int) -> None:
    """Print the classification of a session."""
    from f1pitstop.processing.data_processing import clean_race_results, enrich_results

    queries = _queries()
    result = queries.race_results(session_key, positions)
    _fail(result, "race results")
    rows = clean_race_results(result.data)
    if not rows:
        click.echo("No results available.")
        return

    drivers = queries.drivers()
    known = drivers.data if drivers.is_success and drivers.data else queries.cached_drivers()
    for r in enrich_results(rows, known):
        gap = f"+{r['gap_to_leader']}" if r.get("gap_to_leader") else ""
        click.echo(f"P{str(r.get('position')):<3} #{str(r.get('driver_number')):<3} {r['full_name']:<24} {r['team_name']:<22} {gap}")


@cli.command()
@click.option("--search", default=None, help="Filter by name, team or number.")
def drivers(search: str | None) -> None:
    """List drivers of the latest session."""
    from f1pitstop.processing.data_processing import dedupe_by_driver_number, filter_drivers

    result = _queries().drivers()
    _fail(result, "drivers")
    rows = filter_drivers(dedupe_by_driver_number(result.data), search)
    if not rows:
        click.echo("No drivers found.")
        return
    for d in rows:
        click.echo(f"#{str(d.get('driver_number')):<3} {d.get('name_acronym') or '':<4} {d.get('full_name') or '':<24} {d.get('team_name') or ''}")


@cli.command()
@click.option("--year", default=cfg.app.default_year, show_default=True, help="Season year.")
def prefetch(year: str) -> None:
    """Warm the query cache with a season's events, positions, stints and laps."""
    from f1pitstop.processing.data_processing import process_sessions_data, sort_events_by_date

    queries = _queries()
    result = queries.events(year)
    _fail(result, "events")
    meetings = sort_events_by_date(result.data)
    logger.info(f"Prefetching {len(meetings)} meetings for {year}...")

    failures = 0
    for event in tqdm(meetings, desc="Meetings"):
        meeting_key = event.get("meeting_key")
        positions = queries.positions(meeting_key)
        if positions.is_error:
            failures += 1
            continue
        for session_key in process_sessions_data(positions.data):
            for res in (
                queries.session_drivers(meeting_key, session_key),
                queries.stints(session_key),
                queries.session_laps(session_key),
            ):
                failures += res.is_error

    if failures:
        logger.warning(f"⚠️ Prefetch finished with {failures} failed queries.")
    else:
        logger.success("✅ Prefetch complete.")


@cli.command("clear-cache")
def clear_cache() -> None:
    """Drop persisted query cache and stored driver list."""
    queries = _queries()
    queries.query_client.clear()
    queries.storage.clear()
    logger.success("✅ Cache cleared.")


if __name__ == "__main__":
    cli()
