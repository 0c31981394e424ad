import streamlit as st

from f1pitstop.config import cfg
from f1pitstop.openf1.queries import Queries
from f1pitstop.processing import data_processing as dp
from f1pitstop.processing.constants import team_color
from f1pitstop.app.router import NAV_ITEMS, Route, active_nav, build_link, resolve_route
from f1pitstop.app.charts.driver_charts import lap_figure, pit_stop_figure, position_figure, telemetry_figure
from f1pitstop.app.charts.session_charts import stints_figure
from f1pitstop.app.components.feedback import query_failed, render_empty
from f1pitstop.app.components.results_podium import render_podium, render_results_table
from f1pitstop.app.components.driver_cards import (
    render_driver_grid,
    render_driver_header,
    render_driver_list,
    render_event_summary,
    render_race_control,
    render_session_driver_grid,
    render_tyre_stints,
)
from f1pitstop.app.components.event_cards import render_event_card, render_sessions, render_top_drivers
from f1pitstop.app.components.pace_panel import render_pace_panel
from f1pitstop.utils.logger import setup_logger

# Page Config (Must be first)
st.set_page_config(
    page_title=cfg.app.name,
    page_icon="🏎️",
    layout="wide",
    initial_sidebar_state="collapsed",
)

st.markdown("""
<style>
    .main {
        padding: 1.5rem 2rem 5rem 2rem;
    }
    h1, h2, h3 {
        font-family: 'Helvetica Neue', sans-serif;
    }
    .stMetric {
        background-color: #1E1E1E;
        padding: 10px;
        border-radius: 5px;
        border: 1px solid #333;
    }
    /* Bottom navigation bar */
    .f1-nav {
        position: fixed; bottom: 0; left: 0; right: 0;
        display: flex; justify-content: space-around;
        background: #15151e; border-top: 2px solid #e10600;
        padding: 0.6rem 0; z-index: 999;
    }
    .f1-nav a { color: #bbb; text-decoration: none; font-weight: 600; }
    .f1-nav a.active { color: #e10600; }
</style>
""", unsafe_allow_html=True)


# --- Data Loading -----------------------------------------------------------

@st.cache_resource
def get_queries() -> Queries:
    setup_logger(log_dir=cfg.paths.logs)
    cfg.paths.setup()
    return Queries()


def render_nav(route: Route) -> None:
    active = active_nav(route)
    links = "".join(
        f"<a href='{build_link(page)}' target='_self' class='{'active' if page == active else ''}'>{icon} {label}</a>"
        for page, label, icon in NAV_ITEMS
    )
    st.markdown(f"<div class='f1-nav'>{links}</div>", unsafe_allow_html=True)


# --- Pages -------------------------------------------------------------------

def results_page(queries: Queries, route: Route) -> None:
    st.title("🏆 Race Results")
    session_key = route.get("session_key", "latest")

    with st.spinner("Loading results..."):
        result = queries.race_results(session_key)
    if query_failed(result, "Couldn't load race results."):
        return

    results = dp.clean_race_results(result.data)
    if not results:
        render_empty("No results available for this session yet.")
        return

    enriched = dp.enrich_results(results, queries.cached_drivers())
    render_podium(enriched)
    st.divider()
    render_results_table(enriched)


def drivers_page(queries: Queries, route: Route) -> None:
    st.title("👥 Drivers")

    with st.spinner("Loading drivers..."):
        result = queries.drivers()
    if query_failed(result, "Couldn't load drivers."):
        return

    c1, c2 = st.columns([3, 1])
    with c1:
        term = st.text_input("Search", value=route.get("search", ""), placeholder="Name, team or number")
    with c2:
        layout = st.radio("View", ["Grid", "List"], horizontal=True)

    drivers = dp.filter_drivers(dp.dedupe_by_driver_number(result.data), term)
    if not drivers:
        render_empty("No drivers match your search." if term else "No drivers available.")
        return

    if layout == "Grid":
        render_driver_grid(drivers)
    else:
        render_driver_list(drivers)


def driver_page(queries: Queries, route: Route) -> None:
    driver_number = route.get("driver_number")
    session_key = route.get("session_key", "latest")
    st.markdown(f"[← All drivers]({build_link('drivers')})")

    with st.spinner("Loading driver profile..."):
        profile = queries.driver_profile(driver_number, session_key)
    if query_failed(profile["drivers"], "Couldn't load driver details."):
        return

    driver = dp.find_driver(profile["drivers"].data, driver_number)
    if not driver:
        render_empty(f"Driver #{driver_number} not found in this session.")
        return

    colour = team_color(driver.get("team_colour"))
    render_driver_header(driver)
    if not query_failed(profile["event"], "Couldn't load the event summary."):
        render_event_summary(profile["event"].data)

    tab_laps, tab_stints, tab_tel, tab_pos, tab_pit, tab_rc = st.tabs(
        ["Laps", "Tyre Stints", "Telemetry", "Position", "Pit Stops", "Race Control"]
    )
    with tab_laps:
        if not query_failed(profile["laps"], "Couldn't load laps."):
            st.plotly_chart(lap_figure(profile["laps"].data or [], colour), use_container_width=True)
    with tab_stints:
        if not query_failed(profile["stints"], "Couldn't load stints."):
            render_tyre_stints(profile["stints"].data or [])
    with tab_tel:
        if not query_failed(profile["telemetry"], "Couldn't load telemetry."):
            st.plotly_chart(telemetry_figure(profile["telemetry"].data or [], colour), use_container_width=True)
    with tab_pos:
        if not query_failed(profile["positions"], "Couldn't load positions."):
            st.plotly_chart(position_figure(profile["positions"].data or [], colour), use_container_width=True)
    with tab_pit:
        if not query_failed(profile["pit_stops"], "Couldn't load pit stops."):
            st.plotly_chart(pit_stop_figure(profile["pit_stops"].data or [], colour), use_container_width=True)
    with tab_rc:
        if not query_failed(profile["race_control"], "Couldn't load race control messages."):
            render_race_control(profile["race_control"].data or [])


def events_page(queries: Queries, route: Route) -> None:
    year = route.get("year", cfg.app.default_year)
    st.title(f"📅 {year} Events")

    with st.spinner("Loading events..."):
        events = queries.events(year)
    if query_failed(events, "Couldn't load events."):
        return

    latest = dp.get_latest_event(events.data)
    if latest is None:
        render_empty("No events found for this season.")
        return

    st.subheader("Latest Event")
    left, right = st.columns([1, 1])
    with left:
        render_event_card(latest)
    with right:
        positions = queries.positions(latest.get("meeting_key"))
        latest_session = dp.get_latest_session_from_positions(positions.data, latest.get("meeting_key"))
        session_key = (latest_session or {}).get("session_key")
        drivers = queries.session_drivers(latest.get("meeting_key"), session_key, enabled=bool(session_key))
        if positions.is_error or drivers.is_error:
            query_failed(positions if positions.is_error else drivers, "Couldn't load podium finishers.")
        else:
            latest_positions = dp.get_latest_positions_for_drivers(positions.data, session_key)
            render_top_drivers(dp.merge_drivers_with_positions(drivers.data, latest_positions))

    older = dp.get_older_events(events.data)
    if older:
        st.divider()
        st.subheader("Earlier Events")
        cols = st.columns(3)
        for i, event in enumerate(older):
            with cols[i % 3]:
                with st.container(border=True):
                    render_event_card(event)


def event_page(queries: Queries, route: Route) -> None:
    meeting_key = route.get("meeting_key")
    year = route.get("year", cfg.app.default_year)
    st.markdown(f"[← All events]({build_link('events', year=year)})")

    with st.spinner("Loading event..."):
        events = queries.events(year)
        positions = queries.positions(meeting_key)
    if query_failed(events, "Couldn't load event.") or query_failed(positions, "Couldn't load sessions."):
        return

    event = dp.find_event(events.data, meeting_key) or {}
    st.title(event.get("meeting_name") or f"Meeting {meeting_key}")
    if event:
        st.caption(f"{event.get('circuit_short_name', '')} · {event.get('location', '')}, {event.get('country_name', '')}")

    sessions = dp.sort_sessions(dp.process_sessions_data(positions.data))
    latest_session_key = sessions[0]["session_key"] if sessions else None
    session_drivers = queries.session_drivers(meeting_key, latest_session_key)
    all_drivers = (session_drivers.data or []) if session_drivers.is_success else []

    tab_sessions, tab_drivers, tab_stints, tab_pace = st.tabs(
        ["Sessions", "Drivers", "Tyre Strategy", "Pace Analytics"]
    )
    with tab_sessions:
        render_sessions(sessions, all_drivers)
    with tab_drivers:
        if not query_failed(session_drivers, "Couldn't load session drivers."):
            render_session_driver_grid(dp.session_driver_grid(all_drivers))
    with tab_stints:
        stints = queries.stints(latest_session_key)
        if not query_failed(stints, "Couldn't load stints."):
            grouped = dp.stints_by_driver(stints.data)
            finishers = dp.merge_drivers_with_positions(
                all_drivers, dp.get_latest_positions_for_drivers(positions.data, latest_session_key)
            )
            total = dp.total_laps_from_stints(stints.data, default=71)
            st.plotly_chart(stints_figure(grouped, finishers, total), use_container_width=True)
    with tab_pace:
        laps = queries.session_laps(latest_session_key)
        if not query_failed(laps, "Couldn't load lap data."):
            render_pace_panel(laps.data or [], all_drivers, key=f"pace-{meeting_key}")


PAGE_RENDERERS = {
    "results": results_page,
    "drivers": drivers_page,
    "driver": driver_page,
    "events": events_page,
    "event": event_page,
}


def main():
    queries = get_queries()
    # Warm the driver cache; the results page reads it back from storage
    queries.drivers()

    route = resolve_route(st.query_params.to_dict())
    PAGE_RENDERERS[route.page](queries, route)
    render_nav(route)


if __name__ == "__main__":
    main()
