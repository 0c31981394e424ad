import pandas as pd
import streamlit as st

from f1pitstop.app.router import build_link
from f1pitstop.processing.constants import get_f1_points, get_session_title, team_color
from f1pitstop.processing.data_processing import find_driver, session_driver_rows
from f1pitstop.utils.time_utils import format_date


def render_event_card(event: dict) -> None:
    """Meeting name, circuit, place and date, plus a link to the details page."""
    st.markdown(f"### {event.get('meeting_name', 'Unknown event')}")
    st.caption(event.get("circuit_short_name") or "")
    st.markdown(f"📍 {event.get('location', '')}, {event.get('country_name', '')}")
    st.caption(f"🗓️ {format_date(event.get('date_start'))}")
    st.markdown(f"[View Details →]({build_link('event', meeting_key=event.get('meeting_key'))})")


def render_top_drivers(drivers: list[dict]) -> None:
    """
    Podium finishers of the latest session.

    Args:
        drivers: Driver records merged with positions, sorted by position.
    """
    top3 = drivers[:3]
    if not top3:
        st.caption("No podium results available.")
        return

    st.markdown("#### Podium Finishers")
    winner, runner_ups = top3[0], top3[1:]
    colour = team_color(winner.get("team_colour"))
    left, right = st.columns([1, 3])
    with left:
        if winner.get("headshot_url"):
            st.image(winner["headshot_url"], width=110)
    with right:
        st.markdown(f"<span style='color:{colour}; font-weight:700'>{winner.get('name_acronym', '')}</span>",
                    unsafe_allow_html=True)
        st.markdown(f"**{winner.get('full_name', '')}** 🥇 #{winner.get('driver_number')}")
        st.caption(winner.get("team_name") or "")

    for medal, d in zip(("🥈", "🥉"), runner_ups):
        st.markdown(f"{medal} {d.get('broadcast_name', d.get('full_name', ''))} · Driver No: **{d.get('driver_number')}**")


def sessions_table_frame(session: dict, all_drivers: list[dict], title: str) -> pd.DataFrame:
    """Rows for one session: final place, driver, team, grid slot and race-day points."""
    race_day = title.lower() == "race day"
    rows = []
    for driver_pos in session_driver_rows(session):
        info = find_driver(all_drivers, driver_pos.get("driver_number"))
        final = driver_pos.get("finalPosition", driver_pos.get("position"))
        starting = driver_pos.get("startingPosition", driver_pos.get("starting_grid_position"))
        row = {
            "Pos": final,
            "Driver": info.get("full_name") or driver_pos.get("full_name") or f"#{driver_pos.get('driver_number')}",
            "Team": info.get("team_name") or driver_pos.get("team_name") or "",
            "Start": str(starting) if starting else "N/A",
        }
        if race_day:
            row["Points"] = get_f1_points(final)
        rows.append(row)
    return pd.DataFrame(rows)


def render_sessions(sorted_sessions: list[dict], all_drivers: list[dict]) -> None:
    """One expander per session, newest first; the newest opens by default."""
    if not sorted_sessions:
        st.info("No session data available.")
        return

    total = len(sorted_sessions)
    for index, session in enumerate(sorted_sessions):
        title = get_session_title(index, total)
        label = f"{title} · {session.get('session_name') or ''} · {format_date(session.get('date'))}"
        with st.expander(label, expanded=index == 0):
            df = sessions_table_frame(session, all_drivers, title)
            if df.empty:
                st.caption("No classification for this session.")
            else:
                st.dataframe(df, use_container_width=True, hide_index=True)
