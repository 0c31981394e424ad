import pandas as pd
import streamlit as st

from f1pitstop.app.router import build_link
from f1pitstop.processing.constants import compound_color, team_color


PLACEHOLDER_HEADSHOT = "https://via.placeholder.com/200?text=No+Image"
GRID_COLUMNS = 5


def _flag_url(country_code: str) -> str:
    return f"https://flagsapi.com/{country_code}/flat/32.png"


def render_driver_grid(drivers: list[dict], columns: int = GRID_COLUMNS) -> None:
    """Driver cards in a grid; each links to the driver's profile."""
    for start in range(0, len(drivers), columns):
        cols = st.columns(columns)
        for col, d in zip(cols, drivers[start:start + columns]):
            colour = team_color(d.get("team_colour"), default="ff0000")
            with col:
                st.markdown(
                    f"<div style='border-left: 5px solid {colour}; padding-left: 0.5rem;'>"
                    f"<span style='color:{colour}; font-weight:700; letter-spacing:0.1em'>"
                    f"{d.get('name_acronym') or ''}</span></div>",
                    unsafe_allow_html=True,
                )
                st.image(d.get("headshot_url") or PLACEHOLDER_HEADSHOT, width=110)
                st.markdown(f"[**{d.get('full_name', '')}**]({build_link('driver', driver_number=d.get('driver_number'))})")
                st.caption(f"#{d.get('driver_number')} · {d.get('team_name') or 'Unknown Team'}")


def render_driver_list(drivers: list[dict]) -> None:
    """Compact one-row-per-driver view."""
    df = pd.DataFrame([
        {
            "No.": d.get("driver_number"),
            "Code": d.get("name_acronym"),
            "Driver": d.get("full_name"),
            "Team": d.get("team_name"),
            "Profile": build_link("driver", driver_number=d.get("driver_number")),
        }
        for d in drivers
    ])
    st.dataframe(
        df,
        use_container_width=True,
        hide_index=True,
        column_config={"Profile": st.column_config.LinkColumn("Profile", display_text="Open")},
    )


def render_session_driver_grid(drivers: list[dict]) -> None:
    """Grid of a session's entrants with flag and broadcast name."""
    if not drivers:
        st.info("No driver data available for this session.")
        return
    cols = st.columns(4)
    for i, d in enumerate(drivers):
        with cols[i % 4]:
            st.image(d.get("headshot_url") or PLACEHOLDER_HEADSHOT, width=90)
            st.markdown(f"**{d.get('last_name') or d.get('full_name', '')}** · {d.get('broadcast_name', '')}")
            caption = f"#{d.get('driver_number')} · {d.get('team_name') or 'Unknown Team'}"
            if d.get("country_code"):
                caption = f"![flag]({_flag_url(d['country_code'])}) {caption}"
            st.markdown(caption)


def render_driver_header(driver: dict) -> None:
    colour = team_color(driver.get("team_colour"))
    left, right = st.columns([1, 4])
    with left:
        st.image(driver.get("headshot_url") or PLACEHOLDER_HEADSHOT, width=140)
    with right:
        st.markdown(
            f"<h1 style='color:{colour}; margin-bottom:0'>{driver.get('full_name', '')}</h1>",
            unsafe_allow_html=True,
        )
        st.markdown(f"**#{driver.get('driver_number')}** · {driver.get('name_acronym', '')} · "
                    f"{driver.get('team_name') or 'Unknown Team'}")
        if driver.get("country_code"):
            st.caption(f"Country: {driver['country_code']}")


def render_event_summary(event: dict) -> None:
    if not event:
        return
    c1, c2, c3 = st.columns(3)
    c1.metric("Event", event.get("meeting_name") or "—")
    c2.metric("Circuit", event.get("circuit_short_name") or "—")
    c3.metric("Location", ", ".join(v for v in (event.get("location"), event.get("country_name")) if v) or "—")


def render_tyre_stints(stints: list[dict]) -> None:
    if not stints:
        st.info("No stint data.")
        return
    df = pd.DataFrame([
        {
            "Stint": s.get("stint_number"),
            "Compound": s.get("compound"),
            "Laps": f"{s.get('lap_start')}–{s.get('lap_end')}",
            "Tyre age": s.get("tyre_age_at_start") if s.get("tyre_age_at_start") is not None else "—",
        }
        for s in stints
    ])
    df["Tyre age"] = df["Tyre age"].astype(str)

    def _compound_style(val):
        return f"color: {compound_color(val)}"

    st.dataframe(df.style.map(_compound_style, subset=["Compound"]), use_container_width=True, hide_index=True)


def render_race_control(messages: list[dict]) -> None:
    if not messages:
        st.info("No race control messages.")
        return
    df = pd.DataFrame(messages).reindex(columns=["date", "lap_number", "category", "flag", "message"])
    df = df.sort_values("date", ascending=False)
    st.dataframe(df, use_container_width=True, hide_index=True)
