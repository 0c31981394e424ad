import pandas as pd
import streamlit as st

from f1pitstop.processing.constants import team_color
from f1pitstop.processing.data_processing import podium_order


TROPHY = {1: "🥇", 2: "🥈", 3: "🥉"}


def render_podium(results: list[dict]) -> None:
    """
    Render the top three finishers as P2 | P1 | P3 cards.

    Args:
        results: Enriched, position-sorted results (see enrich_results).
    """
    ordered = podium_order(results)
    if not ordered:
        return

    cols = st.columns(len(ordered))
    for col, driver in zip(cols, ordered):
        colour = team_color(driver.get("team_colour"), default="666666")
        with col:
            st.markdown(
                f"<div style='border-top: 6px solid {colour}; padding: 0.5rem; text-align: center;'>"
                f"<h2>{TROPHY.get(driver.get('position'), '')} P{driver.get('position')}</h2></div>",
                unsafe_allow_html=True,
            )
            if driver.get("headshot_url"):
                st.image(driver["headshot_url"], width=120)
            st.markdown(f"**{driver['full_name']}**")
            st.caption(f"{driver['team_name']} · #{driver.get('driver_number')}")


def render_results_table(results: list[dict]) -> None:
    """Finishers from P4 down."""
    rest = results[3:]
    if not rest:
        return

    df = pd.DataFrame([
        {
            "Pos": r.get("position"),
            "Driver": r["full_name"],
            "No.": r.get("driver_number"),
            "Team": r.get("team_name") or "—",
            "Time": str(r["duration"]) if r.get("duration") is not None else "—",
            "Gap": f"+{r['gap_to_leader']}" if r.get("gap_to_leader") else "—",
        }
        for r in rest
    ])
    st.dataframe(df, use_container_width=True, hide_index=True)
