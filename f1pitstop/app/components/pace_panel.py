import streamlit as st

from f1pitstop.app.charts.session_charts import delta_figure, pace_figure, sector_figure
from f1pitstop.processing import pace_analytics as pa


def _fmt(value) -> str:
    return f"{value:.3f}" if value is not None else "—"


def render_pace_panel(laps: list[dict], drivers: list[dict], key: str = "pace") -> None:
    """
    Session pace analytics: driver picker, sector summaries, sector, pace and delta charts.

    Args:
        laps: All laps of the session.
        drivers: Session driver records (for display names).
        key: Streamlit widget key prefix, unique per page.
    """
    if not laps:
        st.caption("No lap data available for this session.")
        return

    df = pa.laps_frame(laps)
    names = pa.drivers_map(drivers)
    options = sorted(set(names) | set(int(n) for n in df["driver_number"].unique()))

    c1, c2 = st.columns([4, 1])
    with c1:
        selected = st.multiselect(
            "Select drivers",
            options=options,
            default=pa.default_selection(names) or options[:pa.DEFAULT_SELECTION_SIZE],
            format_func=lambda n: names.get(n, f"#{n}"),
            key=f"{key}-drivers",
        )
    with c2:
        expanded = st.toggle("Enlarge", value=False, key=f"{key}-layout")

    stats = pa.per_driver_sector_stats(df, selected)
    if selected:
        stat_cols = st.columns(min(len(selected), 5))
        for i, num in enumerate(selected):
            s = stats[num]
            best = s["fastestLap"]
            with stat_cols[i % len(stat_cols)]:
                st.markdown(f"**{names.get(num, f'#{num}')}**")
                st.caption(
                    f"Avg S1 {_fmt(s['avgS1'])} · S2 {_fmt(s['avgS2'])} · S3 {_fmt(s['avgS3'])}\n\n"
                    f"Best S1 {_fmt(s['lowestS1'])} · S2 {_fmt(s['lowestS2'])} · S3 {_fmt(s['lowestS3'])}\n\n"
                    + (f"Fastest lap {best['lap_number']}: {best['duration']:.3f}s" if best else "No timed lap")
                )

    sector_col, pace_col = (st.container(), st.container()) if expanded else st.columns([1, 2])
    with sector_col:
        for sector in pa.SECTORS:
            st.plotly_chart(
                sector_figure(pa.sector_series(df, sector, selected, names), sector),
                use_container_width=True,
            )
    with pace_col:
        st.plotly_chart(pace_figure(pa.pace_series(df, selected, names)), use_container_width=True)
        st.plotly_chart(delta_figure(pa.delta_series(df, selected, names)), use_container_width=True)
