"""
Session-level Plotly figures: tyre stints and pace analytics.
"""
from typing import Any, Optional

import plotly.graph_objects as go

from f1pitstop.processing.constants import compound_color, format_driver_short
from f1pitstop.processing.data_processing import stint_lap_count


TEMPLATE = "plotly_dark"
AVERAGE_COLOR = "rgba(200,200,200,0.9)"
DELTA_COLOR = "#ffb86b"

SECTOR_GRAPH_HEIGHT = 160
PACE_GRAPH_HEIGHT = 320
DELTA_GRAPH_HEIGHT = 180


def empty_figure(message: str, height: int = 220) -> go.Figure:
    """Blank dark figure carrying a centred 'no data' note."""
    fig = go.Figure()
    fig.add_annotation(
        text=message, x=0.5, y=0.5, xref="paper", yref="paper",
        showarrow=False, font=dict(color="#9ca3af", size=13),
    )
    fig.update_layout(template=TEMPLATE, height=height, xaxis=dict(visible=False), yaxis=dict(visible=False))
    return fig


def stints_figure(
    stints_by_driver: dict[Any, list[dict]],
    drivers: Optional[list[dict]] = None,
    total_laps: int = 71,
) -> go.Figure:
    """
    Horizontal tyre-strategy bars, one row per driver.

    Args:
        stints_by_driver: Output of ``stints_by_driver``.
        drivers: Driver records; ``position`` (if present) orders the rows.
        total_laps: Race distance used for the x-axis range.

    Returns:
        Plotly Figure object.
    """
    if not stints_by_driver:
        return empty_figure("No stint data.")

    drivers = drivers or []
    rows = []
    for num, stints in stints_by_driver.items():
        driver = next((d for d in drivers if str(d.get("driver_number")) == str(num)), None)
        final_position = (driver or {}).get("position") or 999
        label = format_driver_short((driver or {}).get("full_name")) or f"#{num}"
        rows.append((final_position, label, stints))
    rows.sort(key=lambda r: r[0])

    fig = go.Figure()
    seen_compounds = set()
    for _, label, stints in rows:
        for stint in stints:
            compound = (stint.get("compound") or "UNKNOWN").upper()
            laps = stint_lap_count(stint)
            fig.add_trace(go.Bar(
                x=[laps],
                y=[label],
                base=[(stint.get("lap_start") or 1) - 1],
                orientation="h",
                name=compound,
                legendgroup=compound,
                showlegend=compound not in seen_compounds,
                marker=dict(color=compound_color(compound), line=dict(color="#111", width=1)),
                hovertemplate=(
                    f"{label}<br>{compound}<br>Laps {stint.get('lap_start')}–{stint.get('lap_end')}"
                    f" ({laps})<br>Tyre age at start: {stint.get('tyre_age_at_start', '—')}<extra></extra>"
                ),
            ))
            seen_compounds.add(compound)

    fig.update_layout(
        title="Tyre Strategy",
        barmode="overlay",
        template=TEMPLATE,
        height=max(240, 28 * len(rows) + 80),
        xaxis=dict(title="Lap", range=[0, max(total_laps, 1)]),
        yaxis=dict(autorange="reversed"),
        legend=dict(orientation="h", yanchor="bottom", y=1.02, xanchor="right", x=1),
    )
    return fig


def _line_with_markers(series: dict, labels: list[int], tension_mode: str = "spline") -> go.Scatter:
    marker_sizes = [8 if i in series["markers"] else 0 for i in range(len(labels))]
    marker_colors = ["#fff" if i in series["markers"] else series["color"] for i in range(len(labels))]
    return go.Scatter(
        x=labels,
        y=series["values"],
        mode="lines+markers",
        name=series["label"],
        line=dict(color=series["color"], width=2, shape=tension_mode),
        marker=dict(size=marker_sizes, color=marker_colors),
        connectgaps=False,
        hovertemplate=f"{series['label']}<br>Lap %{{x}}: %{{y:.3f}}s<extra></extra>",
    )


def sector_figure(data: dict, sector: int) -> go.Figure:
    """Sector time per lap for the selected drivers, with the group average dashed."""
    if not data.get("series"):
        return empty_figure("Select drivers to compare sectors.", height=SECTOR_GRAPH_HEIGHT)

    labels = data["labels"]
    fig = go.Figure()
    for series in data["series"]:
        fig.add_trace(_line_with_markers(series, labels))
    average = data.get("average")
    if average:
        fig.add_trace(go.Scatter(
            x=labels,
            y=average["values"],
            mode="lines",
            name=average["label"],
            line=dict(color=AVERAGE_COLOR, dash="dash", width=1.5),
        ))

    fig.update_layout(
        title=f"Sector {sector}",
        template=TEMPLATE,
        height=SECTOR_GRAPH_HEIGHT + 120,
        xaxis_title="Lap",
        yaxis_title="Seconds",
        hovermode="x unified",
        legend=dict(orientation="h", yanchor="bottom", y=1.02, xanchor="right", x=1, font=dict(size=11)),
    )
    return fig


def pace_figure(data: dict) -> go.Figure:
    """Lap duration per lap; each driver's fastest lap highlighted."""
    if not data.get("series"):
        return empty_figure("Select drivers to compare pace.", height=PACE_GRAPH_HEIGHT)

    labels = data["labels"]
    fig = go.Figure()
    for series in data["series"]:
        fig.add_trace(_line_with_markers(series, labels))
    fig.update_layout(
        title="Lap Pace",
        template=TEMPLATE,
        height=PACE_GRAPH_HEIGHT,
        xaxis_title="Lap",
        yaxis_title="Lap time (s)",
        hovermode="x unified",
    )
    return fig


def delta_figure(data: Optional[dict]) -> go.Figure:
    """Gap between two drivers per lap; positive means the first driver was slower."""
    if not data:
        return empty_figure("Select exactly two drivers to see the lap delta.", height=DELTA_GRAPH_HEIGHT)

    fig = go.Figure()
    fig.add_trace(go.Scatter(
        x=data["labels"],
        y=data["values"],
        mode="lines",
        name=data["label"],
        line=dict(color=DELTA_COLOR, width=2),
    ))
    fig.add_hline(y=0, line_dash="dot", line_color="gray")
    fig.update_layout(
        title=data["label"],
        template=TEMPLATE,
        height=DELTA_GRAPH_HEIGHT + 80,
        xaxis_title="Lap",
        yaxis_title="Δ seconds",
    )
    return fig
