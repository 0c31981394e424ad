"""
Per-driver Plotly figures for the driver profile page.
"""
import pandas as pd
import plotly.graph_objects as go

from f1pitstop.app.charts.session_charts import TEMPLATE, empty_figure


TELEMETRY_SAMPLES = 300
RPM_COLOR = "#8884d8"


def lap_figure(laps: list[dict], color: str) -> go.Figure:
    """Lap duration by lap number."""
    if not laps:
        return empty_figure("No lap data.", height=240)

    df = pd.DataFrame(laps).reindex(columns=["lap_number", "lap_duration"])
    df = df.sort_values("lap_number")
    fig = go.Figure(go.Scatter(
        x=df["lap_number"],
        y=df["lap_duration"],
        mode="lines",
        name="Lap time",
        line=dict(color=color, width=2),
        hovertemplate="Lap %{x}<br>%{y:.3f}s<extra></extra>",
    ))
    fig.update_layout(template=TEMPLATE, height=240, xaxis_title="Lap", yaxis_title="Seconds",
                      margin=dict(l=40, r=10, t=20, b=40))
    return fig


def pit_stop_figure(pit_stops: list[dict], color: str) -> go.Figure:
    """Pit lane duration per stop, keyed by lap."""
    if not pit_stops:
        return empty_figure("No pit stop data.", height=200)

    laps = [p.get("lap_number") for p in pit_stops]
    durations = [p.get("pit_duration") or 0 for p in pit_stops]
    fig = go.Figure(go.Bar(
        x=laps,
        y=durations,
        marker_color=color,
        hovertemplate="Lap %{x}<br>%{y:.1f}s<extra></extra>",
    ))
    fig.update_layout(template=TEMPLATE, height=200, xaxis_title="Lap", yaxis_title="Seconds",
                      margin=dict(l=40, r=10, t=20, b=40))
    return fig


def position_figure(positions: list[dict], color: str) -> go.Figure:
    """
    Position over the session. P1 is drawn at the top.

    OpenF1 position records are timestamped; when no lap number is present
    the x-axis falls back to the record date.
    """
    if not positions:
        return empty_figure("No position data.")

    df = pd.DataFrame(positions)
    if "position" not in df.columns:
        return empty_figure("No position data.")
    x_col = "lap_number" if "lap_number" in df.columns else "date"
    if x_col == "date":
        df["date"] = pd.to_datetime(df["date"], utc=True, errors="coerce")
    df = df.sort_values(x_col)
    fig = go.Figure(go.Scatter(
        x=df[x_col],
        y=df["position"],
        mode="lines",
        line=dict(color=color, width=2, shape="hv"),
        name="Position",
    ))
    fig.update_layout(template=TEMPLATE, height=220, yaxis=dict(autorange="reversed", title="Position"),
                      margin=dict(l=40, r=10, t=20, b=40))
    return fig


def telemetry_figure(telemetry: list[dict], color: str) -> go.Figure:
    """Speed and RPM over the first samples of the session."""
    if not telemetry:
        return empty_figure("No telemetry data.")

    df = pd.DataFrame(telemetry[:TELEMETRY_SAMPLES]).reindex(columns=["date", "speed", "rpm"])
    x = list(range(len(df)))
    fig = go.Figure()
    fig.add_trace(go.Scatter(x=x, y=df["speed"], mode="lines", name="Speed (km/h)", line=dict(color=color)))
    fig.add_trace(go.Scatter(x=x, y=df["rpm"], mode="lines", name="RPM", line=dict(color=RPM_COLOR), yaxis="y2"))
    fig.update_layout(
        template=TEMPLATE,
        height=220,
        hovermode="x unified",
        xaxis=dict(title="Sample", showticklabels=False),
        yaxis=dict(title="Speed"),
        yaxis2=dict(title="RPM", overlaying="y", side="right"),
        margin=dict(l=40, r=40, t=20, b=30),
        legend=dict(orientation="h", yanchor="bottom", y=1.02, xanchor="right", x=1),
    )
    return fig
