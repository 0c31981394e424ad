"""
Unit tests for the Plotly figure builders.
"""
from f1pitstop.app.charts.driver_charts import lap_figure, pit_stop_figure, position_figure, telemetry_figure
from f1pitstop.app.charts.session_charts import (
    TEMPLATE,
    delta_figure,
    empty_figure,
    pace_figure,
    sector_figure,
    stints_figure,
)
from f1pitstop.processing.data_processing import stints_by_driver
from f1pitstop.processing.pace_analytics import delta_series, laps_frame, pace_series, sector_series


def _annotation(fig) -> str:
    return fig.layout.annotations[0].text


class TestEmptyFigures:
    def test_empty_figure_carries_message(self):
        fig = empty_figure("Nothing here.")
        assert _annotation(fig) == "Nothing here."
        assert len(fig.data) == 0

    def test_builders_handle_no_data(self):
        assert _annotation(stints_figure({})) == "No stint data."
        assert _annotation(lap_figure([], "#fff")) == "No lap data."
        assert _annotation(pit_stop_figure([], "#fff")) == "No pit stop data."
        assert _annotation(position_figure([], "#fff")) == "No position data."
        assert _annotation(telemetry_figure([], "#fff")) == "No telemetry data."
        assert _annotation(sector_figure({"series": []}, 1)) == "Select drivers to compare sectors."
        assert _annotation(pace_figure({"series": []})) == "Select drivers to compare pace."
        assert _annotation(delta_figure(None)) == "Select exactly two drivers to see the lap delta."

    def test_position_without_position_column(self):
        assert _annotation(position_figure([{"date": "2025-05-25T13:00:00+00:00"}], "#fff")) == "No position data."


class TestStintsFigure:
    def test_one_bar_per_stint_and_one_legend_per_compound(self, sample_stints, sample_drivers):
        fig = stints_figure(stints_by_driver(sample_stints), sample_drivers, total_laps=78)
        assert len(fig.data) == 3
        assert [t.name for t in fig.data if t.showlegend] == ["MEDIUM", "HARD", "SOFT"]
        assert fig.layout.template.layout.paper_bgcolor is not None

    def test_bar_starts_at_lap_start(self, sample_stints):
        fig = stints_figure(stints_by_driver(sample_stints))
        hard = next(t for t in fig.data if t.name == "HARD")
        assert list(hard.base) == [30]
        assert list(hard.x) == [48]

    def test_rows_ordered_by_position(self, sample_stints, sample_drivers):
        drivers = [{**sample_drivers[0], "position": 2}, {**sample_drivers[1], "position": 1}]
        fig = stints_figure(stints_by_driver(sample_stints), drivers)
        assert fig.data[0].y[0] == "L. HAM"
        assert fig.layout.yaxis.autorange == "reversed"


class TestPaceFigures:
    def test_sector_figure_adds_average_trace(self, sample_laps):
        data = sector_series(laps_frame(sample_laps), 2, [1, 44])
        fig = sector_figure(data, 2)
        assert len(fig.data) == 3
        assert fig.data[-1].line.dash == "dash"
        assert fig.layout.title.text == "Sector 2"

    def test_pace_figure_one_trace_per_driver(self, sample_laps):
        fig = pace_figure(pace_series(laps_frame(sample_laps), [1, 16, 44]))
        assert [t.name for t in fig.data] == ["#1", "#16", "#44"]

    def test_delta_figure(self, sample_laps):
        fig = delta_figure(delta_series(laps_frame(sample_laps), [1, 44]))
        assert len(fig.data) == 1
        assert list(fig.data[0].y[:2]) == [-0.5, -0.5]


class TestDriverFigures:
    def test_lap_figure_sorted_by_lap(self):
        fig = lap_figure([{"lap_number": 2, "lap_duration": 80.1}, {"lap_number": 1, "lap_duration": 90.0}], "#f00")
        assert list(fig.data[0].x) == [1, 2]

    def test_position_figure_reversed_axis_uses_laps(self):
        fig = position_figure([{"lap_number": 1, "position": 3}, {"lap_number": 2, "position": 1}], "#f00")
        assert list(fig.data[0].y) == [3, 1]
        assert fig.layout.yaxis.autorange == "reversed"

    def test_telemetry_capped_with_rpm_axis(self):
        samples = [{"date": i, "speed": 200 + i % 50, "rpm": 10000 + i} for i in range(500)]
        fig = telemetry_figure(samples, "#f00")
        assert len(fig.data[0].y) == 300
        assert fig.data[1].yaxis == "y2"

    def test_pit_stop_missing_duration_is_zero(self):
        fig = pit_stop_figure([{"lap_number": 20, "pit_duration": None}], "#f00")
        assert list(fig.data[0].y) == [0]


def test_template_is_dark():
    assert TEMPLATE == "plotly_dark"
