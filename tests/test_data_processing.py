"""
Unit tests for OpenF1 record reshaping.
"""
import copy

from f1pitstop.processing.data_processing import (
    clean_race_results,
    dedupe_by_driver_number,
    driver_standings,
    enrich_results,
    filter_drivers,
    find_driver,
    find_event,
    get_latest_event,
    get_latest_positions_for_drivers,
    get_latest_session_from_positions,
    get_older_events,
    merge_drivers_with_positions,
    podium_order,
    process_sessions_data,
    session_driver_grid,
    session_driver_rows,
    sort_events_by_date,
    sort_sessions,
    stint_lap_count,
    stints_by_driver,
    total_laps_from_stints,
)


class TestEvents:
    def test_sorted_newest_first_missing_dates_last(self, sample_events):
        ordered = sort_events_by_date(sample_events)
        assert [e["meeting_key"] for e in ordered] == [1256, 1254, 1250, 1999]

    def test_non_list_input_gives_empty(self):
        assert sort_events_by_date(None) == []
        assert sort_events_by_date({"meeting_key": 1}) == []
        assert get_latest_event(None) is None

    def test_latest_and_older(self, sample_events):
        assert get_latest_event(sample_events)["meeting_key"] == 1256
        assert [e["meeting_key"] for e in get_older_events(sample_events)] == [1254, 1250, 1999]

    def test_input_not_mutated(self, sample_events):
        before = copy.deepcopy(sample_events)
        sort_events_by_date(sample_events)
        assert sample_events == before

    def test_find_event_accepts_string_key(self, sample_events):
        assert find_event(sample_events, "1254")["meeting_name"] == "Miami Grand Prix"
        assert find_event(sample_events, 42) is None


class TestPositions:
    def test_latest_session_is_newest_record_of_meeting(self, sample_positions):
        latest = get_latest_session_from_positions(sample_positions, 1256)
        assert latest["session_key"] == 9002
        assert latest["date"] == "2025-05-25T14:41:00+00:00"

    def test_latest_session_missing_input(self, sample_positions):
        assert get_latest_session_from_positions([], 1256) is None
        assert get_latest_session_from_positions(sample_positions, None) is None
        assert get_latest_session_from_positions(sample_positions, 1) is None

    def test_latest_positions_per_driver(self, sample_positions):
        latest = get_latest_positions_for_drivers(sample_positions, 9002)
        by_driver = {p["driver_number"]: p["position"] for p in latest}
        assert by_driver == {16: 1, 44: 4, 1: 2}

    def test_merge_sorts_by_position(self, sample_drivers, sample_positions):
        latest = get_latest_positions_for_drivers(sample_positions, 9002)
        merged = merge_drivers_with_positions(dedupe_by_driver_number(sample_drivers), latest)
        assert [(d["driver_number"], d["position"]) for d in merged] == [(16, 1), (1, 2), (44, 4)]

    def test_merge_drops_drivers_without_position(self, sample_drivers):
        merged = merge_drivers_with_positions(sample_drivers, [{"driver_number": 1, "position": 5}])
        assert [d["driver_number"] for d in merged] == [1]

    def test_merge_does_not_mutate_drivers(self, sample_drivers, sample_positions):
        before = copy.deepcopy(sample_drivers)
        merge_drivers_with_positions(sample_drivers, sample_positions)
        assert sample_drivers == before

    def test_merge_none_inputs(self, sample_drivers):
        assert merge_drivers_with_positions(None, []) == []
        assert merge_drivers_with_positions(sample_drivers, None) == []


class TestSessions:
    def test_start_and_final_positions(self, sample_positions):
        sessions = process_sessions_data(sample_positions)
        assert set(sessions) == {9001, 9002}

        practice = sessions[9001]["drivers"]
        assert practice[1]["startingPosition"] == 2
        assert practice[1]["finalPosition"] == 1
        assert practice[44]["startingPosition"] == 1
        assert practice[44]["finalPosition"] == 2

        race = sessions[9002]
        assert race["session_name"] == "Race"
        assert race["drivers"][1]["startingPosition"] == 3
        assert race["drivers"][1]["finalPosition"] == 2
        assert race["drivers"][1]["finalDate"] == "2025-05-25T14:40:00+00:00"

    def test_sessions_sorted_newest_first(self, sample_positions):
        ordered = sort_sessions(process_sessions_data(sample_positions))
        assert [s["session_key"] for s in ordered] == [9002, 9001]

    def test_driver_rows_ordered_by_final_position(self, sample_positions):
        race = process_sessions_data(sample_positions)[9002]
        assert [d["driver_number"] for d in session_driver_rows(race)] == [16, 1, 44]

    def test_mixed_number_types_are_one_driver(self):
        positions = [
            {"session_key": 9002, "driver_number": 44, "position": 5, "date": "2025-05-25T13:00:00+00:00"},
            {"session_key": "9002", "driver_number": "44", "position": 3, "date": "2025-05-25T14:00:00+00:00"},
        ]
        sessions = process_sessions_data(positions)
        assert list(sessions) == [9002]
        driver = sessions[9002]["drivers"][44]
        assert (driver["startingPosition"], driver["finalPosition"]) == (5, 3)
        assert list(sessions[9002]["drivers"]) == [44]

    def test_non_list_positions(self):
        assert process_sessions_data(None) == {}
        assert sort_sessions({}) == []
        assert session_driver_rows({}) == []


class TestStints:
    def test_grouped_and_sorted_by_lap_start(self, sample_stints):
        grouped = stints_by_driver(sample_stints)
        assert [s["compound"] for s in grouped[1]] == ["MEDIUM", "HARD"]
        assert len(grouped[44]) == 1

    def test_mixed_number_types_grouped_together(self):
        stints = [
            {"driver_number": "44", "stint_number": 2, "lap_start": 30, "lap_end": 78},
            {"driver_number": 44, "stint_number": 1, "lap_start": 1, "lap_end": 29},
        ]
        grouped = stints_by_driver(stints)
        assert list(grouped) == [44]
        assert [s["stint_number"] for s in grouped[44]] == [1, 2]

    def test_lap_count_inclusive(self, sample_stints):
        assert stint_lap_count(sample_stints[0]) == 48
        assert stint_lap_count(sample_stints[1]) == 30

    def test_missing_lap_end_is_zero_width(self, sample_stints):
        assert stint_lap_count(sample_stints[2]) == 0
        assert stint_lap_count({}) == 0

    def test_total_laps(self, sample_stints):
        assert total_laps_from_stints(sample_stints) == 78
        assert total_laps_from_stints([], default=71) == 71


class TestDriversAndResults:
    def test_dedupe_keeps_first_across_types(self, sample_drivers):
        unique = dedupe_by_driver_number(sample_drivers)
        assert [d["driver_number"] for d in unique] == [1, 44, 16]
        assert unique[1]["headshot_url"] == "https://example.org/ham.png"

    def test_session_grid_sorted_by_number(self, sample_drivers):
        assert [d["driver_number"] for d in session_driver_grid(sample_drivers)] == [1, 16, 44]

    def test_clean_results_deduped_and_sorted(self, sample_results):
        cleaned = clean_race_results(sample_results)
        assert [r["driver_number"] for r in cleaned] == [16, 44, 1, 81]

    def test_podium_order(self, sample_results):
        podium = podium_order(clean_race_results(sample_results))
        assert [r["position"] for r in podium] == [2, 1, 3]

    def test_podium_order_short_field(self):
        assert [r["position"] for r in podium_order([{"position": 1}, {"position": 2}])] == [2, 1]
        assert podium_order([]) == []

    def test_filter_by_team_name_and_number(self, sample_drivers):
        drivers = dedupe_by_driver_number(sample_drivers)
        assert [d["driver_number"] for d in filter_drivers(drivers, "ferrari")] == [44, 16]
        assert [d["driver_number"] for d in filter_drivers(drivers, "  VERSTAPPEN ")] == [1]
        assert [d["driver_number"] for d in filter_drivers(drivers, "16")] == [16]
        assert filter_drivers(drivers, "") == drivers

    def test_find_driver_compares_as_strings(self, sample_drivers):
        assert find_driver(sample_drivers, "16")["full_name"] == "Charles LECLERC"
        assert find_driver(sample_drivers, 99) == {}

    def test_enrich_results_fallbacks(self, sample_results, sample_drivers):
        enriched = enrich_results(clean_race_results(sample_results), sample_drivers)
        assert enriched[0]["full_name"] == "Charles LECLERC"
        assert enriched[0]["team_colour"] == "E8002D"
        assert enriched[-1]["full_name"] == "Driver #81"
        assert enriched[-1]["team_name"] == "Unknown Team"


class TestStandings:
    def test_latest_record_per_driver_sorted(self, sample_positions):
        race = [p for p in sample_positions if p["session_key"] == 9002]
        assert [(p["driver_number"], p["position"]) for p in driver_standings(race)] == [(16, 1), (1, 2), (44, 4)]

    def test_empty(self):
        assert driver_standings(None) == []
