"""Tests for entries, exits, visit durations and latency."""

import numpy as np
import pandas as pd
import pytest

from ethozones import UNCLASSIFIED, InputError
from ethozones.metrics import (
    Visit,
    detect_visits,
    zone_entries,
    zone_exits,
    zone_latency,
    zone_presence,
    zone_visits,
)
from ethozones.metrics.visits import ENTRY_COLUMNS

OUT = UNCLASSIFIED


def _labels(pattern, zone="A"):
    return [zone if flag else OUT for flag in pattern]


class TestDetectVisits:
    def test_entries_and_exits(self):
        visits = detect_visits(
            np.arange(9), np.array([0, 0, 1, 1, 1, 0, 1, 1, 0], dtype=bool), 1.0, "A"
        )
        assert visits == [Visit("A", 2, 5, 3, 3.0), Visit("A", 6, 8, 2, 2.0)]

    def test_in_zone_at_start_counts_as_entry(self):
        visits = detect_visits(np.arange(3), np.array([1, 1, 0], dtype=bool), 2.0, "A")
        assert visits == [Visit("A", 0, 2, 2, 1.0)]

    def test_in_zone_at_end_gets_synthetic_exit(self):
        frames = np.array([10, 11, 12])
        visits = detect_visits(frames, np.array([0, 1, 1], dtype=bool), 1.0, "A")
        assert visits == [Visit("A", 11, 13, 2, 2.0)]

    def test_entry_frames_follow_frame_numbers(self):
        frames = np.array([0, 1, 5, 6])
        visits = detect_visits(frames, np.array([0, 1, 1, 0], dtype=bool), 1.0, "A")
        assert visits[0].entry_frame == 1
        assert visits[0].exit_frame == 6

    def test_never_in_zone(self):
        assert detect_visits(np.arange(4), np.zeros(4, dtype=bool), 1.0, "A") == []


class TestZonePresence:
    def test_collapses_overlapping_records(self):
        records = pd.DataFrame(
            {
                "frame": [0, 0, 1, 2],
                "body_part": "nose",
                "zone_id": ["A", "B", "B", "A"],
            }
        )
        frames, in_zone = zone_presence(records, "A")
        np.testing.assert_array_equal(frames, [0, 1, 2])
        np.testing.assert_array_equal(in_zone, [True, False, True])


class TestZoneVisits:
    def test_counts_and_durations(self, make_records):
        records = make_records(_labels([0, 0, 1, 1, 1, 0, 1, 1, 0]))
        summary = zone_visits(records, "A", fps=1)
        assert summary.n_entries == 2
        assert summary.mean_duration == pytest.approx(2.5)
        assert summary.total_time == pytest.approx(5.0)
        assert [v.n_frames for v in summary.visits] == [3, 2]

    def test_min_duration_drops_short_visits(self, make_records):
        records = make_records(_labels([0, 0, 1, 1, 1, 0, 1, 1, 0]))
        summary = zone_visits(records, "A", fps=1, min_duration=3)
        assert summary.n_entries == 1
        assert summary.total_time == pytest.approx(3.0)
        assert summary.mean_duration == pytest.approx(3.0)

    def test_dropped_visits_are_not_merged(self, make_records):
        records = make_records(_labels([1, 1, 0, 1, 1]))
        summary = zone_visits(records, "A", fps=1, min_duration=2)
        assert summary.n_entries == 2
        assert summary.total_time == pytest.approx(4.0)

    def test_latency_ignores_min_duration(self, make_records):
        records = make_records(_labels([0, 0, 1, 0, 0, 1, 1, 1, 1, 1]))
        for min_duration in (0.0, 0.1, 10.0):
            summary = zone_visits(records, "A", fps=25, min_duration=min_duration)
            assert summary.latency_seconds == pytest.approx(0.08)
            assert summary.first_entry_frame == 2
        assert zone_visits(records, "A", fps=25, min_duration=0.1).n_entries == 1

    def test_latency_uses_frame_numbers(self, make_records):
        records = make_records(_labels([0, 1]), start_frame=50)
        summary = zone_visits(records, "A", fps=10)
        assert summary.first_entry_frame == 51
        assert summary.latency_seconds == pytest.approx(5.1)

    def test_duration_counts_classified_frames(self):
        records = pd.DataFrame(
            {"frame": [0, 1, 2, 6], "body_part": "nose", "zone_id": [OUT, "A", "A", OUT]}
        )
        (visit,) = zone_visits(records, "A", fps=1).visits
        assert (visit.entry_frame, visit.exit_frame) == (1, 6)
        assert visit.n_frames == 2
        assert visit.duration == pytest.approx(2.0)

    def test_never_entered(self, make_records):
        summary = zone_visits(make_records(_labels([0, 0, 0])), "A", fps=1)
        assert summary.n_entries == 0
        assert summary.mean_duration is None
        assert summary.total_time == 0.0
        assert summary.latency_seconds is None
        assert summary.first_entry_frame is None

    def test_whole_recording_in_zone(self, make_records):
        summary = zone_visits(make_records(_labels([1, 1, 1, 1])), "A", fps=2)
        assert summary.n_entries == 1
        assert summary.visits[0].exit_frame == 4
        assert summary.total_time == pytest.approx(2.0)
        assert summary.latency_seconds == 0.0

    def test_to_dict(self, make_records):
        row = zone_visits(make_records(_labels([0, 1])), "A", fps=1).to_dict()
        assert row == {
            "body_part": "nose",
            "zone_id": "A",
            "n_entries": 1,
            "mean_duration": 1.0,
            "total_time": 1.0,
            "latency_seconds": 1.0,
            "first_entry_frame": 1,
        }

    def test_body_part_selection(self, make_records):
        records = pd.concat(
            [make_records(_labels([1, 0]), "nose"), make_records(_labels([0, 1]), "tail")],
            ignore_index=True,
        )
        assert zone_visits(records, "A", fps=1, body_part="tail").first_entry_frame == 1
        with pytest.raises(InputError, match=r"\[E2105\]"):
            zone_visits(records, "A", fps=1)

    def test_unknown_zone(self, make_records):
        with pytest.raises(InputError, match=r"\[E2101\].*'B'"):
            zone_visits(make_records(["A"]), "B", fps=1, zone_ids=["A"])

    def test_unknown_zone_without_zone_ids_is_never_entered(self, make_records):
        assert zone_visits(make_records(["A"]), "B", fps=1).n_entries == 0

    def test_negative_min_duration(self, make_records):
        with pytest.raises(InputError, match=r"\[E2103\]"):
            zone_visits(make_records(["A"]), "A", fps=1, min_duration=-1)

    def test_invalid_fps(self, make_records):
        with pytest.raises(InputError, match=r"\[E2102\]"):
            zone_visits(make_records(["A"]), "A", fps=0)

    def test_empty_table(self, make_records):
        summary = zone_visits(make_records([]), "A", fps=1)
        assert summary.body_part is None
        assert summary.n_entries == 0


class TestZoneEntries:
    def test_table(self, make_records):
        records = pd.concat(
            [
                make_records(["A", "A", "B", "A", OUT], "nose"),
                make_records(["B", "B", "B", "B", "B"], "tail"),
            ],
            ignore_index=True,
        )
        entries = zone_entries(records, fps=1)
        assert list(entries.columns) == ENTRY_COLUMNS
        assert entries[["body_part", "zone_id", "n_entries"]].values.tolist() == [
            ["nose", "A", 2],
            ["nose", "B", 1],
            ["tail", "B", 1],
        ]
        assert entries["total_time"].tolist() == [3.0, 1.0, 5.0]

    def test_zones_without_valid_visits_are_omitted(self, make_records):
        records = make_records(["A", "A", "A", "B", OUT])
        entries = zone_entries(records, fps=1, min_duration=2)
        assert entries["zone_id"].tolist() == ["A"]

    def test_requested_zones(self, make_records):
        records = make_records(["A", "B", "C"])
        entries = zone_entries(records, fps=1, zone_ids=["C", "A", "D"])
        assert entries["zone_id"].tolist() == ["C", "A"]

    def test_empty(self, make_records):
        entries = zone_entries(make_records([]), fps=1)
        assert entries.empty
        assert list(entries.columns) == ENTRY_COLUMNS


class TestZoneExits:
    def test_counts_observed_exits_only(self, make_records):
        records = make_records(["A", "A", OUT, "A", OUT, "A"])
        exits = zone_exits(records)
        assert exits["zone_id"].tolist() == ["A"]
        assert exits["n_exits"].tolist() == [2]

    def test_zone_never_left(self, make_records):
        exits = zone_exits(make_records([OUT, "A", "A"]))
        assert exits["n_exits"].tolist() == [0]

    def test_requested_zones(self, make_records):
        exits = zone_exits(make_records(["A", OUT]), zone_ids=["A", "B"])
        assert exits[["zone_id", "n_exits"]].values.tolist() == [["A", 1], ["B", 0]]


class TestZoneLatency:
    def test_never_entered_zone_is_missing(self, make_records):
        records = make_records([OUT, OUT, "A", "B"])
        latency = zone_latency(records, fps=25, zone_ids=["A", "B", "C"])
        assert latency["zone_id"].tolist() == ["A", "B", "C"]
        np.testing.assert_allclose(latency["latency_seconds"][:2], [0.08, 0.12])
        assert np.isnan(latency["latency_seconds"][2])
        assert latency["first_entry_frame"].dtype == "Int64"
        assert latency["first_entry_frame"].isna().tolist() == [False, False, True]
        assert latency["first_entry_frame"][0] == 2

    def test_defaults_to_zones_present(self, make_records):
        latency = zone_latency(make_records(["B", "A", OUT]), fps=1)
        assert latency["zone_id"].tolist() == ["A", "B"]
        assert latency["latency_seconds"].tolist() == [1.0, 0.0]

    def test_per_body_part(self, make_records):
        records = pd.concat(
            [make_records(["A"], "nose"), make_records([OUT, "A"], "tail")],
            ignore_index=True,
        )
        latency = zone_latency(records, fps=1)
        assert latency[["body_part", "latency_seconds"]].values.tolist() == [
            ["nose", 0.0],
            ["tail", 1.0],
        ]
