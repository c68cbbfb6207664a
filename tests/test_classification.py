"""Tests for classification of tracking samples against zones."""

import logging

import numpy as np
import pandas as pd
import pytest

from ethozones import UNCLASSIFIED, Arena, InputError, TrackingSample, classify
from ethozones.arena import RectangleGeometry
from ethozones.classification import (
    CLASSIFICATION_COLUMNS,
    body_parts,
    select_body_part,
    validate_classification,
)


class TestClassify:
    def test_overlapping_zones_give_one_record_each(
        self, open_field_arena, diagonal_samples
    ):
        records = classify(diagonal_samples, open_field_arena)
        assert list(records.columns) == CLASSIFICATION_COLUMNS
        by_frame = records.groupby("frame")["zone_id"].apply(list).to_dict()
        assert by_frame == {
            0: ["arena"],
            1: ["arena", "center"],
            2: ["arena", "center"],
            3: ["arena", "center"],
            4: ["arena", "object"],
            5: ["arena"],
            7: ["arena", "center"],
        }

    def test_missing_coordinates_produce_no_record(
        self, open_field_arena, diagonal_samples
    ):
        records = classify(diagonal_samples, open_field_arena)
        assert 6 not in set(records["frame"])

    def test_outside_every_zone_is_unclassified(self, split_arena):
        samples = [
            TrackingSample(0, None, "nose", 25.0, 50.0),
            TrackingSample(1, None, "nose", 150.0, 50.0),
            TrackingSample(2, None, "nose", 75.0, 50.0),
        ]
        records = classify(samples, split_arena)
        assert records["zone_id"].tolist() == ["left", UNCLASSIFIED, "right"]

    def test_shared_edge_belongs_to_one_zone(self, split_arena):
        samples = pd.DataFrame(
            {"frame": [0], "body_part": ["nose"], "x": [50.0], "y": [50.0]}
        )
        assert classify(samples, split_arena)["zone_id"].tolist() == ["right"]

    def test_zero_zones_classify_everything_unclassified(self, diagonal_samples):
        records = classify(diagonal_samples, Arena())
        assert len(records) == 7
        assert set(records["zone_id"]) == {UNCLASSIFIED}

    def test_sorted_by_body_part_then_frame(self, split_arena):
        samples = pd.DataFrame(
            {
                "frame": [1, 0, 1, 0],
                "body_part": ["tail", "tail", "nose", "nose"],
                "x": [10.0, 60.0, 10.0, 60.0],
                "y": [10.0, 10.0, 10.0, 10.0],
            }
        )
        records = classify(samples, split_arena)
        assert records[["body_part", "frame"]].values.tolist() == [
            ["nose", 0],
            ["nose", 1],
            ["tail", 0],
            ["tail", 1],
        ]

    def test_mapping_of_geometries(self):
        zones = {"a": RectangleGeometry(0, 0, 1, 1), "b": RectangleGeometry(0, 0, 2, 2)}
        samples = pd.DataFrame(
            {"frame": [0], "body_part": ["nose"], "x": [0.5], "y": [0.5]}
        )
        assert classify(samples, zones)["zone_id"].tolist() == ["a", "b"]

    def test_body_part_filter(self, open_field_arena):
        samples = pd.DataFrame(
            {
                "frame": [0, 0],
                "body_part": ["nose", "tail"],
                "x": [50.0, 5.0],
                "y": [50.0, 5.0],
            }
        )
        records = classify(samples, open_field_arena, body_part="tail")
        assert set(records["body_part"]) == {"tail"}

    def test_unknown_body_part(self, open_field_arena, diagonal_samples):
        with pytest.raises(InputError, match=r"\[E2105\].*'paw'"):
            classify(diagonal_samples, open_field_arena, body_part="paw")

    def test_duplicate_samples(self, open_field_arena):
        samples = pd.DataFrame(
            {"frame": [0, 0], "body_part": ["nose", "nose"], "x": [1.0, 2.0], "y": [1.0, 2.0]}
        )
        with pytest.raises(InputError, match=r"\[E2106\]"):
            classify(samples, open_field_arena)

    def test_duplicate_with_missing_coordinates_is_ignored(self, open_field_arena):
        samples = pd.DataFrame(
            {
                "frame": [0, 0],
                "body_part": ["nose", "nose"],
                "x": [1.0, np.nan],
                "y": [1.0, np.nan],
            }
        )
        assert len(classify(samples, open_field_arena)) == 1

    def test_min_confidence(self, split_arena):
        samples = pd.DataFrame(
            {
                "frame": [0, 1],
                "body_part": "nose",
                "x": [10.0, 60.0],
                "y": [10.0, 10.0],
                "confidence": [0.95, 0.3],
            }
        )
        records = classify(samples, split_arena, min_confidence=0.5)
        assert records["frame"].tolist() == [0]

    def test_min_confidence_needs_confidence_values(self, split_arena):
        samples = [
            TrackingSample(0, 0.0, "nose", 10.0, 10.0),
            TrackingSample(1, 0.04, "nose", 60.0, 10.0),
        ]
        with pytest.raises(InputError, match=r"\[E2104\].*no 'confidence' column"):
            classify(samples, split_arena, min_confidence=0.5)

    def test_sample_confidence_is_used_when_given(self, split_arena):
        samples = [
            TrackingSample(0, 0.0, "nose", 10.0, 10.0, 0.9),
            TrackingSample(1, 0.04, "nose", 60.0, 10.0),
        ]
        records = classify(samples, split_arena, min_confidence=0.5)
        assert records["frame"].tolist() == [0]

    def test_unlabeled_body_part(self, split_arena):
        samples = pd.DataFrame(
            {"frame": [0, 1], "body_part": [None, "nose"], "x": [10.0, 60.0], "y": [1.0, 1.0]}
        )
        with pytest.raises(InputError, match=r"\[E2104\].*body part"):
            classify(samples, split_arena)

    def test_injected_containment(self, split_arena):
        def nowhere(x, y, geometry):
            return np.zeros(np.shape(x), dtype=bool)

        samples = pd.DataFrame(
            {"frame": [0, 1], "body_part": "nose", "x": [10.0, 60.0], "y": [1.0, 1.0]}
        )
        records = classify(samples, split_arena, containment=nowhere)
        assert records["zone_id"].tolist() == [UNCLASSIFIED, UNCLASSIFIED]

    def test_no_valid_samples(self, split_arena):
        samples = pd.DataFrame(
            {"frame": [0], "body_part": ["nose"], "x": [np.nan], "y": [np.nan]}
        )
        records = classify(samples, split_arena)
        assert records.empty
        assert list(records.columns) == CLASSIFICATION_COLUMNS

    def test_reserved_zone_id(self):
        zones = {UNCLASSIFIED: RectangleGeometry(0, 0, 1, 1)}
        samples = pd.DataFrame(
            {"frame": [0], "body_part": ["nose"], "x": [0.5], "y": [0.5]}
        )
        with pytest.raises(InputError, match="reserved"):
            classify(samples, zones)

    def test_not_zones(self, diagonal_samples):
        with pytest.raises(TypeError, match="Arena"):
            classify(diagonal_samples, [RectangleGeometry(0, 0, 1, 1)])

    def test_dropped_samples_are_logged(self, split_arena, caplog):
        samples = pd.DataFrame(
            {"frame": [0, 1], "body_part": "nose", "x": [10.0, np.nan], "y": [1.0, 1.0]}
        )
        with caplog.at_level(logging.DEBUG, logger="ethozones"):
            classify(samples, split_arena)
        assert "Dropped 1 of 2 sample(s)" in caplog.text


class TestClassificationTables:
    def test_validate_requires_dataframe(self):
        with pytest.raises(TypeError, match="DataFrame"):
            validate_classification([{"frame": 0}])

    def test_validate_requires_columns(self):
        with pytest.raises(InputError, match=r"\[E2104\].*zone_id"):
            validate_classification(pd.DataFrame({"frame": [0], "body_part": ["a"]}))

    def test_body_parts_sorted(self, make_records):
        records = pd.concat([make_records(["a"], "tail"), make_records(["a"], "nose")])
        assert body_parts(records) == ["nose", "tail"]

    def test_select_single_body_part(self, make_records):
        body_part, subset = select_body_part(make_records(["a", "b"]), None)
        assert body_part == "nose"
        assert len(subset) == 2

    def test_select_requires_choice_with_several(self, make_records):
        records = pd.concat([make_records(["a"], "tail"), make_records(["a"], "nose")])
        with pytest.raises(InputError, match=r"\[E2105\].*several"):
            select_body_part(records, None)

    def test_select_unknown(self, make_records):
        with pytest.raises(InputError, match=r"\[E2105\]"):
            select_body_part(make_records(["a"]), "tail")

    def test_select_empty(self, make_records):
        body_part, subset = select_body_part(make_records([]), None)
        assert body_part is None
        assert subset.empty
