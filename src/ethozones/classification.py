"""Classification of tracking samples against arena zones.

:func:`classify` turns a tracking stream into classification records, the
table every zone metric is computed from:

======== ===================================================================
column   meaning
======== ===================================================================
frame    frame index of the sample
body_part tracked point
zone_id  id of a zone containing the point, or :data:`UNCLASSIFIED`
x, y     the sample position
======== ===================================================================

A sample inside several overlapping zones yields one record per zone. A
sample inside no zone yields exactly one :data:`UNCLASSIFIED` record. Samples
with missing coordinates yield no record at all, so the number of distinct
classified frames (not the number of input samples) is the denominator for
every downstream percentage.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Union

import numpy as np
import pandas as pd
from numpy.typing import ArrayLike, NDArray

from ethozones._errors import InputError
from ethozones._logging import log_classification
from ethozones.arena.geometry import ZoneGeometry
from ethozones.ops.containment import point_in_zone
from ethozones.tracking import TrackingInput, tracking_frame, valid_sample_mask

if TYPE_CHECKING:
    from ethozones.arena.core import Arena

logger = logging.getLogger(__name__)

UNCLASSIFIED = "unclassified"
"""Zone label of a sample that lies in no zone."""

CLASSIFICATION_COLUMNS = ["frame", "body_part", "zone_id", "x", "y"]

ContainmentTest = Callable[[ArrayLike, ArrayLike, ZoneGeometry], NDArray[np.bool_]]
ZoneSource = Union["Arena", Mapping[str, ZoneGeometry]]


def zone_geometries(zones: ZoneSource) -> Mapping[str, ZoneGeometry]:
    """Resolved geometry per zone id from an Arena or a geometry mapping."""
    geometries = getattr(zones, "geometries", zones)
    if not isinstance(geometries, Mapping):
        raise TypeError(
            f"Expected an Arena or a mapping of zone geometries, got {type(zones).__name__}."
        )
    if UNCLASSIFIED in geometries:
        raise InputError(
            f"'{UNCLASSIFIED}' is reserved for samples outside every zone.",
            code="E2101",
            how="Rename the zone.",
        )
    return geometries


def empty_classification() -> pd.DataFrame:
    """Classification table with no rows and the standard columns."""
    return pd.DataFrame(
        {
            "frame": pd.Series(dtype=np.int64),
            "body_part": pd.Series(dtype=object),
            "zone_id": pd.Series(dtype=object),
            "x": pd.Series(dtype=np.float64),
            "y": pd.Series(dtype=np.float64),
        }
    )


def classify(
    samples: TrackingInput,
    zones: ZoneSource,
    *,
    body_part: str | None = None,
    min_confidence: float | None = None,
    containment: ContainmentTest = point_in_zone,
) -> pd.DataFrame:
    """Classify every tracking sample against every zone.

    Parameters
    ----------
    samples : DataFrame or iterable of TrackingSample
        Tracking stream, one sample per (frame, body part).
    zones : Arena or Mapping[str, ZoneGeometry]
        Resolved zones. Mapping order is the declaration order.
    body_part : str, optional
        Only classify this body part. Default: all body parts.
    min_confidence : float, optional
        Treat samples with lower tracker confidence as missing.
    containment : callable, default=point_in_zone
        ``containment(x, y, geometry) -> bool array``. Replace to change the
        containment rule.

    Returns
    -------
    pd.DataFrame
        Columns ``frame, body_part, zone_id, x, y``, sorted by body part then
        frame. Within a frame, zones appear in declaration order. A frame has
        either zone records or a single :data:`UNCLASSIFIED` record.

    Raises
    ------
    InputError
        If ``body_part`` is not in the data, a (frame, body part) pair occurs
        twice among valid samples, or the tracking table is malformed.

    See Also
    --------
    ethozones.metrics.zone_occupancy : Time and percentage per zone.
    ethozones.metrics.zone_visits : Entries, visit durations and latency.
    ethozones.metrics.zone_transitions : Counts of zone-to-zone moves.

    Examples
    --------
    >>> from ethozones.arena.geometry import RectangleGeometry
    >>> from ethozones.tracking import TrackingSample
    >>> zones = {
    ...     "left": RectangleGeometry(0, 0, 50, 100),
    ...     "right": RectangleGeometry(50, 0, 100, 100),
    ... }
    >>> samples = [
    ...     TrackingSample(0, 0.0, "center", 10.0, 10.0),
    ...     TrackingSample(1, 0.04, "center", 50.0, 10.0),
    ...     TrackingSample(2, 0.08, "center", 150.0, 10.0),
    ...     TrackingSample(3, 0.12, "center", None, None),
    ... ]
    >>> records = classify(samples, zones)
    >>> records["frame"].tolist()
    [0, 1, 1, 2]
    >>> records["zone_id"].tolist()
    ['left', 'left', 'right', 'unclassified']
    """
    geometries = zone_geometries(zones)
    df = tracking_frame(samples)

    if body_part is not None:
        if body_part not in set(df["body_part"]):
            raise InputError(
                f"Body part '{body_part}' not found in tracking data.",
                code="E2105",
                how=f"Available body parts: {sorted(set(df['body_part']))}.",
            )
        df = df.loc[df["body_part"] == body_part].reset_index(drop=True)

    n_samples = len(df)
    df = df.loc[valid_sample_mask(df, min_confidence)].reset_index(drop=True)

    duplicated = df.duplicated(subset=["frame", "body_part"])
    if duplicated.any():
        first = df.loc[duplicated].iloc[0]
        raise InputError(
            f"{int(duplicated.sum())} duplicate sample(s), e.g. frame {first['frame']} "
            f"of '{first['body_part']}'.",
            code="E2106",
            why="Each (frame, body part) must have one position.",
            how="Deduplicate or average the tracking data upstream.",
        )

    if len(df) == 0:
        log_classification(n_samples=n_samples, n_valid=0, n_records=0, n_unclassified=0)
        return empty_classification()

    x = df["x"].to_numpy()
    y = df["y"].to_numpy()
    zone_ids = list(geometries)
    membership = np.zeros((len(df), len(zone_ids)), dtype=bool)
    for column, zone_id in enumerate(zone_ids):
        membership[:, column] = np.asarray(
            containment(x, y, geometries[zone_id]), dtype=bool
        )

    # Row-major nonzero keeps zones of one sample in declaration order.
    sample_idx, zone_idx = np.nonzero(membership)
    unclassified_idx = np.flatnonzero(~membership.any(axis=1))

    labels = np.asarray(zone_ids + [UNCLASSIFIED], dtype=object)
    rows = np.concatenate([sample_idx, unclassified_idx])
    rank = np.concatenate([zone_idx, np.full(len(unclassified_idx), len(zone_ids))])

    records = pd.DataFrame(
        {
            "frame": df["frame"].to_numpy()[rows],
            "body_part": df["body_part"].to_numpy(dtype=object)[rows],
            "zone_id": labels[rank],
            "x": x[rows],
            "y": y[rows],
            "_rank": rank,
        }
    )
    records = (
        records.sort_values(["body_part", "frame", "_rank"], kind="mergesort")
        .drop(columns="_rank")
        .reset_index(drop=True)
    )

    log_classification(
        n_samples=n_samples,
        n_valid=len(df),
        n_records=len(records),
        n_unclassified=len(unclassified_idx),
    )
    return records[CLASSIFICATION_COLUMNS]


def validate_classification(classifications: pd.DataFrame) -> pd.DataFrame:
    """Check a classification table has the columns metrics rely on.

    Raises
    ------
    TypeError
        If ``classifications`` is not a DataFrame.
    InputError
        If ``frame``, ``body_part`` or ``zone_id`` is missing.
    """
    if not isinstance(classifications, pd.DataFrame):
        raise TypeError(
            f"Expected pd.DataFrame, got {type(classifications).__name__}.\n"
            "  HOW: Pass the output of ethozones.classify()."
        )
    missing = [
        col for col in ("frame", "body_part", "zone_id") if col not in classifications
    ]
    if missing:
        raise InputError(
            f"Classification table is missing columns: {missing}.",
            code="E2104",
            how="Pass the output of ethozones.classify().",
        )
    return classifications


def body_parts(classifications: pd.DataFrame) -> list[str]:
    """Body parts present in a classification table, sorted."""
    return sorted(pd.unique(classifications["body_part"]).tolist())


def select_body_part(
    classifications: pd.DataFrame, body_part: str | None
) -> tuple[str | None, pd.DataFrame]:
    """Restrict a classification table to one body part.

    With ``body_part=None`` the table must contain at most one body part,
    which is then selected.

    Raises
    ------
    InputError
        If ``body_part`` is absent, or is None while several are present.
    """
    present = body_parts(classifications)
    if body_part is None:
        if len(present) > 1:
            raise InputError(
                f"Classification table has several body parts: {present}.",
                code="E2105",
                how="Pass body_part= to choose one.",
            )
        body_part = present[0] if present else None
    elif body_part not in present:
        raise InputError(
            f"Body part '{body_part}' not found in classification table.",
            code="E2105",
            how=f"Available body parts: {present}.",
        )
    if body_part is None:
        return None, classifications.iloc[0:0]
    return body_part, classifications.loc[classifications["body_part"] == body_part]
