"""Time spent in each zone."""

from __future__ import annotations

import numpy as np
import pandas as pd

from ethozones._errors import validate_fps
from ethozones.classification import UNCLASSIFIED, validate_classification

OCCUPANCY_COLUMNS = ["body_part", "zone_id", "frame_count", "time_seconds", "percentage"]


def _empty_occupancy() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "body_part": pd.Series(dtype=object),
            "zone_id": pd.Series(dtype=object),
            "frame_count": pd.Series(dtype=np.int64),
            "time_seconds": pd.Series(dtype=np.float64),
            "percentage": pd.Series(dtype=np.float64),
        }
    )


def zone_occupancy(
    classifications: pd.DataFrame,
    fps: float,
    *,
    include_unclassified: bool = False,
) -> pd.DataFrame:
    """Frames, seconds and percentage of classified time per zone.

    Parameters
    ----------
    classifications : pd.DataFrame
        Output of :func:`ethozones.classify`.
    fps : float
        Recording frame rate (frames per second).
    include_unclassified : bool, default=False
        Also report time outside every zone as zone
        :data:`~ethozones.classification.UNCLASSIFIED`.

    Returns
    -------
    pd.DataFrame
        One row per (body_part, zone_id) with columns ``body_part``,
        ``zone_id``, ``frame_count``, ``time_seconds`` and ``percentage``,
        sorted by body part then zone id. Zones never occupied have no row.

    Raises
    ------
    InputError
        If ``fps`` is not positive or the table lacks required columns.

    Notes
    -----
    ``frame_count`` counts distinct frames. The percentage denominator is the
    number of distinct frames of that body part with any classification
    record, so frames with missing coordinates are excluded from it. Because
    a frame in two overlapping zones counts toward both, percentages of one
    body part can add up to more than 100. For zones that partition the
    arena they add up to exactly 100 when ``include_unclassified=True``.

    Examples
    --------
    >>> records = pd.DataFrame({
    ...     "frame": [0, 1, 1, 2],
    ...     "body_part": ["nose"] * 4,
    ...     "zone_id": ["center", "center", "object", "unclassified"],
    ... })
    >>> occupancy = zone_occupancy(records, fps=2)
    >>> occupancy["zone_id"].tolist(), occupancy["time_seconds"].tolist()
    (['center', 'object'], [1.0, 0.5])
    >>> occupancy["percentage"].round(1).tolist()
    [66.7, 33.3]
    """
    validate_classification(classifications)
    fps = validate_fps(fps)
    if len(classifications) == 0:
        return _empty_occupancy()

    totals = classifications.groupby("body_part")["frame"].nunique()

    data = classifications
    if not include_unclassified:
        data = data.loc[data["zone_id"] != UNCLASSIFIED]
    if len(data) == 0:
        return _empty_occupancy()

    occupancy = (
        data.groupby(["body_part", "zone_id"], sort=True)["frame"]
        .nunique()
        .rename("frame_count")
        .reset_index()
    )
    occupancy["frame_count"] = occupancy["frame_count"].astype(np.int64)
    occupancy["time_seconds"] = occupancy["frame_count"] / fps
    occupancy["percentage"] = (
        100.0 * occupancy["frame_count"] / occupancy["body_part"].map(totals)
    )
    return occupancy[OCCUPANCY_COLUMNS]
