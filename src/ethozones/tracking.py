"""Tracking samples: the positional input of every analysis.

Samples are produced upstream (pose estimation export, tracking software,
preprocessing) and are treated as read-only here. They can be passed either
as an iterable of :class:`TrackingSample` or as a :class:`pandas.DataFrame`
with the same column names. Missing coordinates are NaN (or None).
"""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Union

import numpy as np
import pandas as pd
from numpy.typing import NDArray

from ethozones._errors import InputError

REQUIRED_TRACKING_COLUMNS = ("frame", "body_part", "x", "y")
OPTIONAL_TRACKING_COLUMNS = ("timestamp", "confidence")


@dataclass(frozen=True)
class TrackingSample:
    """One tracked point of one body part in one frame.

    Attributes
    ----------
    frame : int
        Frame index.
    timestamp : float or None
        Time of the frame in seconds, if known.
    body_part : str
        Tracked point identifier (``"nose"``, ``"center"``, ...).
    x, y : float or None
        Position in arena coordinates; None or NaN when tracking failed.
    confidence : float or None
        Tracker likelihood for the point, if available.
    """

    frame: int
    timestamp: float | None
    body_part: str
    x: float | None
    y: float | None
    confidence: float | None = None


TrackingInput = Union[pd.DataFrame, Iterable[Union[TrackingSample, Mapping[str, Any]]]]


def _records(samples: Iterable[Any]) -> list[dict[str, Any]]:
    records = []
    for sample in samples:
        if isinstance(sample, TrackingSample):
            records.append(dataclasses.asdict(sample))
        elif isinstance(sample, Mapping):
            records.append(dict(sample))
        else:
            raise InputError(
                f"Expected TrackingSample or mapping entries, got {type(sample).__name__}.",
                code="E2104",
                how="Pass a pandas DataFrame or a list of TrackingSample.",
            )
    return records


def tracking_frame(samples: TrackingInput) -> pd.DataFrame:
    """Normalize tracking input into a DataFrame.

    Parameters
    ----------
    samples : DataFrame or iterable of TrackingSample
        Tracking stream with at least ``frame``, ``body_part``, ``x`` and
        ``y``. ``timestamp`` and ``confidence`` are kept when present.

    Returns
    -------
    pd.DataFrame
        New frame with integer ``frame``, string ``body_part`` and float
        ``x``/``y`` (NaN for missing) plus any optional columns. The input is
        not modified.

    Raises
    ------
    InputError
        If required columns are missing or values cannot be converted.

    Examples
    --------
    >>> df = tracking_frame([
    ...     TrackingSample(0, 0.0, "nose", 1.0, 2.0),
    ...     TrackingSample(1, 0.04, "nose", None, None),
    ... ])
    >>> df["x"].isna().tolist()
    [False, True]
    """
    if isinstance(samples, pd.DataFrame):
        source = samples
    else:
        source = pd.DataFrame.from_records(
            _records(samples),
            columns=[
                "frame", "timestamp", "body_part", "x", "y", "confidence",
            ],
        )
        # TrackingSample always carries the optional fields; keep them only
        # when some record has a value.
        source = source.drop(
            columns=[col for col in OPTIONAL_TRACKING_COLUMNS if source[col].isna().all()]
        )

    missing = [col for col in REQUIRED_TRACKING_COLUMNS if col not in source.columns]
    if missing:
        raise InputError(
            f"Tracking data is missing required columns: {missing}.",
            code="E2104",
            why="Classification needs a frame index, a body part and x/y per sample.",
            how=f"Available columns: {list(source.columns)}.",
        )

    columns = list(REQUIRED_TRACKING_COLUMNS) + [
        col for col in OPTIONAL_TRACKING_COLUMNS if col in source.columns
    ]
    df = source.loc[:, columns].copy()
    try:
        for col in ("x", "y", *[c for c in OPTIONAL_TRACKING_COLUMNS if c in df]):
            df[col] = pd.to_numeric(df[col], errors="raise").astype(np.float64)
        frames = pd.to_numeric(df["frame"], errors="raise")
    except (TypeError, ValueError) as exc:
        raise InputError(
            f"Tracking data contains non-numeric values: {exc}.",
            code="E2104",
            how="Use NaN, not text markers, for missing coordinates.",
        ) from None

    if frames.isna().any():
        raise InputError(
            "Tracking data has samples without a frame index.",
            code="E2104",
        )
    if not np.all(np.mod(frames.to_numpy(dtype=np.float64), 1) == 0):
        raise InputError("Frame indices must be whole numbers.", code="E2104")
    df["frame"] = frames.astype(np.int64)
    if df["body_part"].isna().any():
        raise InputError(
            "Tracking data has samples without a body part label.",
            code="E2104",
            how="Label every sample, or drop unlabeled rows before classifying.",
        )
    df["body_part"] = df["body_part"].astype(str)
    return df.reset_index(drop=True)


def valid_sample_mask(
    df: pd.DataFrame, min_confidence: float | None = None
) -> NDArray[np.bool_]:
    """Samples with usable coordinates.

    A sample is valid when both coordinates are finite and, if
    ``min_confidence`` is given, its confidence is at least that value.
    Samples without a confidence value fail the confidence test.

    Raises
    ------
    InputError
        If ``min_confidence`` is negative or NaN, or is given for data
        without a ``confidence`` column.
    """
    valid = np.isfinite(df["x"].to_numpy()) & np.isfinite(df["y"].to_numpy())
    if min_confidence is None:
        return valid
    try:
        threshold = float(min_confidence)
    except (TypeError, ValueError):
        threshold = float("nan")
    if not threshold >= 0:
        raise InputError(
            f"min_confidence must be non-negative, got {min_confidence}.",
            code="E2103",
        )
    if "confidence" not in df:
        raise InputError(
            "min_confidence was given but the tracking data has no 'confidence' column.",
            code="E2104",
            how="Drop min_confidence or include tracker likelihoods as 'confidence'.",
        )
    confidence = df["confidence"].to_numpy(dtype=np.float64)
    with np.errstate(invalid="ignore"):
        return valid & (confidence >= threshold)
