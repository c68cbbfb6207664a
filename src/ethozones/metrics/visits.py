"""Zone entries, exits, visit durations and latency.

For one body part and one zone, the classified frames form a boolean "in
zone" series. Entries are the 0 -> 1 edges of that series and exits the
1 -> 0 edges, with two boundary rules:

- a series that is True on its first frame has an entry on that frame;
- a series that is True on its last frame gets an exit one frame past the
  end, so every entry has a matching exit.

Each entry/exit pair is a :class:`Visit`. The ``min_duration`` filter drops
short visits from the entry count, mean duration and total time; dropped
visits are not merged into their neighbours. Latency is always taken from the
unfiltered series: a one-frame visit that is too short to count as an entry
still marks the first time the zone was reached.
"""

from __future__ import annotations

from collections.abc import Collection, Iterable
from dataclasses import dataclass, field
from typing import Any

import numpy as np
import pandas as pd
from numpy.typing import NDArray

from ethozones._errors import InputError, validate_fps, validate_min_duration
from ethozones.classification import (
    UNCLASSIFIED,
    body_parts,
    select_body_part,
    validate_classification,
)
from ethozones.ops.runs import true_runs

ENTRY_COLUMNS = ["body_part", "zone_id", "n_entries", "mean_duration", "total_time"]
EXIT_COLUMNS = ["body_part", "zone_id", "n_exits"]
LATENCY_COLUMNS = ["body_part", "zone_id", "latency_seconds", "first_entry_frame"]


@dataclass(frozen=True)
class Visit:
    """One uninterrupted stay in a zone.

    Attributes
    ----------
    zone_id : str
        Zone visited.
    entry_frame : int
        First frame inside the zone.
    exit_frame : int
        First classified frame outside the zone after the visit, or the last
        frame + 1 if the recording ends inside the zone.
    n_frames : int
        Number of classified frames in the visit.
    duration : float
        ``n_frames / fps`` in seconds. This equals
        ``(exit_frame - entry_frame) / fps`` only when the visit covers
        contiguous frames; frames dropped for missing coordinates are not
        counted.
    """

    zone_id: str
    entry_frame: int
    exit_frame: int
    n_frames: int
    duration: float


@dataclass(frozen=True)
class VisitSummary:
    """Entry and latency statistics of one zone for one body part.

    Attributes
    ----------
    zone_id : str
    body_part : str or None
        None when the classification table was empty.
    n_entries : int
        Visits lasting at least ``min_duration``.
    mean_duration : float or None
        Mean duration of those visits (seconds); None without visits.
    total_time : float
        Summed duration of those visits (seconds).
    latency_seconds : float or None
        First frame in the zone divided by fps, ignoring ``min_duration``;
        None if the zone was never occupied.
    first_entry_frame : int or None
        Frame of the first occupancy; None if never occupied.
    visits : tuple of Visit
        Visits that passed the duration filter.
    """

    zone_id: str
    body_part: str | None
    n_entries: int
    mean_duration: float | None
    total_time: float
    latency_seconds: float | None
    first_entry_frame: int | None
    visits: tuple[Visit, ...] = field(default=(), repr=False)

    def to_dict(self) -> dict[str, Any]:
        """Flat row without the individual visits."""
        return {
            "body_part": self.body_part,
            "zone_id": self.zone_id,
            "n_entries": self.n_entries,
            "mean_duration": self.mean_duration,
            "total_time": self.total_time,
            "latency_seconds": self.latency_seconds,
            "first_entry_frame": self.first_entry_frame,
        }


def zone_presence(
    classifications: pd.DataFrame, zone_id: str
) -> tuple[NDArray[np.int64], NDArray[np.bool_]]:
    """Per-frame "in zone" series of a single-body-part classification table.

    Returns
    -------
    frames : NDArray[np.int64]
        Distinct classified frames, ascending.
    in_zone : NDArray[np.bool_]
        True where the frame has a record for ``zone_id``. A zone match is
        binary per frame, so several records of one frame collapse.
    """
    frames = np.unique(classifications["frame"].to_numpy(dtype=np.int64))
    zone_frames = classifications.loc[classifications["zone_id"] == zone_id, "frame"]
    in_zone = np.isin(frames, zone_frames.to_numpy(dtype=np.int64))
    return frames, in_zone


def detect_visits(
    frames: NDArray[np.int64],
    in_zone: NDArray[np.bool_],
    fps: float,
    zone_id: str,
) -> list[Visit]:
    """Pair entries with exits in an "in zone" series.

    Parameters
    ----------
    frames : NDArray[np.int64], shape (n,)
        Frame index of every element of ``in_zone``.
    in_zone : NDArray[np.bool_], shape (n,)
        Zone membership per frame.
    fps : float
        Frame rate used to turn frame counts into seconds.
    zone_id : str
        Zone the series belongs to; copied into each visit.

    Returns
    -------
    list[Visit]
        All visits in time order, unfiltered.

    Examples
    --------
    >>> frames = np.arange(9)
    >>> in_zone = np.array([0, 0, 1, 1, 1, 0, 1, 1, 0], dtype=bool)
    >>> [(v.entry_frame, v.exit_frame, v.n_frames) for v in detect_visits(frames, in_zone, 1.0, "A")]
    [(2, 5, 3), (6, 8, 2)]
    """
    frames = np.asarray(frames, dtype=np.int64)
    starts, stops = true_runs(in_zone)
    n = len(frames)
    visits = []
    for start, stop in zip(starts, stops):
        exit_frame = frames[stop] if stop < n else frames[-1] + 1
        n_frames = int(stop - start)
        visits.append(
            Visit(
                zone_id=zone_id,
                entry_frame=int(frames[start]),
                exit_frame=int(exit_frame),
                n_frames=n_frames,
                duration=n_frames / fps,
            )
        )
    return visits


def _summarize(
    data: pd.DataFrame,
    body_part: str | None,
    zone_id: str,
    fps: float,
    min_duration: float,
) -> VisitSummary:
    frames, in_zone = zone_presence(data, zone_id)
    visits = [
        visit
        for visit in detect_visits(frames, in_zone, fps, zone_id)
        if visit.duration >= min_duration
    ]
    first_entry_frame = int(frames[in_zone][0]) if in_zone.any() else None
    durations = [visit.duration for visit in visits]
    return VisitSummary(
        zone_id=zone_id,
        body_part=body_part,
        n_entries=len(visits),
        mean_duration=float(np.mean(durations)) if durations else None,
        total_time=float(np.sum(durations)) if durations else 0.0,
        latency_seconds=(
            first_entry_frame / fps if first_entry_frame is not None else None
        ),
        first_entry_frame=first_entry_frame,
        visits=tuple(visits),
    )


def _check_zone(zone_id: str, zone_ids: Collection[str] | None) -> None:
    if zone_ids is None or zone_id == UNCLASSIFIED:
        return
    if zone_id not in zone_ids:
        raise InputError(
            f"Zone '{zone_id}' does not exist.",
            code="E2101",
            how=f"Available zones: {list(zone_ids)}.",
        )


def zone_visits(
    classifications: pd.DataFrame,
    zone_id: str,
    fps: float,
    *,
    min_duration: float = 0.0,
    body_part: str | None = None,
    zone_ids: Collection[str] | None = None,
) -> VisitSummary:
    """Entries, visit durations and latency for one zone.

    Parameters
    ----------
    classifications : pd.DataFrame
        Output of :func:`ethozones.classify`.
    zone_id : str
        Zone to analyze. The unclassified sentinel is accepted.
    fps : float
        Frame rate (frames per second).
    min_duration : float, default=0.0
        Visits shorter than this many seconds are not counted.
    body_part : str, optional
        Body part to analyze; required when the table holds several.
    zone_ids : collection of str, optional
        Known zone ids (e.g. ``arena.zone_ids``). When given, an unknown
        ``zone_id`` raises instead of reporting a never-visited zone.

    Returns
    -------
    VisitSummary

    Raises
    ------
    InputError
        On non-positive ``fps``, negative ``min_duration``, unknown zone or
        body part.

    See Also
    --------
    zone_entries : Entry statistics for every zone and body part.
    zone_latency : Latency table.

    Examples
    --------
    >>> records = pd.DataFrame({
    ...     "frame": range(9),
    ...     "body_part": "nose",
    ...     "zone_id": ["out", "out", "A", "A", "A", "out", "A", "A", "out"],
    ... })
    >>> summary = zone_visits(records, "A", fps=1)
    >>> summary.n_entries, summary.total_time, summary.latency_seconds
    (2, 5.0, 2.0)
    >>> zone_visits(records, "A", fps=1, min_duration=3).n_entries
    1
    """
    validate_classification(classifications)
    fps = validate_fps(fps)
    min_duration = validate_min_duration(min_duration)
    _check_zone(zone_id, zone_ids)
    body_part, data = select_body_part(classifications, body_part)
    return _summarize(data, body_part, zone_id, fps, min_duration)


def _zones_for(
    data: pd.DataFrame, zone_ids: Iterable[str] | None
) -> list[str]:
    if zone_ids is not None:
        return list(zone_ids)
    present = pd.unique(data["zone_id"]).tolist()
    return sorted(zone for zone in present if zone != UNCLASSIFIED)


def zone_entries(
    classifications: pd.DataFrame,
    fps: float,
    *,
    min_duration: float = 0.0,
    zone_ids: Iterable[str] | None = None,
) -> pd.DataFrame:
    """Entry count, mean visit duration and total visit time per zone.

    Parameters
    ----------
    classifications : pd.DataFrame
        Output of :func:`ethozones.classify`, any number of body parts.
    fps : float
        Frame rate (frames per second).
    min_duration : float, default=0.0
        Visits shorter than this many seconds are not counted.
    zone_ids : iterable of str, optional
        Zones to report. Default: every zone present in the table.

    Returns
    -------
    pd.DataFrame
        Columns ``body_part, zone_id, n_entries, mean_duration, total_time``.
        Zones without a visit passing the filter have no row.
    """
    validate_classification(classifications)
    fps = validate_fps(fps)
    min_duration = validate_min_duration(min_duration)

    rows = []
    for body_part in body_parts(classifications):
        data = classifications.loc[classifications["body_part"] == body_part]
        for zone_id in _zones_for(data, zone_ids):
            summary = _summarize(data, body_part, zone_id, fps, min_duration)
            if summary.n_entries == 0:
                continue
            row = summary.to_dict()
            rows.append({col: row[col] for col in ENTRY_COLUMNS})
    return pd.DataFrame(rows, columns=ENTRY_COLUMNS)


def zone_exits(
    classifications: pd.DataFrame,
    *,
    zone_ids: Iterable[str] | None = None,
) -> pd.DataFrame:
    """Number of observed exits (1 -> 0 edges) per zone.

    Unlike the visit statistics this counts only exits seen in the data:
    a recording that ends inside a zone contributes no exit for it, and no
    duration filter applies.

    Returns
    -------
    pd.DataFrame
        Columns ``body_part, zone_id, n_exits``.
    """
    validate_classification(classifications)
    rows = []
    for body_part in body_parts(classifications):
        data = classifications.loc[classifications["body_part"] == body_part]
        for zone_id in _zones_for(data, zone_ids):
            _, in_zone = zone_presence(data, zone_id)
            n_exits = int(np.count_nonzero(in_zone[:-1] & ~in_zone[1:]))
            rows.append({"body_part": body_part, "zone_id": zone_id, "n_exits": n_exits})
    return pd.DataFrame(rows, columns=EXIT_COLUMNS)


def zone_latency(
    classifications: pd.DataFrame,
    fps: float,
    *,
    zone_ids: Iterable[str] | None = None,
) -> pd.DataFrame:
    """Latency to first occupancy of every zone.

    Parameters
    ----------
    classifications : pd.DataFrame
        Output of :func:`ethozones.classify`.
    fps : float
        Frame rate (frames per second).
    zone_ids : iterable of str, optional
        Zones to report, e.g. ``arena.zone_ids``. Zones never entered get a
        row with missing latency. Default: every zone present in the table.

    Returns
    -------
    pd.DataFrame
        Columns ``body_part, zone_id, latency_seconds, first_entry_frame``.
        ``latency_seconds`` is NaN and ``first_entry_frame`` is ``<NA>``
        (nullable integer) for zones never entered.
    """
    validate_classification(classifications)
    fps = validate_fps(fps)
    rows = []
    for body_part in body_parts(classifications):
        data = classifications.loc[classifications["body_part"] == body_part]
        for zone_id in _zones_for(data, zone_ids):
            zone_frames = data.loc[data["zone_id"] == zone_id, "frame"]
            first = int(zone_frames.min()) if len(zone_frames) else None
            rows.append(
                {
                    "body_part": body_part,
                    "zone_id": zone_id,
                    "latency_seconds": first / fps if first is not None else np.nan,
                    "first_entry_frame": first,
                }
            )
    latency = pd.DataFrame(rows, columns=LATENCY_COLUMNS)
    latency["latency_seconds"] = latency["latency_seconds"].astype(np.float64)
    latency["first_entry_frame"] = latency["first_entry_frame"].astype("Int64")
    return latency
