"""Zone-to-zone transition counts.

Transitions are computed on a single label per frame (the dominant zone),
not on the multi-zone classification records. Runs of a label shorter than
``min_duration`` are removed before counting and their neighbours are
treated as adjacent, so A A B A A A with a one-frame B below threshold is a
single stay in A and produces no transition.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Sequence

import numpy as np
import pandas as pd

from ethozones._errors import InputError, validate_fps, validate_min_duration
from ethozones.classification import (
    body_parts,
    select_body_part,
    validate_classification,
)
from ethozones.ops.runs import run_length_encode

logger = logging.getLogger(__name__)

TRANSITION_COLUMNS = ["body_part", "from_zone", "to_zone", "count"]


def dominant_zone_sequence(
    classifications: pd.DataFrame,
    *,
    zone_order: Sequence[str] | None = None,
    body_part: str | None = None,
) -> pd.Series:
    """One winning zone label per classified frame.

    Parameters
    ----------
    classifications : pd.DataFrame
        Output of :func:`ethozones.classify`.
    zone_order : sequence of str, optional
        Priority of overlapping zones, highest first. Zones not listed rank
        after all listed zones, in record order. Default: record order, which
        for :func:`ethozones.classify` output is zone declaration order.
    body_part : str, optional
        Body part to reduce; required when the table holds several.

    Returns
    -------
    pd.Series
        Zone id indexed by ascending frame, named ``zone_id``.

    Examples
    --------
    >>> records = pd.DataFrame({
    ...     "frame": [0, 1, 1, 2],
    ...     "body_part": "nose",
    ...     "zone_id": ["arena", "arena", "center", "unclassified"],
    ... })
    >>> dominant_zone_sequence(records).tolist()
    ['arena', 'arena', 'unclassified']
    >>> dominant_zone_sequence(records, zone_order=["center"]).tolist()
    ['arena', 'center', 'unclassified']
    """
    validate_classification(classifications)
    _, data = select_body_part(classifications, body_part)

    data = data.loc[:, ["frame", "zone_id"]].assign(_position=np.arange(len(data)))
    keys = ["frame", "_position"]
    if zone_order is not None:
        priority = {zone_id: rank for rank, zone_id in enumerate(zone_order)}
        if len(priority) != len(zone_order):
            raise InputError("zone_order contains duplicate zone ids.", code="E2101")
        data["_priority"] = data["zone_id"].map(priority).fillna(len(priority))
        keys = ["frame", "_priority", "_position"]

    winners = data.sort_values(keys, kind="mergesort").drop_duplicates(
        "frame", keep="first"
    )
    return pd.Series(
        winners["zone_id"].to_numpy(dtype=object),
        index=pd.Index(winners["frame"].to_numpy(dtype=np.int64), name="frame"),
        name="zone_id",
    )


def _count_transitions(
    labels: Sequence[str], fps: float, min_duration: float
) -> Counter[tuple[str, str]]:
    runs = [
        run
        for run in run_length_encode(np.asarray(labels, dtype=object))
        if run.length / fps >= min_duration
    ]
    counts: Counter[tuple[str, str]] = Counter()
    for previous, current in zip(runs[:-1], runs[1:]):
        if previous.value != current.value:
            counts[(previous.value, current.value)] += 1
    return counts


def zone_transitions(
    classifications: pd.DataFrame,
    fps: float,
    *,
    min_duration: float = 0.0,
    zone_order: Sequence[str] | None = None,
) -> pd.DataFrame:
    """Count moves between zones for every body part.

    Parameters
    ----------
    classifications : pd.DataFrame
        Output of :func:`ethozones.classify`.
    fps : float
        Frame rate (frames per second).
    min_duration : float, default=0.0
        Stays shorter than this many seconds are ignored. The stays on
        either side of an ignored one become adjacent.
    zone_order : sequence of str, optional
        Priority of overlapping zones; see :func:`dominant_zone_sequence`.

    Returns
    -------
    pd.DataFrame
        Columns ``body_part, from_zone, to_zone, count``, one row per
        observed ordered pair, sorted. The unclassified label takes part in
        transitions like any zone.

    Raises
    ------
    InputError
        On non-positive ``fps`` or negative ``min_duration``.

    Examples
    --------
    >>> records = pd.DataFrame({
    ...     "frame": range(6),
    ...     "body_part": "nose",
    ...     "zone_id": ["A", "A", "B", "A", "A", "A"],
    ... })
    >>> zone_transitions(records, fps=1)["count"].tolist()
    [1, 1]
    >>> len(zone_transitions(records, fps=1, min_duration=2))
    0
    """
    validate_classification(classifications)
    fps = validate_fps(fps)
    min_duration = validate_min_duration(min_duration)

    rows = []
    for body_part in body_parts(classifications):
        labels = dominant_zone_sequence(
            classifications, zone_order=zone_order, body_part=body_part
        )
        counts = _count_transitions(labels.tolist(), fps, min_duration)
        logger.debug(
            "%d transition(s) for '%s' over %d frames",
            sum(counts.values()),
            body_part,
            len(labels),
        )
        rows.extend(
            {"body_part": body_part, "from_zone": src, "to_zone": dst, "count": n}
            for (src, dst), n in counts.items()
        )

    transitions = pd.DataFrame(rows, columns=TRANSITION_COLUMNS)
    transitions["count"] = transitions["count"].astype(np.int64)
    return transitions.sort_values(
        ["body_part", "from_zone", "to_zone"], ignore_index=True
    )


def transition_matrix(
    transitions: pd.DataFrame, body_part: str | None = None
) -> pd.DataFrame:
    """Square from-zone by to-zone count table.

    Parameters
    ----------
    transitions : pd.DataFrame
        Output of :func:`zone_transitions`.
    body_part : str, optional
        Body part to tabulate; required when the table holds several.

    Returns
    -------
    pd.DataFrame
        Rows are ``from_zone``, columns are ``to_zone``, both over the same
        sorted zone labels. Pairs never observed are 0.
    """
    missing = [col for col in TRANSITION_COLUMNS if col not in transitions]
    if missing:
        raise InputError(
            f"Transition table is missing columns: {missing}.",
            code="E2104",
            how="Pass the output of zone_transitions().",
        )
    _, data = select_body_part(transitions, body_part)

    labels = sorted(set(data["from_zone"]) | set(data["to_zone"]))
    if not labels:
        return pd.DataFrame(
            index=pd.Index([], name="from_zone"),
            columns=pd.Index([], name="to_zone"),
            dtype=np.int64,
        )
    matrix = data.pivot_table(
        index="from_zone",
        columns="to_zone",
        values="count",
        aggfunc="sum",
        fill_value=0,
    )
    matrix = matrix.reindex(index=labels, columns=labels, fill_value=0).astype(np.int64)
    matrix.index.name = "from_zone"
    matrix.columns.name = "to_zone"
    return matrix
