"""Run-length helpers for per-frame label and boolean series."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray


@dataclass(frozen=True)
class Run:
    """Maximal stretch of identical consecutive values.

    Attributes
    ----------
    value : Any
        Repeated value (a zone label or a boolean).
    start : int
        Position of the first element of the run in the series.
    length : int
        Number of elements in the run.
    """

    value: Any
    start: int
    length: int

    @property
    def stop(self) -> int:
        """Position one past the last element."""
        return self.start + self.length


def run_length_encode(values: ArrayLike) -> list[Run]:
    """Collapse consecutive identical values into runs.

    Parameters
    ----------
    values : array_like, shape (n,)
        Series of hashable values. Labels are compared with ``==``, so the
        series must not use NaN as a label.

    Returns
    -------
    list[Run]
        Runs in series order. Adjacent runs always differ in value.

    Examples
    --------
    >>> [(r.value, r.length) for r in run_length_encode(["A", "A", "B", "A"])]
    [('A', 2), ('B', 1), ('A', 1)]
    """
    values = np.asarray(values)
    if values.ndim != 1:
        raise ValueError(f"values must be one-dimensional, got shape {values.shape}")
    n = len(values)
    if n == 0:
        return []
    changes = np.flatnonzero(values[1:] != values[:-1]) + 1
    starts = np.concatenate(([0], changes))
    stops = np.concatenate((changes, [n]))
    items = values.tolist()
    return [
        Run(value=items[start], start=int(start), length=int(stop - start))
        for start, stop in zip(starts, stops)
    ]


def true_runs(mask: ArrayLike) -> tuple[NDArray[np.intp], NDArray[np.intp]]:
    """Start and stop positions of the True stretches of a boolean series.

    A series that is True at position 0 starts a run there; a series that is
    True at the end has its run closed one position past the end, so every
    start has a matching stop.

    Parameters
    ----------
    mask : array_like of bool, shape (n,)

    Returns
    -------
    starts, stops : NDArray[np.intp]
        ``mask[starts[i]:stops[i]]`` is all True and maximal.

    Examples
    --------
    >>> starts, stops = true_runs([0, 0, 1, 1, 1, 0, 1, 1, 0])
    >>> starts.tolist(), stops.tolist()
    ([2, 6], [5, 8])
    """
    mask = np.asarray(mask, dtype=bool)
    if mask.ndim != 1:
        raise ValueError(f"mask must be one-dimensional, got shape {mask.shape}")
    padded = np.concatenate(([False], mask, [False])).astype(np.int8)
    edges = np.diff(padded)
    starts = np.flatnonzero(edges == 1)
    stops = np.flatnonzero(edges == -1)
    return starts, stops
