"""Low-level operations: containment predicates and run-length helpers."""

from ethozones.ops.containment import (
    point_in_zone,
    points_in_circle,
    points_in_polygon,
    points_in_rectangle,
)
from ethozones.ops.runs import Run, run_length_encode, true_runs

__all__ = [
    "Run",
    "point_in_zone",
    "points_in_circle",
    "points_in_polygon",
    "points_in_rectangle",
    "run_length_encode",
    "true_runs",
]
