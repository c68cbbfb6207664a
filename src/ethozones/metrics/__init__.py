"""Zone metrics computed from classification records.

All functions take the table returned by :func:`ethozones.classify` and a
frame rate, and return new pandas objects.
"""

from ethozones.metrics.occupancy import zone_occupancy
from ethozones.metrics.transitions import (
    dominant_zone_sequence,
    transition_matrix,
    zone_transitions,
)
from ethozones.metrics.visits import (
    Visit,
    VisitSummary,
    detect_visits,
    zone_entries,
    zone_exits,
    zone_latency,
    zone_presence,
    zone_visits,
)

__all__ = [
    "Visit",
    "VisitSummary",
    "detect_visits",
    "dominant_zone_sequence",
    "transition_matrix",
    "zone_entries",
    "zone_exits",
    "zone_latency",
    "zone_occupancy",
    "zone_presence",
    "zone_transitions",
    "zone_visits",
]
