"""Arena and zone geometry model.

Zone definitions (:mod:`ethozones.arena.definitions`) are resolved into
concrete shapes (:mod:`ethozones.arena.geometry`) in dependency order
(:mod:`ethozones.arena.resolve`). :class:`Arena` owns both.
"""

from ethozones.arena.core import Arena
from ethozones.arena.definitions import (
    CircleZone,
    PolygonZone,
    ProportionalZone,
    RectangleZone,
    ZoneDefinition,
    zone_from_dict,
)
from ethozones.arena.geometry import (
    CircleGeometry,
    PolygonGeometry,
    RectangleGeometry,
    ZoneGeometry,
)
from ethozones.arena.resolve import resolve_zones, zone_dependency_graph

__all__ = [
    "Arena",
    "CircleGeometry",
    "CircleZone",
    "PolygonGeometry",
    "PolygonZone",
    "ProportionalZone",
    "RectangleGeometry",
    "RectangleZone",
    "ZoneDefinition",
    "ZoneGeometry",
    "resolve_zones",
    "zone_dependency_graph",
    "zone_from_dict",
]
