"""Resolution of zone definitions into geometry.

Proportional zones depend on their parent zone. The dependencies are modelled
as a directed graph (parent -> child) over zone ids and resolved in
topological order, so a zone is only ever built from an already resolved
parent. Missing parents and cycles are configuration errors.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping

import networkx as nx
import numpy as np

from ethozones._errors import ConfigurationError
from ethozones.arena.definitions import (
    CircleZone,
    PolygonZone,
    ProportionalZone,
    RectangleZone,
    ZoneDefinition,
)
from ethozones.arena.geometry import (
    CircleGeometry,
    PolygonGeometry,
    RectangleGeometry,
    ZoneGeometry,
    rectangle_from_fractions,
)

logger = logging.getLogger(__name__)

_ZONE_KINDS = frozenset({"rectangle", "circle", "polygon", "proportional"})

ReferencePoints = Mapping[str, tuple[float, float]]


def zone_dependency_graph(zone_defs: Iterable[ZoneDefinition]) -> nx.DiGraph:
    """Build the parent -> child graph of proportional zones.

    Every zone is a node (attribute ``order`` holds its declaration index);
    every proportional zone adds an edge from its parent.

    Raises
    ------
    ConfigurationError
        If a zone id is declared twice, a parent does not exist, or the
        dependencies contain a cycle.
    """
    graph = nx.DiGraph()
    zone_defs = list(zone_defs)
    for order, zone in enumerate(zone_defs):
        kind = getattr(zone, "kind", None)
        if kind not in _ZONE_KINDS:
            raise ConfigurationError(
                f"unknown zone type {kind!r}.",
                zone_id=getattr(zone, "zone_id", None),
                code="E2001",
                how=f"Use one of {sorted(_ZONE_KINDS)}.",
            )
        if zone.zone_id in graph:
            raise ConfigurationError(
                "zone id is declared more than once.",
                zone_id=zone.zone_id,
                code="E2006",
                how="Give every zone a unique id.",
            )
        graph.add_node(zone.zone_id, order=order, kind=zone.kind)

    for zone in zone_defs:
        if zone.kind != "proportional":
            continue
        if zone.parent not in graph:
            raise ConfigurationError(
                f"parent zone '{zone.parent}' not found.",
                zone_id=zone.zone_id,
                code="E2002",
                why="Proportional zones are derived from another zone of the same arena.",
                how=f"Declare '{zone.parent}' or point 'parent' at one of {list(graph)}.",
            )
        graph.add_edge(zone.parent, zone.zone_id)

    if not nx.is_directed_acyclic_graph(graph):
        cycle = [edge[0] for edge in nx.find_cycle(graph)]
        raise ConfigurationError(
            f"proportional zones form a cycle: {' -> '.join(cycle + cycle[:1])}.",
            zone_id=cycle[0],
            code="E2003",
            why="A zone cannot be derived from itself, directly or indirectly.",
            how="Break the cycle by defining one of the zones explicitly.",
        )
    return graph


def resolution_order(graph: nx.DiGraph) -> list[str]:
    """Dependency-first order; non-proportional zones first, then declaration order."""
    return list(
        nx.lexicographical_topological_sort(
            graph,
            key=lambda node: (
                graph.nodes[node]["kind"] == "proportional",
                graph.nodes[node]["order"],
            ),
        )
    )


def _reference_point(
    name: str, points: ReferencePoints, zone_id: str
) -> tuple[float, float]:
    if name not in points:
        raise ConfigurationError(
            f"reference point '{name}' is not defined.",
            zone_id=zone_id,
            code="E2005",
            how=f"Use one of the arena points: {sorted(points)}.",
        )
    x, y = points[name]
    return (float(x), float(y))


def _degenerate(zone_id: str, reason: str) -> ConfigurationError:
    return ConfigurationError(reason, zone_id=zone_id, code="E2004")


def _resolve_rectangle(zone: RectangleZone, points: ReferencePoints) -> RectangleGeometry:
    if zone.bounds is not None:
        x_min, y_min, x_max, y_max = zone.bounds
    else:
        (x1, y1), (x2, y2) = (
            _reference_point(name, points, zone.zone_id) for name in zone.corner_points
        )
        x_min, x_max = min(x1, x2), max(x1, x2)
        y_min, y_max = min(y1, y2), max(y1, y2)
    if not (x_min < x_max and y_min < y_max):
        raise _degenerate(
            zone.zone_id,
            f"rectangle needs min < max on both axes, got "
            f"x=[{x_min}, {x_max}], y=[{y_min}, {y_max}].",
        )
    return RectangleGeometry(x_min, y_min, x_max, y_max)


def _resolve_circle(
    zone: CircleZone, points: ReferencePoints, scale: float | None
) -> CircleGeometry:
    if zone.center is not None:
        cx, cy = zone.center
    else:
        cx, cy = _reference_point(zone.center_point, points, zone.zone_id)
    radius = zone.radius * scale if scale is not None else zone.radius
    if not (np.isfinite(radius) and radius > 0):
        raise _degenerate(zone.zone_id, f"circle radius must be positive, got {zone.radius}.")
    return CircleGeometry(cx, cy, radius)


def _resolve_polygon(zone: PolygonZone, points: ReferencePoints) -> PolygonGeometry:
    if zone.vertices is not None:
        vertices = zone.vertices
    else:
        vertices = tuple(
            _reference_point(name, points, zone.zone_id) for name in zone.point_names
        )
    if len(vertices) < 3:
        raise _degenerate(
            zone.zone_id, f"polygon needs at least 3 vertices, got {len(vertices)}."
        )
    geometry = PolygonGeometry(tuple(vertices))
    if not geometry.area > 0:
        raise _degenerate(zone.zone_id, "polygon has zero area (collinear vertices).")
    return geometry


def _resolve_proportional(zone: ProportionalZone, parent: ZoneGeometry) -> ZoneGeometry:
    if zone.is_box:
        left, top, right, bottom = zone.proportion
        if not (left < right and top < bottom):
            raise _degenerate(
                zone.zone_id,
                "proportion [left, top, right, bottom] needs left < right and top < bottom, "
                f"got {list(zone.proportion)}.",
            )
        return rectangle_from_fractions(parent.bounds, zone.proportion)
    if not (np.isfinite(zone.proportion) and zone.proportion > 0):
        raise _degenerate(
            zone.zone_id, f"scale factor must be positive, got {zone.proportion}."
        )
    return parent.scaled(zone.proportion)


def resolve_zones(
    zone_defs: Iterable[ZoneDefinition],
    reference_points: ReferencePoints | None = None,
    scale: float | None = None,
) -> dict[str, ZoneGeometry]:
    """Resolve zone definitions into concrete geometry.

    Parameters
    ----------
    zone_defs : iterable of ZoneDefinition
        Zone definitions in declaration order.
    reference_points : mapping of str to (x, y), optional
        Named points that definitions may refer to.
    scale : float, optional
        Pixels per length unit. When given, circle radii are multiplied by it.

    Returns
    -------
    dict of str to ZoneGeometry
        Resolved geometry per zone id, in declaration order.

    Raises
    ------
    ConfigurationError
        On duplicate ids, missing parents, cycles, unknown reference points,
        or degenerate geometry. Nothing is returned on failure.

    Notes
    -----
    Resolution is deterministic: the same definitions and reference points
    always produce equal geometries.

    Examples
    --------
    >>> from ethozones.arena.definitions import ProportionalZone, RectangleZone
    >>> zones = [
    ...     ProportionalZone("center", parent="arena", proportion=0.5),
    ...     RectangleZone("arena", bounds=(0, 0, 100, 100)),
    ... ]
    >>> resolved = resolve_zones(zones)
    >>> list(resolved)
    ['center', 'arena']
    >>> resolved["center"].bounds
    (25.0, 25.0, 75.0, 75.0)
    """
    zone_defs = list(zone_defs)
    points = reference_points or {}
    if scale is not None and not scale > 0:
        raise ConfigurationError(
            f"scale must be positive, got {scale}.",
            code="E2007",
            how="Give the number of pixels per length unit, or omit it.",
        )

    graph = zone_dependency_graph(zone_defs)
    by_id = {zone.zone_id: zone for zone in zone_defs}

    resolved: dict[str, ZoneGeometry] = {}
    for zone_id in resolution_order(graph):
        zone = by_id[zone_id]
        if zone.kind == "rectangle":
            geometry: ZoneGeometry = _resolve_rectangle(zone, points)
        elif zone.kind == "circle":
            geometry = _resolve_circle(zone, points, scale)
        elif zone.kind == "polygon":
            geometry = _resolve_polygon(zone, points)
        else:
            geometry = _resolve_proportional(zone, resolved[zone.parent])
        logger.debug(
            "Resolved zone %r as %s with bounds %s", zone_id, geometry.kind, geometry.bounds
        )
        resolved[zone_id] = geometry

    return {zone.zone_id: resolved[zone.zone_id] for zone in zone_defs}
