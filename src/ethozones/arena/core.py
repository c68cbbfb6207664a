"""The Arena: reference points, zone definitions and their resolved geometry.

An :class:`Arena` is immutable. Its zones are resolved once, when the arena is
constructed, and the resulting geometry is reused by every classification.
Arenas can therefore be shared read-only between analyses of many subjects.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from ethozones._errors import ConfigurationError, InputError
from ethozones._logging import log_zones_resolved
from ethozones.arena.definitions import ZoneDefinition, zone_from_dict
from ethozones.arena.geometry import ZoneGeometry
from ethozones.arena.resolve import resolution_order, resolve_zones, zone_dependency_graph

PIXEL_UNITS = "pixels"


@dataclass(frozen=True)
class Arena:
    """Bounded space containing the subject and its named zones.

    Parameters
    ----------
    zones : iterable of ZoneDefinition
        Zone definitions. Their order is the declaration order used to
        break ties between overlapping zones.
    reference_points : mapping of str to (x, y), optional
        Named points zone definitions can refer to (arena corners, object
        centres, maze arm ends, ...).
    units : str, default="pixels"
        Unit of the tracking coordinates (``"pixels"`` or a length unit such
        as ``"cm"``).
    scale : float, optional
        Pixels per length unit. For pixel arenas it converts circle radii,
        which are always declared in length units, into pixels.
    name : str, optional
        Arena identifier.
    metadata : dict, optional
        Free-form annotations.

    Attributes
    ----------
    geometries : Mapping[str, ZoneGeometry]
        Read-only resolved geometry per zone id, in declaration order.

    Raises
    ------
    ConfigurationError
        If the zone definitions cannot be resolved or ``scale`` is not
        positive.

    Examples
    --------
    >>> from ethozones.arena.definitions import ProportionalZone, RectangleZone
    >>> arena = Arena(
    ...     zones=[
    ...         RectangleZone("arena", bounds=(0, 0, 100, 100)),
    ...         ProportionalZone("center", parent="arena", proportion=0.5),
    ...     ],
    ...     units="cm",
    ... )
    >>> arena.zone_ids
    ('arena', 'center')
    >>> arena.geometry("center").bounds
    (25.0, 25.0, 75.0, 75.0)
    """

    zones: tuple[ZoneDefinition, ...] = ()
    reference_points: Mapping[str, tuple[float, float]] = field(default_factory=dict)
    units: str = PIXEL_UNITS
    scale: float | None = None
    name: str | None = None
    metadata: Mapping[str, Any] = field(default_factory=dict, compare=False)

    _geometries: Mapping[str, ZoneGeometry] = field(
        init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        object.__setattr__(self, "zones", tuple(self.zones))
        points = _points_from_config(self.reference_points)
        object.__setattr__(self, "reference_points", MappingProxyType(points))

        if self.scale is not None:
            try:
                scale = float(self.scale)
            except (TypeError, ValueError):
                scale = float("nan")
            if not scale > 0:
                raise ConfigurationError(
                    f"Arena scale must be a positive number, got {self.scale!r}.",
                    code="E2007",
                    how="Give the number of pixels per length unit, or omit scale.",
                )
            object.__setattr__(self, "scale", scale)

        radius_scale = self.scale if self.units == PIXEL_UNITS else None
        geometries = resolve_zones(self.zones, points, radius_scale)
        object.__setattr__(self, "_geometries", MappingProxyType(geometries))

        log_zones_resolved(
            arena_name=self.name,
            n_zones=len(geometries),
            n_proportional=sum(zone.kind == "proportional" for zone in self.zones),
            resolution_order=resolution_order(zone_dependency_graph(self.zones)),
        )

    @property
    def geometries(self) -> Mapping[str, ZoneGeometry]:
        return self._geometries

    @property
    def zone_ids(self) -> tuple[str, ...]:
        return tuple(zone.zone_id for zone in self.zones)

    @property
    def n_zones(self) -> int:
        return len(self.zones)

    def __contains__(self, zone_id: object) -> bool:
        return zone_id in self._geometries

    def zone(self, zone_id: str) -> ZoneDefinition:
        """Return the definition of ``zone_id``."""
        self._check_zone(zone_id)
        return next(zone for zone in self.zones if zone.zone_id == zone_id)

    def geometry(self, zone_id: str) -> ZoneGeometry:
        """Return the resolved geometry of ``zone_id``.

        Raises
        ------
        InputError
            If the arena has no such zone.
        """
        self._check_zone(zone_id)
        return self._geometries[zone_id]

    def _check_zone(self, zone_id: str) -> None:
        if zone_id not in self._geometries:
            raise InputError(
                f"Zone '{zone_id}' does not exist in arena {self.name!r}.",
                code="E2101",
                how=f"Available zones: {list(self.zone_ids)}.",
            )

    def to_dict(self) -> dict[str, Any]:
        """Mapping representation, the inverse of :meth:`from_dict`."""
        data: dict[str, Any] = {
            "units": self.units,
            "points": {name: list(xy) for name, xy in self.reference_points.items()},
            "zones": [zone.to_dict() for zone in self.zones],
        }
        if self.name is not None:
            data["id"] = self.name
        if self.scale is not None:
            data["scale"] = self.scale
        if self.metadata:
            data["metadata"] = dict(self.metadata)
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Arena:
        """Build an arena from a configuration mapping.

        The mapping is what a YAML or JSON arena file decodes to::

            id: open_field_1
            units: pixels
            scale: 5.2          # pixels per cm
            points:
              top_left: [100, 80]
              bottom_right: [620, 600]
            zones:
              - {id: arena, type: rectangle, point_names: [top_left, bottom_right]}
              - {id: center, type: proportional, parent: arena, proportion: 0.5}

        ``points`` may also be a list of ``{name, x, y}`` entries.

        Raises
        ------
        ConfigurationError
            If an entry is malformed or the zones cannot be resolved.
        """
        zones = [zone_from_dict(entry) for entry in data.get("zones") or []]
        return cls(
            zones=zones,
            reference_points=_points_from_config(data.get("points")),
            units=str(data.get("units", PIXEL_UNITS)),
            scale=data.get("scale"),
            name=data.get("id", data.get("name")),
            metadata=dict(data.get("metadata") or {}),
        )


def _points_from_config(points: Any) -> dict[str, tuple[float, float]]:
    if points is None:
        return {}
    if isinstance(points, Mapping):
        items: Iterable[tuple[Any, Any]] = points.items()
    else:
        items = []
        for entry in points:
            try:
                items.append((entry["name"], (entry["x"], entry["y"])))
            except (KeyError, TypeError):
                raise ConfigurationError(
                    f"Reference point entries need 'name', 'x' and 'y', got {entry!r}.",
                    code="E2005",
                ) from None

    result: dict[str, tuple[float, float]] = {}
    for name, xy in items:
        name = str(name)
        if name in result:
            raise ConfigurationError(
                f"Reference point '{name}' is defined more than once.", code="E2006"
            )
        if isinstance(xy, Mapping):
            xy = (xy.get("x"), xy.get("y"))
        try:
            result[name] = (float(xy[0]), float(xy[1]))
        except (TypeError, ValueError, IndexError):
            raise ConfigurationError(
                f"Reference point '{name}' must be an (x, y) pair, got {xy!r}.",
                code="E2005",
            ) from None
    return result
