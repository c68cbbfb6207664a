"""Declarative zone definitions.

A zone definition describes *how* to build a zone; it is turned into a
concrete :mod:`ethozones.arena.geometry` shape by
:func:`ethozones.arena.resolve.resolve_zones`. Definitions may refer to named
reference points of the arena or, for proportional zones, to another zone.

The four kinds form a tagged variant distinguished by the ``kind`` class
attribute:

============  ====================================================
kind          defined by
============  ====================================================
rectangle     ``bounds`` or two ``corner_points``
circle        ``center`` or ``center_point``, plus ``radius``
polygon       ``vertices`` or ``point_names`` (at least three)
proportional  ``parent`` zone id and ``proportion``
============  ====================================================

Examples
--------
>>> zone = zone_from_dict({"id": "center", "type": "proportion",
...                        "parent_zone": "arena", "proportion": 0.5})
>>> zone.kind, zone.parent, zone.proportion
('proportional', 'arena', 0.5)
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, ClassVar, Literal, Union

from ethozones._errors import ConfigurationError

ZoneKind = Literal["rectangle", "circle", "polygon", "proportional"]

# Accepted ``type`` tags, including the names used by older arena files.
ZONE_TYPE_ALIASES: dict[str, ZoneKind] = {
    "rectangle": "rectangle",
    "circle": "circle",
    "polygon": "polygon",
    "points": "polygon",
    "proportional": "proportional",
    "proportion": "proportional",
}


def _as_point(value: Any, zone_id: str, what: str) -> tuple[float, float]:
    try:
        x, y = value
        return (float(x), float(y))
    except (TypeError, ValueError):
        raise ConfigurationError(
            f"{what} must be an (x, y) pair, got {value!r}.",
            zone_id=zone_id,
            code="E2001",
        ) from None


def _point_names(value: Any, zone_id: str, what: str) -> tuple[str, ...]:
    if isinstance(value, (str, bytes)):
        raise ConfigurationError(
            f"{what} must be a list of point names, got the string {value!r}.",
            zone_id=zone_id,
            code="E2001",
            how=f"Write {what}: [{value!r}, ...] with one entry per point.",
        )
    return tuple(str(p) for p in value)


def _exactly_one(zone_id: str, **options: Any) -> None:
    given = [name for name, value in options.items() if value is not None]
    if len(given) != 1:
        names = " or ".join(options)
        raise ConfigurationError(
            f"exactly one of {names} must be given, got {given or 'none'}.",
            zone_id=zone_id,
            code="E2001",
        )


@dataclass(frozen=True)
class RectangleZone:
    """Axis-aligned rectangle.

    Parameters
    ----------
    zone_id : str
        Unique zone identifier.
    bounds : (x_min, y_min, x_max, y_max), optional
        Explicit bounds in arena coordinates.
    corner_points : (str, str), optional
        Names of two opposite corners among the arena reference points.
    name : str, optional
        Display name.
    metadata : dict, optional
        Free-form annotations, carried through unchanged.
    """

    zone_id: str
    bounds: tuple[float, float, float, float] | None = None
    corner_points: tuple[str, str] | None = None
    name: str | None = None
    metadata: Mapping[str, Any] = field(default_factory=dict, compare=False)

    kind: ClassVar[ZoneKind] = "rectangle"

    def __post_init__(self) -> None:
        _exactly_one(self.zone_id, bounds=self.bounds, corner_points=self.corner_points)
        if self.bounds is not None:
            try:
                bounds = tuple(float(v) for v in self.bounds)
            except (TypeError, ValueError):
                bounds = ()
            if len(bounds) != 4:
                raise ConfigurationError(
                    f"bounds must be (x_min, y_min, x_max, y_max), got {self.bounds!r}.",
                    zone_id=self.zone_id,
                    code="E2001",
                )
            object.__setattr__(self, "bounds", bounds)
        else:
            corners = _point_names(self.corner_points, self.zone_id, "corner_points")
            if len(corners) != 2:
                raise ConfigurationError(
                    f"corner_points must name exactly two points, got {self.corner_points!r}.",
                    zone_id=self.zone_id,
                    code="E2001",
                )
            object.__setattr__(self, "corner_points", corners)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"id": self.zone_id, "type": self.kind}
        if self.bounds is not None:
            data["bounds"] = list(self.bounds)
        else:
            data["point_names"] = list(self.corner_points)
        return _with_common(data, self)


@dataclass(frozen=True)
class CircleZone:
    """Circle.

    Parameters
    ----------
    zone_id : str
        Unique zone identifier.
    radius : float
        Radius in the arena's length units. When the arena is measured in
        pixels and has a ``scale``, the radius is converted to pixels during
        resolution.
    center : (float, float), optional
        Explicit centre.
    center_point : str, optional
        Name of the arena reference point used as centre.
    name, metadata
        As for :class:`RectangleZone`.
    """

    zone_id: str
    radius: float
    center: tuple[float, float] | None = None
    center_point: str | None = None
    name: str | None = None
    metadata: Mapping[str, Any] = field(default_factory=dict, compare=False)

    kind: ClassVar[ZoneKind] = "circle"

    def __post_init__(self) -> None:
        _exactly_one(self.zone_id, center=self.center, center_point=self.center_point)
        if self.center is not None:
            object.__setattr__(
                self, "center", _as_point(self.center, self.zone_id, "center")
            )
        try:
            object.__setattr__(self, "radius", float(self.radius))
        except (TypeError, ValueError):
            raise ConfigurationError(
                f"radius must be a number, got {self.radius!r}.",
                zone_id=self.zone_id,
                code="E2001",
            ) from None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"id": self.zone_id, "type": self.kind, "radius": self.radius}
        if self.center is not None:
            data["center"] = list(self.center)
        else:
            data["center_point"] = self.center_point
        return _with_common(data, self)


@dataclass(frozen=True)
class PolygonZone:
    """Polygon, closed implicitly.

    Parameters
    ----------
    zone_id : str
        Unique zone identifier.
    vertices : sequence of (float, float), optional
        Explicit vertices in order.
    point_names : sequence of str, optional
        Arena reference points used as vertices, in order.
    name, metadata
        As for :class:`RectangleZone`.
    """

    zone_id: str
    vertices: tuple[tuple[float, float], ...] | None = None
    point_names: tuple[str, ...] | None = None
    name: str | None = None
    metadata: Mapping[str, Any] = field(default_factory=dict, compare=False)

    kind: ClassVar[ZoneKind] = "polygon"

    def __post_init__(self) -> None:
        _exactly_one(self.zone_id, vertices=self.vertices, point_names=self.point_names)
        if self.vertices is not None:
            vertices = tuple(
                _as_point(v, self.zone_id, "polygon vertex") for v in self.vertices
            )
            object.__setattr__(self, "vertices", vertices)
        else:
            object.__setattr__(
                self,
                "point_names",
                _point_names(self.point_names, self.zone_id, "point_names"),
            )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"id": self.zone_id, "type": self.kind}
        if self.vertices is not None:
            data["vertices"] = [list(v) for v in self.vertices]
        else:
            data["point_names"] = list(self.point_names)
        return _with_common(data, self)


@dataclass(frozen=True)
class ProportionalZone:
    """Zone derived from another zone.

    Parameters
    ----------
    zone_id : str
        Unique zone identifier.
    parent : str
        Id of the zone this one is derived from.
    proportion : float or (left, top, right, bottom)
        A scalar scales the parent about its centroid; values above 1.0 give
        a zone larger than the parent, such as an approach region around an
        object. Four values place a rectangle by fractions of the parent's
        bounding box.
    name, metadata
        As for :class:`RectangleZone`.
    """

    zone_id: str
    parent: str
    proportion: float | tuple[float, float, float, float]
    name: str | None = None
    metadata: Mapping[str, Any] = field(default_factory=dict, compare=False)

    kind: ClassVar[ZoneKind] = "proportional"

    def __post_init__(self) -> None:
        if not isinstance(self.parent, str) or not self.parent:
            raise ConfigurationError(
                f"parent must be a zone id, got {self.parent!r}.",
                zone_id=self.zone_id,
                code="E2001",
            )
        value = self.proportion
        if hasattr(value, "__len__") and not isinstance(value, (str, bytes)):
            if len(value) != 4:
                raise ConfigurationError(
                    "proportion must be a scale factor or "
                    f"[left, top, right, bottom], got {value!r}.",
                    zone_id=self.zone_id,
                    code="E2001",
                )
            try:
                box = tuple(float(v) for v in value)
            except (TypeError, ValueError):
                raise ConfigurationError(
                    f"proportion box values must be numeric, got {value!r}.",
                    zone_id=self.zone_id,
                    code="E2001",
                ) from None
            object.__setattr__(self, "proportion", box)
        else:
            try:
                object.__setattr__(self, "proportion", float(value))
            except (TypeError, ValueError):
                raise ConfigurationError(
                    f"proportion must be numeric, got {value!r}.",
                    zone_id=self.zone_id,
                    code="E2001",
                ) from None

    @property
    def is_box(self) -> bool:
        """True when the proportion places a box rather than scaling."""
        return isinstance(self.proportion, tuple)

    def to_dict(self) -> dict[str, Any]:
        proportion = list(self.proportion) if self.is_box else self.proportion
        data: dict[str, Any] = {
            "id": self.zone_id,
            "type": self.kind,
            "parent": self.parent,
            "proportion": proportion,
        }
        return _with_common(data, self)


ZoneDefinition = Union[RectangleZone, CircleZone, PolygonZone, ProportionalZone]


def _with_common(data: dict[str, Any], zone: ZoneDefinition) -> dict[str, Any]:
    if zone.name is not None:
        data["name"] = zone.name
    if zone.metadata:
        data["metadata"] = dict(zone.metadata)
    return data


def _first(data: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if data.get(key) is not None:
            return data[key]
    return None


def zone_from_dict(data: Mapping[str, Any]) -> ZoneDefinition:
    """Build a zone definition from a mapping.

    Accepts the mapping layout of arena configuration files: ``id``,
    ``type``, an optional ``name`` and ``metadata`` and the kind-specific keys
    listed in the module docstring. Older key names (``points`` type,
    ``proportion`` type, ``parent_zone``, ``radius_cm``) are accepted.

    Parameters
    ----------
    data : Mapping
        One zone entry.

    Returns
    -------
    ZoneDefinition

    Raises
    ------
    ConfigurationError
        If the entry has no id, an unknown type tag, or missing fields.

    Examples
    --------
    >>> zone_from_dict({"id": "left", "type": "rectangle", "bounds": [0, 0, 50, 100]})
    RectangleZone(zone_id='left', bounds=(0.0, 0.0, 50.0, 100.0), corner_points=None, name=None, metadata={})
    """
    if not isinstance(data, Mapping):
        raise ConfigurationError(
            f"Zone entries must be mappings, got {type(data).__name__}.",
            code="E2001",
        )
    zone_id = _first(data, "id", "zone_id")
    if zone_id is None:
        raise ConfigurationError(
            f"Zone entry has no 'id': {dict(data)!r}.",
            code="E2001",
            how="Give every zone a unique 'id'.",
        )
    zone_id = str(zone_id)
    tag = data.get("type")
    kind = ZONE_TYPE_ALIASES.get(str(tag).lower()) if tag is not None else None
    if kind is None:
        raise ConfigurationError(
            f"unknown zone type {tag!r}.",
            zone_id=zone_id,
            code="E2001",
            how=f"Use one of {sorted(ZONE_TYPE_ALIASES)}.",
        )

    common = {"name": data.get("name"), "metadata": dict(data.get("metadata") or {})}

    if kind == "rectangle":
        return RectangleZone(
            zone_id,
            bounds=data.get("bounds"),
            corner_points=_first(data, "corner_points", "point_names"),
            **common,
        )
    if kind == "circle":
        radius = _first(data, "radius", "radius_cm")
        if radius is None:
            raise ConfigurationError(
                "circle zone has no 'radius'.", zone_id=zone_id, code="E2001"
            )
        return CircleZone(
            zone_id,
            radius=radius,
            center=data.get("center"),
            center_point=data.get("center_point"),
            **common,
        )
    if kind == "polygon":
        return PolygonZone(
            zone_id,
            vertices=data.get("vertices"),
            point_names=data.get("point_names"),
            **common,
        )

    parent = _first(data, "parent", "parent_zone")
    proportion = data.get("proportion")
    if parent is None or proportion is None:
        raise ConfigurationError(
            "proportional zone needs both 'parent' and 'proportion'.",
            zone_id=zone_id,
            code="E2001",
        )
    return ProportionalZone(zone_id, parent=str(parent), proportion=proportion, **common)
