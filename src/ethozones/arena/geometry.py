"""Resolved zone shapes.

A zone geometry is the closed-form shape a :mod:`ethozones.arena.definitions`
entry resolves to. Geometries are immutable and hashable so a resolved arena
can be shared across analyses without copying.

Classes
-------
RectangleGeometry
    Axis-aligned rectangle with inclusive bounds.
CircleGeometry
    Circle given by centre and radius.
PolygonGeometry
    Simple polygon, closed implicitly.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import ClassVar, Literal, Union

import numpy as np
import shapely
from numpy.typing import NDArray
from shapely.geometry import Point, Polygon, box

GeometryKind = Literal["rectangle", "circle", "polygon"]

Bounds = tuple[float, float, float, float]


@dataclass(frozen=True)
class RectangleGeometry:
    """Axis-aligned rectangle.

    Attributes
    ----------
    x_min, y_min, x_max, y_max : float
        Inclusive bounds in arena coordinates.
    """

    x_min: float
    y_min: float
    x_max: float
    y_max: float

    kind: ClassVar[GeometryKind] = "rectangle"

    @property
    def bounds(self) -> Bounds:
        return (self.x_min, self.y_min, self.x_max, self.y_max)

    @property
    def centroid(self) -> tuple[float, float]:
        return ((self.x_min + self.x_max) / 2.0, (self.y_min + self.y_max) / 2.0)

    @property
    def area(self) -> float:
        return (self.x_max - self.x_min) * (self.y_max - self.y_min)

    def scaled(self, factor: float) -> RectangleGeometry:
        """Scale about the centroid by ``factor``."""
        cx, cy = self.centroid
        half_w = (self.x_max - self.x_min) * factor / 2.0
        half_h = (self.y_max - self.y_min) * factor / 2.0
        return RectangleGeometry(cx - half_w, cy - half_h, cx + half_w, cy + half_h)

    def to_shapely(self) -> Polygon:
        return box(self.x_min, self.y_min, self.x_max, self.y_max)


@dataclass(frozen=True)
class CircleGeometry:
    """Circle in arena coordinates.

    Attributes
    ----------
    center_x, center_y : float
        Circle centre.
    radius : float
        Radius in coordinate units (pixels when the arena is in pixels).
    """

    center_x: float
    center_y: float
    radius: float

    kind: ClassVar[GeometryKind] = "circle"

    @property
    def bounds(self) -> Bounds:
        r = self.radius
        return (self.center_x - r, self.center_y - r, self.center_x + r, self.center_y + r)

    @property
    def centroid(self) -> tuple[float, float]:
        return (self.center_x, self.center_y)

    @property
    def area(self) -> float:
        return math.pi * self.radius**2

    def scaled(self, factor: float) -> CircleGeometry:
        """Scale the radius by ``factor``; the centre is the centroid."""
        return CircleGeometry(self.center_x, self.center_y, self.radius * factor)

    def to_shapely(self, quad_segs: int = 32) -> Polygon:
        """Polygonal approximation, for plotting or area checks only."""
        return Point(self.center_x, self.center_y).buffer(
            self.radius, quad_segs=quad_segs
        )


@dataclass(frozen=True)
class PolygonGeometry:
    """Simple polygon.

    Vertices are stored as a tuple of ``(x, y)`` pairs so that the geometry
    stays hashable and compares by value. The ring is closed implicitly; the
    first vertex is not repeated.

    Attributes
    ----------
    vertices : tuple of (float, float)
        Ordered polygon vertices.
    """

    vertices: tuple[tuple[float, float], ...]

    kind: ClassVar[GeometryKind] = "polygon"

    @classmethod
    def from_array(cls, xy: NDArray[np.float64]) -> PolygonGeometry:
        xy = np.asarray(xy, dtype=np.float64)
        return cls(tuple((float(x), float(y)) for x, y in xy))

    @property
    def xy(self) -> NDArray[np.float64]:
        """Vertices as an array of shape (n_vertices, 2)."""
        return np.asarray(self.vertices, dtype=np.float64).reshape(-1, 2)

    @property
    def n_vertices(self) -> int:
        return len(self.vertices)

    @property
    def bounds(self) -> Bounds:
        xy = self.xy
        return (
            float(xy[:, 0].min()),
            float(xy[:, 1].min()),
            float(xy[:, 0].max()),
            float(xy[:, 1].max()),
        )

    @property
    def centroid(self) -> tuple[float, float]:
        """Area centroid (not the vertex mean)."""
        c = self.to_shapely().centroid
        return (float(c.x), float(c.y))

    @property
    def area(self) -> float:
        return float(shapely.area(self.to_shapely()))

    def scaled(self, factor: float) -> PolygonGeometry:
        """Scale every vertex about the area centroid by ``factor``."""
        c = np.asarray(self.centroid)
        return PolygonGeometry.from_array(c + factor * (self.xy - c))

    def to_shapely(self) -> Polygon:
        return Polygon(self.vertices)


ZoneGeometry = Union[RectangleGeometry, CircleGeometry, PolygonGeometry]


def rectangle_from_fractions(
    bounds: Bounds, fractions: tuple[float, float, float, float]
) -> RectangleGeometry:
    """Rectangle placed by fractions of a bounding box.

    Parameters
    ----------
    bounds : (x_min, y_min, x_max, y_max)
        Reference bounding box.
    fractions : (left, top, right, bottom)
        Edge positions as fractions of the box width/height, measured from
        ``x_min`` and ``y_min``. Values outside [0, 1] extend past the box.

    Examples
    --------
    >>> rectangle_from_fractions((0, 0, 100, 100), (0.25, 0.25, 0.75, 0.75))
    RectangleGeometry(x_min=25.0, y_min=25.0, x_max=75.0, y_max=75.0)
    """
    x_min, y_min, x_max, y_max = bounds
    left, top, right, bottom = fractions
    width = x_max - x_min
    height = y_max - y_min
    return RectangleGeometry(
        float(x_min + left * width),
        float(y_min + top * height),
        float(x_min + right * width),
        float(y_min + bottom * height),
    )
