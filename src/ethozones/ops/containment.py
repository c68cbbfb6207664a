"""Point-in-zone containment tests.

All predicates are vectorized over arrays of x and y coordinates and return a
boolean array of the same shape. Coordinates that are NaN or infinite are
never contained: an untrackable point must not abort classification of the
rest of the stream.

Boundary conventions
--------------------
rectangle
    Inclusive on all four edges.
circle
    Inclusive on the circumference (``dx**2 + dy**2 <= r**2``).
polygon
    Even-odd ray casting along +x. An edge is crossed when
    ``min(y1, y2) <= y < max(y1, y2)`` and the point lies strictly left of
    the crossing. Horizontal edges are never crossed. Consequently a point on
    an edge is inside exactly when the polygon interior lies to its right or
    above it: for an axis-aligned square the min-x and min-y edges (and the
    lower-left corner) are inside, the max-x and max-y edges are outside.
    The result does not depend on vertex order.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import ArrayLike, NDArray

from ethozones.arena.geometry import (
    CircleGeometry,
    PolygonGeometry,
    RectangleGeometry,
    ZoneGeometry,
)


def _as_xy(x: ArrayLike, y: ArrayLike) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    if x.shape != y.shape:
        raise ValueError(f"x and y must have the same shape, got {x.shape} and {y.shape}")
    return x, y


def points_in_rectangle(
    x: ArrayLike, y: ArrayLike, rectangle: RectangleGeometry
) -> NDArray[np.bool_]:
    x, y = _as_xy(x, y)
    return (
        (x >= rectangle.x_min)
        & (x <= rectangle.x_max)
        & (y >= rectangle.y_min)
        & (y <= rectangle.y_max)
    )


def points_in_circle(
    x: ArrayLike, y: ArrayLike, circle: CircleGeometry
) -> NDArray[np.bool_]:
    x, y = _as_xy(x, y)
    dx = x - circle.center_x
    dy = y - circle.center_y
    # Comparisons with NaN are False, so missing points fall out here.
    return dx * dx + dy * dy <= circle.radius * circle.radius


def points_in_polygon(
    x: ArrayLike, y: ArrayLike, vertices: ArrayLike
) -> NDArray[np.bool_]:
    """Even-odd ray casting test.

    Parameters
    ----------
    x, y : array_like
        Test coordinates, same shape.
    vertices : array_like, shape (n_vertices, 2)
        Polygon ring without the closing vertex.

    Returns
    -------
    NDArray[np.bool_]
        True where the point is inside (see module notes for edges).

    Examples
    --------
    >>> square = [(0, 0), (10, 0), (10, 10), (0, 10)]
    >>> points_in_polygon([5, 0, 10, 15], [5, 5, 5, 5], square).tolist()
    [True, True, False, False]
    """
    x, y = _as_xy(x, y)
    ring = np.asarray(vertices, dtype=np.float64).reshape(-1, 2)
    inside = np.zeros(x.shape, dtype=bool)
    if len(ring) < 3:
        return inside

    x1, y1 = ring[:, 0], ring[:, 1]
    x2, y2 = np.roll(x1, -1), np.roll(y1, -1)
    # Loop over edges; each step is vectorized over all points.
    for ax, ay, bx, by in zip(x1, y1, x2, y2):
        if ay == by:
            continue
        straddles = (np.minimum(ay, by) <= y) & (y < np.maximum(ay, by))
        with np.errstate(invalid="ignore"):
            x_cross = ax + (bx - ax) * (y - ay) / (by - ay)
        inside ^= straddles & (x < x_cross)
    return inside


def point_in_zone(x: ArrayLike, y: ArrayLike, geometry: ZoneGeometry) -> NDArray[np.bool_]:
    """Test which points fall inside a zone.

    Parameters
    ----------
    x, y : array_like
        Coordinates to test. Scalars and arrays of any (matching) shape are
        accepted. NaN marks a missing coordinate.
    geometry : ZoneGeometry
        Resolved zone shape.

    Returns
    -------
    NDArray[np.bool_]
        Containment mask with the shape of ``x``. Missing or non-finite
        coordinates are always False.

    Raises
    ------
    TypeError
        If ``geometry`` is not a resolved zone geometry.

    See Also
    --------
    points_in_polygon : Ray casting test and its edge convention.

    Examples
    --------
    >>> from ethozones.arena.geometry import CircleGeometry
    >>> point_in_zone([0.0, 4.0, float("nan")], [4.0, 4.0, 0.0], CircleGeometry(0, 0, 5)).tolist()
    [True, False, False]
    """
    x, y = _as_xy(x, y)
    if isinstance(geometry, RectangleGeometry):
        inside = points_in_rectangle(x, y, geometry)
    elif isinstance(geometry, CircleGeometry):
        inside = points_in_circle(x, y, geometry)
    elif isinstance(geometry, PolygonGeometry):
        inside = points_in_polygon(x, y, geometry.xy)
    else:
        raise TypeError(
            f"Expected a zone geometry, got {type(geometry).__name__}. "
            "Resolve zone definitions with Arena or resolve_zones() first."
        )
    return inside & np.isfinite(x) & np.isfinite(y)
