"""
geometry/calculators.py

Property calculators: vertex tuple → canonical shape properties.

Each calculator is the designed inverse of the generator of the same shape
in ``geometry/generators.py``.  Vertices that no generator could have
produced raise ``InconsistentGeometryError``.

Rectangle and diamond calculators work from min/max extents only, so the
order in which corners were drawn never matters.
"""

from __future__ import annotations

import math
from typing import Any, Callable, Dict, Iterable, Optional, Sequence, Union

from models import (
    Bounds,
    CircleProperties,
    DiamondProperties,
    GeometryProperties,
    LineProperties,
    Point,
    PointProperties,
    RectangleProperties,
    ShapeType,
    as_vertices,
    resolve_shape_alias,
)
from geometry.errors import InconsistentGeometryError
from geometry.generators import resolve_circle_segments, circle_unit_offsets
from utils import close_enough


def _tolerance(tolerance: Optional[float]) -> float:
    if tolerance is None:
        from settings import get_settings
        tolerance = get_settings().settings.geometry.tolerance
    return tolerance


def _expect_count(shape: str, vertices: Sequence[Point], count: int) -> None:
    if len(vertices) != count:
        raise InconsistentGeometryError(f"{shape} requires {count} vertices, got {len(vertices)}")
    for v in vertices:
        if not (math.isfinite(v.x) and math.isfinite(v.y)):
            raise InconsistentGeometryError(f"{shape} has a non-finite vertex: {v}")


def calculate_bounds(vertices: Iterable[Any]) -> Bounds:
    """Axis-aligned bounds of any vertex set."""
    return Bounds.from_points(as_vertices(vertices))


def stored_circle_segments(vertices: Sequence[Any]) -> int:
    """Segment count of a circle as it is stored: its own vertex count.

    Raises:
        InconsistentGeometryError: if the count is not a positive multiple of 4.
    """
    n = len(vertices)
    if n <= 0 or n % 4 != 0:
        raise InconsistentGeometryError(f"circle has {n} vertices, not a positive multiple of 4")
    return n


# =============================================================================
# Per-shape calculators
# =============================================================================

def calculate_point_properties(vertices: Sequence[Point]) -> PointProperties:
    _expect_count("point", vertices, 1)
    return PointProperties(center=vertices[0])


def calculate_line_properties(vertices: Sequence[Point]) -> LineProperties:
    _expect_count("line", vertices, 2)
    return LineProperties(start=vertices[0], end=vertices[1])


def calculate_circle_properties(
    vertices: Sequence[Point],
    segments: Optional[int] = None,
    tolerance: Optional[float] = None,
) -> CircleProperties:
    """Recover center and radius from the generator's vertex layout.

    The center comes from the cardinal vertices (east/west for x, the
    quarter-turn pair for y), never from a mean of the circumference.  Every
    vertex must then sit where the generator would have put it.

    Raises:
        InconsistentGeometryError: wrong vertex count, zero radius, or
            vertices that are not evenly spaced on one circle.
    """
    n = resolve_circle_segments(segments)
    tol = _tolerance(tolerance)
    _expect_count("circle", vertices, n)

    q = n // 4
    cx = (vertices[0].x + vertices[2 * q].x) / 2
    cy = (vertices[q].y + vertices[3 * q].y) / 2
    center = Point(cx, cy)
    radius = center.distance_to(vertices[0])
    if radius <= 0:
        raise InconsistentGeometryError("circle vertices collapse to a single point")

    scale = max(radius, abs(cx), abs(cy))
    for i, ((ux, uy), v) in enumerate(zip(circle_unit_offsets(n), vertices)):
        if not (close_enough(v.x, cx + ux * radius, tol, scale)
                and close_enough(v.y, cy + uy * radius, tol, scale)):
            raise InconsistentGeometryError(
                f"circle vertex {i} at ({v.x}, {v.y}) is off the circle "
                f"centered ({cx}, {cy}) with radius {radius}"
            )
    return CircleProperties(center=center, radius=radius)


def calculate_rectangle_properties(vertices: Sequence[Point]) -> RectangleProperties:
    """Center and size from two opposite corners, in either order.

    Raises:
        InconsistentGeometryError: wrong vertex count or zero width/height.
    """
    _expect_count("rectangle", vertices, 2)
    b = Bounds.from_points(vertices)
    if b.width <= 0 or b.height <= 0:
        raise InconsistentGeometryError(f"rectangle corners give a degenerate box: {b}")
    return RectangleProperties(center=b.center, width=b.width, height=b.height)


def calculate_diamond_properties(
    vertices: Sequence[Point],
    tolerance: Optional[float] = None,
) -> DiamondProperties:
    """Center and size from the cardinal-point extents.

    The vertices must be exactly the four cardinal points of their own
    bounding box (in any order).

    Raises:
        InconsistentGeometryError: wrong vertex count, zero width/height, or a
            vertex that is not a cardinal point.
    """
    _expect_count("diamond", vertices, 4)
    tol = _tolerance(tolerance)
    b = Bounds.from_points(vertices)
    if b.width <= 0 or b.height <= 0:
        raise InconsistentGeometryError(f"diamond vertices give a degenerate extent: {b}")

    c = b.center
    cardinals = [
        Point(b.min_x, c.y),
        Point(c.x, b.min_y),
        Point(b.max_x, c.y),
        Point(c.x, b.max_y),
    ]
    scale = max(b.width, b.height, abs(c.x), abs(c.y))
    unmatched = list(cardinals)
    for v in vertices:
        match = next(
            (p for p in unmatched
             if close_enough(v.x, p.x, tol, scale) and close_enough(v.y, p.y, tol, scale)),
            None,
        )
        if match is None:
            raise InconsistentGeometryError(f"diamond vertex ({v.x}, {v.y}) is not a cardinal point of {b}")
        unmatched.remove(match)
    return DiamondProperties(center=c, width=b.width, height=b.height)


# =============================================================================
# Dispatch
# =============================================================================

CALCULATORS: Dict[ShapeType, Callable[..., GeometryProperties]] = {
    ShapeType.POINT: calculate_point_properties,
    ShapeType.LINE: calculate_line_properties,
    ShapeType.CIRCLE: calculate_circle_properties,
    ShapeType.RECTANGLE: calculate_rectangle_properties,
    ShapeType.DIAMOND: calculate_diamond_properties,
}


def calculate_properties(
    shape_type: Union[str, ShapeType],
    vertices: Iterable[Any],
    segments: Optional[int] = None,
    tolerance: Optional[float] = None,
) -> GeometryProperties:
    """Calculate properties for any shape type.

    Raises:
        InconsistentGeometryError: if the vertices cannot belong to the shape.
    """
    st = resolve_shape_alias(shape_type)
    if st is None:
        raise InconsistentGeometryError(f"unknown shape type: {shape_type!r}")
    verts = as_vertices(vertices)
    if st is ShapeType.CIRCLE:
        return calculate_circle_properties(verts, segments, tolerance)
    if st is ShapeType.DIAMOND:
        return calculate_diamond_properties(verts, tolerance)
    return CALCULATORS[st](verts)
