"""
geometry/generators.py

Vertex generators: canonical shape properties → ordered vertex tuple.

Each generator is the exact counterpart of the calculator of the same shape
in ``geometry/calculators.py``; the pair must round-trip.

Vertex layouts:

    point      [center]
    line       [start, end]                      (order is meaningful)
    circle     N points, vertex i at angle 2πi/N (N a multiple of 4)
    rectangle  [top_left, bottom_right]          (two opposite corners)
    diamond    [west, north, east, south]
"""

from __future__ import annotations

import math
from typing import Any, Callable, Dict, Mapping, Optional, Tuple, Union

from models import (
    CircleProperties,
    DiamondProperties,
    GeometryProperties,
    LineProperties,
    Point,
    PointProperties,
    RectangleProperties,
    ShapeType,
    make_properties,
    resolve_shape_alias,
)
from geometry.errors import ConfigurationError, InvalidGeometryError

Vertices = Tuple[Point, ...]


def check_circle_segments(segments: int) -> None:
    """Circle layouts need a positive multiple of 4 so the calculator can use cardinal vertices."""
    if segments <= 0 or segments % 4 != 0:
        raise ConfigurationError(f"circle segment count must be a positive multiple of 4, got {segments}")


def resolve_circle_segments(segments: Optional[int]) -> int:
    if segments is None:
        from settings import get_settings
        segments = get_settings().settings.geometry.circle_segments
    check_circle_segments(segments)
    return segments


def _require_positive(shape: str, **dims: float) -> None:
    for name, value in dims.items():
        if not (isinstance(value, (int, float)) and math.isfinite(value) and value > 0):
            raise InvalidGeometryError(f"{shape} {name} must be > 0, got {value!r}")


def _require_finite(shape: str, *points: Point) -> None:
    for p in points:
        if not (math.isfinite(p.x) and math.isfinite(p.y)):
            raise InvalidGeometryError(f"{shape} has a non-finite coordinate: {p}")


# =============================================================================
# Per-shape generators
# =============================================================================

def generate_point_vertices(props: PointProperties) -> Vertices:
    _require_finite("point", props.center)
    return (props.center,)


def generate_line_vertices(props: LineProperties) -> Vertices:
    _require_finite("line", props.start, props.end)
    return (props.start, props.end)


def circle_unit_offsets(segments: int) -> Tuple[Tuple[float, float], ...]:
    """(cos, sin) for each vertex angle, with the cardinal angles exact."""
    check_circle_segments(segments)
    quarter = segments // 4
    exact = {0: (1.0, 0.0), quarter: (0.0, 1.0), 2 * quarter: (-1.0, 0.0), 3 * quarter: (0.0, -1.0)}
    out = []
    for i in range(segments):
        if i in exact:
            out.append(exact[i])
        else:
            angle = (i * math.pi * 2) / segments
            out.append((math.cos(angle), math.sin(angle)))
    return tuple(out)


def generate_circle_vertices(props: CircleProperties, segments: Optional[int] = None) -> Vertices:
    """N vertices evenly spaced around the circle, starting east and turning towards +y.

    Raises:
        InvalidGeometryError: if radius <= 0.
    """
    _require_positive("circle", radius=props.radius)
    _require_finite("circle", props.center)
    n = resolve_circle_segments(segments)
    c, r = props.center, props.radius
    return tuple(Point(c.x + cx * r, c.y + sy * r) for cx, sy in circle_unit_offsets(n))


def generate_rectangle_vertices(props: RectangleProperties) -> Vertices:
    """Two opposite corners: top-left then bottom-right.

    Raises:
        InvalidGeometryError: if width or height <= 0.
    """
    _require_positive("rectangle", width=props.width, height=props.height)
    _require_finite("rectangle", props.center)
    hw, hh = props.width / 2, props.height / 2
    c = props.center
    return (Point(c.x - hw, c.y - hh), Point(c.x + hw, c.y + hh))


def generate_diamond_vertices(props: DiamondProperties) -> Vertices:
    """Cardinal points [west, north, east, south] at half-width / half-height.

    Raises:
        InvalidGeometryError: if width or height <= 0.
    """
    _require_positive("diamond", width=props.width, height=props.height)
    _require_finite("diamond", props.center)
    hw, hh = props.width / 2, props.height / 2
    c = props.center
    return (
        Point(c.x - hw, c.y),
        Point(c.x, c.y - hh),
        Point(c.x + hw, c.y),
        Point(c.x, c.y + hh),
    )


# =============================================================================
# Dispatch
# =============================================================================

GENERATORS: Dict[ShapeType, Callable[..., Vertices]] = {
    ShapeType.POINT: generate_point_vertices,
    ShapeType.LINE: generate_line_vertices,
    ShapeType.CIRCLE: generate_circle_vertices,
    ShapeType.RECTANGLE: generate_rectangle_vertices,
    ShapeType.DIAMOND: generate_diamond_vertices,
}


def coerce_properties(
    shape_type: Union[str, ShapeType],
    properties: Union[GeometryProperties, Mapping[str, Any]],
) -> GeometryProperties:
    """Properties dataclass for *shape_type* from a dataclass or a mapping.

    Raises:
        InvalidGeometryError: on an unknown shape type, missing or unknown
            fields, or properties of another shape.
    """
    st = resolve_shape_alias(shape_type)
    if st is None:
        raise InvalidGeometryError(f"unknown shape type: {shape_type!r}")
    if isinstance(properties, Mapping):
        try:
            properties = make_properties(st, properties)
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidGeometryError(f"invalid {st.value} properties: {e}") from e
    if getattr(properties, "shape", None) is not st:
        raise InvalidGeometryError(f"{type(properties).__name__} given for a {st.value}")
    return properties


def generate_vertices(
    shape_type: Union[str, ShapeType],
    properties: Union[GeometryProperties, Mapping[str, Any]],
    segments: Optional[int] = None,
) -> Vertices:
    """Generate vertices for any shape type.

    Args:
        shape_type: ShapeType or alias.
        properties: The shape's properties dataclass, or a mapping of its fields.
        segments: Circle vertex count override (default from settings).

    Raises:
        InvalidGeometryError: on degenerate parameters, or properties of the
            wrong shape type.
    """
    properties = coerce_properties(shape_type, properties)
    st = properties.shape
    if st is ShapeType.CIRCLE:
        return generate_circle_vertices(properties, segments)
    return GENERATORS[st](properties)


# =============================================================================
# Creation by drawing
# =============================================================================

def drawing_properties(shape_type: Union[str, ShapeType], start: Any, end: Any) -> GeometryProperties:
    """Initial properties for a shape drawn by dragging from *start* to *end*.

    - point: at start
    - line: start → end
    - circle: the drag is the diameter
    - rectangle / diamond: the drag's bounding box, in either direction

    Zero-size drags produce properties the generators reject, except for a
    zero-length line, which is rejected here.
    """
    st = resolve_shape_alias(shape_type)
    s, e = Point.coerce(start), Point.coerce(end)
    mid = Point((s.x + e.x) / 2, (s.y + e.y) / 2)
    if st is ShapeType.POINT:
        return PointProperties(center=s)
    if st is ShapeType.LINE:
        if s == e:
            raise InvalidGeometryError("line drawn with zero length")
        return LineProperties(start=s, end=e)
    if st is ShapeType.CIRCLE:
        return CircleProperties(center=mid, radius=s.distance_to(e) / 2)
    if st is ShapeType.RECTANGLE:
        return RectangleProperties(center=mid, width=abs(e.x - s.x), height=abs(e.y - s.y))
    if st is ShapeType.DIAMOND:
        return DiamondProperties(center=mid, width=abs(e.x - s.x), height=abs(e.y - s.y))
    raise InvalidGeometryError(f"unknown shape type: {shape_type!r}")
