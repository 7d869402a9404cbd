"""
models.py

Data models and constants for the Pixeloid geometry core.

Shapes are a tagged variant over ``ShapeType``.  Each variant has its own
frozen properties dataclass; vertices are stored as tuples of ``Point`` in
grid coordinates and are the ground truth for every shape.
"""

from __future__ import annotations

import math
import time
from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import Any, ClassVar, Dict, Iterable, Mapping, Optional, Tuple, Union


# ----------------------------
# Shape type tag
# ----------------------------

class ShapeType(str, Enum):
    """The five shape kinds the core knows how to generate, calculate and hit-test."""
    POINT = "point"
    LINE = "line"
    CIRCLE = "circle"
    RECTANGLE = "rectangle"
    DIAMOND = "diamond"


# Maps external names to a ShapeType.  Each alias maps to exactly one type.
SHAPE_ALIAS_MAP: Dict[str, ShapeType] = {
    "point":     ShapeType.POINT,
    "dot":       ShapeType.POINT,
    "line":      ShapeType.LINE,
    "segment":   ShapeType.LINE,
    "circle":    ShapeType.CIRCLE,
    "rectangle": ShapeType.RECTANGLE,
    "rect":      ShapeType.RECTANGLE,
    "diamond":   ShapeType.DIAMOND,
    "rhombus":   ShapeType.DIAMOND,
}


def resolve_shape_alias(name: Union[str, ShapeType], fallback: Optional[ShapeType] = None) -> Optional[ShapeType]:
    """Resolve a shape name (or a ShapeType) to a ShapeType.

    Args:
        name: Shape name such as ``'rect'`` or ``'circle'``.
        fallback: Value returned when no alias matches.

    Returns:
        The ShapeType, or *fallback* if the name is unknown.
    """
    if isinstance(name, ShapeType):
        return name
    return SHAPE_ALIAS_MAP.get(str(name).strip().lower(), fallback)


# ----------------------------
# Grid coordinates
# ----------------------------

@dataclass(frozen=True)
class Point:
    """A 2D coordinate in grid space."""
    x: float = 0.0
    y: float = 0.0

    def __add__(self, other: "Point") -> "Point":
        return Point(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Point") -> "Point":
        return Point(self.x - other.x, self.y - other.y)

    def distance_to(self, other: "Point") -> float:
        return math.hypot(self.x - other.x, self.y - other.y)

    def to_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)

    @classmethod
    def coerce(cls, value: Any) -> "Point":
        """Build a Point from a Point, an (x, y) pair, a mapping or a Qt point."""
        if isinstance(value, Point):
            return value
        if isinstance(value, Mapping):
            return cls(float(value["x"]), float(value["y"]))
        if hasattr(value, "x") and callable(value.x):
            # QPointF / QPoint
            return cls(float(value.x()), float(value.y()))
        x, y = value
        return cls(float(x), float(y))


def as_vertices(values: Iterable[Any]) -> Tuple[Point, ...]:
    """Coerce an iterable of point-likes into a vertex tuple."""
    return tuple(Point.coerce(v) for v in values)


@dataclass(frozen=True)
class Bounds:
    """Axis-aligned extent of a vertex set."""
    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @property
    def center(self) -> Point:
        return Point((self.min_x + self.max_x) / 2, (self.min_y + self.max_y) / 2)

    def contains(self, point: Point) -> bool:
        return self.min_x <= point.x <= self.max_x and self.min_y <= point.y <= self.max_y

    @classmethod
    def from_points(cls, points: Iterable[Point]) -> "Bounds":
        pts = list(points)
        if not pts:
            raise ValueError("bounds of an empty vertex list")
        xs = [p.x for p in pts]
        ys = [p.y for p in pts]
        return cls(min(xs), min(ys), max(xs), max(ys))


# ----------------------------
# Shape properties
# ----------------------------
#
# Only the dataclass fields are canonical (and take part in equality).
# Everything exposed as a @property is derived for display.

@dataclass(frozen=True)
class PointProperties:
    center: Point

    shape: ClassVar[ShapeType] = ShapeType.POINT


@dataclass(frozen=True)
class LineProperties:
    start: Point
    end: Point

    shape: ClassVar[ShapeType] = ShapeType.LINE

    @property
    def midpoint(self) -> Point:
        return Point((self.start.x + self.end.x) / 2, (self.start.y + self.end.y) / 2)

    @property
    def length(self) -> float:
        return self.start.distance_to(self.end)

    @property
    def angle(self) -> float:
        """Direction from start to end, in radians."""
        return math.atan2(self.end.y - self.start.y, self.end.x - self.start.x)


@dataclass(frozen=True)
class CircleProperties:
    center: Point
    radius: float

    shape: ClassVar[ShapeType] = ShapeType.CIRCLE

    @property
    def diameter(self) -> float:
        return self.radius * 2

    @property
    def circumference(self) -> float:
        return 2 * math.pi * self.radius

    @property
    def area(self) -> float:
        return math.pi * self.radius * self.radius


@dataclass(frozen=True)
class RectangleProperties:
    center: Point
    width: float
    height: float

    shape: ClassVar[ShapeType] = ShapeType.RECTANGLE

    @property
    def top_left(self) -> Point:
        return Point(self.center.x - self.width / 2, self.center.y - self.height / 2)

    @property
    def bottom_right(self) -> Point:
        return Point(self.center.x + self.width / 2, self.center.y + self.height / 2)

    @property
    def area(self) -> float:
        return self.width * self.height

    @property
    def perimeter(self) -> float:
        return 2 * (self.width + self.height)


@dataclass(frozen=True)
class DiamondProperties:
    center: Point
    width: float
    height: float

    shape: ClassVar[ShapeType] = ShapeType.DIAMOND

    @property
    def west(self) -> Point:
        return Point(self.center.x - self.width / 2, self.center.y)

    @property
    def north(self) -> Point:
        return Point(self.center.x, self.center.y - self.height / 2)

    @property
    def east(self) -> Point:
        return Point(self.center.x + self.width / 2, self.center.y)

    @property
    def south(self) -> Point:
        return Point(self.center.x, self.center.y + self.height / 2)

    @property
    def area(self) -> float:
        return (self.width * self.height) / 2

    @property
    def perimeter(self) -> float:
        return 4 * math.hypot(self.width / 2, self.height / 2)


GeometryProperties = Union[
    PointProperties,
    LineProperties,
    CircleProperties,
    RectangleProperties,
    DiamondProperties,
]

PROPERTIES_CLASSES: Dict[ShapeType, type] = {
    ShapeType.POINT: PointProperties,
    ShapeType.LINE: LineProperties,
    ShapeType.CIRCLE: CircleProperties,
    ShapeType.RECTANGLE: RectangleProperties,
    ShapeType.DIAMOND: DiamondProperties,
}

# Field names that hold a Point (everything else is a float)
_POINT_FIELDS = {"center", "start", "end"}


def _coerce_field(name: str, value: Any) -> Any:
    if name in _POINT_FIELDS:
        return Point.coerce(value)
    return float(value)


def make_properties(shape_type: Union[str, ShapeType], values: Mapping[str, Any]) -> GeometryProperties:
    """Build the properties dataclass for *shape_type* from a plain mapping.

    Points may be given as ``Point``, ``(x, y)`` or ``{"x": .., "y": ..}``.

    Raises:
        KeyError: if a required field is missing.
        TypeError: if an unknown field is given.
    """
    st = resolve_shape_alias(shape_type)
    if st is None:
        raise ValueError(f"unknown shape type: {shape_type!r}")
    cls = PROPERTIES_CLASSES[st]
    names = {f.name for f in fields(cls)}
    unknown = set(values) - names
    if unknown:
        raise TypeError(f"unknown {st.value} properties: {sorted(unknown)}")
    return cls(**{n: _coerce_field(n, values[n]) for n in names})


def update_properties(properties: GeometryProperties, changes: Mapping[str, Any]) -> GeometryProperties:
    """Return a copy of *properties* with *changes* applied (partial update)."""
    names = {f.name for f in fields(properties)}
    unknown = set(changes) - names
    if unknown:
        raise TypeError(f"unknown {properties.shape.value} properties: {sorted(unknown)}")
    return replace(properties, **{k: _coerce_field(k, v) for k, v in changes.items()})


def fields_of(properties: GeometryProperties) -> Tuple[str, ...]:
    """Canonical field names of a properties object, in declaration order."""
    return tuple(f.name for f in fields(properties))


def properties_to_dict(properties: GeometryProperties) -> Dict[str, Any]:
    """Flatten canonical properties to plain values (points as (x, y))."""
    out: Dict[str, Any] = {}
    for f in fields(properties):
        v = getattr(properties, f.name)
        out[f.name] = v.to_tuple() if isinstance(v, Point) else v
    return out


# ----------------------------
# Style
# ----------------------------

@dataclass(frozen=True)
class ObjectStyle:
    """Rendering style.  Opaque to the geometry core; carried through untouched."""
    color: int = 0xFF0000
    stroke_width: float = 2.0
    stroke_alpha: float = 1.0
    fill_color: Optional[int] = None
    fill_alpha: Optional[float] = None

    @classmethod
    def from_settings(cls) -> "ObjectStyle":
        """Default style from settings.  Defaults: red, width 2, opaque, no fill."""
        from settings import get_settings
        from utils import hex_to_color_int

        d = get_settings().settings.style
        fill = hex_to_color_int(d.fill_color) if d.fill_color else None
        return cls(
            color=hex_to_color_int(d.color, 0xFF0000),
            stroke_width=d.stroke_width,
            stroke_alpha=d.stroke_alpha,
            fill_color=fill,
            fill_alpha=d.fill_alpha if fill is not None else None,
        )

    @property
    def color_hex(self) -> str:
        from utils import color_int_to_hex
        return color_int_to_hex(self.color)

    def stroke_qcolor(self):
        """Stroke color as a QColor, for rendering collaborators."""
        from utils import color_int_to_qcolor
        return color_int_to_qcolor(self.color, self.stroke_alpha)

    def fill_qcolor(self):
        """Fill color as a QColor, or None when the shape is unfilled."""
        from utils import color_int_to_qcolor
        if self.fill_color is None:
            return None
        return color_int_to_qcolor(self.fill_color, self.fill_alpha if self.fill_alpha is not None else 1.0)


# ----------------------------
# Geometric object
# ----------------------------

@dataclass(frozen=True)
class GeometricObject:
    """A stored shape.

    ``vertices`` are the ground truth.  ``properties`` are derived from them
    and only exist for display and editing.
    """
    id: str
    type: ShapeType
    vertices: Tuple[Point, ...]
    properties: GeometryProperties
    style: ObjectStyle = field(default_factory=ObjectStyle)
    is_visible: bool = True
    created_at: float = field(default_factory=time.time)

    @property
    def bounds(self) -> Bounds:
        return Bounds.from_points(self.vertices)

    def with_vertices(self, vertices: Iterable[Point]) -> "GeometricObject":
        return replace(self, vertices=as_vertices(vertices))

    def with_geometry(self, vertices: Iterable[Point], properties: GeometryProperties) -> "GeometricObject":
        return replace(self, vertices=as_vertices(vertices), properties=properties)


# ----------------------------
# Interaction mode constants
# ----------------------------

class Mode:
    """Pointer interaction modes for the scene."""
    SELECT = "select"
    POINT = "point"
    LINE = "line"
    CIRCLE = "circle"
    RECTANGLE = "rectangle"
    DIAMOND = "diamond"


DRAWING_MODES: Dict[str, ShapeType] = {
    Mode.POINT: ShapeType.POINT,
    Mode.LINE: ShapeType.LINE,
    Mode.CIRCLE: ShapeType.CIRCLE,
    Mode.RECTANGLE: ShapeType.RECTANGLE,
    Mode.DIAMOND: ShapeType.DIAMOND,
}
