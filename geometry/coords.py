"""
geometry/coords.py

Coordinate mapping between screen pixels and grid cells.

Three spaces are involved:

- screen: continuous pointer / display positions, in pixels
- vertex: screen scaled by 1 / cell_size (continuous, pan-independent)
- grid:   vertex shifted by the pan offset and floored to a cell; the only
          space vertices are stored in
"""

from __future__ import annotations

from typing import Any, Optional

from PyQt6.QtCore import QPointF

from models import Bounds, Point
from geometry.errors import ConfigurationError
from utils import floor_cell


def _check_cell_size(cell_size: float) -> None:
    if not cell_size > 0:
        raise ConfigurationError(f"cell_size must be > 0, got {cell_size}")


def screen_to_vertex(screen_point: Any, cell_size: float) -> Point:
    """Scale a screen position into continuous vertex space."""
    _check_cell_size(cell_size)
    sp = Point.coerce(screen_point)
    return Point(sp.x / cell_size, sp.y / cell_size)


def vertex_to_world(vertex: Point, pan_offset: Any) -> Point:
    """Shift a vertex-space position by the pan offset."""
    return vertex + Point.coerce(pan_offset)


def world_to_vertex(world: Point, pan_offset: Any) -> Point:
    """Undo the pan shift."""
    return world - Point.coerce(pan_offset)


def to_grid_coordinate(screen_point: Any, cell_size: float, pan_offset: Any = (0, 0)) -> Point:
    """Map a screen position to the grid cell under it.

    Args:
        screen_point: Point, (x, y) pair or QPointF in screen pixels.
        cell_size: Screen pixels per grid cell; must be > 0.
        pan_offset: Navigation offset in grid cells.

    Returns:
        Integer-valued grid coordinate.

    Raises:
        ConfigurationError: if cell_size <= 0.
    """
    world = vertex_to_world(screen_to_vertex(screen_point, cell_size), pan_offset)
    return Point(floor_cell(world.x), floor_cell(world.y))


def to_screen_coordinate(grid_point: Any, cell_size: float, pan_offset: Any = (0, 0)) -> QPointF:
    """Map a grid coordinate back to screen pixels.

    Exact inverse of ``to_grid_coordinate`` for integer grid coordinates.

    Raises:
        ConfigurationError: if cell_size <= 0.
    """
    _check_cell_size(cell_size)
    v = world_to_vertex(Point.coerce(grid_point), pan_offset)
    return QPointF(v.x * cell_size, v.y * cell_size)


class CoordinateMapper:
    """Screen ↔ grid mapping bound to the current viewport state.

    Holds the cell size and the pan offset supplied by the viewport /
    navigation collaborator.
    """

    def __init__(self, cell_size: float = 10.0, pan_offset: Any = (0, 0), move_amount: int = 5):
        _check_cell_size(cell_size)
        self.cell_size = float(cell_size)
        self.pan_offset = Point.coerce(pan_offset)
        self.move_amount = move_amount

    @classmethod
    def from_settings(cls, pan_offset: Any = (0, 0)) -> "CoordinateMapper":
        from settings import get_settings

        s = get_settings().settings
        return cls(s.grid.cell_size, pan_offset, s.navigation.move_amount)

    def set_cell_size(self, cell_size: float) -> None:
        _check_cell_size(cell_size)
        self.cell_size = float(cell_size)

    def to_grid(self, screen_point: Any) -> Point:
        return to_grid_coordinate(screen_point, self.cell_size, self.pan_offset)

    def to_screen(self, grid_point: Any) -> QPointF:
        return to_screen_coordinate(grid_point, self.cell_size, self.pan_offset)

    # ---- Navigation ----

    def pan(self, dx: float, dy: float) -> Point:
        """Shift the pan offset by (dx, dy) grid cells and return the new offset."""
        self.pan_offset = self.pan_offset + Point(dx, dy)
        return self.pan_offset

    def pan_step(self, step_x: int, step_y: int) -> Point:
        """Pan by whole navigation steps (e.g. arrow keys: (-1, 0) for left)."""
        return self.pan(step_x * self.move_amount, step_y * self.move_amount)

    def reset_pan(self) -> None:
        self.pan_offset = Point(0, 0)

    def visible_grid_bounds(self, width: float, height: float, padding: int = 2,
                            origin: Optional[Any] = None) -> Bounds:
        """Grid cells covered by a screen rectangle, padded for culling.

        Args:
            width: Screen width in pixels.
            height: Screen height in pixels.
            padding: Extra cells on each side.
            origin: Screen position of the rectangle's top-left (default 0, 0).
        """
        ox, oy = Point.coerce(origin if origin is not None else (0, 0)).to_tuple()
        top_left = self.to_grid((ox, oy))
        bottom_right = self.to_grid((ox + width, oy + height))
        return Bounds(
            top_left.x - padding,
            top_left.y - padding,
            bottom_right.x + padding,
            bottom_right.y + padding,
        )
