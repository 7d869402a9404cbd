"""Tests for screen <-> grid coordinate mapping (geometry/coords.py)."""
from __future__ import annotations

import pytest
from PyQt6.QtCore import QPointF

from models import Bounds, Point
from geometry.coords import (
    CoordinateMapper,
    screen_to_vertex,
    to_grid_coordinate,
    to_screen_coordinate,
)
from geometry.errors import ConfigurationError


# ---------------------------------------------------------------------------
# Pure functions
# ---------------------------------------------------------------------------

class TestToGridCoordinate:
    def test_floors_into_cells(self):
        assert to_grid_coordinate((25, 37), 10) == Point(2, 3)
        assert to_grid_coordinate((29.99, 30), 10) == Point(2, 3)

    def test_negative_screen_positions_floor_down(self):
        assert to_grid_coordinate((-1, -11), 10) == Point(-1, -2)

    def test_pan_offset_shifts_cells(self):
        assert to_grid_coordinate((25, 37), 10, (5, -2)) == Point(7, 1)

    def test_accepts_qpointf(self):
        assert to_grid_coordinate(QPointF(15.0, 5.0), 10) == Point(1, 0)

    def test_returns_integer_values(self):
        g = to_grid_coordinate((12.5, 47.2), 5)
        assert g.x == int(g.x) and g.y == int(g.y)

    @pytest.mark.parametrize("cell_size", [0, -1, -0.5])
    def test_non_positive_cell_size(self, cell_size):
        with pytest.raises(ConfigurationError):
            to_grid_coordinate((1, 1), cell_size)
        with pytest.raises(ConfigurationError):
            to_screen_coordinate((1, 1), cell_size)
        with pytest.raises(ConfigurationError):
            screen_to_vertex((1, 1), cell_size)

    def test_configuration_error_is_value_error(self):
        with pytest.raises(ValueError):
            to_grid_coordinate((1, 1), 0)


class TestToScreenCoordinate:
    def test_returns_qpointf(self):
        sp = to_screen_coordinate((2, 3), 10)
        assert isinstance(sp, QPointF)
        assert (sp.x(), sp.y()) == (20.0, 30.0)

    def test_pan_offset(self):
        sp = to_screen_coordinate((7, 1), 10, (5, -2))
        assert (sp.x(), sp.y()) == (20.0, 30.0)

    @pytest.mark.parametrize("cell_size", [10.0, 7.5, 3.0, 0.1, 1.3])
    @pytest.mark.parametrize("pan", [(0, 0), (5, -2), (-13, 40)])
    def test_exact_inverse_for_integer_grid(self, cell_size, pan):
        for gx in range(-12, 13, 3):
            for gy in range(-12, 13, 4):
                screen = to_screen_coordinate((gx, gy), cell_size, pan)
                assert to_grid_coordinate(screen, cell_size, pan) == Point(gx, gy)


# ---------------------------------------------------------------------------
# CoordinateMapper
# ---------------------------------------------------------------------------

class TestCoordinateMapper:
    def test_defaults_from_settings(self, isolated_settings):
        isolated_settings.settings.grid.cell_size = 20.0
        isolated_settings.settings.navigation.move_amount = 3
        m = CoordinateMapper.from_settings()
        assert m.cell_size == 20.0
        assert m.move_amount == 3
        assert m.to_grid((45, 45)) == Point(2, 2)

    def test_rejects_bad_cell_size(self):
        with pytest.raises(ConfigurationError):
            CoordinateMapper(cell_size=0)
        m = CoordinateMapper()
        with pytest.raises(ConfigurationError):
            m.set_cell_size(-4)
        assert m.cell_size == 10.0

    def test_pan_and_reset(self):
        m = CoordinateMapper(cell_size=10, move_amount=5)
        m.pan(2, 3)
        assert m.pan_offset == Point(2, 3)
        assert m.pan_step(-1, 0) == Point(-3, 3)
        assert m.to_grid((0, 0)) == Point(-3, 3)
        m.reset_pan()
        assert m.pan_offset == Point(0, 0)

    def test_round_trip_through_mapper(self):
        m = CoordinateMapper(cell_size=8, pan_offset=(3, -7))
        assert m.to_grid(m.to_screen((11, 4))) == Point(11, 4)

    def test_visible_grid_bounds(self):
        m = CoordinateMapper(cell_size=10)
        assert m.visible_grid_bounds(800, 600) == Bounds(-2, -2, 82, 62)

    def test_visible_grid_bounds_follow_pan(self):
        m = CoordinateMapper(cell_size=10, pan_offset=(10, 5))
        assert m.visible_grid_bounds(100, 100, padding=0) == Bounds(10, 5, 20, 15)
