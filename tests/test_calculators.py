"""Tests for the property calculators (geometry/calculators.py) and their
round-trip agreement with the generators.
"""
from __future__ import annotations

import pytest

from models import (
    Bounds,
    CircleProperties,
    DiamondProperties,
    LineProperties,
    Point,
    PointProperties,
    RectangleProperties,
    ShapeType,
    fields_of,
)
from geometry.calculators import (
    CALCULATORS,
    calculate_bounds,
    calculate_circle_properties,
    calculate_diamond_properties,
    calculate_properties,
    calculate_rectangle_properties,
)
from geometry.errors import InconsistentGeometryError
from geometry.generators import GENERATORS, generate_vertices
from geometry.hit_test import HIT_TESTERS

TOL = 1e-9


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _assert_props_close(a, b):
    assert type(a) is type(b)
    for name in fields_of(a):
        va, vb = getattr(a, name), getattr(b, name)
        if isinstance(va, Point):
            assert va.x == pytest.approx(vb.x, abs=TOL, rel=TOL)
            assert va.y == pytest.approx(vb.y, abs=TOL, rel=TOL)
        else:
            assert va == pytest.approx(vb, abs=TOL, rel=TOL)


def _assert_vertices_close(a, b):
    assert len(a) == len(b)
    for p, q in zip(a, b):
        assert p.x == pytest.approx(q.x, abs=TOL, rel=TOL)
        assert p.y == pytest.approx(q.y, abs=TOL, rel=TOL)


SAMPLE_PROPERTIES = [
    PointProperties(Point(3, -4)),
    PointProperties(Point(0.125, 1e6)),
    LineProperties(Point(0, 0), Point(10, 5)),
    LineProperties(Point(-3.3, 7.1), Point(-3.3, -2)),
    CircleProperties(Point(0, 0), 100),
    CircleProperties(Point(3.7, -12.1), 5.5),
    CircleProperties(Point(1e4, -2e4), 0.75),
    RectangleProperties(Point(0, 0), 10, 6),
    RectangleProperties(Point(-2.5, 8.25), 0.5, 31),
    DiamondProperties(Point(0, 0), 4, 2),
    DiamondProperties(Point(12.2, -0.3), 7.7, 1.1),
]


# ---------------------------------------------------------------------------
# Round trip
# ---------------------------------------------------------------------------

class TestRoundTrip:
    @pytest.mark.parametrize("props", SAMPLE_PROPERTIES, ids=lambda p: type(p).__name__)
    def test_calculator_inverts_generator(self, props):
        vertices = generate_vertices(props.shape, props)
        _assert_props_close(calculate_properties(props.shape, vertices), props)

    @pytest.mark.parametrize("props", SAMPLE_PROPERTIES, ids=lambda p: type(p).__name__)
    def test_generator_inverts_calculator(self, props):
        vertices = generate_vertices(props.shape, props)
        again = generate_vertices(props.shape, calculate_properties(props.shape, vertices))
        _assert_vertices_close(again, vertices)

    @pytest.mark.parametrize("segments", [4, 8, 16, 32])
    def test_circle_any_segment_count(self, segments):
        props = CircleProperties(Point(-6.5, 2.25), 9)
        vertices = generate_vertices(ShapeType.CIRCLE, props, segments=segments)
        _assert_props_close(calculate_properties(ShapeType.CIRCLE, vertices, segments=segments), props)

    def test_dispatch_covers_every_shape(self):
        assert set(GENERATORS) == set(ShapeType)
        assert set(CALCULATORS) == set(ShapeType)
        assert set(HIT_TESTERS) == set(ShapeType)


# ---------------------------------------------------------------------------
# Circle
# ---------------------------------------------------------------------------

class TestCircleCalculator:
    def test_center_is_not_a_vertex_mean(self):
        # Translating the circle must move the center exactly with it.
        vertices = generate_vertices(ShapeType.CIRCLE, CircleProperties(Point(0, 0), 100), segments=8)
        moved = [v + Point(5, 5) for v in vertices]
        props = calculate_circle_properties(moved, segments=8)
        assert props.center == Point(5, 5)
        assert props.radius == 100

    def test_non_equidistant_vertices(self):
        vertices = list(generate_vertices(ShapeType.CIRCLE, CircleProperties(Point(0, 0), 10), segments=8))
        vertices[3] = Point(vertices[3].x * 1.5, vertices[3].y * 1.5)
        with pytest.raises(InconsistentGeometryError):
            calculate_circle_properties(vertices, segments=8)

    def test_shuffled_vertices(self):
        vertices = list(generate_vertices(ShapeType.CIRCLE, CircleProperties(Point(0, 0), 10), segments=8))
        vertices[1], vertices[3] = vertices[3], vertices[1]
        with pytest.raises(InconsistentGeometryError):
            calculate_circle_properties(vertices, segments=8)

    def test_wrong_vertex_count(self):
        with pytest.raises(InconsistentGeometryError):
            calculate_circle_properties([Point(1, 0), Point(0, 1), Point(-1, 0)], segments=8)

    def test_collapsed_circle(self):
        with pytest.raises(InconsistentGeometryError):
            calculate_circle_properties([Point(2, 2)] * 8, segments=8)


# ---------------------------------------------------------------------------
# Rectangle and diamond
# ---------------------------------------------------------------------------

class TestRectangleCalculator:
    @pytest.mark.parametrize("vertices", [
        [(-5, -3), (5, 3)],
        [(5, 3), (-5, -3)],
        [(5, -3), (-5, 3)],
        [(-5, 3), (5, -3)],
    ])
    def test_direction_independent(self, vertices):
        props = calculate_properties("rectangle", vertices)
        assert props == RectangleProperties(Point(0, 0), 10, 6)

    def test_degenerate(self):
        with pytest.raises(InconsistentGeometryError):
            calculate_rectangle_properties([Point(0, 0), Point(0, 5)])

    def test_wrong_count(self):
        with pytest.raises(InconsistentGeometryError):
            calculate_rectangle_properties([Point(0, 0)])


class TestDiamondCalculator:
    def test_any_vertex_order(self):
        vertices = [Point(1, 0), Point(3, 1), Point(-1, 1), Point(1, 2)]
        assert calculate_diamond_properties(vertices) == DiamondProperties(Point(1, 1), 4, 2)

    def test_non_cardinal_vertex(self):
        vertices = [Point(-1, 1), Point(1, 0), Point(3, 1), Point(2, 2)]
        with pytest.raises(InconsistentGeometryError):
            calculate_diamond_properties(vertices)

    def test_repeated_cardinal(self):
        vertices = [Point(-1, 1), Point(-1, 1), Point(3, 1), Point(1, 0)]
        with pytest.raises(InconsistentGeometryError):
            calculate_diamond_properties(vertices)


# ---------------------------------------------------------------------------
# Misc
# ---------------------------------------------------------------------------

class TestCalculateProperties:
    def test_passthrough_shapes(self):
        assert calculate_properties("point", [(1, 2)]) == PointProperties(Point(1, 2))
        assert calculate_properties("line", [(4, 4), (0, 0)]) == LineProperties(Point(4, 4), Point(0, 0))

    def test_unknown_shape(self):
        with pytest.raises(InconsistentGeometryError):
            calculate_properties("hexagon", [(0, 0)])

    def test_non_finite_vertex(self):
        with pytest.raises(InconsistentGeometryError):
            calculate_properties("line", [(0, 0), (float("nan"), 1)])

    def test_inconsistent_is_value_error(self):
        with pytest.raises(ValueError):
            calculate_properties("point", [(0, 0), (1, 1)])

    def test_bounds(self):
        assert calculate_bounds([(3, 1), (-2, 4)]) == Bounds(-2, 1, 3, 4)
