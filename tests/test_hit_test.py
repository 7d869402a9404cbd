"""Tests for hit testing (geometry/hit_test.py): per-shape containment and
independence from the direction a shape was drawn in.
"""
from __future__ import annotations

import pytest

from models import GeometricObject, Point, ShapeType, as_vertices
from geometry.calculators import calculate_properties
from geometry.hit_test import contains, distance_to_segment, find_object_at


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _obj(shape, vertices, obj_id="g1", visible=True):
    verts = as_vertices(vertices)
    st = ShapeType(shape)
    return GeometricObject(
        id=obj_id,
        type=st,
        vertices=verts,
        properties=calculate_properties(st, verts, segments=len(verts) if st is ShapeType.CIRCLE else None),
        is_visible=visible,
    )


def _circle(center, radius, obj_id="c1"):
    from geometry.generators import generate_circle_vertices
    from models import CircleProperties
    verts = generate_circle_vertices(CircleProperties(Point.coerce(center), radius), segments=8)
    return _obj("circle", verts, obj_id)


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------

class TestRectangleHit:
    @pytest.mark.parametrize("vertices", [
        [(8, 8), (12, 12)],
        [(12, 12), (8, 8)],
        [(12, 8), (8, 12)],
        [(8, 12), (12, 8)],
    ])
    def test_direction_independent(self, vertices):
        rect = _obj("rectangle", vertices)
        assert contains(rect, (11, 11))
        assert contains(rect, (8, 8))
        assert not contains(rect, (13, 11))
        assert not contains(rect, (11, 7))


class TestPointHit:
    def test_within_tolerance(self):
        p = _obj("point", [(0, 0)])
        assert contains(p, (0.4, 0))
        assert not contains(p, (0.6, 0))

    def test_tolerance_from_settings(self, isolated_settings):
        isolated_settings.settings.hit_test.point_distance = 1.0
        assert contains(_obj("point", [(0, 0)]), (0.6, 0.6))

    def test_explicit_tolerance(self):
        assert contains(_obj("point", [(0, 0)]), (2, 0), point_distance=2)


class TestLineHit:
    def test_near_segment(self):
        line = _obj("line", [(0, 0), (10, 0)])
        assert contains(line, (5, 0.4))
        assert not contains(line, (5, 0.6))

    def test_clamped_to_endpoints(self):
        line = _obj("line", [(0, 0), (10, 0)])
        assert not contains(line, (12, 0))
        assert contains(line, (-0.3, 0.3))

    def test_direction_independent(self):
        a = _obj("line", [(0, 0), (10, 10)])
        b = _obj("line", [(10, 10), (0, 0)])
        for p in [(5, 5), (5.3, 5), (11, 11), (0, 3)]:
            assert contains(a, p) == contains(b, p)

    def test_distance_to_degenerate_segment(self):
        assert distance_to_segment(Point(3, 4), Point(0, 0), Point(0, 0)) == 5


class TestCircleHit:
    def test_inside_and_outside(self):
        c = _circle((0, 0), 5)
        assert contains(c, (3, 3))
        assert contains(c, (5, 0))
        assert not contains(c, (4, 4))

    def test_uses_vertices_not_stale_properties(self):
        c = _circle((0, 0), 5)
        moved = c.with_vertices([v + Point(100, 0) for v in c.vertices])
        assert contains(moved, (100, 0))
        assert not contains(moved, (0, 0))

    def test_broken_circle_is_not_hit(self, caplog):
        c = _circle((0, 0), 5)
        verts = list(c.vertices)
        verts[1] = Point(0, 0)
        broken = c.with_vertices(verts)
        assert not contains(broken, (0, 0))
        assert "Hit test skipped" in caplog.text

    def test_bad_vertex_count_is_not_hit(self, caplog):
        c = _circle((50, 50), 10)
        broken = c.with_vertices(c.vertices[:6])
        assert not contains(broken, (50, 50))
        assert "Hit test skipped" in caplog.text

    def test_bad_vertex_count_does_not_block_others(self):
        good = _circle((50, 50), 10, obj_id="good")
        broken = _circle((50, 50), 10, obj_id="broken")
        broken = broken.with_vertices(broken.vertices[:6])
        assert find_object_at([good, broken], (50, 50)) is good


class TestDiamondHit:
    def test_inside_and_outside(self):
        d = _obj("diamond", [(-5, 0), (0, -3), (5, 0), (0, 3)])
        assert contains(d, (0, 0))
        assert contains(d, (2, 1))
        assert not contains(d, (4, 2))
        assert not contains(d, (5, 3))

    def test_vertex_order_does_not_matter(self):
        a = _obj("diamond", [(-5, 0), (0, -3), (5, 0), (0, 3)])
        b = _obj("diamond", [(5, 0), (0, 3), (-5, 0), (0, -3)])
        for p in [(2, 1), (4, 2), (-4.9, 0), (0, -3.1)]:
            assert contains(a, p) == contains(b, p)


class TestFindObjectAt:
    def test_topmost_wins(self):
        lower = _obj("rectangle", [(0, 0), (10, 10)], "g1")
        upper = _obj("rectangle", [(5, 5), (15, 15)], "g2")
        assert find_object_at([lower, upper], (7, 7)).id == "g2"
        assert find_object_at([lower, upper], (2, 2)).id == "g1"

    def test_hidden_objects_are_skipped(self):
        lower = _obj("rectangle", [(0, 0), (10, 10)], "g1")
        upper = _obj("rectangle", [(5, 5), (15, 15)], "g2", visible=False)
        assert find_object_at([lower, upper], (7, 7)).id == "g1"

    def test_miss(self):
        assert find_object_at([_obj("point", [(0, 0)])], (3, 3)) is None
        assert find_object_at([], (0, 0)) is None
