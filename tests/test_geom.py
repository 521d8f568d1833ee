import math

import pytest

from perspkit.geom import *

## unit tests for perspkit geom.py


class TestLineIntersection:
    """line, ray and rectangle intersection"""

    def test_line_line(self):
        p = line_line_intersection((0, 0), (2, 2), (0, 2), (2, 0))
        assert p == pytest.approx((1.0, 1.0))

    def test_line_line_parallel(self):
        assert line_line_intersection((0, 0), (1, 0), (0, 1), (1, 1)) is None
        assert line_line_intersection((0, 0), (1, 1), (2, 2), (3, 3)) is None

    def test_ray_ray(self):
        p = ray_ray_intersection((0, 0), (1, 0), (5, -5), (5, -4))
        assert p == pytest.approx((5.0, 0.0))

    def test_ray_ray_behind_origin(self):
        assert ray_ray_intersection((0, 0), (-1, 0), (5, -5), (5, -4)) is None
        assert ray_ray_intersection((0, 0), (1, 0), (5, -5), (5, -6)) is None

    def test_ray_ray_min_distance(self):
        assert ray_ray_intersection((0, 0), (1, 0), (5, -5), (5, -4), min_dist_a=10) is None
        assert ray_ray_intersection((0, 0), (1, 0), (5, -5), (5, -4), min_dist_a=4) is not None
        assert ray_ray_intersection((0, 0), (1, 0), (5, -5), (5, -4), min_dist_c=6) is None

    def test_ray_rect_simple(self):
        hit = ray_rect_intersection((480, 270), (580, 270), 960, 540)
        assert hit.edge == 'right'
        assert hit.point == pytest.approx((960.0, 270.0))
        assert math.isclose(hit.t, 4.8)

    def test_ray_rect_minimum_root(self):
        a, b = (100, 200), (110, 210)
        hit = ray_rect_intersection(a, b, 960, 540)
        assert hit.edge == 'bottom'
        assert math.isclose(hit.t, 34.0)
        # the hit is on the boundary and on the ray
        assert hit.point == pytest.approx((a[0] + hit.t*10, a[1] + hit.t*10))
        assert math.isclose(hit.point[1], 540.0)
        assert 0 <= hit.point[0] <= 960

    def test_ray_rect_every_direction(self):
        for deg in range(0, 360, 15):
            a = (300.0, 200.0)
            b = (a[0] + math.cos(math.radians(deg)), a[1] + math.sin(math.radians(deg)))
            hit = ray_rect_intersection(a, b, 960, 540)
            assert hit is not None
            x, y = hit.point
            on_edge = (math.isclose(x, 0, abs_tol=1e-6) or math.isclose(x, 960, abs_tol=1e-6)
                       or math.isclose(y, 0, abs_tol=1e-6) or math.isclose(y, 540, abs_tol=1e-6))
            assert on_edge
            assert hit.t >= 0

    def test_ray_rect_outside(self):
        assert ray_rect_intersection((-10, -10), (-20, -20), 960, 540) is None

    def test_corner_between_edges(self):
        assert corner_between_edges('right', 'bottom', 960, 540) == (960.0, 540.0)
        assert corner_between_edges('top', 'left', 960, 540) == (0.0, 0.0)
        assert corner_between_edges('left', 'right', 960, 540) is None
        assert corner_between_edges('top', 'top', 960, 540) is None

    def test_extend_line_to_rect(self):
        a, b = extend_line_to_rect((100, 270), (200, 270), 960, 540)
        assert sorted([a[0], b[0]]) == pytest.approx([0.0, 960.0])
        assert a[1] == pytest.approx(270.0) and b[1] == pytest.approx(270.0)

    def test_extend_line_through_corner(self):
        a, b = extend_line_to_rect((10, 10), (20, 20), 540, 540)
        assert sorted([a, b]) == [pytest.approx((0.0, 0.0)), pytest.approx((540.0, 540.0))]

    def test_extend_line_misses(self):
        seg = extend_line_to_rect((0, -100), (10, -100), 960, 540)
        assert seg == ((0, -100), (10, -100))


class TestHelpers:

    def test_distances(self):
        assert math.isclose(point_segment_distance((5, 5), (0, 0), (10, 0)), 5.0)
        assert math.isclose(point_segment_distance((15, 0), (0, 0), (10, 0)), 5.0)
        assert math.isclose(point_segment_distance((3, 4), (0, 0), (0, 0)), 5.0)
        assert math.isclose(point_polyline_distance((5, 1), [(0, 0), (10, 0), (10, 10)]), 1.0)
        assert math.isclose(polyline_length([(0, 0), (3, 4), (3, 10)]), 11.0)

    def test_bbox(self):
        box = bbox2([(0, 0), (10, 5)], pad=2)
        assert box == ((-2, -2), (12, 7))
        assert inside_bbox2(box, (11, 6))
        assert not inside_bbox2(box, (13, 0))
        assert bbox2([]) is None

    def test_ray_points(self):
        a, b = ray_points((0, 0), (3, 4), 10)
        assert b == pytest.approx((6.0, 8.0))
        a, b = ray_points((1, 1), (1, 1), 10)
        assert a == b

    def test_clamp(self):
        assert clamp(5, 0, 3) == 3
        assert clamp(-1, 0, 3) == 0
        assert clamp01(0.5) == 0.5

    def test_hit_tests(self):
        assert hit_circle((3, 4), (0, 0), 5.1)
        assert not hit_circle((3, 4), (0, 0), 5)
        assert inside_square((5, 5), 0, 0, 10)
        assert not inside_square((0, 5), 0, 0, 10)
