import pytest

from perspkit.drawable import RecordingDrawable
from perspkit.shadow import (
    DragTarget,
    LightShadowScene,
    MAX_SQUARES,
    SHADOW_FILL,
    Square,
    dynamic_radius,
    ray_guides,
    shadow_polygon,
)


def scenario():
    s = LightShadowScene(960, 540, squares=[Square(100, 300, 100)])
    s.light = (670, 135)
    s.projection_y = 270
    return s


class TestShadowPolygon:

    def test_scenario(self):
        s = scenario()
        poly = s.shadow(s.squares[0])
        assert len(poly) == 4
        assert poly[0] == (100, 400)
        assert poly[1] == (200, 400)

    def test_starts_with_bottom_corners(self):
        sq = Square(400, 330, 80)
        TL, TR, BR, BL = sq.corners()
        found = 0
        for lx in range(20, 960, 60):
            for ly in (40, 120, 200, 250):
                for py in (270, 350, 450, 530):
                    poly = shadow_polygon(sq, (lx, ly), (lx, py), 960, 540, 10)
                    if poly is None:
                        continue
                    found += 1
                    assert poly[0] == BL
                    assert poly[1] == BR
        assert found > 0

    def test_diverging_rays_are_clipped(self):
        # light and projection closer than the square is tall: rays diverge
        sq = Square(100, 380, 100)
        poly = shadow_polygon(sq, (670, 200), (670, 270), 960, 540)
        assert poly[:2] == [(100, 480), (200, 480)]
        assert len(poly) == 5
        # exits through bottom and left, the corner is stitched in
        assert poly[2][1] == pytest.approx(540)
        assert poly[3] == (0.0, 540.0)
        assert poly[4][0] == pytest.approx(0)

    def test_ray_guides(self):
        guides = ray_guides(Square(100, 300, 100), (670, 135), (670, 270))
        assert len(guides) == 4
        for a, b in guides:
            assert ((b[0] - a[0]) ** 2 + (b[1] - a[1]) ** 2) ** 0.5 == pytest.approx(2000)

    def test_dynamic_radius(self):
        assert dynamic_radius(270, 270, 530, 2.5) == 10
        assert dynamic_radius(530, 270, 530, 2.5) == pytest.approx(35)
        assert dynamic_radius(400, 270, 270, 2.5) == 10


class TestPointer:

    def test_light_drag_is_clamped(self):
        s = LightShadowScene()
        lx, ly = s.light
        assert s.pointer_down(lx, ly)
        assert s.drag.target is DragTarget.LIGHT
        s.pointer_move(2000, 500)
        assert s.light == (950, s.horizon_y - 20)
        s.pointer_move(-50, 10)
        assert s.light == (10, 10)
        s.pointer_up()
        assert s.drag.target is DragTarget.NONE

    def test_projection_drag_is_clamped(self):
        s = LightShadowScene()
        px, py = s.projection
        assert s.pointer_down(px, py + 2)
        assert s.drag.target is DragTarget.PROJECTION
        s.pointer_move(px, 900)
        assert s.projection_y == 530
        s.pointer_move(px, 0)
        assert s.projection_y == s.horizon_y

    def test_horizon_drag_pushes_light_and_projection(self):
        s = LightShadowScene()
        assert s.pointer_down(100, s.horizon_y + 2)
        assert s.drag.target is DragTarget.HORIZON
        s.pointer_move(100, 102)
        assert s.horizon_y == 100
        assert s.light[1] == 80
        s.pointer_move(100, 900)
        assert s.horizon_y == 520
        assert s.projection_y == 520

    def test_square_hit_brings_to_front(self):
        s = LightShadowScene()
        first = s.squares[0]
        assert s.pointer_down(first.x + 5, first.y + 5)
        assert s.squares[-1] is first
        assert s.selected_index == len(s.squares) - 1
        s.pointer_move(-500, -500)
        moved = s.squares[-1]
        assert (moved.x, moved.y) == (10, 10)
        s.pointer_move(5000, 5000)
        moved = s.squares[-1]
        assert (moved.x, moved.y) == (960 - moved.size - 10, 540 - moved.size - 10)

    def test_square_edge_is_not_a_hit(self):
        s = LightShadowScene(squares=[Square(100, 300, 100)])
        assert not s.pointer_down(100, 350)

    def test_drag_ends_when_square_disappears(self):
        s = LightShadowScene()
        sq = s.squares[0]
        s.pointer_down(sq.x + 5, sq.y + 5)
        s.key_down('Delete')
        assert not s.pointer_move(300, 300)
        assert s.drag.target is DragTarget.NONE

    def test_stale_index_ends_drag(self):
        s = LightShadowScene()
        sq = s.squares[0]
        s.pointer_down(sq.x + 5, sq.y + 5)
        s.squares.clear()
        assert not s.pointer_move(300, 300)
        assert s.drag.target is DragTarget.NONE

    def test_miss(self):
        s = LightShadowScene(squares=[])
        assert not s.pointer_down(5, 5)
        assert not s.pointer_move(10, 10)


class TestCommands:

    def test_delete_selection(self):
        s = LightShadowScene()
        s.add_square()
        s.select(2)
        assert s.delete_selected()
        assert s.selected_index == 1
        s.select(0)
        assert s.delete_selected()
        assert s.selected_index == 0
        assert s.delete_selected()
        assert s.squares == []
        assert s.selected_index == 0
        assert not s.delete_selected()

    def test_add_square_limit(self):
        s = LightShadowScene(squares=[])
        for i in range(MAX_SQUARES):
            assert s.add_square() == i
        assert s.add_square() is None
        assert len({sq.color for sq in s.squares}) == 10
        for sq in s.squares:
            assert 10 <= sq.x <= 960 - sq.size - 10
            assert 10 <= sq.y <= 540 - sq.size - 10

    def test_clamped_setters(self):
        s = LightShadowScene()
        s.select(99)
        assert s.selected_index == 1
        s.select(-4)
        assert s.selected_index == 0
        s.set_size(1000)
        assert s.squares[0].size == 300
        s.set_size(1)
        assert s.squares[0].size == 10
        s.set_sensitivity(9)
        assert s.sensitivity == 4
        s.set_sensitivity(-1)
        assert s.sensitivity == 0


class TestRender:

    def test_rays_above_shadows(self):
        s = scenario()
        dd = RecordingDrawable()
        s.render(dd)
        rays = dd.of_kind('line', 'rays')
        assert len(rays) == 4
        assert all(c.style['gradient'] is not None for c in rays)
        shadows = [c for c in dd.of_kind('polygon', 'base') if c.style['fill'] == SHADOW_FILL]
        assert len(shadows) == 1
        last_base = max(i for i, c in enumerate(dd.commands) if c.layer == 'base')
        first_ray = min(i for i, c in enumerate(dd.commands) if c.layer == 'rays')
        assert last_base < first_ray
