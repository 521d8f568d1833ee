import math

import pytest

from perspkit.drawable import RecordingDrawable
from perspkit.perspective import (
    DEFAULT_POSITION,
    EDGES,
    Cube,
    PerspectiveCubeScene,
    drag_position,
    project_cube,
)
from perspkit.xform import Quaternion, camera_pitch


class TestProjection:

    def test_default_cube(self):
        pc = project_cube(Cube(), 960, 540, 800, 270)
        assert len(pc.vertices) == 8
        assert len(pc.edges()) == 12
        # back-face vertex 0 at (-75, -75, 725)
        d = 800 * 75 / 725
        assert pc.vertices[0] == pytest.approx((480 - d, 270 - d))
        assert pc.in_front

    def test_extensions_reach_the_boundary(self):
        s = PerspectiveCubeScene()
        s.set_rotation('y', 30)
        s.set_rotation('x', 20)
        for a, b in s.vanishing_lines()[0]:
            for p in (a, b):
                on_edge = (abs(p[0]) <= 1 or abs(p[0] - 960) <= 1
                           or abs(p[1]) <= 1 or abs(p[1] - 540) <= 1)
                assert on_edge

    def test_two_point_keeps_verticals(self):
        s = PerspectiveCubeScene(mode='two-point', cubes=[Cube((30, 40, 50), (0, 0, 800))])
        v = s.projected()[0].vertices
        for i, j in ((0, 3), (1, 2), (5, 6), (4, 7)):
            assert v[i][0] == pytest.approx(v[j][0])

    def test_bad_mode(self):
        with pytest.raises(ValueError):
            PerspectiveCubeScene(mode='one-point')

    def test_only_selected_extensions(self):
        s = PerspectiveCubeScene()
        s.add_cube()
        assert sorted(s.vanishing_lines()) == [0, 1]
        s.only_selected_extensions = True
        assert list(s.vanishing_lines()) == [1]
        assert len(s.vanishing_lines()[1]) == len(EDGES)

    def test_pitch_follows_horizon(self):
        s = PerspectiveCubeScene()
        assert s.pitch == 0.0
        s.set_horizon(150)
        assert s.pitch == pytest.approx(camera_pitch(540, 150, 800))
        s.set_horizon(-10)
        assert s.horizon_y == 20


class TestDrag:

    def test_horizon_drag(self):
        s = PerspectiveCubeScene()
        assert s.pointer_down(10, 271)
        assert s.dragging == 'horizon'
        s.pointer_move(10, 101)
        assert s.horizon_y == 100
        s.pointer_move(10, 5)
        assert s.horizon_y == 20
        s.pointer_up()
        assert s.dragging is None

    def test_cube_drag(self):
        s = PerspectiveCubeScene()
        assert s.pointer_down(480, 300)
        assert s.dragging == 'cube'
        s.pointer_move(580, 320)
        assert s.cubes[0].position == pytest.approx((100, 20, 800))
        s.pointer_up()

    def test_ground_drag(self):
        s = PerspectiveCubeScene()
        s.pointer_down(480, 300, modifier=True)
        s.pointer_move(480, 350)
        assert s.cubes[0].position == pytest.approx((0, 0, 850))

    def test_topmost_cube_wins(self):
        s = PerspectiveCubeScene(cubes=[Cube(), Cube(position=(0, 0, 800))])
        s.select(0)
        s.pointer_down(480, 300)
        assert s.selected_index == 1

    def test_drag_ends_when_cube_disappears(self):
        s = PerspectiveCubeScene()
        s.pointer_down(480, 300)
        s.key_down('Delete')
        assert s.cubes == []
        assert not s.pointer_move(600, 300)
        assert s.dragging is None

    def test_miss(self):
        s = PerspectiveCubeScene()
        assert not s.pointer_down(20, 20)

    def test_drag_position(self):
        assert drag_position((0, 0, 400), (0, 0), (80, 40), 800, False) == (40, 20, 400)
        assert drag_position((0, 0, 400), (0, 0), (80, 40), 800, True) == (40, 0, 420)


class TestCommands:

    def test_add_cube_placement(self):
        s = PerspectiveCubeScene()
        assert s.add_cube() == 1
        assert s.cubes[1].position == (-100, 75, 780)
        for _ in range(5):
            s.add_cube()
        assert s.cubes[6].position == (-100, 75, 860)
        assert s.selected_index == 6

    def test_remove_selection(self):
        s = PerspectiveCubeScene()
        s.add_cube()
        s.add_cube()
        s.select(2)
        assert s.remove_selected()
        assert s.selected_index == 1
        s.select(0)
        assert s.remove_selected()
        assert s.selected_index == 0
        assert s.remove_selected()
        assert not s.remove_selected()
        assert s.selected is None

    def test_focal_is_clamped(self):
        s = PerspectiveCubeScene()
        s.set_focal(10)
        assert s.focal == 100
        s.set_focal(1e6)
        assert s.focal == 4000

    def test_reset_current(self):
        s = PerspectiveCubeScene(use_quaternions=True)
        s.set_rotation('x', 40)
        s.set_position('z', 1200)
        s.set_focal(2000)
        s.reset_current()
        c = s.selected
        assert c.rotation_deg == (0, 0, 0)
        assert c.position == DEFAULT_POSITION
        assert c.orientation.isclose(Quaternion.identity())
        assert s.focal == 800

    def test_set_position(self):
        s = PerspectiveCubeScene()
        s.set_position('x', -50)
        assert s.selected.position == (-50, 0, 800)
        with pytest.raises(ValueError):
            s.set_position('w', 1)


class TestRotation:

    def test_degrees_mode(self):
        s = PerspectiveCubeScene()
        s.set_rotation('y', 45)
        assert s.selected.rotation_deg == (0, 45, 0)
        assert s.selected.orientation is None
        assert s.displayed_rotation() == (0, 45, 0)

    def test_quaternion_full_turn(self):
        s = PerspectiveCubeScene(use_quaternions=True)
        for deg in (120, 240, 360):
            s.set_rotation('y', deg)
        assert s.selected.rotation_deg[1] == 360
        assert s.selected.orientation.isclose(Quaternion.identity(), 1e-9)

    def test_quaternion_applies_deltas(self):
        s = PerspectiveCubeScene(use_quaternions=True)
        s.set_rotation('x', 30)
        s.set_rotation('x', 10)
        expect = Quaternion.from_axis_angle('x', 10)
        assert s.selected.orientation.isclose(expect, 1e-9)
        assert s.displayed_rotation() == pytest.approx((10, 0, 0))

    def test_quaternion_order_matters(self):
        a = PerspectiveCubeScene(use_quaternions=True)
        a.set_rotation('x', 90)
        a.set_rotation('y', 90)
        b = PerspectiveCubeScene(use_quaternions=True)
        b.set_rotation('y', 90)
        b.set_rotation('x', 90)
        assert a.selected.rotation_deg == b.selected.rotation_deg
        assert not a.selected.orientation.isclose(b.selected.orientation, 1e-6)

    def test_bad_axis(self):
        s = PerspectiveCubeScene()
        with pytest.raises(ValueError):
            s.set_rotation('q', 10)


class TestRender:

    def test_layers(self):
        s = PerspectiveCubeScene()
        s.add_cube()
        dd = RecordingDrawable()
        s.render(dd)
        assert len(dd.of_kind('line', 'edges')) == 24
        ext = dd.of_kind('line', 'extensions')
        assert len(ext) == 24
        assert all(c.style['dash'] for c in ext)
        widths = {c.style['width'] for c in dd.of_kind('line', 'edges')}
        assert widths == {2, 1.5}
        assert len(dd.of_kind('circle', 'handles')) == 1
        assert dd.of_kind('line', 'base')[0].points == [(0, 270), (960, 270)]

    def test_cube_behind_camera_plane_is_skipped(self):
        near = Cube(position=(0, 0, 50))
        s = PerspectiveCubeScene(cubes=[Cube(), near])
        assert not s.projected()[1].in_front
        assert list(s.vanishing_lines()) == [0]
        dd = RecordingDrawable()
        s.render(dd)
        assert len(dd.of_kind('line', 'edges')) == 12
        assert len(dd.of_kind('line', 'extensions')) == 12
        # the near cube would be topmost, but it cannot be grabbed
        assert s.pointer_down(480, 300)
        assert s.selected_index == 0
