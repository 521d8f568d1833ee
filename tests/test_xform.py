import math

import pytest

from perspkit.xform import *

## unit tests for perspkit xform.py


class TestXform:
    """unit tests for perspkit matrix operations"""

    def test_matrix(self):
        foo = Matrix([1, 2, 3, 4, 5, 6, 7, 8, 9])
        I = Matrix()
        assert(I.mul(foo).m == foo.m)
        assert(foo.mul(I).m == foo.m)
        assert(foo.mul((1, 0, 0)) == (1, 4, 7))
        assert(foo.mul(2.0).m == [[2, 4, 6], [8, 10, 12], [14, 16, 18]])
        assert(foo.transpose().getrow(0) == (1, 4, 7))
        with pytest.raises(ValueError):
            Matrix([1, 2, 3])

    def test_axis_rotations(self):
        assert Rx(math.pi/2).mul((0, 1, 0)) == pytest.approx((0, 0, 1))
        assert Ry(math.pi/2).mul((0, 0, 1)) == pytest.approx((1, 0, 0))
        assert Rz(math.pi/2).mul((1, 0, 0)) == pytest.approx((0, 1, 0))

    def test_rotation_matches_axis_matrices(self):
        assert Rotation('z', 30).isclose(Rz(math.radians(30)))
        assert Rotation('x', -45).isclose(Rx(math.radians(-45)))
        assert Rotation('y', 30, inverse=True).isclose(Ry(math.radians(-30)))
        with pytest.raises(ValueError):
            Rotation('w', 10)

    def test_object_rotation(self):
        assert object_rotation((0, 0, 0)).isclose(Identity())
        R = object_rotation((10, 20, 30))
        expect = Rx(math.radians(10)).mul(Ry(math.radians(20))).mul(Rz(math.radians(30)))
        assert R.isclose(expect)

    def test_two_point_ignores_x_and_z(self):
        R = object_rotation((40, 20, 70), mode='two-point')
        assert R.isclose(Ry(math.radians(20)))


class TestQuaternion:

    def test_full_turn_is_identity(self):
        for axis in ('x', 'y', 'z'):
            q = Quaternion.identity()
            for delta in (90, 90, 90, 90):
                q = q.compose(axis, delta)
            assert q.isclose(Quaternion.identity(), 1e-9)

    def test_uneven_deltas_sum_to_full_turn(self):
        q = Quaternion.identity()
        for delta in (100, 200, 60, -30, 30):
            q = q.compose('y', delta)
        assert q.isclose(Quaternion.identity(), 1e-9)
        assert q.to_matrix().isclose(Identity(), 1e-9)

    def test_stays_unit(self):
        q = Quaternion.identity()
        for i in range(500):
            q = q.compose('xyz'[i % 3], 7.3)
        assert math.isclose(q.norm(), 1.0, abs_tol=1e-12)

    def test_matches_object_rotation(self):
        r = (30, 45, 60)
        assert Quaternion.from_euler(r).to_matrix().isclose(object_rotation(r))

    def test_rotate(self):
        q = Quaternion.from_axis_angle('z', 90)
        assert q.rotate((1, 0, 0)) == pytest.approx((0, 1, 0))

    def test_sign_insensitive(self):
        q = Quaternion.from_axis_angle('x', 30)
        neg = Quaternion(-q.w, -q.x, -q.y, -q.z)
        assert q.isclose(neg)
        assert q != neg

    def test_degenerate_normalizes_to_identity(self):
        assert Quaternion(0, 0, 0, 0).normalized() == Quaternion.identity()
        assert Quaternion(float('nan'), 0, 0, 0).normalized() == Quaternion.identity()

    def test_immutable(self):
        q = Quaternion.identity()
        with pytest.raises(AttributeError):
            q.w = 2.0

    def test_matrix_to_euler(self):
        for r in ((10, 20, 30), (0, 90, 0), (170, -40, 250)):
            R = object_rotation(r)
            assert object_rotation(matrix_to_euler(R)).isclose(R, 1e-9)


class TestProjection:

    def test_project(self):
        assert project((100, 0, 800), 480, 270, 800) == pytest.approx((580, 270))
        assert project((0, 0, 1600), 480, 270, 800) == pytest.approx((480, 270))

    def test_camera_plane_stays_finite(self):
        x, y = project((1, 1, 0), 480, 270, 800)
        assert math.isfinite(x) and math.isfinite(y)
        assert not is_in_front((1, 1, 0))
        assert is_in_front((1, 1, 5))

    def test_camera_pitch(self):
        assert camera_pitch(540, 270, 800) == 0.0
        assert camera_pitch(540, 170, 800) == pytest.approx(math.atan(100 / 800))

    def test_ground_vanishes_on_horizon(self):
        # far away points of a horizontal plane project onto the horizon
        horizon = 200.0
        Rc = Rx(camera_pitch(540, horizon, 800))
        p = Rc.mul((0.0, 75.0, 1e9))
        assert project(p, 480, 270, 800)[1] == pytest.approx(horizon, abs=0.01)
