## rotation matrices, quaternions and pinhole projection for perspkit

## Copyright (c) 2020 Richard W. DeVaul
## Copyright (c) 2020 yapCAD contributors
## All rights reserved

# Permission is hereby granted, free of charge, to any person
# obtaining a copy of this software and associated documentation files
# (the "Software"), to deal in the Software without restriction,
# including without limitation the rights to use, copy, modify, merge,
# publish, distribute, sublicense, and/or sell copies of the Software,
# and to permit persons to whom the Software is furnished to do so,
# subject to the following conditions:
#
# The above copyright notice and this permission notice shall be
# included in all copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND,
# EXPRESS OR IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF
# MERCHANTABILITY, FITNESS FOR A PARTICULAR PURPOSE AND
# NONINFRINGEMENT. IN NO EVENT SHALL THE AUTHORS OR COPYRIGHT HOLDERS
# BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER LIABILITY, WHETHER IN AN
# ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM, OUT OF OR IN
# CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.

from __future__ import annotations

from math import cos, sin, sqrt, radians, atan, atan2, degrees, isfinite

## a matrix is represented as a list of three three-vectors, one per
## row.  Vectors are plain (x, y, z) tuples and Mx implies a column
## vector.  The object rotation of a perspkit cube is the intrinsic
## product Rx*Ry*Rz: local coordinates are rotated about the object's
## own X axis first, then the (rotated) Y axis, then Z.

## Points closer to the camera plane than this are pushed back to it
## before projection.
near_epsilon = 1e-6

AXES = {'x': (1.0, 0.0, 0.0),
        'y': (0.0, 1.0, 0.0),
        'z': (0.0, 0.0, 1.0)}


def _axis(axis):
    if isinstance(axis, str):
        if axis not in AXES:
            raise ValueError('bad axis name: {}'.format(axis))
        return AXES[axis]
    if len(axis) != 3:
        raise ValueError('bad rotation axis: {}'.format(axis))
    return axis


class Matrix:
    """3x3 matrix class for rotating 3D coordinates"""

    def __init__(self, a=False):
        self.m = [[1.0, 0.0, 0.0],
                  [0.0, 1.0, 0.0],
                  [0.0, 0.0, 1.0]]

        if isinstance(a, Matrix):
            self.m = [list(r) for r in a.m]
        elif isinstance(a, (tuple, list)):
            if len(a) == 3 and all(isinstance(r, (tuple, list)) and len(r) == 3 for r in a):
                self.m = [[float(x) for x in r] for r in a]
            elif len(a) == 9:
                self.m = [[float(a[i*3+j]) for j in range(3)] for i in range(3)]
            else:
                raise ValueError('bad thing used in attempt to initialize matrix: {}'.format(a))
        elif a is not False:
            raise ValueError('bad thing used in attempt to initialize matrix: {}'.format(a))

    def __repr__(self):
        return "Matrix({},{},{})".format(self.m[0], self.m[1], self.m[2])

    def get(self, i, j):
        if i < 0 or i > 2 or j < 0 or j > 2:
            raise ValueError('bad index passed to get: {},{}'.format(i, j))
        return self.m[i][j]

    def getrow(self, i):
        return tuple(self.m[i])

    def getcol(self, j):
        return (self.m[0][j], self.m[1][j], self.m[2][j])

    def transpose(self):
        return Matrix([self.getcol(j) for j in range(3)])

    # matrix multiply.  If x is a matrix, compute MX.  If x is a
    # 3-vector, compute Mx.  If x is a scalar, compute xM.
    def mul(self, x):
        if isinstance(x, Matrix):
            return Matrix([[sum(self.m[i][k]*x.m[k][j] for k in range(3))
                            for j in range(3)] for i in range(3)])
        elif isinstance(x, (tuple, list)) and len(x) == 3:
            return (self.m[0][0]*x[0] + self.m[0][1]*x[1] + self.m[0][2]*x[2],
                    self.m[1][0]*x[0] + self.m[1][1]*x[1] + self.m[1][2]*x[2],
                    self.m[2][0]*x[0] + self.m[2][1]*x[1] + self.m[2][2]*x[2])
        elif isinstance(x, (int, float)) and not isinstance(x, bool):
            return Matrix([[v*x for v in r] for r in self.m])
        raise ValueError('bad thing passed to mul(): {}'.format(x))

    __matmul__ = mul

    def isclose(self, other, tol=1e-9):
        return all(abs(self.m[i][j] - other.m[i][j]) <= tol
                   for i in range(3) for j in range(3))

    def tolist(self):
        return [list(r) for r in self.m]


def Identity():
    return Matrix()

def Rx(a):
    """ rotation about the x axis by ``a`` radians"""
    c, s = cos(a), sin(a)
    return Matrix([[1, 0, 0], [0, c, -s], [0, s, c]])

def Ry(a):
    c, s = cos(a), sin(a)
    return Matrix([[c, 0, s], [0, 1, 0], [-s, 0, c]])

def Rz(a):
    c, s = cos(a), sin(a)
    return Matrix([[c, -s, 0], [s, c, 0], [0, 0, 1]])


# return the generalized 3x3 arbitrary axis rotation matrix, angle in
# degrees
def Rotation(axis, angle, inverse=False):
    u = _axis(axis)
    m = sqrt(u[0]*u[0] + u[1]*u[1] + u[2]*u[2])
    if m < 1e-12:
        raise ValueError('zero-length rotation axis not allowed')
    ux, uy, uz = u[0]/m, u[1]/m, u[2]/m

    if inverse:
        angle *= -1.0
    rad = radians(angle % 360.0)

    cang = cos(rad)
    cmin = 1.0 - cang
    sang = sin(rad)

    # see http://www.opengl-tutorial.org/assets/faq_quaternions/index.html#Q38
    return Matrix([[cang + ux*ux*cmin, ux*uy*cmin - uz*sang, ux*uz*cmin + uy*sang],
                   [uy*ux*cmin + uz*sang, cang + uy*uy*cmin, uy*uz*cmin - ux*sang],
                   [uz*ux*cmin - uy*sang, uz*uy*cmin + ux*sang, cang + uz*uz*cmin]])


def object_rotation(rotation_deg, mode='three-point'):
    """Compose ``Rx*Ry*Rz`` from per-axis degrees.

    In ``'two-point'`` mode only the Y (yaw) rotation is honored, so
    every vertical cube edge stays vertical on screen.
    """

    rx = 0.0 if mode == 'two-point' else radians(rotation_deg[0])
    ry = radians(rotation_deg[1])
    rz = 0.0 if mode == 'two-point' else radians(rotation_deg[2])
    return Rx(rx).mul(Ry(ry)).mul(Rz(rz))


def apply_transform(p, R, t):
    """ rotate point ``p`` by matrix ``R`` then translate by ``t``"""
    r = R.mul(p)
    return (r[0] + t[0], r[1] + t[1], r[2] + t[2])


class Quaternion:
    """unit quaternion ``w + xi + yj + zk`` used as an orientation

    Instances are immutable; every operation returns a new quaternion.
    """

    __slots__ = ('w', 'x', 'y', 'z')

    def __init__(self, w=1.0, x=0.0, y=0.0, z=0.0):
        object.__setattr__(self, 'w', float(w))
        object.__setattr__(self, 'x', float(x))
        object.__setattr__(self, 'y', float(y))
        object.__setattr__(self, 'z', float(z))

    def __setattr__(self, name, value):
        raise AttributeError('Quaternion is immutable')

    def __repr__(self):
        return "Quaternion({}, {}, {}, {})".format(self.w, self.x, self.y, self.z)

    def __iter__(self):
        return iter((self.w, self.x, self.y, self.z))

    def __eq__(self, other):
        return isinstance(other, Quaternion) and tuple(self) == tuple(other)

    def __hash__(self):
        return hash(tuple(self))

    @classmethod
    def identity(cls):
        return cls(1.0, 0.0, 0.0, 0.0)

    @classmethod
    def from_axis_angle(cls, axis, angle):
        """ rotation of ``angle`` degrees about ``axis``"""
        u = _axis(axis)
        m = sqrt(u[0]*u[0] + u[1]*u[1] + u[2]*u[2])
        if m < 1e-12:
            raise ValueError('zero-length rotation axis not allowed')
        half = radians(angle) / 2.0
        s = sin(half) / m
        return cls(cos(half), u[0]*s, u[1]*s, u[2]*s)

    @classmethod
    def from_euler(cls, rotation_deg):
        """ quaternion equivalent of :func:`object_rotation`"""
        q = cls.from_axis_angle('x', rotation_deg[0])
        q = q * cls.from_axis_angle('y', rotation_deg[1])
        return (q * cls.from_axis_angle('z', rotation_deg[2])).normalized()

    def __mul__(self, o):
        # Hamilton product
        return Quaternion(
            self.w*o.w - self.x*o.x - self.y*o.y - self.z*o.z,
            self.w*o.x + self.x*o.w + self.y*o.z - self.z*o.y,
            self.w*o.y - self.x*o.z + self.y*o.w + self.z*o.x,
            self.w*o.z + self.x*o.y - self.y*o.x + self.z*o.w)

    def norm(self):
        return sqrt(self.w*self.w + self.x*self.x + self.y*self.y + self.z*self.z)

    def normalized(self):
        n = self.norm()
        if n < 1e-12 or not isfinite(n):
            return Quaternion.identity()
        return Quaternion(self.w/n, self.x/n, self.y/n, self.z/n)

    def conjugate(self):
        return Quaternion(self.w, -self.x, -self.y, -self.z)

    def compose(self, axis, delta):
        """Apply an incremental rotation of ``delta`` degrees about the
        object's own ``axis`` and renormalize."""
        return (self * Quaternion.from_axis_angle(axis, delta)).normalized()

    def to_matrix(self):
        w, x, y, z = self.w, self.x, self.y, self.z
        return Matrix([[1 - 2*(y*y + z*z), 2*(x*y - w*z), 2*(x*z + w*y)],
                       [2*(x*y + w*z), 1 - 2*(x*x + z*z), 2*(y*z - w*x)],
                       [2*(x*z - w*y), 2*(y*z + w*x), 1 - 2*(x*x + y*y)]])

    def rotate(self, v):
        return self.to_matrix().mul(v)

    def isclose(self, other, tol=1e-9):
        """ same orientation, ``q`` and ``-q`` are equivalent"""
        d = abs(self.w*other.w + self.x*other.x + self.y*other.y + self.z*other.z)
        return abs(1.0 - d) <= tol


def matrix_to_euler(R):
    """Recover ``(x, y, z)`` degrees such that ``object_rotation`` gives
    back ``R``.  Used only for displaying quaternion orientations."""

    m = R.m
    sy = max(-1.0, min(1.0, m[0][2]))
    ry = atan2(sy, sqrt(max(0.0, 1.0 - sy*sy)))
    if abs(sy) < 1.0 - 1e-9:
        rx = atan2(-m[1][2], m[2][2])
        rz = atan2(-m[0][1], m[0][0])
    else:
        # gimbal lock: fold all of the roll into x
        rx = atan2(m[2][1], m[1][1])
        rz = 0.0
    return tuple(degrees(a) % 360.0 for a in (rx, ry, rz))


## pinhole camera
## --------------

def camera_pitch(height, horizon_y, focal):
    """Pitch that puts the vanishing line of the ground plane at
    ``horizon_y`` when projecting about ``height/2``."""

    return atan(((height / 2.0) - horizon_y) / (focal or near_epsilon))


def is_in_front(p, near=near_epsilon):
    return p[2] > near


def project(p, cx, cy, f):
    """Project camera-space point ``p`` to screen coordinates.

    A point on the camera plane is nudged to ``near_epsilon`` so the
    result stays finite; callers that care check :func:`is_in_front`.
    """

    z = p[2]
    if abs(z) < near_epsilon:
        z = near_epsilon if z >= 0 else -near_epsilon
    return (cx + f * (p[0] / z), cy + f * (p[1] / z))
