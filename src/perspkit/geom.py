## foundational 2D computational geometry for perspkit
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

"""foundational 2D computational geometry for **perspkit**

====================
OVERVIEW
====================

The perspkit.geom module provides the planar operations shared by
every perspkit widget: vector arithmetic, line and ray intersection,
clipping rays and lines against the canvas rectangle, and
point-to-curve distances.

points
======

Points are Python tuples ``(x, y)`` in canvas coordinates, with the
origin in the top-left corner and y growing downward.  Any two-element
sequence is accepted as input; results are always returned as tuples
of floats.

lines and rays
==============

A line is given by two distinct points ``p1`` and ``p2``.  Lines are
parameterized as ``p1 + t*(p2-p1)``, so ``t=0`` is ``p1`` and ``t=1``
is ``p2``.  A ray is the ``t >= 0`` half of a line; its origin is the
first point and the second point only fixes its direction.

degenerate geometry
===================

Intersection functions never raise on degenerate input.  Parallel or
coincident lines, zero-length direction vectors and non-finite results
all produce ``None``, and callers are expected to branch on that.

canvas edges
============

The canvas is the rectangle ``[0, width] x [0, height]``.  Its edges
are named ``'top'`` (y=0), ``'right'`` (x=width), ``'bottom'``
(y=height) and ``'left'`` (x=0).

"""

from __future__ import annotations

from dataclasses import dataclass
from math import hypot, isfinite, inf
from typing import Optional, Sequence, Tuple, List

## constants
epsilon = 1e-9

Point2 = Tuple[float, float]

EDGES = ('top', 'right', 'bottom', 'left')

## operations on scalars
## ---------------------

def isgoodnum(n):
    """ determine if an argument is actually a scalar number, and not boolean
    """
    return (not isinstance(n,bool)) and isinstance(n,(int,float))

def clamp(v, lo, hi):
    """ clamp ``v`` to the closed interval ``[lo, hi]``"""
    return max(lo, min(hi, v))

def clamp01(v):
    return clamp(v, 0.0, 1.0)

## operations on points
## --------------------

def point(x, y) -> Point2:
    return (float(x), float(y))

def add(a, b) -> Point2:
    """ `a + b`"""
    return (a[0]+b[0], a[1]+b[1])

def sub(a, b) -> Point2:
    """ `a - b`"""
    return (a[0]-b[0], a[1]-b[1])

def scale(a, c) -> Point2:
    """ vector ``a`` times scalar ``c``"""
    return (a[0]*c, a[1]*c)

def dot(a, b) -> float:
    return a[0]*b[0] + a[1]*b[1]

def cross(a, b) -> float:
    """ z component of the 3D cross product of two planar vectors"""
    return a[0]*b[1] - a[1]*b[0]

def mag(a) -> float:
    return hypot(a[0], a[1])

def dist(a, b) -> float:
    """ euclidean distance between points ``a`` and ``b``"""
    return hypot(a[0]-b[0], a[1]-b[1])

def lerp(a, b, t) -> Point2:
    return (a[0] + (b[0]-a[0])*t, a[1] + (b[1]-a[1])*t)

def isfinitepoint(p):
    return isfinite(p[0]) and isfinite(p[1])

## bounding boxes
## --------------

def bbox2(points, pad=0.0):
    """Return ``((xmin, ymin), (xmax, ymax))`` around ``points``, grown
    by ``pad`` on every side, or ``None`` for an empty sequence."""

    if not points:
        return None
    xs = [p[0] for p in points]
    ys = [p[1] for p in points]
    return ((min(xs)-pad, min(ys)-pad), (max(xs)+pad, max(ys)+pad))

def inside_bbox2(box, p):
    return box[0][0] <= p[0] <= box[1][0] and box[0][1] <= p[1] <= box[1][1]

## line and ray intersection
## -------------------------

def line_line_intersection(p1, p2, p3, p4) -> Optional[Point2]:
    """Intersect the infinite line through ``p1``, ``p2`` with the
    infinite line through ``p3``, ``p4``.

    Uses the closed-form determinant solution.  Returns ``None`` if the
    lines are parallel or coincident, or if the result is not finite.
    """

    x1, y1 = p1[0], p1[1]
    x2, y2 = p2[0], p2[1]
    x3, y3 = p3[0], p3[1]
    x4, y4 = p4[0], p4[1]
    den = (x1-x2)*(y3-y4) - (y1-y2)*(x3-x4)
    if abs(den) < epsilon:
        return None
    a = x1*y2 - y1*x2
    b = x3*y4 - y3*x4
    px = (a*(x3-x4) - (x1-x2)*b) / den
    py = (a*(y3-y4) - (y1-y2)*b) / den
    if not (isfinite(px) and isfinite(py)):
        return None
    return (px, py)


def ray_ray_intersection(a, b, c, d, min_dist_a=0.0, min_dist_c=0.0) -> Optional[Point2]:
    """Intersect the ray from ``a`` through ``b`` with the ray from ``c``
    through ``d``.

    Both rays point forward only, so a crossing behind either origin is
    rejected.  Crossings closer than ``min_dist_a`` to ``a`` or closer
    than ``min_dist_c`` to ``c`` are rejected too; this keeps shadow
    construction away from the light and projection markers where the
    rays nearly coincide.
    """

    r = sub(b, a)
    s = sub(d, c)
    rxs = cross(r, s)
    if abs(rxs) < epsilon:
        return None
    cma = sub(c, a)
    t = cross(cma, s) / rxs
    u = cross(cma, r) / rxs
    if not (isfinite(t) and isfinite(u)):
        return None
    if t < 0 or u < 0:
        return None
    len_r = mag(r) or 1.0
    len_s = mag(s) or 1.0
    if t < (min_dist_a or 0.0) / len_r or u < (min_dist_c or 0.0) / len_s:
        return None
    return (a[0] + t*r[0], a[1] + t*r[1])


@dataclass(frozen=True)
class RectHit:
    """First crossing of a ray with the canvas boundary."""

    point: Point2
    edge: str
    t: float


def ray_rect_intersection(a, b, width, height) -> Optional[RectHit]:
    """Find where the ray from ``a`` through ``b`` first meets the
    boundary of the ``width`` x ``height`` canvas.

    Every edge is tested; candidates need ``t >= 0`` and a
    perpendicular coordinate within the edge.  The candidate with the
    smallest ``t`` wins.  Returns ``None`` if the ray never touches the
    boundary, which only happens for origins outside the canvas.
    """

    dx = b[0] - a[0]
    dy = b[1] - a[1]
    candidates = []

    if abs(dx) > epsilon:
        t = (0 - a[0]) / dx
        y = a[1] + t*dy
        if t >= 0 and 0 <= y <= height:
            candidates.append(RectHit((0.0, y), 'left', t))
        t = (width - a[0]) / dx
        y = a[1] + t*dy
        if t >= 0 and 0 <= y <= height:
            candidates.append(RectHit((float(width), y), 'right', t))
    if abs(dy) > epsilon:
        t = (0 - a[1]) / dy
        x = a[0] + t*dx
        if t >= 0 and 0 <= x <= width:
            candidates.append(RectHit((x, 0.0), 'top', t))
        t = (height - a[1]) / dy
        x = a[0] + t*dx
        if t >= 0 and 0 <= x <= width:
            candidates.append(RectHit((x, float(height)), 'bottom', t))

    if not candidates:
        return None
    return min(candidates, key=lambda h: h.t)


_CORNERS = {
    frozenset(('right', 'bottom')): lambda w, h: (float(w), float(h)),
    frozenset(('left', 'bottom')): lambda w, h: (0.0, float(h)),
    frozenset(('right', 'top')): lambda w, h: (float(w), 0.0),
    frozenset(('left', 'top')): lambda w, h: (0.0, 0.0),
}

def corner_between_edges(e1, e2, width, height) -> Optional[Point2]:
    """ canvas corner shared by two adjacent edges, or ``None`` """
    f = _CORNERS.get(frozenset((e1, e2)))
    if f is None:
        return None
    return f(width, height)


def extend_line_to_rect(p1, p2, width, height, tol=1.0) -> Tuple[Point2, Point2]:
    """Extend the line through ``p1`` and ``p2`` across the canvas.

    The line is intersected with the four (infinite) edge lines and
    only hits within ``tol`` of the canvas are kept.  Of those, the
    two that are furthest apart give the visible extent, which copes
    with lines passing exactly through a corner.  If fewer than two
    hits exist the original segment is returned.
    """

    w = float(width)
    h = float(height)
    hits = []
    for q1, q2 in (((0, 0), (w, 0)),
                   ((w, 0), (w, h)),
                   ((0, h), (w, h)),
                   ((0, 0), (0, h))):
        p = line_line_intersection(p1, p2, q1, q2)
        if p is None:
            continue
        if -tol <= p[0] <= w + tol and -tol <= p[1] <= h + tol:
            hits.append(p)

    if len(hits) < 2:
        return (point(*p1[:2]), point(*p2[:2]))

    best = (hits[0], hits[1])
    bestd = -1.0
    for i in range(len(hits)):
        for j in range(i+1, len(hits)):
            d = dist(hits[i], hits[j])
            if d > bestd:
                bestd = d
                best = (hits[i], hits[j])
    return best


def ray_points(a, b, length) -> Tuple[Point2, Point2]:
    """ segment from ``a`` along the direction of ``b`` with the given length"""
    d = sub(b, a)
    n = mag(d)
    if n < 1e-6:
        return (point(*a[:2]), point(*a[:2]))
    return (point(*a[:2]), add(a, scale(d, length/n)))

## distances
## ---------

def point_segment_distance(p, a, b) -> float:
    """ distance from ``p`` to the closest point of segment ``a``-``b``"""
    ab = sub(b, a)
    ab2 = dot(ab, ab)
    t = clamp(dot(sub(p, a), ab) / ab2, 0.0, 1.0) if ab2 > 0 else 0.0
    return dist(p, lerp(a, b, t))

def point_polyline_distance(p, curve) -> float:
    best = inf
    for i in range(1, len(curve)):
        d = point_segment_distance(p, curve[i-1], curve[i])
        if d < best:
            best = d
    return best

def polyline_length(points) -> float:
    total = 0.0
    for i in range(1, len(points)):
        total += dist(points[i-1], points[i])
    return total

def flatten(points: Sequence[Sequence[float]]) -> List[float]:
    """ ``[(x0, y0), (x1, y1)]`` -> ``[x0, y0, x1, y1]``"""
    out = []
    for p in points:
        out.append(p[0])
        out.append(p[1])
    return out


## point-in-shape tests
## --------------------

def hit_circle(p, center, r):
    return (p[0]-center[0])**2 + (p[1]-center[1])**2 < r*r

def inside_square(p, x, y, size):
    """ strict interior test for an axis aligned square"""
    return x < p[0] < x + size and y < p[1] < y + size
