"""Freehand stroke resampling and accuracy scoring."""

from __future__ import annotations

from math import floor, hypot
from typing import List, Sequence, Tuple

from perspkit.geom import clamp01, point_polyline_distance, polyline_length

Point2 = Tuple[float, float]

MIN_STROKE_POINTS = 8
RESAMPLE_COUNT = 200
MIN_SCALE = 60.0
TOLERANCE_FRACTION = 0.03


def resample_polyline(points: Sequence[Sequence[float]], n: int) -> List[Point2]:
    """Resample ``points`` to ``n`` points evenly spaced by arc length.

    Distance left over at the end of one source segment carries into the
    next.  Floating point round-off can leave the walk one sample short,
    in which case the final source point is appended.  A polyline of
    (nearly) zero length is returned as-is, so the caller may receive
    fewer than ``n`` points.
    """

    pts = [(float(p[0]), float(p[1])) for p in points]
    total = polyline_length(pts)
    if total < 1e-6 or n < 2:
        return pts

    step = total / (n - 1)
    res = [pts[0]]
    acc = 0.0
    for i in range(1, len(pts)):
        a = pts[i - 1]
        b = pts[i]
        seg = hypot(b[0] - a[0], b[1] - a[1])
        if seg == 0:
            continue
        t = 0.0
        while acc + seg * (1.0 - t) >= step and len(res) < n:
            t += (step - acc) / seg
            res.append((a[0] + (b[0] - a[0]) * t, a[1] + (b[1] - a[1]) * t))
            acc = 0.0
        acc += seg * (1.0 - t)
    if len(res) < n:
        res.append(pts[-1])
    return res


def curve_scale(curve: Sequence[Sequence[float]]) -> float:
    """Distance that maps to a zero score: 3% of the curve's width,
    with the width floored at 60 units."""

    xs = [p[0] for p in curve]
    return max(MIN_SCALE, max(xs) - min(xs)) * TOLERANCE_FRACTION


def average_distance(stroke: Sequence[Sequence[float]], curve: Sequence[Sequence[float]]) -> float:
    samples = resample_polyline(stroke, RESAMPLE_COUNT)
    total = 0.0
    for p in samples:
        total += point_polyline_distance(p, curve)
    return total / len(samples)


def score_stroke(stroke: Sequence[Sequence[float]], curve: Sequence[Sequence[float]]) -> int:
    """Score ``stroke`` against the reference ``curve`` from 0 to 100.

    Strokes with fewer than :data:`MIN_STROKE_POINTS` points carry too
    little information and score 0.
    """

    if len(stroke) < MIN_STROKE_POINTS or len(curve) < 2:
        return 0
    avg = average_distance(stroke, curve)
    return int(floor(clamp01(1.0 - avg / curve_scale(curve)) * 100 + 0.5))
