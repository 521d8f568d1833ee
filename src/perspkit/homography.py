"""Projective transforms from the canonical unit square to a quadrilateral.

A homography is stored as a flat 9-vector ``h`` so that a point
``(x, y)`` maps to ``((h0 x + h1 y + h2) / w, (h3 x + h4 y + h5) / w)``
with ``w = h6 x + h7 y + h8``.  It is estimated with the Direct Linear
Transform: four point correspondences give an 8x9 homogeneous system
``A h = 0`` whose solution is the null vector of ``A^T A``.
"""

from __future__ import annotations

from dataclasses import dataclass
from math import cos, sin, pi
from typing import List, Sequence, Tuple

import numpy as np

Point2 = Tuple[float, float]

CANONICAL_SQUARE: Tuple[Point2, ...] = (
    (-0.5, -0.5),
    (0.5, -0.5),
    (0.5, 0.5),
    (-0.5, 0.5),
)

ELLIPSE_SAMPLES = 240
QUAD_MARGIN = 60

## iteration budget for ``method='descent'``
DESCENT_ITERATIONS = 2000
DESCENT_TOLERANCE = 1e-13

_FALLBACK = (0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 1.0)


@dataclass(frozen=True)
class Homography:
    """A 3x3 projective transform, row-major as a 9-tuple."""

    h: Tuple[float, ...] = (1.0, 0.0, 0.0, 0.0, 1.0, 0.0, 0.0, 0.0, 1.0)

    def matrix(self) -> np.ndarray:
        return np.asarray(self.h, dtype=float).reshape(3, 3)

    def apply(self, p: Sequence[float]) -> Point2:
        h = self.h
        x, y = p[0], p[1]
        X = h[0] * x + h[1] * y + h[2]
        Y = h[3] * x + h[4] * y + h[5]
        W = h[6] * x + h[7] * y + h[8]
        iw = 1.0 / W if W != 0 else 1.0
        return (X * iw, Y * iw)

    def apply_all(self, points: Sequence[Sequence[float]]) -> List[Point2]:
        return [self.apply(p) for p in points]

    @property
    def is_degenerate(self) -> bool:
        return self.h == _FALLBACK


def _dlt_system(src: Sequence[Sequence[float]], dst: Sequence[Sequence[float]]) -> np.ndarray:
    rows = []
    for (xs, ys), (xd, yd) in zip(((p[0], p[1]) for p in src), ((p[0], p[1]) for p in dst)):
        rows.append([-xs, -ys, -1.0, 0.0, 0.0, 0.0, xs * xd, ys * xd, xd])
        rows.append([0.0, 0.0, 0.0, -xs, -ys, -1.0, xs * yd, ys * yd, yd])
    return np.asarray(rows, dtype=float)


def _smallest_eigenvector(M: np.ndarray) -> np.ndarray:
    # eigh returns ascending eigenvalues for the symmetric A^T A
    _, vecs = np.linalg.eigh(M)
    return vecs[:, 0]


def _descent_null_vector(M: np.ndarray, iterations: int = DESCENT_ITERATIONS,
                         tol: float = DESCENT_TOLERANCE) -> np.ndarray:
    """Approximate the smallest-eigenvalue eigenvector of ``M`` with the
    fixed-budget iteration ``v <- v - alpha*M*v`` and renormalization.

    ``alpha`` is the inverse of a Gershgorin bound on the largest
    eigenvalue, so every factor ``1 - alpha*lambda`` lies in ``[0, 1]``
    and the iteration settles on the smallest eigenvalue.  ``M`` should
    come from normalized points to keep the spectrum narrow.
    """

    bound = float(np.abs(M).sum(axis=1).max())
    # start from the identity, the answer for an undistorted square
    v = np.eye(3).reshape(-1)
    v = v / np.linalg.norm(v)
    if bound <= 0.0 or not np.isfinite(bound):
        return v
    alpha = 1.0 / bound
    for _ in range(iterations):
        nv = v - alpha * (M @ v)
        norm = np.linalg.norm(nv)
        if norm < 1e-12 or not np.isfinite(norm):
            break
        nv = nv / norm
        done = np.linalg.norm(nv - v) < tol
        v = nv
        if done:
            break
    return v


def _normalizing_transform(points: Sequence[Sequence[float]]) -> np.ndarray:
    """Similarity moving ``points`` to their centroid with mean distance
    sqrt(2) from it (Hartley normalization)."""

    pts = np.asarray([[p[0], p[1]] for p in points], dtype=float)
    c = pts.mean(axis=0)
    d = np.linalg.norm(pts - c, axis=1).mean()
    s = np.sqrt(2.0) / d if d > 0 else 1.0
    return np.array([[s, 0.0, -s * c[0]],
                     [0.0, s, -s * c[1]],
                     [0.0, 0.0, 1.0]])


def _apply_matrix(T: np.ndarray, points: Sequence[Sequence[float]]) -> List[Point2]:
    return [(T[0, 0] * p[0] + T[0, 2], T[1, 1] * p[1] + T[1, 2]) for p in points]


def _collinear(points: Sequence[Sequence[float]], tol: float = 1e-9) -> bool:
    pts = np.asarray([[p[0], p[1]] for p in points], dtype=float)
    centered = pts - pts.mean(axis=0)
    s = np.linalg.svd(centered, compute_uv=False)
    scale = max(1.0, float(np.abs(pts).max()))
    return s[-1] <= tol * scale


def compute_homography(src: Sequence[Sequence[float]], dst: Sequence[Sequence[float]],
                       method: str = 'eigh') -> Homography:
    """Estimate the homography mapping ``src[i]`` to ``dst[i]``.

    ``method`` is ``'eigh'`` for an exact eigen-decomposition of
    ``A^T A`` or ``'descent'`` for the approximate gradient iteration.
    Collinear destinations or a non-finite solution give the fallback
    ``(0, ..., 0, 1)``, which collapses every point to the origin
    instead of producing NaNs.
    """

    if len(src) != 4 or len(dst) != 4:
        raise ValueError('homography needs exactly four correspondences')

    if _collinear(dst):
        return Homography(_FALLBACK)

    Ts = _normalizing_transform(src)
    Td = _normalizing_transform(dst)
    A = _dlt_system(_apply_matrix(Ts, src), _apply_matrix(Td, dst))
    M = A.T @ A
    if method == 'eigh':
        v = _smallest_eigenvector(M)
    elif method == 'descent':
        v = _descent_null_vector(M)
    else:
        raise ValueError('unknown homography method: {}'.format(method))

    if not np.all(np.isfinite(v)):
        return Homography(_FALLBACK)
    # back from normalized coordinates
    v = (np.linalg.inv(Td) @ v.reshape(3, 3) @ Ts).reshape(-1)
    if abs(v[8]) > 1e-12:
        v = v / v[8]
    return Homography(tuple(float(x) for x in v))


def homography_for_unit_square(quad: Sequence[Sequence[float]], method: str = 'eigh') -> Homography:
    """Homography from :data:`CANONICAL_SQUARE` onto ``quad`` (TL, TR, BR, BL)."""

    return compute_homography(CANONICAL_SQUARE, quad, method=method)


def sample_projected_circle(h: Homography, samples: int = ELLIPSE_SAMPLES) -> List[Point2]:
    """Map the circle inscribed in the canonical square through ``h``.

    Returns ``samples`` points; the polyline is closed implicitly.
    """

    pts = []
    for i in range(samples):
        t = (i / samples) * pi * 2.0
        pts.append(h.apply((0.5 * cos(t), 0.5 * sin(t))))
    return pts


def random_quad(width: float, height: float, seed=None, margin: float = QUAD_MARGIN) -> List[Point2]:
    """Return a random convex-ish quadrilateral, one corner per canvas
    quadrant, ordered TL, TR, BR, BL.  Equal seeds give equal quads."""

    rng = np.random.default_rng(seed)
    hw = width / 2.0 - margin
    hh = height / 2.0 - margin
    r = rng.random(8)
    return [
        (margin + r[0] * hw, margin + r[1] * hh),
        (width - margin - r[2] * hw, margin + r[3] * hh),
        (width - margin - r[4] * hw, height - margin - r[5] * hh),
        (margin + r[6] * hw, height - margin - r[7] * hh),
    ]
