"""Practice drawing a circle inscribed in a square seen in perspective.

A random quadrilateral stands for a square on some tilted plane.  The
circle inscribed in the canonical square is carried through the
quad's homography to give the expected ellipse, and a freehand stroke
is scored against it when the pointer is released.
"""

from __future__ import annotations

from typing import List, Optional

from perspkit.geom import Point2
from perspkit.homography import (
    ELLIPSE_SAMPLES,
    Homography,
    homography_for_unit_square,
    random_quad,
    sample_projected_circle,
)
from perspkit.scene import Scene
from perspkit.stroke import score_stroke

## squared distance below which a pointer sample is dropped
MIN_STEP_SQ = 2.0

QUAD_FILL = 'rgba(0,0,0,0.04)'
QUAD_STROKE = '#444444'
ELLIPSE_STROKE = 'rgba(40,120,255,0.9)'
STROKE_COLOR = '#111111'


class EllipsePractice(Scene):
    """Quad, expected ellipse, user stroke and last score."""

    name = 'ellipse'

    def __init__(self, width=960, height=540, seed=None):
        super().__init__(width, height)
        self.stroke: List[Point2] = []
        self.drawing = False
        self.score: Optional[int] = None
        self.new_square(seed)

    def new_square(self, seed=None):
        self.seed = seed
        self.quad: List[Point2] = random_quad(self.width, self.height, seed)
        self.homography: Homography = homography_for_unit_square(self.quad)
        self.expected: List[Point2] = sample_projected_circle(self.homography, ELLIPSE_SAMPLES)
        self.stroke = []
        self.drawing = False
        self.score = None

    def clear_score(self):
        self.score = None

    def pointer_down(self, x, y, modifier=False):
        self.drawing = True
        self.stroke = [(float(x), float(y))]
        return True

    def pointer_move(self, x, y):
        if not self.drawing:
            return False
        lx, ly = self.stroke[-1]
        dx, dy = x - lx, y - ly
        if dx * dx + dy * dy < MIN_STEP_SQ:
            return False
        self.stroke.append((float(x), float(y)))
        return True

    def pointer_up(self):
        if not self.drawing:
            return
        self.drawing = False
        # close the expected curve so the seam segment counts too
        self.score = score_stroke(self.stroke, self.expected + self.expected[:1])

    def render(self, drawable):
        drawable.layer = 'quad'
        drawable.draw_polygon(self.quad, closed=True, fill=QUAD_FILL, stroke=QUAD_STROKE, width=2)
        drawable.layer = 'ellipse'
        drawable.draw_polyline(self.expected, stroke=ELLIPSE_STROKE, width=2, dash=(6, 6),
                               closed=True)
        if len(self.stroke) > 1:
            drawable.layer = 'stroke'
            drawable.draw_polyline(self.stroke, stroke=STROKE_COLOR, width=3)
