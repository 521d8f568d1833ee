"""Shadows cast by squares from a point light onto the ground.

The scene is a side-on diagram: a point light hangs above the horizon
and its *projection point* (the light's foot on the ground plane) lies
straight below it, between the horizon and the bottom of the canvas.
A square standing on the ground casts a shadow whose far corners are
where the ray from the light through a top corner meets the ray from
the projection point through the matching bottom corner.

When a pair of rays diverges (for example when the light is behind the
square) the shadow is unbounded; it is then clipped to the canvas by
following the ground rays to the boundary.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import List, Optional, Tuple

from perspkit.geom import (
    Point2,
    clamp,
    clamp01,
    corner_between_edges,
    hit_circle,
    inside_square,
    ray_points,
    ray_ray_intersection,
    ray_rect_intersection,
)
from perspkit.drawable import Gradient
from perspkit.scene import Scene

## configuration
CIRCLE_BASE_RADIUS = 10.0
HIT_PADDING = 6.0
HORIZON_HIT = 6.0
LIGHT_MARGIN = 20.0
EDGE_MARGIN = 10.0
HORIZON_MARGIN = 20.0
RAY_LENGTH = 2000.0
MAX_SQUARES = 20
DEFAULT_SIZE = 100.0
MIN_SIZE = 10.0
MAX_SIZE = 300.0
MAX_SENSITIVITY = 4.0
DEFAULT_SENSITIVITY = 2.5

PALETTE = ('#cfe8ff', '#ffe7cf', '#e6ffd4', '#ffd6f3', '#f9ffcf',
           '#d0f0ff', '#ffd0d0', '#e6e1ff', '#d8ffd8', '#ffeed6')

SHADOW_FILL = 'rgba(0,0,0,0.2)'
RAY_STOPS = ((0.0, 'rgba(40,40,40,0.55)'),
             (0.3, 'rgba(40,40,40,0.35)'),
             (0.7, 'rgba(40,40,40,0.12)'),
             (1.0, 'rgba(40,40,40,0)'))
GLOW_STOPS = ((0.0, 'rgba(255,255,200,0.9)'),
              (1.0, 'rgba(255,255,200,0)'))


@dataclass
class Square:
    """Axis aligned square standing on the ground, top-left anchored."""

    x: float
    y: float
    size: float = DEFAULT_SIZE
    color: str = PALETTE[0]

    def corners(self) -> Tuple[Point2, Point2, Point2, Point2]:
        """``(TL, TR, BR, BL)``"""
        x, y, s = self.x, self.y, self.size
        return ((x, y), (x + s, y), (x + s, y + s), (x, y + s))


class DragTarget(Enum):
    NONE = 'none'
    LIGHT = 'light'
    PROJECTION = 'projection'
    HORIZON = 'horizon'
    SQUARE = 'square'


@dataclass(frozen=True)
class Drag:
    target: DragTarget = DragTarget.NONE
    index: int = -1
    offset: Point2 = (0.0, 0.0)


NO_DRAG = Drag()


def dynamic_radius(projection_y, horizon_y, bottom_y, sensitivity, base=CIRCLE_BASE_RADIUS):
    """Marker radius, growing as the projection point moves from the
    horizon toward ``bottom_y``."""

    span = bottom_y - horizon_y
    k = clamp01((projection_y - horizon_y) / span) if span > 0 else 0.0
    return base * (1.0 + sensitivity * k)


def shadow_polygon(square, light, projection, width, height, min_light_dist=0.0) -> Optional[List[Point2]]:
    """Compute the shadow of ``square``.

    With both far corners found the result is the quadrilateral
    ``[BL, BR, right, left]``.  Otherwise the ground rays are clipped
    against the canvas, and if they leave through different edges the
    shared canvas corner is stitched in between, giving an open-ended
    shadow ``[BL, BR, right exit, (corner), left exit]``.  ``None``
    means neither ground ray reaches the boundary.
    """

    TL, TR, BR, BL = square.corners()
    left = ray_ray_intersection(light, TL, projection, BL, min_light_dist, 0.0)
    right = ray_ray_intersection(light, TR, projection, BR, min_light_dist, 0.0)
    if left is not None and right is not None:
        return [BL, BR, right, left]

    i_left = ray_rect_intersection(projection, BL, width, height)
    i_right = ray_rect_intersection(projection, BR, width, height)
    if i_left is None and i_right is None:
        return None
    poly = [BL, BR]
    if i_right is not None:
        poly.append(i_right.point)
    if i_right is not None and i_left is not None and i_right.edge != i_left.edge:
        corner = corner_between_edges(i_right.edge, i_left.edge, width, height)
        if corner is not None:
            poly.append(corner)
    if i_left is not None:
        poly.append(i_left.point)
    return poly


def ray_guides(square, light, projection, length=RAY_LENGTH) -> List[Tuple[Point2, Point2]]:
    """Light-to-top-corner and ground-to-bottom-corner guide rays."""

    TL, TR, BR, BL = square.corners()
    return [ray_points(light, TL, length),
            ray_points(light, TR, length),
            ray_points(projection, BL, length),
            ray_points(projection, BR, length)]


class LightShadowScene(Scene):
    """Interactive light, projection point, horizon and squares."""

    name = 'light-shadow'

    def __init__(self, width=960, height=540, squares=None, sensitivity=DEFAULT_SENSITIVITY):
        super().__init__(width, height)
        self.horizon_y = height / 2.0
        self.light = (width * 0.7, height * 0.25)
        self.projection_y = self.horizon_y
        self.sensitivity = clamp(sensitivity, 0.0, MAX_SENSITIVITY)
        if squares is None:
            squares = [Square(width * 0.25, height * 0.68, DEFAULT_SIZE, PALETTE[0]),
                       Square(width * 0.55, height * 0.63, DEFAULT_SIZE, PALETTE[1])]
        self.squares: List[Square] = list(squares)
        self.selected_index = 0
        self.drag = NO_DRAG

    ## derived values

    @property
    def bottom_y(self):
        return self.height - EDGE_MARGIN

    @property
    def projection(self) -> Point2:
        return (self.light[0], self.projection_y)

    @property
    def radius(self):
        return dynamic_radius(self.projection_y, self.horizon_y, self.bottom_y, self.sensitivity)

    @property
    def selected(self) -> Optional[Square]:
        if 0 <= self.selected_index < len(self.squares):
            return self.squares[self.selected_index]
        return None

    def shadow(self, square):
        return shadow_polygon(square, self.light, self.projection,
                              self.width, self.height, self.radius)

    def shadows(self):
        return [self.shadow(s) for s in self.squares]

    ## commands

    def add_square(self):
        """Append a square in the staggered default position and select it.
        Returns the new index, or ``None`` when the scene is full."""

        if len(self.squares) >= MAX_SQUARES:
            return None
        idx = len(self.squares)
        size = DEFAULT_SIZE
        x = clamp(40 + idx * 18, EDGE_MARGIN, self.width - size - EDGE_MARGIN)
        y = clamp(self.height / 2.0 + 30 + (idx % 5) * 18, EDGE_MARGIN,
                  self.height - size - EDGE_MARGIN)
        self.squares.append(Square(x, y, size, PALETTE[idx % len(PALETTE)]))
        self.selected_index = len(self.squares) - 1
        return self.selected_index

    def delete_selected(self):
        if not self.squares:
            return False
        if not 0 <= self.selected_index < len(self.squares):
            return False
        del self.squares[self.selected_index]
        self.selected_index = max(0, self.selected_index - 1)
        if self.drag.target is DragTarget.SQUARE:
            self.drag = NO_DRAG
        return True

    def select(self, index):
        if not self.squares:
            self.selected_index = 0
            return
        self.selected_index = int(clamp(index, 0, len(self.squares) - 1))

    def set_size(self, value):
        sq = self.selected
        if sq is None:
            return
        sq.size = clamp(value, MIN_SIZE, MAX_SIZE)

    def set_sensitivity(self, value):
        self.sensitivity = clamp(value, 0.0, MAX_SENSITIVITY)

    ## pointer state machine

    def _square_at(self, p):
        for i in range(len(self.squares) - 1, -1, -1):
            s = self.squares[i]
            if inside_square(p, s.x, s.y, s.size):
                return i
        return -1

    def pointer_down(self, x, y, modifier=False):
        p = (x, y)
        r = self.radius + HIT_PADDING
        if hit_circle(p, self.light, r):
            self.drag = Drag(DragTarget.LIGHT, -1, (x - self.light[0], y - self.light[1]))
            return True
        if hit_circle(p, self.projection, r):
            self.drag = Drag(DragTarget.PROJECTION, -1, (0.0, y - self.projection_y))
            return True
        if abs(y - self.horizon_y) <= HORIZON_HIT:
            self.drag = Drag(DragTarget.HORIZON, -1, (0.0, y - self.horizon_y))
            return True
        idx = self._square_at(p)
        if idx != -1:
            # bring to front
            s = self.squares.pop(idx)
            self.squares.append(s)
            self.selected_index = len(self.squares) - 1
            self.drag = Drag(DragTarget.SQUARE, self.selected_index, (x - s.x, y - s.y))
            return True
        return False

    def pointer_move(self, x, y):
        d = self.drag
        ox, oy = d.offset
        if d.target is DragTarget.NONE:
            return False
        if d.target is DragTarget.LIGHT:
            nx = clamp(x - ox, EDGE_MARGIN, self.width - EDGE_MARGIN)
            ny = min(y - oy, self.horizon_y - LIGHT_MARGIN)
            self.light = (nx, ny)
            return True
        if d.target is DragTarget.PROJECTION:
            self.projection_y = clamp(y - oy, self.horizon_y, self.bottom_y)
            return True
        if d.target is DragTarget.HORIZON:
            ny = clamp(y - oy, HORIZON_MARGIN, self.height - HORIZON_MARGIN)
            self.horizon_y = ny
            if self.light[1] >= ny - LIGHT_MARGIN:
                self.light = (self.light[0], ny - LIGHT_MARGIN)
            if self.projection_y < ny:
                self.projection_y = ny
            return True
        # square drag: the target may have been deleted mid-drag
        if not 0 <= d.index < len(self.squares):
            self.drag = NO_DRAG
            return False
        s = self.squares[d.index]
        nx = clamp(x - ox, EDGE_MARGIN, self.width - s.size - EDGE_MARGIN)
        ny = clamp(y - oy, EDGE_MARGIN, self.height - s.size - EDGE_MARGIN)
        self.squares[d.index] = replace(s, x=nx, y=ny)
        return True

    def pointer_up(self):
        self.drag = NO_DRAG

    def key_down(self, key):
        if key == 'Delete':
            return self.delete_selected()
        return False

    ## rendering

    def render(self, drawable):

        W, H = self.width, self.height
        r = self.radius
        proj = self.projection

        drawable.layer = 'base'
        drawable.draw_line((0, self.horizon_y), (W, self.horizon_y), stroke='#999999', width=2)
        drawable.draw_circle(self.light, r * 4, gradient=Gradient(GLOW_STOPS))
        drawable.draw_circle(self.light, r, fill='#fff9c4', stroke='#333333', width=2)
        drawable.draw_circle(proj, r, fill='#ffd6b0', stroke='#333333', width=2)
        drawable.draw_line((proj[0], self.horizon_y), (proj[0], self.bottom_y),
                           stroke='#bbbbbb', dash=(4, 4))

        for i, s in enumerate(self.squares):
            sel = i == self.selected_index
            drawable.draw_rect(s.x, s.y, s.size, s.size, fill=s.color,
                               stroke='#000000' if sel else '#333333', width=3 if sel else 2)
            if sel:
                for c in s.corners():
                    drawable.draw_circle(c, 3, fill='#333333')
            poly = self.shadow(s)
            if poly is not None:
                drawable.draw_polygon(poly, closed=True, fill=SHADOW_FILL)

        # rays always above squares and shadows
        drawable.layer = 'rays'
        gradient = Gradient(RAY_STOPS)
        for s in self.squares:
            for a, b in ray_guides(s, self.light, proj):
                drawable.draw_line(a, b, stroke='rgba(40,40,40,0.55)', width=1, gradient=gradient)
