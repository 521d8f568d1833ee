"""Cubes in three-point perspective with vanishing-line extensions.

The camera sits at the origin looking down +z, with screen y growing
downward.  Its pitch is not stored: it is derived from where the user
drags the horizon, ``pitch = atan((height/2 - horizon_y) / focal)``, so
that the vanishing line of the ground plane lands on the horizon.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import List, Optional, Tuple

from perspkit.geom import Point2, bbox2, clamp, extend_line_to_rect, inside_bbox2
from perspkit.scene import Scene
from perspkit.xform import (
    AXES,
    Quaternion,
    Rx,
    apply_transform,
    camera_pitch,
    matrix_to_euler,
    object_rotation,
    project,
)

Vec3 = Tuple[float, float, float]

CUBE_SIZE = 150.0
HORIZON_HIT = 6.0
HORIZON_MARGIN = 20.0
HIT_PAD = 8.0
MIN_HIT_BOX = 4.0
DEFAULT_FOCAL = 800.0
MIN_FOCAL = 100.0
MAX_FOCAL = 4000.0
DEFAULT_POSITION: Vec3 = (0.0, 0.0, 800.0)

_h = CUBE_SIZE / 2.0
UNIT_CUBE: Tuple[Vec3, ...] = (
    (-_h, -_h, -_h), (_h, -_h, -_h), (_h, _h, -_h), (-_h, _h, -_h),
    (-_h, -_h, _h), (_h, -_h, _h), (_h, _h, _h), (-_h, _h, _h),
)

EDGES: Tuple[Tuple[int, int], ...] = (
    (0, 1), (1, 2), (2, 3), (3, 0),  # back
    (4, 5), (5, 6), (6, 7), (7, 4),  # front
    (0, 4), (1, 5), (2, 6), (3, 7),  # sides
)


@dataclass
class Cube:
    """A cube's pose.

    ``rotation_deg`` holds the per-axis slider values.  When
    ``orientation`` is set it is the authoritative rotation and the
    degrees are kept only for display.
    """

    rotation_deg: Vec3 = (0.0, 0.0, 0.0)
    position: Vec3 = DEFAULT_POSITION
    orientation: Optional[Quaternion] = None

    def rotation_matrix(self, mode='three-point'):
        if self.orientation is not None and mode != 'two-point':
            return self.orientation.to_matrix()
        return object_rotation(self.rotation_deg, mode)


@dataclass
class ProjectedCube:
    vertices: List[Point2]
    extensions: List[Tuple[Point2, Point2]]
    in_front: bool = True

    def edges(self):
        return [(self.vertices[i], self.vertices[j]) for i, j in EDGES]

    def hit_box(self, pad=HIT_PAD):
        (x0, y0), (x1, y1) = bbox2(self.vertices, pad)
        return ((x0, y0), (max(x1, x0 + MIN_HIT_BOX), max(y1, y0 + MIN_HIT_BOX)))


@dataclass(frozen=True)
class CubeDrag:
    index: int
    ground: bool
    start: Point2
    origin: Vec3


def project_cube(cube, width, height, focal, horizon_y, mode='three-point') -> ProjectedCube:
    """Run the per-cube pipeline: object rotation, translation, camera
    pitch, perspective projection, then edge extension to the viewport."""

    R = cube.rotation_matrix(mode)
    Rc = Rx(camera_pitch(height, horizon_y, focal))
    cx, cy = width / 2.0, height / 2.0
    cam = [Rc.mul(apply_transform(v, R, cube.position)) for v in UNIT_CUBE]
    projected = [project(v, cx, cy, focal) for v in cam]
    extended = [extend_line_to_rect(projected[i], projected[j], width, height) for i, j in EDGES]
    return ProjectedCube(projected, extended, all(v[2] > 0 for v in cam))


def drag_position(origin, start, pointer, focal, ground):
    """World position for a cube dragged from ``start`` to ``pointer``.

    Screen deltas are scaled by ``z/focal`` so a cube follows the
    pointer at its own depth.  ``ground`` moves in the X/Z plane.
    """

    dx = pointer[0] - start[0]
    dy = pointer[1] - start[1]
    z = origin[2] or 1e-6
    s = z / (focal or 1.0)
    if ground:
        return (origin[0] + dx * s, origin[1], origin[2] + dy * s)
    return (origin[0] + dx * s, origin[1] + dy * s, origin[2])


class PerspectiveCubeScene(Scene):
    """Draggable horizon and a list of cubes."""

    name = 'cube'

    def __init__(self, width=960, height=540, focal=DEFAULT_FOCAL, cubes=None,
                 mode='three-point', use_quaternions=False):
        super().__init__(width, height)
        if mode not in ('two-point', 'three-point'):
            raise ValueError('bad perspective mode: {}'.format(mode))
        self.mode = mode
        self.horizon_y = height / 2.0
        self.focal = clamp(focal, MIN_FOCAL, MAX_FOCAL)
        self.use_quaternions = use_quaternions
        self.cubes: List[Cube] = list(cubes) if cubes is not None else [Cube()]
        if use_quaternions:
            for c in self.cubes:
                if c.orientation is None:
                    c.orientation = Quaternion.from_euler(c.rotation_deg)
        self.selected_index = 0
        self.only_selected_extensions = False
        self._horizon_offset = None
        self._drag: Optional[CubeDrag] = None

    @property
    def pitch(self):
        return camera_pitch(self.height, self.horizon_y, self.focal)

    @property
    def selected(self) -> Optional[Cube]:
        if 0 <= self.selected_index < len(self.cubes):
            return self.cubes[self.selected_index]
        return None

    @property
    def dragging(self):
        if self._horizon_offset is not None:
            return 'horizon'
        if self._drag is not None:
            return 'cube'
        return None

    def projected(self) -> List[ProjectedCube]:
        return [project_cube(c, self.width, self.height, self.focal, self.horizon_y, self.mode)
                for c in self.cubes]

    def vanishing_lines(self, only_selected=None, projected=None):
        """Extended edges per cube index, filtered by the only-selected flag.
        Cubes crossing the camera plane have no extensions."""

        if only_selected is None:
            only_selected = self.only_selected_extensions
        if projected is None:
            projected = self.projected()
        out = {}
        for i, pc in enumerate(projected):
            if not pc.in_front or (only_selected and i != self.selected_index):
                continue
            out[i] = pc.extensions
        return out

    ## commands

    def add_cube(self):
        idx = len(self.cubes)
        pos = (-200.0 + (idx % 5) * 100.0, 75.0, 700.0 + (idx % 4) * 80.0)
        cube = Cube((0.0, 0.0, 0.0), pos)
        if self.use_quaternions:
            cube.orientation = Quaternion.identity()
        self.cubes.append(cube)
        self.selected_index = len(self.cubes) - 1
        return self.selected_index

    def remove_selected(self):
        if not self.cubes:
            return False
        if not 0 <= self.selected_index < len(self.cubes):
            self.selected_index = max(0, len(self.cubes) - 1)
            return False
        del self.cubes[self.selected_index]
        self.selected_index = max(0, self.selected_index - 1) if self.cubes else 0
        self._drag = None
        return True

    def select(self, index):
        if not self.cubes:
            self.selected_index = 0
            return
        self.selected_index = int(clamp(index, 0, len(self.cubes) - 1))

    def set_focal(self, focal):
        self.focal = clamp(focal, MIN_FOCAL, MAX_FOCAL)

    def set_horizon(self, y):
        self.horizon_y = clamp(y, HORIZON_MARGIN, self.height - HORIZON_MARGIN)

    def set_rotation(self, axis, degrees):
        """Slider update for one axis of the selected cube.

        With quaternions the change from the old slider value is composed
        onto the orientation about the cube's own axis, and the stored
        degrees only track the slider.
        """

        cube = self.selected
        if cube is None:
            return
        if axis not in AXES:
            raise ValueError('bad axis name: {}'.format(axis))
        i = 'xyz'.index(axis)
        rot = list(cube.rotation_deg)
        delta = degrees - rot[i]
        rot[i] = degrees
        cube.rotation_deg = tuple(rot)
        if self.use_quaternions:
            base = cube.orientation or Quaternion.from_euler(cube.rotation_deg)
            cube.orientation = base.compose(axis, delta)

    def displayed_rotation(self, cube=None):
        """Per-axis degrees equivalent to the cube's actual orientation."""

        cube = cube or self.selected
        if cube is None:
            return None
        if cube.orientation is None:
            return cube.rotation_deg
        return matrix_to_euler(cube.orientation.to_matrix())

    def set_position(self, axis, value):
        cube = self.selected
        if cube is None:
            return
        if axis not in AXES:
            raise ValueError('bad axis name: {}'.format(axis))
        pos = list(cube.position)
        pos['xyz'.index(axis)] = float(value)
        cube.position = tuple(pos)

    def reset_current(self):
        cube = self.selected
        if cube is not None:
            self.cubes[self.selected_index] = replace(
                cube, rotation_deg=(0.0, 0.0, 0.0), position=DEFAULT_POSITION,
                orientation=Quaternion.identity() if self.use_quaternions else None)
        self.focal = DEFAULT_FOCAL

    ## pointer handling

    def pointer_down(self, x, y, modifier=False):
        if abs(y - self.horizon_y) <= HORIZON_HIT:
            self._horizon_offset = y - self.horizon_y
            return True
        # topmost first: later cubes are drawn over earlier ones
        projected = self.projected()
        for i in range(len(projected) - 1, -1, -1):
            if projected[i].in_front and inside_bbox2(projected[i].hit_box(), (x, y)):
                self.selected_index = i
                self._drag = CubeDrag(i, bool(modifier), (x, y), self.cubes[i].position)
                return True
        return False

    def pointer_move(self, x, y):
        if self._horizon_offset is not None:
            self.set_horizon(y - self._horizon_offset)
            return True
        d = self._drag
        if d is None:
            return False
        if not 0 <= d.index < len(self.cubes):
            self._drag = None
            return False
        self.cubes[d.index].position = drag_position(d.origin, d.start, (x, y), self.focal, d.ground)
        return True

    def pointer_up(self):
        self._horizon_offset = None
        self._drag = None

    def key_down(self, key):
        if key == 'Delete':
            return self.remove_selected()
        return False

    ## rendering

    def render(self, drawable):
        W = self.width
        drawable.layer = 'base'
        drawable.draw_line((0, self.horizon_y), (W, self.horizon_y), stroke='#999999', width=2)

        projected = self.projected()
        drawable.layer = 'extensions'
        for lines in self.vanishing_lines(projected=projected).values():
            for a, b in lines:
                drawable.draw_line(a, b, stroke='#9aa6b2', width=1, dash=(6, 6))

        drawable.layer = 'edges'
        for i, pc in enumerate(projected):
            if not pc.in_front:
                continue
            sel = i == self.selected_index
            for a, b in pc.edges():
                drawable.draw_line(a, b, stroke='#222222' if sel else '#666666',
                                   width=2 if sel else 1.5)

        drawable.layer = 'handles'
        drawable.draw_circle((W - 12, self.horizon_y), 4, fill='#999999')
