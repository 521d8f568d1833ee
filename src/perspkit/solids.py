"""Triangle-mesh solids for the wireframe modeler.

Solids are :class:`trimesh.Trimesh` instances centered on the origin with
their axis along +Y (screen up).  Cylinders and cones are capped so that
every solid is watertight and usable as a boolean operand.
"""

from __future__ import annotations

from math import pi, radians
from numbers import Number
from typing import Sequence, Tuple

import numpy as np
import trimesh

from perspkit.xform import object_rotation

SHAPE_KINDS = ('cube', 'cylinder', 'cone')

BOX_SIZE = 100.0
CYLINDER_RADIUS = 60.0
CYLINDER_HEIGHT = 140.0
CONE_RADIUS = 70.0
CONE_HEIGHT = 140.0
SEGMENTS = 32

## dihedral angle above which a shared edge counts as a feature edge
FEATURE_ANGLE = radians(1.0)

# trimesh builds round solids along +Z; this turns +Z into +Y
_Z_TO_Y = trimesh.transformations.rotation_matrix(-pi / 2.0, [1.0, 0.0, 0.0])


def make_solid(kind: str, segments: int = SEGMENTS) -> trimesh.Trimesh:
    """Build the mesh for a shape ``kind`` (``cube``, ``cylinder`` or ``cone``)."""

    if kind == 'cube':
        return trimesh.creation.box(extents=(BOX_SIZE, BOX_SIZE, BOX_SIZE))
    if kind == 'cylinder':
        mesh = trimesh.creation.cylinder(radius=CYLINDER_RADIUS, height=CYLINDER_HEIGHT,
                                         sections=segments)
    elif kind == 'cone':
        mesh = trimesh.creation.cone(radius=CONE_RADIUS, height=CONE_HEIGHT, sections=segments)
        # base sits on z=0, center it like the other solids
        mesh.apply_translation((0.0, 0.0, -CONE_HEIGHT / 2.0))
    else:
        raise ValueError('bad shape kind: {}'.format(kind))
    mesh.apply_transform(_Z_TO_Y)
    return mesh


def outline_edges(mesh: trimesh.Trimesh, angle: float = FEATURE_ANGLE) -> np.ndarray:
    """Return the visible outline of ``mesh`` as an ``(n, 2, 3)`` array of
    segments: edges between faces meeting at more than ``angle`` plus
    open boundary edges."""

    if len(mesh.faces) == 0:
        return np.zeros((0, 2, 3))
    sharp = mesh.face_adjacency_edges[mesh.face_adjacency_angles > angle]
    boundary = mesh.edges_sorted[trimesh.grouping.group_rows(mesh.edges_sorted, require_count=1)]
    edges = np.vstack((sharp.reshape(-1, 2), boundary.reshape(-1, 2)))
    return mesh.vertices[edges]


def scale3(scale) -> Tuple[float, float, float]:
    if isinstance(scale, Number):
        return (float(scale),) * 3
    if len(scale) != 3:
        raise ValueError('bad scale: {}'.format(scale))
    return (float(scale[0]), float(scale[1]), float(scale[2]))


def transform_matrix(position: Sequence[float] = (0.0, 0.0, 0.0),
                     rotation_deg: Sequence[float] = (0.0, 0.0, 0.0),
                     scale=1.0) -> np.ndarray:
    """4x4 world matrix ``T * R * S`` with ``R = Rx*Ry*Rz``."""

    M = np.eye(4)
    M[:3, :3] = np.asarray(object_rotation(rotation_deg).tolist()) * np.asarray(scale3(scale))
    M[:3, 3] = position
    return M


def world_mesh(mesh: trimesh.Trimesh, matrix: np.ndarray) -> trimesh.Trimesh:
    """Copy of ``mesh`` with ``matrix`` applied."""

    out = mesh.copy()
    out.apply_transform(matrix)
    return out
