"""Wireframe 3D modeler with live solid-solid intersection curves.

The scene owns an arena of solids keyed by generated ids.  A
:class:`SceneRenderer` only mirrors that state: items are created,
moved and destroyed on it, and it reports pick rays for screen points.
Intersection curves are recomputed when the item set or a transform
changes; the per-frame callback only pushes what is already known.
"""

from __future__ import annotations

import itertools
import logging
import uuid
from dataclasses import dataclass, field
from math import radians, tan
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
import trimesh

from perspkit import boolean, solids

log = logging.getLogger(__name__)

Vec3 = Tuple[float, float, float]

MODES = ('camera', 'translate', 'rotate', 'scale')
KEY_MODES = {'1': 'translate', '2': 'rotate', '3': 'scale'}

PLACEMENT_SPREAD = 300.0
PLACEMENT_HEIGHT = 50.0

CAMERA_POSITION: Vec3 = (500.0, 400.0, 600.0)
CAMERA_TARGET: Vec3 = (0.0, 0.0, 0.0)
CAMERA_FOV = 45.0

## world distance within which a pick ray grabs an outline segment
OUTLINE_PICK_DISTANCE = 2.0

_EMPTY = np.zeros((0, 2, 3))


@dataclass
class Transform:
    position: Vec3 = (0.0, 0.0, 0.0)
    rotation_deg: Vec3 = (0.0, 0.0, 0.0)
    scale: Vec3 = (1.0, 1.0, 1.0)

    def matrix(self) -> np.ndarray:
        return solids.transform_matrix(self.position, self.rotation_deg, self.scale)


@dataclass
class Item:
    """One solid in the arena.  ``version`` bumps on every transform change."""

    id: str
    kind: str
    mesh: trimesh.Trimesh
    outline: np.ndarray
    transform: Transform = field(default_factory=Transform)
    version: int = 0

    def world_mesh(self) -> trimesh.Trimesh:
        return solids.world_mesh(self.mesh, self.transform.matrix())


@dataclass(frozen=True)
class AddShape:
    kind: str
    position: Optional[Vec3] = None


@dataclass(frozen=True)
class SetTransform:
    id: str
    position: Optional[Vec3] = None
    rotation_deg: Optional[Vec3] = None
    scale: object = None


@dataclass
class PairResult:
    """Intersection segments of one unordered pair.

    ``versions`` are the item versions the segments were computed from;
    ``revision`` orders results of successive recomputes.
    """

    key: frozenset
    versions: Tuple[int, int]
    revision: int
    segments: np.ndarray = field(default_factory=lambda: _EMPTY)


class SceneRenderer:
    """Capability a 3D display has to provide for :class:`WireframeScene`."""

    def create(self, item_id, mesh, outline):
        raise NotImplementedError('pure virtual create called')

    def destroy(self, item_id):
        raise NotImplementedError('pure virtual destroy called')

    def set_transform(self, item_id, matrix):
        raise NotImplementedError('pure virtual set_transform called')

    def set_orbit_enabled(self, enabled):
        raise NotImplementedError('pure virtual set_orbit_enabled called')

    def attach_gizmo(self, item_id, mode):
        raise NotImplementedError('pure virtual attach_gizmo called')

    def detach_gizmo(self):
        raise NotImplementedError('pure virtual detach_gizmo called')

    def set_gizmo_mode(self, mode):
        raise NotImplementedError('pure virtual set_gizmo_mode called')

    def ray(self, x, y):
        """Return ``(origin, direction)`` of the pick ray through pixel ``(x, y)``."""
        raise NotImplementedError('pure virtual ray called')

    def set_intersections(self, segments):
        raise NotImplementedError('pure virtual set_intersections called')


class HeadlessRenderer(SceneRenderer):
    """Renderer that only records state, with a look-at pinhole camera."""

    def __init__(self, width=960, height=540, position=CAMERA_POSITION,
                 target=CAMERA_TARGET, fov=CAMERA_FOV):
        self.width = width
        self.height = height
        self.camera_position = np.asarray(position, dtype=float)
        self.camera_target = np.asarray(target, dtype=float)
        self.fov = fov
        self.objects: Dict[str, dict] = {}
        self.orbit_enabled = True
        self.gizmo: Optional[Tuple[str, str]] = None
        self.intersections = _EMPTY

    def create(self, item_id, mesh, outline):
        self.objects[item_id] = {'mesh': mesh, 'outline': outline, 'matrix': np.eye(4)}

    def destroy(self, item_id):
        self.objects.pop(item_id, None)
        if self.gizmo is not None and self.gizmo[0] == item_id:
            self.gizmo = None

    def set_transform(self, item_id, matrix):
        self.objects[item_id]['matrix'] = np.asarray(matrix, dtype=float)

    def set_orbit_enabled(self, enabled):
        self.orbit_enabled = bool(enabled)

    def attach_gizmo(self, item_id, mode):
        self.gizmo = (item_id, mode)

    def detach_gizmo(self):
        self.gizmo = None

    def set_gizmo_mode(self, mode):
        if self.gizmo is not None:
            self.gizmo = (self.gizmo[0], mode)

    def ray(self, x, y):
        eye = self.camera_position
        forward = self.camera_target - eye
        forward = forward / np.linalg.norm(forward)
        right = np.cross(forward, (0.0, 1.0, 0.0))
        right = right / np.linalg.norm(right)
        up = np.cross(right, forward)
        # normalized device coordinates, y up
        nx = (x / self.width) * 2.0 - 1.0
        ny = 1.0 - (y / self.height) * 2.0
        t = tan(radians(self.fov) / 2.0)
        d = forward + right * (nx * t * self.width / self.height) + up * (ny * t)
        return eye, d / np.linalg.norm(d)

    def set_intersections(self, segments):
        self.intersections = segments


def ray_segment_distances(origin, direction, segments):
    """Distance from the ray to each ``(n, 2, 3)`` segment and the ray
    parameter of the closest approach.  Parallel segments are measured
    from their first endpoint."""

    segments = np.asarray(segments, dtype=float).reshape(-1, 2, 3)
    d = np.asarray(direction, dtype=float)
    d = d / np.linalg.norm(d)
    p = segments[:, 0]
    e = segments[:, 1] - p
    w = p - np.asarray(origin, dtype=float)
    b = e @ d
    c = np.einsum('ij,ij->i', e, e)
    dw = w @ d
    ew = np.einsum('ij,ij->i', e, w)
    den = c - b * b
    s = np.zeros(len(segments))
    ok = den > 1e-12
    s[ok] = (b[ok] * dw[ok] - ew[ok]) / den[ok]
    s = np.clip(s, 0.0, 1.0)
    t = np.maximum(dw + s * b, 0.0)
    gap = w + e * s[:, None] - t[:, None] * d
    return np.linalg.norm(gap, axis=1), t


def _vec3(v, name) -> Vec3:
    if len(v) != 3:
        raise ValueError('bad {}: {}'.format(name, v))
    return (float(v[0]), float(v[1]), float(v[2]))


class WireframeScene:
    """Arena of solids, selection, manipulation mode and intersections.

    ``engine`` is a boolean engine module (see :mod:`perspkit.boolean`);
    when omitted the default one is looked up on first use.
    """

    def __init__(self, renderer: Optional[SceneRenderer] = None, seed=None, engine=None):
        self.renderer = renderer if renderer is not None else HeadlessRenderer()
        self.rng = np.random.default_rng(seed)
        self.items: Dict[str, Item] = {}
        self.selected_id: Optional[str] = None
        self.mode = 'camera'
        self.show_intersections = True
        self.queue: List[object] = []
        self.curves = _EMPTY
        self._parents: Dict[str, str] = {}
        self._cache: Dict[frozenset, PairResult] = {}
        self._revision = 0
        self._engine = engine
        self._engine_loaded = engine is not None
        self._csg_warned = False

    ## arena

    def add_shape(self, kind, position=None) -> str:
        mesh = solids.make_solid(kind)
        if position is None:
            r = self.rng.random(2)
            position = ((r[0] - 0.5) * PLACEMENT_SPREAD, PLACEMENT_HEIGHT,
                        (r[1] - 0.5) * PLACEMENT_SPREAD)
        item = Item(uuid.uuid4().hex, kind, mesh, solids.outline_edges(mesh),
                    Transform(position=_vec3(position, 'position')))
        self.items[item.id] = item
        self._parents[item.id + '/outline'] = item.id
        self.renderer.create(item.id, item.mesh, item.outline)
        self.renderer.set_transform(item.id, item.transform.matrix())
        self.select(item.id)
        self.recompute_intersections()
        return item.id

    def remove(self, item_id):
        if item_id not in self.items:
            return False
        del self.items[item_id]
        self._parents.pop(item_id + '/outline', None)
        self.renderer.destroy(item_id)
        if self.selected_id == item_id:
            self.selected_id = None
            self.renderer.detach_gizmo()
        self.recompute_intersections()
        return True

    def set_transform(self, item_id, position=None, rotation_deg=None, scale=None):
        """Update the transform of ``item_id``.  Returns ``False`` when the
        item is gone, e.g. for an edit queued before its removal."""

        item = self.items.get(item_id)
        if item is None:
            log.debug('dropping transform for removed item %s', item_id)
            return False
        t = item.transform
        if position is not None:
            t.position = _vec3(position, 'position')
        if rotation_deg is not None:
            t.rotation_deg = _vec3(rotation_deg, 'rotation')
        if scale is not None:
            t.scale = solids.scale3(scale)
        item.version += 1
        self.renderer.set_transform(item_id, t.matrix())
        self.recompute_intersections()
        return True

    ## commands

    def submit(self, command):
        if isinstance(command, AddShape):
            return self.add_shape(command.kind, command.position)
        if isinstance(command, SetTransform):
            return self.set_transform(command.id, command.position,
                                      command.rotation_deg, command.scale)
        raise ValueError('bad command: {}'.format(command))

    def process_commands(self):
        results = []
        while self.queue:
            results.append(self.submit(self.queue.pop(0)))
        return results

    ## selection

    def select(self, item_id):
        if item_id is not None and item_id not in self.items:
            raise ValueError('bad item id: {}'.format(item_id))
        self.selected_id = item_id
        self._sync_gizmo()

    def owner_of(self, node) -> Optional[str]:
        """Walk from a hit node (an item mesh or one of its children) up to
        the owning item id."""

        seen = set()
        while node is not None and node not in self.items:
            if node in seen:
                return None
            seen.add(node)
            node = self._parents.get(node)
        return node

    def pick(self, origin: Sequence[float], direction: Sequence[float]) -> Optional[str]:
        """Id of the item nearest along the ray, or ``None``.

        Both the solid and its outline are hit-tested; an outline
        segment counts when the ray passes within
        :data:`OUTLINE_PICK_DISTANCE` of it.  The hit node is resolved
        to its item through :meth:`owner_of`.
        """

        origin = np.asarray(origin, dtype=float)
        direction = np.asarray(direction, dtype=float)
        direction = direction / np.linalg.norm(direction)
        best, best_d = None, np.inf
        for item in self.items.values():
            matrix = item.transform.matrix()
            mesh = solids.world_mesh(item.mesh, matrix)
            locations, _, _ = mesh.ray.intersects_location([origin], [direction])
            if len(locations):
                d = np.linalg.norm(locations - origin, axis=1).min()
                if d < best_d:
                    best, best_d = item.id, d
            if len(item.outline):
                pts = trimesh.transform_points(item.outline.reshape(-1, 3), matrix)
                gaps, t = ray_segment_distances(origin, direction, pts.reshape(-1, 2, 3))
                near = (gaps <= OUTLINE_PICK_DISTANCE) & (t > 0)
                if near.any() and t[near].min() < best_d:
                    best, best_d = item.id + '/outline', t[near].min()
        return self.owner_of(best)

    def click(self, x, y):
        """Select the item under pixel ``(x, y)``; misses keep the selection."""

        origin, direction = self.renderer.ray(x, y)
        hit = self.pick(origin, direction)
        if hit is not None:
            self.select(hit)
        return hit

    ## manipulation mode

    def set_mode(self, mode):
        if mode not in MODES:
            raise ValueError('bad mode: {}'.format(mode))
        self.mode = mode
        self._sync_gizmo()

    def _sync_gizmo(self):
        if self.mode == 'camera':
            self.renderer.set_orbit_enabled(True)
            self.renderer.detach_gizmo()
            return
        self.renderer.set_orbit_enabled(False)
        if self.selected_id is None:
            self.renderer.detach_gizmo()
        else:
            self.renderer.attach_gizmo(self.selected_id, self.mode)
            self.renderer.set_gizmo_mode(self.mode)

    def key_down(self, key):
        mode = KEY_MODES.get(key)
        if mode is None:
            return False
        self.set_mode(mode)
        return True

    ## intersections

    def _load_engine(self):
        if not self._engine_loaded:
            self._engine_loaded = True
            engine = boolean.get_engine()
            if engine is None or not engine.is_available():
                log.warning('no boolean engine available; intersection curves disabled')
                self._csg_warned = True
                engine = None
            self._engine = engine
        return self._engine

    def set_show_intersections(self, show):
        self.show_intersections = bool(show)
        if not self.show_intersections:
            self.curves = _EMPTY
            self.renderer.set_intersections(self.curves)
        else:
            self.recompute_intersections()

    def apply_result(self, result: PairResult) -> bool:
        """Store ``result`` unless a newer revision is already applied."""

        current = self._cache.get(result.key)
        if current is not None and current.revision > result.revision:
            return False
        self._cache[result.key] = result
        return True

    def _pair_segments(self, engine, a: Item, b: Item) -> np.ndarray:
        try:
            mesh = engine.intersect(a.world_mesh(), b.world_mesh())
        except RuntimeError as exc:
            if not self._csg_warned:
                log.warning('intersection failed: %s', exc)
                self._csg_warned = True
            return _EMPTY
        if mesh is None:
            return _EMPTY
        return solids.outline_edges(mesh)

    def recompute_intersections(self):
        """Recompute dirty pairs and refresh :attr:`curves`."""

        for key in [k for k in self._cache if not k.issubset(self.items)]:
            del self._cache[key]
        if not self.show_intersections:
            return self.curves
        engine = self._load_engine()
        if engine is None:
            self.curves = _EMPTY
            return self.curves

        self._revision += 1
        for a, b in itertools.combinations(self.items.values(), 2):
            key = frozenset((a.id, b.id))
            versions = (a.version, b.version) if a.id < b.id else (b.version, a.version)
            cached = self._cache.get(key)
            if cached is not None and cached.versions == versions:
                continue
            self.apply_result(PairResult(key, versions, self._revision,
                                         self._pair_segments(engine, a, b)))
        parts = [r.segments for r in self._cache.values() if len(r.segments)]
        self.curves = np.concatenate(parts) if parts else _EMPTY
        return self.curves

    ## per refresh

    def frame(self):
        for item in self.items.values():
            self.renderer.set_transform(item.id, item.transform.matrix())
        self.renderer.set_intersections(self.curves if self.show_intersections else _EMPTY)
