"""Trimesh-backed boolean engine for perspkit meshes.

Availability depends on both the ``trimesh`` package and at least one
boolean backend supported by ``trimesh`` (``manifold3d`` is the one
perspkit installs; Blender and others are picked up when present).
"""

from __future__ import annotations

from typing import Optional

import trimesh

ENGINE_NAME = "trimesh"


def engines_available() -> set[str]:
    """Return the set of trimesh boolean backends that are operational."""

    return set(trimesh.boolean.engines_available)


def is_available(backend: str | None = None) -> bool:
    """Check whether the engine can run (trimesh + backend present)."""

    available = engines_available()
    if not available:
        return False
    if backend is None:
        return True
    return backend in available


def intersect(a: trimesh.Trimesh, b: trimesh.Trimesh, *,
              backend: str | None = None) -> Optional[trimesh.Trimesh]:
    """Intersection of two world-space meshes.

    Returns ``None`` when the solids do not overlap.  Raises
    ``RuntimeError`` when no backend is available or the backend fails.
    """

    available = engines_available()
    if backend is not None and backend not in available:
        raise RuntimeError(
            f"trimesh backend '{backend}' is not available (available: {available})"
        )
    if backend is None and not available:
        raise RuntimeError(
            "no trimesh boolean backends are available; install manifold3d or another supported engine"
        )

    # disjoint bounds cannot intersect
    disjoint = (a.bounds[0] > b.bounds[1]).any() or (b.bounds[0] > a.bounds[1]).any()
    if disjoint:
        return None

    try:
        result = trimesh.boolean.intersection([a, b], engine=backend, check_volume=False)
    except Exception as exc:  # depends on external backends
        raise RuntimeError(f"trimesh boolean operation failed: {exc}") from exc

    if result is None or result.faces.size == 0:
        return None
    return result


__all__ = ['ENGINE_NAME', 'is_available', 'intersect', 'engines_available']
