"""Boolean (CSG) engines for perspkit meshes.

Engines are optional.  Each one that imports cleanly is registered in
:data:`ENGINE_REGISTRY`; callers must still check ``is_available()``
since an engine may import without a working backend.
"""

__all__ = []

try:
    from . import trimesh_engine as trimesh
except Exception:  # optional dependency
    trimesh = None
else:
    __all__.append('trimesh')

ENGINE_REGISTRY = {}
if trimesh is not None:
    ENGINE_REGISTRY['trimesh'] = trimesh

DEFAULT_ENGINE = 'trimesh'


def get_engine(name: str = DEFAULT_ENGINE):
    return ENGINE_REGISTRY.get(name)


__all__.extend(['ENGINE_REGISTRY', 'DEFAULT_ENGINE', 'get_engine'])
