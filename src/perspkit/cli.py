#!/usr/bin/env python3
"""
Command line front end for perspkit.

Usage:
    perspkit light-shadow --out FILE.dxf
    perspkit cube --out FILE.dxf
    perspkit ellipse --out FILE.dxf [--seed N]
    perspkit view SCENE [--seed N]
    perspkit wireframe [--shape KIND ...] [--seed N]

The render commands build a scene in its default state and write one
frame of it to a DXF file.  ``view`` opens an interactive pyglet window.  ``wireframe`` builds the
3D modeler headless and reports its intersection curves.
"""

import argparse
import logging
import sys
from typing import Optional, Sequence

from perspkit import __version__
from perspkit.ellipse import EllipsePractice
from perspkit.perspective import PerspectiveCubeScene
from perspkit.shadow import LightShadowScene
from perspkit.solids import SHAPE_KINDS

log = logging.getLogger(__name__)

SCENES = {
    'light-shadow': LightShadowScene,
    'cube': PerspectiveCubeScene,
    'ellipse': EllipsePractice,
}


def make_scene(name, width=960, height=540, seed=None):
    """Build the named scene in its default state."""
    cls = SCENES.get(name)
    if cls is None:
        raise ValueError('bad scene name: {}'.format(name))
    if cls is EllipsePractice:
        return cls(width, height, seed=seed)
    return cls(width, height)


def cmd_render(args):
    """Render one frame of a scene to DXF."""
    from perspkit.ezdxf_drawable import ezdxfDraw

    scene = make_scene(args.action, args.width, args.height, args.seed)
    dd = ezdxfDraw(scene.width, scene.height)
    dd.filename = args.out
    scene.render(dd)
    dd.display()
    print(f"Wrote {dd.filename}.dxf")
    return 0


def cmd_view(args):
    """Open a scene in an interactive window."""
    scene = make_scene(args.scene, args.width, args.height, args.seed)
    try:
        from perspkit.pyglet_drawable import SceneViewer
        viewer = SceneViewer(scene)
    except Exception as e:  # no display, no OpenGL context
        log.error('cannot open viewer: %s', e)
        print(f"Error: cannot open viewer: {e}", file=sys.stderr)
        return 1
    viewer.run()
    return 0


def cmd_wireframe(args):
    """Place solids headless and report their intersection curves."""
    from perspkit.wireframe import HeadlessRenderer, WireframeScene

    kinds = args.shape or list(SHAPE_KINDS)
    scene = WireframeScene(HeadlessRenderer(args.width, args.height), seed=args.seed)
    for kind in kinds:
        scene.add_shape(kind)
    scene.frame()
    segments = scene.renderer.intersections
    print(f"{len(scene.items)} solids, {len(segments)} intersection segments")
    return 0


def build_parser():
    parser = argparse.ArgumentParser(
        prog='perspkit',
        description='perspective drawing widgets',
    )
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    subparsers = parser.add_subparsers(dest='action', required=True)

    for name in SCENES:
        p = subparsers.add_parser(name, help=f'Render the {name} scene to DXF')
        p.add_argument('-o', '--out', metavar='FILE', required=True,
                       help='Output DXF file')
        p.add_argument('--seed', type=int, default=None,
                       help='Random seed (ellipse quadrilateral)')
        p.add_argument('--width', type=int, default=960, help='Canvas width')
        p.add_argument('--height', type=int, default=540, help='Canvas height')

    view_parser = subparsers.add_parser('view', help='Open a scene in a window')
    view_parser.add_argument('scene', choices=sorted(SCENES), help='Scene to open')
    view_parser.add_argument('--seed', type=int, default=None, help='Random seed')
    view_parser.add_argument('--width', type=int, default=960, help='Canvas width')
    view_parser.add_argument('--height', type=int, default=540, help='Canvas height')

    wire_parser = subparsers.add_parser('wireframe', help='Intersect solids headless')
    wire_parser.add_argument('--shape', action='append', choices=SHAPE_KINDS,
                             help='Solid to add (repeatable; default one of each)')
    wire_parser.add_argument('--seed', type=int, default=None, help='Placement seed')
    wire_parser.add_argument('--width', type=int, default=960, help='Viewport width')
    wire_parser.add_argument('--height', type=int, default=540, help='Viewport height')
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    logging.basicConfig(level=logging.WARNING, format='%(levelname)s %(name)s: %(message)s')
    args = build_parser().parse_args(argv)
    if args.action == 'view':
        return cmd_view(args)
    if args.action == 'wireframe':
        return cmd_wireframe(args)
    return cmd_render(args)


if __name__ == '__main__':
    sys.exit(main())
