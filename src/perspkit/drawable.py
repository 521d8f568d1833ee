## base class of drawable for perspkit
## Copyright (c) 2020 Richard W. DeVaul
## Copyright (c) 2020 yapCAD contributors
## All rights reserved
## See licensing terms here: https://github.com/rdevaul/yapCAD/blob/master/LICENSE

"""2D immediate-mode drawing capability.

Every perspkit scene renders itself by issuing primitive draw calls to
a :class:`Drawable`.  Coordinates are canvas coordinates (origin top
left, y down).  Subclasses override the three primitives
``draw_polygon``, ``draw_line`` and ``draw_circle``; everything else is
built on top of them.

Colors may be given as ``'#rrggbb'``, ``'#rrggbbaa'``, ``'rgb(...)'``,
``'rgba(...)'``, one of the names in :attr:`Drawable.colordict`, or an
``(r, g, b[, a])`` sequence with byte channels and a 0..1 alpha.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

RGBA = Tuple[int, int, int, float]

_RGBA_RE = re.compile(r'^rgba?\(\s*([^)]*)\)$')


def parse_color(c) -> Optional[RGBA]:
    """Normalize a color specification to ``(r, g, b, alpha)``.

    ``None`` and ``False`` mean "no color" and give ``None``.
    """

    if c is None or c is False:
        return None
    if isinstance(c, (tuple, list)):
        if len(c) not in (3, 4):
            raise ValueError('bad color: {}'.format(c))
        a = float(c[3]) if len(c) == 4 else 1.0
        return (int(c[0]), int(c[1]), int(c[2]), a)
    if not isinstance(c, str):
        raise ValueError('bad color: {}'.format(c))
    s = c.strip().lower()
    if s in Drawable.colordict:
        r, g, b = Drawable.colordict[s]
        return (r, g, b, 1.0)
    if s.startswith('#'):
        h = s[1:]
        if len(h) == 3:
            h = ''.join(ch * 2 for ch in h)
        if len(h) not in (6, 8):
            raise ValueError('bad color: {}'.format(c))
        a = int(h[6:8], 16) / 255.0 if len(h) == 8 else 1.0
        return (int(h[0:2], 16), int(h[2:4], 16), int(h[4:6], 16), a)
    m = _RGBA_RE.match(s)
    if m:
        parts = [p.strip() for p in m.group(1).split(',')]
        if len(parts) not in (3, 4):
            raise ValueError('bad color: {}'.format(c))
        a = float(parts[3]) if len(parts) == 4 else 1.0
        return (int(float(parts[0])), int(float(parts[1])), int(float(parts[2])), a)
    raise ValueError('bad color: {}'.format(c))


@dataclass(frozen=True)
class Gradient:
    """Color stops ``(offset, color)`` with offsets in ``[0, 1]``.

    For lines the gradient runs from the first to the second point, for
    circles it runs from the center to the rim.
    """

    stops: Tuple[Tuple[float, Any], ...]

    def color_at(self, u: float) -> RGBA:
        stops = [(o, parse_color(c)) for o, c in self.stops]
        if u <= stops[0][0]:
            return stops[0][1]
        for (o0, c0), (o1, c1) in zip(stops, stops[1:]):
            if u <= o1:
                k = 0.0 if o1 == o0 else (u - o0) / (o1 - o0)
                return (int(round(c0[0] + (c1[0] - c0[0]) * k)),
                        int(round(c0[1] + (c1[1] - c0[1]) * k)),
                        int(round(c0[2] + (c1[2] - c0[2]) * k)),
                        c0[3] + (c1[3] - c0[3]) * k)
        return stops[-1][1]


class Drawable:
    """Base class for perspkit drawables"""

    ## Standard color names, a subset of the CSS keywords.
    colordict = {
        'black': (0, 0, 0),
        'white': (255, 255, 255),
        'gray': (128, 128, 128),
        'grey': (128, 128, 128),
        'red': (255, 0, 0),
        'green': (0, 128, 0),
        'blue': (0, 0, 255),
        'yellow': (255, 255, 0),
        'orange': (255, 165, 0),
        'transparent': (0, 0, 0),
    }

    def __init__(self, width=960, height=540):
        self.__width = width
        self.__height = height
        self.__layer = 'default'
        self.__layerlist = ['default']

    def __repr__(self):
        return 'an abstract Drawable instance'

    ## Various property functions

    @property
    def width(self):
        return self.__width

    @property
    def height(self):
        return self.__height

    @property
    def layerlist(self):
        return self.__layerlist

    @layerlist.setter
    def layerlist(self, lst):
        if isinstance(lst, list) and lst:
            self.__layerlist = lst
        else:
            raise ValueError('bad layer list ' + str(lst))

    @property
    def layer(self):
        return self.__layer

    @layer.setter
    def layer(self, lyr):
        if lyr not in self.__layerlist:
            self.__layerlist.append(lyr)
        self.__layer = lyr

    ## pure virtual functions -- override for specific rendering
    ## system

    def draw_polygon(self, points, closed=True, fill=None, stroke=None, width=1.0, dash=None):
        raise NotImplementedError('pure virtual draw_polygon called')

    def draw_line(self, p1, p2, stroke='black', width=1.0, dash=None, gradient=None):
        raise NotImplementedError('pure virtual draw_line called')

    def draw_circle(self, center, r, fill=None, stroke=None, width=1.0, gradient=None):
        raise NotImplementedError('pure virtual draw_circle called')

    ## non-virtual utility drawing functions

    def draw_polyline(self, points, stroke='black', width=1.0, dash=None, closed=False):
        if len(points) < 2:
            return
        self.draw_polygon(points, closed=closed, fill=None, stroke=stroke, width=width, dash=dash)

    def draw_rect(self, x, y, w, h, fill=None, stroke=None, width=1.0):
        self.draw_polygon([(x, y), (x + w, y), (x + w, y + h), (x, y + h)],
                          closed=True, fill=fill, stroke=stroke, width=width)

    ## cause drawing page to be rendered -- pure virtual in base class
    def display(self):
        return True


@dataclass
class DrawCommand:
    """One recorded primitive."""

    kind: str
    points: List[Tuple[float, float]]
    layer: str
    style: Dict[str, Any] = field(default_factory=dict)


class RecordingDrawable(Drawable):
    """Drawable that keeps a display list instead of rasterizing.

    Used headless and by the test suite; ``commands`` holds every
    primitive in draw order.
    """

    def __init__(self, width=960, height=540):
        super().__init__(width, height)
        self.commands: List[DrawCommand] = []

    def __repr__(self):
        return 'RecordingDrawable({} commands)'.format(len(self.commands))

    def _record(self, kind, points, **style):
        self.commands.append(DrawCommand(kind, [(float(p[0]), float(p[1])) for p in points],
                                         self.layer, style))

    def draw_polygon(self, points, closed=True, fill=None, stroke=None, width=1.0, dash=None):
        self._record('polygon', points, closed=closed, fill=fill, stroke=stroke,
                     width=width, dash=dash)

    def draw_line(self, p1, p2, stroke='black', width=1.0, dash=None, gradient=None):
        self._record('line', [p1, p2], stroke=stroke, width=width, dash=dash, gradient=gradient)

    def draw_circle(self, center, r, fill=None, stroke=None, width=1.0, gradient=None):
        self._record('circle', [center], r=r, fill=fill, stroke=stroke, width=width,
                     gradient=gradient)

    def of_kind(self, kind: str, layer: Optional[str] = None) -> List[DrawCommand]:
        return [c for c in self.commands
                if c.kind == kind and (layer is None or c.layer == layer)]

    def on_layer(self, layer: str) -> List[DrawCommand]:
        return [c for c in self.commands if c.layer == layer]

    def clear(self):
        self.commands = []
