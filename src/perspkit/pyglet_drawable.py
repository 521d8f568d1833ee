## simple perspkit framework for interactive drawing using pyglet
## package
## Copyright (c) 2020 Richard W. DeVaul
## Copyright (c) 2020 yapCAD contributors
## All rights reserved

# Permission is hereby granted, free of charge, to any person
# obtaining a copy of this software and associated documentation files
# (the "Software"), to deal in the Software without restriction,
# including without limitation the rights to use, copy, modify, merge,
# publish, distribute, sublicense, and/or sell copies of the Software,
# and to permit persons to whom the Software is furnished to do so,
# subject to the following conditions:
#
# The above copyright notice and this permission notice shall be
# included in all copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND,
# EXPRESS OR IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF
# MERCHANTABILITY, FITNESS FOR A PARTICULAR PURPOSE AND
# NONINFRINGEMENT. IN NO EVENT SHALL THE AUTHORS OR COPYRIGHT HOLDERS
# BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER LIABILITY, WHETHER IN AN
# ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM, OUT OF OR IN
# CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.

from math import hypot

import pyglet
from pyglet import shapes
from pyglet.window import key, mouse

import perspkit.drawable as drawable

## number of bands used to approximate gradients
GRADIENT_STEPS = 8

## HTML document, instructions for user interaction
perspkit_legend = """
<font face="Verdana, Geneva, sans-serif" size="2" color="#333333">
<b>left-mouse drag</b>: move handles, squares and cubes<br>
<b>ctrl-drag</b> (cmd on macOS): move a cube on the ground plane<br>
<b>DELETE</b>: remove the selected square or cube<br>
<b>n</b>: new square (ellipse practice)<br>
<b>ESC</b>: exit viewer<br>
</font>
"""


def _rgba(c):
    r, g, b, a = drawable.parse_color(c)
    return (r, g, b, int(round(a * 255)))


def ground_drag(modifiers):
    """True when the held modifiers ask for a ground-plane cube drag."""
    return bool(modifiers & (key.MOD_CTRL | key.MOD_COMMAND))


def _dashes(p1, p2, dash):
    """Split the segment ``p1-p2`` into the drawn pieces of ``dash``."""

    on, off = dash[0], dash[1] if len(dash) > 1 else dash[0]
    L = hypot(p2[0] - p1[0], p2[1] - p1[1])
    if L == 0 or on <= 0:
        return [(p1, p2)]
    ux, uy = (p2[0] - p1[0]) / L, (p2[1] - p1[1]) / L
    out = []
    s = 0.0
    while s < L:
        e = min(s + on, L)
        out.append(((p1[0] + ux * s, p1[1] + uy * s), (p1[0] + ux * e, p1[1] + uy * e)))
        s = e + off
    return out


## class to provide interactive drawing with pyglet shapes.  Draw
## calls made between ``begin()`` and the next ``begin()`` are kept
## in one batch; canvas y grows downward, pyglet's grows upward.
class pygletDraw(drawable.Drawable):

    def __init__(self, width=960, height=540, batch=None):
        super().__init__(width, height)
        self.__batch = batch if batch is not None else pyglet.graphics.Batch()
        self.__shapes = []

    def __repr__(self):
        return 'an instance of pygletDraw'

    @property
    def batch(self):
        return self.__batch

    @property
    def shapes(self):
        return self.__shapes

    def begin(self):
        for s in self.__shapes:
            s.delete()
        self.__shapes = []

    def _pt(self, p):
        return (float(p[0]), self.height - float(p[1]))

    def _line(self, a, b, color, width):
        a, b = self._pt(a), self._pt(b)
        self.__shapes.append(shapes.Line(a[0], a[1], b[0], b[1], width,
                                         color=color, batch=self.__batch))

    ## Overload virtual perspkit.drawable base class drawing methods

    def draw_polygon(self, points, closed=True, fill=None, stroke=None, width=1.0, dash=None):
        if fill and closed and len(points) > 2:
            self.__shapes.append(shapes.Polygon(*[self._pt(p) for p in points],
                                                color=_rgba(fill), batch=self.__batch))
        if stroke:
            n = len(points)
            for i in range(n if closed else n - 1):
                self.draw_line(points[i], points[(i + 1) % n], stroke=stroke,
                               width=width, dash=dash)

    def draw_line(self, p1, p2, stroke='black', width=1.0, dash=None, gradient=None):
        if gradient is not None:
            # banded approximation of a linear gradient
            for i in range(GRADIENT_STEPS):
                t0, t1 = i / GRADIENT_STEPS, (i + 1) / GRADIENT_STEPS
                a = (p1[0] + (p2[0] - p1[0]) * t0, p1[1] + (p2[1] - p1[1]) * t0)
                b = (p1[0] + (p2[0] - p1[0]) * t1, p1[1] + (p2[1] - p1[1]) * t1)
                self._line(a, b, _rgba(gradient.color_at((t0 + t1) / 2.0)), width)
            return
        color = _rgba(stroke)
        for a, b in (_dashes(p1, p2, dash) if dash else [(p1, p2)]):
            self._line(a, b, color, width)

    def draw_circle(self, center, r, fill=None, stroke=None, width=1.0, gradient=None):
        x, y = self._pt(center)
        if gradient is not None:
            for i in range(GRADIENT_STEPS, 0, -1):
                u = i / GRADIENT_STEPS
                self.__shapes.append(shapes.Circle(x, y, r * u, color=_rgba(gradient.color_at(u)),
                                                   batch=self.__batch))
        elif fill:
            self.__shapes.append(shapes.Circle(x, y, r, color=_rgba(fill), batch=self.__batch))
        if stroke:
            self.__shapes.append(shapes.Arc(x, y, r, color=_rgba(stroke), batch=self.__batch))

    def display(self):
        pyglet.app.run()
        return True


## window that forwards pointer and keyboard input to a perspkit scene
## and redraws it every frame
class SceneViewer:

    def __init__(self, scene):
        self.scene = scene
        self.window = pyglet.window.Window(scene.width, scene.height,
                                           caption='perspkit: {}'.format(scene.name))
        self.drawable = pygletDraw(scene.width, scene.height)
        self.legend = pyglet.text.HTMLLabel(perspkit_legend, x=10, y=scene.height - 10,
                                            width=320, multiline=True, anchor_y='top')
        self.show_legend = True
        H = scene.height

        @self.window.event
        def on_mouse_press(x, y, buttons, modifiers):
            if buttons & mouse.LEFT:
                scene.pointer_down(x, H - y, modifier=ground_drag(modifiers))
            return pyglet.event.EVENT_HANDLED

        @self.window.event
        def on_mouse_drag(x, y, dx, dy, buttons, modifiers):
            scene.pointer_move(x, H - y)
            return pyglet.event.EVENT_HANDLED

        @self.window.event
        def on_mouse_release(x, y, buttons, modifiers):
            scene.pointer_up()
            return pyglet.event.EVENT_HANDLED

        @self.window.event
        def on_key_press(symbol, modifiers):
            if symbol in (key.DELETE, key.BACKSPACE):
                scene.key_down('Delete')
            elif symbol == key.N and hasattr(scene, 'new_square'):
                scene.new_square()
            elif symbol == key.M:
                self.show_legend = not self.show_legend
            elif symbol == key.ESCAPE:
                self.window.close()
            else:
                return
            return pyglet.event.EVENT_HANDLED

        @self.window.event
        def on_draw():
            pyglet.gl.glClearColor(1.0, 1.0, 1.0, 1.0)
            self.window.clear()
            self.drawable.begin()
            scene.render(self.drawable)
            self.drawable.batch.draw()
            if self.show_legend:
                self.legend.draw()

    def run(self):
        self.drawable.display()
