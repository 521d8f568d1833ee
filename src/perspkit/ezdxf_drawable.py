## simple perspkit framework for dxf-rendered drawable objects using
## ezdxf package.
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

import ezdxf
from ezdxf import colors

import perspkit.drawable as drawable

## name of the linetype used for dashed strokes
DASHED = 'PERSPKIT_DASHED'

## DXF only accepts these lineweights, in 1/100 mm
LINEWEIGHTS = (0, 5, 9, 13, 15, 18, 20, 25, 30, 35, 40, 50, 53, 60, 70, 80,
               90, 100, 106, 120, 140, 158, 200, 211)

## class to provide dxf drawing functionality.  Canvas coordinates
## have y growing downward; DXF has y growing upward, so every point
## is flipped about the canvas height on the way out.
class ezdxfDraw(drawable.Drawable):

    def __init__(self, width=960, height=540):
        super().__init__(width, height)

        # setup=False avoids creating default blocks (like _CLOSEDFILLED) that
        # contain SOLID entities unsupported by some CAD programs (e.g., FreeCAD)
        self.__doc = ezdxf.new(dxfversion='R2010', setup=False)
        self.__doc.header['$INSUNITS'] = 0 # unitless canvas pixels
        self.__doc.linetypes.add(DASHED, pattern=[12.0, 6.0, -6.0],
                                 description='perspkit dashed __ __ __')
        self.__msp = self.__doc.modelspace()
        self.__filename = "perspkit-out"
        self.layerlist = ['0']
        self.layer = '0'

    def __repr__(self):
        return 'an instance of ezdxfDraw'

    ## properties

    @property
    def doc(self):
        return self.__doc

    @property
    def filename(self):
        return self.__filename

    @filename.setter
    def filename(self, name):
        if not isinstance(name, str):
            raise ValueError('bad (non-string) filename: '+str(name))
        if name.lower().endswith('.dxf'):
            name = name[:-4]
        self.__filename = name

    ## helpers

    def _pt(self, p):
        return (float(p[0]), self.height - float(p[1]))

    def _layer(self):
        layer = self.layer
        if not self.__doc.layers.has_entry(layer):
            self.__doc.layers.new(layer, dxfattribs={'color': 7})
        return layer

    def _attribs(self, color, width=1.0, dash=None):
        attr = {'layer': self._layer(),
                'linetype': DASHED if dash else 'Continuous',
                'lineweight': min(LINEWEIGHTS, key=lambda w: abs(w - width * 25))}
        rgba = drawable.parse_color(color)
        if rgba is not None:
            attr['true_color'] = colors.rgb2int(rgba[:3])
        return attr, rgba

    def _hatch(self, rgba):
        hatch = self.__msp.add_hatch(dxfattribs={'layer': self._layer(),
                                                 'true_color': colors.rgb2int(rgba[:3])})
        hatch.transparency = 1.0 - rgba[3]
        return hatch

    ## Overload virtual perspkit.drawable base class drawing methods

    def draw_polygon(self, points, closed=True, fill=None, stroke=None, width=1.0, dash=None):
        pts = [self._pt(p) for p in points]
        if fill and closed and len(pts) > 2:
            _, rgba = self._attribs(fill)
            if rgba[3] > 0:
                self._hatch(rgba).paths.add_polyline_path(pts, is_closed=True)
        if stroke:
            attr, _ = self._attribs(stroke, width, dash)
            self.__msp.add_lwpolyline(pts, close=closed, dxfattribs=attr)

    def draw_line(self, p1, p2, stroke='black', width=1.0, dash=None, gradient=None):
        # DXF lines carry a single color; a gradient contributes its start
        color = gradient.color_at(0.0) if gradient is not None else stroke
        attr, _ = self._attribs(color, width, dash)
        self.__msp.add_line(self._pt(p1), self._pt(p2), dxfattribs=attr)

    def draw_circle(self, center, r, fill=None, stroke=None, width=1.0, gradient=None):
        c = self._pt(center)
        if gradient is not None:
            rgba = gradient.color_at(0.0)
            hatch = self._hatch(rgba)
            hatch.set_gradient(colors.RGB(*rgba[:3]), colors.RGB(*gradient.color_at(1.0)[:3]),
                                name='SPHERICAL')
            hatch.paths.add_edge_path().add_arc(c, r, 0, 360)
        elif fill:
            _, rgba = self._attribs(fill)
            self._hatch(rgba).paths.add_edge_path().add_arc(c, r, 0, 360)
        if stroke:
            attr, _ = self._attribs(stroke, width)
            self.__msp.add_circle(c, r, dxfattribs=attr)

    def display(self):
        self.__doc.saveas("{}.dxf".format(self.filename))
        return True
