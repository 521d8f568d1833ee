"""Common interface of the interactive 2D scenes.

A viewer forwards pointer and keyboard events in canvas coordinates and
asks the scene to render itself into a :class:`perspkit.drawable.Drawable`.
"""

from __future__ import annotations


class Scene:
    """Base class for interactive perspkit scenes"""

    name = 'scene'

    def __init__(self, width=960, height=540):
        if width <= 0 or height <= 0:
            raise ValueError('bad canvas size: {}x{}'.format(width, height))
        self.width = width
        self.height = height

    def pointer_down(self, x, y, modifier=False):
        """Handle a press; return ``True`` if something was hit."""
        return False

    def pointer_move(self, x, y):
        return False

    def pointer_up(self):
        return None

    def key_down(self, key):
        return False

    def render(self, drawable):
        raise NotImplementedError('pure virtual render called')
