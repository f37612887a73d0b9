#!/usr/bin/env python3

"""
Text Renderer Plugin

Keeps its own copy of the screen and prints the last displayed frame as text
when shut down.  Handy for running ROMs headless, e.g. test ROMs that draw a
pass/fail report and then loop forever.

Each pixel is drawn 'scale' characters wide, using a full block for set pixels
and a space for unset ones.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

import sys
from .r_null import Renderer as RendererBase

PIXEL_ON = "█"
PIXEL_OFF = " "


class Renderer(RendererBase):
    def __init__(self, scale=None, stream=None, **kwargs):
        self.stream = sys.stdout if stream is None else stream
        self.pixels = []
        self.frame = []
        super().__init__(scale=scale, **kwargs)

    def set_resolution(self, width, height):
        super().set_resolution(width, height)
        self.pixels = [[0] * width for _ in range(height)]
        self.frame = [row[:] for row in self.pixels]

    def set_pixel(self, x, y, colour):
        self.pixels[y][x] = colour

    def refresh_display(self, content_changed=False):
        if content_changed:
            self.frame = [row[:] for row in self.pixels]

    def render_text(self):
        on_char = PIXEL_ON * self.scale
        off_char = PIXEL_OFF * self.scale
        border = "+" + "-" * (self.width * self.scale) + "+"
        lines = [border]

        for row in self.frame:
            lines.append("|" + "".join(on_char if pixel else off_char for pixel in row) + "|")

        lines.append(border)
        return "\n".join(lines)

    def shutdown(self):
        print(self.render_text(), file=self.stream)
