#!/usr/bin/env python3

"""
Framebuffer Emulator

Pixels are written here, and are only pushed to the actual display (the host
rendering system) at 60Hz.  Programs cannot write directly into video RAM.
Instead, sprites are drawn to the screen using an XOR method, and a collision
is reported whenever a set pixel gets unset.

Each cell holds exactly 0 or 1.  Pixel coordinates wrap around each axis
independently, so a sprite running off the right edge reappears on the left
edge of the same row, and one running off the bottom reappears at the top.

Changed pixels are forwarded to the renderer as they happen, and a 'dirty'
flag records whether anything changed since the last refresh.  Renderers that
prefer to pull a whole frame can take a snapshot instead, which is a copy and
never a reference into video RAM.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

from .constants import APP_NAME, VID_WIDTH, VID_HEIGHT
from .ram import RAM


class Framebuffer():
    def __init__(self, renderer, vid_width=VID_WIDTH, vid_height=VID_HEIGHT):
        self.renderer = renderer
        self.vram = RAM()
        self.vid_width = 0
        self.vid_height = 0
        self.vid_size = 0
        self.dirty = False
        self.resize_vid(vid_width, vid_height)
        self.report_perf()

    def resize_vid(self, vid_width, vid_height):
        self.vid_width = vid_width
        self.vid_height = vid_height
        self.vid_size = self.vid_width * self.vid_height
        self.vram.resize(self.vid_size)
        self.renderer.set_resolution(vid_width, vid_height)
        self.dirty = True

    def clear(self):
        self.vram.clear()
        self.dirty = True

        for y in range(self.vid_height):
            for x in range(self.vid_width):
                self.renderer.set_pixel(x, y, 0)

    def xor_pixel(self, x, y):
        # Toggles a pixel, returning True if it was set beforehand (a collision)
        x %= self.vid_width
        y %= self.vid_height
        vram_loc = y * self.vid_width + x
        pixel = self.vram.read(vram_loc)
        new_pixel = pixel ^ 1
        self.vram.write(vram_loc, new_pixel)
        self.renderer.set_pixel(x, y, new_pixel)
        self.dirty = True

        return pixel != 0

    def get_pixel(self, x, y):
        return self.vram.read((y % self.vid_height) * self.vid_width + (x % self.vid_width))

    def get_vid_size(self):
        return self.vid_width, self.vid_height

    def snapshot(self):
        # Immutable copy of the screen, one tuple per row
        cells = self.vram.read_block(0, self.vid_size)
        width = self.vid_width
        return tuple(tuple(cells[row:row + width]) for row in range(0, self.vid_size, width))

    def refresh_display(self):
        # Push pending pixel changes to the host, reporting whether there were any
        content_changed = self.dirty
        self.renderer.refresh_display(content_changed)
        self.dirty = False
        return content_changed

    def report_perf(self, fps=0, ops=0):
        title = "{} - {} FPS, {} OPS".format(APP_NAME, fps, ops)
        self.renderer.set_title(title)
