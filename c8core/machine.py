#!/usr/bin/env python3

"""
Machine Assembly

Plugs RAM, the call stack, keypad, framebuffer and CPU together into one
CHIP-8 system, with the built-in font installed.  This is the part host code
talks to when it wants to load a ROM, press keys, or look at the state.

Loading a ROM always resets the whole machine first, so nothing from a
previous run survives into the next.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

from .constants import MEM_SIZE, FONT_LOC, STACK_SIZE, SYSTEM_FONT
from .cpu import CPU
from .debugger import Debugger
from .framebuffer import Framebuffer
from .keypad import Keypad
from .ram import RAM
from .stack import Stack


class Machine:
    def __init__(self, renderer, audio, quirks=None, debugger=None, rng=None):
        self.ram = RAM()
        self.ram.resize(MEM_SIZE)
        self.stack = Stack(STACK_SIZE)
        self.keypad = Keypad()
        self.framebuffer = Framebuffer(renderer)
        self.audio = audio
        self.debugger = Debugger() if debugger is None else debugger
        self.cpu = CPU(
            self.ram, self.stack, self.framebuffer, self.keypad, audio, self.debugger, quirks=quirks, rng=rng
        )
        self.reset()

    def reset(self):
        # Re-zero everything and write the system font back into RAM
        self.ram.clear()
        self.ram.write_block(FONT_LOC, SYSTEM_FONT)
        self.stack.clear()
        self.keypad.clear()
        self.framebuffer.clear()
        self.cpu.reset()
        self.audio.enable_buzzer(False)

    def load_rom(self, rom):
        self.reset()
        self.ram.load_rom(rom)

    def set_key(self, key, pressed):
        self.keypad.set_key(key, pressed)

    @property
    def quirks(self):
        return self.cpu.quirks

    def snapshot(self):
        return self.cpu.snapshot()

    def frame(self):
        return self.framebuffer.snapshot()
