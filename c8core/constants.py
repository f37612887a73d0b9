#!/usr/bin/env python3

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

# App identification
APP_NAME = "Chip8Core Interpreter"
APP_VERSION = "1.0.0"
APP_COPYRIGHT = "Copyright (C) 2022 Gregory Maynard-Hoare, licensed under GNU Affero General Public License v3.0"
APP_INTRO = "{} V{} -- ".format(APP_NAME, APP_VERSION)

# Memory map
MEM_SIZE = 0x1000
ADDR_MASK = 0xFFF      # Every address computed by an instruction is wrapped with this
FONT_LOC = 0x50
PROGRAM_LOC = 0x200
MAX_ROM_SIZE = MEM_SIZE - PROGRAM_LOC
STACK_SIZE = 16
NUM_KEYS = 0x10

# Display
VID_WIDTH = 64
VID_HEIGHT = 32

# Timing
TIMER_FREQ = 60.0    # 60Hz delay/sound timer decay
TIMER_INTERVAL = 1.0 / TIMER_FREQ
DISPLAY_FREQ = 60.0  # 60Hz display refresh and input polling
DISPLAY_INTERVAL = 1.0 / DISPLAY_FREQ
MAX_TIMER_CATCHUP = 6  # Ticks run back-to-back when the host lags, before the timer schedule resyncs
DEFAULT_CLOCK_SPEED = 1000  # Instructions per second when no clock speed is given

# Execution states
STATE_STOPPED = "stopped"
STATE_RUNNING = "running"
STATE_PAUSED = "paused"
STATE_STEPPING = "stepping"

# Built-in 4x5 hex digit glyphs (0-F), 5 bytes each
SYSTEM_FONT = bytes((
    0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
    0x20, 0x60, 0x20, 0x20, 0x70,  # 1
    0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
    0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
    0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
    0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
    0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
    0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
    0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
    0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
    0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
    0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
    0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
    0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
    0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
    0xF0, 0x80, 0xF0, 0x80, 0x80   # F
))
FONT_GLYPH_SIZE = 5

# Quirk presets.  Each entry lists the quirks switched on for that interpreter family.
CPU_QUIRKS = ["shift", "jump", "logic", "load"]

QUIRK_PRESETS = {
    "chip8":    ("logic", "load"),   # Original COSMAC VIP interpreter
    "schip":    ("shift", "jump"),   # Super-CHIP 1.1 on the HP48
    "xochip":   ("load",),           # Octo / XO-CHIP
    "modern":   (),                  # Behaviour most test ROMs assume by default
    "original": ("shift", "logic")   # Earlier revision of this interpreter
}
DEFAULT_ARCH = "modern"
