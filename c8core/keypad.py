#!/usr/bin/env python3

"""
Keypad State

Holds the pressed state of the 16 hex keys.  Input plugins write to it from
outside the CPU, and the CPU reads it for the skip-on-key and wait-for-key
instructions.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

from .constants import NUM_KEYS


class KeypadError(Exception):
    pass


class Keypad:
    def __init__(self):
        self.key_down = [False] * NUM_KEYS

    def set_key(self, key, pressed):
        if not 0 <= key < NUM_KEYS:
            raise KeypadError("Key {} is out of range -- keys 0x0 to 0xF are available".format(key))

        self.key_down[key] = bool(pressed)

    def is_key_down(self, key):
        return self.key_down[key]

    def get_keypress(self):
        # Lowest numbered key held, or None
        for key, down in enumerate(self.key_down):
            if down:
                return key

        return None

    def clear(self):
        self.key_down = [False] * NUM_KEYS

    def get_state(self):
        return tuple(self.key_down)
