#!/usr/bin/env python3

"""
Terminal Bell Audio Plugin

Allows beeps to be played in the Terminal window (no sampled sound)!

Beeps cannot be stopped, or made longer, since they are effectively just a
CTRL+G (character 7 - BEL).  One is rung each time the sound timer starts.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

import sys
from .a_null import Audio as AudioBase


class Audio(AudioBase):
    def __init__(self, stream=None):
        self.stream = sys.stdout if stream is None else stream
        super().__init__()

    def beep(self, duration):
        self.stream.write("\a")
        self.stream.flush()
