#!/usr/bin/env python3

"""
Host I/O Functionality

Handles loading ROM binaries and input traces from the host file system, for
later writing into RAM or replaying into the keypad.  Snapshots (save states)
are deliberately not handled.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"


class Loader:
    def load_binary(self, filename):
        with open(filename, "rb") as f:
            return f.read()

    def load_text_lines(self, filename):
        with open(filename, "r", encoding="utf-8") as f:
            return f.read().splitlines()
