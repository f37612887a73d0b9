#!/usr/bin/env python3

"""
CPU Quirk Configuration

Historical CHIP-8 interpreters disagree on a handful of instructions, and ROMs
were written against whichever one their authors had.  The active behaviour is
chosen once per run and handed to the CPU as an immutable value.

    - Shift quirks : 8xy6/8xyE shift Vx in place, ignoring Vy.
    - Jump quirks  : Bnnn jumps to nnn + Vx (x being the top nibble of nnn)
                     rather than nnn + V0.
    - Logic quirks : 8xy1/8xy2/8xy3 reset Vf to 0.
    - Load quirks  : Fx55/Fx65 leave I pointing past the last register
                     transferred (I += x + 1).
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

from collections import namedtuple
from .constants import CPU_QUIRKS, QUIRK_PRESETS

Quirks = namedtuple("Quirks", CPU_QUIRKS, defaults=(False,) * len(CPU_QUIRKS))


class QuirksError(Exception):
    pass


def quirks_for_arch(arch, **overrides):
    # Start from a named preset, then apply any individual overrides.  None means 'keep the preset'.
    try:
        enabled = QUIRK_PRESETS[arch]
    except KeyError:
        raise QuirksError(
            "Unknown architecture '{}'.  Choose from: {}".format(arch, ", ".join(QUIRK_PRESETS))
        ) from None

    settings = {quirk: (quirk in enabled) for quirk in CPU_QUIRKS}

    for quirk, setting in overrides.items():
        if quirk not in settings:
            raise QuirksError("Unknown quirk '{}'".format(quirk))

        if setting is not None:
            settings[quirk] = bool(setting)

    return Quirks(**settings)
