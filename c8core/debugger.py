#!/usr/bin/env python3

"""
CPU Debugger

If enabled, this will output information before each instruction executed:
    * All 16 of the [V] registers, starting with most significant (Vf) and
      reducing to least significant (V0)
    * I  - Index register
    * DT - Delay timer
    * ST - Sound timer
    * PC - Program counter
    * OP - OpCode number
    * IN - Decoded instruction

If a crash occurs, all of the above will be outputted, with the addition of:
    * SP    - Stack pointer
    * Stack - Stack contents

Everything here works from a Snapshot, which is a read-only copy of the CPU
state.  Tooling can hold on to snapshots without ever seeing the CPU change
underneath it.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

from collections import namedtuple

Snapshot = namedtuple("Snapshot", ["v", "i", "pc", "sp", "stack", "dt", "st", "opcode"])


class Debugger:
    def __init__(self):
        self.live = False

    def debug(self, snapshot, pc, instruction, verbose=False):
        debug_str = (
            "V: 0x" + ("{:02x}" * 16) + " I: 0x{:03x} DT: 0x{:02x} ST: 0x{:02x} PC: 0x{:03x} OP: 0x{:04x} IN: {}"
        ).format(
            *[snapshot.v[reg_num] for reg_num in range(15, -1, -1)] +
            [snapshot.i, snapshot.dt, snapshot.st, pc, snapshot.opcode, instruction]
        )

        if verbose:
            stack_items = snapshot.stack
            stack_str = (" 0x{:03x}" * len(stack_items)).format(*stack_items)
            debug_str += ("\nSP: {} Stack:{}").format(snapshot.sp, stack_str or " (Empty)")

        return debug_str

    def set_live(self, enabled):
        self.live = enabled

    def is_live(self):
        return self.live

    def output(self, snapshot, pc, instruction):
        print(self.debug(snapshot, pc, instruction))
