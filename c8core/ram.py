#!/usr/bin/env python3

"""
RAM Emulator

Supports reading and writing of blocks of memory or individual bytes, zeroing
of memory blocks, and loading ROM images into the program area.

Every access is bounds-checked.  The CPU wraps the addresses it computes into
the 12-bit address space before touching RAM, so a RAMError here means
something other than a running program has gone wrong.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

from .constants import PROGRAM_LOC


class RAMError(Exception):
    pass


class RomTooLarge(RAMError):
    pass


class RAM:
    def __init__(self):
        self.resize(0)

    def resize(self, mem_size):
        self.mem = memoryview(bytearray(b"\x00" * mem_size))
        self.mem_top = mem_size - 1
        self.mem_size = mem_size

    def read(self, location):
        self.check_overflow(location)
        return self.mem[location]

    def read_block(self, location, size=1):
        self.check_overflow(location + size - 1)
        return bytes(self.mem[location:location + size])

    def write(self, location, byte):
        self.check_overflow(location)
        self.mem[location] = byte

    def write_block(self, location, block):
        block_size = len(block)
        block_top = location + block_size
        self.check_overflow(block_top - 1)
        self.mem[location:block_top] = block

    def check_overflow(self, location):
        if location < 0 or location > self.mem_top:
            raise RAMError("Memory access out of range at 0x{:04x}".format(location))

    def zero_block(self, offset, size):
        block_top = offset + size
        self.check_overflow(block_top - 1)
        self.mem[offset:block_top] = bytes(size)

    def clear(self):
        self.zero_block(0, self.mem_size)

    def load_rom(self, rom, location=PROGRAM_LOC):
        # The program area runs from the load address to the top of RAM
        capacity = self.mem_size - location

        if len(rom) > capacity:
            raise RomTooLarge(
                "ROM is {} bytes, but only {} bytes are available from 0x{:03x}".format(len(rom), capacity, location)
            )

        if rom:
            self.write_block(location, rom)
