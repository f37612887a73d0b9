#!/usr/bin/env python3

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

import unittest
from c8core.audio.a_null import Audio
from c8core.constants import SYSTEM_FONT
from c8core.keypad import KeypadError
from c8core.machine import Machine
from c8core.quirks import Quirks
from c8core.ram import RomTooLarge
from c8core.renderers.r_null import Renderer


class TestMachine(unittest.TestCase):
    def setUp(self):
        self.machine = Machine(Renderer(), Audio())

    def test_machine_font_installed(self):
        self.assertEqual(80, len(SYSTEM_FONT))
        self.assertEqual(SYSTEM_FONT, self.machine.ram.read_block(0x50, 80))
        self.assertEqual(0, self.machine.ram.read(0x4F))
        self.assertEqual(0, self.machine.ram.read(0xA0))

    def test_machine_default_quirks(self):
        self.assertEqual(Quirks(), self.machine.quirks)
        machine = Machine(Renderer(), Audio(), quirks=Quirks(jump=True))
        self.assertTrue(machine.quirks.jump)

    def test_machine_load_rom(self):
        self.machine.load_rom(b"\x12\x00")
        self.assertEqual(b"\x12\x00", self.machine.ram.read_block(0x200, 2))
        self.assertEqual(0x200, self.machine.snapshot().pc)

    def test_machine_load_rom_resets(self):
        machine = self.machine
        machine.load_rom(b"\x60\x05\x22\x00")
        machine.cpu.cycle()
        machine.cpu.cycle()
        machine.framebuffer.xor_pixel(3, 3)
        machine.set_key(0x4, True)
        machine.ram.write(0x100, 0xAA)

        machine.load_rom(b"\x00\xE0")
        snapshot = machine.snapshot()
        self.assertEqual(bytes(16), snapshot.v)
        self.assertEqual((0x200, 0, ()), (snapshot.pc, snapshot.sp, snapshot.stack))
        self.assertEqual(0, machine.frame()[3][3])
        self.assertFalse(machine.keypad.is_key_down(0x4))
        self.assertEqual(0, machine.ram.read(0x100))
        self.assertEqual(0, machine.ram.read(0x202))  # Old program gone
        self.assertEqual(SYSTEM_FONT, machine.ram.read_block(0x50, 80))

    def test_machine_rom_too_large(self):
        self.assertRaises(RomTooLarge, self.machine.load_rom, bytes(0xE01))
        self.machine.load_rom(bytes(0xE00))

    def test_machine_set_key(self):
        self.machine.set_key(0xB, True)
        self.assertTrue(self.machine.keypad.is_key_down(0xB))
        self.assertRaises(KeypadError, self.machine.set_key, 16, True)

    def test_machine_frame(self):
        frame = self.machine.frame()
        self.assertEqual(32, len(frame))
        self.assertTrue(all(len(row) == 64 for row in frame))
        self.assertTrue(all(pixel == 0 for row in frame for pixel in row))
