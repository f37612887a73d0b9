#!/usr/bin/env python3

"""
CPU Emulator (CHIP-8)

Like a real computer, this is where most of the processing happens.  Each
cycle fetches a two-byte big-endian opcode at the program counter, moves the
program counter on to the next instruction, then decodes and executes the
opcode.

Decoding is a dictionary lookup on the opcode's first nibble.  Families that
share a first nibble are looked up a second time with a mask that keeps only
the nibbles identifying the instruction.  Anything left unmatched halts
emulation with an InvalidOpcode error.

Timers are not driven from here.  The controller calls tick_timers() at 60Hz
against a monotonic clock, independently of how fast instructions run.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

from random import Random
from .constants import APP_INTRO, ADDR_MASK, FONT_LOC, FONT_GLYPH_SIZE, PROGRAM_LOC, TIMER_FREQ
from .debugger import Snapshot
from .quirks import Quirks


class CPUError(Exception):
    pass


class InvalidOpcode(CPUError):
    def __init__(self, message, opcode=None, address=None):
        super().__init__(message)
        self.opcode = opcode
        self.address = address


class CPU:
    def __init__(self, ram, stack, framebuffer, keypad, audio, debugger, quirks=None, rng=None):
        self.ram = ram
        self.stack = stack
        self.framebuffer = framebuffer
        self.keypad = keypad
        self.audio = audio
        self.debugger = debugger
        self.live_debug = self.debugger.is_live()
        self.quirks = Quirks() if quirks is None else quirks
        self.rng = Random() if rng is None else rng

        # Jump tables, keyed by the masked opcode.
        # n = Nibble
        # kk = Byte
        # nnn = address
        # x/y = register (0-15)
        self.instructions = {
            # Initial lookup for instructions' first nibble
            0x0: self._0nnn,  # Alias for bitmask 0xFFFF
            0x1: self._1nnn,
            0x2: self._2nnn,
            0x3: self._3xkk,
            0x4: self._4xkk,
            0x5: self._5nnn_8nnn_9nnn,  # Alias for bitmask 0xF00F
            0x6: self._6xkk,
            0x7: self._7xkk,
            0x8: self._5nnn_8nnn_9nnn,  # Alias for bitmask 0xF00F
            0x9: self._5nnn_8nnn_9nnn,  # Alias for bitmask 0xF00F
            0xA: self._Annn,
            0xB: self._Bnnn,
            0xC: self._Cxkk,
            0xD: self._Dxyn,
            0xE: self._Ennn_Fnnn,  # Alias for bitmask 0xF0FF
            0xF: self._Ennn_Fnnn,  # Alias for bitmask 0xF0FF
            # Instructions beginning with nibble 0x0, bitmask 0xFFFF (i.e., exact match)
            0x00E0: self._00E0,
            0x00EE: self._00EE,
            # Instructions beginning with nibble 0x5/0x8/0x9, bitmask 0xF00F
            0x5000: self._5xy0,
            0x8000: self._8xy0,
            0x8001: self._8xy1,
            0x8002: self._8xy2,
            0x8003: self._8xy3,
            0x8004: self._8xy4,
            0x8005: self._8xy5,
            0x8006: self._8xy6,
            0x8007: self._8xy7,
            0x800E: self._8xyE,
            0x9000: self._9xy0,
            # Instructions beginning with nibble 0xE/0xF, bitmask 0xF0FF
            0xE09E: self._Ex9E,
            0xE0A1: self._ExA1,
            0xF007: self._Fx07,
            0xF00A: self._Fx0A,
            0xF015: self._Fx15,
            0xF018: self._Fx18,
            0xF01E: self._Fx1E,
            0xF029: self._Fx29,
            0xF033: self._Fx33,
            0xF055: self._Fx55,
            0xF065: self._Fx65
        }

        self.reset()

    def reset(self):
        # Initialise registers
        self.v = memoryview(bytearray(16))  # Bytearrays are mutable, so this should be fast when a register is updated
        self.i = 0  # Index register

        # Initialise timers
        self.dt = 0  # Delay timer
        self.st = 0  # Sound timer

        # Initialise program counter and current opcode
        self.pc = PROGRAM_LOC
        self.debug_pc = PROGRAM_LOC
        self.opcode = 0
        self.cycles = 0

        # Input-related vars
        self.awaiting_keypress = False

    def cycle(self):
        # Keep track of the program counter before altering it in any way for debugging purposes
        self.debug_pc = self.pc  # Do this all the time in case there is a crash
        self.opcode = self.fetch()
        self.inc_pc()  # Program counter updates after fetch, but before execute
        self.decode_exec()
        self.cycles += 1

    def fetch(self):
        pc = self.pc
        return (self.ram.read(pc) << 8) | self.ram.read((pc + 1) & ADDR_MASK)

    def _call_masked_instruction(self, masked_opcode):
        instruction = self.instructions.get(masked_opcode)

        if instruction is None:
            self._opcode_unsupported()

        instruction()

    def decode_exec(self):
        self._call_masked_instruction((0xF000 & self.opcode) >> 12)

    def tick_timers(self):
        # Called at 60Hz.  Returns True if the sound timer ran out on this tick.
        if self.dt > 0:
            self.dt -= 1

        if self.st > 0:
            self.st -= 1

            if self.st == 0:
                # Audio timer just reached zero.  Stop the audio.
                self.audio.enable_buzzer(False)
                return True

        return False

    def inc_pc(self):
        self.pc = (self.pc + 2) & ADDR_MASK

    def dec_pc(self):
        # Only used to re-run instructions (e.g. keypress wait).
        self.pc = (self.pc - 2) & ADDR_MASK

    def snapshot(self):
        return Snapshot(
            v=bytes(self.v), i=self.i, pc=self.pc, sp=self.stack.sp, stack=self.stack.get_items(),
            dt=self.dt, st=self.st, opcode=self.opcode
        )

    # Operand fields sit in the same place in every opcode.  These decode on every access, so handlers that use one
    # repeatedly should keep a local copy.
    @property
    def vx(self):
        return (self.opcode & 0xF00) >> 8

    @property
    def vy(self):
        return (self.opcode & 0xF0) >> 4

    @property
    def addr(self):
        return self.opcode & 0xFFF

    @property
    def byte(self):
        return self.opcode & 0xFF

    @property
    def nibble(self):
        return self.opcode & 0xF

    def _opcode_unsupported(self):
        raise InvalidOpcode(
            (
                "Emulation halted.\n\n" +
                "{}Debug info:\n" +
                "{}\n\nOpcode 0x{:04x} at address 0x{:03x} is not a valid instruction."
            ).format(
                APP_INTRO, self.debugger.debug(self.snapshot(), self.debug_pc, "???", verbose=True), self.opcode,
                self.debug_pc
            ),
            opcode=self.opcode,
            address=self.debug_pc
        ) from None

    def debug(self, instruction):
        self.debugger.output(self.snapshot(), self.debug_pc, instruction)

    def _0nnn(self):
        opcode = self.opcode

        if opcode < 0x10:
            # Opcodes 0x0 - 0xF are used internally for indexing, so must never match an instruction
            self._opcode_unsupported()

        self._call_masked_instruction(opcode)

    def _5nnn_8nnn_9nnn(self):
        self._call_masked_instruction(self.opcode & 0xF00F)

    def _Ennn_Fnnn(self):
        self._call_masked_instruction(self.opcode & 0xF0FF)

    def _00E0(self):  # CLS
        if self.live_debug:
            self.debug("CLS")

        self.framebuffer.clear()

    def _00EE(self):  # RET
        if self.live_debug:
            self.debug("RET")

        self.pc = self.stack.pop()

    def _1nnn(self):  # JP addr
        if self.live_debug:
            self.debug("JP 0x{:03x}".format(self.addr))

        self.pc = self.addr

    def _2nnn(self):  # CALL addr
        if self.live_debug:
            self.debug("CALL 0x{:03x}".format(self.addr))

        # The return address is the instruction after the call, as PC has already moved on
        self.stack.push(self.pc)
        self.pc = self.addr

    def _3xkk(self):  # SE Vx, byte
        if self.live_debug:
            self.debug("SE V{:01x}, 0x{:02x}".format(self.vx, self.byte))

        if self.v[self.vx] == self.byte:
            self.inc_pc()

    def _4xkk(self):  # SNE Vx, byte
        if self.live_debug:
            self.debug("SNE V{:01x}, 0x{:02x}".format(self.vx, self.byte))

        if self.v[self.vx] != self.byte:
            self.inc_pc()

    def _5xy0(self):  # SE Vx, Vy
        if self.live_debug:
            self.debug("SE V{:01x}, V{:01x}".format(self.vx, self.vy))

        if self.v[self.vx] == self.v[self.vy]:
            self.inc_pc()

    def _6xkk(self):  # LD Vx, byte
        if self.live_debug:
            self.debug("LD V{:01x}, 0x{:02x}".format(self.vx, self.byte))

        self.v[self.vx] = self.byte

    def _7xkk(self):  # ADD Vx, byte
        vx = self.vx
        byte = self.byte

        if self.live_debug:
            self.debug("ADD V{:01x}, 0x{:02x}".format(vx, byte))

        # No carry flag for this one
        byte += self.v[vx]
        self.v[vx] = byte & 0xFF

    def _post_8xy1_8xy2_8xy3(self):
        if self.quirks.logic:
            self.v[0xF] = 0

    def _8xy0(self):  # LD Vx, Vy
        if self.live_debug:
            self.debug("LD V{:01x}, V{:01x}".format(self.vx, self.vy))

        self.v[self.vx] = self.v[self.vy]

    def _8xy1(self):  # OR Vx, Vy
        if self.live_debug:
            self.debug("OR V{:01x}, V{:01x}".format(self.vx, self.vy))

        self.v[self.vx] |= self.v[self.vy]
        self._post_8xy1_8xy2_8xy3()

    def _8xy2(self):  # AND Vx, Vy
        if self.live_debug:
            self.debug("AND V{:01x}, V{:01x}".format(self.vx, self.vy))

        self.v[self.vx] &= self.v[self.vy]
        self._post_8xy1_8xy2_8xy3()

    def _8xy3(self):  # XOR Vx, Vy
        if self.live_debug:
            self.debug("XOR V{:01x}, V{:01x}".format(self.vx, self.vy))

        self.v[self.vx] ^= self.v[self.vy]
        self._post_8xy1_8xy2_8xy3()

    def _8xy4(self):  # ADD Vx, Vy
        vx = self.vx
        vy = self.vy

        if self.live_debug:
            self.debug("ADD V{:01x}, V{:01x}".format(vx, vy))

        val = self.v[vx] + self.v[vy]
        self.v[vx] = val & 0xFF
        self.v[0xF] = int(val > 0xFF)  # Vf is set when carrying, and written last so the flag survives x == F

    def _post_8xy5_8xy7(self, minuend, subtrahend):  # Post-SUB/SUBN
        # Vf is set when NOT borrowing.  Compare before Vx changes, but write Vf last, as sometimes Vf is specified in
        # the parameters.
        not_borrow = int(minuend >= subtrahend)
        self.v[self.vx] = (minuend - subtrahend) & 0xFF
        self.v[0xF] = not_borrow

    def _8xy5(self):  # SUB Vx, Vy
        if self.live_debug:
            self.debug("SUB V{:01x}, V{:01x}".format(self.vx, self.vy))

        self._post_8xy5_8xy7(self.v[self.vx], self.v[self.vy])

    def _debug_8xy6_8xyE(self, direction):
        self.debug(
            "{} V{:01x}".format(direction, self.vx) if self.quirks.shift else
            "{} V{:01x}, V{:01x}".format(direction, self.vx, self.vy)
        )

    def _8xy6(self):  # SHR Vx {, Vy}
        # With shift quirks, Vx is shifted in place.  Otherwise Vy is shifted into Vx.
        if self.live_debug:
            self._debug_8xy6_8xyE("SHR")

        val = self.v[self.vx if self.quirks.shift else self.vy]
        self.v[self.vx] = val >> 1
        self.v[0xF] = val & 1  # The whole byte gets set just for the flag

    def _8xy7(self):  # SUBN Vx, Vy
        if self.live_debug:
            self.debug("SUBN V{:01x}, V{:01x}".format(self.vx, self.vy))

        self._post_8xy5_8xy7(self.v[self.vy], self.v[self.vx])

    def _8xyE(self):  # SHL Vx {, Vy}
        # With shift quirks, Vx is shifted in place.  Otherwise Vy is shifted into Vx.
        if self.live_debug:
            self._debug_8xy6_8xyE("SHL")

        val = self.v[self.vx if self.quirks.shift else self.vy]
        self.v[self.vx] = (val << 1) & 0xFF
        self.v[0xF] = val >> 7

    def _9xy0(self):  # SNE Vx, Vy
        if self.live_debug:
            self.debug("SNE V{:01x}, V{:01x}".format(self.vx, self.vy))

        if self.v[self.vx] != self.v[self.vy]:
            self.inc_pc()

    def _Annn(self):  # LD I, addr
        if self.live_debug:
            self.debug("LD I, 0x{:03x}".format(self.addr))

        self.i = self.addr

    def _Bnnn(self):  # JP V0, addr
        # This quirk breaks lots of games if set incorrectly.  It varies depending on the interpreter the ROM was
        # written for.
        vr = self.vx if self.quirks.jump else 0

        if self.live_debug:
            self.debug("JP V{:01x}, 0x{:03x}".format(vr, self.addr))

        self.pc = (self.v[vr] + self.addr) & ADDR_MASK

    def _Cxkk(self):  # RND Vx, byte
        if self.live_debug:
            self.debug("RND V{:01x}, 0x{:02x}".format(self.vx, self.byte))

        # Masked, not ranged: bits clear in kk are always clear in the result
        self.v[self.vx] = self.rng.randint(0, 0xFF) & self.byte

    def _Dxyn(self):  # DRW Vx, Vy, nibble
        height = self.nibble

        if self.live_debug:
            self.debug("DRW V{:01x}, V{:01x}, 0x{:01x}".format(self.vx, self.vy, height))

        # The sprite's start wraps, and so does every pixel of it, on each axis separately
        vid_width, vid_height = self.framebuffer.get_vid_size()
        vx_pos = self.v[self.vx] % vid_width
        vy_pos = self.v[self.vy] % vid_height
        collided = False
        i = self.i

        for y in range(height):
            spr_data = self.ram.read((i + y) & ADDR_MASK)
            scr_y = y + vy_pos

            for x in range(8):
                if spr_data & (0x80 >> x):
                    if self.framebuffer.xor_pixel(x + vx_pos, scr_y):
                        # Don't stop drawing.  Set the flag, and never unset it for this sprite.
                        collided = True

        self.v[0xF] = int(collided)

    def _Ex9E(self):  # SKP Vx
        if self.live_debug:
            self.debug("SKP V{:01x}".format(self.vx))

        if self.keypad.is_key_down(self.v[self.vx] & 0xF):
            self.inc_pc()

    def _ExA1(self):  # SKNP Vx
        if self.live_debug:
            self.debug("SKNP V{:01x}".format(self.vx))

        if not self.keypad.is_key_down(self.v[self.vx] & 0xF):
            self.inc_pc()

    def _Fx07(self):  # LD Vx, DT
        if self.live_debug:
            self.debug("LD V{:01x}, DT".format(self.vx))

        self.v[self.vx] = self.dt

    def _Fx0A(self):  # LD Vx, K
        if self.live_debug:
            self.debug("LD V{:01x}, K".format(self.vx))

        # No key yet: rewind PC so this instruction runs again on the next cycle.  The controller keeps the timers and
        # display going in the meantime.
        key = self.keypad.get_keypress()

        if key is None:
            # We need to come back here on the next instruction, because no key is pressed.
            self.awaiting_keypress = True
            self.dec_pc()
        else:
            self.v[self.vx] = key
            self.awaiting_keypress = False

    def _Fx15(self):  # LD DT, Vx
        if self.live_debug:
            self.debug("LD DT, V{:01x}".format(self.vx))

        self.dt = self.v[self.vx]

    def _Fx18(self):  # LD ST, Vx
        if self.live_debug:
            self.debug("LD ST, V{:01x}".format(self.vx))

        st = self.v[self.vx]

        # Allow the program to start the buzzer, or immediately stop it before the sound timer hits zero
        if st > 0 and self.st == 0:
            self.audio.beep(st / TIMER_FREQ)

        self.audio.enable_buzzer(st > 0)
        self.st = st

    def _Fx1E(self):  # ADD I, Vx
        if self.live_debug:
            self.debug("ADD I, V{:01x}".format(self.vx))

        # Vf is not affected
        self.i = (self.i + self.v[self.vx]) & ADDR_MASK

    def _Fx29(self):  # LD F, Vx
        if self.live_debug:
            self.debug("LD F, V{:01x}".format(self.vx))

        self.i = (FONT_LOC + FONT_GLYPH_SIZE * (self.v[self.vx] & 0xF)) & ADDR_MASK

    def _Fx33(self):  # LD B, Vx
        if self.live_debug:
            self.debug("LD B, V{:01x}".format(self.vx))

        val = self.v[self.vx]
        i = self.i
        self.ram.write(i, val // 100)                           # Most-significant digit
        self.ram.write((i + 1) & ADDR_MASK, (val // 10) % 10)  # Middle digit
        self.ram.write((i + 2) & ADDR_MASK, val % 10)          # Least-significant digit

    def _post_Fx55_Fx65(self):
        if self.quirks.load:
            self.i = (self.i + self.vx + 1) & ADDR_MASK

    def _Fx55(self):  # LD [I], Vx
        if self.live_debug:
            self.debug("LD [I], V{:01x}".format(self.vx))

        i = self.i

        for reg in range(self.vx + 1):
            self.ram.write((i + reg) & ADDR_MASK, self.v[reg])

        self._post_Fx55_Fx65()

    def _Fx65(self):  # LD Vx, [I]
        if self.live_debug:
            self.debug("LD V{:01x}, [I]".format(self.vx))

        i = self.i

        for reg in range(self.vx + 1):
            self.v[reg] = self.ram.read((i + reg) & ADDR_MASK)

        self._post_Fx55_Fx65()
