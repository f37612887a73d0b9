#!/usr/bin/env python3

__author__ = "Gregory Maynard-Hoare"
__copyright__ = "Copyright (C) 2024 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"
__version__ = "1.0.0"

import sys
from argparse import ArgumentParser
from c8core import main, StartupError
from c8core.constants import CPU_QUIRKS, DEFAULT_ARCH, QUIRK_PRESETS
from c8core.cpu import CPUError
from c8core.inputs.i_null import InputsError
from c8core.quirks import QuirksError
from c8core.ram import RAMError
from c8core.stack import StackError


def parse_args(argv=None):
    parser = ArgumentParser()
    parser.add_argument("filename", help="ROM to execute (normally ending in .ch8 or .c8)")
    parser.add_argument(
        "-a", "--arch", choices=list(QUIRK_PRESETS.keys()), default=DEFAULT_ARCH,
        help=" ".join((
            "set CPU quirks automatically for the original COSMAC VIP CHIP-8, Super-CHIP, XO-CHIP, modern",
            "interpreters, or the original revision of this interpreter"
        ))
    )
    parser.add_argument(
        "-c", "--clock_speed", type=int,
        help="override the CPU speed in operations/second (default 1000, 0 = force uncapped)"
    )
    parser.add_argument(
        "-r", "--renderer", choices=["text", "null"], default="null",
        help="set the rendering system.  'text' prints the final frame on exit"
    )
    parser.add_argument(
        "-s", "--scale", type=int,
        help="set the horizontal stretch of each pixel in the text renderer (default 1)"
    )
    parser.add_argument(
        "-m", "--mute", type=int, choices=[0, 1],
        help="mute the emulated audio.  0 = ring the terminal bell, 1 = muted (default)"
    )
    parser.add_argument(
        "-t", "--trace",
        help="replay key presses from a trace file ('<frame> <key> down|up' or '<frame> quit' per line)"
    )

    for cpu_quirk in CPU_QUIRKS:
        parser.add_argument(
            "--{}_quirks".format(cpu_quirk), type=int, choices=[0, 1],
            help="manually disable or enable {} quirks".format(cpu_quirk)
        )

    parser.add_argument(
        "--idle_limit", type=int, default=0,
        help="halt after this many consecutive instructions jump to themselves (default 0 = never)"
    )
    parser.add_argument(
        "--max_cycles", type=int, default=0,
        help="halt after executing this many instructions (default 0 = never)"
    )
    parser.add_argument("--seed", type=int, help="seed the random number generator for repeatable runs")
    parser.add_argument(
        "-d", "--debug", action="store_true", default=False,
        help="enable live debug output for every instruction.  Slows CPU execution"
    )
    return parser.parse_args(argv)  # Can call sys.exit(2) if args are incorrect


def cli(argv=None):
    args = vars(parse_args(argv))

    # It is possible to start the interpreter from a GUI by calling main() with a dictionary instead
    try:
        main(args)
    except (StartupError, RAMError, StackError, CPUError, InputsError, QuirksError) as e:
        print(e, file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(cli())
