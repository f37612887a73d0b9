#!/usr/bin/env python3

"""
Main Startup Module

Simply call main(args) to start the interpreter, replacing args with a
dictionary of options.  This can be done via the Terminal or GUI.

All options must be supplied.  Defaults can be specified with a 'None'.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

from random import Random
from .constants import APP_INTRO, APP_COPYRIGHT, CPU_QUIRKS, DEFAULT_ARCH
from .controller import Controller
from .debugger import Debugger
from .hostio import Loader
from .machine import Machine
from .quirks import quirks_for_arch


class StartupError(Exception):
    pass


def main(args):
    print("".join((APP_INTRO, APP_COPYRIGHT)))
    quirk_settings = {}

    for cpu_quirk in CPU_QUIRKS:
        quirk_setting = args["{}_quirks".format(cpu_quirk)]
        quirk_settings[cpu_quirk] = None if quirk_setting is None else bool(quirk_setting)

    quirks = quirks_for_arch(args["arch"] or DEFAULT_ARCH, **quirk_settings)
    opt_renderer = args["renderer"] or "null"

    # pylint: disable=import-outside-toplevel
    if opt_renderer == "text":
        from .renderers.r_text import Renderer
    elif opt_renderer == "null":
        from .renderers.r_null import Renderer
    else:
        raise StartupError("Unknown renderer '{}'".format(opt_renderer))

    # Terminals can handle fixed-length beeps, but not sampled sound
    if args["mute"] or args["mute"] is None:
        from .audio.a_null import Audio
    else:
        from .audio.a_bell import Audio

    loader = Loader()

    try:
        rom = loader.load_binary(args["filename"])
        trace_lines = None if args["trace"] is None else loader.load_text_lines(args["trace"])
    except OSError as e:
        raise StartupError("Unable to read '{}': {}".format(e.filename, e.strerror)) from None

    if trace_lines is None:
        from .inputs.i_null import Inputs
        inputs = Inputs()
    else:
        from .inputs.i_trace import Inputs
        inputs = Inputs(trace_lines)

    renderer = Renderer(scale=args["scale"])
    audio = Audio()

    # Set up debugger and live output if necessary
    debugger = Debugger()
    debugger.set_live(args["debug"])

    # Create a new machine, write the ROM into RAM, and hand it to the controller
    rng = None if args["seed"] is None else Random(args["seed"])
    machine = Machine(renderer, audio, quirks=quirks, debugger=debugger, rng=rng)
    machine.load_rom(rom)
    controller = Controller(
        machine, inputs, clock_speed=args["clock_speed"], idle_limit=args["idle_limit"] or 0,
        max_cycles=args["max_cycles"] or 0
    )

    try:
        controller.run()
    finally:
        # The CPU has stopped, so shut down the host plugins.  __del__ cannot be relied upon when using PyPy
        audio.shutdown()
        inputs.shutdown()
        renderer.shutdown()

    return controller
