#!/usr/bin/env python3

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

import io
import unittest
from threading import Thread
from c8core.audio.a_null import Audio
from c8core.constants import STATE_PAUSED, STATE_RUNNING, STATE_STOPPED
from c8core.controller import Controller, ControllerError
from c8core.cpu import InvalidOpcode
from c8core.inputs.i_null import Inputs
from c8core.machine import Machine
from c8core.quirks import Quirks
from c8core.renderers.r_null import Renderer
from c8core.renderers.r_text import Renderer as TextRenderer
from c8core.stack import StackOverflow


class FakeClock:
    # Stands in for both the monotonic clock and the condition wait, so no real time passes
    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now

    def wait(self, timeout=None):
        if timeout:
            self.now += timeout

        return False


class ScriptedInputs(Inputs):
    # Runs a callable on given display frames.  A callable returning True quits.
    def __init__(self, script):
        self.script = script
        self.frames_seen = []

    def process_messages(self, machine, frame_number):
        self.frames_seen.append(frame_number)
        action = self.script.get(frame_number)
        return bool(action and action())


class RecordingAudio(Audio):
    def __init__(self):
        self.events = []
        super().__init__()

    def beep(self, duration):
        self.events.append(("beep", duration))

    def enable_buzzer(self, enabled):
        self.events.append(("buzzer", enabled))
        super().enable_buzzer(enabled)


class TestController(unittest.TestCase):
    def setUp(self):
        self.clock = FakeClock()
        self.audio = RecordingAudio()
        self.machine = Machine(Renderer(), self.audio)
        self.records = {}

    def _controller(self, rom, script=None, **kwargs):
        self.machine.load_rom(bytes.fromhex(rom))
        self.audio.events = []
        self.inputs = ScriptedInputs(script or {})
        return Controller(self.machine, self.inputs, clock=self.clock, wait=self.clock.wait, **kwargs)

    def _record(self, name, controller, result=False):
        def action():
            self.records[name] = controller.snapshot()
            return result

        return action

    def test_controller_max_cycles(self):
        controller = self._controller("7001" "1200", clock_speed=0, max_cycles=11)
        self.assertEqual(11, controller.run())
        self.assertEqual(STATE_STOPPED, controller.get_state())
        self.assertEqual(6, self.machine.snapshot().v[0])  # State kept after an automatic halt

    def test_controller_clock_speed(self):
        controller = self._controller("7001" "1200", clock_speed=500, max_cycles=1000)
        controller.run()
        # 1000 instructions at 500 per second takes just under two seconds
        self.assertAlmostEqual(1.998, self.clock.now - 100.0, places=2)

    def test_controller_timer_decay(self):
        # DT = 10, then loop forever
        controller = self._controller("6A0A" "FA15" "1204", clock_speed=600, max_cycles=60)
        controller.run()
        # The last instruction ran just short of 0.1 seconds in, after 5 timer ticks
        self.assertEqual(5, self.machine.snapshot().dt)

        controller = self._controller("6A0A" "FA15" "1204", clock_speed=600, max_cycles=600)
        controller.run()
        self.assertEqual(0, self.machine.snapshot().dt)

    def test_controller_timers_ignore_clock_speed(self):
        # A slow CPU still sees the timers run at 60Hz.  DT is set at 1/7 second, and the last instruction runs at
        # 5/7 second, by which time ticks 9 to 42 have happened.
        controller = self._controller("6A3C" "FA15" "1204", clock_speed=7, max_cycles=6)
        controller.run()
        self.assertEqual(60 - 34, self.machine.snapshot().dt)

    def test_controller_sound_timer(self):
        controller = self._controller("6103" "F118" "1204", clock_speed=600, max_cycles=120)
        controller.run()
        self.assertEqual(3, len(self.audio.events))
        self.assertEqual("beep", self.audio.events[0][0])
        self.assertAlmostEqual(0.05, self.audio.events[0][1])
        self.assertEqual([("buzzer", True), ("buzzer", False)], self.audio.events[1:])
        self.assertEqual(0, self.machine.snapshot().st)

    def test_controller_idle_limit(self):
        controller = self._controller("1200", clock_speed=0, idle_limit=5)
        self.assertEqual(5, controller.run())
        self.assertEqual(0x200, self.machine.snapshot().pc)

    def test_controller_idle_limit_ignores_key_wait(self):
        controller = self._controller("F00A", clock_speed=0, idle_limit=3, max_cycles=50)
        self.assertEqual(50, controller.run())

    def test_controller_key_wait_with_trace(self):
        controller = self._controller("F30A" "1202", clock_speed=600)
        script = {
            5: lambda: self.machine.set_key(0xC, True),
            6: self._record("after_key", controller, result=True)
        }
        self.inputs.script = script
        controller.run()
        self.assertEqual(0xC, self.records["after_key"].v[3])
        self.assertEqual(0x202, self.records["after_key"].pc)

    def test_controller_invalid_opcode(self):
        controller = self._controller("6001" "0000", clock_speed=0)
        self.assertRaises(InvalidOpcode, controller.run)
        self.assertEqual(STATE_STOPPED, controller.get_state())
        # The crashed state can still be inspected
        snapshot = controller.snapshot()
        self.assertEqual(1, snapshot.v[0])
        self.assertEqual(0x204, snapshot.pc)

    def test_controller_stack_overflow(self):
        controller = self._controller("2200", clock_speed=0)
        self.assertRaises(StackOverflow, controller.run)
        self.assertEqual(16, controller.snapshot().sp)
        self.assertEqual(STATE_STOPPED, controller.get_state())

    def test_controller_step(self):
        controller = self._controller("7001" "1200")
        controller.inputs.script = {
            0: controller.step,
            1: controller.step,
            2: controller.step,
            3: self._record("stepped", controller, result=True)
        }
        self.assertEqual(3, controller.run(paused=True))
        self.assertEqual(2, self.records["stepped"].v[0])
        self.assertEqual(0x202, self.records["stepped"].pc)

        # Quitting is a stop request, so everything is discarded
        self.assertEqual(0, self.machine.snapshot().v[0])

    def test_controller_paused_runs_nothing(self):
        controller = self._controller("7001" "1200")
        controller.inputs.script = {50: self._record("paused", controller, result=True)}
        self.assertEqual(0, controller.run(paused=True))
        self.assertEqual(0, self.records["paused"].v[0])

    def test_controller_timers_frozen_while_paused(self):
        controller = self._controller("6A0A" "FA15" "1204", clock_speed=600)
        controller.inputs.script = {
            1: controller.pause,
            30: self._record("paused", controller),
            31: controller.resume,
            45: self._record("resumed", controller, result=True)
        }
        controller.run()
        self.assertEqual(10, self.records["paused"].dt)
        self.assertLessEqual(self.records["resumed"].dt, 2)

    def test_controller_stop(self):
        controller = self._controller("7001" "1200", clock_speed=600)
        controller.inputs.script = {10: controller.stop}
        controller.run()
        self.assertEqual(STATE_STOPPED, controller.get_state())
        self.assertEqual(bytes(16), self.machine.snapshot().v)

    def test_controller_set_quirks(self):
        controller = self._controller("6203" "B200" "00E0", clock_speed=600)
        controller.inputs.script = {0: lambda: controller.set_quirks(Quirks(jump=True))}
        controller.max_cycles = 2
        controller.run()
        self.assertEqual(0x203, self.machine.snapshot().pc)  # 0x200 + V2, not V0

    def test_controller_set_clock_speed(self):
        controller = self._controller("7001" "1200", clock_speed=100, max_cycles=200)
        controller.inputs.script = {0: lambda: controller.set_clock_speed(0)}
        controller.run()
        # Uncapped from the start, so no time passes
        self.assertEqual(100.0, self.clock.now)

    def test_controller_bad_transitions(self):
        controller = self._controller("1200")
        self.assertRaises(ControllerError, controller.pause)
        self.assertRaises(ControllerError, controller.resume)
        self.assertRaises(ControllerError, controller.step)

        controller.inputs.script = {0: controller.step}
        self.assertRaises(ControllerError, controller.run)
        self.assertEqual(STATE_STOPPED, controller.get_state())

    def test_controller_already_running(self):
        controller = self._controller("1200")
        controller.inputs.script = {0: controller.run}
        self.assertRaises(ControllerError, controller.run)

    def test_controller_frames_pushed(self):
        renderer = TextRenderer(stream=io.StringIO())
        self.machine = Machine(renderer, self.audio)
        controller = self._controller("A050" "D015" "1204", clock_speed=600)
        controller.inputs.script = {3: lambda: True}
        controller.run()
        self.assertEqual([0, 1, 2, 3], self.inputs.frames_seen)
        # Stopping discards the screen, but the renderer was given the final frame first
        self.assertEqual(0, self.machine.frame()[0][0])
        self.assertEqual([1, 1, 1, 1, 0], renderer.frame[0][:5])


class TestControllerThreaded(unittest.TestCase):
    def test_controller_other_thread(self):
        machine = Machine(Renderer(), Audio())
        machine.load_rom(bytes.fromhex("7001" "1200"))
        controller = Controller(machine, Inputs(), clock_speed=2000)
        thread = Thread(target=controller.run)
        thread.start()

        try:
            self.assertTrue(controller.wait_for_state(STATE_RUNNING, timeout=5))
            controller.pause()
            self.assertTrue(controller.wait_for_state(STATE_PAUSED, timeout=5))
            before = controller.snapshot()
            controller.step()
            self.assertTrue(controller.wait_for_state(STATE_PAUSED, timeout=5))
            after = controller.snapshot()
            self.assertNotEqual(before.pc, after.pc)
            controller.resume()
            self.assertEqual(STATE_RUNNING, controller.get_state())
        finally:
            controller.stop()
            thread.join(5)

        self.assertFalse(thread.is_alive())
        self.assertEqual(STATE_STOPPED, controller.get_state())
