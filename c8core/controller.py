#!/usr/bin/env python3

"""
Execution Controller

Runs the machine with a single-threaded cooperative loop, timed against a
monotonic clock.  Each pass of the loop does whichever of these jobs is due:

    * Poll the inputs and push the framebuffer to the renderer (60Hz)
    * Decrement the delay and sound timers (60Hz)
    * Execute the next instruction (at the chosen clock speed, or as fast as
      possible if uncapped)

The timer cadence follows real time, not the instruction count, so throttling
the CPU does not slow the timers down.  Instead of spinning while waiting, the
loop waits on a condition variable, which also lets pause, resume, step and
stop requests from other threads wake it up straight away.

    Stopped --> Running <--> Paused --> Stopped
                               |  ^
                               v  |
                             Stepping

Requests are only acted on between instructions.  Stepping runs exactly one
instruction and drops back to Paused.  Timers are frozen while paused, so a
program being stepped through sees time stand still.

If anything goes wrong inside an instruction, the controller stops and the
error propagates out of run().  The machine is left as it was when the error
happened, so it can be inspected.  An explicit stop() discards the machine's
state once the loop has exited.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

from threading import Condition
from time import perf_counter
from .constants import (
    DEFAULT_CLOCK_SPEED, DISPLAY_INTERVAL, MAX_TIMER_CATCHUP, STATE_PAUSED, STATE_RUNNING, STATE_STEPPING,
    STATE_STOPPED, TIMER_INTERVAL
)


class ControllerError(Exception):
    pass


class Controller:
    def __init__(self, machine, inputs, clock_speed=None, idle_limit=0, max_cycles=0, clock=perf_counter,
                 wait=None):
        self.machine = machine
        self.cpu = machine.cpu
        self.framebuffer = machine.framebuffer
        self.inputs = inputs
        self.clock = clock
        self.condition = Condition()
        # Tests can supply their own wait along with a fake clock
        self.wait = self.condition.wait if wait is None else wait
        self.state = STATE_STOPPED
        self.idle_limit = idle_limit  # Halt after this many self-jumps in a row (0 = never)
        self.max_cycles = max_cycles  # Halt after this many instructions (0 = never)
        self.core_interval = None
        self.set_clock_speed(clock_speed)

        self.cycles = 0
        self.idle_cycles = 0
        self.frame_number = 0
        self.discard_on_exit = False
        self.paused_at = 0

        # Schedule, all in clock seconds
        self.next_timer_time = 0
        self.next_display_time = 0
        self.next_instruction_time = 0
        self.next_perf_report_time = 0

        # Performance-related vars
        self.perf_counter_fps = 0
        self.perf_counter_ops = 0

    def set_clock_speed(self, clock_speed):
        # None picks the default speed, and 0 (or less) runs uncapped
        if clock_speed is None:
            clock_speed = DEFAULT_CLOCK_SPEED

        with self.condition:
            self.core_interval = None if clock_speed <= 0 else 1.0 / clock_speed
            self.condition.notify_all()

    def set_quirks(self, quirks):
        # Takes effect from the next instruction
        with self.condition:
            self.cpu.quirks = quirks

    def get_state(self):
        with self.condition:
            return self.state

    def snapshot(self):
        with self.condition:
            return self.machine.snapshot()

    def frame(self):
        with self.condition:
            return self.machine.frame()

    def run(self, paused=False):
        with self.condition:
            if self.state != STATE_STOPPED:
                raise ControllerError("The machine is already running")

            this_time = self.clock()
            self.state = STATE_PAUSED if paused else STATE_RUNNING
            self.paused_at = this_time
            self.cycles = 0
            self.idle_cycles = 0
            self.frame_number = 0
            self.discard_on_exit = False
            self.next_timer_time = this_time + TIMER_INTERVAL
            self.next_display_time = this_time
            self.next_instruction_time = this_time
            self.next_perf_report_time = this_time + 1.0
            self.condition.notify_all()

        try:
            while self._run_slice():
                pass
        except BaseException:
            self._set_state(STATE_STOPPED)
            raise

        with self.condition:
            # Make sure the renderer has the final frame before anything is discarded
            self.refresh_framebuffer()

            if self.discard_on_exit:
                self.machine.reset()

        return self.cycles

    def pause(self):
        with self.condition:
            if self.state == STATE_STOPPED:
                raise ControllerError("Cannot pause a stopped machine")

            if self.state == STATE_RUNNING:
                self.paused_at = self.clock()
                self._set_state(STATE_PAUSED)

    def resume(self):
        with self.condition:
            if self.state == STATE_STOPPED:
                raise ControllerError("Cannot resume a stopped machine")

            if self.state != STATE_RUNNING:
                # Push the schedule back by however long we were paused, so the timers pick up where they left off
                paused_for = self.clock() - self.paused_at
                self.next_timer_time += paused_for
                self.next_instruction_time += paused_for
                self.next_perf_report_time += paused_for
                self._set_state(STATE_RUNNING)

    def step(self):
        with self.condition:
            if self.state not in (STATE_PAUSED, STATE_STEPPING):
                raise ControllerError("Stepping is only possible while paused")

            self._set_state(STATE_STEPPING)

    def stop(self):
        with self.condition:
            self.discard_on_exit = True
            self._set_state(STATE_STOPPED)

    def wait_for_state(self, states, timeout=None):
        # For use from other threads.  Returns True if one of the states was reached in time.
        if isinstance(states, str):
            states = (states,)

        with self.condition:
            return self.condition.wait_for(lambda: self.state in states, timeout)

    def refresh_framebuffer(self):
        if self.framebuffer.refresh_display():
            self.perf_counter_fps += 1

    def _set_state(self, state):
        with self.condition:
            self.state = state
            self.condition.notify_all()

    def _run_slice(self):
        # One pass of the main loop.  Returns False once the machine has stopped.
        with self.condition:
            this_time = self.clock()

            if self.state == STATE_STOPPED:
                return False

            # Performance counters
            if this_time >= self.next_perf_report_time:
                self.next_perf_report_time = this_time + 1.0
                self.framebuffer.report_perf(self.perf_counter_fps, self.perf_counter_ops)
                self.perf_counter_ops = 0
                self.perf_counter_fps = 0

            # Process inputs and update the display at 60Hz, even while paused
            if this_time >= self.next_display_time:
                self.next_display_time = this_time + DISPLAY_INTERVAL

                if self.inputs.process_messages(self.machine, self.frame_number):
                    self.stop()
                    return False

                self.frame_number += 1
                self.refresh_framebuffer()

            state = self.state

            if state == STATE_STOPPED:
                return False

            if state == STATE_STEPPING:
                self._execute()

                if self.state == STATE_STEPPING:
                    self._set_state(STATE_PAUSED)

                return True

            if state == STATE_PAUSED:
                # Sleep until a request arrives, or the display is due again
                self.wait(max(0.0, self.next_display_time - this_time))
                return True

            # Decrement timers against real time.  If the host falls a long way behind, resync rather than firing a
            # flood of ticks.
            ticks = 0

            while this_time >= self.next_timer_time:
                if ticks >= MAX_TIMER_CATCHUP:
                    self.next_timer_time = this_time + TIMER_INTERVAL
                    break

                self.cpu.tick_timers()
                self.next_timer_time += TIMER_INTERVAL
                ticks += 1

            core_interval = self.core_interval

            if core_interval is None:
                self._execute()
                return True

            if this_time >= self.next_instruction_time:
                self._execute()
                self.next_instruction_time = this_time + core_interval

            if self.state == STATE_RUNNING:
                # Wait for whatever is due next.  Takes into account time spent on this instruction.
                next_time = min(self.next_instruction_time, self.next_timer_time, self.next_display_time)
                timeout = next_time - self.clock()

                if timeout > 0:
                    self.wait(timeout)

            return True

    def _execute(self):
        cpu = self.cpu
        cpu.cycle()
        self.cycles += 1
        self.perf_counter_ops += 1

        if self.idle_limit:
            # A jump to itself leaves the program counter where it was, but waiting for a key does not count
            if cpu.pc == cpu.debug_pc and not cpu.awaiting_keypress:
                self.idle_cycles += 1

                if self.idle_cycles >= self.idle_limit:
                    self._set_state(STATE_STOPPED)
            else:
                self.idle_cycles = 0

        if self.max_cycles and self.cycles >= self.max_cycles:
            self._set_state(STATE_STOPPED)
