#!/usr/bin/env python3

"""
Input Trace Plugin

Replays a scripted sequence of key presses, so a run can be repeated exactly.
Events are tied to display frame numbers (60 per second) rather than wall
clock time.  Each line of a trace holds one event:

    <frame> <key> down|up
    <frame> quit

Keys are given in hex (0-F).  Blank lines and anything after a '#' are
ignored.  Events must be in frame order.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

from collections import deque
from ..constants import NUM_KEYS
from .i_null import Inputs as InputsBase, InputsError

QUIT_EVENT = "quit"
KEY_EVENTS = {"down": True, "up": False}


class Inputs(InputsBase):
    def __init__(self, trace_lines):
        self.events = deque(self.parse(trace_lines))

    @staticmethod
    def parse(trace_lines):
        events = []
        last_frame = 0

        for line_num, line in enumerate(trace_lines, 1):
            fields = line.split("#", 1)[0].split()

            if not fields:
                continue

            try:
                frame = int(fields[0])

                if len(fields) == 2 and fields[1].lower() == QUIT_EVENT:
                    event = (frame, None, None)
                elif len(fields) == 3 and fields[2].lower() in KEY_EVENTS:
                    key = int(fields[1], 16)

                    if not 0 <= key < NUM_KEYS:
                        raise ValueError("key out of range")

                    event = (frame, key, KEY_EVENTS[fields[2].lower()])
                else:
                    raise ValueError("unrecognised event")
            except ValueError as e:
                raise InputsError("Bad input trace on line {}: {}".format(line_num, e)) from None

            if frame < last_frame:
                raise InputsError("Input trace events on line {} are out of frame order".format(line_num))

            last_frame = frame
            events.append(event)

        return events

    def process_messages(self, machine, frame_number):
        events = self.events

        while events and events[0][0] <= frame_number:
            _, key, pressed = events.popleft()

            if key is None:
                return True

            machine.set_key(key, pressed)

        return False
