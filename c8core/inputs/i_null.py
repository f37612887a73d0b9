#!/usr/bin/env python3

"""
Null Input Plugin

Serves as a base class for other Input plugins.  Can be used on its own if zero
input functionality is required.

The controller calls process_messages() at 60Hz, passing the machine and the
current display frame number.  Plugins press and release keys with
machine.set_key(), and return True to ask the controller to quit.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"


class InputsError(Exception):
    pass


class Inputs:
    def process_messages(self, machine, frame_number):  # pylint: disable=unused-argument
        return False  # Don't exit the program

    def shutdown(self):
        pass
