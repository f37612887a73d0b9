#!/usr/bin/env python3

"""
Stack Emulator

There is no specified location in RAM for the CPU call stack, and the stack
pointer (SP) is not exposed to the running program, so the stack is simply a
wrapped list of return addresses.  The stack pointer is the number of items
held.

Exceeding the depth limit, or returning with nothing on the stack, is fatal.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"


class StackError(Exception):
    pass


class StackOverflow(StackError):
    pass


class StackUnderflow(StackError):
    pass


class Stack:
    def __init__(self, size):
        self.items = []
        self.size = size

    def push(self, item):
        # Fetching the stack size with 'len' should be immediate, so no slow loop
        if len(self.items) >= self.size:
            raise StackOverflow("Stack overflow (call depth limit is {})".format(self.size))

        self.items.append(item)

    def pop(self):
        try:
            return self.items.pop()
        except IndexError:
            raise StackUnderflow("Stack underflow (return with empty stack)") from None

    def clear(self):
        self.items = []

    @property
    def sp(self):
        return len(self.items)

    def get_items(self):
        # For debugging.  A copy, so callers cannot alter the stack.
        return tuple(self.items)
