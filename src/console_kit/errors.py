"""Exception types raised by terminal interaction."""

from __future__ import annotations


class ConsoleError(Exception):
    """Base class for all console-kit failures."""


class DecodeError(ConsoleError, ValueError):
    """Malformed byte or escape sequence in the input stream."""


class EndOfInput(ConsoleError, EOFError):
    """Input stream closed before a terminating event was read."""


class UserInterrupted(ConsoleError):
    """The user pressed an interrupt key (ESC, Ctrl-C, Ctrl-D)."""


class NonInteractive(ConsoleError):
    """No real TTY is attached where one is required."""


class ModeSwitchError(ConsoleError, OSError):
    """The OS refused to change (or restore) the terminal mode."""


class TaskCancelled(ConsoleError):
    """Raised inside a progress task that has been asked to stop."""
