"""Low-level terminal mode and size control."""

from __future__ import annotations

import logging
import os
import sys
import threading
from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING, Any, Optional

try:
    import termios
    import tty
except ImportError:  # Windows, no termios
    termios = None  # type: ignore[assignment]
    tty = None  # type: ignore[assignment]

from console_kit.errors import ModeSwitchError, NonInteractive

if TYPE_CHECKING:
    from console_kit.tty.switcher import ModeSwitcher

logger = logging.getLogger(__name__)


class TTYMode(Enum):
    """Terminal line discipline."""
    RAW = auto()  # every byte delivered as typed, no echo, no output processing
    COOKED = auto()  # line buffered, echoing, with signal keys


@dataclass(frozen=True)
class TerminalSize:
    """Terminal dimensions."""
    rows: int
    cols: int


class STTY:
    """
    Mode and size control for the terminal on one file descriptor.

    Holds the stack of active mode switchers for that terminal, so nested
    components can each switch the mode and restore it on the way out.
    """

    def __init__(self, fd: Optional[int] = None) -> None:
        self._fd = fd
        self._cooked: Optional[list[Any]] = None
        self.lock = threading.RLock()
        self.mode_stack: list[ModeSwitcher] = []

    @property
    def fd(self) -> int:
        return sys.stdin.fileno() if self._fd is None else self._fd

    def is_interactive(self) -> bool:
        """Check whether a TTY is attached."""
        if termios is None:
            return False
        try:
            return os.isatty(self.fd)
        except (OSError, ValueError):
            return False

    def get_mode(self) -> TTYMode:
        """Get the current mode of the terminal."""
        attrs = self._get_attrs()
        return TTYMode.COOKED if attrs[3] & termios.ICANON else TTYMode.RAW

    def set_mode(self, mode: TTYMode) -> None:
        """
        Put the terminal in the given mode.

        Raises:
            NonInteractive: If no TTY is attached.
            ModeSwitchError: If the terminal refused the change.
        """
        attrs = self._get_attrs()
        try:
            if mode is TTYMode.RAW:
                if attrs[3] & termios.ICANON:
                    self._cooked = attrs
                tty.setraw(self.fd, termios.TCSADRAIN)
            elif self._cooked is not None:
                termios.tcsetattr(self.fd, termios.TCSADRAIN, self._cooked)
            else:
                attrs[0] |= termios.ICRNL
                attrs[1] |= termios.OPOST
                attrs[3] |= termios.ICANON | termios.ECHO | termios.ISIG | termios.IEXTEN
                termios.tcsetattr(self.fd, termios.TCSADRAIN, attrs)
        except (termios.error, OSError) as e:
            raise ModeSwitchError(f"Unable to set terminal mode {mode.name}: {e}") from e
        logger.debug("Terminal on fd %d set to %s", self.fd, mode.name)

    def get_size(self) -> TerminalSize:
        """
        Get current terminal dimensions.

        Raises:
            NonInteractive: If no TTY is attached.
        """
        try:
            size = os.get_terminal_size(self.fd)
        except (OSError, ValueError) as e:
            raise NonInteractive(f"Unable to get terminal size: {e}") from e
        return TerminalSize(size.lines, size.columns)

    def switch(self, mode: TTYMode) -> ModeSwitcher:
        """Switch to mode until the returned switcher is closed."""
        from console_kit.tty.switcher import ModeSwitcher
        return ModeSwitcher(self, mode)

    def _get_attrs(self) -> list[Any]:
        if not self.is_interactive():
            raise NonInteractive("No terminal attached")
        try:
            return termios.tcgetattr(self.fd)
        except termios.error as e:
            raise NonInteractive(f"Unable to read terminal attributes: {e}") from e
