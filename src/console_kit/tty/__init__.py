"""Terminal mode switching and size."""

from console_kit.tty.stty import STTY, TerminalSize, TTYMode
from console_kit.tty.switcher import ModeSwitcher

__all__ = [
    "STTY",
    "TTYMode",
    "TerminalSize",
    "ModeSwitcher",
]
