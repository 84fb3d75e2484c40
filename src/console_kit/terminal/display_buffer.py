"""A block of lines at the bottom of the terminal that can be redrawn in place."""

from __future__ import annotations

from typing import Iterable

from console_kit.chr.char import Control
from console_kit.chr.util import printable_width
from console_kit.terminal.terminal import Terminal


class DisplayBuffer:
    """
    Tracks the last lines printed to a raw mode terminal, so each of them
    can be replaced without redrawing the others.

    The cursor is always left at the end of the last line.
    """

    def __init__(self, terminal: Terminal) -> None:
        self._terminal = terminal
        self._lines: list[str] = []

    @property
    def count(self) -> int:
        return len(self._lines)

    @property
    def lines(self) -> list[str]:
        return list(self._lines)

    def add(self, *lines: str) -> None:
        self.add_all(lines)

    def add_all(self, lines: Iterable[str]) -> None:
        with self._terminal.lock:
            for line in lines:
                self._lines.append(line)
                self._terminal.println(line)

    def update(self, index: int, line: str) -> None:
        """Replace the line at index. Unchanged lines are not redrawn."""
        if not 0 <= index < len(self._lines):
            raise IndexError(f"Index: {index}, Size: {len(self._lines)}")
        if self._lines[index] == line:
            return
        self._lines[index] = line

        up = len(self._lines) - index - 1
        parts = ["\r"]
        if up > 0:
            parts.append(str(Control.cursor_up(up)))
        parts.append(str(Control.CURSOR_ERASE))
        parts.append(line)
        if up > 0:
            parts.append("\r")
            parts.append(str(Control.cursor_down(up)))
            parts.append(self._to_end_of_last_line())
        self._terminal.write("".join(parts))

    def update_all(self, start: int, lines: Iterable[str]) -> None:
        """Replace consecutive lines, starting at start."""
        with self._terminal.lock:
            for offset, line in enumerate(lines):
                self.update(start + offset, line)

    def clear(self) -> None:
        """Erase all lines, leaving the cursor where the first one started."""
        if not self._lines:
            return
        parts = ["\r", str(Control.CURSOR_ERASE)]
        for _ in range(1, len(self._lines)):
            parts.append(str(Control.UP))
            parts.append(str(Control.CURSOR_ERASE))
        self._lines.clear()
        self._terminal.write("".join(parts))

    def clear_last(self, num: int) -> None:
        """Erase the last num lines."""
        if num < 1:
            raise ValueError(f"Unable to clear {num} lines")
        if num > len(self._lines):
            raise ValueError(f"Count: {num}, Size: {len(self._lines)}")
        if num == len(self._lines):
            self.clear()
            return

        parts = ["\r", str(Control.CURSOR_ERASE)]
        for _ in range(1, num):
            parts.append(str(Control.UP))
            parts.append(str(Control.CURSOR_ERASE))
        del self._lines[-num:]
        parts.append("\r")
        parts.append(str(Control.UP))
        parts.append(self._to_end_of_last_line())
        self._terminal.write("".join(parts))

    def _to_end_of_last_line(self) -> str:
        width = printable_width(self._lines[-1])
        return str(Control.cursor_right(width)) if width > 0 else ""
