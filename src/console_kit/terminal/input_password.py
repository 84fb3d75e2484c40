"""Masked text input."""

from __future__ import annotations

from console_kit.chr.char import Control
from console_kit.terminal.input_line import EDITS, Edit, InputLine
from console_kit.terminal.line_printer import LinePrinter
from console_kit.terminal.terminal import Terminal

# Word movement would reveal where the spaces are.
PASSWORD_EDITS: dict[Control, Edit] = {
    key: edit for key, edit in EDITS.items()
    if key not in (Control.CTRL_LEFT, Control.CTRL_RIGHT, Control.alt("w"), Control.alt("d"))
}


def _any_line(line: str, printer: LinePrinter) -> bool:
    return True


class InputPassword(InputLine):
    """Reads a password, showing a mask character for each typed character."""

    edits = PASSWORD_EDITS

    def __init__(self, terminal: Terminal, message: str, mask: str = "*") -> None:
        super().__init__(terminal, message, line_validator=_any_line)
        self._mask = mask

    def read_password(self) -> str:
        return self.read_line()

    def _display(self, text: str) -> str:
        return self._mask * len(text)
