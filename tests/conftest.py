"""Pytest configuration: a fake terminal device and scripted keyboard input."""

import io
from typing import Union

import pytest

from console_kit.chr import Char
from console_kit.config import ConsoleConfig
from console_kit.errors import NonInteractive
from console_kit.terminal import Terminal
from console_kit.tty import STTY, TerminalSize, TTYMode


class FakeTTY(STTY):
    """
    Terminal device that only remembers its mode.

    Starts out in cooked mode, like a shell would leave it.
    """

    def __init__(self, rows: int = 42, cols: int = 144, interactive: bool = True) -> None:
        super().__init__(fd=-1)
        self.rows = rows
        self.cols = cols
        self.interactive = interactive
        self.current = TTYMode.COOKED
        self.changes: list[TTYMode] = []

    def is_interactive(self) -> bool:
        return self.interactive

    def get_mode(self) -> TTYMode:
        return self.current

    def set_mode(self, mode: TTYMode) -> None:
        self.current = mode
        self.changes.append(mode)

    def get_size(self) -> TerminalSize:
        if not self.interactive:
            raise NonInteractive("No terminal attached")
        return TerminalSize(self.rows, self.cols)


class RecordingOutput(io.StringIO):
    """Text output that also keeps every write call separately."""

    def __init__(self) -> None:
        super().__init__()
        self.writes: list[str] = []

    def write(self, text: str) -> int:
        self.writes.append(text)
        return super().write(text)


class Console:
    """Scripted input, captured output and a fake TTY for one test."""

    def __init__(self) -> None:
        self.tty = FakeTTY()
        self.input = io.BytesIO()
        self.out = RecordingOutput()
        self.config = ConsoleConfig()

    def set_input(self, *items: Union[str, Char, int]) -> None:
        """Keys to type: text, characters and control sequences, or codepoints."""
        data = bytearray()
        for item in items:
            if isinstance(item, int):
                data += chr(item).encode("utf-8")
            else:
                data += str(item).encode("utf-8")
        self.input = io.BytesIO(bytes(data))

    def terminal(self, mode: TTYMode = TTYMode.RAW, **kwargs) -> Terminal:
        kwargs.setdefault("config", self.config)
        return Terminal(self.tty, mode, input=self.input, output=self.out, **kwargs)

    def output(self) -> str:
        return self.out.getvalue()


@pytest.fixture
def console() -> Console:
    """Fresh fake console, 42 rows by 144 columns."""
    return Console()
