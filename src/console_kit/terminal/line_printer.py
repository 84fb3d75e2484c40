"""Line oriented output, with leveled log lines."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

from console_kit.chr.style import Style


def _message(fmt: str, args: tuple[Any, ...]) -> str:
    return fmt % args if args else fmt


class LinePrinter(ABC):
    """
    Something that prints whole lines.

    Implementations only need `println`; the leveled helpers prefix the
    message with a colored tag:

        [info]  green
        [warn]  yellow
        [error] red
        [FATAL] bold red
    """

    @abstractmethod
    def println(self, message: Optional[str] = None) -> None:
        """Print a line. None prints an empty line."""

    def formatln(self, fmt: str, *args: Any) -> None:
        """Format with %-style arguments and print."""
        self.println(fmt % args)

    def info(self, fmt: str, *args: Any) -> None:
        self.println(f"{Style.GREEN}[info]{Style.CLEAR} {_message(fmt, args)}")

    def warn(self, fmt: str, *args: Any) -> None:
        self.println(f"{Style.YELLOW}[warn]{Style.CLEAR} {_message(fmt, args)}")

    def error(self, fmt: str, *args: Any) -> None:
        self.println(f"{Style.RED}[error]{Style.CLEAR} {_message(fmt, args)}")

    def fatal(self, fmt: str, *args: Any) -> None:
        self.println(f"{Style(Style.RED, Style.BOLD)}[FATAL]{Style.CLEAR} {_message(fmt, args)}")


class CallbackPrinter(LinePrinter):
    """Forwards every line to a function."""

    def __init__(self, callback: Callable[[Optional[str]], None]) -> None:
        self._callback = callback

    def println(self, message: Optional[str] = None) -> None:
        self._callback(message)


class BufferedPrinter(LinePrinter):
    """Collects printed lines in memory."""

    def __init__(self) -> None:
        self.lines: list[str] = []

    def println(self, message: Optional[str] = None) -> None:
        self.lines.append("" if message is None else message)
