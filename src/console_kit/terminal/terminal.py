"""Terminal I/O facade for interactive console programs."""

from __future__ import annotations

import logging
import sys
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Any, BinaryIO, Callable, Optional, TextIO, TypeVar, Union

from console_kit.chr.char import ABR, CR, DEL, EOF, ESC, LF, TAB, Char, Control
from console_kit.chr.reader import CharReader
from console_kit.config import ConsoleConfig
from console_kit.errors import EndOfInput, UserInterrupted
from console_kit.terminal.line_printer import LinePrinter
from console_kit.tty.stty import STTY, TerminalSize, TTYMode
from console_kit.tty.switcher import ModeSwitcher

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Terminal(LinePrinter):
    """
    Terminal I/O for console applications.

    Owns the input (decoded one key at a time) and the output, and keeps
    track of lines printed so far. In raw mode a line is terminated when
    the *next* line starts, which lets the last line be rewritten in place
    (that is what the line editor and confirm prompt do).

    All output goes through `lock`, which every renderer shares.

    Example:
        >>> with Terminal() as term:
        ...     if term.confirm("Continue?"):
        ...         term.info("Continuing")
    """

    def __init__(
        self,
        tty: Optional[STTY] = None,
        mode: Optional[TTYMode] = TTYMode.RAW,
        printer: Optional[LinePrinter] = None,
        *,
        input: Optional[BinaryIO] = None,
        output: Optional[TextIO] = None,
        error: Optional[TextIO] = None,
        config: Optional[ConsoleConfig] = None,
    ) -> None:
        """
        Args:
            tty: Terminal device; defaults to the one on stdin.
            mode: Mode to keep the terminal in while open. None leaves the
                mode alone, for use when no TTY is attached.
            printer: Custom handler for printed lines.
            input: Binary input stream; defaults to unbuffered stdin.
            output: Text output stream; defaults to stdout.
            error: If set, error and fatal lines are written here instead.
            config: Defaults for the interactive components.
        """
        self.tty = tty if tty is not None else STTY()
        self.config = config if config is not None else ConsoleConfig()
        self.lock = threading.RLock()
        self._owns_input = input is None
        self._in: BinaryIO = input if input is not None else open(
            sys.stdin.fileno(), "rb", buffering=0, closefd=False)
        self._out: TextIO = output if output is not None else sys.stdout
        self._err = error
        self._printer = printer
        self._reader = CharReader(self._in)
        self._line_count = 0
        self._switcher: Optional[ModeSwitcher] = None
        if mode is not None:
            self._switcher = self.tty.switch(mode)
            if self._switcher.did_change_mode and self._switcher.before is TTYMode.RAW:
                self._write("\n")

    @property
    def mode(self) -> TTYMode:
        """Current terminal mode (COOKED when mode switching is off)."""
        if self._switcher is None:
            return TTYMode.COOKED
        return self._switcher.current_mode

    @property
    def line_count(self) -> int:
        return self._line_count

    # -- Input --

    def read(self) -> Optional[Char]:
        """Block until the next key is read. None at end of input."""
        return self._reader.read()

    def read_if_available(self) -> Optional[Char]:
        """Read the next key if one is ready, otherwise return None."""
        if self._reader.ready():
            return self._reader.read()
        return None

    # -- Output --

    def write(self, text: Union[str, Char]) -> None:
        """Write text or a control sequence as is."""
        self._write(str(text))

    def println(self, message: Optional[str] = None) -> None:
        if self._printer is not None:
            self._printer.println(message)
            return
        with self.lock:
            if self.mode is TTYMode.RAW:
                if self._line_count > 0:
                    self._out.write("\r\n")
                if message is not None:
                    self._out.write(message)
            else:
                if message is not None:
                    self._out.write("\r" + message)
                self._out.write("\r\n")
            self._out.flush()
            self._line_count += 1

    def error(self, fmt: str, *args: Any) -> None:
        if self._err is None:
            super().error(fmt, *args)
        else:
            self._error_line("[error]", fmt, args)

    def fatal(self, fmt: str, *args: Any) -> None:
        if self._err is None:
            super().fatal(fmt, *args)
        else:
            self._error_line("[FATAL]", fmt, args)

    def finish(self) -> None:
        """Terminate the current set of lines and continue below them."""
        with self.lock:
            if self.mode is TTYMode.RAW and self._line_count > 0:
                self._out.write("\r\n")
                self._out.flush()
            self._line_count = 0

    # -- Interaction --

    def confirm(self, what: str, default: bool = True) -> bool:
        """
        Ask a yes/no question.

        Prints "<what> [Y/n]:" (or "[y/N]" when the default is no). 'y'
        answers yes, 'n' or backspace answers no, and enter gives the
        default.

        Raises:
            UserInterrupted: On ESC, Ctrl-C or Ctrl-D.
            EndOfInput: If the input ends before an answer.
        """
        yn = "Y/n" if default else "y/N"
        self.formatln("%s [%s]:", what, yn)
        while True:
            c = self.read()
            if c is None:
                raise EndOfInput("End of stream.")
            cp = c.as_integer()
            if cp in (CR, LF):
                self.write(" Yes." if default else " No.")
                return default
            if cp in (ord("y"), ord("Y")):
                self.write(" Yes.")
                return True
            if cp in (ord("n"), ord("N"), DEL):
                self.write(" No.")
                return False
            if cp in (ESC, ABR, EOF):
                raise UserInterrupted(f"User interrupted: {c.as_string()}")
            if cp in (ord(" "), TAB):
                continue
            self.write(f"\r{Control.CURSOR_ERASE}{what} [{yn}]: {c.as_string()} is not valid input.")

    def size(self) -> TerminalSize:
        """
        Current terminal size.

        Raises:
            NonInteractive: If no TTY is attached.
        """
        return self.tty.get_size()

    def execute_abortable(self, fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """
        Run fn on a worker thread, and abort if ESC or Ctrl-C is pressed.

        The worker is not interrupted on abort, but its result is dropped.

        Raises:
            UserInterrupted: If aborted from the keyboard.
        """
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="abortable")
        try:
            future = executor.submit(fn, *args, **kwargs)
            self.wait_abortable(future)
        finally:
            executor.shutdown(wait=False, cancel_futures=True)
        return future.result()

    def wait_abortable(self, future: Future[Any]) -> None:
        """Wait for future to complete, cancelling it on ESC or Ctrl-C."""
        while not future.done():
            c = self.read_if_available()
            if c is not None and c.as_integer() in (ESC, ABR):
                future.cancel()
                logger.debug("Task aborted from keyboard")
                raise UserInterrupted(f"Aborted with '{c.as_string()}'")
            wait([future], timeout=self.config.poll_interval)

    # -- Lifecycle --

    def close(self) -> None:
        """Finish output and restore the terminal mode."""
        if self._switcher is not None:
            if self._switcher.did_change_mode and self._switcher.before is TTYMode.COOKED:
                self.finish()
            self._switcher.close()
        if self._owns_input:
            self._in.close()

    def __enter__(self) -> Terminal:
        return self

    def __exit__(self, exc_type: Optional[type], exc: Optional[BaseException], tb: object) -> None:
        self.close()

    def _write(self, text: str) -> None:
        with self.lock:
            self._out.write(text)
            self._out.flush()

    def _error_line(self, tag: str, fmt: str, args: tuple[Any, ...]) -> None:
        message = fmt % args if args else fmt
        ending = "\r\n" if self.mode is TTYMode.RAW else "\n"
        with self.lock:
            self._err.write(f"{tag} {message}{ending}")
            self._err.flush()
