"""Single line text input with editing keys."""

from __future__ import annotations

from typing import Callable, Optional, Pattern

from console_kit.chr.char import ABR, BS, CR, DEL, EOF, ESC, LF, TAB, Char, Control
from console_kit.chr.util import printable_width
from console_kit.errors import EndOfInput, UserInterrupted
from console_kit.terminal.line_buffer import DEFAULT_DELIMITERS, LineBuffer
from console_kit.terminal.line_printer import CallbackPrinter, LinePrinter
from console_kit.terminal.terminal import Terminal

CharValidator = Callable[[Char, LinePrinter], bool]
LineValidator = Callable[[str, LinePrinter], bool]
TabCompletion = Callable[[str, LinePrinter], Optional[str]]

Edit = Callable[[LineBuffer, Pattern[str]], None]

EDITS: dict[Control, Edit] = {
    Control.DELETE: lambda buf, _: buf.delete_after(),
    Control.LEFT: lambda buf, _: buf.move_to(buf.cursor - 1),
    Control.RIGHT: lambda buf, _: buf.move_to(buf.cursor + 1),
    Control.HOME: lambda buf, _: buf.move_to(0),
    Control.END: lambda buf, _: buf.move_to(len(buf)),
    Control.CTRL_LEFT: lambda buf, delim: buf.move_to(buf.word_start_before(delim)),
    Control.CTRL_RIGHT: lambda buf, delim: buf.move_to(buf.word_end_after(delim)),
    # alt-w / alt-d: delete word before / after the cursor
    Control.alt("w"): lambda buf, delim: buf.splice(buf.word_start_before(delim), buf.cursor),
    Control.alt("d"): lambda buf, delim: buf.splice(buf.cursor, buf.word_end_after(delim)),
    # alt-k / alt-u: delete everything after / before the cursor
    Control.alt("k"): lambda buf, _: buf.splice(buf.cursor, len(buf)),
    Control.alt("u"): lambda buf, _: buf.splice(0, buf.cursor),
}


def printable_char(c: Char, printer: LinePrinter) -> bool:
    """Accept printable characters only."""
    if c.as_integer() < 0x20 or not str(c).isprintable():
        printer.println(f"Invalid character: {c.as_string()}")
        return False
    return True


def non_empty(line: str, printer: LinePrinter) -> bool:
    """Accept any non-empty line."""
    if not line:
        printer.println("Output needs at least 1 character.")
        return False
    return True


class InputLine:
    """
    Reads a line of text from a raw mode terminal.

    Editing keys:
        left / right, home / end    move the cursor
        ctrl-left / ctrl-right      move by word
        backspace / delete          delete a character before / at the cursor
        alt-w / alt-d               delete a word before / after the cursor
        alt-u / alt-k               delete everything before / after the cursor
        tab                         completion, if a completer is given
        enter                       validate and return the line
        esc, ctrl-c, ctrl-d         abort

    Validation errors are printed on the line above the input, and the
    input line is redrawn below them.
    """

    edits: dict[Control, Edit] = EDITS

    def __init__(
        self,
        terminal: Terminal,
        message: str,
        char_validator: Optional[CharValidator] = None,
        line_validator: Optional[LineValidator] = None,
        tab_completion: Optional[TabCompletion] = None,
        delimiters: Pattern[str] = DEFAULT_DELIMITERS,
    ) -> None:
        self._terminal = terminal
        self._message = message
        self._char_validator = char_validator or printable_char
        self._line_validator = line_validator or non_empty
        self._tab_completion = tab_completion
        self._delimiters = delimiters
        self._buffer = LineBuffer()
        self._printed_error: Optional[str] = None
        self._error_printer = CallbackPrinter(self._print_above)

    def read_line(self, initial: Optional[str] = None) -> str:
        """
        Read a line.

        Args:
            initial: Text to start editing from.

        Raises:
            ValueError: If initial does not pass the line validator.
            UserInterrupted: On ESC, Ctrl-C or Ctrl-D.
            EndOfInput: If the input ends first.
        """
        if initial and not self._line_validator(initial, CallbackPrinter(lambda _: None)):
            raise ValueError(f"Invalid initial value: {initial}")
        self._buffer = LineBuffer(initial or "")
        self._printed_error = None

        self._terminal.formatln("%s: %s", self._message, self._display(self._buffer.before))

        while True:
            c = self._terminal.read()
            if c is None:
                raise EndOfInput("End of input.")
            cp = c.as_integer()

            if cp in (CR, LF):
                line = str(self._buffer)
                if self._line_validator(line, self._error_printer):
                    return line
                continue

            if cp in (ESC, ABR, EOF):
                raise UserInterrupted(f"User interrupted: {c.as_string()}")

            if self._handle_tab(cp) or self._handle_backspace(cp) or self._handle_control(c):
                continue

            if self._char_validator(c, self._error_printer):
                self._buffer.insert(str(c))
                self._print_input_line()

    def _handle_tab(self, cp: int) -> bool:
        if cp != TAB or self._tab_completion is None:
            return False
        completed = self._tab_completion(self._buffer.before, self._error_printer)
        if completed is not None:
            self._buffer.replace_before(completed)
            self._print_input_line()
        return True

    def _handle_backspace(self, cp: int) -> bool:
        if cp not in (DEL, BS):
            return False
        if self._buffer.cursor > 0:
            self._buffer.delete_before()
            self._print_input_line()
        return True

    def _handle_control(self, c: Char) -> bool:
        if not isinstance(c, Control):
            return False
        edit = self.edits.get(c)
        if edit is None:
            self._print_above(f"Invalid control: {c.as_string()}")
            return True
        edit(self._buffer, self._delimiters)
        self._print_input_line()
        return True

    def _display(self, text: str) -> str:
        return text

    def _print_above(self, error: Optional[str]) -> None:
        up = str(Control.UP) if self._printed_error is not None else ""
        self._printed_error = error or ""
        with self._terminal.lock:
            self._terminal.write(f"\r{up}{Control.CURSOR_ERASE}{error or ''}")
            self._terminal.println()
            self._print_input_line()

    def _print_input_line(self) -> None:
        before = self._display(self._buffer.before)
        after = self._display(self._buffer.after)
        line = f"\r{Control.CURSOR_ERASE}{self._message}: {before}"
        width = printable_width(after)
        if width > 0:
            line += f"{after}{Control.cursor_left(width)}"
        else:
            line += after
        self._terminal.write(line)
