"""Keyboard driven selection from a list of entries."""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable, Generic, Optional, Sequence, TypeVar, Union

from console_kit.chr.char import ABR, CR, EOF, ESC, LF, Char, Control, Unicode
from console_kit.chr.style import Style
from console_kit.chr.util import clip_width, left_just, printable_width, right_just
from console_kit.config import ConsoleConfig
from console_kit.errors import EndOfInput, NonInteractive, UserInterrupted
from console_kit.terminal.display_buffer import DisplayBuffer
from console_kit.terminal.line_printer import CallbackPrinter, LinePrinter
from console_kit.terminal.terminal import Terminal

logger = logging.getLogger(__name__)

E = TypeVar("E")

EntryPrinter = Callable[[E, Style], str]


class Reaction(Enum):
    """What the menu does after a command has run."""
    SELECT = auto()  # return the current entry
    EXIT = auto()  # return None
    UPDATE_KEEP_ITEM = auto()  # entries reordered; follow the current entry
    UPDATE_KEEP_OFFSET = auto()  # entries changed; keep the cursor where it is
    NONE = auto()  # redraw the current entry only


class SelectionState(Enum):
    NAVIGATING = auto()
    SELECTED = auto()
    EXITED = auto()
    FAILED = auto()


Action = Callable[[E, LinePrinter], Reaction]


@dataclass(frozen=True)
class Command(Generic[E]):
    """
    A key bound to an action on the current entry.

    The action gets the entry, and a printer for messages shown below the
    menu (cleared when the next command runs).
    """
    key: Union[str, Char]
    name: str
    action: Action
    hidden: bool = False

    def __post_init__(self) -> None:
        key = Unicode.of(self.key) if isinstance(self.key, str) else self.key
        # CR and LF are both "enter".
        if key.as_integer() == CR:
            key = Unicode.LF
        object.__setattr__(self, "key", key)

    @property
    def key_name(self) -> str:
        if str(self.key).isprintable():
            return str(self.key)
        if self.key.key is not None:
            return self.key.key.value
        return self.key.as_string()

    def invoke(self, entry: E, printer: LinePrinter) -> Reaction:
        return self.action(entry, printer)


def _default_printer(entry: object, bg: Style) -> str:
    return str(entry)


class InputSelection(Generic[E]):
    """
    Lets the user pick an entry from a list.

    Navigation:
        up / down       previous / next entry
        left / right    one page back / forward
        home / end      first / last entry
        digits          jump to that entry number

    Any other key is looked up in the commands. A list longer than the
    page size (plus margin) is shown one page at a time.

    The entries list is read on every redraw, so a command may reorder it
    and return UPDATE_KEEP_ITEM or UPDATE_KEEP_OFFSET.
    """

    def __init__(
        self,
        terminal: Terminal,
        prompt: str,
        entries: Sequence[E],
        commands: Sequence[Command[E]],
        printer: Optional[EntryPrinter] = None,
        *,
        page_size: Optional[int] = None,
        page_margin: Optional[int] = None,
        line_width: int = 0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if not entries:
            raise ValueError("No entries to select from")
        self._terminal = terminal
        self._config: ConsoleConfig = terminal.config
        self._buffer = DisplayBuffer(terminal)
        self._prompt = prompt
        self._entries = entries
        self._commands = list(commands)
        self._command_map: dict[Char, Command[E]] = {cmd.key: cmd for cmd in self._commands}
        self._printer: EntryPrinter = printer or _default_printer
        self._clock = clock

        self._page_size = page_size or self._default_page_size()
        margin = self._config.page_margin if page_margin is None else page_margin
        self._line_width = line_width or self._default_line_width()
        self._paged = len(entries) > self._page_size + margin
        self._shown = self._page_size if self._paged else len(entries)

        self._digits = ""
        self._digits_time = 0.0
        self._extra_lines = 0
        # index relative to the page, and the page start
        self._index = 0
        self._offset = 0
        self.state = SelectionState.NAVIGATING

    @property
    def current(self) -> int:
        """Absolute index of the highlighted entry."""
        return self._offset + self._index

    def select(self, initial: Optional[E] = None) -> Optional[E]:
        """
        Show the menu and wait for a selection.

        Returns:
            The selected entry, or None if a command exited the menu.

        Raises:
            UserInterrupted: On ESC, Ctrl-C or Ctrl-D with no command bound.
            EndOfInput: If the input ends first.
        """
        self.state = SelectionState.NAVIGATING
        self._move_to_entry(initial)

        lines = [self._prompt_line()]
        if self._paged:
            lines.append(self._more_entries_line())
        lines.extend(self._entry_line(i) for i in range(self._shown))
        if self._paged:
            lines.append(self._more_entries_line())
        lines.append(self._selection_line())
        self._buffer.add_all(lines)

        try:
            return self._loop()
        except (EndOfInput, UserInterrupted):
            self.state = SelectionState.FAILED
            raise

    def _loop(self) -> Optional[E]:
        while True:
            c = self._terminal.read()
            if c is None:
                raise EndOfInput("End of input")
            cp = c.as_integer()
            if cp == CR:
                c = Unicode.LF
                cp = LF

            if self._handle_digit(cp) or self._handle_navigation(c):
                continue

            cmd = self._command_map.get(c)
            if cmd is None:
                if cp in (ESC, ABR, EOF):
                    raise UserInterrupted(f"User interrupted: {c.as_string()}")
                self._print_extra_line(f" --- Not found: {c.as_string()}")
                continue

            self._clear_extra_lines()
            current = self._entries[self.current]
            reaction = cmd.invoke(current, CallbackPrinter(self._print_extra_line))
            logger.debug("Command %s on entry %d: %s", cmd.name, self.current, reaction.name)

            if reaction is Reaction.SELECT:
                self.state = SelectionState.SELECTED
                return current
            if reaction is Reaction.EXIT:
                self.state = SelectionState.EXITED
                return None
            if reaction is Reaction.NONE:
                self._buffer.update(self._first_entry_line + self._index, self._entry_line(self._index))
            elif reaction is Reaction.UPDATE_KEEP_ITEM:
                self._move_to_entry(current)
                self._redraw_page()
            elif reaction is Reaction.UPDATE_KEEP_OFFSET:
                self._buffer.update_all(
                    self._first_entry_line, [self._entry_line(i) for i in range(self._shown)])

    # -- Input handling --

    def _handle_digit(self, cp: int) -> bool:
        if not ord("0") <= cp <= ord("9"):
            self._digits = ""
            self._digits_time = 0.0
            self._buffer.update(self._selection_line_index, self._selection_line())
            return False

        now = self._clock()
        if now > self._digits_time + self._config.digit_timeout:
            self._digits = ""
        self._digits_time = now

        digit = chr(cp)
        pos = int(self._digits + digit)
        if self._digits and pos > len(self._entries):
            # Ran past the last entry, start over from this digit.
            pos = int(digit)
        self._digits = str(pos) if pos > 0 else ""

        if pos > 0:
            self._update_selection(min(pos, len(self._entries)) - 1)
        self._buffer.update(self._selection_line_index, self._selection_line())
        return True

    def _handle_navigation(self, c: Char) -> bool:
        if not isinstance(c, Control):
            return False
        last = len(self._entries) - 1
        if c == Control.HOME:
            self._update_selection(0)
        elif c == Control.END:
            self._update_selection(last)
        elif c == Control.UP:
            self._update_selection(max(0, self.current - 1))
        elif c == Control.DOWN:
            self._update_selection(min(last, self.current + 1))
        elif c == Control.LEFT:
            self._update_selection(max(0, self.current - self._shown))
        elif c == Control.RIGHT:
            self._update_selection(min(last, self.current + self._shown))
        else:
            return False
        return True

    # -- Selection state --

    def _update_selection(self, absolute: int) -> None:
        if absolute == self.current:
            return
        offset = self._page_size * (absolute // self._page_size) if self._paged else 0
        index = absolute - offset
        if offset != self._offset:
            self._offset = offset
            self._index = index
            self._redraw_page()
        else:
            old = self._index
            self._index = index
            with self._terminal.lock:
                self._buffer.update(self._first_entry_line + old, self._entry_line(old))
                self._buffer.update(self._first_entry_line + index, self._entry_line(index))

    def _move_to_entry(self, entry: Optional[E]) -> None:
        if entry is None:
            return
        try:
            absolute = list(self._entries).index(entry)
        except ValueError:
            return
        self._offset = self._page_size * (absolute // self._page_size) if self._paged else 0
        self._index = absolute - self._offset

    # -- Rendering --

    @property
    def _first_entry_line(self) -> int:
        return 2 if self._paged else 1

    @property
    def _selection_line_index(self) -> int:
        return (3 if self._paged else 1) + self._shown

    def _redraw_page(self) -> None:
        lines = []
        if self._paged:
            lines.append(self._more_entries_line())
        lines.extend(self._entry_line(i) for i in range(self._shown))
        if self._paged:
            lines.append(self._more_entries_line())
        self._buffer.update_all(1, lines)

    def _print_extra_line(self, line: Optional[str]) -> None:
        self._buffer.add(line or "")
        self._extra_lines += 1

    def _clear_extra_lines(self) -> None:
        if self._extra_lines > 0:
            self._buffer.clear_last(self._extra_lines)
        self._extra_lines = 0

    def _prompt_line(self) -> str:
        visible = ", ".join(f"{cmd.key_name}={cmd.name}" for cmd in self._commands if not cmd.hidden)
        return f"{self._prompt} [{visible}]"

    def _selection_line(self) -> str:
        keys = ",".join(cmd.key_name for cmd in self._commands if not cmd.hidden)
        return f"Your choice (1..{len(self._entries)} or {keys}): {self._digits}"

    def _more_entries_line(self) -> str:
        before = self._offset
        after = max(0, len(self._entries) - self._offset - self._page_size)
        pages_before = self._offset // self._page_size
        pages_after = math.ceil(after / self._page_size)
        see_before = left_just(
            f"<-- (pages: {pages_before}, items: {before})" if before else "", 38)
        see_after = right_just(
            f"(pages: {pages_after}, items: {after}) -->" if after else "", 38)
        return f"  {see_before}{see_after}  "

    def _entry_line(self, index: int) -> str:
        absolute = index + self._offset
        if absolute >= len(self._entries):
            return ""
        selected = index == self._index

        idx_size = 2
        for limit in (9, 99, 999):
            if len(self._entries) > limit:
                idx_size += 1

        entry = self._entries[absolute]
        bg = Style.BG_BLUE if selected else Style.BG_DEFAULT
        line = f"{bg if selected else ''}{right_just(str(absolute + 1), idx_size)} {self._printer(entry, bg)}"
        width = printable_width(line)
        if width > self._line_width:
            line = clip_width(line, self._line_width)
        elif width < self._line_width and selected:
            line += f"{Style.CLEAR}{bg}{' ' * (self._line_width - width)}"
        return f"{line}{Style.CLEAR}"

    def _default_page_size(self) -> int:
        if self._config.page_size is not None:
            return self._config.page_size
        if self._terminal.tty.is_interactive():
            try:
                rows = self._terminal.size().rows
            except NonInteractive:
                return 20
            # 2 lines above, 2 below, the margin and some extra
            return max(5, min(35, rows - 12))
        return 20

    def _default_line_width(self) -> int:
        try:
            return self._terminal.size().cols
        except NonInteractive:
            return self._config.default_width
