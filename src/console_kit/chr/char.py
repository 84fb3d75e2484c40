"""Keystroke and output characters: single codepoints and control sequences."""

from __future__ import annotations

import unicodedata
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Optional

# ASCII control codepoints.
NUL = 0x00
ABR = 0x03  # Ctrl-C
EOF = 0x04  # Ctrl-D
BEL = 0x07
BS = 0x08
TAB = 0x09
LF = 0x0A
VT = 0x0B
FF = 0x0C
CR = 0x0D
ESC = 0x1B
FS = 0x1C
GS = 0x1D
RS = 0x1E
US = 0x1F
# What the backspace key sends on most terminals.
DEL = 0x7F
NBSP = 0xA0


class Key(Enum):
    """Named keys. The value is the short display name."""
    UP = "<up>"
    DOWN = "<down>"
    RIGHT = "<right>"
    LEFT = "<left>"
    CTRL_UP = "<C-up>"
    CTRL_DOWN = "<C-down>"
    CTRL_RIGHT = "<C-right>"
    CTRL_LEFT = "<C-left>"
    DPAD_MID = "<dpad-mid>"
    HOME = "<home>"
    END = "<end>"
    INSERT = "<insert>"
    DELETE = "<delete>"
    PAGE_UP = "<pg-up>"
    PAGE_DOWN = "<pg-down>"
    F1 = "<F1>"
    F2 = "<F2>"
    F3 = "<F3>"
    F4 = "<F4>"
    F5 = "<F5>"
    F6 = "<F6>"
    F7 = "<F7>"
    F8 = "<F8>"
    F9 = "<F9>"
    ENTER = "<enter>"
    BACKSPACE = "<backspace>"
    ESCAPE = "<escape>"
    TAB = "<tab>"


class Char(ABC):
    """
    A character-like unit read from or written to the terminal.

    Either a single Unicode codepoint, or a control sequence (cursor
    movement, function key, style) that changes how the terminal behaves
    without taking up any space on screen.
    """

    @abstractmethod
    def as_integer(self) -> int:
        """The codepoint, or -1 if this is not a single codepoint."""

    @abstractmethod
    def as_string(self) -> str:
        """Human readable representation, e.g. '<ESC>' or '<up>'."""

    @abstractmethod
    def printable_width(self) -> int:
        """Number of terminal columns taken up when printed."""

    @abstractmethod
    def length(self) -> int:
        """Number of UTF-16 code units needed to hold the character."""

    @property
    @abstractmethod
    def key(self) -> Optional[Key]:
        """The named key this character represents, if any."""


def codepoint_width(cp: int) -> int:
    """
    Terminal column width of a codepoint.

    - C0/C1 control characters and DEL: 0
    - Unicode format characters (e.g. zero width space): 0
    - Supplementary planes (>= 0x10000): 2, since those are surrogate pairs
    - East Asian wide and full-width characters: 2
    - Everything else: 1
    """
    if cp == NBSP:
        return 1
    if cp < 0x20 or 0x7F <= cp < 0xA0:
        return 0
    if cp >= 0x10000:
        return 2
    ch = chr(cp)
    if unicodedata.category(ch) == "Cf":
        return 0
    if unicodedata.east_asian_width(ch) in ("W", "F"):
        return 2
    return 1


_UNICODE_NAMES: dict[int, str] = {
    NUL: "<NUL>",
    ABR: "<ABR>",
    EOF: "<EOF>",
    BEL: "<BEL>",
    BS: "<BS>",
    VT: "<VT>",
    ESC: "<ESC>",
    FS: "<FS>",
    GS: "<GS>",
    RS: "<RS>",
    US: "<US>",
    DEL: "<DEL>",
    NBSP: "<nbsp>",
}

_UNICODE_ESCAPES: dict[int, str] = {
    TAB: "\\t",
    LF: "\\n",
    FF: "\\f",
    CR: "\\r",
    ord('"'): '\\"',
    ord("'"): "\\'",
    ord("\\"): "\\\\",
}

_UNICODE_KEYS: dict[int, Key] = {
    CR: Key.ENTER,
    LF: Key.ENTER,
    DEL: Key.BACKSPACE,
    BS: Key.BACKSPACE,
    ESC: Key.ESCAPE,
    TAB: Key.TAB,
}


@dataclass(frozen=True)
class Unicode(Char):
    """A single Unicode codepoint."""
    cp: int

    NBSP: ClassVar[Unicode]
    ESC: ClassVar[Unicode]
    CR: ClassVar[Unicode]
    LF: ClassVar[Unicode]
    TAB: ClassVar[Unicode]
    DEL: ClassVar[Unicode]

    def __post_init__(self) -> None:
        if not 0 <= self.cp <= 0x10FFFF:
            raise ValueError(f"Invalid codepoint: {self.cp:#x}")

    @classmethod
    def of(cls, ch: str) -> Unicode:
        """Create from a one character string."""
        if len(ch) != 1:
            raise ValueError(f"Expected a single character, got {ch!r}")
        return cls(ord(ch))

    def as_integer(self) -> int:
        return self.cp

    def as_string(self) -> str:
        if self.cp in _UNICODE_NAMES:
            return _UNICODE_NAMES[self.cp]
        if self.cp in _UNICODE_ESCAPES:
            text = _UNICODE_ESCAPES[self.cp]
        elif self.cp < 0x20:
            text = f"\\{self.cp:03o}"
        elif not chr(self.cp).isprintable():
            if self.cp < 0x10000:
                text = f"\\u{self.cp:04x}"
            else:
                offset = self.cp - 0x10000
                text = f"\\u{0xD800 + (offset >> 10):04x}\\u{0xDC00 + (offset & 0x3FF):04x}"
        else:
            text = chr(self.cp)
        return f"'{text}'"

    def printable_width(self) -> int:
        return codepoint_width(self.cp)

    def length(self) -> int:
        return 2 if self.cp >= 0x10000 else 1

    @property
    def key(self) -> Optional[Key]:
        return _UNICODE_KEYS.get(self.cp)

    def __str__(self) -> str:
        return chr(self.cp)


Unicode.NBSP = Unicode(NBSP)
Unicode.ESC = Unicode(ESC)
Unicode.CR = Unicode(CR)
Unicode.LF = Unicode(LF)
Unicode.TAB = Unicode(TAB)
Unicode.DEL = Unicode(DEL)


# Alternative encodings of the same key, mapped to the canonical sequence.
_CONTROL_ALIASES: dict[str, str] = {
    "\x1bOA": "\x1b[A",
    "\x1bOB": "\x1b[B",
    "\x1bOC": "\x1b[C",
    "\x1bOD": "\x1b[D",
    "\x1bOH": "\x1b[1~",
    "\x1bOF": "\x1b[4~",
    "\x1b[H": "\x1b[1~",
    "\x1b[F": "\x1b[4~",
    "\x1b[7~": "\x1b[1~",
    "\x1b[8~": "\x1b[4~",
}

_CONTROL_KEYS: dict[str, Key] = {
    "\x1b[A": Key.UP,
    "\x1b[B": Key.DOWN,
    "\x1b[C": Key.RIGHT,
    "\x1b[D": Key.LEFT,
    "\x1b[1;5A": Key.CTRL_UP,
    "\x1b[1;5B": Key.CTRL_DOWN,
    "\x1b[1;5C": Key.CTRL_RIGHT,
    "\x1b[1;5D": Key.CTRL_LEFT,
    "\x1b[E": Key.DPAD_MID,
    "\x1b[1~": Key.HOME,
    "\x1b[2~": Key.INSERT,
    "\x1b[3~": Key.DELETE,
    "\x1b[4~": Key.END,
    "\x1b[5~": Key.PAGE_UP,
    "\x1b[6~": Key.PAGE_DOWN,
    "\x1bOP": Key.F1,
    "\x1bOQ": Key.F2,
    "\x1bOR": Key.F3,
    "\x1bOS": Key.F4,
    "\x1b[15~": Key.F5,
    "\x1b[17~": Key.F6,
    "\x1b[18~": Key.F7,
    "\x1b[19~": Key.F8,
    "\x1b[20~": Key.F9,
}

_CONTROL_NAMES: dict[str, str] = {
    "\x1b[K": "<cursor-erase>",
    "\x1b[s": "<cursor-save>",
    "\x1b[u": "<cursor-restore>",
}


def escape(text: str) -> str:
    """Escape control characters in text for display."""
    parts: list[str] = []
    for ch in text:
        if ch == "\x1b":
            parts.append("\\033")
        elif ord(ch) < 0x20 or ord(ch) == DEL:
            parts.append(f"\\{ord(ch):03o}")
        else:
            parts.append(ch)
    return "".join(parts)


@dataclass(frozen=True)
class Control(Char):
    """
    A terminal control sequence, e.g. a cursor key or cursor movement.

    Sequences that different terminals send for the same key (like the
    application mode arrows 'ESC O A') are normalised, so comparing a
    decoded key against the class constants just works.
    """
    sequence: str

    UP: ClassVar[Control]
    DOWN: ClassVar[Control]
    RIGHT: ClassVar[Control]
    LEFT: ClassVar[Control]
    CTRL_UP: ClassVar[Control]
    CTRL_DOWN: ClassVar[Control]
    CTRL_RIGHT: ClassVar[Control]
    CTRL_LEFT: ClassVar[Control]
    CURSOR_ERASE: ClassVar[Control]
    CURSOR_SAVE: ClassVar[Control]
    CURSOR_RESTORE: ClassVar[Control]
    DPAD_MID: ClassVar[Control]
    INSERT: ClassVar[Control]
    DELETE: ClassVar[Control]
    HOME: ClassVar[Control]
    END: ClassVar[Control]
    PAGE_UP: ClassVar[Control]
    PAGE_DOWN: ClassVar[Control]
    F1: ClassVar[Control]
    F2: ClassVar[Control]
    F3: ClassVar[Control]
    F4: ClassVar[Control]
    F5: ClassVar[Control]
    F6: ClassVar[Control]
    F7: ClassVar[Control]
    F8: ClassVar[Control]
    F9: ClassVar[Control]

    def __post_init__(self) -> None:
        object.__setattr__(self, "sequence", _CONTROL_ALIASES.get(self.sequence, self.sequence))

    @classmethod
    def cursor_set_pos(cls, line: int, col: int = 0) -> Control:
        return cls(f"\x1b[{line};{col}H")

    @classmethod
    def cursor_up(cls, num: int) -> Control:
        return cls(f"\x1b[{num}A")

    @classmethod
    def cursor_down(cls, num: int) -> Control:
        return cls(f"\x1b[{num}B")

    @classmethod
    def cursor_right(cls, num: int) -> Control:
        return cls(f"\x1b[{num}C")

    @classmethod
    def cursor_left(cls, num: int) -> Control:
        return cls(f"\x1b[{num}D")

    @classmethod
    def alt(cls, ch: str) -> Control:
        """The Meta/alt modified key, as sent by most terminals."""
        if len(ch) != 1:
            raise ValueError(f"Expected a single character, got {ch!r}")
        return cls("\x1b" + ch)

    def as_integer(self) -> int:
        return -1

    def as_string(self) -> str:
        key = _CONTROL_KEYS.get(self.sequence)
        if key is not None:
            return key.value
        if self.sequence in _CONTROL_NAMES:
            return _CONTROL_NAMES[self.sequence]
        if len(self.sequence) == 2 and self.sequence[1].isascii() and self.sequence[1].isalnum():
            if self.sequence[1].isupper():
                return f"<M-S-{self.sequence[1].lower()}>"
            return f"<M-{self.sequence[1]}>"
        return escape(self.sequence)

    def printable_width(self) -> int:
        return 0

    def length(self) -> int:
        return len(self.sequence)

    @property
    def key(self) -> Optional[Key]:
        return _CONTROL_KEYS.get(self.sequence)

    def __str__(self) -> str:
        return self.sequence


Control.UP = Control("\x1b[A")
Control.DOWN = Control("\x1b[B")
Control.RIGHT = Control("\x1b[C")
Control.LEFT = Control("\x1b[D")
Control.CTRL_UP = Control("\x1b[1;5A")
Control.CTRL_DOWN = Control("\x1b[1;5B")
Control.CTRL_RIGHT = Control("\x1b[1;5C")
Control.CTRL_LEFT = Control("\x1b[1;5D")
Control.CURSOR_ERASE = Control("\x1b[K")
Control.CURSOR_SAVE = Control("\x1b[s")
Control.CURSOR_RESTORE = Control("\x1b[u")
Control.DPAD_MID = Control("\x1b[E")
Control.INSERT = Control("\x1b[2~")
Control.DELETE = Control("\x1b[3~")
Control.HOME = Control("\x1b[1~")
Control.END = Control("\x1b[4~")
Control.PAGE_UP = Control("\x1b[5~")
Control.PAGE_DOWN = Control("\x1b[6~")
Control.F1 = Control("\x1bOP")
Control.F2 = Control("\x1bOQ")
Control.F3 = Control("\x1bOR")
Control.F4 = Control("\x1bOS")
Control.F5 = Control("\x1b[15~")
Control.F6 = Control("\x1b[17~")
Control.F7 = Control("\x1b[18~")
Control.F8 = Control("\x1b[19~")
Control.F9 = Control("\x1b[20~")
