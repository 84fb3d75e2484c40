"""SGR text styles: colors and attributes."""

from __future__ import annotations

from typing import ClassVar, Iterable, Union

from console_kit.chr.char import Control, escape
from console_kit.errors import DecodeError


def _combine(values: Iterable[Union[int, "Style"]]) -> tuple[int, ...]:
    """
    Merge SGR codes.

    A 0 (clear) drops everything before it. Attribute codes 1-9 cancel
    their unset twin (code + 20) and the other way around. The last
    foreground and the last background color win.
    """
    mods: set[int] = set()
    fg = bg = None
    for value in values:
        codes = value.codes if isinstance(value, Style) else (int(value),)
        for code in codes:
            if code < 0:
                raise ValueError(f"Invalid style code: {code}")
            if code == 0:
                mods = {0}
                fg = bg = None
            elif code < 10:
                mods.add(code)
                mods.discard(code + 20)
            elif code < 30:
                mods.add(code)
                mods.discard(code - 20)
            elif code < 40 or 90 <= code < 98:
                fg = code
            elif code < 50 or 100 <= code < 108:
                bg = code
            else:
                mods.add(code)
    if fg is not None:
        mods.add(fg)
    if bg is not None:
        mods.add(bg)
    return tuple(sorted(mods))


class Style(Control):
    """
    A combination of SGR codes, rendered as 'ESC[<c1>;<c2>...m'.

    Codes are written two digits wide and in ascending order, so equal
    styles always produce equal sequences.

    Example:
        >>> str(Style(Style.RED, Style.BOLD))
        '\\x1b[01;31m'
    """

    codes: tuple[int, ...]

    CLEAR: ClassVar[Style]
    DEFAULT: ClassVar[Style]
    BLACK: ClassVar[Style]
    RED: ClassVar[Style]
    GREEN: ClassVar[Style]
    YELLOW: ClassVar[Style]
    BLUE: ClassVar[Style]
    MAGENTA: ClassVar[Style]
    CYAN: ClassVar[Style]
    WHITE: ClassVar[Style]
    BG_DEFAULT: ClassVar[Style]
    BG_BLACK: ClassVar[Style]
    BG_RED: ClassVar[Style]
    BG_GREEN: ClassVar[Style]
    BG_YELLOW: ClassVar[Style]
    BG_BLUE: ClassVar[Style]
    BG_MAGENTA: ClassVar[Style]
    BG_CYAN: ClassVar[Style]
    BG_WHITE: ClassVar[Style]
    BOLD: ClassVar[Style]
    DIM: ClassVar[Style]
    UNDERLINE: ClassVar[Style]
    INVERT: ClassVar[Style]
    HIDDEN: ClassVar[Style]
    STROKE: ClassVar[Style]
    UNSET_BOLD: ClassVar[Style]
    UNSET_DIM: ClassVar[Style]
    UNSET_UNDERLINE: ClassVar[Style]
    UNSET_INVERT: ClassVar[Style]
    UNSET_HIDDEN: ClassVar[Style]
    UNSET_STROKE: ClassVar[Style]

    def __init__(self, *values: Union[int, Style]) -> None:
        codes = _combine(values)
        object.__setattr__(self, "codes", codes)
        object.__setattr__(self, "sequence", "\x1b[" + ";".join(f"{c:02d}" for c in codes) + "m")

    @classmethod
    def parse(cls, sequence: str) -> Style:
        """Parse an 'ESC[...m' sequence."""
        if not sequence.startswith("\x1b[") or not sequence.endswith("m"):
            raise DecodeError(f"Not a style sequence: {escape(sequence)}")
        body = sequence[2:-1]
        if not body:
            return cls(0)
        codes: list[int] = []
        for part in body.split(";"):
            if not part.isdigit():
                raise DecodeError(f"Invalid style sequence: {escape(sequence)}")
            codes.append(int(part))
        if 38 in codes or 48 in codes:
            raise DecodeError(f"Extended colors are not supported: {escape(sequence)}")
        return cls(*codes)

    def __add__(self, other: Union[int, Style]) -> Style:
        return Style(self, other)

    def wrap(self, text: str) -> str:
        """Return text in this style, followed by a reset."""
        return f"{self}{text}{Style.CLEAR}"

    def as_string(self) -> str:
        return "<style " + ";".join(str(c) for c in self.codes) + ">"

    def __repr__(self) -> str:
        return f"Style({', '.join(str(c) for c in self.codes)})"


Style.CLEAR = Style(0)
Style.DEFAULT = Style(39)
Style.BLACK = Style(30)
Style.RED = Style(31)
Style.GREEN = Style(32)
Style.YELLOW = Style(33)
Style.BLUE = Style(34)
Style.MAGENTA = Style(35)
Style.CYAN = Style(36)
Style.WHITE = Style(37)
Style.BG_DEFAULT = Style(49)
Style.BG_BLACK = Style(40)
Style.BG_RED = Style(41)
Style.BG_GREEN = Style(42)
Style.BG_YELLOW = Style(43)
Style.BG_BLUE = Style(44)
Style.BG_MAGENTA = Style(45)
Style.BG_CYAN = Style(46)
Style.BG_WHITE = Style(47)
Style.BOLD = Style(1)
Style.DIM = Style(2)
Style.UNDERLINE = Style(4)
Style.INVERT = Style(7)
Style.HIDDEN = Style(8)
Style.STROKE = Style(9)
Style.UNSET_BOLD = Style(21)
Style.UNSET_DIM = Style(22)
Style.UNSET_UNDERLINE = Style(24)
Style.UNSET_INVERT = Style(27)
Style.UNSET_HIDDEN = Style(28)
Style.UNSET_STROKE = Style(29)
