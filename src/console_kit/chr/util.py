"""Text utilities - measuring, clipping and padding strings with escape codes."""

from __future__ import annotations

from console_kit.chr.char import CR, LF, NBSP, TAB, Control
from console_kit.chr.stream import iterate


def printable_width(text: str) -> int:
    """Number of terminal columns text takes up (escape codes take none)."""
    return sum(c.printable_width() for c in iterate(text, lenient=True))


def expand_tabs(text: str, tab_width: int = 4, offset: int = 0) -> str:
    """
    Replace tabs with spaces up to the next tab stop.

    Args:
        text: Single line of text.
        tab_width: Distance between tab stops.
        offset: Column where text starts on screen.
    """
    result: list[str] = []
    col = offset
    for c in iterate(text, lenient=True):
        if c.as_integer() == TAB:
            spaces = tab_width - (col % tab_width)
            result.append(" " * spaces)
            col += spaces
        else:
            result.append(str(c))
            col += c.printable_width()
    return "".join(result)


def strip_non_printable(text: str) -> str:
    """Remove escape sequences and control characters, keeping newlines."""
    result: list[str] = []
    for c in iterate(text, lenient=True):
        cp = c.as_integer()
        if cp in (CR, LF, NBSP) or (cp >= 0 and str(c).isprintable()):
            result.append(str(c))
    return "".join(result)


def clip_width(text: str, width: int) -> str:
    """
    Clip text to at most width columns.

    Escape codes are kept, so a style that was switched on before the cut
    is still switched on after it. Wide characters that would only half
    fit are dropped.
    """
    if width <= 0:
        return ""
    result: list[str] = []
    used = 0
    for c in iterate(text, lenient=True):
        w = c.printable_width()
        if used + w > width:
            break
        result.append(str(c))
        used += w
    return "".join(result)


def left_just(text: str, width: int, fill: str = " ") -> str:
    """Pad text on the right to reach width columns."""
    current = printable_width(text)
    if current >= width:
        return text
    return text + fill * (width - current)


def right_just(text: str, width: int, fill: str = " ") -> str:
    """Pad text on the left to reach width columns."""
    current = printable_width(text)
    if current >= width:
        return text
    return fill * (width - current) + text


def alt(ch: str) -> Control:
    """The key sent for alt + ch."""
    return Control.alt(ch)
