"""Editable line of text with a cursor."""

from __future__ import annotations

import re
from typing import Pattern

DEFAULT_DELIMITERS = re.compile(r"[-/.\s\\]")


class LineBuffer:
    """
    The text being edited, as a list of codepoints, and the cursor
    position in [0, len].

    All edits go through `splice`, which checks bounds and places the
    cursor; `move_to` clamps.
    """

    def __init__(self, text: str = "") -> None:
        self._chars: list[str] = list(text)
        self._cursor = len(self._chars)

    def __len__(self) -> int:
        return len(self._chars)

    def __str__(self) -> str:
        return "".join(self._chars)

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def before(self) -> str:
        return "".join(self._chars[:self._cursor])

    @property
    def after(self) -> str:
        return "".join(self._chars[self._cursor:])

    def splice(self, start: int, end: int, text: str = "") -> None:
        """Replace the codepoints in [start, end) with text; the cursor ends up after it."""
        if not 0 <= start <= end <= len(self._chars):
            raise IndexError(f"Invalid range [{start}, {end}) for length {len(self._chars)}")
        self._chars[start:end] = list(text)
        self._cursor = start + len(text)

    def move_to(self, position: int) -> None:
        self._cursor = max(0, min(position, len(self._chars)))

    # -- Edits relative to the cursor --

    def insert(self, text: str) -> None:
        self.splice(self._cursor, self._cursor, text)

    def delete_before(self, count: int = 1) -> None:
        start = max(0, self._cursor - count)
        self.splice(start, self._cursor)

    def delete_after(self, count: int = 1) -> None:
        self.splice(self._cursor, min(len(self._chars), self._cursor + count))

    def replace_before(self, text: str) -> None:
        self.splice(0, self._cursor, text)

    # -- Word boundaries --

    def word_start_before(self, delimiters: Pattern[str] = DEFAULT_DELIMITERS) -> int:
        """Start of the word before the cursor (skipping delimiters), or 0."""
        pos = self._cursor
        while pos > 0 and delimiters.fullmatch(self._chars[pos - 1]):
            pos -= 1
        while pos > 0 and not delimiters.fullmatch(self._chars[pos - 1]):
            pos -= 1
        return pos

    def word_end_after(self, delimiters: Pattern[str] = DEFAULT_DELIMITERS) -> int:
        """End of the word after the cursor (skipping delimiters), or len."""
        pos = self._cursor
        while pos < len(self._chars) and delimiters.fullmatch(self._chars[pos]):
            pos += 1
        while pos < len(self._chars) and not delimiters.fullmatch(self._chars[pos]):
            pos += 1
        return pos
