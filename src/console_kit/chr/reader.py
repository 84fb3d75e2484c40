"""Decode a raw terminal byte stream into characters and key sequences."""

from __future__ import annotations

import io
import os
import select
from typing import BinaryIO, Iterator, Optional

from console_kit.chr.char import ESC, Char, Control, Unicode, escape
from console_kit.chr.style import Style
from console_kit.errors import DecodeError


def _is_upper(ch: str) -> bool:
    return "A" <= ch <= "Z"


def _is_letter(ch: str) -> bool:
    return "A" <= ch <= "Z" or "a" <= ch <= "z"


def _is_digit(ch: str) -> bool:
    return "0" <= ch <= "9"


class CharReader:
    """
    Reads one character or control sequence at a time.

    Bytes are pulled one by one, so the reader never consumes input past
    the character it returns (apart from the single byte it has to peek at
    after a lone ESC, which is kept for the next read).

    Recognised input:
        - UTF-8 encoded codepoints
        - CSI sequences: ESC [ <digits and ;> <letter or ~>
        - SS3 sequences: ESC O <A-Z>
        - Meta/alt keys: ESC <letter or digit>
        - A lone ESC, or ESC ESC, as the escape key
    """

    def __init__(self, stream: BinaryIO) -> None:
        self._stream = stream
        self._pending = b""

    @property
    def buffered(self) -> int:
        """Number of bytes read from the stream but not yet returned."""
        return len(self._pending)

    def discard(self) -> None:
        """Forget any peeked-at byte."""
        self._pending = b""

    def ready(self) -> bool:
        """Whether a read would return without blocking (best effort)."""
        if self._pending:
            return True
        try:
            fd = self._stream.fileno()
        except (AttributeError, OSError, ValueError):
            # In-memory streams never block.
            return True
        try:
            readable, _, _ = select.select([fd], [], [], 0)
        except (OSError, ValueError):
            return True
        if readable:
            return True
        if isinstance(self._stream, io.BufferedReader):
            # Bytes already in the buffer are invisible to select.
            return bool(self._peek_buffered(fd))
        return False

    def _peek_buffered(self, fd: int) -> bytes:
        blocking = os.get_blocking(fd)
        os.set_blocking(fd, False)
        try:
            return self._stream.peek(1)
        except BlockingIOError:
            return b""
        finally:
            os.set_blocking(fd, blocking)

    def read(self) -> Optional[Char]:
        """
        Read the next character.

        Returns:
            The character, or None on a clean end of stream.

        Raises:
            DecodeError: On invalid UTF-8, an invalid escape sequence, or
                when the stream ends in the middle of either.
        """
        b = self._next()
        if b is None:
            return None
        if b == ESC:
            return self._read_escape()
        return self._read_utf8(b)

    def __iter__(self) -> Iterator[Char]:
        while (char := self.read()) is not None:
            yield char

    def _next(self) -> Optional[int]:
        if self._pending:
            b = self._pending[0]
            self._pending = self._pending[1:]
            return b
        data = self._stream.read(1)
        if not data:
            return None
        return data[0]

    def _expect(self) -> int:
        b = self._next()
        if b is None:
            raise DecodeError("Unexpected end of stream.")
        return b

    def _read_utf8(self, lead: int) -> Unicode:
        if lead < 0x80:
            return Unicode(lead)
        if 0xC2 <= lead <= 0xDF:
            remaining = 1
        elif 0xE0 <= lead <= 0xEF:
            remaining = 2
        elif 0xF0 <= lead <= 0xF4:
            remaining = 3
        else:
            raise DecodeError(f"Invalid UTF-8 lead byte: 0x{lead:02x}")
        data = bytearray([lead])
        for _ in range(remaining):
            data.append(self._expect())
        try:
            text = bytes(data).decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecodeError(f"Invalid UTF-8 sequence: {bytes(data)!r}") from e
        return Unicode(ord(text))

    def _read_escape(self) -> Char:
        if not self.ready():
            return Unicode.ESC
        b = self._next()
        if b is None or b == ESC:
            return Unicode.ESC
        ch = chr(b)
        if ch == "[":
            return self._read_csi()
        if ch == "O":
            seq = "\x1bO" + chr(self._expect())
            if _is_upper(seq[-1]):
                return Control(seq)
            raise DecodeError(f"Invalid escape sequence: {escape(seq)}")
        if _is_letter(ch) or _is_digit(ch):
            return Control("\x1b" + ch)
        self._pending = bytes([b]) + self._pending
        return Unicode.ESC

    def _read_csi(self) -> Control:
        seq = "\x1b["
        ch = chr(self._expect())
        seq += ch
        if _is_upper(ch):
            return Control(seq)
        while _is_digit(ch) or ch == ";":
            ch = chr(self._expect())
            seq += ch
        if ch == "m":
            return Style.parse(seq)
        if ch == "~" or _is_letter(ch):
            return Control(seq)
        raise DecodeError(f"Invalid escape sequence: {escape(seq)}")
