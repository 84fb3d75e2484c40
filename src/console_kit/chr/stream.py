"""Iterate over the characters of a string."""

from __future__ import annotations

import io
from typing import Iterator

from console_kit.chr.char import ESC, Char, Unicode
from console_kit.chr.reader import CharReader
from console_kit.errors import DecodeError


def iterate(text: str, lenient: bool = False) -> Iterator[Char]:
    """
    Split text into characters, keeping control sequences whole.

    Args:
        text: Text that may contain escape sequences.
        lenient: If True, a broken escape sequence yields a lone ESC and
            decoding resumes right after it, and lone surrogates are
            skipped. Otherwise DecodeError is raised.
    """
    raw = text.encode("utf-8", errors="surrogatepass")
    data = io.BytesIO(raw)
    reader = CharReader(data)
    while True:
        mark = data.tell() - reader.buffered
        try:
            char = reader.read()
        except DecodeError:
            if not lenient:
                raise
            reader.discard()
            if raw[mark] == ESC:
                data.seek(mark + 1)
                yield Unicode.ESC
            else:
                # Lone surrogates are dropped along with their trailing bytes.
                end = mark + 1
                while end < len(raw) and 0x80 <= raw[end] <= 0xBF:
                    end += 1
                data.seek(end)
            continue
        if char is None:
            return
        yield char
