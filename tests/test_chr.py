"""Tests for the character model, key decoding and styles."""

import io
import os
import sys

import pytest

from console_kit.chr import (
    CharReader,
    Control,
    Key,
    Style,
    Unicode,
    clip_width,
    expand_tabs,
    iterate,
    left_just,
    printable_width,
    right_just,
    strip_non_printable,
)
from console_kit.errors import DecodeError


def read_all(data: bytes) -> list:
    return list(CharReader(io.BytesIO(data)))


class TestUnicode:
    """Tests for single codepoints."""

    def test_as_string(self) -> None:
        assert Unicode.of("a").as_string() == "'a'"
        assert Unicode.ESC.as_string() == "<ESC>"
        assert Unicode.DEL.as_string() == "<DEL>"
        assert Unicode.NBSP.as_string() == "<nbsp>"
        assert Unicode.TAB.as_string() == "'\\t'"
        assert Unicode.CR.as_string() == "'\\r'"
        assert Unicode(0x01).as_string() == "'\\001'"
        assert Unicode.of("'").as_string() == "'\\''"

    def test_widths(self) -> None:
        assert Unicode.of("a").printable_width() == 1
        assert Unicode.of("日").printable_width() == 2
        assert Unicode(0x200B).printable_width() == 0
        assert Unicode.ESC.printable_width() == 0
        assert Unicode(0x85).printable_width() == 0
        assert Unicode.NBSP.printable_width() == 1

    def test_supplementary_plane(self) -> None:
        c = Unicode(0x2A6B2)
        assert c.printable_width() == 2
        assert c.length() == 2
        assert Unicode.of("a").length() == 1
        assert read_all(str(c).encode("utf-8")) == [c]

    def test_keys(self) -> None:
        assert Unicode.CR.key is Key.ENTER
        assert Unicode.LF.key is Key.ENTER
        assert Unicode.DEL.key is Key.BACKSPACE
        assert Unicode.ESC.key is Key.ESCAPE
        assert Unicode.of("a").key is None

    def test_invalid_codepoint(self) -> None:
        with pytest.raises(ValueError):
            Unicode(0x110000)
        with pytest.raises(ValueError):
            Unicode.of("ab")


class TestControl:
    """Tests for control sequences."""

    def test_aliases(self) -> None:
        assert Control("\x1bOA") == Control.UP
        assert Control("\x1b[H") == Control.HOME
        assert Control("\x1bOH") == Control.HOME
        assert Control("\x1b[8~") == Control.END

    def test_as_string(self) -> None:
        assert Control.UP.as_string() == "<up>"
        assert Control.CTRL_LEFT.as_string() == "<C-left>"
        assert Control.DELETE.as_string() == "<delete>"
        assert Control.PAGE_UP.as_string() == "<pg-up>"
        assert Control.F1.as_string() == "<F1>"
        assert Control.CURSOR_ERASE.as_string() == "<cursor-erase>"
        assert Control.alt("x").as_string() == "<M-x>"
        assert Control.alt("X").as_string() == "<M-S-x>"
        assert Control.cursor_up(3).as_string() == "\\033[3A"

    def test_cursor_movement(self) -> None:
        assert str(Control.cursor_up(2)) == "\x1b[2A"
        assert str(Control.cursor_down(2)) == "\x1b[2B"
        assert str(Control.cursor_right(4)) == "\x1b[4C"
        assert str(Control.cursor_left(1)) == "\x1b[1D"
        assert str(Control.cursor_set_pos(3, 7)) == "\x1b[3;7H"

    def test_no_width(self) -> None:
        assert Control.UP.printable_width() == 0
        assert Control.UP.as_integer() == -1
        assert Control.UP.key is Key.UP


class TestStyle:
    """Tests for SGR style combination."""

    def test_sequence(self) -> None:
        assert str(Style(Style.RED, Style.BOLD)) == "\x1b[01;31m"
        assert str(Style.CLEAR) == "\x1b[00m"
        assert Style(Style.RED, Style.BOLD).as_string() == "<style 1;31>"

    def test_last_color_wins(self) -> None:
        assert Style(31, 32).codes == (32,)
        assert Style(41, 44, 31).codes == (31, 44)
        assert Style(31, 91).codes == (91,)

    def test_unset_cancels_set(self) -> None:
        assert Style(Style.BOLD, Style.UNSET_BOLD).codes == (21,)
        assert Style(Style.UNSET_UNDERLINE, Style.UNDERLINE).codes == (4,)

    def test_clear_drops_earlier_codes(self) -> None:
        assert Style(1, 31, 0, 4).codes == (0, 4)

    def test_add(self) -> None:
        assert Style.RED + Style.BOLD == Style(1, 31)
        assert Style.RED + 4 == Style(4, 31)

    def test_wrap(self) -> None:
        assert Style.RED.wrap("x") == "\x1b[31mx\x1b[00m"

    def test_parse(self) -> None:
        assert Style.parse("\x1b[1;31m") == Style(1, 31)
        assert Style.parse("\x1b[m") == Style.CLEAR

    def test_parse_invalid(self) -> None:
        with pytest.raises(DecodeError):
            Style.parse("\x1b[1;am")
        with pytest.raises(DecodeError):
            Style.parse("\x1b[38;5;1m")


class TestCharReader:
    """Tests for decoding a byte stream."""

    def test_plain_and_utf8(self) -> None:
        assert read_all("aæ😀".encode("utf-8")) == [
            Unicode.of("a"), Unicode(0xE6), Unicode(0x1F600)]

    def test_control_sequences(self) -> None:
        chars = read_all(b"\x1b[A\x1bOB\x1b[1;5C\x1b[3~\x1bx\x1b[01;31m")
        assert chars == [
            Control.UP,
            Control.DOWN,
            Control.CTRL_RIGHT,
            Control.DELETE,
            Control.alt("x"),
            Style(1, 31),
        ]

    def test_lone_escape(self) -> None:
        assert read_all(b"\x1b") == [Unicode.ESC]
        assert read_all(b"\x1b\x1b") == [Unicode.ESC]
        assert read_all(b"\x1b a") == [Unicode.ESC, Unicode.of(" "), Unicode.of("a")]
        assert read_all(b"\x1b\r") == [Unicode.ESC, Unicode.CR]

    def test_end_of_stream(self) -> None:
        reader = CharReader(io.BytesIO(b"a"))
        assert reader.read() == Unicode.of("a")
        assert reader.read() is None

    def test_invalid_utf8(self) -> None:
        with pytest.raises(DecodeError):
            read_all(b"\xff")
        with pytest.raises(DecodeError, match="Unexpected end of stream"):
            read_all(b"\xc3")

    def test_invalid_escape(self) -> None:
        with pytest.raises(DecodeError):
            read_all(b"\x1b[1!")
        with pytest.raises(DecodeError):
            read_all(b"\x1bO1")
        with pytest.raises(DecodeError):
            read_all(b"\x1b[12")

    def test_ready(self) -> None:
        reader = CharReader(io.BytesIO(b""))
        assert reader.ready() is True
        assert reader.read() is None

    @pytest.mark.skipif(sys.platform == "win32", reason="select needs a socket on Windows")
    def test_buffered_pipe(self) -> None:
        r, w = os.pipe()
        try:
            os.write(w, b"\x1b[Aab")
            with os.fdopen(r, "rb") as stream:
                reader = CharReader(stream)
                assert reader.read() == Control.UP
                assert reader.ready() is True
                assert reader.read() == Unicode.of("a")
                assert reader.read() == Unicode.of("b")
                assert reader.ready() is False
        finally:
            os.close(w)


class TestIterate:
    """Tests for splitting strings."""

    def test_keeps_sequences_whole(self) -> None:
        assert list(iterate("a\x1b[31mb")) == [Unicode.of("a"), Style.RED, Unicode.of("b")]

    def test_strict(self) -> None:
        with pytest.raises(DecodeError):
            list(iterate("a\x1b[1!b"))

    def test_lenient(self) -> None:
        chars = list(iterate("a\x1b[1!b", lenient=True))
        assert chars == [
            Unicode.of("a"),
            Unicode.ESC,
            Unicode.of("["),
            Unicode.of("1"),
            Unicode.of("!"),
            Unicode.of("b"),
        ]

    def test_lone_surrogate(self) -> None:
        with pytest.raises(DecodeError):
            list(iterate("a\ud800b"))
        assert list(iterate("a\ud800b", lenient=True)) == [Unicode.of("a"), Unicode.of("b")]
        assert printable_width("\ud800") == 0


class TestTextUtil:
    """Tests for measuring and padding text."""

    def test_printable_width(self) -> None:
        assert printable_width("\x1b[01;31mabc\x1b[00m") == 3
        assert printable_width("日本") == 4
        assert printable_width("a\u200bb") == 2

    def test_expand_tabs(self) -> None:
        assert expand_tabs("a\tb") == "a   b"
        assert expand_tabs("ab\tc", offset=1) == "ab c"
        assert expand_tabs("\x1b[31ma\tb", tab_width=2) == "\x1b[31ma b"

    def test_clip_width(self) -> None:
        assert clip_width("\x1b[31mabcdef", 3) == "\x1b[31mabc"
        assert clip_width("日本", 3) == "日"
        assert clip_width("abc", 0) == ""

    def test_justify(self) -> None:
        assert left_just("ab", 4) == "ab  "
        assert right_just("ab", 4) == "  ab"
        assert left_just("\x1b[31mab", 3) == "\x1b[31mab "
        assert right_just("abcde", 3) == "abcde"

    def test_strip_non_printable(self) -> None:
        assert strip_non_printable("a\x1b[31mb\x07c\n") == "abc\n"
