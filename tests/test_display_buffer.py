"""Tests for redrawing lines in place."""

import pytest

from console_kit.terminal import DisplayBuffer


@pytest.fixture
def buffer(console):
    buf = DisplayBuffer(console.terminal())
    buf.add("a", "b", "c")
    return buf


def written_after(console, mark: int) -> str:
    return console.output()[mark:]


class TestDisplayBuffer:
    """Tests for DisplayBuffer."""

    def test_add(self, console, buffer) -> None:
        assert console.output() == "a\r\nb\r\nc"
        assert buffer.count == 3
        assert buffer.lines == ["a", "b", "c"]

    def test_update_earlier_line(self, console, buffer) -> None:
        mark = len(console.output())
        buffer.update(0, "x")
        assert written_after(console, mark) == "\r\x1b[2A\x1b[Kx\r\x1b[2B\x1b[1C"
        assert buffer.lines == ["x", "b", "c"]

    def test_update_last_line(self, console, buffer) -> None:
        mark = len(console.output())
        buffer.update(2, "zz")
        assert written_after(console, mark) == "\r\x1b[Kzz"

    def test_update_unchanged(self, console, buffer) -> None:
        mark = len(console.output())
        buffer.update(1, "b")
        assert written_after(console, mark) == ""

    def test_update_is_one_write(self, console, buffer) -> None:
        writes = len(console.out.writes)
        buffer.update(0, "x")
        assert len(console.out.writes) == writes + 1

    def test_update_out_of_range(self, buffer) -> None:
        with pytest.raises(IndexError):
            buffer.update(3, "x")
        with pytest.raises(IndexError):
            buffer.update(-1, "x")

    def test_update_all(self, buffer) -> None:
        buffer.update_all(1, ["y", "z"])
        assert buffer.lines == ["a", "y", "z"]

    def test_clear(self, console, buffer) -> None:
        mark = len(console.output())
        buffer.clear()
        assert written_after(console, mark) == "\r\x1b[K\x1b[A\x1b[K\x1b[A\x1b[K"
        assert buffer.count == 0

    def test_clear_last(self, console, buffer) -> None:
        mark = len(console.output())
        buffer.clear_last(1)
        assert written_after(console, mark) == "\r\x1b[K\r\x1b[A\x1b[1C"
        assert buffer.lines == ["a", "b"]

    def test_clear_last_invalid(self, buffer) -> None:
        with pytest.raises(ValueError):
            buffer.clear_last(0)
        with pytest.raises(ValueError):
            buffer.clear_last(4)
