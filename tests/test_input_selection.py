"""Tests for the selection menu."""

import pytest

from console_kit.chr import ABR, ESC, Control, Style, Unicode
from console_kit.errors import EndOfInput, UserInterrupted
from console_kit.terminal import Command, InputSelection, Reaction, SelectionState


def entries(count: int) -> list[str]:
    return [f"entry {i}" for i in range(1, count + 1)]


COMMANDS = [
    Command("\n", "select", lambda entry, printer: Reaction.SELECT, hidden=True),
    Command("q", "quit", lambda entry, printer: Reaction.EXIT),
]


def menu(console, items, commands=COMMANDS, **kwargs) -> InputSelection:
    return InputSelection(console.terminal(), "Select", items, commands, **kwargs)


class TestCommand:
    """Tests for key bindings."""

    def test_string_key(self) -> None:
        cmd = Command("q", "quit", lambda e, p: Reaction.EXIT)
        assert cmd.key == Unicode.of("q")
        assert cmd.key_name == "q"

    def test_enter_key(self) -> None:
        cmd = Command("\r", "select", lambda e, p: Reaction.SELECT)
        assert cmd.key == Unicode.LF
        assert cmd.key_name == "<enter>"

    def test_control_key(self) -> None:
        cmd = Command(Control.DELETE, "delete", lambda e, p: Reaction.NONE)
        assert cmd.key_name == "<delete>"


class TestInputSelection:
    """Tests for a short menu that fits on one page."""

    def test_select_first(self, console) -> None:
        console.set_input("\r")
        sel = menu(console, entries(5))
        assert sel.select() == "entry 1"
        assert sel.state is SelectionState.SELECTED

    def test_output(self, console) -> None:
        console.set_input("\r")
        menu(console, entries(5)).select()
        output = console.output()
        assert output.startswith("Select [q=quit]\r\n")
        assert f"{Style.BG_BLUE} 1 entry 1" in output
        assert f"\r\n 2 entry 2{Style.CLEAR}\r\n" in output
        assert output.endswith("Your choice (1..5 or q): ")

    def test_navigation(self, console) -> None:
        console.set_input(Control.DOWN, Control.DOWN, "\r")
        assert menu(console, entries(5)).select() == "entry 3"
        assert f"{Style.BG_BLUE} 3 entry 3" in console.output()

    def test_navigation_is_clamped(self, console) -> None:
        console.set_input(Control.DOWN, Control.DOWN, Control.DOWN, Control.UP, "\r")
        assert menu(console, entries(5)).select() == "entry 3"
        console.set_input(Control.END, Control.LEFT, Control.DOWN, "\r")
        assert menu(console, entries(5)).select() == "entry 2"
        console.set_input("3", "\r")
        assert menu(console, entries(5)).select() == "entry 3"

    def test_home_and_end(self, console) -> None:
        console.set_input(Control.END, Control.UP, "\r")
        assert menu(console, entries(5)).select() == "entry 4"
        console.set_input(Control.END, Control.HOME, Control.UP, "\r")
        assert menu(console, entries(5)).select() == "entry 1"

    def test_digit(self, console) -> None:
        console.set_input("4", "\r")
        assert menu(console, entries(5)).select() == "entry 4"
        assert "Your choice (1..5 or q): 4" in console.output()

    def test_digit_past_the_end(self, console) -> None:
        console.set_input("9", "\r")
        assert menu(console, entries(5)).select() == "entry 5"

    def test_digits_restart_when_too_large(self, console) -> None:
        console.set_input("1", "2", "\r")
        assert menu(console, entries(5), clock=lambda: 0.0).select() == "entry 2"

    def test_zero_is_ignored(self, console) -> None:
        console.set_input(Control.DOWN, "0", "\r")
        assert menu(console, entries(5)).select() == "entry 2"

    def test_initial(self, console) -> None:
        console.set_input("\r")
        assert menu(console, entries(5)).select("entry 3") == "entry 3"

    def test_unknown_initial(self, console) -> None:
        console.set_input("\r")
        assert menu(console, entries(5)).select("entry 9") == "entry 1"

    def test_exit(self, console) -> None:
        console.set_input("q")
        sel = menu(console, entries(5))
        assert sel.select() is None
        assert sel.state is SelectionState.EXITED

    def test_not_found(self, console) -> None:
        console.set_input("x", "\r")
        assert menu(console, entries(5)).select() == "entry 1"
        assert " --- Not found: 'x'" in console.output()

    def test_command_messages(self, console) -> None:
        def greet(entry, printer) -> Reaction:
            printer.println(f"Hello {entry}")
            return Reaction.NONE

        commands = COMMANDS + [Command("g", "greet", greet)]
        console.set_input("g", "\r")
        assert menu(console, entries(5), commands).select() == "entry 1"
        assert "Hello entry 1" in console.output()

    def test_update_keep_item(self, console) -> None:
        items = entries(5)

        def reverse(entry, printer) -> Reaction:
            items.reverse()
            return Reaction.UPDATE_KEEP_ITEM

        commands = COMMANDS + [Command(Control.DELETE, "reverse", reverse)]
        console.set_input(Control.DOWN, Control.DELETE, "\r")
        assert menu(console, items, commands).select() == "entry 2"
        assert f"{Style.BG_BLUE} 4 entry 2" in console.output()

    def test_update_keep_offset(self, console) -> None:
        items = entries(5)

        def reverse(entry, printer) -> Reaction:
            items.reverse()
            return Reaction.UPDATE_KEEP_OFFSET

        commands = COMMANDS + [Command(Control.DPAD_MID, "reverse", reverse)]
        console.set_input(Control.DOWN, Control.DPAD_MID, "\r")
        assert menu(console, items, commands).select() == "entry 4"

    def test_update_none(self, console) -> None:
        seen = []

        def look(entry, printer) -> Reaction:
            seen.append(entry)
            return Reaction.NONE

        commands = COMMANDS + [Command("\t", "look", look)]
        console.set_input("\t", "\r")
        assert menu(console, entries(5), commands).select() == "entry 1"
        assert seen == ["entry 1"]

    def test_escape_command(self, console) -> None:
        commands = COMMANDS + [Command(Unicode.ESC, "back", lambda e, p: Reaction.EXIT)]
        console.set_input(ESC)
        assert menu(console, entries(5), commands).select() is None

    def test_custom_printer(self, console) -> None:
        console.set_input("\r")
        menu(console, entries(5), printer=lambda entry, bg: f"<{entry}>").select()
        assert " 1 <entry 1>" in console.output()

    def test_line_is_clipped(self, console) -> None:
        console.set_input("\r")
        menu(console, entries(5), line_width=8).select()
        assert f"{Style.BG_BLUE} 1 entry{Style.CLEAR}" in console.output()

    def test_end_of_input(self, console) -> None:
        sel = menu(console, entries(5))
        with pytest.raises(EndOfInput):
            sel.select()
        assert sel.state is SelectionState.FAILED

    def test_interrupted(self, console) -> None:
        console.set_input(ESC)
        with pytest.raises(UserInterrupted):
            menu(console, entries(5)).select()
        console.set_input(ABR)
        with pytest.raises(UserInterrupted):
            menu(console, entries(5)).select()

    def test_no_entries(self, console) -> None:
        with pytest.raises(ValueError):
            menu(console, [])


class TestPagedSelection:
    """Tests for a menu longer than a page (30 entries on a 42 row terminal)."""

    def test_more_entries(self, console) -> None:
        console.set_input("\r")
        menu(console, entries(150)).select()
        assert "(pages: 4, items: 120) -->" in console.output()

    def test_next_page(self, console) -> None:
        console.set_input(Control.RIGHT, "\r")
        assert menu(console, entries(150)).select() == "entry 31"
        output = console.output()
        assert "<-- (pages: 1, items: 30)" in output
        assert "(pages: 3, items: 90) -->" in output

    def test_previous_page(self, console) -> None:
        console.set_input(Control.RIGHT, Control.RIGHT, Control.LEFT, "\r")
        assert menu(console, entries(150)).select() == "entry 31"

    def test_end(self, console) -> None:
        console.set_input(Control.END, "\r")
        assert menu(console, entries(150)).select() == "entry 150"

    def test_two_digits(self, console) -> None:
        console.set_input("1", "2", "\r")
        assert menu(console, entries(150), clock=lambda: 0.0).select() == "entry 12"

    def test_digit_timeout(self, console) -> None:
        times = iter([0.0, 5.0])
        console.set_input("1", "2", "\r")
        assert menu(console, entries(150), clock=lambda: next(times)).select() == "entry 2"

    def test_exit(self, console) -> None:
        console.set_input("x", "q")
        assert menu(console, entries(150)).select() is None

    def test_keep_item_across_pages(self, console) -> None:
        items = entries(150)

        def reverse(entry, printer) -> Reaction:
            items.reverse()
            return Reaction.UPDATE_KEEP_ITEM

        commands = COMMANDS + [Command(Control.DELETE, "reverse", reverse)]
        console.set_input(Control.DELETE, "\r")
        assert menu(console, items, commands).select("entry 100") == "entry 100"

    def test_configured_page_size(self, console) -> None:
        console.config.with_page_size(3)
        console.set_input(Control.RIGHT, "\r")
        assert menu(console, entries(10)).select() == "entry 4"

    def test_page_size_argument(self, console) -> None:
        console.set_input(Control.RIGHT, "\r")
        assert menu(console, entries(10), page_size=2, page_margin=0).select() == "entry 3"
