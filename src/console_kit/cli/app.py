"""Typer CLI application demonstrating the interactive components."""

from __future__ import annotations

import logging
import sys
import time
from typing import Annotated, BinaryIO, Callable, Optional, TypeVar

import typer
from rich.console import Console
from rich.logging import RichHandler

from console_kit.chr.char import ABR, EOF
from console_kit.config import ConsoleConfig
from console_kit.errors import ConsoleError, NonInteractive, UserInterrupted
from console_kit.terminal.input_line import InputLine
from console_kit.terminal.input_password import InputPassword
from console_kit.terminal.input_selection import Command, InputSelection, Reaction
from console_kit.terminal.progress import Progress, Spinner
from console_kit.terminal.progress_manager import ProgressManager, ProgressTask, TaskState, Work
from console_kit.terminal.terminal import Terminal
from console_kit.tty.stty import STTY, TTYMode

logger = logging.getLogger(__name__)

T = TypeVar("T")


def open_terminal(config: ConsoleConfig, mode: TTYMode = TTYMode.RAW) -> Terminal:
    """Open the terminal on stdin/stdout, without mode switching if stdin is not a TTY."""
    stty = STTY()
    if stty.is_interactive():
        return Terminal(stty, mode, config=config)
    logger.debug("stdin is not a terminal, leaving the mode alone")
    return Terminal(stty, None, input=_raw_stdin(), output=sys.stdout, config=config)


def _raw_stdin() -> BinaryIO:
    """Unbuffered stdin, so that pending keys stay visible to select."""
    try:
        fd = sys.stdin.fileno()
    except (AttributeError, OSError, ValueError):
        # Replaced stdin (tests, embedding) has no descriptor.
        return sys.stdin.buffer
    return open(fd, "rb", buffering=0, closefd=False)


def create_app() -> typer.Typer:
    """Create and configure the CLI application."""
    app = typer.Typer(
        name="console-kit",
        help="Try out terminal prompts, line input, menus and progress bars.",
        no_args_is_help=True,
        rich_markup_mode="rich",
    )
    console = Console()
    err_console = Console(stderr=True)
    state: dict[str, ConsoleConfig] = {}

    def run(fn: Callable[[Terminal], T]) -> T:
        """Run fn with a terminal, reporting console errors nicely."""
        try:
            with open_terminal(state["config"]) as term:
                return fn(term)
        except UserInterrupted as e:
            err_console.print(f"\n[yellow]{e}[/]")
            raise typer.Exit(130)
        except ConsoleError as e:
            err_console.print(f"\n[red]Error: {e}[/]")
            raise typer.Exit(1)

    @app.callback()
    def main(
        verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Show debug logging")] = False,
    ) -> None:
        """Terminal interaction toolkit."""
        logging.basicConfig(
            level=logging.DEBUG if verbose else logging.WARNING,
            format="%(message)s",
            handlers=[RichHandler(console=err_console, show_path=False)],
        )
        try:
            state["config"] = ConsoleConfig.from_env()
        except ValueError as e:
            err_console.print(f"[red]{e}[/]")
            raise typer.Exit(2)
        logger.debug("Config: %s", state["config"].to_dict())

    @app.command()
    def keys() -> None:
        """Show the keys you press. Quit with 'q' or Ctrl-C."""
        def loop(term: Terminal) -> None:
            term.println("Press keys to see how they decode, 'q' to quit.")
            while True:
                c = term.read()
                if c is None or c.as_integer() in (ord("q"), ABR, EOF):
                    break
                key = f" ({c.key.name})" if c.key is not None else ""
                term.println(f"{c.as_string()}{key}")
        run(loop)

    @app.command()
    def confirm(
        question: Annotated[str, typer.Argument(help="Question to ask")],
        default: Annotated[bool, typer.Option("--default/--no-default", help="Answer on enter")] = True,
    ) -> None:
        """Ask a yes/no question. Exits with 0 on yes, 1 on no."""
        answer = run(lambda term: term.confirm(question, default))
        if not answer:
            raise typer.Exit(1)

    @app.command("input")
    def input_(
        message: Annotated[str, typer.Argument(help="Prompt message")],
        password: Annotated[bool, typer.Option("--password", "-p", help="Mask the input")] = False,
        initial: Annotated[Optional[str], typer.Option("--initial", "-i", help="Initial text")] = None,
    ) -> None:
        """Read a line of text."""
        def read(term: Terminal) -> str:
            if password:
                return InputPassword(term, message).read_password()
            return InputLine(term, message).read_line(initial)
        try:
            line = run(read)
        except ValueError as e:
            err_console.print(f"[red]{e}[/]")
            raise typer.Exit(2)
        console.print(f"[green]{line}[/]" if not password else f"[green]{len(line)} characters[/]")

    @app.command()
    def select(
        entries: Annotated[list[str], typer.Argument(help="Entries to choose from")],
        prompt: Annotated[str, typer.Option("--prompt", help="Menu prompt")] = "Select",
    ) -> None:
        """Pick one of the given entries."""
        commands = [
            Command("\n", "select", lambda entry, printer: Reaction.SELECT, hidden=True),
            Command("q", "quit", lambda entry, printer: Reaction.EXIT),
        ]
        chosen = run(lambda term: InputSelection(term, prompt, entries, commands).select())
        if chosen is None:
            raise typer.Exit(1)
        console.print(f"[green]{chosen}[/]")

    @app.command()
    def progress(
        tasks: Annotated[int, typer.Option("--tasks", "-n", help="Number of tasks")] = 3,
        total: Annotated[int, typer.Option("--total", "-t", help="Units of work per task")] = 50,
        fail: Annotated[Optional[list[int]], typer.Option("--fail", "-f", help="Task number to fail")] = None,
        delay: Annotated[float, typer.Option("--delay", help="Seconds per unit of work")] = 0.02,
        single: Annotated[bool, typer.Option("--single", help="Single progress bar on this thread")] = False,
    ) -> None:
        """Run fake tasks with a progress display. Abort with ESC."""
        failing = set(fail or [])

        def work_for(number: int) -> Work:
            def work(task: ProgressTask) -> int:
                for i in range(1, total + 1):
                    time.sleep(delay)
                    if number in failing and i > total // 2:
                        raise RuntimeError(f"Task {number} failed on purpose")
                    task.update(i)
                return total
            return work

        def run_single(term: Terminal) -> None:
            bar = Progress(term, Spinner(state["config"].spinner), "Working", total)
            for i in range(1, total + 1):
                time.sleep(delay)
                bar.update(i)
            term.finish()

        def run_many(term: Terminal) -> bool:
            with ProgressManager(term) as manager:
                for number in range(1, tasks + 1):
                    manager.add_task(f"Task {number}", total, work_for(number))
                results = manager.wait_abortable()
            for result in results:
                if result.state is TaskState.FAILED:
                    term.error("%s: %s", result.name, result.error)
                elif result.state is TaskState.CANCELLED:
                    term.warn("%s: cancelled", result.name)
            term.finish()
            return all(result.ok for result in results)

        if single:
            run(run_single)
            return
        if not run(run_many):
            raise typer.Exit(1)

    @app.command()
    def size() -> None:
        """Show the terminal size."""
        try:
            terminal_size = STTY().get_size()
        except NonInteractive as e:
            err_console.print(f"[red]Not a terminal: {e}[/]")
            raise typer.Exit(1)
        console.print(f"[bold]Rows:[/] {terminal_size.rows}")
        console.print(f"[bold]Cols:[/] {terminal_size.cols}")

    return app
