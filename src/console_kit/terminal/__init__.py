"""Interactive terminal components - prompts, line input, menus and progress."""

from console_kit.terminal.display_buffer import DisplayBuffer
from console_kit.terminal.input_line import InputLine
from console_kit.terminal.input_password import InputPassword
from console_kit.terminal.input_selection import (
    Command,
    InputSelection,
    Reaction,
    SelectionState,
)
from console_kit.terminal.line_buffer import LineBuffer
from console_kit.terminal.line_printer import BufferedPrinter, CallbackPrinter, LinePrinter
from console_kit.terminal.progress import Progress, Spinner, format_duration
from console_kit.terminal.progress_manager import (
    ProgressManager,
    ProgressTask,
    TaskRecord,
    TaskResult,
    TaskState,
)
from console_kit.terminal.terminal import Terminal

__all__ = [
    "Terminal",
    "LinePrinter",
    "CallbackPrinter",
    "BufferedPrinter",
    "DisplayBuffer",
    "LineBuffer",
    "InputLine",
    "InputPassword",
    "InputSelection",
    "Command",
    "Reaction",
    "SelectionState",
    "Progress",
    "Spinner",
    "format_duration",
    "ProgressManager",
    "ProgressTask",
    "TaskRecord",
    "TaskResult",
    "TaskState",
]
