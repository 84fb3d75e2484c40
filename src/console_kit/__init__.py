"""
console-kit: interactive terminal I/O for Python programs

Raw mode handling, keystroke decoding, line editing, selection menus and
progress display for command line tools.

Quick Start:
    >>> from console_kit import Terminal, InputLine
    >>> with Terminal() as term:
    ...     name = InputLine(term, "Name").read_line()
    ...     if term.confirm(f"Hello {name}, continue?"):
    ...         term.info("Continuing")

Features:
    - Scoped raw/cooked terminal mode switching that always restores
    - UTF-8 and escape sequence decoding into keys and characters
    - SGR styles with well defined combination rules
    - Line input with word movement, validation and tab completion
    - Password input
    - Paged selection menus with custom key commands
    - Single and multi-task progress bars with abort on ESC
"""

__version__ = "0.1.0"

# Character model
from console_kit.chr import Char, CharReader, Control, Key, Style, Unicode

# Errors
from console_kit.errors import (
    ConsoleError,
    DecodeError,
    EndOfInput,
    ModeSwitchError,
    NonInteractive,
    TaskCancelled,
    UserInterrupted,
)

# Configuration
from console_kit.config import ConsoleConfig

# Terminal control
from console_kit.tty import STTY, ModeSwitcher, TerminalSize, TTYMode

# Interactive components
from console_kit.terminal import (
    Command,
    InputLine,
    InputPassword,
    InputSelection,
    Progress,
    ProgressManager,
    Reaction,
    Spinner,
    Terminal,
)

__all__ = [
    # Version
    "__version__",
    # Characters
    "Char",
    "Unicode",
    "Control",
    "Key",
    "Style",
    "CharReader",
    # Errors
    "ConsoleError",
    "DecodeError",
    "EndOfInput",
    "UserInterrupted",
    "NonInteractive",
    "ModeSwitchError",
    "TaskCancelled",
    # Config
    "ConsoleConfig",
    # TTY
    "STTY",
    "TTYMode",
    "TerminalSize",
    "ModeSwitcher",
    # Components
    "Terminal",
    "InputLine",
    "InputPassword",
    "InputSelection",
    "Command",
    "Reaction",
    "Progress",
    "ProgressManager",
    "Spinner",
]
