"""Runtime defaults for interactive components."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Mapping, Optional

ENV_PREFIX = "CONSOLE_KIT_"

SPINNERS = ("ascii", "blocks", "arrows", "clock")


@dataclass
class ConsoleConfig:
    """
    Defaults shared by the line editor, selection menu and progress display.

    Every value can be overridden from the environment, which makes it easy
    to slow down a progress display or force a page size when recording a
    demo:

        CONSOLE_KIT_SPINNER=blocks CONSOLE_KIT_MAX_TASKS=3 console-kit progress

    Example:
        >>> config = (ConsoleConfig()
        ...     .with_spinner("blocks")
        ...     .with_max_tasks(8))
    """

    # Progress display
    spinner: str = "ascii"
    max_tasks: int = 5
    refresh_interval: float = 0.1  # seconds between redraws
    abort_grace_period: float = 1.0  # seconds to wait for cancelled tasks
    poll_interval: float = 0.05  # seconds between abort-key checks

    # Selection menu
    digit_timeout: float = 2.0  # typed digits are forgotten after this
    page_size: Optional[int] = None  # None = derive from terminal rows
    page_margin: int = 5

    # Used when the terminal size cannot be queried
    default_width: int = 80
    default_rows: int = 24

    def with_spinner(self, spinner: str) -> ConsoleConfig:
        """Set the progress spinner: 'ascii', 'blocks', 'arrows' or 'clock'."""
        spinner = spinner.lower()
        if spinner not in SPINNERS:
            raise ValueError(f"Invalid spinner: {spinner}")
        self.spinner = spinner
        return self

    def with_max_tasks(self, max_tasks: int) -> ConsoleConfig:
        """Set how many progress tasks may run at the same time."""
        if max_tasks < 1:
            raise ValueError(f"max_tasks must be at least 1, got {max_tasks}")
        self.max_tasks = max_tasks
        return self

    def with_refresh_interval(self, seconds: float) -> ConsoleConfig:
        """Set the progress redraw interval."""
        if seconds <= 0:
            raise ValueError(f"refresh_interval must be positive, got {seconds}")
        self.refresh_interval = seconds
        return self

    def with_abort_grace_period(self, seconds: float) -> ConsoleConfig:
        """Set how long an aborted progress display waits for its tasks."""
        self.abort_grace_period = max(0.0, seconds)
        return self

    def with_digit_timeout(self, seconds: float) -> ConsoleConfig:
        """Set how long typed menu digits are remembered."""
        self.digit_timeout = max(0.0, seconds)
        return self

    def with_page_size(self, page_size: Optional[int], margin: Optional[int] = None) -> ConsoleConfig:
        """Set a fixed menu page size (None derives it from the terminal)."""
        if page_size is not None and page_size < 1:
            raise ValueError(f"page_size must be at least 1, got {page_size}")
        self.page_size = page_size
        if margin is not None:
            self.page_margin = max(0, margin)
        return self

    def with_default_width(self, width: int) -> ConsoleConfig:
        """Set the fallback width for non-interactive output."""
        if width < 20:
            raise ValueError(f"default_width must be at least 20, got {width}")
        self.default_width = width
        return self

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> ConsoleConfig:
        """Build a config from CONSOLE_KIT_* environment variables."""
        env = os.environ if environ is None else environ
        config = cls()

        def get(name: str) -> Optional[str]:
            value = env.get(ENV_PREFIX + name)
            if value is None or not value.strip():
                return None
            return value.strip()

        if (value := get("SPINNER")) is not None:
            config.with_spinner(value)
        if (value := get("MAX_TASKS")) is not None:
            config.with_max_tasks(_parse(int, "MAX_TASKS", value))
        if (value := get("REFRESH_INTERVAL")) is not None:
            config.with_refresh_interval(_parse(float, "REFRESH_INTERVAL", value))
        if (value := get("ABORT_GRACE_PERIOD")) is not None:
            config.with_abort_grace_period(_parse(float, "ABORT_GRACE_PERIOD", value))
        if (value := get("DIGIT_TIMEOUT")) is not None:
            config.with_digit_timeout(_parse(float, "DIGIT_TIMEOUT", value))
        if (value := get("PAGE_SIZE")) is not None:
            config.with_page_size(_parse(int, "PAGE_SIZE", value))
        if (value := get("PAGE_MARGIN")) is not None:
            config.page_margin = max(0, _parse(int, "PAGE_MARGIN", value))
        if (value := get("DEFAULT_WIDTH")) is not None:
            config.with_default_width(_parse(int, "DEFAULT_WIDTH", value))
        return config

    def to_dict(self) -> dict[str, Any]:
        """Serialize for logging."""
        return {
            "spinner": self.spinner,
            "max_tasks": self.max_tasks,
            "refresh_interval": self.refresh_interval,
            "abort_grace_period": self.abort_grace_period,
            "poll_interval": self.poll_interval,
            "digit_timeout": self.digit_timeout,
            "page_size": self.page_size,
            "page_margin": self.page_margin,
            "default_width": self.default_width,
            "default_rows": self.default_rows,
        }


def _parse(kind: type, name: str, value: str) -> Any:
    try:
        return kind(value)
    except ValueError:
        raise ValueError(f"Invalid {ENV_PREFIX}{name}: {value!r}") from None
