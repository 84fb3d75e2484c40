"""Single task progress bar, and the spinners shared with the progress manager."""

from __future__ import annotations

import time
from enum import Enum
from typing import Callable, Optional

from console_kit.chr.char import Control
from console_kit.chr.style import Style
from console_kit.terminal.terminal import Terminal

# Minimum time between redraws, in seconds.
UPDATE_INTERVAL = 0.1
# Time before an ETA is shown, in seconds.
ETA_DELAY = 3.0

_FRAMES: dict[str, tuple[str, ...]] = {
    "ascii": ("|", "/", "-", "\\"),
    # 1/8 block up to the full block and back down
    "blocks": tuple(chr(cp) for cp in (
        0x2581, 0x2582, 0x2583, 0x2584, 0x2585, 0x2586, 0x2587,
        0x2588, 0x2587, 0x2586, 0x2585, 0x2584, 0x2583, 0x2582)),
    "arrows": ("⭠", "⭦", "⭡", "⭧", "⭢", "⭨", "⭣", "⭩"),
    # clock faces, 1 to 12 o'clock
    "clock": tuple(chr(cp) for cp in range(0x1F550, 0x1F55C)),
}


class Spinner(Enum):
    """Spinner and bar characters."""
    ASCII = "ascii"
    BLOCKS = "blocks"
    ARROWS = "arrows"
    CLOCK = "clock"

    @property
    def frames(self) -> tuple[str, ...]:
        return _FRAMES[self.value]

    @property
    def done(self) -> str:
        return "#"

    @property
    def remain(self) -> str:
        return "-" if self is Spinner.ASCII else "⋅"

    @property
    def complete(self) -> str:
        return "v" if self is Spinner.ASCII else "✓"


def format_duration(seconds: float) -> str:
    """Fixed width duration, e.g. ' 1:05 min' or '  3.2 s  '."""
    total_ms = max(0, int(seconds * 1000))
    hours, rest = divmod(total_ms, 3_600_000)
    minutes, rest = divmod(rest, 60_000)
    secs, ms = divmod(rest, 1000)
    if hours > 0:
        return f"{hours:2d}:{minutes:02d} H  "
    if minutes > 0:
        return f"{minutes:2d}:{secs:02d} min"
    return f"{secs:3d}.{ms // 100:1d} s  "


class Progress:
    """
    A progress bar on the current terminal line, updated by the caller.

    Example:
        >>> progress = Progress(terminal, Spinner.ASCII, "Download", total)
        >>> for chunk in chunks:
        ...     done += len(chunk)
        ...     progress.update(done)
    """

    def __init__(
        self,
        terminal: Terminal,
        spinner: Spinner,
        what: str,
        total: int,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if total <= 0:
            raise ValueError(f"total must be positive, got {total}")
        self._terminal = terminal
        self._spinner = spinner
        self._what = what
        self._total = total
        self._clock = clock
        self._start = clock()
        self._spinner_pos = 0
        self._last_pct = -1
        self._last_update: Optional[float] = None
        self._finished = False
        terminal.finish()
        self.update(0)

    @property
    def finished(self) -> bool:
        return self._finished

    def update(self, current: int) -> None:
        """Report progress. Redraws are limited to one per 100 ms unless the percentage changes."""
        if self._finished:
            return
        now = self._clock()
        current = max(0, min(current, self._total))
        fraction = current / self._total
        pct = int(fraction * 100)

        if current >= self._total:
            self._finished = True
            self._print(
                f"{self._what}: [{Style.GREEN}{self._spinner.done * 100}{Style.CLEAR}] "
                f"100% @ {format_duration(now - self._start)}")
            return

        if (self._last_update is not None
                and now - self._last_update < UPDATE_INTERVAL
                and pct == self._last_pct):
            return

        eta = ""
        elapsed = now - self._start
        if elapsed > ETA_DELAY and fraction > 0:
            eta = f" +({format_duration(elapsed / fraction - elapsed)})"

        frames = self._spinner.frames
        self._spinner_pos = (self._spinner_pos + 1) % len(frames)
        self._print(
            f"{self._what}: [{Style.GREEN}{self._spinner.done * pct}"
            f"{Style(Style.YELLOW, Style.BOLD)}{frames[self._spinner_pos]}"
            f"{Style.CLEAR}{Style.YELLOW}{self._spinner.remain * (100 - pct - 1)}"
            f"{Style.CLEAR}] {pct:3d}%{eta}")
        self._last_pct = pct
        self._last_update = now

    def _print(self, line: str) -> None:
        self._terminal.write(f"\r{Control.CURSOR_ERASE}{line}")
