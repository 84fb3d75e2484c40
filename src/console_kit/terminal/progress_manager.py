"""Progress display for several concurrently running tasks."""

from __future__ import annotations

import logging
import queue
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Callable, Optional, Union

from console_kit.chr.char import ABR, ESC, Control
from console_kit.chr.style import Style
from console_kit.chr.util import printable_width
from console_kit.config import ConsoleConfig
from console_kit.errors import NonInteractive, TaskCancelled
from console_kit.terminal.display_buffer import DisplayBuffer
from console_kit.terminal.progress import ETA_DELAY, UPDATE_INTERVAL, Spinner, format_duration
from console_kit.terminal.terminal import Terminal

logger = logging.getLogger(__name__)

# Seconds between ETA recalculations.
ETA_INTERVAL = 2.0


class TaskState(Enum):
    PENDING = auto()
    RUNNING = auto()
    DONE = auto()
    FAILED = auto()
    CANCELLED = auto()

    @property
    def finished(self) -> bool:
        return self in (TaskState.DONE, TaskState.FAILED, TaskState.CANCELLED)


@dataclass
class TaskRecord:
    """
    State of one task, as shown on screen.

    Only the render thread changes a record; everybody else reads.
    """
    name: str
    total: int
    current: int = 0
    state: TaskState = TaskState.PENDING
    result: Any = None
    error: Optional[BaseException] = None
    started: float = 0.0
    updated: float = 0.0
    spinner_pos: int = 0
    spinner_updated: float = 0.0
    expected_done: Optional[float] = None
    eta_updated: float = 0.0

    @property
    def fraction(self) -> float:
        if self.state is TaskState.DONE:
            return 1.0
        if self.total <= 0:
            return 0.0
        return min(self.current, self.total) / self.total


@dataclass(frozen=True)
class TaskResult:
    """Outcome of a task, returned from `ProgressManager.wait_abortable`."""
    name: str
    state: TaskState
    result: Any = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.state is TaskState.DONE


# Messages from the worker threads to the render thread.

@dataclass(frozen=True)
class _Started:
    record: TaskRecord
    time: float


@dataclass(frozen=True)
class _Update:
    record: TaskRecord
    current: int
    time: float


@dataclass(frozen=True)
class _Finished:
    record: TaskRecord
    state: TaskState
    time: float
    result: Any = None
    error: Optional[BaseException] = None


class _Stop:
    """Tells the render thread to draw the final frame and exit."""


_Message = Union[_Started, _Update, _Finished, _Stop]


class ProgressTask:
    """Handle given to a task's work function for reporting progress."""

    def __init__(self, manager: ProgressManager, record: TaskRecord) -> None:
        self._manager = manager
        self._record = record
        self._cancelled = threading.Event()

    @property
    def name(self) -> str:
        return self._record.name

    @property
    def total(self) -> int:
        return self._record.total

    @property
    def is_cancelled(self) -> bool:
        return self._cancelled.is_set()

    def update(self, current: int) -> None:
        """
        Report the number of units done so far.

        Raises:
            TaskCancelled: If the task has been cancelled. Letting it
                propagate marks the task as cancelled.
        """
        if self._cancelled.is_set():
            raise TaskCancelled(f"Task cancelled: {self._record.name}")
        self._manager._post_update(self._record, current)

    def cancel(self) -> None:
        self._cancelled.set()


Work = Callable[[ProgressTask], Any]


@dataclass
class _Entry:
    record: TaskRecord
    task: ProgressTask
    future: Future[Any] = field(repr=False)


class ProgressManager:
    """
    Runs tasks on a bounded thread pool and shows a progress line for each.

    Workers never write to the terminal. They send progress messages over a
    queue to one render thread, which owns the task records and redraws the
    display under the terminal lock.

    Example:
        >>> with ProgressManager(terminal) as progress:
        ...     progress.add_task("Download", size, download)
        ...     progress.add_task("Index", count, index)
        ...     results = progress.wait_abortable()
    """

    def __init__(
        self,
        terminal: Terminal,
        spinner: Optional[Spinner] = None,
        max_tasks: Optional[int] = None,
        *,
        config: Optional[ConsoleConfig] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._terminal = terminal
        self._config = config if config is not None else terminal.config
        self._spinner = spinner if spinner is not None else Spinner(self._config.spinner)
        self._max_tasks = max_tasks if max_tasks is not None else self._config.max_tasks
        if self._max_tasks < 1:
            raise ValueError(f"max_tasks must be at least 1, got {self._max_tasks}")
        self._clock = clock
        self._buffer = DisplayBuffer(terminal)
        self._queue: queue.Queue[_Message] = queue.Queue(maxsize=1000)
        self._executor = ThreadPoolExecutor(max_workers=self._max_tasks, thread_name_prefix="progress")
        self._lock = threading.Lock()
        self._entries: list[_Entry] = []
        self._closed = False
        self._render_failed = False
        self.aborted = False

        # Owned by the render thread.
        self._started: list[TaskRecord] = []

        terminal.finish()
        self._render_thread = threading.Thread(target=self._render_loop, name="progress-render", daemon=True)
        self._render_thread.start()

    def add_task(self, name: str, total: int, work: Work) -> TaskRecord:
        """
        Queue work to run on the thread pool.

        Args:
            name: Title shown on the progress line.
            total: Number of units of work.
            work: Called with a ProgressTask. Its return value becomes the
                task result; an exception marks the task as failed.
        """
        with self._lock:
            if self._closed:
                raise RuntimeError("Adding task to closed progress manager")
            record = TaskRecord(name=name, total=total)
            task = ProgressTask(self, record)
            future = self._executor.submit(self._run, record, task, work)
            self._entries.append(_Entry(record, task, future))
        logger.debug("Queued task %s (total %d)", name, total)
        return record

    def wait_abortable(self) -> list[TaskResult]:
        """
        Wait for all tasks, while watching for ESC or Ctrl-C.

        On abort every task is cancelled, and the call waits for the
        running ones to stop for up to the configured grace period. Check
        `aborted` to see if that happened.

        Returns:
            One result per task, in the order they were added.
        """
        try:
            while True:
                with self._lock:
                    futures = [e.future for e in self._entries]
                _, not_done = wait(futures, timeout=self._config.poll_interval)
                if not not_done:
                    break
                c = self._terminal.read_if_available()
                if c is not None and c.as_integer() in (ESC, ABR):
                    logger.info("Progress aborted with %s", c.as_string())
                    self.aborted = True
                    self._cancel_all()
                    wait(not_done, timeout=self._config.abort_grace_period)
                    break
        finally:
            self.close()
        return self.results()

    def results(self) -> list[TaskResult]:
        with self._lock:
            records = [e.record for e in self._entries]
        return [TaskResult(r.name, r.state, r.result, r.error) for r in records]

    def lines(self) -> list[str]:
        """Lines currently on display."""
        return self._buffer.lines

    def close(self) -> None:
        """Cancel unfinished tasks, draw the final state and stop rendering."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
        self._cancel_all()
        self._executor.shutdown(wait=False, cancel_futures=True)
        self._post(_Stop())
        self._render_thread.join()
        if not self._render_failed:
            self._terminal.finish()

    def __enter__(self) -> ProgressManager:
        return self

    def __exit__(self, exc_type: Optional[type], exc: Optional[BaseException], tb: object) -> None:
        self.close()

    # -- Worker side --

    def _run(self, record: TaskRecord, task: ProgressTask, work: Work) -> None:
        if task.is_cancelled:
            self._post(_Finished(record, TaskState.CANCELLED, self._clock()))
            return
        self._post(_Started(record, self._clock()))
        try:
            result = work(task)
        except TaskCancelled as e:
            logger.debug("Task %s cancelled", record.name)
            self._post(_Finished(record, TaskState.CANCELLED, self._clock(), error=e))
        except Exception as e:
            logger.debug("Task %s failed", record.name, exc_info=True)
            self._post(_Finished(record, TaskState.FAILED, self._clock(), error=e))
        else:
            self._post(_Finished(record, TaskState.DONE, self._clock(), result=result))

    def _post(self, message: _Message) -> None:
        try:
            self._queue.put(message, timeout=self._config.abort_grace_period)
        except queue.Full:
            logger.warning("Progress display is not keeping up, dropped %s", type(message).__name__)

    def _post_update(self, record: TaskRecord, current: int) -> None:
        try:
            self._queue.put_nowait(_Update(record, current, self._clock()))
        except queue.Full:
            # The next update carries the same information.
            pass

    def _cancel_all(self) -> None:
        with self._lock:
            entries = list(self._entries)
        for entry in entries:
            if not entry.future.done():
                entry.task.cancel()
                entry.future.cancel()

    # -- Render side --

    def _render_loop(self) -> None:
        while True:
            try:
                message: Optional[_Message] = self._queue.get(timeout=self._config.refresh_interval)
            except queue.Empty:
                message = None
            stopping = False
            while message is not None:
                if isinstance(message, _Stop):
                    stopping = True
                else:
                    self._apply(message)
                try:
                    message = self._queue.get_nowait()
                except queue.Empty:
                    message = None
            if stopping:
                # Tasks still running now were cancelled, or never started.
                self._mark_unfinished_cancelled()
                self._redraw()
                return
            self._redraw()

    def _redraw(self) -> None:
        if self._render_failed:
            return
        try:
            self._render()
        except Exception:
            # Messages are still drained, so workers never block on the queue.
            logger.exception("Progress display failed, no longer drawing")
            self._render_failed = True

    def _apply(self, message: _Message) -> None:
        record = message.record
        if record.state.finished:
            return
        if isinstance(message, _Started):
            record.state = TaskState.RUNNING
            record.started = message.time
            record.updated = message.time
            record.spinner_updated = message.time
            self._started.append(record)
        elif isinstance(message, _Update):
            self._apply_update(record, message.current, message.time)
        elif isinstance(message, _Finished):
            if record.state is TaskState.PENDING:
                record.started = message.time
                self._started.append(record)
            if message.state is TaskState.DONE:
                record.current = record.total
            record.state = message.state
            record.result = message.result
            record.error = message.error
            record.updated = message.time
            record.expected_done = None
            logger.debug("Task %s %s", record.name, message.state.name.lower())

    def _apply_update(self, record: TaskRecord, current: int, now: float) -> None:
        record.current = max(0, min(current, record.total))
        if now >= record.spinner_updated + UPDATE_INTERVAL:
            record.spinner_pos += 1
            record.spinner_updated = now
        elapsed = now - record.started
        fraction = record.fraction
        if elapsed > ETA_DELAY and fraction > 0:
            if record.expected_done is None or record.eta_updated < now - ETA_INTERVAL:
                record.expected_done = now + max(0.0, elapsed / fraction - elapsed)
                record.eta_updated = now
        record.updated = now

    def _mark_unfinished_cancelled(self) -> None:
        with self._lock:
            records = [e.record for e in self._entries]
        now = self._clock()
        for record in records:
            if not record.state.finished:
                if record.state is TaskState.PENDING:
                    record.started = now
                    self._started.append(record)
                record.state = TaskState.CANCELLED
                record.error = TaskCancelled(f"Task cancelled: {record.name}")
                record.updated = now

    def _render(self) -> None:
        rows, cols = self._size()
        with self._lock:
            pending = sum(1 for e in self._entries if e.record.state is TaskState.PENDING)
        with self._terminal.lock:
            max_live = min(rows, self._max_tasks * 2)
            if len(self._started) > max_live:
                self._flush_finished(max_live, cols)

            now = self._clock()
            lines = [self._render_task(record, cols, now) for record in self._started]
            if pending > 0:
                lines.append(f" -- And {pending} more...")
            while len(lines) < self._buffer.count:
                lines.append("")
            existing = self._buffer.count
            self._buffer.update_all(0, lines[:existing])
            self._buffer.add_all(lines[existing:])

    def _flush_finished(self, max_live: int, cols: int) -> None:
        """Print finished tasks above the live area, to make room."""
        flushed: list[TaskRecord] = []
        # Finished tasks at the top keep their place in the order.
        while self._started and self._started[0].state.finished:
            flushed.append(self._started.pop(0))
        if len(self._started) > max_live:
            flushed.extend(r for r in self._started if r.state.finished)
            self._started = [r for r in self._started if not r.state.finished]

        now = self._clock()
        self._buffer.clear()
        self._terminal.write("\r")
        for record in flushed:
            self._terminal.write(self._render_task(record, cols, now))
            self._terminal.println()
        self._terminal.write(str(Control.cursor_up(1)))

    def _render_task(self, record: TaskRecord, cols: int, now: float) -> str:
        pts_w = max(0, cols - 23 - printable_width(record.name))
        spinner = self._spinner

        if record.state is TaskState.DONE:
            return (f"{record.name}: [{Style.GREEN}{spinner.done * pts_w}{Style.CLEAR}] 100% "
                    f"{Style(Style.GREEN, Style.BOLD)}{spinner.complete}{Style.CLEAR} "
                    f"@ {format_duration(record.updated - record.started)}")

        fraction = record.fraction
        pct = int(fraction * 100)
        pts = int(fraction * pts_w)
        bar = (f"{record.name}: [{Style.GREEN}{spinner.done * pts}"
               f"{Style.YELLOW}{spinner.remain * (pts_w - pts)}{Style.CLEAR}] {pct:3d}% ")

        if record.state is TaskState.CANCELLED:
            return f"{bar}{Style(Style.RED, Style.BOLD)}Cancelled{Style.CLEAR}"
        if record.state is TaskState.FAILED:
            return f"{bar}{Style(Style.RED, Style.BOLD)}Failed{Style.CLEAR}"

        frames = spinner.frames
        remaining = ""
        if record.expected_done is not None:
            remaining = f" + {format_duration(max(0.0, record.expected_done - now))}"
        return (f"{bar}{Style(Style.YELLOW, Style.BOLD)}{frames[record.spinner_pos % len(frames)]}"
                f"{Style.CLEAR}{remaining}")

    def _size(self) -> tuple[int, int]:
        try:
            size = self._terminal.size()
        except NonInteractive:
            return self._config.default_rows, self._config.default_width
        return size.rows, size.cols
