"""Tests for concurrent progress display."""

import io
import threading
import time

import pytest

from console_kit.chr import ESC, iterate
from console_kit.errors import TaskCancelled
from console_kit.terminal import ProgressManager, TaskRecord, TaskState, Terminal
from console_kit.tty import TTYMode


def counting(total: int, delay: float = 0.0, result=None):
    def work(task):
        for i in range(1, total + 1):
            if delay:
                time.sleep(delay)
            task.update(i)
        return result
    return work


def forever(task):
    # Bounded, in case cancellation is broken.
    for _ in range(2000):
        task.update(1)
        time.sleep(0.005)
    return "not cancelled"


class TestTaskRecord:
    """Tests for TaskRecord."""

    def test_fraction(self) -> None:
        record = TaskRecord(name="a", total=4, current=1)
        assert record.fraction == 0.25
        record.state = TaskState.DONE
        assert record.fraction == 1.0
        assert TaskRecord(name="b", total=0).fraction == 0.0

    def test_finished_states(self) -> None:
        assert TaskState.DONE.finished
        assert TaskState.FAILED.finished
        assert TaskState.CANCELLED.finished
        assert not TaskState.RUNNING.finished
        assert not TaskState.PENDING.finished


class TestProgressManager:
    """Tests for ProgressManager."""

    def test_all_tasks_complete(self, console) -> None:
        with ProgressManager(console.terminal()) as manager:
            manager.add_task("one", 10, counting(10, result="first"))
            manager.add_task("two", 5, counting(5, result="second"))
            results = manager.wait_abortable()

        assert [r.name for r in results] == ["one", "two"]
        assert all(r.ok for r in results)
        assert [r.result for r in results] == ["first", "second"]
        assert not manager.aborted
        lines = manager.lines()
        assert len(lines) == 2
        assert all("100%" in line for line in lines)

    def test_failure_is_isolated(self, console) -> None:
        def broken(task):
            task.update(1)
            raise RuntimeError("broken")

        with ProgressManager(console.terminal()) as manager:
            manager.add_task("good", 3, counting(3))
            manager.add_task("bad", 3, broken)
            results = manager.wait_abortable()

        good, bad = results
        assert good.state is TaskState.DONE
        assert bad.state is TaskState.FAILED
        assert isinstance(bad.error, RuntimeError)
        assert any("Failed" in line for line in manager.lines())

    def test_abort(self, console) -> None:
        console.set_input(ESC)
        manager = ProgressManager(console.terminal(), max_tasks=1)
        manager.add_task("slow", 1, forever)
        manager.add_task("waiting", 1, counting(1))
        results = manager.wait_abortable()

        assert manager.aborted
        assert [r.state for r in results] == [TaskState.CANCELLED, TaskState.CANCELLED]
        assert isinstance(results[0].error, TaskCancelled)
        assert any("Cancelled" in line for line in manager.lines())

    def test_pending_tasks_are_counted(self, console) -> None:
        with ProgressManager(console.terminal(), max_tasks=1) as manager:
            manager.add_task("first", 10, counting(10, delay=0.05))
            manager.add_task("second", 1, counting(1))
            manager.add_task("third", 1, counting(1))
            results = manager.wait_abortable()

        assert all(r.ok for r in results)
        assert "more..." in console.output()

    def test_frames_are_written_whole(self, console) -> None:
        with ProgressManager(console.terminal(), max_tasks=3) as manager:
            for name in ("a", "b", "c"):
                manager.add_task(name, 20, counting(20, delay=0.005))
            manager.wait_abortable()

        for text in console.out.writes:
            list(iterate(text))

    def test_closed(self, console) -> None:
        manager = ProgressManager(console.terminal())
        manager.close()
        manager.close()
        with pytest.raises(RuntimeError):
            manager.add_task("late", 1, counting(1))

    def test_no_tasks(self, console) -> None:
        with ProgressManager(console.terminal()) as manager:
            assert manager.wait_abortable() == []

    def test_invalid_max_tasks(self, console) -> None:
        with pytest.raises(ValueError):
            ProgressManager(console.terminal(), max_tasks=0)


class BrokenOutput(io.StringIO):
    """Output whose reader has gone away."""

    def write(self, text: str) -> int:
        raise BrokenPipeError("Broken pipe")


class TestBrokenDisplay:
    """Tests for a display that fails to draw."""

    def test_tasks_still_finish(self, console, caplog) -> None:
        def busy(task):
            time.sleep(0.2)
            for i in range(3000):
                task.update(i)
            return "done"

        term = Terminal(console.tty, TTYMode.RAW, input=console.input, output=BrokenOutput(),
                        config=console.config)
        outcome = []

        def run() -> None:
            with ProgressManager(term) as manager:
                manager.add_task("busy", 3000, busy)
                outcome.extend(manager.wait_abortable())

        thread = threading.Thread(target=run, daemon=True)
        thread.start()
        thread.join(timeout=10)

        assert not thread.is_alive()
        assert [r.result for r in outcome] == ["done"]
        assert "Progress display failed" in caplog.text
