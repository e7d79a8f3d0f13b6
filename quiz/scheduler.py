"""
Cancellable delayed callbacks.

The wizard never sleeps or spawns timers itself; it asks a scheduler for a
task handle and cancels that handle when the task becomes stale.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Callable, Optional, Protocol


class ScheduledTask(Protocol):
    """Handle to a callback that will run once after a delay."""

    def cancel(self) -> None:
        ...

    @property
    def cancelled(self) -> bool:
        ...

    @property
    def done(self) -> bool:
        ...

    def wait(self, timeout: Optional[float] = None) -> bool:
        ...


class Scheduler(Protocol):
    def call_later(
        self, delay: float, callback: Callable[[], None]
    ) -> ScheduledTask:
        ...


class _TimerTask:
    def __init__(self, delay: float, callback: Callable[[], None]):
        self._callback = callback
        self._cancelled = False
        self._done = threading.Event()
        self._timer = threading.Timer(delay, self._run)
        self._timer.daemon = True

    def _run(self) -> None:
        try:
            if not self._cancelled:
                self._callback()
        finally:
            self._done.set()

    def start(self) -> None:
        self._timer.start()

    def cancel(self) -> None:
        self._cancelled = True
        self._timer.cancel()
        self._done.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def done(self) -> bool:
        return self._done.is_set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        return self._done.wait(timeout)


class ThreadingScheduler:
    """Runs callbacks on ``threading.Timer`` threads."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> _TimerTask:
        task = _TimerTask(delay, callback)
        task.start()
        return task


@dataclass
class ManualTask:
    due_at: float
    callback: Callable[[], None]
    cancelled: bool = False
    done: bool = False

    def cancel(self) -> None:
        self.cancelled = True

    def wait(self, timeout: Optional[float] = None) -> bool:
        return self.done or self.cancelled


@dataclass
class ManualScheduler:
    """Test double: time only moves when ``advance`` is called."""

    now: float = 0.0
    tasks: list[ManualTask] = field(default_factory=list)

    def call_later(self, delay: float, callback: Callable[[], None]) -> ManualTask:
        task = ManualTask(due_at=self.now + delay, callback=callback)
        self.tasks.append(task)
        return task

    def advance(self, seconds: float) -> int:
        """Moves the clock forward and runs every task that became due."""
        self.now += seconds
        ran = 0
        for task in sorted(self.tasks, key=lambda t: t.due_at):
            if task.done or task.cancelled or task.due_at > self.now:
                continue
            task.done = True
            task.callback()
            ran += 1
        self.tasks = [t for t in self.tasks if not (t.done or t.cancelled)]
        return ran

    @property
    def pending(self) -> list[ManualTask]:
        return [t for t in self.tasks if not (t.done or t.cancelled)]
