"""Periodic tasks driven by an injectable clock.

The real-time tick and the auto-save are independent tasks. Tests swap in
``ManualClock`` to simulate hours of play without sleeping.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

logger = logging.getLogger("idlepark.Scheduler")
logger.addHandler(logging.NullHandler())


class ManualClock:
    """Clock that only moves when told to."""

    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        if seconds < 0:
            raise ValueError("Cannot move a clock backwards")
        self.now += seconds

    def sleep(self, seconds: float) -> None:
        self.advance(max(0.0, seconds))


@dataclass
class PeriodicTask:
    name: str
    interval: float
    callback: Callable[[float], None]
    last_run: float

    def due(self, now: float) -> bool:
        # Tolerance keeps float drift from stalling a task forever.
        return now - self.last_run >= self.interval - 1e-9


class Scheduler:
    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.clock = clock
        self.sleep = sleep
        self.tasks: Dict[str, PeriodicTask] = {}
        self._stopped = False

    def add_task(self, name: str, interval: float, callback: Callable[[float], None]) -> PeriodicTask:
        """Register ``callback`` to run every ``interval`` seconds.

        The callback receives the seconds elapsed since it last ran.
        """
        if interval <= 0:
            raise ValueError(f"Interval for task {name!r} must be positive")
        task = PeriodicTask(name=name, interval=interval, callback=callback, last_run=self.clock())
        self.tasks[name] = task
        return task

    def remove_task(self, name: str) -> None:
        self.tasks.pop(name, None)

    def run_pending(self) -> List[str]:
        """Run every due task once; return the names of the tasks that ran."""
        now = self.clock()
        ran: List[str] = []
        for task in list(self.tasks.values()):
            if task.due(now):
                elapsed = now - task.last_run
                task.last_run = now
                task.callback(elapsed)
                ran.append(task.name)
        return ran

    def next_due_in(self) -> Optional[float]:
        if not self.tasks:
            return None
        now = self.clock()
        return max(0.0, min(t.last_run + t.interval - now for t in self.tasks.values()))

    def stop(self) -> None:
        self._stopped = True

    def run(self, until: Optional[Callable[[], bool]] = None) -> None:
        """Loop until stopped, until ``until()`` is true, or no tasks remain."""
        self._stopped = False
        while not self._stopped:
            if until is not None and until():
                break
            wait = self.next_due_in()
            if wait is None:
                break
            if wait > 0:
                self.sleep(wait)
            self.run_pending()
        logger.debug("Scheduler stopped")
