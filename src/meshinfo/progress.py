"""
Cooperative, resumable execution of long mesh passes.

Every pass is a generator. It yields the fraction of its own work done so far
at fixed iteration-count checkpoints, checks its cancellation token when the
host resumes it, and returns its value through ``StopIteration``. Pipelines
chain passes with ``yield from stage(...)``, which turns those fractions into
``ProgressReport`` snapshots. A ``Task`` lets the host pull one snapshot per
tick, and a ``Runner`` makes sure only one task is in flight at a time.
"""

import logging
from dataclasses import dataclass, replace
from typing import Callable, Generator, Iterator, Optional


class OperationCancelled(Exception):
    """Raised inside a pass when its token was cancelled. Never escapes a Task."""


class CancellationToken:
    """Cancellation flag owned by a single operation."""

    def __init__(self):
        self._cancelled = False

    def cancel(self):
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def raise_if_cancelled(self):
        if self._cancelled:
            raise OperationCancelled()


@dataclass(frozen=True)
class ProgressReport:
    """Snapshot of a running operation, for display only."""
    progress: float
    phase: str
    finished: bool = False
    cancelled: bool = False

    @property
    def done(self) -> bool:
        return self.finished or self.cancelled


# Generator protocol used by passes: yields fractions in [0, 1], returns the pass value.
PassSteps = Generator[float, None, object]
ReportSteps = Generator[ProgressReport, None, object]


def stage(steps: PassSteps, phase: str, start: float, end: float) -> ReportSteps:
    """
    Re-yield a pass's own progress as reports spanning [start, end] of the operation.

    Returns whatever the pass returns, so pipelines can write
    ``remap = yield from stage(weld_steps(...), "Welding vertices", 0.0, 0.4)``.
    """
    yield ProgressReport(start, phase)
    span = end - start
    while True:
        try:
            fraction = next(steps)
        except StopIteration as stop:
            return stop.value
        fraction = min(max(fraction, 0.0), 1.0)
        yield ProgressReport(start + span * fraction, phase)


class Task:
    """
    One engine operation, driven one snapshot at a time.

    The task is not restartable once stepping has begun; ``restart`` builds a
    fresh task that runs the same operation from scratch with a new token.
    """

    def __init__(self, name: str, factory: Callable[[CancellationToken], ReportSteps],
                 token: Optional[CancellationToken] = None):
        self.name = name
        self.token = token if token is not None else CancellationToken()
        self.report = ProgressReport(0.0, "Pending")
        self.result = None
        self._factory = factory
        self._steps = factory(self.token)

    @property
    def done(self) -> bool:
        return self.report.done

    @property
    def cancelled(self) -> bool:
        return self.report.cancelled

    def cancel(self):
        """Request cancellation. Takes effect at the next suspension point."""
        self.token.cancel()

    def step(self) -> ProgressReport:
        """Advance to the next suspension point and return the current snapshot."""
        if self.done:
            return self.report
        try:
            self.token.raise_if_cancelled()
            self.report = next(self._steps)
        except StopIteration as stop:
            self.result = stop.value
            self.report = replace(self.report, progress=1.0, finished=True)
            logging.info(f"{self.name}: finished")
        except OperationCancelled:
            self._steps.close()
            self.result = None
            self.report = replace(self.report, cancelled=True)
            logging.info(f"{self.name}: cancelled during '{self.report.phase}'")
        return self.report

    def __iter__(self) -> Iterator[ProgressReport]:
        while not self.done:
            yield self.step()

    def run(self, callback: Optional[Callable[[ProgressReport], None]] = None):
        """
        Drive the task to completion.

        Args:
            callback: Called with every snapshot, including the final one

        Returns:
            The operation's result, or None if it was cancelled
        """
        for report in self:
            if callback is not None:
                callback(report)
        return self.result

    def restart(self) -> "Task":
        return Task(self.name, self._factory)


class Runner:
    """
    Host-side driver that owns at most one in-flight task.

    Starting a new task cancels the current one and drains it to its
    terminal state first, so two operations never share a mesh.
    """

    def __init__(self, on_progress: Optional[Callable[[Task, ProgressReport], None]] = None):
        self.on_progress = on_progress
        self.current: Optional[Task] = None

    @property
    def busy(self) -> bool:
        return self.current is not None and not self.current.done

    def start(self, task: Task) -> Task:
        if self.busy:
            logging.info(f"Cancelling {self.current.name} before starting {task.name}")
            self.stop()
        self.current = task
        return task

    def stop(self):
        """Cancel the current task and step it until it reaches a terminal state."""
        if self.current is None:
            return
        self.current.cancel()
        while not self.current.done:
            self._tick()

    def tick(self) -> bool:
        """Advance the current task by one snapshot. Returns True while work remains."""
        if not self.busy:
            return False
        self._tick()
        return not self.current.done

    def run_until_done(self):
        while self.tick():
            pass
        return self.current.result if self.current is not None else None

    def _tick(self):
        report = self.current.step()
        if self.on_progress is not None:
            self.on_progress(self.current, report)


def drain(steps: PassSteps):
    """Run a pass to completion without suspending and return its value."""
    while True:
        try:
            next(steps)
        except StopIteration as stop:
            return stop.value
