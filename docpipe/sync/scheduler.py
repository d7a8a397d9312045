"""Cancellable delayed tasks for the configuration sync engine.

Queue spacing and debounce timers never sleep; they register a callback with a
scheduler and keep the returned handle so they can cancel it. Two schedulers
are provided:

- ``AsyncioScheduler`` runs callbacks on the running event loop.
- ``VirtualScheduler`` keeps a manual clock. Time only moves when ``advance``
  is called, which makes timing behaviour deterministic in tests and replays.
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
from collections.abc import Callable
from typing import Protocol

from loguru import logger

from docpipe.utils.time import monotonic_ms

Callback = Callable[[], None]


class ScheduledTask(Protocol):
    """Handle to a pending delayed callback."""

    def cancel(self) -> None:
        """Prevent the callback from running. Idempotent."""
        ...

    def cancelled(self) -> bool:
        """Return True once ``cancel`` has been called."""
        ...


class Scheduler(Protocol):
    """Clock plus delayed-callback registration."""

    def now_ms(self) -> float:
        """Return the current monotonic time in milliseconds."""
        ...

    def call_later(self, delay_ms: float, callback: Callback) -> ScheduledTask:
        """Run ``callback`` once after ``delay_ms`` milliseconds."""
        ...


class AsyncioScheduler:
    """Scheduler backed by the running asyncio event loop.

    The loop is looked up on every call so one scheduler can outlive the loop
    that created it (for example across test client portals).
    """

    def now_ms(self) -> float:
        try:
            return asyncio.get_running_loop().time() * 1000.0
        except RuntimeError:
            return monotonic_ms()

    def call_later(self, delay_ms: float, callback: Callback) -> ScheduledTask:
        """Schedule on the running loop.

        Raises:
            RuntimeError: When no event loop is running in this thread.
        """
        loop = asyncio.get_running_loop()
        return loop.call_later(max(0.0, delay_ms) / 1000.0, callback)


class _VirtualTask:
    __slots__ = ("callback", "due_ms", "_cancelled")

    def __init__(self, due_ms: float, callback: Callback) -> None:
        self.due_ms = due_ms
        self.callback = callback
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    def cancelled(self) -> bool:
        return self._cancelled


class VirtualScheduler:
    """Deterministic scheduler driven by an explicit virtual clock."""

    def __init__(self, start_ms: float = 0.0) -> None:
        """Initialize the scheduler.

        Args:
            start_ms: Initial virtual time in milliseconds.
        """
        self._now = float(start_ms)
        self._heap: list[tuple[float, int, _VirtualTask]] = []
        self._seq = itertools.count()

    def now_ms(self) -> float:
        return self._now

    def call_later(self, delay_ms: float, callback: Callback) -> ScheduledTask:
        task = _VirtualTask(self._now + max(0.0, delay_ms), callback)
        heapq.heappush(self._heap, (task.due_ms, next(self._seq), task))
        return task

    @property
    def pending(self) -> int:
        """Number of scheduled, not yet cancelled, tasks."""
        return sum(1 for _, _, task in self._heap if not task.cancelled())

    def advance(self, delta_ms: float) -> int:
        """Move the clock forward, firing every task that falls due.

        Tasks fire in due-time order, ties in scheduling order, with the clock
        set to each task's due time. Tasks scheduled by a firing callback run in
        the same call when they fall inside the window.

        Args:
            delta_ms: Milliseconds to advance; must not be negative.

        Returns:
            int: Number of callbacks that ran.
        """
        if delta_ms < 0:
            raise ValueError("cannot move a virtual clock backwards")
        return self._run_until(self._now + delta_ms)

    def advance_to(self, instant_ms: float) -> int:
        """Advance the clock to an absolute instant."""
        return self.advance(max(0.0, instant_ms - self._now))

    def run_until_idle(self, limit: int = 10_000) -> int:
        """Fire tasks until none remain.

        Args:
            limit: Safety cap on the number of callbacks.

        Returns:
            int: Number of callbacks that ran.
        """
        fired = 0
        while self._heap and fired < limit:
            due, _, task = heapq.heappop(self._heap)
            if task.cancelled():
                continue
            self._now = max(self._now, due)
            task.callback()
            fired += 1
        if self._heap and fired >= limit:
            logger.warning("virtual scheduler stopped after {} callbacks", limit)
        return fired

    def _run_until(self, target_ms: float) -> int:
        fired = 0
        while self._heap and self._heap[0][0] <= target_ms:
            due, _, task = heapq.heappop(self._heap)
            if task.cancelled():
                continue
            self._now = due
            task.callback()
            fired += 1
        self._now = target_ms
        return fired


__all__ = [
    "AsyncioScheduler",
    "Callback",
    "ScheduledTask",
    "Scheduler",
    "VirtualScheduler",
]
