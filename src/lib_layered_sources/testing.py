"""Testing support that keeps watch scenarios deterministic.

Purpose
    Drive watch ticks from a virtual clock instead of real threads and
    ``time.sleep`` so reload, resilience and cancellation tests run instantly
    and never flake.

Contents
    - ``ManualScheduler``: a :class:`~lib_layered_sources.application.ports.Scheduler`
      whose time only moves when :meth:`ManualScheduler.advance` is called.

System Integration
    Pass an instance as ``scheduler=`` to ``watch_file``/``watch_url``. Shared
    schedulers are never shut down by the watches using them.
"""

from __future__ import annotations

import heapq
import itertools
from typing import Callable


class ManualCall:
    """Pending callback registered on a :class:`ManualScheduler`."""

    __slots__ = ("due", "callback", "cancelled")

    def __init__(self, due: float, callback: Callable[[], None]) -> None:
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Virtual-clock scheduler executing callbacks on the caller's thread.

    Examples
    --------
    >>> calls = []
    >>> scheduler = ManualScheduler()
    >>> _ = scheduler.call_later(1.0, lambda: calls.append(scheduler.now))
    >>> scheduler.advance(0.5)
    >>> calls
    []
    >>> scheduler.advance(0.5)
    >>> calls
    [1.0]
    """

    def __init__(self) -> None:
        self.now = 0.0
        self.closed = False
        self._queue: list[tuple[float, int, ManualCall]] = []
        self._counter = itertools.count()

    @property
    def pending(self) -> int:
        """Number of callbacks still waiting to run."""

        return sum(1 for _, _, call in self._queue if not call.cancelled)

    def call_later(self, delay: float, callback: Callable[[], None]) -> ManualCall:
        if self.closed:
            raise RuntimeError("scheduler has been shut down")
        call = ManualCall(self.now + max(delay, 0.0), callback)
        heapq.heappush(self._queue, (call.due, next(self._counter), call))
        return call

    def advance(self, seconds: float) -> None:
        """Move the clock forward, running every callback that becomes due.

        Callbacks scheduled while advancing run too when they fall due before
        the new time.
        """

        target = self.now + seconds
        while self._queue and self._queue[0][0] <= target:
            due, _, call = heapq.heappop(self._queue)
            self.now = due
            if not call.cancelled:
                call.callback()
        self.now = target

    def shutdown(self) -> None:
        self.closed = True
        self._queue.clear()
