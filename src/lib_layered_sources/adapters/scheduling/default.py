"""Thread-backed scheduler for watch ticks.

Purpose
-------
Run delayed callbacks on one dedicated daemon thread so that reloads never
borrow threads from the application. Each watch gets its own
:class:`ThreadScheduler` unless the caller shares one between watches, in which
case their ticks run one after another on that single thread.
"""

from __future__ import annotations

import heapq
import itertools
import threading
import time
from typing import Callable

from ...observability import log_error


class ScheduledCallback:
    """Pending callback returned by :meth:`ThreadScheduler.call_later`."""

    __slots__ = ("callback", "cancelled")

    def __init__(self, callback: Callable[[], None]) -> None:
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ThreadScheduler:
    """Single worker thread executing callbacks in due order.

    Examples
    --------
    >>> done = threading.Event()
    >>> scheduler = ThreadScheduler(name="doctest-scheduler")
    >>> _ = scheduler.call_later(0.0, done.set)
    >>> done.wait(5.0)
    True
    >>> scheduler.shutdown(wait=True)
    """

    def __init__(self, name: str = "lib_layered_sources-watch", *, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._queue: list[tuple[float, int, ScheduledCallback]] = []
        self._counter = itertools.count()
        self._condition = threading.Condition()
        self._closed = False
        self._thread = threading.Thread(target=self._run, name=name, daemon=True)
        self._thread.start()

    @property
    def closed(self) -> bool:
        return self._closed

    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledCallback:
        """Queue *callback* to run once *delay* seconds from now."""

        scheduled = ScheduledCallback(callback)
        with self._condition:
            if self._closed:
                raise RuntimeError("scheduler has been shut down")
            due = self._clock() + max(delay, 0.0)
            heapq.heappush(self._queue, (due, next(self._counter), scheduled))
            self._condition.notify()
        return scheduled

    def shutdown(self, wait: bool = False) -> None:
        """Drop pending callbacks and stop the worker.

        A callback that is already running finishes first. ``wait`` joins the
        worker unless called from the worker itself.
        """

        with self._condition:
            self._closed = True
            self._queue.clear()
            self._condition.notify_all()
        if wait and threading.current_thread() is not self._thread:
            self._thread.join()

    def _run(self) -> None:
        while True:
            with self._condition:
                scheduled = self._next_due()
            if scheduled is None:
                return
            if scheduled.cancelled:
                continue
            try:
                scheduled.callback()
            except Exception as exc:  # noqa: BLE001 - keep the worker alive for later ticks
                log_error("scheduler_callback_failed", layer="watch", origin=None, error=repr(exc))

    def _next_due(self) -> ScheduledCallback | None:
        """Block until a callback is due; return ``None`` once shut down."""

        while not self._closed:
            if not self._queue:
                self._condition.wait()
                continue
            due = self._queue[0][0]
            remaining = due - self._clock()
            if remaining > 0:
                self._condition.wait(remaining)
                continue
            return heapq.heappop(self._queue)[2]
        return None
