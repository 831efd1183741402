"""Watch engine: periodic reload of one layer.

Purpose
-------
Keep a file or URL layer in sync with its origin. A :class:`WatchHandle`
re-fetches the origin on a fixed delay, parses changed content with the same
provider, and swaps the layer's tree in one step so readers see either the old
or the new tree.

Contents
--------
* :class:`WatchState` – ``ACTIVE`` or ``CANCELLED``.
* :class:`WatchHandle` – the disposable binding between origin and layer.

Tick protocol
-------------
1. Skip the tick if the handle was cancelled.
2. Fetch raw content. Unchanged bytes end the tick (``watch_unchanged``).
3. Parse, then under the handle lock re-check cancellation and swap the tree.
4. :class:`LoadFailure` / :class:`ParseFailure` keep the previous tree and are
   logged as ``watch_tick_failed``.
5. Schedule the next tick only after the current one has finished, so two ticks
   of one watch never overlap.
"""

from __future__ import annotations

import threading
from enum import Enum
from typing import Any, Callable

from ..domain.config import Layer
from ..domain.errors import LoadFailure, ParseFailure
from ..observability import log_debug, log_error, log_info, make_event
from .ports import ScheduledCall, Scheduler


class WatchState(str, Enum):
    """Lifecycle of a watch; ``CANCELLED`` is terminal."""

    ACTIVE = "active"
    CANCELLED = "cancelled"


class WatchHandle:
    """Disposable handle refreshing one layer on a schedule.

    Parameters
    ----------
    layer:
        The layer whose tree cell is refreshed. The handle does not own the
        configurations that contain the layer.
    fetch:
        Returns the current raw content of the origin.
    parse:
        Turns raw content into a tree.
    interval:
        Delay in seconds between the end of one tick and the start of the next.
    scheduler:
        Where ticks run.
    owns_scheduler:
        Shut the scheduler down on cancellation. ``False`` for schedulers
        supplied by the caller.
    initial_content:
        Raw content that produced the layer's current tree.
    """

    def __init__(
        self,
        *,
        layer: Layer,
        fetch: Callable[[], bytes],
        parse: Callable[[bytes], Any],
        interval: float,
        scheduler: Scheduler,
        owns_scheduler: bool,
        initial_content: bytes,
    ) -> None:
        if interval <= 0:
            raise ValueError(f"watch interval must be positive, got {interval!r}")
        self.layer = layer
        self.interval = interval
        self._fetch = fetch
        self._parse = parse
        self._scheduler = scheduler
        self._owns_scheduler = owns_scheduler
        self._last_content = initial_content
        self._lock = threading.Lock()
        self._state = WatchState.ACTIVE
        self._pending: ScheduledCall | None = None
        self.ticks = 0
        self.swaps = 0
        self.failures = 0
        self.last_error: Exception | None = None

    @property
    def state(self) -> WatchState:
        return self._state

    @property
    def active(self) -> bool:
        return self._state is WatchState.ACTIVE

    def start(self) -> WatchHandle:
        """Schedule the first tick one interval from now."""

        log_info("watch_started", **make_event(self.layer.name, self.layer.origin, {"interval": self.interval}))
        self._schedule_next()
        return self

    def cancel(self) -> None:
        """Stop the watch; the last loaded tree stays visible.

        Idempotent. A tick already running may finish but never swaps after
        this method returns.
        """

        with self._lock:
            if self._state is WatchState.CANCELLED:
                return
            self._state = WatchState.CANCELLED
            pending, self._pending = self._pending, None
        if pending is not None:
            pending.cancel()
        if self._owns_scheduler:
            self._scheduler.shutdown()
        log_info("watch_cancelled", **make_event(self.layer.name, self.layer.origin, {"ticks": self.ticks}))

    close = cancel

    def __enter__(self) -> WatchHandle:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.cancel()

    def __repr__(self) -> str:
        return f"WatchHandle(origin={self.layer.origin!r}, interval={self.interval!r}, state={self._state.value!r})"

    def _tick(self) -> None:
        with self._lock:
            if self._state is WatchState.CANCELLED:
                return
            self._pending = None
        self.ticks += 1
        try:
            self._refresh()
        except (LoadFailure, ParseFailure) as exc:
            self.failures += 1
            self.last_error = exc
            log_error(
                "watch_tick_failed",
                **make_event(self.layer.name, self.layer.origin, {"error": str(exc), "failures": self.failures}),
            )
        finally:
            self._schedule_next()

    def _refresh(self) -> None:
        content = self._fetch()
        if content == self._last_content:
            log_debug("watch_unchanged", **make_event(self.layer.name, self.layer.origin))
            return
        tree = self._parse(content)
        with self._lock:
            if self._state is WatchState.CANCELLED:
                log_debug("watch_discarded", **make_event(self.layer.name, self.layer.origin))
                return
            self.layer.cell.swap(tree)
            self._last_content = content
            self.swaps += 1
        log_info("watch_swapped", **make_event(self.layer.name, self.layer.origin, {"swaps": self.swaps}))

    def _schedule_next(self) -> None:
        with self._lock:
            if self._state is WatchState.CANCELLED:
                return
            self._pending = self._scheduler.call_later(self.interval, self._tick)
