from __future__ import annotations

import pytest

from lib_layered_sources.testing import ManualScheduler


def test_callbacks_run_in_due_order() -> None:
    scheduler = ManualScheduler()
    calls: list[str] = []
    scheduler.call_later(2.0, lambda: calls.append("late"))
    scheduler.call_later(1.0, lambda: calls.append("early"))
    scheduler.advance(5.0)
    assert calls == ["early", "late"]
    assert scheduler.now == 5.0


def test_callbacks_scheduled_while_advancing_run_when_due() -> None:
    scheduler = ManualScheduler()
    stamps: list[float] = []

    def tick() -> None:
        stamps.append(scheduler.now)
        scheduler.call_later(1.0, tick)

    scheduler.call_later(1.0, tick)
    scheduler.advance(3.5)
    assert stamps == [1.0, 2.0, 3.0]
    assert scheduler.pending == 1


def test_cancelled_calls_do_not_run() -> None:
    scheduler = ManualScheduler()
    calls: list[int] = []
    call = scheduler.call_later(1.0, lambda: calls.append(1))
    call.cancel()
    scheduler.advance(2.0)
    assert calls == []
    assert scheduler.pending == 0


def test_shutdown_rejects_new_calls() -> None:
    scheduler = ManualScheduler()
    scheduler.call_later(1.0, lambda: None)
    scheduler.shutdown()
    assert scheduler.closed
    assert scheduler.pending == 0
    with pytest.raises(RuntimeError):
        scheduler.call_later(1.0, lambda: None)
