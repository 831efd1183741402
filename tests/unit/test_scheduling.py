from __future__ import annotations

import threading

import pytest

from lib_layered_sources.adapters.scheduling.default import ThreadScheduler


def test_callbacks_run_on_worker_thread() -> None:
    scheduler = ThreadScheduler(name="test-scheduler")
    done = threading.Event()
    names: list[str] = []

    def callback() -> None:
        names.append(threading.current_thread().name)
        done.set()

    try:
        scheduler.call_later(0.01, callback)
        assert done.wait(5.0)
    finally:
        scheduler.shutdown(wait=True)
    assert names == ["test-scheduler"]


def test_cancelled_callback_is_skipped() -> None:
    scheduler = ThreadScheduler()
    fired = threading.Event()
    marker = threading.Event()
    try:
        scheduler.call_later(0.05, fired.set).cancel()
        scheduler.call_later(0.1, marker.set)
        assert marker.wait(5.0)
        assert not fired.is_set()
    finally:
        scheduler.shutdown(wait=True)


def test_failing_callback_does_not_stop_the_worker() -> None:
    scheduler = ThreadScheduler()
    survived = threading.Event()

    def boom() -> None:
        raise RuntimeError("boom")

    try:
        scheduler.call_later(0.01, boom)
        scheduler.call_later(0.02, survived.set)
        assert survived.wait(5.0)
    finally:
        scheduler.shutdown(wait=True)


def test_shutdown_rejects_new_calls() -> None:
    scheduler = ThreadScheduler()
    scheduler.shutdown(wait=True)
    assert scheduler.closed
    with pytest.raises(RuntimeError):
        scheduler.call_later(1.0, lambda: None)
