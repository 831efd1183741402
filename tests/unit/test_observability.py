"""Unit tests for structured logging utilities in ``observability``.

Validates the null handler, trace binding, and event construction behaviour the
module reference promises to downstream consumers.
"""

from __future__ import annotations

import logging

import pytest

from lib_layered_sources import DefaultLoaders, bind_trace_id, get_logger
from lib_layered_sources.observability import TRACE_ID, log_info, log_warning, make_event


def test_null_handler_present() -> None:
    """Package logger should always include a NullHandler to avoid surprises."""

    logger = get_logger()
    assert logger.name == "lib_layered_sources"
    assert any(isinstance(handler, logging.NullHandler) for handler in logger.handlers)


def test_trace_id_in_log(caplog: pytest.LogCaptureFixture) -> None:
    """Structured logs should include the bound trace identifier and contextual fields."""

    caplog.set_level(logging.INFO, logger="lib_layered_sources")
    bind_trace_id("trace-123")
    try:
        log_info("layer_appended", layer="env", origin="env")
    finally:
        bind_trace_id(None)
    record = caplog.records[-1]
    assert getattr(record, "context") == {"trace_id": "trace-123", "layer": "env", "origin": "env"}


def test_warning_level(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.WARNING, logger="lib_layered_sources")
    log_warning("something_odd", layer="url", origin="url:http://cfg")
    assert caplog.records[-1].levelno == logging.WARNING


def test_bind_trace_id_clears_context() -> None:
    """Clearing the trace ID should reset the context variable to None."""

    bind_trace_id("trace-temp")
    bind_trace_id(None)
    assert TRACE_ID.get() is None


def test_make_event_merges_optional_payload() -> None:
    """make_event should merge optional metadata without mutating base keys."""

    event = make_event("env", None, {"keys": 3})
    assert event == {"layer": "env", "origin": None, "keys": 3}


def test_loads_emit_layer_appended(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.DEBUG, logger="lib_layered_sources")
    DefaultLoaders().kv({"a": 1})
    records = [record for record in caplog.records if record.getMessage() == "layer_appended"]
    context = getattr(records[-1], "context")
    assert context["origin"] == "map:kv"
    assert context["depth"] == 1
