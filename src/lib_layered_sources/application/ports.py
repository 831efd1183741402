"""Application-layer ports describing adapter responsibilities.

Purpose
-------
Define the structural contracts that adapters satisfy so the composition root
and the watch engine can orchestrate behaviour without depending on concrete
implementations.

Contents
--------
* :class:`ProviderFormat` – closed set of tags, one per supported format.
* :class:`Provider` – parses raw content into a configuration tree.
* :class:`Fetcher` – reads raw bytes from a file path or URL.
* :class:`Scheduler` / :class:`ScheduledCall` – deferred execution used by
  watches.

System Role
-----------
These protocols enforce Dependency Inversion. Providers and fetchers live in
:mod:`lib_layered_sources.adapters`; schedulers live in
:mod:`lib_layered_sources.adapters.scheduling` and
:mod:`lib_layered_sources.testing`.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Callable, Protocol, runtime_checkable


class ProviderFormat(str, Enum):
    """Tag identifying the format a provider understands."""

    HOCON = "hocon"
    JSON = "json"
    PROPERTIES = "properties"
    TOML = "toml"
    XML = "xml"
    YAML = "yaml"


@runtime_checkable
class Provider(Protocol):
    """Parse raw content of one format into an immutable configuration tree."""

    format: ProviderFormat

    def parse(self, content: bytes | str, origin: str) -> Any:
        """Return the tree for *content* or raise ``ParseFailure`` naming *origin*."""


@runtime_checkable
class Fetcher(Protocol):
    """Read raw content from a location (file path or URL)."""

    def fetch(self, location: Any) -> bytes:
        """Return the bytes stored at *location* or raise ``LoadFailure``."""

    def describe(self, location: Any) -> str:
        """Return the provenance string used for layers and errors."""


@runtime_checkable
class ScheduledCall(Protocol):
    """Handle to a pending callback."""

    def cancel(self) -> None:
        """Prevent the callback from running if it has not started yet."""


@runtime_checkable
class Scheduler(Protocol):
    """Run callbacks after a delay, one at a time.

    Callbacks submitted to the same scheduler never run concurrently with each
    other, which keeps watch ticks non-overlapping.
    """

    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledCall:
        """Run *callback* once after *delay* seconds."""

    def shutdown(self) -> None:
        """Stop accepting work and drop pending callbacks."""
