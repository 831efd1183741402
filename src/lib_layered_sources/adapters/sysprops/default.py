"""Process-wide system properties.

Purpose
-------
Give Python processes a counterpart of JVM system properties: a lock-guarded
``str -> str`` store that any part of the process can set, and that the
``system_properties`` source reads as a point-in-time snapshot.

Keys are taken verbatim as dotted paths: setting ``source.test.type`` makes
``config.get("source.test.type")`` return the value after a reload.

Contents
--------
* :class:`SystemProperties` – the store type.
* :data:`SYSTEM_PROPERTIES` – the process-wide instance.
* :class:`SystemPropertiesLoader` – turns a snapshot into a nested tree.
"""

from __future__ import annotations

import threading
from typing import Any, Iterator

from ...domain.tree import assign_dotted
from ...observability import log_debug, log_warning


class SystemProperties:
    """Thread-safe ``str -> str`` property store.

    Examples
    --------
    >>> props = SystemProperties()
    >>> props.set_property("source.test.type", "system")
    >>> props.get_property("source.test.type")
    'system'
    >>> props.clear_property("source.test.type")
    'system'
    >>> props.get_property("source.test.type", "unset")
    'unset'
    """

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._values: dict[str, str] = dict(initial or {})
        self._lock = threading.Lock()

    def set_property(self, key: str, value: str) -> None:
        with self._lock:
            self._values[key] = str(value)

    def get_property(self, key: str, default: str | None = None) -> str | None:
        with self._lock:
            return self._values.get(key, default)

    def clear_property(self, key: str) -> str | None:
        """Remove *key* and return its previous value."""

        with self._lock:
            return self._values.pop(key, None)

    def snapshot(self) -> dict[str, str]:
        """Return a copy of all properties at this instant."""

        with self._lock:
            return dict(self._values)

    def __iter__(self) -> Iterator[str]:
        return iter(self.snapshot())

    def __len__(self) -> int:
        with self._lock:
            return len(self._values)


SYSTEM_PROPERTIES = SystemProperties()
"""Process-wide store read by default loaders."""


class SystemPropertiesLoader:
    """Load a system properties snapshot into a nested tree."""

    def __init__(self, *, properties: SystemProperties | None = None) -> None:
        self._properties = SYSTEM_PROPERTIES if properties is None else properties

    def load(self) -> dict[str, Any]:
        """Return the nested mapping for the current properties.

        Keys with empty segments and keys that clash with an already assigned
        path are skipped (visited in sorted order), mirroring the environment
        adapter. Skipped keys are reported as
        ``system_property_conflict`` warnings.

        Examples
        --------
        >>> props = SystemProperties({"source.test.type": "system"})
        >>> SystemPropertiesLoader(properties=props).load()
        {'source': {'test': {'type': 'system'}}}
        """

        snapshot = self._properties.snapshot()
        collected: dict[str, Any] = {}
        for key in sorted(snapshot):
            try:
                assign_dotted(collected, key, snapshot[key])
            except ValueError as exc:
                log_warning("system_property_conflict", layer="system", origin="system", key=key, error=str(exc))
        log_debug("system_properties_loaded", layer="system", origin="system", keys=sorted(collected.keys()))
        return collected
