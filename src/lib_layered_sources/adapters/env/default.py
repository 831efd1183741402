"""Environment variable adapter.

Purpose
-------
Translate a point-in-time snapshot of the process environment into a nested
configuration tree.

Naming convention
-----------------
* An optional prefix (``APP``, ``APP_`` or the slug ``my-app``) restricts which
  variables are read and is stripped before mapping. Slugs pass through
  :func:`default_env_prefix`.
* The remaining name is lower-cased and every ``_`` becomes a ``.``:
  ``SOURCE_TEST_TYPE`` → ``source.test.type``.
* Names with empty segments (``A__B``, ``_A``, ``A_``) are ignored.
* Variables are visited in sorted order. When a name needs a mapping where a
  scalar already sits, or the other way around (``PATH`` and ``PATH_INFO``),
  the later one is skipped and reported as ``env_key_conflict``.
* Values stay strings, exactly as the process sees them.

Because ``_`` is the path delimiter, dotted paths whose segments contain
underscores cannot be expressed through the environment.
"""

from __future__ import annotations

import os
from typing import Any, Mapping

from ...domain.tree import assign_dotted
from ...observability import log_debug


def default_env_prefix(slug: str) -> str:
    """Return the canonical environment prefix for *slug*.

    Examples
    --------
    >>> default_env_prefix('lib-layered-sources')
    'LIB_LAYERED_SOURCES'
    """

    return slug.replace("-", "_").upper()


def env_key_to_path(key: str, prefix: str | None = None) -> str | None:
    """Map an environment variable name to a dotted path, ``None`` when ineligible.

    Examples
    --------
    >>> env_key_to_path("SOURCE_TEST_TYPE")
    'source.test.type'
    >>> env_key_to_path("DEMO_SERVICE_TIMEOUT", prefix="DEMO")
    'service.timeout'
    >>> env_key_to_path("OTHER_VALUE", prefix="DEMO") is None
    True
    >>> env_key_to_path("DOUBLE__UNDERSCORE") is None
    True
    """

    normalized = _normalize_prefix(prefix)
    if normalized:
        if not key.startswith(normalized):
            return None
        key = key[len(normalized) :]
    parts = key.lower().split("_")
    if not all(parts):
        return None
    return ".".join(parts)


def path_to_env_key(path: str, prefix: str | None = None) -> str:
    """Return the environment variable name that :func:`env_key_to_path` maps to *path*.

    Examples
    --------
    >>> path_to_env_key("source.test.type")
    'SOURCE_TEST_TYPE'
    >>> path_to_env_key("service.timeout", prefix="demo")
    'DEMO_SERVICE_TIMEOUT'
    """

    return _normalize_prefix(prefix) + path.replace(".", "_").upper()


def _normalize_prefix(prefix: str | None) -> str:
    if not prefix:
        return ""
    prefix = default_env_prefix(prefix)
    return prefix if prefix.endswith("_") else f"{prefix}_"


class DefaultEnvLoader:
    """Load environment variables into a nested tree."""

    def __init__(self, *, environ: Mapping[str, str] | None = None) -> None:
        """Read from *environ* instead of :data:`os.environ` (used by tests)."""

        self._environ = os.environ if environ is None else environ

    def load(self, prefix: str | None = None) -> dict[str, Any]:
        """Return the nested mapping for every eligible variable.

        Examples
        --------
        >>> loader = DefaultEnvLoader(environ={"DEMO_SERVICE_ENABLED": "true", "OTHER": "x"})
        >>> loader.load("DEMO")
        {'service': {'enabled': 'true'}}
        """

        snapshot = dict(self._environ)
        collected: dict[str, Any] = {}
        for key in sorted(snapshot):
            path = env_key_to_path(key, prefix)
            if path is None:
                continue
            try:
                assign_dotted(collected, path, snapshot[key])
            except ValueError as exc:
                log_debug("env_key_conflict", layer="env", origin="env", key=key, error=str(exc))
        log_debug("env_variables_loaded", layer="env", origin="env", keys=sorted(collected.keys()))
        return collected
