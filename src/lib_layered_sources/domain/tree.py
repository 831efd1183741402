"""Immutable configuration trees.

Purpose
-------
Give every provider one shared tree shape so the merge engine never needs to
know which format produced a layer. A tree node is a scalar, a tuple of nodes,
or a read-only mapping from string keys to nodes.

Contents
--------
* :data:`MISSING` – sentinel returned when a dotted path is absent.
* :func:`freeze_tree` – convert parser output into an immutable tree.
* :func:`thaw_tree` – deep mutable copy for serialisation.
* :func:`nest_dotted` – build a nested mapping from flat dotted pairs.
* :func:`lookup_path` – resolve a dotted path inside one tree.

System Role
-----------
Providers call :func:`freeze_tree` (directly or via :func:`nest_dotted`);
:class:`lib_layered_sources.domain.config.Config` uses :func:`lookup_path` to
implement the top-down layer scan.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, Iterable


class _Missing:
    """Marker type for absent paths (distinct from a stored ``None``)."""

    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()

EMPTY_TREE: Mapping[str, Any] = MappingProxyType({})


def freeze_tree(value: Any) -> Any:
    """Return an immutable copy of *value*.

    Mappings become ``mappingproxy`` objects with string keys, lists and tuples
    become tuples, everything else is returned unchanged.

    Examples
    --------
    >>> frozen = freeze_tree({"db": {"ports": [1, 2]}})
    >>> frozen["db"]["ports"]
    (1, 2)
    >>> type(frozen).__name__
    'mappingproxy'
    """

    if isinstance(value, Mapping):
        return MappingProxyType({str(key): freeze_tree(item) for key, item in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(freeze_tree(item) for item in value)
    return value


def thaw_tree(value: Any) -> Any:
    """Return a mutable deep copy of *value* (dicts and lists).

    Examples
    --------
    >>> thaw_tree(freeze_tree({"a": [1, {"b": 2}]}))
    {'a': [1, {'b': 2}]}
    """

    if isinstance(value, Mapping):
        return {key: thaw_tree(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [thaw_tree(item) for item in value]
    return value


def nest_dotted(pairs: Iterable[tuple[str, Any]]) -> dict[str, Any]:
    """Build a nested ``dict`` from ``(dotted_key, value)`` pairs.

    Raises :class:`ValueError` when a key needs a mapping where a scalar was
    already assigned, or the other way around. Callers translate the error into
    their own failure type.

    Examples
    --------
    >>> nest_dotted([("source.test.type", "flat"), ("source.name", "x")])
    {'source': {'test': {'type': 'flat'}, 'name': 'x'}}
    """

    result: dict[str, Any] = {}
    for key, value in pairs:
        assign_dotted(result, key, value)
    return result


def assign_dotted(target: dict[str, Any], key: str, value: Any) -> None:
    """Assign *value* inside *target* at the dotted path *key*."""

    parts = key.split(".")
    if not all(parts):
        raise ValueError(f"Empty path segment in key {key!r}")
    cursor = target
    for part in parts[:-1]:
        child = cursor.setdefault(part, {})
        if not isinstance(child, dict):
            raise ValueError(f"Cannot override scalar with mapping for key {key!r}")
        cursor = child
    if isinstance(cursor.get(parts[-1]), dict):
        raise ValueError(f"Cannot override mapping with scalar for key {key!r}")
    cursor[parts[-1]] = value


def lookup_path(tree: Any, dotted: str) -> Any:
    """Return the node at *dotted* inside *tree* or :data:`MISSING`.

    Each dot-delimited segment descends one mapping level. An empty path
    addresses the whole tree.

    Examples
    --------
    >>> tree = freeze_tree({"service": {"timeout": 5}})
    >>> lookup_path(tree, "service.timeout")
    5
    >>> lookup_path(tree, "service.timeout.unit")
    MISSING
    """

    if not dotted:
        return tree
    current = tree
    for part in dotted.split("."):
        if not isinstance(current, Mapping) or part not in current:
            return MISSING
        current = current[part]
    return current
