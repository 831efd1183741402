"""Domain-level configuration value objects.

Purpose
-------
Anchor the immutable :class:`Config` value object that carries an ordered stack
of layers through the system. This module belongs to the domain layer and
contains no I/O.

Contents
--------
* :class:`TreeCell` – the only mutable slot in the model; holds the current
  tree of one layer and swaps it atomically.
* :class:`Layer` – a configuration tree paired with provenance.
* :class:`SourceInfo` – typed metadata describing which layer supplied a key.
* :class:`Config` – ``Mapping`` implementation resolving dotted keys by
  scanning layers from the most recent to the oldest.
* :data:`EMPTY_CONFIG` – canonical configuration without layers.

System Role
-----------
Every load operation of :class:`lib_layered_sources.core.DefaultLoaders`
returns a new :class:`Config`. Watched layers share their :class:`TreeCell`
with every configuration built on top of them, so a reload becomes visible to
all of those values at once while the layer stack itself never changes.
"""

from __future__ import annotations

import threading
from collections.abc import Mapping as MappingABC
from dataclasses import dataclass
from typing import Any, Iterator, Mapping, TypedDict

from .tree import MISSING, freeze_tree, lookup_path


class SourceInfo(TypedDict):
    """Describe the origin of a resolved configuration key.

    Attributes
    ----------
    layer:
        Source kind of the winning layer (``"env"``, ``"file"``, ``"url"`` ...).
    origin:
        Provenance string of the winning layer (``"file:/etc/app.json"``).
    key:
        Fully qualified dotted key that was resolved.
    """

    layer: str
    origin: str
    key: str


class TreeCell:
    """Lock-guarded reference to a layer's current tree.

    Readers always receive either the old or the new tree object; the tree
    itself is immutable and is never edited in place.

    Examples
    --------
    >>> cell = TreeCell({"a": 1})
    >>> previous = cell.swap({"a": 2})
    >>> previous["a"], cell.get()["a"]
    (1, 2)
    """

    __slots__ = ("_tree", "_lock")

    def __init__(self, tree: Any) -> None:
        self._tree = tree
        self._lock = threading.Lock()

    def get(self) -> Any:
        with self._lock:
            return self._tree

    def swap(self, tree: Any) -> Any:
        """Replace the stored tree and return the previous one."""

        with self._lock:
            previous = self._tree
            self._tree = tree
            return previous


@dataclass(frozen=True, slots=True, eq=False)
class Layer:
    """One loaded source: its tree plus provenance.

    Parameters
    ----------
    name:
        Source kind (``"env"``, ``"system"``, ``"string"``, ``"map"``,
        ``"file"``, ``"url"``, ``"override"``).
    origin:
        Human readable provenance such as ``"file:/etc/app.toml"``.
    cell:
        Slot holding the current tree. Only the watch engine swaps it.
    format:
        Provider format tag that parsed the content, ``None`` for in-memory
        sources.
    """

    name: str
    origin: str
    cell: TreeCell
    format: str | None = None

    @classmethod
    def of(cls, name: str, origin: str, tree: Any, format: str | None = None) -> Layer:
        """Freeze *tree* and wrap it into a new layer.

        Examples
        --------
        >>> Layer.of("map", "map:hierarchical", {"a": {"b": 1}}).tree["a"]["b"]
        1
        """

        return cls(name, origin, TreeCell(freeze_tree(tree)), format)

    @property
    def tree(self) -> Any:
        return self.cell.get()


@dataclass(frozen=True, slots=True)
class Config(MappingABC[str, Any]):
    """Immutable stack of layers returned to library consumers.

    Lookup of a dotted key scans layers from the newest to the oldest and
    returns the value held by the first layer whose tree contains the key.
    A newer layer holding a mapping at a path therefore hides an older scalar
    at the same path, and a newer scalar hides older mappings at that path but
    not the keys nested below it.

    Examples
    --------
    >>> base = Config().with_layer(Layer.of("map", "map:defaults", {"service": {"timeout": 5, "retries": 1}}))
    >>> cfg = base.with_layer(Layer.of("map", "map:overrides", {"service": {"timeout": 30}}))
    >>> cfg.get("service.timeout"), cfg.get("service.retries")
    (30, 1)
    >>> cfg.origin("service.timeout")["origin"]
    'map:overrides'
    >>> base.get("service.timeout")
    5
    """

    _layers: tuple[Layer, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "_layers", tuple(self._layers))

    @property
    def layers(self) -> tuple[Layer, ...]:
        """Layers ordered from the base (index 0) to the most recent."""

        return self._layers

    def __getitem__(self, key: str) -> Any:
        value = self._resolve(key)[0]
        if value is MISSING:
            raise KeyError(key)
        return value

    def __iter__(self) -> Iterator[str]:
        """Iterate over the top-level keys defined by any layer."""

        seen: dict[str, None] = {}
        for layer in self._layers:
            tree = layer.tree
            if isinstance(tree, MappingABC):
                seen.update(dict.fromkeys(tree))
        return iter(seen)

    def __len__(self) -> int:
        return sum(1 for _ in self)

    def get(self, key: str, default: Any = None) -> Any:
        """Resolve *key* as a dotted path and return *default* when absent.

        Examples
        --------
        >>> cfg = Config().with_overrides({"db": {"host": "localhost"}})
        >>> cfg.get("db.host")
        'localhost'
        >>> cfg.get("db.port", 5432)
        5432
        """

        value = self._resolve(key)[0]
        return default if value is MISSING else value

    def contains(self, key: str) -> bool:
        """Return ``True`` when any layer defines the dotted *key*, even as ``None``."""

        return self._resolve(key)[0] is not MISSING

    def origin(self, key: str) -> SourceInfo | None:
        """Return provenance of the layer that supplies *key* or ``None``."""

        value, layer = self._resolve(key)
        if value is MISSING or layer is None:
            return None
        return SourceInfo(layer=layer.name, origin=layer.origin, key=key)

    def with_layer(self, layer: Layer) -> Config:
        """Return a new configuration with *layer* stacked on top."""

        return Config(self._layers + (layer,))

    def with_overrides(self, overrides: Mapping[str, Any]) -> Config:
        """Return a new configuration with *overrides* as the newest layer.

        Examples
        --------
        >>> base = Config().with_overrides({"feature": False})
        >>> base.with_overrides({"feature": True}).get("feature"), base.get("feature")
        (True, False)
        """

        return self.with_layer(Layer.of("override", "override", overrides))

    def as_dict(self) -> dict[str, Any]:
        """Return the deep-merged view of all layers as mutable ``dict`` objects."""

        return self._snapshot()[0]

    def provenance(self) -> dict[str, dict[str, object]]:
        """Return dotted-key provenance of the deep-merged view."""

        return self._snapshot()[1]

    def to_json(self, *, indent: int | None = None) -> str:
        """Serialise :meth:`as_dict` to JSON.

        Values JSON has no type for (TOML and YAML dates and times) are written
        with ``str``.

        Examples
        --------
        >>> Config().with_overrides({"service": {"timeout": 5}}).to_json()
        '{"service":{"timeout":5}}'
        """

        import json

        return json.dumps(self.as_dict(), indent=indent, separators=(",", ":"), ensure_ascii=False, default=str)

    def _resolve(self, key: str) -> tuple[Any, Layer | None]:
        for layer in reversed(self._layers):
            value = lookup_path(layer.tree, key)
            if value is not MISSING:
                return value, layer
        return MISSING, None

    def _snapshot(self) -> tuple[dict[str, Any], dict[str, dict[str, object]]]:
        from ..application.merge import merge_layers

        return merge_layers((layer.name, layer.tree, layer.origin) for layer in self._layers)


#: Shared configuration without layers; safe to reuse because it is immutable.
EMPTY_CONFIG = Config()
