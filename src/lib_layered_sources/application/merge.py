"""Application-layer merge policy.

Purpose
-------
Stack layers onto configurations and flatten a layer stack into one nested
mapping while tracking provenance. Free of I/O so it can be reused by any
composition root.

Contents
    - ``append_layer``: the single way loaders grow a configuration.
    - ``merge_layers``: deep merge used for snapshots (``Config.as_dict``,
      ``Config.provenance`` and the CLI).
    - ``_merge_mapping`` / ``_merge_branch`` / ``_set_scalar`` /
      ``_clear_branch``: recursive stanzas that keep precedence readable.

System Role
-----------
Lookups never go through :func:`merge_layers`; they scan the layer stack in
:class:`lib_layered_sources.domain.config.Config`. Both follow the same
override law: the most recently appended layer wins.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Iterable

from ..domain.config import Config, Layer
from ..domain.tree import thaw_tree
from ..observability import log_debug, make_event


def append_layer(config: Config, layer: Layer) -> Config:
    """Return a new configuration whose newest layer is *layer*.

    The input configuration and its layers are left untouched.

    Examples
    --------
    >>> from lib_layered_sources.domain.config import EMPTY_CONFIG
    >>> cfg = append_layer(EMPTY_CONFIG, Layer.of("map", "map:kv", {"a": 1}))
    >>> len(cfg.layers), len(EMPTY_CONFIG.layers)
    (1, 0)
    """

    updated = config.with_layer(layer)
    log_debug("layer_appended", **make_event(layer.name, layer.origin, {"depth": len(updated.layers)}))
    return updated


def merge_layers(
    layers: Iterable[tuple[str, Any, str | None]],
) -> tuple[dict[str, object], dict[str, dict[str, object]]]:
    """Merge ``(layer_name, tree, origin)`` tuples honouring precedence.

    Parameters
    ----------
    layers:
        Tuples ordered from lowest to highest precedence. Trees that are not
        mappings contribute nothing.

    Returns
    -------
    tuple[dict[str, object], dict[str, dict[str, object]]]
        ``(merged_data, provenance)`` where provenance maps dotted keys to
        ``{"layer", "origin", "key"}``.

    Examples
    --------
    >>> merged, meta = merge_layers([
    ...     ("file", {"service": {"timeout": 5}}, "file:/etc/app.json"),
    ...     ("env", {"service": {"timeout": 10}}, "env"),
    ... ])
    >>> merged["service"]["timeout"], meta["service.timeout"]["layer"]
    (10, 'env')
    """

    merged: dict[str, object] = {}
    meta: dict[str, dict[str, object]] = {}

    for layer_name, tree, origin in layers:
        if isinstance(tree, Mapping):
            _merge_mapping(merged, meta, thaw_tree(tree), layer_name, origin, [])
    return merged, meta


def _merge_mapping(
    target: dict[str, object],
    meta: dict[str, dict[str, object]],
    incoming: Mapping[str, object],
    layer: str,
    origin: str | None,
    segments: list[str],
) -> None:
    """Recursively merge ``incoming`` into ``target`` while recording provenance."""

    for key, value in incoming.items():
        dotted = ".".join([*segments, key])
        if isinstance(value, Mapping):
            _merge_branch(target, meta, key, value, dotted, layer, origin, segments)
        else:
            _set_scalar(target, meta, key, value, dotted, layer, origin)


def _merge_branch(
    target: dict[str, object],
    meta: dict[str, dict[str, object]],
    key: str,
    value: Mapping[str, object],
    dotted: str,
    layer: str,
    origin: str | None,
    segments: list[str],
) -> None:
    """Merge mapping ``value`` into ``target[key]`` and recurse."""

    existing = target.get(key)
    if isinstance(existing, dict):
        container = existing
    else:
        # a mapping shadows an older scalar at the same path
        _clear_branch(meta, dotted)
        container = {}
    target[key] = container
    _merge_mapping(container, meta, value, layer, origin, segments + [key])


def _set_scalar(
    target: dict[str, object],
    meta: dict[str, dict[str, object]],
    key: str,
    value: object,
    dotted: str,
    layer: str,
    origin: str | None,
) -> None:
    """Assign a scalar value and update provenance for ``dotted``."""

    _clear_branch(meta, dotted)
    target[key] = value
    meta[dotted] = {"layer": layer, "origin": origin, "key": dotted}


def _clear_branch(meta: dict[str, dict[str, object]], prefix: str) -> None:
    """Remove provenance entries that belong to *prefix* or its descendants."""

    for meta_key in list(meta.keys()):
        if meta_key == prefix or meta_key.startswith(prefix + "."):
            meta.pop(meta_key, None)
