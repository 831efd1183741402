"""Composition root for ``lib_layered_sources``.

Purpose
-------
Provide the single facade that turns any supported source into a new layer:
it fetches raw content, picks the provider (explicit argument first, then the
registry by extension), parses, and appends the layer onto a base
configuration.

Contents
--------
* :class:`DefaultLoaders` – load API per source kind plus extension
  registration.
* :func:`with_source_from` – shorthand for ``DefaultLoaders(config, ...)``.

System Role
-----------
This module connects adapters (fetchers, providers, environment, system
properties, schedulers) with the domain value objects and the watch engine.
Non-watched loads are synchronous and either return a new configuration or
raise; the base configuration is never modified.

Examples
--------
>>> loaders = DefaultLoaders()
>>> cfg = loaders.string('{"source": {"test": {"type": "json"}}}', "json")
>>> cfg = loaders.on(cfg).flat({"source.test.type": "flat"})
>>> cfg.get("source.test.type"), [layer.name for layer in cfg.layers]
('flat', ['string', 'map'])
"""

from __future__ import annotations

import os
from typing import Any, Callable, Mapping

import httpx

from .adapters.env.default import DefaultEnvLoader
from .adapters.fetch.default import FileFetcher, UrlFetcher
from .adapters.scheduling.default import ThreadScheduler
from .adapters.sysprops.default import SystemProperties, SystemPropertiesLoader
from .application.merge import append_layer
from .application.ports import Fetcher, Provider, Scheduler
from .application.watch import WatchHandle
from .domain.config import EMPTY_CONFIG, Config, Layer, TreeCell
from .domain.errors import ParseFailure
from .domain.tree import nest_dotted
from .observability import log_error
from .registry import ProviderRegistry

DEFAULT_WATCH_INTERVAL = 5.0
"""Seconds between watch ticks when no interval is given."""

ProviderArg = Provider | str | None


class DefaultLoaders:
    """Load API over a base configuration.

    Parameters
    ----------
    config:
        Base configuration every load builds on.
    registry:
        Extension table; a fresh :class:`ProviderRegistry` when omitted.
    file_fetcher / url_fetcher:
        Raw content readers; replaceable for tests or custom transports.
    environ:
        Mapping read by :meth:`env`; defaults to :data:`os.environ`.
    system_properties:
        Store read by :meth:`system_properties`; defaults to the process-wide
        :data:`~lib_layered_sources.adapters.sysprops.default.SYSTEM_PROPERTIES`.
    """

    def __init__(
        self,
        config: Config = EMPTY_CONFIG,
        *,
        registry: ProviderRegistry | None = None,
        file_fetcher: FileFetcher | None = None,
        url_fetcher: UrlFetcher | None = None,
        environ: Mapping[str, str] | None = None,
        system_properties: SystemProperties | None = None,
    ) -> None:
        self.config = config
        self.registry = ProviderRegistry() if registry is None else registry
        self.file_fetcher = FileFetcher() if file_fetcher is None else file_fetcher
        self.url_fetcher = UrlFetcher() if url_fetcher is None else url_fetcher
        self._environ = environ
        self._system_properties = system_properties

    def on(self, config: Config) -> DefaultLoaders:
        """Return a facade over *config* sharing registry, fetchers and ambient sources."""

        return DefaultLoaders(
            config,
            registry=self.registry,
            file_fetcher=self.file_fetcher,
            url_fetcher=self.url_fetcher,
            environ=self._environ,
            system_properties=self._system_properties,
        )

    def register_extension(self, extension: str, provider: Provider) -> None:
        """Map *extension* to *provider* for this facade's registry."""

        self.registry.register(extension, provider)

    def dispatch_extension(self, extension: str) -> Provider:
        """Return the provider registered for *extension*."""

        return self.registry.resolve(extension)

    def env(self, prefix: str | None = None) -> Config:
        """Load environment variables (``SOURCE_TEST_TYPE`` → ``source.test.type``)."""

        tree = DefaultEnvLoader(environ=self._environ).load(prefix)
        origin = f"env:{prefix}" if prefix else "env"
        return self._append(Layer.of("env", origin, tree))

    def system_properties(self) -> Config:
        """Load a snapshot of the system properties store (keys are dotted paths)."""

        tree = SystemPropertiesLoader(properties=self._system_properties).load()
        return self._append(Layer.of("system", "system", tree))

    def string(self, content: str | bytes, provider: Provider | str) -> Config:
        """Parse in-memory *content* with *provider* (a Provider or an extension).

        Examples
        --------
        >>> DefaultLoaders().string("source.test.type = conf", "conf").get("source.test.type")
        'conf'
        """

        resolved = self._provider(provider, None)
        origin = f"string:{resolved.format.value}"
        return self._append(_parsed_layer("string", origin, resolved, content))

    def hierarchical(self, mapping: Mapping[str, Any]) -> Config:
        """Load an already nested mapping."""

        return self._append(Layer.of("map", "map:hierarchical", mapping))

    def flat(self, mapping: Mapping[str, str]) -> Config:
        """Load a ``dotted.key -> string`` mapping; values are converted with ``str``."""

        tree = self._nest("map:flat", ((key, str(value)) for key, value in mapping.items()))
        return self._append(Layer.of("map", "map:flat", tree))

    def kv(self, mapping: Mapping[str, Any]) -> Config:
        """Load a ``dotted.key -> value`` mapping keeping value types."""

        return self._append(Layer.of("map", "map:kv", self._nest("map:kv", mapping.items())))

    def file(self, path: str | os.PathLike[str], provider: ProviderArg = None) -> Config:
        """Load a file; the provider follows its extension unless given."""

        return self._load(self.file_fetcher, "file", path, provider)

    def url(self, url: str | httpx.URL, provider: ProviderArg = None) -> Config:
        """Load a URL with HTTP GET; the provider follows the URL path suffix unless given."""

        return self._load(self.url_fetcher, "url", url, provider)

    def watch_file(
        self,
        path: str | os.PathLike[str],
        interval: float = DEFAULT_WATCH_INTERVAL,
        *,
        scheduler: Scheduler | None = None,
        provider: ProviderArg = None,
    ) -> tuple[Config, WatchHandle]:
        """Load *path* now and reload it every *interval* seconds.

        Returns the new configuration and the handle that stops the reloads.
        Without *scheduler* the watch runs on its own worker thread.
        """

        return self._watch(self.file_fetcher, "file", path, interval, scheduler, provider)

    def watch_url(
        self,
        url: str | httpx.URL,
        interval: float = DEFAULT_WATCH_INTERVAL,
        *,
        scheduler: Scheduler | None = None,
        provider: ProviderArg = None,
    ) -> tuple[Config, WatchHandle]:
        """Load *url* now and re-GET it every *interval* seconds."""

        return self._watch(self.url_fetcher, "url", url, interval, scheduler, provider)

    def _load(self, fetcher: Fetcher, kind: str, location: Any, provider: ProviderArg) -> Config:
        resolved = self._provider(provider, location)
        origin = fetcher.describe(location)
        return self._append(_parsed_layer(kind, origin, resolved, fetcher.fetch(location)))

    def _watch(
        self,
        fetcher: Fetcher,
        kind: str,
        location: Any,
        interval: float,
        scheduler: Scheduler | None,
        provider: ProviderArg,
    ) -> tuple[Config, WatchHandle]:
        if interval <= 0:
            raise ValueError(f"watch interval must be positive, got {interval!r}")
        resolved = self._provider(provider, location)
        origin = fetcher.describe(location)
        content = fetcher.fetch(location)
        layer = _parsed_layer(kind, origin, resolved, content)
        config = self._append(layer)
        owns_scheduler = scheduler is None
        handle = WatchHandle(
            layer=layer,
            fetch=_bind_fetch(fetcher, location),
            parse=_bind_parse(resolved, origin),
            interval=interval,
            scheduler=ThreadScheduler(name=f"watch {origin}") if scheduler is None else scheduler,
            owns_scheduler=owns_scheduler,
            initial_content=content,
        )
        return config, handle.start()

    def _provider(self, provider: ProviderArg, location: Any) -> Provider:
        if isinstance(provider, str):
            return self.registry.resolve(provider)
        if provider is not None:
            return provider
        return self.registry.resolve_location(location)

    def _nest(self, origin: str, pairs: Any) -> dict[str, Any]:
        try:
            return nest_dotted(pairs)
        except ValueError as exc:
            log_error("source_invalid", layer="map", origin=origin, error=str(exc))
            raise ParseFailure(origin, str(exc)) from exc

    def _append(self, layer: Layer) -> Config:
        return append_layer(self.config, layer)


def with_source_from(config: Config = EMPTY_CONFIG, **kwargs: Any) -> DefaultLoaders:
    """Return :class:`DefaultLoaders` building on *config*.

    Examples
    --------
    >>> base = with_source_from().kv({"source.test.type": "kv"})
    >>> with_source_from(base).hierarchical({"source": {"test": {"type": "hierarchical"}}}).get("source.test.type")
    'hierarchical'
    """

    return DefaultLoaders(config, **kwargs)


def _parsed_layer(kind: str, origin: str, provider: Provider, content: bytes | str) -> Layer:
    tree = provider.parse(content, origin)
    return Layer(name=kind, origin=origin, cell=TreeCell(tree), format=provider.format.value)


def _bind_fetch(fetcher: Fetcher, location: Any) -> Callable[[], bytes]:
    return lambda: fetcher.fetch(location)


def _bind_parse(provider: Provider, origin: str) -> Callable[[bytes], Any]:
    return lambda content: provider.parse(content, origin)


__all__ = [
    "DEFAULT_WATCH_INTERVAL",
    "DefaultLoaders",
    "with_source_from",
]
