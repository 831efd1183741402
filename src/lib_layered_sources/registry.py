"""Extension-to-provider dispatch table.

Purpose
-------
Map file extensions to providers. Every :class:`ProviderRegistry` instance is
independent and seeded with the built-in formats at construction, so tests and
tenants never see each other's registrations.

Contents
--------
* :data:`BUILTIN_EXTENSIONS` – default extension table.
* :func:`normalize_extension` – lower-case, strip the leading dot.
* :class:`ProviderRegistry` – ``register``/``resolve`` plus helpers.
"""

from __future__ import annotations

import os
from types import MappingProxyType
from typing import Final, Iterator, Mapping

from .adapters.fetch.default import location_suffix
from .adapters.providers import (
    HOCONProvider,
    JSONProvider,
    PropertiesProvider,
    TOMLProvider,
    XMLProvider,
    YAMLProvider,
)
from .application.ports import Provider
from .domain.errors import UnsupportedExtension
from .observability import log_debug

_HOCON: Final = HOCONProvider()
_YAML: Final = YAMLProvider()

BUILTIN_EXTENSIONS: Final[Mapping[str, Provider]] = MappingProxyType(
    {
        "conf": _HOCON,
        "hocon": _HOCON,
        "json": JSONProvider(),
        "properties": PropertiesProvider(),
        "toml": TOMLProvider(),
        "xml": XMLProvider(),
        "yml": _YAML,
        "yaml": _YAML,
    }
)
"""Read-only default table; registries copy it at construction."""


def normalize_extension(extension: str) -> str:
    """Return *extension* in registry form.

    Examples
    --------
    >>> normalize_extension(".YAML")
    'yaml'
    """

    return extension.strip().lstrip(".").lower()


class ProviderRegistry:
    """Instance-scoped mapping from extension to provider.

    Examples
    --------
    >>> registry = ProviderRegistry()
    >>> registry.resolve("JSON")
    JSONProvider()
    >>> registry.register("txt", registry.resolve("properties"))
    >>> registry.resolve("txt")
    PropertiesProvider()
    >>> ProviderRegistry().resolve("txt")
    Traceback (most recent call last):
    ...
    lib_layered_sources.domain.errors.UnsupportedExtension: Unsupported extension: txt
    """

    def __init__(self, providers: Mapping[str, Provider] | None = None) -> None:
        """Seed the registry with the built-ins, then apply *providers* on top."""

        self._providers: dict[str, Provider] = dict(BUILTIN_EXTENSIONS)
        for extension, provider in (providers or {}).items():
            self._providers[normalize_extension(extension)] = provider

    def register(self, extension: str, provider: Provider) -> None:
        """Insert or replace the provider for *extension*."""

        normalized = normalize_extension(extension)
        self._providers[normalized] = provider
        log_debug("provider_registered", layer="registry", origin=None, extension=normalized, provider=repr(provider))

    def resolve(self, extension: str) -> Provider:
        """Return the provider for *extension* (case-insensitive)."""

        normalized = normalize_extension(extension)
        try:
            return self._providers[normalized]
        except KeyError:
            raise UnsupportedExtension(normalized or extension) from None

    def resolve_location(self, location: str | os.PathLike[str]) -> Provider:
        """Resolve the provider for a file path or URL by its suffix.

        Examples
        --------
        >>> ProviderRegistry().resolve_location("http://host/app.conf?x=1")
        HOCONProvider()
        """

        suffix = location_suffix(location)
        if not suffix:
            raise UnsupportedExtension(f"<none> ({location})")
        return self.resolve(suffix)

    def extensions(self) -> list[str]:
        return sorted(self._providers)

    def copy(self) -> ProviderRegistry:
        """Return an independent registry with the same entries."""

        clone = ProviderRegistry()
        clone._providers = dict(self._providers)
        return clone

    def __contains__(self, extension: object) -> bool:
        return isinstance(extension, str) and normalize_extension(extension) in self._providers

    def __iter__(self) -> Iterator[str]:
        return iter(self.extensions())

    def __len__(self) -> int:
        return len(self._providers)
