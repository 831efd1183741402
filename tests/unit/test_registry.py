from __future__ import annotations

import pytest

from lib_layered_sources import (
    BUILTIN_EXTENSIONS,
    DefaultLoaders,
    ProviderFormat,
    ProviderRegistry,
    UnsupportedExtension,
)
from lib_layered_sources.adapters.providers import (
    HOCONProvider,
    JSONProvider,
    PropertiesProvider,
    TOMLProvider,
    XMLProvider,
    YAMLProvider,
)

EXPECTED = {
    "conf": HOCONProvider(),
    "hocon": HOCONProvider(),
    "json": JSONProvider(),
    "properties": PropertiesProvider(),
    "toml": TOMLProvider(),
    "xml": XMLProvider(),
    "yml": YAMLProvider(),
    "yaml": YAMLProvider(),
}


@pytest.mark.parametrize("extension", sorted(EXPECTED))
def test_builtin_dispatch(extension: str) -> None:
    assert DefaultLoaders().dispatch_extension(extension) == EXPECTED[extension]


def test_builtin_table_is_complete() -> None:
    assert set(BUILTIN_EXTENSIONS) == set(EXPECTED)
    assert ProviderRegistry().extensions() == sorted(EXPECTED)


def test_aliases_share_one_provider() -> None:
    registry = ProviderRegistry()
    assert registry.resolve("conf") is registry.resolve("hocon")
    assert registry.resolve("yml") is registry.resolve("yaml")
    assert registry.resolve("yaml").format is ProviderFormat.YAML


def test_unknown_extension_raises() -> None:
    with pytest.raises(UnsupportedExtension) as excinfo:
        DefaultLoaders().dispatch_extension("txt")
    assert excinfo.value.extension == "txt"


def test_registered_extension_dispatches_without_touching_others() -> None:
    loaders = DefaultLoaders()
    loaders.register_extension("txt", PropertiesProvider())
    assert loaders.dispatch_extension("txt") == PropertiesProvider()
    assert loaders.dispatch_extension("json") == JSONProvider()


def test_register_replaces_existing_entry() -> None:
    registry = ProviderRegistry()
    registry.register("json", YAMLProvider())
    assert registry.resolve("json") == YAMLProvider()


def test_builtin_table_is_read_only() -> None:
    with pytest.raises(TypeError):
        BUILTIN_EXTENSIONS["txt"] = PropertiesProvider()  # type: ignore[index]
    assert "txt" not in ProviderRegistry()


def test_registries_are_isolated() -> None:
    first = DefaultLoaders()
    first.register_extension("txt", PropertiesProvider())
    assert "txt" in first.registry
    assert "txt" not in DefaultLoaders().registry
    assert "txt" not in BUILTIN_EXTENSIONS


def test_facades_derived_with_on_share_registrations() -> None:
    loaders = DefaultLoaders()
    derived = loaders.on(loaders.config)
    loaders.register_extension("txt", PropertiesProvider())
    assert derived.dispatch_extension("txt") == PropertiesProvider()


def test_copy_is_independent() -> None:
    registry = ProviderRegistry()
    clone = registry.copy()
    clone.register("txt", PropertiesProvider())
    assert "txt" in clone
    assert "txt" not in registry


def test_constructor_overrides_apply_on_top_of_builtins() -> None:
    registry = ProviderRegistry({".TXT": PropertiesProvider()})
    assert registry.resolve("txt") == PropertiesProvider()
    assert len(registry) == len(EXPECTED) + 1


@pytest.mark.parametrize("extension", ["JSON", ".json", " Json "])
def test_lookup_is_case_insensitive(extension: str) -> None:
    assert ProviderRegistry().resolve(extension) == JSONProvider()


@pytest.mark.parametrize(
    ("location", "expected"),
    [
        ("/etc/app/config.yml", YAMLProvider()),
        ("http://host:8080/source.properties", PropertiesProvider()),
        ("https://host/app.toml?rev=2#top", TOMLProvider()),
    ],
)
def test_resolve_location(location: str, expected: object) -> None:
    assert ProviderRegistry().resolve_location(location) == expected


def test_resolve_location_without_suffix() -> None:
    with pytest.raises(UnsupportedExtension, match="Makefile"):
        ProviderRegistry().resolve_location("Makefile")
