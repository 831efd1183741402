"""Provider adapter tests.

Each built-in format must yield the same immutable tree shape and report bad
content as :class:`ParseFailure` carrying the origin.
"""

from __future__ import annotations

import logging
from types import MappingProxyType

import pytest

from lib_layered_sources import DefaultLoaders, ParseFailure, ProviderRegistry
from lib_layered_sources.adapters.providers import (
    HOCONProvider,
    JSONProvider,
    PropertiesProvider,
    TOMLProvider,
    XMLProvider,
    YAMLProvider,
)

FORMATS = ["conf", "json", "properties", "toml", "xml", "yaml"]


@pytest.mark.parametrize("extension", FORMATS)
def test_samples_parse_to_their_format(extension: str, samples: dict[str, str]) -> None:
    tree = ProviderRegistry().resolve(extension).parse(samples[extension], "string")
    assert tree["source"]["test"]["type"] == extension
    assert isinstance(tree, MappingProxyType)


@pytest.mark.parametrize("extension", FORMATS)
def test_bytes_are_accepted(extension: str, samples: dict[str, str]) -> None:
    tree = ProviderRegistry().resolve(extension).parse(samples[extension].encode("utf-8"), "string")
    assert tree["source"]["test"]["type"] == extension


@pytest.mark.parametrize(
    ("provider", "content"),
    [
        (HOCONProvider(), "a = {"),
        (HOCONProvider(), "[1, 2]"),
        (JSONProvider(), "{broken"),
        (TOMLProvider(), "[table\nkey = 1"),
        (XMLProvider(), "<configuration><property>"),
        (YAMLProvider(), "a: [1, 2"),
    ],
)
def test_malformed_content_raises_parse_failure(provider, content: str) -> None:
    with pytest.raises(ParseFailure) as excinfo:
        provider.parse(content, "file:/etc/app.cfg")
    assert excinfo.value.origin == "file:/etc/app.cfg"
    assert "file:/etc/app.cfg" in str(excinfo.value)


def test_non_mapping_document_is_rejected() -> None:
    with pytest.raises(ParseFailure, match="did not produce a mapping"):
        JSONProvider().parse("[1, 2, 3]", "string:json")


def test_empty_yaml_document_is_an_empty_tree() -> None:
    assert dict(YAMLProvider().parse("", "string:yaml")) == {}


def test_invalid_utf8_is_a_parse_failure() -> None:
    with pytest.raises(ParseFailure):
        TOMLProvider().parse(b"key = '\xff'", "string:toml")


def test_lists_are_frozen_to_tuples() -> None:
    tree = YAMLProvider().parse("ports: [80, 443]\n", "string:yaml")
    assert tree["ports"] == (80, 443)


def test_hocon_resolves_substitutions() -> None:
    tree = HOCONProvider().parse("base = 8080\nservice { port = ${base}, name = api }", "string:hocon")
    assert tree["service"]["port"] == 8080
    assert tree["service"]["name"] == "api"


def test_hocon_unresolved_substitution_fails() -> None:
    with pytest.raises(ParseFailure):
        HOCONProvider().parse("value = ${missing}", "string:hocon")


def test_properties_syntax() -> None:
    content = "\n".join(
        [
            "# comment",
            "! another comment",
            "",
            "service.name = api",
            "service.port:8080",
            "service.owner  platform team",
            "service.motd = hello \\",
            "    world",
            "service.path = C\\:\\\\tmp",
            "service.letter = \\u0041",
            "service.tab = a\\tb",
        ]
    )
    tree = PropertiesProvider().parse(content, "string:properties")
    assert dict(tree["service"]) == {
        "name": "api",
        "port": "8080",
        "owner": "platform team",
        "motd": "hello world",
        "path": "C:\\tmp",
        "letter": "A",
        "tab": "a\tb",
    }


def test_properties_later_duplicate_wins() -> None:
    tree = PropertiesProvider().parse("a = 1\na = 2", "string:properties")
    assert tree["a"] == "2"


def test_properties_conflicting_keys_fail() -> None:
    with pytest.raises(ParseFailure, match="Cannot override scalar"):
        PropertiesProvider().parse("a = 1\na.b = 2", "string:properties")


def test_xml_property_without_name_fails() -> None:
    with pytest.raises(ParseFailure, match="no name"):
        XMLProvider().parse("<configuration><property><value>x</value></property></configuration>", "string:xml")


def test_xml_missing_value_is_empty_string() -> None:
    tree = XMLProvider().parse("<configuration><property><name>a.b</name></property></configuration>", "string:xml")
    assert tree["a"]["b"] == ""


def test_providers_of_one_class_are_equal() -> None:
    assert JSONProvider() == JSONProvider()
    assert JSONProvider() != YAMLProvider()
    assert len({JSONProvider(), JSONProvider()}) == 1


@pytest.mark.parametrize("extension", FORMATS)
def test_leading_byte_order_mark_is_ignored(extension: str, samples: dict[str, str]) -> None:
    provider = ProviderRegistry().resolve(extension)
    document = samples[extension].lstrip()
    from_bytes = provider.parse(b"\xef\xbb\xbf" + document.encode("utf-8"), "string")
    from_text = provider.parse("\ufeff" + document, "string")
    assert from_bytes["source"]["test"]["type"] == extension
    assert from_text["source"]["test"]["type"] == extension


def test_properties_empty_key_is_skipped(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.DEBUG, logger="lib_layered_sources")
    tree = PropertiesProvider().parse("=orphan\n: also orphan\nsource.test.type = properties", "string:properties")
    assert dict(tree) == {"source": {"test": {"type": "properties"}}}
    skipped = [record for record in caplog.records if record.getMessage() == "property_skipped"]
    assert len(skipped) == 2
    assert getattr(skipped[0], "context")["origin"] == "string:properties"


def test_hocon_list_root_fails_through_the_facade() -> None:
    with pytest.raises(ParseFailure, match="did not produce a mapping"):
        DefaultLoaders().string("[1, 2]", "conf")
