"""Structured document providers.

Purpose
-------
Convert JSON, TOML and YAML content into immutable configuration trees.
Adapters are small wrappers around ``json``/``tomllib``/``yaml.safe_load`` so
error handling and observability live in :mod:`.base`.

Contents
--------
* :class:`JSONProvider` – JSON objects.
* :class:`TOMLProvider` – TOML documents (tables become nested mappings).
* :class:`YAMLProvider` – YAML mapping documents; empty documents are empty
  trees.
"""

from __future__ import annotations

import json
import tomllib
from typing import Any

import yaml

from ...application.ports import ProviderFormat
from .base import BaseProvider


class JSONProvider(BaseProvider):
    """Parse JSON objects.

    Examples
    --------
    >>> JSONProvider().parse('{"source": {"test": {"type": "json"}}}', "string")["source"]["test"]["type"]
    'json'
    """

    format = ProviderFormat.JSON

    def parse(self, content: bytes | str, origin: str) -> Any:
        try:
            data = json.loads(self._decode(content, origin))
        except json.JSONDecodeError as exc:
            self._fail(origin, exc)
        return self._finish(data, origin)


class TOMLProvider(BaseProvider):
    """Parse TOML documents with the standard library parser.

    Examples
    --------
    >>> TOMLProvider().parse('[source.test]\\ntype = "toml"\\n', "string")["source"]["test"]["type"]
    'toml'
    """

    format = ProviderFormat.TOML

    def parse(self, content: bytes | str, origin: str) -> Any:
        text = self._decode(content, origin)
        try:
            data = tomllib.loads(text)
        except tomllib.TOMLDecodeError as exc:
            self._fail(origin, exc)
        return self._finish(data, origin)


class YAMLProvider(BaseProvider):
    """Parse YAML mapping documents with ``yaml.safe_load``."""

    format = ProviderFormat.YAML

    def parse(self, content: bytes | str, origin: str) -> Any:
        try:
            data = yaml.safe_load(self._decode(content, origin))
        except yaml.YAMLError as exc:
            self._fail(origin, exc)
        return self._finish(data, origin)
