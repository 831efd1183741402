"""HOCON provider backed by :mod:`pyhocon`.

HOCON is the relaxed JSON superset with comments, unquoted strings, dotted
keys and ``${...}`` substitutions. Substitutions are resolved while parsing,
so the resulting tree only holds plain values.
"""

from __future__ import annotations

from typing import Any

from pyhocon import ConfigFactory, ConfigTree
from pyhocon.exceptions import ConfigException
from pyparsing import ParseBaseException

from ...application.ports import ProviderFormat
from .base import BaseProvider


class HOCONProvider(BaseProvider):
    """Parse HOCON documents (``.conf`` / ``.hocon``).

    Examples
    --------
    >>> HOCONProvider().parse("source.test.type = conf", "string")["source"]["test"]["type"]
    'conf'
    """

    format = ProviderFormat.HOCON

    def parse(self, content: bytes | str, origin: str) -> Any:
        text = self._decode(content, origin)
        try:
            parsed = ConfigFactory.parse_string(text)
        except (ConfigException, ParseBaseException) as exc:
            self._fail(origin, exc)
        if not isinstance(parsed, ConfigTree):
            self._fail(origin, "hocon document did not produce a mapping")
        return self._finish(parsed.as_plain_ordered_dict(), origin)
