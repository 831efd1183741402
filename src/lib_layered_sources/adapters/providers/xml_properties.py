"""XML provider for ``<property>`` style documents.

The accepted shape is a root element holding repeated ``property`` children,
each with a ``name`` holding a dotted key and an optional ``value``::

    <configuration>
        <property>
            <name>source.test.type</name>
            <value>xml</value>
        </property>
    </configuration>
"""

from __future__ import annotations

import xml.etree.ElementTree as ElementTree
from typing import Any, Iterator

from ...application.ports import ProviderFormat
from ...domain.tree import nest_dotted
from .base import BaseProvider


class XMLProvider(BaseProvider):
    """Parse property lists from XML documents.

    Examples
    --------
    >>> doc = "<configuration><property><name>a.b</name><value>xml</value></property></configuration>"
    >>> XMLProvider().parse(doc, "string")["a"]["b"]
    'xml'
    """

    format = ProviderFormat.XML

    def parse(self, content: bytes | str, origin: str) -> Any:
        payload = content.removeprefix("\ufeff").encode("utf-8") if isinstance(content, str) else content
        try:
            root = ElementTree.fromstring(payload.strip())
            data = nest_dotted(_iter_properties(root))
        except (ElementTree.ParseError, ValueError) as exc:
            self._fail(origin, exc)
        return self._finish(data, origin)


def _iter_properties(root: ElementTree.Element) -> Iterator[tuple[str, str]]:
    for index, prop in enumerate(root.findall("property"), start=1):
        name = (prop.findtext("name") or "").strip()
        if not name:
            raise ValueError(f"property #{index} has no name")
        yield name, (prop.findtext("value") or "").strip()
