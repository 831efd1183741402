"""Shared fixtures: sample documents, an isolated system properties store, and
an in-process HTTP origin built on ``httpx.MockTransport``."""

from __future__ import annotations

from typing import Iterator

import httpx
import pytest

from lib_layered_sources.adapters.fetch.default import UrlFetcher
from lib_layered_sources.adapters.sysprops.default import SystemProperties

SAMPLES = {
    "conf": "source.test.type = conf",
    "json": """
{
  "source": {
    "test": {
      "type": "json"
    }
  }
}
""",
    "properties": "source.test.type = properties",
    "toml": """
[source.test]
type = "toml"
""",
    "xml": """
<?xml version="1.0" encoding="UTF-8"?>
<configuration>
    <property>
        <name>source.test.type</name>
        <value>xml</value>
    </property>
</configuration>
""".strip(),
    "yaml": """
source:
    test:
        type: yaml
""",
}


class FakeOrigin:
    """Serve ``routes`` (URL path -> body) and optionally refuse connections."""

    base_url = "http://config.test"

    def __init__(self) -> None:
        self.routes: dict[str, str] = {}
        self.refuse = False
        self.requests = 0

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests += 1
        if self.refuse:
            raise httpx.ConnectError("connection refused", request=request)
        body = self.routes.get(request.url.path)
        if body is None:
            return httpx.Response(404, text="not found")
        return httpx.Response(200, text=body)

    def url(self, path: str) -> str:
        return f"{self.base_url}{path}"


@pytest.fixture()
def samples() -> dict[str, str]:
    """One document per built-in format, each setting ``source.test.type``."""

    return dict(SAMPLES)


@pytest.fixture()
def system_properties() -> SystemProperties:
    return SystemProperties()


@pytest.fixture()
def origin() -> FakeOrigin:
    return FakeOrigin()


@pytest.fixture()
def url_fetcher(origin: FakeOrigin) -> Iterator[UrlFetcher]:
    client = httpx.Client(transport=httpx.MockTransport(origin.handle))
    yield UrlFetcher(client=client)
    client.close()
