"""Raw content fetchers.

Purpose
-------
Read the bytes of a source before any provider looks at them. Fetchers are the
only place where file and network errors are translated into
:class:`~lib_layered_sources.domain.errors.LoadFailure`.

Contents
--------
* :class:`FileFetcher` – reads local files.
* :class:`UrlFetcher` – performs HTTP GET requests with :mod:`httpx`.
* :func:`location_suffix` – extension of a path or URL path, used for
  provider dispatch.
"""

from __future__ import annotations

import os
from pathlib import Path, PurePosixPath
from urllib.parse import urlsplit

import httpx

from ...domain.errors import LoadFailure
from ...observability import log_debug, log_error


def location_suffix(location: str | os.PathLike[str] | httpx.URL) -> str:
    """Return the lower-case suffix of *location* without the leading dot.

    URLs are recognised by their scheme; only their path takes part, so query
    strings and fragments never leak into the extension.

    Examples
    --------
    >>> location_suffix("/etc/app/config.YAML")
    'yaml'
    >>> location_suffix("http://localhost:8080/source.properties?rev=2")
    'properties'
    >>> location_suffix("Makefile")
    ''
    """

    text = str(location)
    if "://" in text:
        text = urlsplit(text).path
        return PurePosixPath(text).suffix.lower().lstrip(".")
    return Path(text).suffix.lower().lstrip(".")


class FileFetcher:
    """Read configuration files from the local filesystem."""

    def describe(self, location: str | os.PathLike[str]) -> str:
        return f"file:{os.fspath(location)}"

    def fetch(self, location: str | os.PathLike[str]) -> bytes:
        """Return the bytes of *location* or raise :class:`LoadFailure`.

        Examples
        --------
        >>> from tempfile import NamedTemporaryFile
        >>> tmp = NamedTemporaryFile(delete=False)
        >>> _ = tmp.write(b"key = 'value'")
        >>> tmp.close()
        >>> FileFetcher().fetch(tmp.name)[:3]
        b'key'
        >>> Path(tmp.name).unlink()
        """

        origin = self.describe(location)
        try:
            payload = Path(location).read_bytes()
        except OSError as exc:
            log_error("source_unreadable", layer="file", origin=origin, error=str(exc))
            raise LoadFailure(origin, exc) from exc
        log_debug("source_fetched", layer="file", origin=origin, size=len(payload))
        return payload


class UrlFetcher:
    """Fetch configuration documents over HTTP(S).

    Parameters
    ----------
    client:
        Optional :class:`httpx.Client`. Tests pass one built on
        :class:`httpx.MockTransport`; applications may pass one configured with
        proxies, authentication or custom timeouts.
    timeout:
        Timeout in seconds used when no client is supplied.
    """

    def __init__(self, *, client: httpx.Client | None = None, timeout: float = 10.0) -> None:
        self._client = client
        self._timeout = timeout

    def describe(self, location: str | httpx.URL) -> str:
        return f"url:{location}"

    def fetch(self, location: str | httpx.URL) -> bytes:
        """Return the body of a successful GET on *location*."""

        origin = self.describe(location)
        try:
            if self._client is not None:
                response = self._client.get(location)
            else:
                response = httpx.get(location, timeout=self._timeout, follow_redirects=True)
            response.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            log_error("source_unreadable", layer="url", origin=origin, error=str(exc))
            raise LoadFailure(origin, exc) from exc
        payload = response.content
        log_debug("source_fetched", layer="url", origin=origin, size=len(payload), status=response.status_code)
        return payload
