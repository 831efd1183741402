"""Domain-level exception hierarchy.

Purpose
-------
Expose the stable error taxonomy shared by providers, fetchers, the registry,
the watch engine, and consuming applications. The hierarchy lives in the
domain layer so every outer layer may depend on it.

Contents
--------
* :class:`ConfigError` – umbrella base class for all loading failures.
* :class:`UnsupportedExtension` – no provider is registered for an extension.
* :class:`LoadFailure` – raw content could not be obtained (missing file,
  permission problem, network error).
* :class:`ParseFailure` – content was obtained but the provider rejected it.

System Role
-----------
Non-watched loads propagate these exceptions to the caller unchanged. The
watch engine catches :class:`LoadFailure` and :class:`ParseFailure` per tick and
reports them through :mod:`lib_layered_sources.observability` instead.
"""

from __future__ import annotations


class ConfigError(Exception):
    """Base type for all exceptions emitted by ``lib_layered_sources``.

    Callers that do not need fine-grained handling can use a single
    ``except ConfigError`` block.
    """


class UnsupportedExtension(ConfigError):
    """Raised when no provider is registered for an extension.

    Why
    ----
    Dispatch failures are not retriable until somebody registers a provider,
    so they deserve their own type.

    Examples
    --------
    >>> str(UnsupportedExtension("txt"))
    'Unsupported extension: txt'
    """

    def __init__(self, extension: str) -> None:
        super().__init__(f"Unsupported extension: {extension}")
        self.extension = extension


class LoadFailure(ConfigError):
    """Raised when raw content cannot be read from its origin.

    Attributes
    ----------
    origin:
        Provenance string of the source (``file:/etc/app.json``, ``url:...``).
    cause:
        Underlying exception reported by the I/O primitive.
    """

    def __init__(self, origin: str, cause: BaseException | str) -> None:
        super().__init__(f"Failed to load {origin}: {cause}")
        self.origin = origin
        self.cause = cause


class ParseFailure(ConfigError):
    """Raised when a provider cannot turn content into a configuration tree.

    Attributes
    ----------
    origin:
        Provenance string of the source that produced the content.
    diagnostic:
        Parser message describing what went wrong.
    """

    def __init__(self, origin: str, diagnostic: str) -> None:
        super().__init__(f"Invalid content in {origin}: {diagnostic}")
        self.origin = origin
        self.diagnostic = diagnostic
