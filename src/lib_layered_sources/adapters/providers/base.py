"""Shared helpers for the built-in providers.

Purpose
-------
Keep decoding, mapping validation, error translation, and observability
identical across formats so every provider yields the same tree shape and the
same failure type.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, NoReturn

from ...application.ports import ProviderFormat
from ...domain.errors import ParseFailure
from ...domain.tree import freeze_tree
from ...observability import log_debug, log_error


class BaseProvider:
    """Common behaviour of the stateless built-in providers.

    Providers of the same class are interchangeable, so equality and hashing
    follow the class rather than the instance.
    """

    format: ProviderFormat

    def __eq__(self, other: object) -> bool:
        return type(self) is type(other)

    def __hash__(self) -> int:
        return hash(type(self))

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"

    def _decode(self, content: bytes | str, origin: str) -> str:
        """Return *content* as text, treating bytes as UTF-8 and dropping a leading BOM.

        Examples
        --------
        >>> BaseProvider()._decode(b"key = 1", "string")
        'key = 1'
        >>> BaseProvider()._decode(b"\\xef\\xbb\\xbfkey = 1", "string")
        'key = 1'
        """

        if isinstance(content, str):
            return content.removeprefix("\ufeff")
        try:
            return content.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            self._fail(origin, exc)

    def _finish(self, data: Any, origin: str) -> Any:
        """Validate that *data* is a mapping, freeze it, and log the success."""

        if data is None:
            data = {}
        if not isinstance(data, Mapping):
            self._fail(origin, f"{self.format.value} document did not produce a mapping")
        tree = freeze_tree(data)
        log_debug("source_parsed", layer="provider", origin=origin, format=self.format.value, keys=len(tree))
        return tree

    def _fail(self, origin: str, error: BaseException | str) -> NoReturn:
        """Log and raise :class:`ParseFailure` for *origin*."""

        log_error("source_invalid", layer="provider", origin=origin, format=self.format.value, error=str(error))
        if isinstance(error, BaseException):
            raise ParseFailure(origin, str(error)) from error
        raise ParseFailure(origin, error)
