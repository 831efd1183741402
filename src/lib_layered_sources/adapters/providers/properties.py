"""Java-style properties provider.

Purpose
-------
Parse flat ``key.path=value`` documents and nest the dotted keys so the tree
matches every other provider.

Syntax
------
* ``#`` and ``!`` start comment lines; blank lines are ignored.
* The key ends at the first unescaped ``=``, ``:`` or whitespace.
* A trailing backslash continues the logical line; leading whitespace of the
  continuation is dropped.
* ``\\t``, ``\\n``, ``\\r``, ``\\f``, ``\\uXXXX`` and escaped separators are
  decoded. Values are always strings.
* Lines with an empty key (``=value``) have no dotted path; they are skipped
  and reported as ``property_skipped``.
"""

from __future__ import annotations

from typing import Any, Iterator

from ...application.ports import ProviderFormat
from ...domain.tree import nest_dotted
from ...observability import log_debug
from .base import BaseProvider

_ESCAPES = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}
_SEPARATORS = frozenset("=:")


class PropertiesProvider(BaseProvider):
    """Parse properties documents into nested trees.

    Examples
    --------
    >>> tree = PropertiesProvider().parse("source.test.type = properties", "string")
    >>> tree["source"]["test"]["type"]
    'properties'
    """

    format = ProviderFormat.PROPERTIES

    def parse(self, content: bytes | str, origin: str) -> Any:
        text = self._decode(content, origin)
        try:
            data = nest_dotted(_named_pairs(_parse_pairs(text), origin))
        except ValueError as exc:
            self._fail(origin, exc)
        return self._finish(data, origin)


def _named_pairs(pairs: Iterator[tuple[str, str]], origin: str) -> Iterator[tuple[str, str]]:
    for key, value in pairs:
        if not key:
            log_debug("property_skipped", layer="provider", origin=origin, reason="empty key")
            continue
        yield key, value


def _parse_pairs(text: str) -> Iterator[tuple[str, str]]:
    """Yield ``(key, value)`` pairs from *text*.

    Examples
    --------
    >>> list(_parse_pairs("# comment\\na = 1\\nb: two\\\\\\n   words\\nc"))
    [('a', '1'), ('b', 'twowords'), ('c', '')]
    """

    for line in _logical_lines(text):
        key, value = _split_line(line)
        yield _unescape(key), _unescape(value)


def _logical_lines(text: str) -> Iterator[str]:
    """Join continuation lines and drop comments and blanks."""

    pending: str | None = None
    for raw_line in text.splitlines():
        line = raw_line.lstrip()
        if pending is None and (not line or line[0] in "#!"):
            continue
        if pending is not None:
            line = pending + line
        if _ends_with_continuation(line):
            pending = line[:-1]
            continue
        pending = None
        yield line
    if pending:
        yield pending


def _ends_with_continuation(line: str) -> bool:
    """Return ``True`` when *line* ends with an odd number of backslashes."""

    count = len(line) - len(line.rstrip("\\"))
    return count % 2 == 1


def _split_line(line: str) -> tuple[str, str]:
    """Split a logical line into raw key and raw value."""

    index = 0
    while index < len(line):
        char = line[index]
        if char == "\\":
            index += 2
            continue
        if char in _SEPARATORS or char.isspace():
            break
        index += 1
    key = line[:index]
    rest = line[index:].lstrip()
    if rest and rest[0] in _SEPARATORS:
        rest = rest[1:].lstrip()
    return key, rest


def _unescape(value: str) -> str:
    """Decode backslash escapes in *value*.

    Examples
    --------
    >>> _unescape("a\\\\=b\\\\u0041")
    'a=bA'
    """

    if "\\" not in value:
        return value
    chars: list[str] = []
    index = 0
    while index < len(value):
        char = value[index]
        if char != "\\" or index + 1 >= len(value):
            chars.append(char)
            index += 1
            continue
        marker = value[index + 1]
        if marker == "u" and index + 6 <= len(value):
            chars.append(chr(int(value[index + 2 : index + 6], 16)))
            index += 6
            continue
        chars.append(_ESCAPES.get(marker, marker))
        index += 2
    return "".join(chars)
