"""Split ``path:line_number:content`` search output into fields."""

from __future__ import annotations

import re
from dataclasses import dataclass

from .models import SourceLocation

LINE_PATTERN = re.compile(r"(?P<path>[^:]*):(?P<line_number>[^:]*):(?P<content>.*)")
_LEADING_DIGITS = re.compile(r"\s*(\d+)")


class SearchLineError(ValueError):
    """Raised when a search result line lacks the ``path:line:content`` shape."""


@dataclass(frozen=True)
class SearchLine:
    path: str
    line_number: int
    content: str

    @property
    def location(self) -> SourceLocation:
        return SourceLocation(self.path, self.line_number)


def _parse_line_number(raw: str) -> int:
    match = _LEADING_DIGITS.match(raw)
    return int(match.group(1)) if match else 0


def parse_search_line(line: str) -> SearchLine:
    """Parse one line of search output.

    The path and line number never contain ``:``; the content may. An
    unparseable line number becomes 0 instead of failing the scan.
    """
    match = LINE_PATTERN.match(line.rstrip("\r\n"))
    if match is None:
        raise SearchLineError(f"Unrecognized search result line: {line!r}")
    return SearchLine(
        path=match.group("path").strip(),
        line_number=_parse_line_number(match.group("line_number")),
        content=match.group("content"),
    )
