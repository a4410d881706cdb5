"""Reconstruct the qualified constant name active at a given line.

There is no parser here. Every ``class`` or ``module`` line up to the target
line is recorded with its indentation, then the list is walked backwards,
keeping only declarations that are strictly less indented than the last one
kept. What survives is the chain of enclosing scopes, outermost first.

This assumes nested declarations are indented deeper than their parents;
files that break that convention resolve to the wrong name.
"""

from __future__ import annotations

import itertools
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Sequence, Union

from .config import MAX_INDENT, NAMESPACE_SEPARATOR

logger = logging.getLogger(__name__)

NAMESPACE_PATTERN = re.compile(r"^(?P<padding> *)(?:class|module) +(?P<name>[\w:]+)(?=\s|$)")


@dataclass(frozen=True)
class NestingDeclaration:
    indent: int
    segment: str


def scan_declarations(lines: Iterable[str], line_number: int) -> List[NestingDeclaration]:
    """Collect namespace-opening lines from line 1 through *line_number*."""
    declarations: List[NestingDeclaration] = []
    for line in itertools.islice(lines, max(line_number, 0)):
        match = NAMESPACE_PATTERN.match(line)
        if match is None:
            continue
        declarations.append(NestingDeclaration(len(match.group("padding")), match.group("name")))
    return declarations


def enclosing_segments(
    declarations: Sequence[NestingDeclaration],
    max_indent: int = MAX_INDENT,
) -> List[str]:
    """Keep the innermost chain of enclosing declarations, outermost first."""
    current = max_indent
    segments: List[str] = []
    for dec in reversed(declarations):
        if dec.indent < current:
            current = dec.indent
            segments.insert(0, dec.segment)
    return segments


def split_name(name: str, separator: str = NAMESPACE_SEPARATOR) -> List[str]:
    return [part for part in name.split(separator) if part]


def join_name(segments: Iterable[str], separator: str = NAMESPACE_SEPARATOR) -> str:
    return separator.join(segments)


def qualified_name_at(
    lines: Iterable[str],
    line_number: int,
    separator: str = NAMESPACE_SEPARATOR,
    max_indent: int = MAX_INDENT,
) -> str:
    """Qualified name in effect at *line_number* of *lines* (1-based).

    Returns ``""`` when no enclosing class or module is found.
    """
    declarations = scan_declarations(lines, line_number)
    return join_name(enclosing_segments(declarations, max_indent), separator)


def resolve_qualified_name(
    path: Union[str, Path],
    line_number: int,
    separator: str = NAMESPACE_SEPARATOR,
    max_indent: int = MAX_INDENT,
) -> str:
    """Read *path* up to *line_number* and resolve the enclosing name.

    Raises:
        OSError: If the file cannot be opened.
    """
    with open(path, "r", encoding="utf-8", errors="replace") as f:
        name = qualified_name_at(f, line_number, separator, max_indent)
    logger.debug("Resolved %s:%s to %r", path, line_number, name)
    return name
