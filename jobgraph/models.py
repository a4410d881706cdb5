"""Core data models shared by the record builders, resolver and renderers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple


@dataclass(frozen=True)
class SourceLocation:
    """One line in one file."""
    path: str
    line_number: int

    def __str__(self) -> str:
        return f"{self.path}:{self.line_number}"


@dataclass(frozen=True)
class InvocationRecord:
    """A line that enqueues a job.

    ``invoking_name`` is the enclosing qualified name, or the file path when
    the line sits outside any class or module. ``candidates`` starts with the
    bare job name and then qualifies it under each prefix of the enclosing
    namespace, outermost first.
    """
    location: SourceLocation
    invoking_name: str
    job_name: str
    candidates: Tuple[str, ...]


@dataclass(frozen=True, order=True)
class DeclarationRecord:
    """A line that opens a job class. Ordered by ``declared_name``."""
    declared_name: str
    location: SourceLocation = field(compare=False)
    job_name: str = field(default="", compare=False)


@dataclass(frozen=True)
class Edge:
    src: str
    dst: str
