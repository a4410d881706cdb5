"""Accumulate job records and compile them into diagram edges."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Set

from .models import DeclarationRecord, Edge, InvocationRecord
from .records import JobPatterns, iter_declarations, iter_invocations
from .search import SearchProvider

logger = logging.getLogger(__name__)

JobFilter = Callable[[Optional[str]], bool]
PathFormatter = Callable[[str], str]


class UnresolvedPolicy(str, Enum):
    """What to draw for an invocation whose job was never declared."""

    DROP = "drop"
    KEEP = "keep"
    FLAG = "flag"


def resolve_target(candidates: Iterable[str], declared: Set[str]) -> Optional[str]:
    """First candidate, in order, that is a declared job name."""
    for candidate in candidates:
        if candidate in declared:
            return candidate
    return None


def compile_edges(
    declarations: Iterable[DeclarationRecord],
    invocations: Iterable[InvocationRecord],
    job_filter: JobFilter,
    path_formatter: PathFormatter,
    unresolved: UnresolvedPolicy = UnresolvedPolicy.DROP,
) -> List[Edge]:
    """Resolve every invocation against the full set of declarations.

    The filter sees the resolved name, or ``None`` when nothing matched.
    Returns edges without duplicates, in first-seen order.
    """
    unresolved = UnresolvedPolicy(unresolved)
    declared = {dec.declared_name for dec in declarations}
    edges: Dict[Edge, None] = {}

    for perf in invocations:
        target = resolve_target(perf.candidates, declared)
        if not job_filter(target):
            continue
        if target is None:
            if unresolved is UnresolvedPolicy.DROP:
                logger.debug("Dropping unresolved %s at %s", perf.job_name, perf.location)
                continue
            target = "" if unresolved is UnresolvedPolicy.KEEP else f"{perf.job_name}?"
        edges.setdefault(Edge(src=path_formatter(perf.invoking_name), dst=target), None)

    return list(edges)


class JobGraph:
    """Invocations and declarations gathered across one or more directories."""

    def __init__(self, patterns: Optional[JobPatterns] = None) -> None:
        self.patterns = patterns or JobPatterns()
        self.invocations: List[InvocationRecord] = []
        self.declarations: List[DeclarationRecord] = []

    def add_invocation(self, record: InvocationRecord) -> None:
        self.invocations.append(record)

    def add_declaration(self, record: DeclarationRecord) -> None:
        self.declarations.append(record)

    def scan(self, directory: str, search: SearchProvider) -> None:
        """Collect every invocation and declaration under *directory*."""
        before = (len(self.invocations), len(self.declarations))
        for info in iter_invocations(directory, search, self.patterns):
            self.add_invocation(info)
        for declaration in iter_declarations(directory, search, self.patterns):
            self.add_declaration(declaration)
        logger.info(
            "Scanned %s: %d invocations, %d declarations",
            directory,
            len(self.invocations) - before[0],
            len(self.declarations) - before[1],
        )

    def edges(
        self,
        job_filter: JobFilter,
        path_formatter: PathFormatter,
        unresolved: UnresolvedPolicy = UnresolvedPolicy.DROP,
    ) -> List[Edge]:
        return compile_edges(
            self.declarations, self.invocations, job_filter, path_formatter, unresolved
        )
