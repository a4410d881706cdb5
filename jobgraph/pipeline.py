"""Top-level entry point: scan directories and write the job diagram."""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Iterable, Optional, TextIO, Union

from .config import ScanSettings
from .graph import JobFilter, JobGraph, PathFormatter, UnresolvedPolicy
from .records import JobPatterns
from .render import RENDERERS
from .search import SearchProvider, get_search_provider

logger = logging.getLogger(__name__)


def default_path_formatter(path: str) -> str:
    """Replace a leading home directory with ``~``."""
    home = str(Path.home())
    if home and (path == home or path.startswith(home.rstrip(os.sep) + os.sep)):
        return "~" + path[len(home.rstrip(os.sep)):]
    return path


def accept_all(job: Optional[str]) -> bool:
    return True


def include_terms(*terms: str) -> JobFilter:
    """Keep jobs whose name contains any of *terms*; never keeps unresolved jobs."""
    def _filter(job: Optional[str]) -> bool:
        return job is not None and any(term in job for term in terms)
    return _filter


def generate(
    dirs: Union[str, Iterable[str]],
    path_formatter: PathFormatter = default_path_formatter,
    filter: JobFilter = accept_all,
    sink: Optional[TextIO] = None,
    *,
    settings: Optional[ScanSettings] = None,
    search: Optional[SearchProvider] = None,
    unresolved: Union[str, UnresolvedPolicy, None] = None,
    output_format: str = "plantuml",
) -> bool:
    """Scan *dirs* for job invocations and declarations and render the graph.

    Args:
        dirs: Directories to scan; ``~`` is expanded. A single string is
            treated as one directory.
        path_formatter: Applied to each invoking name before it is drawn.
        filter: Called with each resolved job name (``None`` if unresolved);
            the edge is drawn only when it returns True.
        sink: Where the diagram is written. Defaults to stdout.
        settings: Scan settings; defaults are used when omitted.
        search: Search backend; picked from ``settings.backend`` when omitted.
        unresolved: Policy for invocations of undeclared jobs; defaults to
            ``settings.unresolved``.
        output_format: ``plantuml`` or ``dot``.

    Returns:
        Always True. Failures raise.
    """
    settings = settings or ScanSettings()
    if output_format not in RENDERERS:
        raise ValueError(f"Unknown output format: {output_format}")
    search = search or get_search_provider(settings.backend)
    sink = sink or sys.stdout
    if isinstance(dirs, str):
        dirs = [dirs]

    graph = JobGraph(JobPatterns(settings))
    for directory in dirs:
        graph.scan(os.path.expanduser(directory), search)

    edges = graph.edges(filter, path_formatter, unresolved or settings.unresolved)
    logger.info("Rendering %d edges as %s", len(edges), output_format)
    RENDERERS[output_format](edges, sink)
    return True
