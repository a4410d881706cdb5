"""Turn search matches into invocation and declaration records."""

from __future__ import annotations

import logging
import re
from typing import Iterator, Optional, Tuple

from .config import ScanSettings
from .matcher import parse_search_line
from .models import DeclarationRecord, InvocationRecord
from .namespace import join_name, resolve_qualified_name, split_name
from .search import SearchProvider

logger = logging.getLogger(__name__)


class JobPatterns:
    """Search and extraction patterns derived from scan settings.

    The search patterns are handed to the search provider, so they stay in
    the syntax ripgrep and ``re`` share.
    """

    def __init__(self, settings: Optional[ScanSettings] = None) -> None:
        self.settings = settings or ScanSettings()
        suffix = re.escape(self.settings.job_suffix)
        methods = "|".join(re.escape(m) for m in self.settings.invoke_methods)

        self.invocation_search = rf"^ *[^#]*{suffix}\.(?:{methods})"
        self.declaration_search = rf"^ *class ([\w:]+){suffix} <"
        self.invocation = re.compile(rf"(?P<job>[\w:]+{suffix})\.(?:{methods})")
        self.declaration = re.compile(rf"(?P<job>[\w:]+{suffix}) <")

    def invoked_job(self, content: str) -> str:
        match = self.invocation.search(content)
        if match is None:
            raise ValueError(f"No job invocation found in: {content!r}")
        return match.group("job")

    def declared_job(self, content: str) -> str:
        match = self.declaration.search(content)
        if match is None:
            raise ValueError(f"No job declaration found in: {content!r}")
        return match.group("job")


def job_candidates(job: str, namespace: str, separator: str = "::") -> Tuple[str, ...]:
    """Names *job* could refer to from inside *namespace*.

    The bare name comes first, then the name under each prefix of the
    namespace from outermost to innermost. The resolver takes the first
    one that is declared, so this order is the tie-break.

    >>> job_candidates("FooJob", "A::B")
    ('FooJob', 'A::FooJob', 'A::B::FooJob')
    """
    candidates = [job]
    slugs = split_name(namespace, separator)
    for i in range(1, len(slugs) + 1):
        candidates.append(join_name(slugs[:i], separator) + separator + job)
    return tuple(candidates)


def build_invocation(raw_line: str, patterns: Optional[JobPatterns] = None) -> InvocationRecord:
    patterns = patterns or JobPatterns()
    settings = patterns.settings
    hit = parse_search_line(raw_line)
    job = patterns.invoked_job(hit.content)
    namespace = resolve_qualified_name(
        hit.path, hit.line_number, settings.separator, settings.max_indent
    )

    if not namespace:
        return InvocationRecord(hit.location, hit.path, job, (job,))
    return InvocationRecord(
        hit.location, namespace, job, job_candidates(job, namespace, settings.separator)
    )


def build_declaration(raw_line: str, patterns: Optional[JobPatterns] = None) -> DeclarationRecord:
    """The declaration line itself supplies the innermost name segment."""
    patterns = patterns or JobPatterns()
    settings = patterns.settings
    hit = parse_search_line(raw_line)
    job = patterns.declared_job(hit.content)
    declared = resolve_qualified_name(
        hit.path, hit.line_number, settings.separator, settings.max_indent
    )
    return DeclarationRecord(declared or job, hit.location, job)


def iter_invocations(
    directory: str,
    search: SearchProvider,
    patterns: Optional[JobPatterns] = None,
) -> Iterator[InvocationRecord]:
    patterns = patterns or JobPatterns()
    for line in search.search(directory, patterns.invocation_search, patterns.settings.exclude):
        record = build_invocation(line, patterns)
        logger.debug("Invocation at %s: %s -> %s", record.location, record.invoking_name, record.candidates)
        yield record


def iter_declarations(
    directory: str,
    search: SearchProvider,
    patterns: Optional[JobPatterns] = None,
) -> Iterator[DeclarationRecord]:
    patterns = patterns or JobPatterns()
    for line in search.search(directory, patterns.declaration_search, patterns.settings.exclude):
        record = build_declaration(line, patterns)
        logger.debug("Declaration at %s: %s", record.location, record.declared_name)
        yield record
