"""Search providers that stream ``path:line_number:content`` matches.

Both providers honour a ripgrep-style exclusion glob (``!spec/`` skips any
directory named ``spec``) and emit files in sorted path order so repeated
scans produce identical output.
"""

from __future__ import annotations

import fnmatch
import logging
import os
import re
import shutil
import subprocess
from typing import Iterator, List, Protocol

logger = logging.getLogger(__name__)


class SearchError(RuntimeError):
    """Raised when a search backend cannot complete a scan."""


class SearchProvider(Protocol):
    def search(self, directory: str, pattern: str, exclude: str) -> Iterator[str]:
        ...


class RipgrepSearch:
    """Run ``rg`` and yield its output lines as they arrive."""

    def __init__(self, executable: str = "rg") -> None:
        self.executable = executable

    def command(self, directory: str, pattern: str, exclude: str) -> List[str]:
        cmd = [
            self.executable, "-n", "--no-heading", "--with-filename",
            "--color", "never", "--sort", "path",
            "-e", pattern, directory,
        ]
        if exclude:
            cmd.extend(["-g", exclude])
        return cmd

    def search(self, directory: str, pattern: str, exclude: str) -> Iterator[str]:
        cmd = self.command(directory, pattern, exclude)
        logger.debug("Running %s", " ".join(cmd))
        try:
            proc = subprocess.Popen(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except FileNotFoundError as exc:
            raise SearchError(f"ripgrep executable not found: {self.executable}") from exc

        with proc:
            assert proc.stdout is not None
            for line in proc.stdout:
                yield line.rstrip("\n")
            stderr = proc.stderr.read() if proc.stderr else ""
            returncode = proc.wait()

        # 1 means no matches
        if returncode not in (0, 1):
            raise SearchError(
                f"rg returned {returncode} for pattern {pattern!r} in {directory}: {stderr.strip()}"
            )


class PythonSearch:
    """Pure-Python directory walker with ripgrep-compatible output."""

    def search(self, directory: str, pattern: str, exclude: str) -> Iterator[str]:
        regex = re.compile(pattern)
        if os.path.isfile(directory):
            yield from self._search_file(directory, regex)
            return
        if not os.path.isdir(directory):
            raise SearchError(f"No such directory: {directory}")

        for path in self._walk(directory, exclude):
            yield from self._search_file(path, regex)

    def _walk(self, directory: str, exclude: str) -> Iterator[str]:
        """Files under *directory*, entries sorted by name at every level."""
        with os.scandir(directory) as it:
            entries = sorted(it, key=lambda entry: entry.name)
        for entry in entries:
            if entry.name.startswith("."):
                continue
            if entry.is_dir():
                if not is_excluded(entry.path, exclude, True):
                    yield from self._walk(entry.path, exclude)
            elif entry.is_file() and not is_excluded(entry.path, exclude, False):
                yield entry.path

    def _search_file(self, path: str, regex: "re.Pattern[str]") -> Iterator[str]:
        try:
            if is_binary(path):
                logger.debug("Skipping binary file %s", path)
                return
            with open(path, "r", encoding="utf-8", errors="replace") as f:
                for number, line in enumerate(f, 1):
                    line = line.rstrip("\n")
                    if regex.search(line):
                        yield f"{path}:{number}:{line}"
        except OSError as exc:
            logger.warning("Could not read %s: %s", path, exc)


BINARY_SNIFF_BYTES = 8192


def is_binary(path: str) -> bool:
    """A NUL byte near the start marks a file as binary, as ripgrep decides."""
    with open(path, "rb") as f:
        return b"\x00" in f.read(BINARY_SNIFF_BYTES)


def is_excluded(path: str, exclude: str, is_dir: bool) -> bool:
    """Apply one ripgrep ``-g`` glob. Only ``!`` globs exclude anything."""
    if not exclude.startswith("!"):
        return False
    glob = exclude[1:]
    if glob.endswith("/"):
        if not is_dir:
            return False
        glob = glob.rstrip("/")
    name = os.path.basename(path)
    if "/" in glob:
        return fnmatch.fnmatch(path.replace(os.sep, "/"), "*" + glob.lstrip("*"))
    return fnmatch.fnmatch(name, glob)


def get_search_provider(name: str = "auto") -> SearchProvider:
    """Return the search backend called *name* (``auto``, ``ripgrep``, ``python``)."""
    if name == "ripgrep":
        return RipgrepSearch()
    if name == "python":
        return PythonSearch()
    if name == "auto":
        if shutil.which("rg"):
            return RipgrepSearch()
        logger.info("ripgrep not found on PATH; using the Python search backend")
        return PythonSearch()
    raise ValueError(f"Unknown search backend: {name}")
