"""Configuration paths and scan defaults for JobGraph."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Tuple

BASE_DIR = Path(os.environ.get("JOBGRAPH_HOME", str(Path.home() / ".jobgraph"))).expanduser()
CONFIG_FILE = BASE_DIR / "config.toml"

NAMESPACE_SEPARATOR = "::"
# Nesting this deep is pathological; anything at or past it is ignored.
MAX_INDENT = 80

DEFAULT_JOB_SUFFIX = "Job"
DEFAULT_INVOKE_METHODS: Tuple[str, ...] = ("perform_later", "perform_now", "perform")
DEFAULT_EXCLUDE = "!spec/"
DEFAULT_BACKEND = "auto"
DEFAULT_UNRESOLVED = "drop"

BACKENDS = ("auto", "ripgrep", "python")
UNRESOLVED_CHOICES = ("drop", "keep", "flag")


@dataclass
class ScanSettings:
    """Everything that shapes a scan, resolvable from TOML or CLI flags."""

    job_suffix: str = DEFAULT_JOB_SUFFIX
    invoke_methods: Tuple[str, ...] = field(default=DEFAULT_INVOKE_METHODS)
    exclude: str = DEFAULT_EXCLUDE
    separator: str = NAMESPACE_SEPARATOR
    max_indent: int = MAX_INDENT
    backend: str = DEFAULT_BACKEND
    unresolved: str = DEFAULT_UNRESOLVED

    @classmethod
    def from_mapping(cls, data: Dict[str, Any]) -> "ScanSettings":
        """Build settings from a ``[scan]`` table, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in data.items() if k in known}
        if "invoke_methods" in values:
            methods = values["invoke_methods"]
            if isinstance(methods, str):
                methods = [methods]
            values["invoke_methods"] = tuple(methods)
        return cls(**values)

    def to_mapping(self) -> Dict[str, Any]:
        return {
            "job_suffix": self.job_suffix,
            "invoke_methods": list(self.invoke_methods),
            "exclude": self.exclude,
            "separator": self.separator,
            "max_indent": self.max_indent,
            "backend": self.backend,
            "unresolved": self.unresolved,
        }
