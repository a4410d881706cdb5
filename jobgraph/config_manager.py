"""Configuration manager for JobGraph using TOML files."""

from __future__ import annotations

import logging
from dataclasses import fields
from typing import Any, Dict

import toml

from .config import BACKENDS, BASE_DIR, CONFIG_FILE, UNRESOLVED_CHOICES, ScanSettings

logger = logging.getLogger(__name__)

SECTION = "scan"


def load_full_config() -> Dict[str, Any]:
    """Load the entire TOML config (all sections)."""
    if not CONFIG_FILE.exists():
        return {}
    with open(CONFIG_FILE, "r") as f:
        return toml.load(f)


def _save_full_config(config: Dict[str, Any]) -> None:
    """Write entire config dict to TOML file, preserving all sections."""
    BASE_DIR.mkdir(parents=True, exist_ok=True)
    with open(CONFIG_FILE, "w") as f:
        toml.dump(config, f)


def load_scan_settings() -> ScanSettings:
    """Load scan settings from the ``[scan]`` section.

    Returns:
        ScanSettings with stored values applied over the defaults.
        Falls back to the defaults if the file doesn't exist.
    """
    section = load_full_config().get(SECTION, {})
    settings = ScanSettings.from_mapping(section)
    logger.debug("Loaded scan settings from %s: %s", CONFIG_FILE, settings)
    return settings


def _coerce(key: str, value: str) -> Any:
    if key == "invoke_methods":
        methods = [m.strip() for m in value.split(",") if m.strip()]
        if not methods:
            raise ValueError("invoke_methods needs at least one method name")
        return methods
    if key == "max_indent":
        number = int(value)
        if number <= 0:
            raise ValueError("max_indent must be positive")
        return number
    if key == "backend" and value not in BACKENDS:
        raise ValueError(f"backend must be one of: {', '.join(BACKENDS)}")
    if key == "unresolved" and value not in UNRESOLVED_CHOICES:
        raise ValueError(f"unresolved must be one of: {', '.join(UNRESOLVED_CHOICES)}")
    if not value:
        raise ValueError(f"{key} cannot be empty")
    return value


def save_setting(key: str, value: str) -> Any:
    """Persist one scan setting, preserving other sections in the file.

    Args:
        key: A ``ScanSettings`` field name.
        value: Raw string from the command line; comma-separated for
            ``invoke_methods``.

    Returns:
        The coerced value that was written.

    Raises:
        KeyError: If *key* is not a known setting.
        ValueError: If *value* cannot be coerced for *key*.
    """
    known = {f.name for f in fields(ScanSettings)}
    if key not in known:
        raise KeyError(key)

    coerced = _coerce(key, value)
    config = load_full_config()
    config.setdefault(SECTION, {})[key] = coerced
    _save_full_config(config)
    return coerced


def reset_config() -> bool:
    """Remove the ``[scan]`` section. Returns False if nothing was stored."""
    config = load_full_config()
    if SECTION not in config:
        return False
    del config[SECTION]
    _save_full_config(config)
    return True
