"""Configuration manager for argonav search settings using TOML files."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

import toml

from . import config

logger = logging.getLogger(__name__)

SEARCH_SECTION = "search"


@dataclass
class SearchSettings:
    """Tunable limits for discovery, scanning and caching.

    The line-window bounds of the heuristics are deliberately absent: they
    are part of the matching contract and live as constants in
    :mod:`argonav.config`.
    """

    max_depth: int = config.MAX_DEPTH
    directory_concurrency: int = config.DIRECTORY_CONCURRENCY
    file_concurrency: int = config.FILE_CONCURRENCY
    content_cache_timeout: float = config.CONTENT_CACHE_TIMEOUT
    workspace_cache_timeout: float = config.WORKSPACE_CACHE_TIMEOUT

    def __post_init__(self):
        if self.max_depth < 0:
            raise ValueError("max_depth must not be negative")
        if self.directory_concurrency < 1 or self.file_concurrency < 1:
            raise ValueError("concurrency limits must be at least 1")
        if self.content_cache_timeout < 0 or self.workspace_cache_timeout < 0:
            raise ValueError("cache timeouts must not be negative")

    @classmethod
    def from_mapping(cls, data: Dict[str, Any]) -> "SearchSettings":
        """Build settings from a TOML table, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        values: Dict[str, Any] = {}
        for key, raw in data.items():
            if key not in known:
                logger.debug("Ignoring unknown search setting '%s'", key)
                continue
            values[key] = _coerce(key, raw)
        return cls(**values)

    def to_mapping(self) -> Dict[str, Any]:
        return asdict(self)


def _coerce(key: str, raw: Any) -> Any:
    if key in ("content_cache_timeout", "workspace_cache_timeout"):
        return float(raw)
    return int(raw)


def load_full_config(path: Optional[Path] = None) -> Dict[str, Any]:
    """Load the entire TOML config (all sections)."""
    config_file = path or config.CONFIG_FILE
    if not config_file.exists():
        return {}
    try:
        with open(config_file, "r", encoding="utf-8") as f:
            return toml.load(f)
    except (OSError, toml.TomlDecodeError) as exc:
        logger.warning("Could not read %s: %s", config_file, exc)
        return {}


def load_settings(path: Optional[Path] = None) -> SearchSettings:
    """Load search settings from the ``[search]`` table.

    Falls back to the built-in defaults when the file is missing, unreadable
    or holds invalid values.
    """
    section = load_full_config(path).get(SEARCH_SECTION, {})
    if not isinstance(section, dict):
        return SearchSettings()
    try:
        return SearchSettings.from_mapping(section)
    except (TypeError, ValueError) as exc:
        logger.warning("Invalid [search] settings, using defaults: %s", exc)
        return SearchSettings()


def save_settings(settings: SearchSettings, path: Optional[Path] = None) -> bool:
    """Write search settings, preserving other sections of the file.

    Returns:
        True if saved successfully, False otherwise
    """
    config_file = path or config.CONFIG_FILE
    full = load_full_config(config_file)
    full[SEARCH_SECTION] = settings.to_mapping()
    try:
        config_file.parent.mkdir(parents=True, exist_ok=True)
        with open(config_file, "w", encoding="utf-8") as f:
            toml.dump(full, f)
        return True
    except OSError as exc:
        logger.warning("Could not write %s: %s", config_file, exc)
        return False


def update_setting(key: str, value: str, path: Optional[Path] = None) -> SearchSettings:
    """Set a single ``[search]`` key from its string form and persist it.

    Raises:
        KeyError: If *key* is not a known setting
        ValueError: If *value* cannot be converted or is out of range
    """
    current = load_settings(path).to_mapping()
    if key not in current:
        raise KeyError(key)
    current[key] = _coerce(key, value)
    settings = SearchSettings(**current)
    if not save_settings(settings, path):
        raise OSError(f"Could not write configuration to {path or config.CONFIG_FILE}")
    return settings
