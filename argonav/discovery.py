"""Recursive YAML file discovery with bounded parallel directory reads."""

from __future__ import annotations

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Iterable, List, Optional, Set, Tuple, Union

from . import config

logger = logging.getLogger(__name__)


class FileDiscovery:
    """Enumerate candidate YAML files under a root directory.

    Directories are read level by level; every level is fanned out over a
    thread pool capped at ``max_concurrency`` workers. Directories deeper than
    ``max_depth`` below the root are skipped silently, which also truncates
    symlink cycles. Unreadable directories contribute nothing.
    """

    def __init__(
        self,
        max_depth: int = config.MAX_DEPTH,
        max_concurrency: int = config.DIRECTORY_CONCURRENCY,
        extensions: Iterable[str] = config.YAML_EXTENSIONS,
        ignored_dirs: Iterable[str] = config.IGNORED_DIRS,
    ) -> None:
        self.max_depth = max_depth
        self.max_concurrency = max_concurrency
        self.extensions = tuple(extensions)
        self.ignored_dirs = frozenset(ignored_dirs)

    def find_source_files(self, root: Union[str, Path]) -> Set[str]:
        """Return the set of YAML file paths under *root*."""
        found: Set[str] = set()
        frontier: List[str] = [str(root)]
        depth = 0

        with ThreadPoolExecutor(max_workers=self.max_concurrency) as pool:
            while frontier and depth <= self.max_depth:
                next_frontier: List[str] = []
                for files, subdirs in pool.map(self._read_directory, frontier):
                    found.update(files)
                    next_frontier.extend(subdirs)
                frontier = next_frontier
                depth += 1

        if frontier:
            logger.debug(
                "Depth cap %d reached under %s; %d directories skipped",
                self.max_depth, root, len(frontier),
            )
        return found

    def should_ignore_directory(self, name: str) -> bool:
        return name in self.ignored_dirs or name.startswith(".")

    def is_yaml_file(self, name: str) -> bool:
        return name.endswith(self.extensions)

    def _read_directory(self, directory: str) -> Tuple[List[str], List[str]]:
        files: List[str] = []
        subdirs: List[str] = []
        try:
            with os.scandir(directory) as entries:
                for entry in entries:
                    if _is_file(entry) and self.is_yaml_file(entry.name):
                        files.append(entry.path)
                    elif _is_dir(entry) and not self.should_ignore_directory(entry.name):
                        subdirs.append(entry.path)
        except OSError as exc:
            logger.debug("Skipping unreadable directory %s: %s", directory, exc)
            return [], []
        return files, subdirs


def _is_file(entry: os.DirEntry) -> bool:
    try:
        return entry.is_file()
    except OSError:
        return False


def _is_dir(entry: os.DirEntry) -> bool:
    try:
        return entry.is_dir()
    except OSError:
        return False


def find_source_files(root: Union[str, Path], discovery: Optional[FileDiscovery] = None) -> Set[str]:
    """Module-level shortcut using default discovery settings."""
    return (discovery or FileDiscovery()).find_source_files(root)
