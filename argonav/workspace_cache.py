"""Session-scoped cache of resolved WorkflowTemplate definitions."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from . import config
from .models import SourceLocation

logger = logging.getLogger(__name__)


@dataclass
class WorkspaceCache:
    root: str
    templates: Dict[str, List[SourceLocation]] = field(default_factory=dict)
    last_scanned: float = 0.0


class WorkspaceResultCache:
    """Definition table for one workspace root.

    The table is dropped as a whole, never per entry: on :meth:`invalidate`
    (driven by file-change events) and once it is older than ``timeout``.
    Every invalidation bumps :attr:`generation`; a result computed under an
    older generation is not recorded.
    """

    def __init__(
        self,
        timeout: float = config.WORKSPACE_CACHE_TIMEOUT,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.timeout = timeout
        self._clock = clock
        self._cache: Optional[WorkspaceCache] = None
        self._generation = 0
        self._lock = threading.Lock()

    @property
    def generation(self) -> int:
        with self._lock:
            return self._generation

    def lookup(self, root: str, name: str) -> Optional[List[SourceLocation]]:
        """Cached definition locations for *name*, or None on a miss."""
        with self._lock:
            cache = self._live_cache(root)
            if cache is None or name not in cache.templates:
                return None
            return list(cache.templates[name])

    def remember(
        self,
        root: str,
        name: str,
        locations: List[SourceLocation],
        generation: Optional[int] = None,
    ) -> bool:
        """Record the resolved locations of *name*, starting a table if needed.

        When *generation* is given and the cache has been invalidated since it
        was read, the write is dropped and False is returned.
        """
        with self._lock:
            if generation is not None and generation != self._generation:
                logger.debug("Discarding stale result for '%s'", name)
                return False
            cache = self._live_cache(root)
            if cache is None:
                cache = WorkspaceCache(root=root, last_scanned=self._clock())
                self._cache = cache
            cache.templates[name] = list(locations)
            return True

    def invalidate(self) -> None:
        with self._lock:
            if self._cache is not None:
                logger.debug("Workspace cache invalidated (%d names)", len(self._cache.templates))
            self._cache = None
            self._generation += 1

    @property
    def is_empty(self) -> bool:
        return self._cache is None

    def _live_cache(self, root: str) -> Optional[WorkspaceCache]:
        cache = self._cache
        if cache is None:
            return None
        if cache.root != root or self._clock() - cache.last_scanned > self.timeout:
            self._cache = None
            return None
        return cache
