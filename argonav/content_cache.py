"""Time-bounded in-process cache of file text."""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Dict

from . import config
from .models import CacheEntry

logger = logging.getLogger(__name__)


class ContentCache:
    """File contents keyed by path, each entry valid for ``timeout`` seconds.

    After an insertion pushes the entry count above ``sweep_threshold`` every
    expired entry is dropped. This is not capacity eviction: the cache may
    hold any number of entries as long as they stay fresh.
    """

    def __init__(
        self,
        timeout: float = config.CONTENT_CACHE_TIMEOUT,
        sweep_threshold: int = config.CONTENT_CACHE_SWEEP_THRESHOLD,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.timeout = timeout
        self.sweep_threshold = sweep_threshold
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, path: object) -> bool:
        with self._lock:
            return path in self._entries

    def get_content(self, path: str) -> str:
        """Return the text of *path*, reading it only on a miss or stale entry.

        Raises:
            IOError: If the file cannot be read or is not valid UTF-8
        """
        now = self._clock()
        with self._lock:
            cached = self._entries.get(path)
        if cached is not None and now - cached.timestamp < self.timeout:
            return cached.content

        content = self._read(path)
        with self._lock:
            self._entries[path] = CacheEntry(content=content, timestamp=now)
            if len(self._entries) > self.sweep_threshold:
                self._sweep(now)
        return content

    def evict(self, path: str) -> None:
        with self._lock:
            self._entries.pop(path, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def _sweep(self, now: float) -> None:
        expired = [
            key for key, entry in self._entries.items()
            if now - entry.timestamp > self.timeout
        ]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug("Content cache sweep removed %d expired entries", len(expired))

    @staticmethod
    def _read(path: str) -> str:
        try:
            with open(path, "r", encoding="utf-8", newline="") as f:
                return f.read()
        except UnicodeDecodeError as exc:
            raise IOError(f"{path} is not valid UTF-8: {exc}") from exc
