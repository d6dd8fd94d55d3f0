"""Memoized per-file line counts for sizing progress feedback.

Entries are created on first query and never invalidated; a cache instance
is meant to live for one scan session (or a series of sessions over an
unchanged tree). Counts do not influence extraction results.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from pathlib import Path

logger = logging.getLogger(__name__)


class LineCountCache:
    """Thread-safe read-through cache of file line counts.

    Usage:
        >>> cache = LineCountCache()
        >>> cache.count("src/main.cpp")   # reads the file
        >>> cache.count("src/main.cpp")   # served from memory

    """

    def __init__(self) -> None:
        """Initialize an empty cache."""
        self._counts: dict[str, int] = {}
        self._lock = threading.Lock()  # Protects _counts

    def count(self, path: str | Path) -> int:
        """Return the number of lines in a file.

        Args:
            path: File to count.

        Returns:
            Line count; 0 for unreadable files (which are not cached).

        """
        key = str(path)
        with self._lock:
            cached = self._counts.get(key)
        if cached is not None:
            return cached

        try:
            with open(key, "rb") as f:
                lines = sum(1 for _ in f)
        except OSError as e:
            logger.debug("Cannot count lines of %s: %s", key, e)
            return 0

        with self._lock:
            # Another thread may have counted concurrently; keep the first value
            return self._counts.setdefault(key, lines)

    def total(self, paths: Iterable[str | Path]) -> int:
        """Return the summed line count of all paths."""
        return sum(self.count(path) for path in paths)

    def __contains__(self, path: object) -> bool:
        with self._lock:
            return str(path) in self._counts

    def __len__(self) -> int:
        with self._lock:
            return len(self._counts)
