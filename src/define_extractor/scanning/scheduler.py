"""Concurrent fan-out of a file list across worker threads.

Workers pull file indexes from a shared ScanCursor (work stealing by index,
no static partitioning), scan into a thread-local ScanResult, and merge it
into the aggregate exactly once under a single lock when the list is
exhausted. There is no cancellation: a scan runs to completion or the
process is terminated.

ScanSession bundles everything one invocation owns (pattern, cursor, line
count cache, progress throttle) so repeated or concurrent scans in one
process never share mutable state unless a cache is passed in explicitly.
"""

from __future__ import annotations

import logging
import os
import threading
import time
from collections.abc import Callable, Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from define_extractor.core.exceptions import ScanError
from define_extractor.scanning.line_cache import LineCountCache
from define_extractor.scanning.patterns import SymbolPattern, build_symbol_pattern
from define_extractor.scanning.scanner import scan_file
from define_extractor.scanning.types import Dialect, ScanResult

logger = logging.getLogger(__name__)

# Minimum seconds between two forwarded progress notifications
DEFAULT_PROGRESS_INTERVAL = 0.1

# Worker count used when the CPU count cannot be determined
FALLBACK_WORKERS = 2

ProgressCallback = Callable[[int, int], None]


class ScanCursor:
    """Shared fetch-and-increment index into the file list.

    Each claim returns a distinct index; values only ever grow.
    """

    def __init__(self) -> None:
        """Initialize the cursor at index 0."""
        self._next = 0
        self._lock = threading.Lock()

    def claim(self) -> int:
        """Return the next unclaimed index and advance the cursor."""
        with self._lock:
            index = self._next
            self._next += 1
            return index

    @property
    def value(self) -> int:
        """Number of claims made so far."""
        with self._lock:
            return self._next


class ProgressThrottle:
    """Rate-limited forwarder of (processed, total) progress pairs.

    Forwarded `processed` values never decrease: an update older than the
    last forwarded one is dropped. The callback runs under the throttle's
    lock, so it sees updates one at a time and in order.

    Args:
        callback: Receives (processed, total). Called from worker threads.
        interval: Minimum seconds between forwarded updates.
        clock: Monotonic time source (injectable for tests).

    """

    def __init__(
        self,
        callback: ProgressCallback,
        interval: float = DEFAULT_PROGRESS_INTERVAL,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:  # noqa: D107
        self._callback = callback
        self._interval = interval
        self._clock = clock
        self._last: float | None = None
        self._last_processed = -1
        self._lock = threading.Lock()  # Protects _last, _last_processed and the callback

    def update(self, processed: int, total: int) -> bool:
        """Forward an update unless it is stale or one was sent less than `interval` ago.

        Returns:
            True if the callback was invoked.

        """
        with self._lock:
            if processed < self._last_processed:
                return False
            now = self._clock()
            if self._last is not None and now - self._last < self._interval:
                return False
            self._last = now
            self._last_processed = processed
            self._callback(processed, total)
        return True

    def finish(self, processed: int, total: int) -> None:
        """Forward the final state regardless of the rate limit."""
        with self._lock:
            self._last = self._clock()
            self._last_processed = max(self._last_processed, processed)
            self._callback(processed, total)


class ScanScheduler:
    """Work-stealing thread fan-out with one merge per worker.

    Args:
        max_workers: Upper bound on worker threads. Defaults to the CPU
            count (or FALLBACK_WORKERS when unknown). Never more workers
            than files are started.

    Raises:
        ValueError: If max_workers is given and < 1.

    """

    def __init__(self, max_workers: int | None = None) -> None:  # noqa: D107
        if max_workers is not None and max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {max_workers}")
        self._max_workers = max_workers

    def worker_count(self, file_count: int) -> int:
        """Return how many workers a scan of `file_count` files uses."""
        if file_count <= 0:
            return 0
        limit = os.cpu_count() or FALLBACK_WORKERS
        if self._max_workers is not None:
            limit = min(limit, self._max_workers)
        return min(limit, file_count)

    def run(
        self,
        files: Sequence[str],
        scan_fn: Callable[[str], ScanResult],
        on_file_done: Callable[[str], None] | None = None,
    ) -> ScanResult:
        """Scan every file once and aggregate the results.

        Args:
            files: Files to scan.
            scan_fn: Per-file scan function.
            on_file_done: Optional hook called after each file (worker thread).

        Returns:
            Aggregate ScanResult. Order across files is unspecified unless a
            single worker ran, in which case it follows the file list.

        Raises:
            ScanError: If workers cannot be run to completion.

        """
        aggregate = ScanResult()
        workers = self.worker_count(len(files))
        if workers == 0:
            return aggregate

        cursor = ScanCursor()
        merge_lock = threading.Lock()

        def worker() -> int:
            local = ScanResult()
            scanned = 0
            while True:
                index = cursor.claim()
                if index >= len(files):
                    break
                path = files[index]
                try:
                    local.extend(scan_fn(path))
                except Exception:
                    logger.warning("Scan of %s failed, skipping file", path, exc_info=True)
                scanned += 1
                if on_file_done is not None:
                    on_file_done(path)
            with merge_lock:
                aggregate.extend(local)
            return scanned

        logger.debug("Starting %d worker(s) for %d file(s)", workers, len(files))
        try:
            with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="scan") as executor:
                futures = [executor.submit(worker) for _ in range(workers)]
                per_worker = [future.result() for future in futures]
        except Exception as e:
            raise ScanError(f"Scan workers failed: {e}") from e

        logger.debug("Files per worker: %s", per_worker)
        return aggregate


class ScanSession:
    """One scan invocation: a symbol in a dialect over a file list.

    Args:
        files: Files to scan (already filtered to the dialect).
        symbol: Target symbol.
        dialect: Dialect of the files.
        max_workers: Optional cap on worker threads.
        progress: Optional (processed_lines, total_lines) callback.
        line_counts: Line count cache to reuse; a fresh one by default.
        progress_interval: Minimum seconds between progress notifications.

    Usage:
        >>> session = ScanSession(files, "FOO", Dialect.BRACE)
        >>> result = session.run()

    """

    def __init__(
        self,
        files: Iterable[str | Path],
        symbol: str,
        dialect: Dialect | str,
        *,
        max_workers: int | None = None,
        progress: ProgressCallback | None = None,
        line_counts: LineCountCache | None = None,
        progress_interval: float = DEFAULT_PROGRESS_INTERVAL,
    ) -> None:  # noqa: D107
        self.files: list[str] = [str(path) for path in files]
        self.pattern: SymbolPattern = build_symbol_pattern(symbol, dialect)
        self.line_counts = line_counts if line_counts is not None else LineCountCache()
        self._scheduler = ScanScheduler(max_workers)
        self._throttle = (
            ProgressThrottle(progress, progress_interval) if progress is not None else None
        )
        self._processed_lines = 0
        self._total_lines = 0
        self._lock = threading.Lock()  # Protects _processed_lines

    def run(self) -> ScanResult:
        """Scan all files and return the aggregate result."""
        started = time.perf_counter()
        if self._throttle is not None:
            self._total_lines = self.line_counts.total(self.files)
            logger.info("Counted %d line(s) in %d file(s)", self._total_lines, len(self.files))

        result = self._scheduler.run(
            self.files,
            self._scan_one,
            on_file_done=self._file_done if self._throttle is not None else None,
        )

        if self._throttle is not None:
            self._throttle.finish(self._processed_lines, self._total_lines)

        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            "Scanned %d file(s) for %s in %.0f ms: %d conditional, %d function block(s)",
            len(self.files),
            self.pattern.symbol,
            elapsed_ms,
            len(result.conditional_blocks),
            len(result.function_blocks),
        )
        return result

    def _scan_one(self, path: str) -> ScanResult:
        return scan_file(path, self.pattern)

    def _file_done(self, path: str) -> None:
        lines = self.line_counts.count(path)
        with self._lock:
            self._processed_lines += lines
            processed = self._processed_lines
        if self._throttle is not None:
            self._throttle.update(processed, self._total_lines)


def scan_files(
    files: Iterable[str | Path],
    symbol: str,
    dialect: Dialect | str,
    *,
    max_workers: int | None = None,
    progress: ProgressCallback | None = None,
    line_counts: LineCountCache | None = None,
) -> ScanResult:
    """Scan files for a symbol in one call.

    Args:
        files: Files to scan.
        symbol: Target symbol.
        dialect: Dialect of the files.
        max_workers: Optional cap on worker threads.
        progress: Optional (processed_lines, total_lines) callback.
        line_counts: Optional shared line count cache.

    Returns:
        Aggregate ScanResult.

    """
    session = ScanSession(
        files,
        symbol,
        dialect,
        max_workers=max_workers,
        progress=progress,
        line_counts=line_counts,
    )
    return session.run()
