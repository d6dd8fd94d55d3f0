"""Per-file entry point: read a file and run the dialect scanner on it.

Pipeline: read file → select scanner by pattern dialect → ScanResult.

An unreadable file produces an empty result and never raises.
"""

from __future__ import annotations

import functools
import logging
from pathlib import Path
from typing import Protocol

from define_extractor.scanning.patterns import SymbolPattern
from define_extractor.scanning.types import Dialect, ScanResult

logger = logging.getLogger(__name__)


class _Scanner(Protocol):
    def scan(self, path: str, content: str) -> ScanResult: ...


@functools.lru_cache(maxsize=1)
def _get_scanners() -> dict[Dialect, type]:
    """Lazy import scanners to avoid circular imports."""
    from define_extractor.scanning.parsers.brace import BraceScopeScanner
    from define_extractor.scanning.parsers.indent import IndentScopeScanner

    return {
        Dialect.BRACE: BraceScopeScanner,
        Dialect.INDENT: IndentScopeScanner,
    }


def scan_source(content: str, path: str, pattern: SymbolPattern) -> ScanResult:
    """Scan in-memory source text.

    Args:
        content: Full source text.
        path: Path recorded on emitted blocks.
        pattern: Recognizer for the target symbol; its dialect selects the scanner.

    Returns:
        ScanResult for this text.

    """
    if not content:
        return ScanResult()
    scanner: _Scanner = _get_scanners()[pattern.dialect](pattern)
    return scanner.scan(path, content)


def scan_file(path: str | Path, pattern: SymbolPattern) -> ScanResult:
    """Read and scan one file.

    Args:
        path: File to scan.
        pattern: Recognizer for the target symbol.

    Returns:
        ScanResult for the file, empty when the file cannot be read.

    """
    file_path = Path(path)
    try:
        content = file_path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        logger.debug("Skipping unreadable file %s: %s", file_path, e)
        return ScanResult()
    return scan_source(content, str(path), pattern)
