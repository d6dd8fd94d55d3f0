"""Dual-dialect block extraction engine.

Finds conditional blocks testing a symbol and the functions containing
them, in brace/directive (C, C++) and indentation (Python) sources, and
fans scans of many files out across worker threads.

Pipeline: build_symbol_pattern() → ScanSession.run() → ScanResult
"""

from define_extractor.scanning.line_cache import LineCountCache
from define_extractor.scanning.parsers import BraceScopeScanner, IndentScopeScanner
from define_extractor.scanning.patterns import SymbolPattern, build_symbol_pattern
from define_extractor.scanning.scanner import scan_file, scan_source
from define_extractor.scanning.scheduler import (
    ProgressThrottle,
    ScanCursor,
    ScanScheduler,
    ScanSession,
    scan_files,
)
from define_extractor.scanning.types import BLOCK_STAMP, CodeBlock, Dialect, ScanResult

__all__ = [
    "BLOCK_STAMP",
    "BraceScopeScanner",
    "CodeBlock",
    "Dialect",
    "IndentScopeScanner",
    "LineCountCache",
    "ProgressThrottle",
    "ScanCursor",
    "ScanResult",
    "ScanScheduler",
    "ScanSession",
    "SymbolPattern",
    "build_symbol_pattern",
    "scan_file",
    "scan_files",
    "scan_source",
]
