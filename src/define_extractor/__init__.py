"""define-extractor: locate conditional blocks and functions that test a symbol.

Scans C/C++ sources for preprocessor conditionals (``#ifdef FOO`` and
friends) and Python sources for ``if app.FOO`` tests, collecting both the
conditional regions and the enclosing functions that depend on them.

Usage:
    >>> from define_extractor import Dialect, scan_files
    >>> result = scan_files(["src/main.cpp"], "FOO", Dialect.BRACE)
    >>> len(result.conditional_blocks)
"""

from define_extractor.scanning import (
    CodeBlock,
    Dialect,
    LineCountCache,
    ScanResult,
    ScanSession,
    SymbolPattern,
    build_symbol_pattern,
    scan_file,
    scan_files,
)

__version__ = "0.3.0"

__all__ = [
    "CodeBlock",
    "Dialect",
    "LineCountCache",
    "ScanResult",
    "ScanSession",
    "SymbolPattern",
    "build_symbol_pattern",
    "scan_file",
    "scan_files",
    "__version__",
]
