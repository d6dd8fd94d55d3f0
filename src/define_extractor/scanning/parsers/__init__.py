"""Dialect scanners for block extraction.

Each scanner turns one file's text into a ScanResult.
"""

from define_extractor.scanning.parsers.brace import BraceScopeScanner
from define_extractor.scanning.parsers.indent import IndentScopeScanner

__all__ = ["BraceScopeScanner", "IndentScopeScanner"]
