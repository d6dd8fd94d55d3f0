"""Line recognizers for symbol tests in both dialects.

A SymbolPattern is built once per scan and shared read-only by all worker
threads. Besides the symbol-specific test it exposes the generic,
symbol-independent line tests the scanners need (directive start/end,
function heads, ``def`` lines).

Recognized brace-dialect tests of ``FOO``::

    #ifdef FOO            #ifndef FOO
    #if defined(FOO)      #elif defined(FOO)
    #if defined FOO       #elif defined FOO
    #if FOO               #elif (FOO)

Recognized indent-dialect tests of ``FOO``::

    if app.FOO:           elif (app.FOO and x):

Known limitations: directive-like text inside string literals or comments
is not masked, and ``#if !defined(FOO)`` or compound expressions that do
not start with the symbol are not treated as tests.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from define_extractor.scanning.types import Dialect

# Generic directive tests (brace dialect)
_DIRECTIVE_START = re.compile(r"^\s*#\s*(?:if|ifdef|ifndef)\b")
_DIRECTIVE_END = re.compile(r"^\s*#\s*endif\b")

# Heuristic function head: optional qualifier tokens (inline, static,
# virtual, ...), a return-type-like token, an identifier, a parameter list
# on one line, then "{", ";" or end of line. Qualifiers must stay covered by
# the generic token alternative (no overlapping alternatives).
_FUNCTION_HEAD = re.compile(
    r"^\s*(?:[\w:*&<>]+\s+)*"
    r"[\w:*&<>]+\s+(?P<name>\w[\w:*&<>]*)\s*\([^)]*\)\s*(?P<trailer>\{|;|$)"
)
_CONTROL_KEYWORDS = frozenset(
    {"if", "else", "for", "while", "switch", "return", "sizeof", "catch", "do"}
)

# Python-style definition start (indent dialect)
_DEF_START = re.compile(r"^\s*(?:async\s+)?def\s+\w+\s*\(")

# Symbol terminator: no word character may follow the symbol
_END = r"(?!\w)"


def _brace_test_regex(symbol: str) -> re.Pattern[str]:
    escaped = re.escape(symbol)
    alternatives = (
        rf"^\s*#\s*(?:ifdef|ifndef)\s+{escaped}{_END}",
        rf"^\s*#\s*(?:if|elif)\s+defined\s*\(\s*{escaped}\s*\)",
        rf"^\s*#\s*(?:if|elif)\s+defined\s+{escaped}{_END}",
        rf"^\s*#\s*(?:if|elif)(?:\s+\(?|\s*\()\s*{escaped}{_END}",
    )
    return re.compile("|".join(f"(?:{alt})" for alt in alternatives))


def _indent_test_regex(symbol: str) -> re.Pattern[str]:
    escaped = re.escape(symbol)
    return re.compile(rf"^\s*(?:if|elif)(?:\s+|\s*\()\s*app\.{escaped}{_END}")


@dataclass(frozen=True, slots=True)
class SymbolPattern:
    """Compiled recognizer for one symbol in one dialect.

    Attributes:
        symbol: The target symbol name.
        dialect: Dialect the symbol test is written in.

    """

    symbol: str
    dialect: Dialect
    _test: re.Pattern[str] = field(repr=False, compare=False)

    def tests_symbol(self, line: str) -> bool:
        """Return True when the line is a dialect-specific test of the symbol."""
        return self._test.search(line) is not None

    def is_directive_start(self, line: str) -> bool:
        """Return True for any ``#if``/``#ifdef``/``#ifndef`` line."""
        return _DIRECTIVE_START.match(line) is not None

    def is_directive_end(self, line: str) -> bool:
        """Return True for an ``#endif`` line."""
        return _DIRECTIVE_END.match(line) is not None

    def function_head(self, line: str) -> str | None:
        """Classify a line as a brace-dialect function head.

        Args:
            line: Source line without its newline.

        Returns:
            ``"{"`` when the body opens on this line, ``";"`` for a
            declaration, ``""`` for a head that may continue on later lines,
            or None when the line does not look like a function head.

        """
        match = _FUNCTION_HEAD.match(line)
        if match is None or match.group("name") in _CONTROL_KEYWORDS:
            return None
        return match.group("trailer")

    def is_def_start(self, line: str) -> bool:
        """Return True for a Python ``def`` or ``async def`` line."""
        return _DEF_START.match(line) is not None


def build_symbol_pattern(symbol: str, dialect: Dialect | str) -> SymbolPattern:
    """Build the recognizer for a symbol in the given dialect.

    Args:
        symbol: Target symbol, expected to be a plain identifier. Regex
            metacharacters are escaped.
        dialect: Dialect (or its string value).

    Returns:
        Immutable SymbolPattern safe to share across threads.

    Raises:
        ValueError: If the symbol is empty or the dialect is unknown.

    """
    normalized = symbol.strip()
    if not normalized:
        raise ValueError("Symbol must be a non-empty identifier")
    resolved = Dialect(dialect)
    if resolved is Dialect.BRACE:
        regex = _brace_test_regex(normalized)
    else:
        regex = _indent_test_regex(normalized)
    return SymbolPattern(symbol=normalized, dialect=resolved, _test=regex)
