"""Brace/directive dialect scanner (C and C++ sources).

Runs two independent line-level state machines over one forward pass:

- Conditional tracking: a symbol-specific ``#if...`` line opens a block,
  every generic ``#if/#ifdef/#ifndef`` nests one level deeper, every
  ``#endif`` closes one level, and the block is emitted (closing line
  included) once nesting drops to zero.
- Function tracking: a heuristic function head opens a body (immediately,
  or after buffering a multi-line head until ``{``); brace balance closes
  it, and the body is emitted only when a line inside tested the symbol.

This is a lexical heuristic, not a parser. Braces inside string or char
literals and directives inside comments are counted like real ones.
Unterminated conditional blocks and function bodies are dropped at EOF.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum, auto

from define_extractor.scanning.patterns import SymbolPattern
from define_extractor.scanning.types import CodeBlock, Dialect, ScanResult, split_lines

logger = logging.getLogger(__name__)


class _ConditionalState(Enum):
    """Conditional-block tracking state."""

    OUTSIDE = auto()
    INSIDE = auto()


class _FunctionState(Enum):
    """Function-body tracking state."""

    OUTSIDE = auto()
    BUFFERING_HEAD = auto()
    IN_BODY = auto()


def _brace_delta(line: str) -> int:
    return line.count("{") - line.count("}")


def _join(lines: list[str]) -> str:
    return "".join(f"{line}\n" for line in lines)


@dataclass
class _ConditionalTracker:
    """Tracks one symbol-triggered conditional region at a time."""

    pattern: SymbolPattern
    path: str
    state: _ConditionalState = _ConditionalState.OUTSIDE
    nesting: int = 0
    start_line: int = 0
    lines: list[str] = field(default_factory=list)

    def feed(self, line: str, line_no: int) -> CodeBlock | None:
        """Consume one line, returning a block when a region closes."""
        if self.state is _ConditionalState.OUTSIDE:
            if self.pattern.tests_symbol(line):
                self.state = _ConditionalState.INSIDE
                self.nesting = 1
                self.start_line = line_no
                self.lines = [line]
            return None

        self.lines.append(line)
        if self.pattern.is_directive_start(line):
            self.nesting += 1
        elif self.pattern.is_directive_end(line):
            self.nesting -= 1
            if self.nesting <= 0:
                block = CodeBlock(
                    source_file=self.path,
                    text=_join(self.lines),
                    kind="conditional",
                    start_line=self.start_line,
                    end_line=line_no,
                )
                self._reset()
                return block
        return None

    def _reset(self) -> None:
        self.state = _ConditionalState.OUTSIDE
        self.nesting = 0
        self.start_line = 0
        self.lines = []


@dataclass
class _FunctionTracker:
    """Tracks the current function head/body and its relevance flag."""

    pattern: SymbolPattern
    path: str
    state: _FunctionState = _FunctionState.OUTSIDE
    depth: int = 0
    relevant: bool = False
    start_line: int = 0
    lines: list[str] = field(default_factory=list)

    def feed(self, line: str, line_no: int) -> CodeBlock | None:
        """Consume one line, returning a block when a relevant body closes."""
        tests_symbol = self.pattern.tests_symbol(line)

        if self.state is _FunctionState.OUTSIDE:
            trailer = self.pattern.function_head(line)
            if trailer is None or trailer == ";":
                return None
            self.start_line = line_no
            self.lines = [line]
            self.relevant = tests_symbol
            if trailer == "{":
                return self._open_body(line, line_no)
            self.state = _FunctionState.BUFFERING_HEAD
            return None

        self.lines.append(line)
        self.relevant = self.relevant or tests_symbol

        if self.state is _FunctionState.BUFFERING_HEAD:
            if "{" in line:
                return self._open_body(line, line_no)
            if ";" in line:
                # Multi-line prototype without a body
                self._reset()
            return None

        self.depth += _brace_delta(line)
        return self._close_if_balanced(line_no)

    def _open_body(self, line: str, line_no: int) -> CodeBlock | None:
        self.state = _FunctionState.IN_BODY
        self.depth = _brace_delta(line)
        return self._close_if_balanced(line_no)

    def _close_if_balanced(self, line_no: int) -> CodeBlock | None:
        if self.depth > 0:
            return None
        block = None
        if self.relevant:
            block = CodeBlock(
                source_file=self.path,
                text=_join(self.lines),
                kind="function",
                start_line=self.start_line,
                end_line=line_no,
            )
        self._reset()
        return block

    def _reset(self) -> None:
        self.state = _FunctionState.OUTSIDE
        self.depth = 0
        self.relevant = False
        self.start_line = 0
        self.lines = []


class BraceScopeScanner:
    """Single-pass scanner for the brace/directive dialect.

    Args:
        pattern: Compiled brace-dialect recognizer for the target symbol.

    Raises:
        ValueError: If the pattern was built for another dialect.

    """

    dialect = Dialect.BRACE

    def __init__(self, pattern: SymbolPattern) -> None:  # noqa: D107
        if pattern.dialect is not Dialect.BRACE:
            raise ValueError(f"BraceScopeScanner needs a brace pattern, got {pattern.dialect.value}")
        self._pattern = pattern

    def scan(self, path: str, content: str) -> ScanResult:
        """Extract conditional and relevant function blocks from source text.

        Args:
            path: Source file path, recorded on every emitted block.
            content: Full file content.

        Returns:
            ScanResult with blocks in line order.

        """
        result = ScanResult()
        conditional = _ConditionalTracker(pattern=self._pattern, path=path)
        function = _FunctionTracker(pattern=self._pattern, path=path)

        for line_no, line in enumerate(split_lines(content), start=1):
            conditional_block = conditional.feed(line, line_no)
            if conditional_block is not None:
                result.conditional_blocks.append(conditional_block)
            function_block = function.feed(line, line_no)
            if function_block is not None:
                result.function_blocks.append(function_block)

        if conditional.state is _ConditionalState.INSIDE:
            logger.debug(
                "%s: conditional block opened at line %d never closed, dropping",
                path,
                conditional.start_line,
            )
        if function.state is not _FunctionState.OUTSIDE:
            logger.debug(
                "%s: function opened at line %d never closed, dropping",
                path,
                function.start_line,
            )
        return result
