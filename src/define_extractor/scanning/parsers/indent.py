"""Indentation dialect scanner (Python sources).

One forward pass with pushback over the line list:

- Function tracking: a ``def`` line closes any open function and opens a
  new one at its indentation. A later non-blank, non-``def`` line indented
  at or below the function's level closes it. Functions are emitted only
  when relevant, and a relevant function still open at EOF is emitted.
- Conditional tracking: an ``if/elif app.SYMBOL`` line eagerly consumes
  every following line indented deeper than itself. Blank lines are kept
  only when a deeper non-blank line follows them; the first shallower line
  and any blank lines before it are pushed back to the outer loop. The
  consumed lines also belong to the open function, which becomes relevant.

Indentation is the number of leading spaces/tabs. Multi-line statements,
triple-quoted strings and mixed tabs/spaces are not understood.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from define_extractor.scanning.patterns import SymbolPattern
from define_extractor.scanning.types import CodeBlock, Dialect, ScanResult, split_lines

logger = logging.getLogger(__name__)


def _indent_of(line: str) -> int:
    return len(line) - len(line.lstrip(" \t"))


def _join(lines: list[str]) -> str:
    return "".join(f"{line}\n" for line in lines)


@dataclass
class _OpenFunction:
    """A ``def`` whose body is still being collected."""

    indent: int
    start_line: int
    lines: list[str] = field(default_factory=list)
    relevant: bool = False

    def to_block(self, path: str) -> CodeBlock:
        """Build the emitted block for this function."""
        return CodeBlock(
            source_file=path,
            text=_join(self.lines),
            kind="function",
            start_line=self.start_line,
            end_line=self.start_line + len(self.lines) - 1,
        )


class IndentScopeScanner:
    """Single-pass scanner for the indentation dialect.

    Args:
        pattern: Compiled indent-dialect recognizer for the target symbol.

    Raises:
        ValueError: If the pattern was built for another dialect.

    """

    dialect = Dialect.INDENT

    def __init__(self, pattern: SymbolPattern) -> None:  # noqa: D107
        if pattern.dialect is not Dialect.INDENT:
            raise ValueError(
                f"IndentScopeScanner needs an indent pattern, got {pattern.dialect.value}"
            )
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
        lines = split_lines(content)
        current: _OpenFunction | None = None
        index = 0

        while index < len(lines):
            line = lines[index]
            indent = _indent_of(line)
            blank = not line.strip()

            if self._pattern.is_def_start(line):
                if current is not None and current.relevant:
                    result.function_blocks.append(current.to_block(path))
                current = _OpenFunction(indent=indent, start_line=index + 1, lines=[line])
                index += 1
                continue

            if current is not None and not blank and indent <= current.indent:
                if current.relevant:
                    result.function_blocks.append(current.to_block(path))
                current = None

            if not self._pattern.tests_symbol(line):
                if current is not None:
                    current.lines.append(line)
                index += 1
                continue

            consumed = self._consume_block(lines, index, indent)
            result.conditional_blocks.append(
                CodeBlock(
                    source_file=path,
                    text=_join(consumed),
                    kind="conditional",
                    start_line=index + 1,
                    end_line=index + len(consumed),
                )
            )
            if current is not None:
                current.relevant = True
                current.lines.extend(consumed)
            index += len(consumed)

        if current is not None and current.relevant:
            result.function_blocks.append(current.to_block(path))
        return result

    @staticmethod
    def _consume_block(lines: list[str], start: int, opening_indent: int) -> list[str]:
        """Collect the opening line plus every deeper-indented follower.

        Args:
            lines: All file lines.
            start: Index of the opening ``if``/``elif`` line.
            opening_indent: Indentation of the opening line.

        Returns:
            The block lines; trailing blank lines are never included.

        """
        block = [lines[start]]
        pending_blank: list[str] = []
        cursor = start + 1
        while cursor < len(lines):
            candidate = lines[cursor]
            if not candidate.strip():
                pending_blank.append(candidate)
                cursor += 1
                continue
            if _indent_of(candidate) <= opening_indent:
                break
            block.extend(pending_blank)
            pending_blank = []
            block.append(candidate)
            cursor += 1
        return block
