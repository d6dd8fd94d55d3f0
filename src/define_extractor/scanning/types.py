"""Core data types for the block extraction pipeline.

Defines Dialect, CodeBlock and ScanResult as the representations shared by
the per-dialect scanners, the scheduler and the report writer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import PurePath
from typing import Literal

# Marker line surrounding the source file name in rendered blocks
BLOCK_STAMP = "##########"

_DIALECT_EXTENSIONS: dict[str, str] = {
    ".c": "brace",
    ".cc": "brace",
    ".cpp": "brace",
    ".cxx": "brace",
    ".h": "brace",
    ".hh": "brace",
    ".hpp": "brace",
    ".hxx": "brace",
    ".py": "indent",
    ".pyw": "indent",
}


class Dialect(str, Enum):
    """Block-delimitation grammar of a source file.

    BRACE covers C-preprocessor conditionals with curly-brace function
    bodies; INDENT covers Python-style ``if app.SYMBOL`` tests with
    ``def``-delimited functions.
    """

    BRACE = "brace"
    INDENT = "indent"

    @classmethod
    def for_path(cls, path: str | PurePath) -> Dialect | None:
        """Return the dialect implied by a file extension, if any."""
        suffix = PurePath(path).suffix.lower()
        value = _DIALECT_EXTENSIONS.get(suffix)
        return cls(value) if value is not None else None

    def default_extensions(self) -> tuple[str, ...]:
        """Return the file extensions scanned by default for this dialect."""
        return tuple(ext for ext, value in _DIALECT_EXTENSIONS.items() if value == self.value)


def split_lines(content: str) -> list[str]:
    """Split source text into lines at ``\\n`` only.

    Form feeds, vertical tabs and Unicode line separators stay inside their
    line. One trailing ``\\r`` per line is removed and a final newline does
    not produce an empty last line.

    Args:
        content: Full source text.

    Returns:
        Lines without terminators.

    """
    lines = content.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line.removesuffix("\r") for line in lines]


@dataclass(frozen=True, slots=True)
class CodeBlock:
    """A captured conditional region or function body.

    Attributes:
        source_file: Path of the file the block was read from.
        text: Captured source lines, each terminated by a newline.
        kind: Whether the block is a conditional region or a function body.
        start_line: 1-indexed inclusive first line.
        end_line: 1-indexed inclusive last line.

    """

    source_file: str
    text: str
    kind: Literal["conditional", "function"] = "conditional"
    start_line: int = 1
    end_line: int = 1

    def render(self) -> str:
        """Return the block prefixed with its source-file stamp lines."""
        return f"{BLOCK_STAMP}\n{self.source_file}\n{BLOCK_STAMP}\n{self.text}"

    @property
    def line_count(self) -> int:
        """Number of source lines in the block."""
        return self.text.count("\n")


@dataclass
class ScanResult:
    """Conditional and function blocks found by a scan.

    Used both per file (ephemeral) and as the aggregate for a whole scan.
    Block order within one file follows line order; across files no order
    is guaranteed unless the scan ran with a single worker.

    Attributes:
        conditional_blocks: Closed conditional regions testing the symbol.
        function_blocks: Function bodies containing at least one test.

    """

    conditional_blocks: list[CodeBlock] = field(default_factory=list)
    function_blocks: list[CodeBlock] = field(default_factory=list)

    def extend(self, other: ScanResult) -> None:
        """Append another result's blocks to this one."""
        self.conditional_blocks.extend(other.conditional_blocks)
        self.function_blocks.extend(other.function_blocks)

    def source_files(self) -> list[str]:
        """Return the distinct files contributing blocks, sorted."""
        files = {block.source_file for block in self.conditional_blocks}
        files.update(block.source_file for block in self.function_blocks)
        return sorted(files)

    @property
    def total_blocks(self) -> int:
        """Total number of blocks of both kinds."""
        return len(self.conditional_blocks) + len(self.function_blocks)

    @property
    def empty(self) -> bool:
        """True when no block of either kind was found."""
        return self.total_blocks == 0
