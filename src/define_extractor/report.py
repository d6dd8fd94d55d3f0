"""Report files for scan results.

Writes one file of conditional blocks and one of function blocks per
symbol. Each block is preceded by its source-file stamp and followed by a
blank line; a summary with the block count and the contributing files
closes the report.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from define_extractor.scanning.types import CodeBlock, ScanResult

logger = logging.getLogger(__name__)

CONDITIONAL_SUFFIX = "_DEFINE.txt"
FUNCTION_SUFFIX = "_FUNC.txt"


@dataclass(frozen=True, slots=True)
class ReportPaths:
    """Locations of the two report files written for one symbol."""

    conditional: Path
    function: Path


def render_report(blocks: Sequence[CodeBlock], label: str) -> str:
    """Render blocks plus a trailing summary.

    Args:
        blocks: Blocks to include, in output order.
        label: Block description used in the summary line.

    Returns:
        Report text.

    """
    parts = [f"{block.render()}\n" for block in blocks]
    files = sorted({block.source_file for block in blocks})
    parts.append(f"\n--- SUMMARY ({len(blocks)} {label}) in files: ---\n")
    parts.extend(f"{name}\n" for name in files)
    return "".join(parts)


def write_reports(
    result: ScanResult,
    symbol: str,
    output_dir: Path,
    prefix: str = "",
) -> ReportPaths:
    """Write the conditional and function reports for a symbol.

    Args:
        result: Aggregate scan result.
        symbol: Scanned symbol, used in the file names.
        output_dir: Target directory (created if missing).
        prefix: Optional file name prefix, e.g. ``"SERVER_"``.

    Returns:
        Paths of the written files.

    Raises:
        OSError: If the directory or files cannot be written.

    """
    output_dir.mkdir(parents=True, exist_ok=True)
    paths = ReportPaths(
        conditional=output_dir / f"{prefix}{symbol}{CONDITIONAL_SUFFIX}",
        function=output_dir / f"{prefix}{symbol}{FUNCTION_SUFFIX}",
    )
    paths.conditional.write_text(
        render_report(result.conditional_blocks, "conditional block(s)"), encoding="utf-8"
    )
    paths.function.write_text(
        render_report(result.function_blocks, "function block(s)"), encoding="utf-8"
    )
    logger.info("Wrote %s and %s", paths.conditional, paths.function)
    return paths
