"""Header, symbol and source file discovery.

Locates the header that declares the candidate symbols, reads the symbol
names from it, and lists the source files a scan should cover. The
scanning core only ever sees the resulting plain lists.
"""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Iterable, Iterator
from pathlib import Path

from define_extractor.scanning.types import Dialect, split_lines

logger = logging.getLogger(__name__)

# "#define NAME ..." in brace-dialect headers
_DEFINE_RE = re.compile(r"^\s*#\s*define\s+(\w+)")

# Top-level "NAME = ..." / "NAME: type = ..." in Python flag modules
_MODULE_FLAG_RE = re.compile(r"^([A-Za-z_]\w*)\s*(?::[^=]+)?=(?!=)")

DEFAULT_EXCLUDE_DIRS: tuple[str, ...] = (".git", "__pycache__", ".venv", "node_modules", "Output")


def _walk_files(root: Path, exclude_dirs: Iterable[str]) -> Iterator[tuple[str, str]]:
    """Yield (directory, file name) pairs below root, pruning excluded directories."""
    skipped = set(exclude_dirs)
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(name for name in dirnames if name not in skipped)
        for filename in filenames:
            yield dirpath, filename


def find_header_files(
    root: Path,
    names: Iterable[str],
    exclude_dirs: Iterable[str] = DEFAULT_EXCLUDE_DIRS,
) -> list[Path]:
    """Find files whose name matches one of `names`, case-insensitively.

    Args:
        root: Directory to search recursively.
        names: Header file names (e.g. ``["service.h"]``).
        exclude_dirs: Directory names that are not descended into.

    Returns:
        Matching paths, sorted.

    """
    wanted = {name.lower() for name in names}
    if not wanted:
        return []
    found = [
        Path(dirpath) / filename
        for dirpath, filename in _walk_files(root, exclude_dirs)
        if filename.lower() in wanted
    ]
    found.sort()
    logger.debug("Found %d header(s) matching %s under %s", len(found), sorted(wanted), root)
    return found


def read_symbols(path: Path, dialect: Dialect | str) -> list[str]:
    """Read candidate symbol names declared in a header or flag module.

    Brace headers contribute every ``#define NAME``; indent-dialect flag
    modules contribute every top-level ``NAME = ...`` assignment, later
    tested as ``app.NAME``.

    Args:
        path: Header or module file.
        dialect: Dialect of the file.

    Returns:
        Names in declaration order (duplicates kept). Empty when the file
        cannot be read.

    """
    regex = _DEFINE_RE if Dialect(dialect) is Dialect.BRACE else _MODULE_FLAG_RE
    try:
        content = path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        logger.warning("Cannot read symbol source %s: %s", path, e)
        return []

    names: list[str] = []
    for line in split_lines(content):
        match = regex.match(line)
        if match is not None:
            names.append(match.group(1))
    return names


def filter_symbols(symbols: Iterable[str], blacklist: Iterable[str]) -> list[str]:
    """Drop blacklisted and duplicate symbols, keeping first-seen order."""
    blocked = set(blacklist)
    seen: set[str] = set()
    result: list[str] = []
    for symbol in symbols:
        if symbol in blocked or symbol in seen:
            continue
        seen.add(symbol)
        result.append(symbol)
    return result


def find_source_files(
    root: Path,
    dialect: Dialect | str,
    extensions: Iterable[str] | None = None,
    exclude_dirs: Iterable[str] = DEFAULT_EXCLUDE_DIRS,
) -> list[str]:
    """List source files of a dialect below `root`.

    Args:
        root: Directory to walk.
        dialect: Dialect whose files are wanted.
        extensions: Extensions to accept; the dialect defaults when None.
        exclude_dirs: Directory names that are not descended into.

    Returns:
        File paths as strings, sorted.

    """
    resolved = Dialect(dialect)
    accepted = {
        ext.lower() for ext in (extensions if extensions is not None else resolved.default_extensions())
    }
    files = [
        os.path.join(dirpath, filename)
        for dirpath, filename in _walk_files(root, exclude_dirs)
        if os.path.splitext(filename)[1].lower() in accepted
    ]
    files.sort()
    logger.debug("Found %d %s source file(s) under %s", len(files), resolved.value, root)
    return files
