"""Shared CLI utilities for define-extractor.

This module contains exit codes, the console singleton, and helper
functions used by the CLI commands.
"""

import logging
import os
import sys
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler

# Exit codes following Unix conventions
EXIT_SUCCESS: int = 0
EXIT_ERROR: int = 1  # General error (scan failure, unwritable output)
EXIT_CONFIG_ERROR: int = 2  # Configuration/usage error
EXIT_DISCOVERY_ERROR: int = 3  # No header, symbols or source files found
EXIT_SIGINT: int = 130  # 128 + SIGINT (2) - Interrupted by Ctrl+C

# Environment variable overriding the log level chosen by flags
LOG_LEVEL_ENV = "DEFINE_EXTRACTOR_LOG_LEVEL"

# TTY detection for Rich markup
# When stdout is piped, Rich automatically strips ANSI codes
_is_tty = sys.stdout.isatty()

# Rich console for output
console = Console(force_terminal=_is_tty, no_color=not _is_tty)

# Module logger
logger = logging.getLogger(__name__)


def _error(message: str) -> None:
    """Display error message with red styling.

    Args:
        message: Error message to display.

    """
    console.print(f"[red]Error:[/red] {message}")


def _info(message: str) -> None:
    """Display info message with blue styling."""
    console.print(f"[blue]Info:[/blue] {message}")


def _success(message: str) -> None:
    """Display success message with green styling."""
    console.print(f"[green]✓[/green] {message}")


def _warning(message: str) -> None:
    """Display warning message with yellow styling."""
    console.print(f"[yellow]Warning:[/yellow] {message}")


def format_duration_cli(seconds: float) -> str:
    """Format duration for CLI output.

    Uses human-friendly format: Ym Zs, Zs, or milliseconds below one second.

    Args:
        seconds: Duration in seconds.

    Returns:
        Human-readable duration string.

    """
    if seconds < 1:
        return f"{int(seconds * 1000)}ms"
    total_seconds = int(seconds)
    minutes = total_seconds // 60
    secs = total_seconds % 60
    if minutes > 0:
        return f"{minutes}m {secs}s"
    return f"{secs}s"


def _setup_logging(verbose: bool, quiet: bool) -> None:
    """Configure logging based on verbosity flags.

    Args:
        verbose: If True, set DEBUG level.
        quiet: If True, set ERROR level.

    Note:
        verbose and quiet are mutually exclusive. If both are True,
        verbose takes precedence. Default log level is WARNING.

        DEFINE_EXTRACTOR_LOG_LEVEL can override the level.

    """
    env_level = os.environ.get(LOG_LEVEL_ENV, "").upper()
    if env_level in ("DEBUG", "INFO", "WARNING", "ERROR"):
        level = getattr(logging, env_level)
    elif verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING

    # Clear any existing handlers to avoid duplicates
    logging.root.handlers.clear()

    # Create handler with explicit level (basicConfig doesn't set handler level)
    handler = RichHandler(console=console, rich_tracebacks=True, show_path=False)
    handler.setLevel(level)

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[handler],
    )


def _validate_root(root: str) -> Path:
    """Validate and resolve the source root directory.

    Args:
        root: Path to the directory to scan.

    Returns:
        Resolved absolute Path.

    Raises:
        typer.Exit: If path doesn't exist or isn't a directory.

    """
    root_path = Path(root).resolve()

    if not root_path.exists():
        _error(f"Source root not found: {root}")
        raise typer.Exit(code=EXIT_ERROR)

    if not root_path.is_dir():
        _error(f"Source root must be a directory, got file: {root}")
        raise typer.Exit(code=EXIT_ERROR)

    return root_path
