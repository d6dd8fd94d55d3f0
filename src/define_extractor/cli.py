"""Command line interface for define-extractor.

Commands:
    symbols: List candidate symbols declared in the profile header.
    scan: Scan sources for one or more symbols and write reports.
    menu: Interactive loop: pick a symbol, scan, report, repeat.
"""

import logging
import time
from dataclasses import dataclass
from pathlib import Path

import typer
from rich.progress import BarColumn, Progress, TaskProgressColumn, TextColumn, TimeElapsedColumn

from define_extractor.cli_utils import (
    EXIT_CONFIG_ERROR,
    EXIT_DISCOVERY_ERROR,
    EXIT_ERROR,
    EXIT_SIGINT,
    EXIT_SUCCESS,
    _error,
    _info,
    _setup_logging,
    _success,
    _validate_root,
    _warning,
    console,
    format_duration_cli,
)
from define_extractor.core.config import ExtractorConfig, load_config
from define_extractor.core.exceptions import ConfigError, DiscoveryError, ScanError
from define_extractor.discovery import (
    filter_symbols,
    find_header_files,
    find_source_files,
    read_symbols,
)
from define_extractor.report import write_reports
from define_extractor.scanning import Dialect, LineCountCache, ScanResult, ScanSession

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="define-extractor",
    help="Find conditional blocks and functions that test a configuration symbol",
    no_args_is_help=True,
)


@dataclass
class _CliState:
    """Options shared by all commands (set by the app callback)."""

    config_path: Path | None = None


@app.callback()
def main(
    ctx: typer.Context,
    config: str | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to define-extractor.yaml",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only log errors"),
) -> None:
    """Configure logging and remember the config path."""
    _setup_logging(verbose=verbose, quiet=quiet)
    ctx.obj = _CliState(config_path=Path(config) if config else None)


def _load_config(ctx: typer.Context) -> ExtractorConfig:
    state: _CliState = ctx.obj or _CliState()
    try:
        return load_config(state.config_path)
    except ConfigError as e:
        _error(str(e))
        raise typer.Exit(code=EXIT_CONFIG_ERROR) from e


def _discover_symbols(
    root: Path,
    dialect: Dialect,
    config: ExtractorConfig,
    profile: str | None,
    header: str | None,
) -> list[str]:
    """Read candidate symbols from an explicit header or a profile header.

    Raises:
        DiscoveryError: If no header or no usable symbol is found.

    """
    if header is not None:
        header_path = Path(header)
        if not header_path.is_file():
            raise DiscoveryError(f"Header file not found: {header}")
    else:
        if profile is None:
            raise DiscoveryError("Pass --header or --profile to locate the symbol header")
        names = config.headers.get(profile)
        if names is None:
            known = ", ".join(sorted(config.headers)) or "none"
            raise DiscoveryError(f"Unknown profile '{profile}' (configured: {known})")
        headers = find_header_files(root, names, exclude_dirs=config.exclude_dirs)
        if not headers:
            raise DiscoveryError(f"No header for profile '{profile}' found under {root}")
        if len(headers) > 1:
            logger.info("Several headers match profile %s, using %s", profile, headers[0])
        header_path = headers[0]

    symbols = filter_symbols(read_symbols(header_path, dialect), config.blacklist)
    if not symbols:
        raise DiscoveryError(f"No symbols declared in {header_path}")
    return symbols


def _discover_sources(root: Path, dialect: Dialect, config: ExtractorConfig) -> list[str]:
    files = find_source_files(
        root,
        dialect,
        extensions=config.extensions_for(dialect.value),
        exclude_dirs=config.exclude_dirs,
    )
    if not files:
        raise DiscoveryError(f"No {dialect.value}-dialect source files found under {root}")
    return files


def _scan_and_report(
    files: list[str],
    symbol: str,
    dialect: Dialect,
    config: ExtractorConfig,
    output_dir: Path,
    prefix: str,
    workers: int | None,
    line_counts: LineCountCache,
) -> ScanResult:
    """Scan one symbol with a progress bar, write reports, print a summary."""
    started = time.perf_counter()
    with Progress(
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task(f"Scanning {symbol}", total=None)

        def on_progress(processed: int, total: int) -> None:
            progress.update(task, completed=processed, total=total or None)

        session = ScanSession(
            files,
            symbol,
            dialect,
            max_workers=workers if workers is not None else config.max_workers,
            progress=on_progress,
            line_counts=line_counts,
            progress_interval=config.progress_interval,
        )
        result = session.run()

    paths = write_reports(result, symbol, output_dir, prefix=prefix)
    elapsed = format_duration_cli(time.perf_counter() - started)
    _success(
        f"{symbol}: {len(result.conditional_blocks)} conditional and "
        f"{len(result.function_blocks)} function block(s) "
        f"in {len(result.source_files())} file(s) ({elapsed})"
    )
    logger.debug("Reports: %s, %s", paths.conditional, paths.function)
    return result


def _prefix_for(profile: str | None) -> str:
    return f"{profile.upper()}_" if profile else ""


@app.command("symbols")
def symbols_command(
    ctx: typer.Context,
    root: str = typer.Option(".", "--root", "-r", help="Source tree to search"),
    dialect: Dialect = typer.Option(Dialect.BRACE, "--dialect", "-d", help="Source dialect"),
    profile: str | None = typer.Option(None, "--profile", "-p", help="Header profile name"),
    header: str | None = typer.Option(None, "--header", "-H", help="Explicit header file"),
) -> None:
    """List candidate symbols after blacklist filtering."""
    config = _load_config(ctx)
    root_path = _validate_root(root)
    try:
        symbols = _discover_symbols(root_path, dialect, config, profile, header)
    except DiscoveryError as e:
        _error(str(e))
        raise typer.Exit(code=EXIT_DISCOVERY_ERROR) from e

    for index, symbol in enumerate(symbols, start=1):
        console.print(f"{index}. {symbol}")


@app.command("scan")
def scan_command(
    ctx: typer.Context,
    symbols: list[str] | None = typer.Argument(None, help="Symbols to scan for"),
    all_symbols: bool = typer.Option(
        False, "--all", "-a", help="Scan every symbol of the profile header"
    ),
    root: str = typer.Option(".", "--root", "-r", help="Source tree to scan"),
    dialect: Dialect = typer.Option(Dialect.BRACE, "--dialect", "-d", help="Source dialect"),
    profile: str | None = typer.Option(None, "--profile", "-p", help="Header profile name"),
    header: str | None = typer.Option(None, "--header", "-H", help="Explicit header file"),
    output: str | None = typer.Option(None, "--output", "-o", help="Report directory"),
    workers: int | None = typer.Option(None, "--workers", "-w", min=1, help="Worker threads"),
) -> None:
    """Scan sources for symbols and write one report pair per symbol."""
    config = _load_config(ctx)
    root_path = _validate_root(root)
    if all_symbols and symbols:
        _error("Pass either SYMBOL... or --all, not both")
        raise typer.Exit(code=EXIT_CONFIG_ERROR)

    try:
        if all_symbols:
            targets = _discover_symbols(root_path, dialect, config, profile, header)
        else:
            targets = filter_symbols(symbols or [], config.blacklist)
            skipped = sorted(set(symbols or []) - set(targets))
            if skipped:
                _warning(f"Skipping blacklisted symbol(s): {', '.join(skipped)}")
        if not targets:
            _error("No symbols to scan (pass SYMBOL... or --all)")
            raise typer.Exit(code=EXIT_CONFIG_ERROR)
        files = _discover_sources(root_path, dialect, config)
    except DiscoveryError as e:
        _error(str(e))
        raise typer.Exit(code=EXIT_DISCOVERY_ERROR) from e

    output_dir = Path(output or config.output_dir)
    _info(f"{len(files)} {dialect.value} file(s), {len(targets)} symbol(s)")
    line_counts = LineCountCache()
    try:
        for symbol in targets:
            _scan_and_report(
                files,
                symbol,
                dialect,
                config,
                output_dir,
                _prefix_for(profile),
                workers,
                line_counts,
            )
    except KeyboardInterrupt:
        _warning("Interrupted, reports written so far are kept")
        raise typer.Exit(code=EXIT_SIGINT) from None
    except (ScanError, OSError) as e:
        _error(str(e))
        raise typer.Exit(code=EXIT_ERROR) from e


@app.command("menu")
def menu_command(
    ctx: typer.Context,
    root: str = typer.Option(".", "--root", "-r", help="Source tree to scan"),
    dialect: Dialect = typer.Option(Dialect.BRACE, "--dialect", "-d", help="Source dialect"),
    profile: str | None = typer.Option(None, "--profile", "-p", help="Header profile name"),
    header: str | None = typer.Option(None, "--header", "-H", help="Explicit header file"),
    output: str | None = typer.Option(None, "--output", "-o", help="Report directory"),
    workers: int | None = typer.Option(None, "--workers", "-w", min=1, help="Worker threads"),
) -> None:
    """Pick symbols from a numbered list and scan them one at a time."""
    config = _load_config(ctx)
    root_path = _validate_root(root)
    try:
        symbols = _discover_symbols(root_path, dialect, config, profile, header)
        files = _discover_sources(root_path, dialect, config)
    except DiscoveryError as e:
        _error(str(e))
        raise typer.Exit(code=EXIT_DISCOVERY_ERROR) from e

    output_dir = Path(output or config.output_dir)
    line_counts = LineCountCache()
    while True:
        console.print("\n[bold]Available symbols:[/bold]")
        for index, symbol in enumerate(symbols, start=1):
            console.print(f"{index}. {symbol}")
        console.print("0. Exit")
        choice = typer.prompt("Your choice", type=int, default=0)
        if choice == 0:
            raise typer.Exit(code=EXIT_SUCCESS)
        if not 1 <= choice <= len(symbols):
            _error(f"Invalid choice: {choice}")
            continue
        try:
            _scan_and_report(
                files,
                symbols[choice - 1],
                dialect,
                config,
                output_dir,
                _prefix_for(profile),
                workers,
                line_counts,
            )
        except KeyboardInterrupt:
            _warning("Interrupted")
            raise typer.Exit(code=EXIT_SIGINT) from None
        except (ScanError, OSError) as e:
            _error(str(e))
            raise typer.Exit(code=EXIT_ERROR) from e


if __name__ == "__main__":
    app()
