"""
Scrape and parse commands.

``scrape`` loads the live listing page; ``parse`` runs the same
strategies over a saved copy of it.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Optional

import typer
from rich.console import Console

from armpwatch.core.backends import BackendError
from armpwatch.core.config import (
    AppConfig,
    ConfigError,
    ExtractionStrategy,
    apply_overrides,
    load_app_config,
)
from armpwatch.core.extract import ExtractionError
from armpwatch.core.logging import setup_logging
from armpwatch.core.orchestrator import RunResult
from armpwatch.output import OutputError, write_notices

console = Console()
err_console = Console(stderr=True)


def _resolve_config(config_path: Optional[Path], overrides: dict[str, Any]) -> AppConfig:
    """Load file and env configuration, then apply command-line flags."""
    try:
        config = load_app_config(config_path)
        return apply_overrides(config, overrides)
    except ConfigError as e:
        err_console.print(f"[red]Configuration error:[/red] {e}")
        if e.details:
            err_console.print(f"[dim]{e.details}[/dim]")
        raise typer.Exit(1)


def _setup_logging(config: AppConfig) -> None:
    setup_logging(
        level=config.logging.level,
        log_file=config.logging.file,
        json_format=config.logging.json_format,
        rich_console=config.logging.rich_console,
    )


def _pause_on_exit(config: AppConfig) -> None:
    """Keep a double-clicked console window open on Windows."""
    if sys.platform == "win32" and config.output.pause_on_exit:
        console.input("Press Enter to exit...")


def _emit(result: RunResult, config: AppConfig) -> None:
    """Write notices to the configured destination."""
    path = config.output.path
    try:
        size = write_notices(result.notices, config.output.format, path=path)
    except OutputError as e:
        err_console.print(f"[red]Output error:[/red] {e}")
        raise typer.Exit(1)

    if path is not None:
        err_console.print(
            f"[green]Wrote {len(result.notices)} notices ({size} bytes) to[/green] {path}"
        )


def _run(config: AppConfig, action: Any) -> None:
    """Run an extraction callable and map failures to exit codes."""
    try:
        result = action()
    except BackendError as e:
        err_console.print(f"[red]Page load failed:[/red] {e}")
        raise typer.Exit(1)
    except ExtractionError as e:
        err_console.print(f"[red]Extraction failed:[/red] {e}")
        raise typer.Exit(1)

    _emit(result, config)


def scrape(
    url: Optional[str] = typer.Option(
        None,
        "--url",
        "-u",
        help="Listing page URL",
    ),
    strategy: Optional[ExtractionStrategy] = typer.Option(
        None,
        "--strategy",
        "-s",
        case_sensitive=False,
        help="Extraction strategy",
    ),
    fmt: Optional[str] = typer.Option(
        None,
        "--format",
        "-f",
        help="Output format: yaml or json",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output file (default: stdout)",
    ),
    show_html: bool = typer.Option(
        False,
        "--show-html",
        help="Log each item's markup before parsing",
    ),
    auto_install: Optional[bool] = typer.Option(
        None,
        "--auto-install/--no-auto-install",
        help="Install the browser if it is missing",
    ),
    pause: bool = typer.Option(
        False,
        "--pause",
        help="Wait for Enter before exiting (Windows)",
    ),
    config_path: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to app.yaml",
    ),
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        "-l",
        help="Log level (DEBUG, INFO, WARNING, ERROR)",
    ),
) -> None:
    """Scrape the tender listing and print notices.

    Examples:
        armpwatch scrape
        armpwatch scrape --strategy cells --format json
        armpwatch scrape -s markup -o notices.yaml
    """
    from armpwatch.core.orchestrator import ScrapeRunner

    config = _resolve_config(config_path, {
        "scrape": {
            "url": url,
            "strategy": strategy.value if strategy else None,
            "show_html": True if show_html else None,
        },
        "browser": {"auto_install": auto_install},
        "output": {
            "format": fmt,
            "path": str(output) if output else None,
            "pause_on_exit": True if pause else None,
        },
        "logging": {"level": log_level},
    })
    _setup_logging(config)

    err_console.print(
        f"[bold]Scraping[/bold] {config.scrape.url} "
        f"[dim]({config.scrape.strategy.value} strategy)[/dim]"
    )
    try:
        _run(config, ScrapeRunner(config).run)
    finally:
        _pause_on_exit(config)


def parse(
    file: Path = typer.Argument(
        ...,
        exists=True,
        dir_okay=False,
        readable=True,
        help="Saved listing page (HTML)",
    ),
    strategy: Optional[ExtractionStrategy] = typer.Option(
        None,
        "--strategy",
        "-s",
        case_sensitive=False,
        help="Extraction strategy",
    ),
    fmt: Optional[str] = typer.Option(
        None,
        "--format",
        "-f",
        help="Output format: yaml or json",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output file (default: stdout)",
    ),
    show_html: bool = typer.Option(
        False,
        "--show-html",
        help="Log each item's markup before parsing",
    ),
    config_path: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to app.yaml",
    ),
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        "-l",
        help="Log level (DEBUG, INFO, WARNING, ERROR)",
    ),
) -> None:
    """Extract notices from a saved listing page.

    Examples:
        armpwatch parse page.html
        armpwatch parse page.html --strategy markup --format json
    """
    from armpwatch.core.orchestrator import parse_document

    config = _resolve_config(config_path, {
        "scrape": {
            "strategy": strategy.value if strategy else None,
            "show_html": True if show_html else None,
        },
        "output": {
            "format": fmt,
            "path": str(output) if output else None,
        },
        "logging": {"level": log_level},
    })
    _setup_logging(config)

    try:
        page_html = file.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        err_console.print(f"[red]Cannot read {file}:[/red] {e}")
        raise typer.Exit(1)

    _run(config, lambda: parse_document(page_html, config.scrape))
