"""
ARMPWatch CLI - Main entry point.

Extracts tender notices from the ARMP calls-for-tenders listing and
writes them as YAML or JSON.
"""

from __future__ import annotations

import os
import sys
from typing import Optional

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.traceback import install as install_rich_traceback

from armpwatch import __app_name__, __version__

# Load environment variables from .env (if present)
load_dotenv()

# Install rich traceback for better error display
install_rich_traceback(show_locals=False, width=120)

# Force UTF-8 on Windows so accented labels survive the console
if sys.platform == "win32":
    os.environ.setdefault("PYTHONIOENCODING", "utf-8")
    for stream in (sys.stdout, sys.stderr):
        if hasattr(stream, "reconfigure"):
            try:
                stream.reconfigure(encoding="utf-8", errors="replace")
            except (AttributeError, OSError):
                pass

console = Console(legacy_windows=False)

# Create main app
app = typer.Typer(
    name=__app_name__,
    help="Tender notice extractor for the ARMP procurement portal",
    rich_markup_mode="rich",
    no_args_is_help=True,
    pretty_exceptions_show_locals=False,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold cyan]{__app_name__}[/bold cyan] version [green]{__version__}[/green]")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """ARMPWatch - ARMP tender notice extractor."""
    pass


# =============================================================================
# Register commands
# =============================================================================

from .commands import labels, scrape  # noqa: E402

app.command("scrape")(scrape.scrape)
app.command("parse")(scrape.parse)
app.command("labels")(labels.show_labels)


# =============================================================================
# Entry Point
# =============================================================================


def run() -> None:
    """Run the CLI application."""
    app()


if __name__ == "__main__":
    run()
