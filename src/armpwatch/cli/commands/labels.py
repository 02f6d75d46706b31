"""
Label table diagnostics.
"""

from __future__ import annotations

import typer
from rich.console import Console
from rich.table import Table

from armpwatch.core.config import DEFAULT_LABEL_TABLE, build_label_variants
from armpwatch.core.normalize import is_french, normalize_label

console = Console()


def show_labels(
    lang: str = typer.Option(
        "fr",
        "--lang",
        "-L",
        help="Page language tag (e.g. fr, en-US)",
    ),
    normalized: bool = typer.Option(
        False,
        "--normalized",
        "-n",
        help="Also show the normalized form used by the cell walker",
    ),
) -> None:
    """Show the label spellings probed for each field, in order."""
    variants = build_label_variants(lang, DEFAULT_LABEL_TABLE)
    native = "French" if is_french(lang) else "English"

    table = Table(
        title=f"Label variants for lang={lang!r} ({native} first)",
        show_header=True,
        header_style="bold magenta",
    )
    table.add_column("Field", style="cyan")
    table.add_column("#", justify="right")
    table.add_column("Label")
    if normalized:
        table.add_column("Normalized", style="dim")

    for field_name, labels in variants.items():
        for position, label in enumerate(labels, start=1):
            row = [field_name if position == 1 else "", str(position), label]
            if normalized:
                row.append(normalize_label(label))
            table.add_row(*row)

    console.print(table)
