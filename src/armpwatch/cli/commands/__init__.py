"""CLI command modules."""

from . import labels, scrape

__all__ = [
    "labels",
    "scrape",
]
