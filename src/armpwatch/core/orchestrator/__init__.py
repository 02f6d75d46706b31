"""Orchestrator - run coordination from fetch to notices."""

from .runner import RunResult, RunStats, ScrapeRunner, parse_document

__all__ = [
    "RunResult",
    "RunStats",
    "ScrapeRunner",
    "parse_document",
]
