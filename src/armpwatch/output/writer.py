"""
Serialization of notice sequences to YAML or JSON.

Field names and order follow the Notice record. Empty fields are
written as empty strings, never dropped or nulled.
"""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import IO, Any

import yaml

from armpwatch.core.config.models import OutputFormat
from armpwatch.core.extract.base import Notice

logger = logging.getLogger(__name__)


class OutputError(Exception):
    """Serialization or write failure."""

    def __init__(self, message: str, path: Path | None = None):
        self.path = path
        super().__init__(message)


def _resolve_format(fmt: OutputFormat | str) -> OutputFormat:
    if isinstance(fmt, OutputFormat):
        return fmt
    resolved = OutputFormat.parse(fmt)
    if resolved is None:
        raise OutputError(f"Unknown format: {fmt}")
    return resolved


def dump_notices(notices: Iterable[Notice], fmt: OutputFormat | str = OutputFormat.YAML) -> str:
    """Serialize notices to text.

    Args:
        notices: Notices in output order
        fmt: yaml or json

    Returns:
        Serialized document (a top-level list)
    """
    fmt = _resolve_format(fmt)
    records = [notice.to_dict() for notice in notices]

    if fmt is OutputFormat.JSON:
        return json.dumps(records, indent=2, ensure_ascii=False) + "\n"

    try:
        return yaml.safe_dump(records, sort_keys=False, allow_unicode=True)
    except yaml.YAMLError as e:
        raise OutputError(f"YAML serialization failed: {e}") from e


def load_notices(text: str, fmt: OutputFormat | str = OutputFormat.YAML) -> list[Notice]:
    """Parse notices previously written by dump_notices.

    Raises:
        OutputError: If the document is invalid or not a list of mappings
    """
    fmt = _resolve_format(fmt)
    try:
        if fmt is OutputFormat.JSON:
            data: Any = json.loads(text) if text.strip() else []
        else:
            data = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise OutputError(f"Invalid {fmt.value} document: {e}") from e

    if data is None:
        return []
    if not isinstance(data, list):
        raise OutputError(f"Expected a list of notices, got {type(data).__name__}")

    notices: list[Notice] = []
    for index, record in enumerate(data):
        if not isinstance(record, dict):
            raise OutputError(f"Notice {index} is not a mapping")
        notices.append(Notice.from_dict(record))
    return notices


def write_notices(
    notices: Sequence[Notice],
    fmt: OutputFormat | str = OutputFormat.YAML,
    path: Path | str | None = None,
    stream: IO[str] | None = None,
) -> int:
    """Write serialized notices to a file or a text stream.

    Args:
        notices: Notices to write
        fmt: yaml or json
        path: Destination file; stream (default stdout) when None
        stream: Text stream used when no path is given

    Returns:
        Number of bytes written

    Raises:
        OutputError: If the file cannot be written
    """
    document = dump_notices(notices, fmt)
    payload = document.encode("utf-8")

    if path is not None:
        path = Path(path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(payload)
        except OSError as e:
            raise OutputError(f"Cannot write {path}: {e}", path=path) from e
        logger.info(f"Wrote {len(payload)} bytes to {path}")
        return len(payload)

    (stream or sys.stdout).write(document)
    return len(payload)
