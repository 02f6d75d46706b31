"""Tests for logging setup."""

import json
import logging
import sys

from armpwatch.core.logging import JSONFormatter, get_contextual_logger, get_logger, setup_logging


def test_json_lines_carry_context(tmp_path):
    log_file = tmp_path / "logs" / "armpwatch.log"
    setup_logging(level="INFO", log_file=log_file, json_format=True, rich_console=False)

    log = get_contextual_logger("runner", url="https://example.test/", strategy="cells")
    log.info("Items found: 3")
    for handler in logging.getLogger("armpwatch").handlers:
        handler.flush()

    record = json.loads(log_file.read_text(encoding="utf-8").splitlines()[-1])
    assert record["message"] == "Items found: 3"
    assert record["logger"] == "armpwatch.runner"
    assert record["url"] == "https://example.test/"
    assert record["strategy"] == "cells"


def test_json_formatter_includes_exception():
    try:
        raise ValueError("bad cell")
    except ValueError:
        record = logging.LogRecord("armpwatch", logging.ERROR, __file__, 1, "failed", None, sys.exc_info())

    data = json.loads(JSONFormatter().format(record))
    assert data["level"] == "ERROR"
    assert "ValueError: bad cell" in data["exception"]


def test_get_logger_namespace():
    assert get_logger().name == "armpwatch"
    assert get_logger("cli").name == "armpwatch.cli"
