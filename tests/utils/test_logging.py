"""Tests for structured JSON logging."""

import json
import logging

from counterproductive.utils.logging import JSONFormatter, configure_logging


def _record(**extra):
    record = logging.LogRecord(
        "counterproductive.analysis.parser", logging.WARNING, __file__, 10,
        "Skipping malformed record: %s", ("bad",), None,
    )
    record.__dict__.update(extra)
    return record


def test_core_fields():
    entry = json.loads(JSONFormatter().format(_record()))
    assert entry["level"] == "WARNING"
    assert entry["component"] == "counterproductive.analysis.parser"
    assert entry["message"] == "Skipping malformed record: bad"
    assert "lineno" not in entry


def test_extra_fields_passed_through():
    entry = json.loads(JSONFormatter().format(_record(line_number=7, topic="t")))
    assert entry["line_number"] == 7
    assert entry["topic"] == "t"


def test_extra_cannot_override_core_fields():
    entry = json.loads(JSONFormatter().format(_record(level="spoofed")))
    assert entry["level"] == "WARNING"


def test_configure_logging_is_idempotent():
    logger = configure_logging("debug")
    configure_logging("debug")
    handlers = [h for h in logger.handlers if isinstance(h.formatter, JSONFormatter)]
    assert len(handlers) == 1
    assert logger.level == logging.DEBUG
    configure_logging("warning")
