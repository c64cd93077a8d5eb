"""Structured Logging — tests for the JSON formatter and setup.

Tests cover:
    - Base fields always present
    - Lifecycle extras surfaced only when set
    - setup_logging installs the requested formatter and level
"""

import json
import logging
from datetime import datetime, timezone

from arena.infrastructure.observability import JSONFormatter, setup_logging


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        "arena.services.sticker_allocator", logging.INFO, __file__, 1,
        "Sticker applied", None, None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_base_fields():
    data = json.loads(JSONFormatter().format(_record()))
    assert data["level"] == "INFO"
    assert data["logger"] == "arena.services.sticker_allocator"
    assert data["message"] == "Sticker applied"
    assert "timestamp" in data
    assert "sticker_id" not in data


def test_extras_surfaced():
    data = json.loads(JSONFormatter().format(_record(sticker_id="s1", attempt=2)))
    assert data["sticker_id"] == "s1"
    assert data["attempt"] == 2


def test_setup_logging_json():
    previous = logging.root.handlers[:]
    try:
        setup_logging("debug", "json")
        assert logging.root.level == logging.DEBUG
        assert isinstance(logging.root.handlers[0].formatter, JSONFormatter)
    finally:
        logging.root.handlers = previous
        logging.root.setLevel(logging.WARNING)


def test_setup_logging_text():
    previous = logging.root.handlers[:]
    try:
        setup_logging("INFO", "text")
        assert not isinstance(logging.root.handlers[0].formatter, JSONFormatter)
    finally:
        logging.root.handlers = previous
        logging.root.setLevel(logging.WARNING)


def test_setup_logging_quiets_third_party_loggers():
    previous = logging.root.handlers[:]
    try:
        setup_logging("DEBUG", "json")
        assert logging.getLogger("apscheduler").level == logging.WARNING
        assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING
    finally:
        logging.root.handlers = previous
        logging.root.setLevel(logging.WARNING)
        for name in ("apscheduler", "sqlalchemy.engine", "uvicorn.access"):
            logging.getLogger(name).setLevel(logging.NOTSET)


def test_timestamp_taken_from_record():
    record = _record()
    data = json.loads(JSONFormatter().format(record))
    expected = datetime.fromtimestamp(record.created, timezone.utc)
    assert datetime.fromisoformat(data["timestamp"]) == expected
