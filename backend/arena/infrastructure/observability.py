"""Structured Logging — JSON formatter and setup for the entries service.

Invariants:
    - Every record carries timestamp, level, logger name and message
    - Lifecycle identifiers (entry_id, round_id, sticker_id, usage_id, ...) are
      emitted only when the caller passed them via `extra=`
    - Chatty third-party loggers stay at WARNING whatever the app level

Design Decisions:
    - stdlib logging with a small JSON formatter; setup_logging is called once
      from the FastAPI lifespan
"""

import json
import logging
from datetime import datetime, timezone

_EXTRA_KEYS = (
    "entry_id", "round_id", "sticker_id", "user_id", "usage_id",
    "error_code", "attempt", "updated", "path",
)

_QUIET_LOGGERS = ("apscheduler", "sqlalchemy.engine", "uvicorn.access")


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(
            (key, record.__dict__[key])
            for key in _EXTRA_KEYS
            if record.__dict__.get(key) is not None
        )
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO", fmt: str = "json") -> None:
    handler = logging.StreamHandler()
    handler.setFormatter(
        JSONFormatter() if fmt == "json"
        else logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"),
    )
    logging.root.handlers = [handler]
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
