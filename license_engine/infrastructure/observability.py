"""Structured Logging: JSON formatter and logger setup for engine decisions.

Invariants:
    - Every line carries timestamp, level, logger name and message
    - Decision fields (category, verdict_code, missing_prerequisites, entry_id, ...)
      appear only when the log call supplied them
    - Enum values and category collections serialize as plain codes
    - configure_logging is idempotent: it replaces the handler it installed
      before instead of stacking a second one

Design Decisions:
    - Handler goes on the "license_engine" logger, not root: the engine is
      embedded in a host application that owns root logging
    - get_engine() configures logging from Settings before building the engine
"""

import json
import logging
from collections.abc import Iterable
from datetime import datetime, timezone
from enum import Enum


ENGINE_LOGGER = "license_engine"

DECISION_KEYS = (
    "category", "categories", "application_type", "verdict_code",
    "missing_prerequisites", "overlapping_authorizations", "entry_id",
    "error_code", "catalog_source",
)

TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _plain(value):
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (list, tuple, set, frozenset)):
        items = [_plain(v) for v in value]
        return items if isinstance(value, (list, tuple)) else sorted(items)
    return value


class JSONFormatter(logging.Formatter):
    """One JSON object per record, decision fields included when present."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in DECISION_KEYS:
            val = record.__dict__.get(key)
            if val is not None:
                log[key] = _plain(val)
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False)


def setup_logging(
    level: str = "INFO", fmt: str = "json", logger_name: str = ENGINE_LOGGER,
) -> logging.Handler:
    """Install (or replace) the engine's stream handler and return it."""
    target = logging.getLogger(logger_name)
    for previous in _installed_handlers(target.handlers):
        target.removeHandler(previous)

    handler = logging.StreamHandler()
    handler.setFormatter(JSONFormatter() if fmt == "json" else logging.Formatter(TEXT_FORMAT))
    handler._license_engine = True
    target.addHandler(handler)
    target.setLevel(getattr(logging, level.upper(), logging.INFO))
    return handler


def _installed_handlers(handlers: Iterable[logging.Handler]) -> list[logging.Handler]:
    return [h for h in handlers if getattr(h, "_license_engine", False)]
