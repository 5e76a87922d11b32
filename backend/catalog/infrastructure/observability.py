"""Structured Logging — JSON formatter and setup for the catalog service.

Invariants:
    - Every record carries timestamp, level, logger name, and message
    - Catalog extras (cache_key, query_name, status_code, ...) appear only when set
    - setup_logging() is idempotent: re-running the lifespan never duplicates output

Design Decisions:
    - stdlib logging + a small JSONFormatter: every module just calls
      logging.getLogger(__name__) and passes extra={...}
    - httpx request lines are held at WARNING; the gateway client logs its own
      per-query summary with the sub-query name attached
"""

import json
import logging
from datetime import datetime, timezone

CATALOG_EXTRAS = (
    "cache_key", "query_name", "error_code", "status_code",
    "attempt", "item_count", "operation", "path",
)
_NOISY_LOGGERS = ("httpx", "httpcore")
_HANDLER_NAME = "catalog"


class JSONFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(
            (key, getattr(record, key)) for key in CATALOG_EXTRAS
            if getattr(record, key, None) is not None
        )
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO", fmt: str = "json") -> None:
    """Install the catalog handler on the root logger (replacing a previous one)."""
    root = logging.getLogger()
    for handler in [h for h in root.handlers if h.get_name() == _HANDLER_NAME]:
        root.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.set_name(_HANDLER_NAME)
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s — %(message)s",
        ))
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
