"""
Logging setup for LenconDB.

Development and tests log one coloured line per record to stderr.
Production logs one JSON object per line so the records can be shipped
as-is. ``LOG_LEVEL`` overrides the per-environment default level.
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone

# Attributes the timing middleware and services attach via ``extra=``
_CONTEXT_FIELDS = ("request_id", "method", "path", "status", "duration_ms", "user_id", "role")


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            "where": f"{record.module}:{record.lineno}",
        }
        entry.update(
            {k: getattr(record, k) for k in _CONTEXT_FIELDS if getattr(record, k, None) is not None}
        )
        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


class ConsoleFormatter(logging.Formatter):
    """Short coloured lines: ``12:04:31 INFO  lencondb.services.x: message [3ms] (rid)``."""

    LEVEL_COLORS = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelno, "")
        ts = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        line = f"{color}{ts} {record.levelname:<5}{self.RESET} {record.name}: {record.getMessage()}"

        duration = getattr(record, "duration_ms", None)
        if duration is not None:
            line += f" [{duration:.0f}ms]"
        request_id = getattr(record, "request_id", None)
        if request_id:
            line += f" ({request_id})"
        if record.exc_info and record.exc_info[0] is not None:
            line += "\n" + self.formatException(record.exc_info)
        return line


def configure_logging(app):
    """Attach a single stderr handler to the root logger.

    Default level: DEBUG in development, WARNING under tests, INFO in production.
    """
    testing = app.config.get("TESTING", False)
    production = not app.config.get("DEBUG", False) and not testing

    if production:
        default_level = "INFO"
    elif testing:
        default_level = "WARNING"
    else:
        default_level = "DEBUG"
    level_name = os.getenv("LOG_LEVEL", default_level).upper()
    level = getattr(logging, level_name, logging.INFO)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JSONFormatter() if production else ConsoleFormatter())
    handler.setLevel(level)

    # create_app may run several times per process (tests)
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    for name in ("werkzeug", "sqlalchemy.engine", "alembic", "flask_limiter"):
        logging.getLogger(name).setLevel(logging.WARNING)
    app.logger.setLevel(level)

    if not testing:
        app.logger.info("LenconDB logging: level=%s json=%s", level_name, production)
