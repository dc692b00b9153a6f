import logging
import sys
import json
from datetime import datetime

from app.core.config import settings

# Loggers that receive the service handler: the service logger itself and
# the package namespace the module-level loggers hang from.
SERVICE_LOGGERS = (settings.PROJECT_NAME, "app")


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.utcnow().isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if hasattr(record, "extra_fields"):
            log_data.update(record.extra_fields)

        return json.dumps(log_data, default=str)


def _build_formatter() -> logging.Formatter:
    if settings.LOG_FORMAT == "json":
        return JSONFormatter()
    return logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def setup_logging() -> logging.Logger:
    level = getattr(logging, settings.LOG_LEVEL.upper())

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(_build_formatter())

    for name in SERVICE_LOGGERS:
        configured = logging.getLogger(name)
        configured.setLevel(level)
        configured.handlers.clear()
        configured.addHandler(handler)
        configured.propagate = False

    return logging.getLogger(settings.PROJECT_NAME)
