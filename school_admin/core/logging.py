"""
Logging configuration.

Console output by default; JSON lines when LOG_JSON is set, for log shippers.
Modules log through ``logging.getLogger(__name__)`` and never configure handlers themselves.
"""

import json
import logging
import logging.config
from datetime import datetime
from typing import Any, Dict

_RESERVED_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__.keys()
) | {"message", "asctime"}


class JSONFormatter(logging.Formatter):
    """One JSON object per record, including any ``extra=`` fields."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        extra = {k: v for k, v in record.__dict__.items() if k not in _RESERVED_ATTRS}
        if extra:
            entry["extra"] = extra
        return json.dumps(entry, ensure_ascii=False, default=str)


def build_logging_config(level: str = "INFO", json_logs: bool = False) -> Dict[str, Any]:
    formatter = "json" if json_logs else "console"
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "console": {
                "format": "%(asctime)s %(levelname)-8s %(name)s: %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "json": {"()": JSONFormatter},
        },
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "formatter": formatter,
                "stream": "ext://sys.stderr",
            },
        },
        "loggers": {
            "school_admin": {"handlers": ["default"], "level": level.upper(), "propagate": False},
            # SQL echo is controlled separately; keep the engine quiet unless asked.
            "sqlalchemy.engine": {"handlers": ["default"], "level": "WARNING", "propagate": False},
        },
    }


def setup_logging(level: str = "INFO", json_logs: bool = False) -> None:
    logging.config.dictConfig(build_logging_config(level, json_logs))
