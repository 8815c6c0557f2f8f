# logging_config.py
#
# Description: JSON logging for WanderBot. `setup_logging` installs a
#              single stdout handler for the Streamlit page; `configure_logging`
#              applies the dictConfig used by the terminal client.

from __future__ import annotations

import json
import logging
import logging.config
import sys
from typing import Any, Dict

APP_LOGGERS = ("core", "llm_client", "session", "store", "travel_logs", "chat", "app")


class JSONFormatter(logging.Formatter):
    """
    Custom log formatter that emits events as single-line JSON.
    Includes timestamp, log level, logger name, message, and exception info.
    """
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        # Add any extra fields passed to the logger.
        if hasattr(record, 'extra'):
            payload.update(record.extra) # type: ignore
        return json.dumps(payload, default=str)


def setup_logging(level: str = "INFO", name: str = "app") -> logging.Logger:
    """
    Gives every application logger (and `name`) one stdout handler with a
    JSON formatter, then returns the logger for `name`.
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    for logger_name in dict.fromkeys((*APP_LOGGERS, name)):
        logger = logging.getLogger(logger_name)
        # Prevent duplicate handlers if called multiple times
        if logger.handlers:
            logger.handlers.clear()
        logger.addHandler(handler)
        logger.setLevel(numeric_level)
        logger.propagate = False

    return logging.getLogger(name)


def build_logging_config(level: str = "INFO") -> Dict[str, Any]:
    """Return the dictConfig used by the terminal client."""
    level = level.upper()
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {
                "()": "pythonjsonlogger.jsonlogger.JsonFormatter",
                "format": "%(asctime)s %(levelname)s %(name)s %(message)s",
            }
        },
        "handlers": {
            "stderr": {
                "class": "logging.StreamHandler",
                "stream": "ext://sys.stderr",
                "formatter": "json",
            }
        },
        "loggers": {
            name: {"handlers": ["stderr"], "level": level, "propagate": False}
            for name in APP_LOGGERS
        },
    }


def configure_logging(level: str = "INFO") -> None:
    """Apply the terminal client's logging configuration."""
    logging.config.dictConfig(build_logging_config(level))
