"""Logging configuration.

Modules log through ``logging.getLogger(__name__)``; this only installs handlers
and formatters once at application start-up.
"""

from __future__ import annotations

import logging
import logging.config
from typing import Any, Dict

from pythonjsonlogger.json import JsonFormatter


class WorkflowJsonFormatter(JsonFormatter):
    """JSON formatter that always carries level and logger name."""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["level"] = record.levelname
        log_record["logger"] = record.name


def build_logging_config(level: str = "INFO", *, json_format: bool = False) -> dict:
    formatter = "json" if json_format else "standard"
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            },
            "json": {
                "()": WorkflowJsonFormatter,
                "format": "%(asctime)s %(levelname)s %(name)s %(message)s",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": formatter,
            },
        },
        "loggers": {
            "werkzeug": {"level": "WARNING"},
            "mysql.connector": {"level": "WARNING"},
        },
        "root": {"level": level.upper(), "handlers": ["console"]},
    }


def configure_logging(level: str = "INFO", *, json_format: bool = False) -> None:
    logging.config.dictConfig(build_logging_config(level, json_format=json_format))
