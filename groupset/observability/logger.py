"""Logging configuration for the groupset command line.

Library modules only call ``logging.getLogger(__name__)``; handlers are
attached here, under the ``groupset`` logger, by the CLI.
"""

from __future__ import annotations

import logging
import os
import sys

from pythonjsonlogger.json import JsonFormatter

ROOT_LOGGER = "groupset"
LEVEL_ENV_VAR = "GROUPSET_LOG_LEVEL"
DEFAULT_LEVEL = "WARNING"

LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

FORMAT_TYPES = ("text", "json")


class GroupsetJsonFormatter(JsonFormatter):
    """JSON formatter that adds timestamp, level and logger fields."""

    def add_fields(
        self, log_record: dict, record: logging.LogRecord, message_dict: dict
    ) -> None:
        super().add_fields(log_record, record, message_dict)
        if not log_record.get("timestamp"):
            log_record["timestamp"] = self.formatTime(record, self.datefmt)
        log_record["level"] = record.levelname
        log_record["logger"] = record.name


def setup_logger(
    level: str | None = None,
    format_type: str = "text",
    stream=None,
) -> logging.Logger:
    """Attach a single handler to the ``groupset`` logger.

    *level* falls back to $GROUPSET_LOG_LEVEL, then WARNING. Output goes to
    stderr unless *stream* is given, so it never mixes with command output.
    """
    if format_type not in FORMAT_TYPES:
        raise ValueError(f"Unknown log format: {format_type!r}")
    level_name = (level or os.getenv(LEVEL_ENV_VAR, DEFAULT_LEVEL)).upper()
    log_level = LOG_LEVELS.get(level_name, logging.WARNING)

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(log_level)
    logger.handlers.clear()

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(log_level)
    if format_type == "json":
        formatter: logging.Formatter = GroupsetJsonFormatter(
            fmt="%(timestamp)s %(level)s %(logger)s %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
        )
    else:
        formatter = logging.Formatter(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    logger.propagate = False
    return logger
