"""
Logging setup for teamgraph.

Console output is a single readable line per record (level colored on a TTY);
an optional log file receives one JSON object per record, including any fields
passed through log_with_context(). The level comes from the caller, else the
LOG_LEVEL environment variable, else INFO.

Usage:
    from teamgraph.core.logging_config import get_logger, log_with_context

    logger = get_logger(__name__)
    log_with_context(logger, "info", "Dependency graph built", pi="Q32025", nodes=12)
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

CONSOLE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
CONSOLE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Libraries that log every request at INFO
NOISY_LOGGERS = ("httpx", "httpcore")


class JSONFormatter(logging.Formatter):
    """One JSON object per record; context fields are merged at the top level."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        if hasattr(record, "extra_fields"):
            entry.update(record.extra_fields)

        # Sets, enums and similar values are written as their str()
        return json.dumps(entry, default=str)


class ContextFormatter(logging.Formatter):
    """Console formatter; colors the level name when stderr is a terminal."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        if not sys.stderr.isatty():
            return super().format(record)

        # Color a copy so other handlers still see the plain level name
        colored = logging.makeLogRecord(record.__dict__)
        colored.levelname = f"{self.COLORS.get(record.levelname, '')}{record.levelname}{self.RESET}"
        return super().format(colored)


def setup_logging(
    level: str | None = None,
    log_file: Path | None = None,
    json_output: bool = False,
) -> None:
    """
    Replace the root logger's handlers with teamgraph's console (and file) handlers.

    Args:
        level: Level name such as "DEBUG"; unknown names fall back to INFO
        log_file: Also write JSON records to this file (parent dirs are created)
        json_output: Write JSON to the console instead of readable lines

    Example:
        setup_logging(level="DEBUG", log_file=Path(".tmp/logs/teamgraph.log"))
    """
    level = level or os.getenv("LOG_LEVEL", "INFO")
    log_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(log_level)
    if json_output:
        console_handler.setFormatter(JSONFormatter())
    else:
        console_handler.setFormatter(ContextFormatter(fmt=CONSOLE_FORMAT, datefmt=CONSOLE_DATE_FORMAT))
    root_logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(log_level)
        file_handler.setFormatter(JSONFormatter())
        root_logger.addHandler(file_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def log_with_context(logger: logging.Logger, level: str, message: str, **context: Any) -> None:
    """
    Log a message with structured fields.

    The fields travel as record.extra_fields; JSONFormatter writes them as
    top-level keys, the console formatter ignores them.

    Example:
        log_with_context(logger, "debug", "Dependencies fetched", pi="Q32025", outbound=14, inbound=9)
    """
    getattr(logger, level.lower())(message, extra={"extra_fields": context})
