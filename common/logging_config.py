# -*- coding: utf-8 -*-
"""
Centralized logging configuration for the OpenClaw provisioner.

Console output is human-readable with a configurable prefix and, on a
terminal, coloured level names. An optional file handler writes one JSON
object per record so that runs resumed from cron after a reboot leave a
machine-readable trail.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, TextIO, Union

LEVEL_COLOURS = {
    "DEBUG": "\033[0;36m",
    "INFO": "\033[0;32m",
    "WARNING": "\033[1;33m",
    "ERROR": "\033[0;31m",
    "CRITICAL": "\033[0;31m",
}
RESET_COLOUR = "\033[0m"

# LogRecord attributes that are not user-supplied "extra" fields.
_RESERVED_RECORD_KEYS = frozenset(
    [
        "name", "msg", "args", "levelname", "levelno", "pathname",
        "filename", "module", "lineno", "funcName", "created", "msecs",
        "relativeCreated", "thread", "threadName", "processName",
        "process", "exc_info", "exc_text", "stack_info", "taskName",
        "message", "asctime",
    ]
)


class ColourFormatter(logging.Formatter):
    """Formatter that wraps the level name in ANSI colours."""

    def __init__(self, fmt: str, datefmt: Optional[str] = None, use_colour: bool = True):
        super().__init__(fmt, datefmt=datefmt)
        self.use_colour = use_colour

    def format(self, record: logging.LogRecord) -> str:
        if not self.use_colour:
            return super().format(record)
        original_levelname = record.levelname
        colour = LEVEL_COLOURS.get(original_levelname)
        if colour:
            record.levelname = f"{colour}{original_levelname}{RESET_COLOUR}"
        try:
            return super().format(record)
        finally:
            record.levelname = original_levelname


class JSONFormatter(logging.Formatter):
    """
    Formats log records as single-line JSON with timestamp, level, logger,
    message, source location, exception text and any extra fields.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        extra_fields = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RESERVED_RECORD_KEYS
        }
        if extra_fields:
            log_entry["extra"] = extra_fields

        return json.dumps(log_entry, ensure_ascii=False, default=str)


def setup_logging(
    log_prefix: str,
    log_level: str = "INFO",
    log_file_path: Optional[Union[str, Path]] = None,
    stream: Optional[TextIO] = None,
) -> logging.Logger:
    """
    Configure the root logger for a provisioning run.

    Args:
        log_prefix: Text placed in front of every console line.
        log_level: Level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
            Unknown names fall back to INFO.
        log_file_path: When given, records are also appended to this file
            as JSON lines.
        stream: Console stream, defaults to stdout.

    Returns:
        The root logger.
    """
    numeric_level = getattr(logging, str(log_level).upper(), None)
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    console_stream = stream if stream is not None else sys.stdout
    use_colour = hasattr(console_stream, "isatty") and console_stream.isatty()

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(console_stream)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(
        ColourFormatter(
            f"{log_prefix} %(asctime)s - [%(levelname)s] - %(name)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
            use_colour=use_colour,
        )
    )
    root_logger.addHandler(console_handler)

    if log_file_path:
        file_handler = logging.FileHandler(str(log_file_path), encoding="utf-8")
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(JSONFormatter())
        root_logger.addHandler(file_handler)

    return root_logger
