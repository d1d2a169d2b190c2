"""Core logging utilities shared by the e2e runner and the metrics exposer.

The exposer runs inside a pod where its stdout is collected by the node
logging agent, so a JSON formatter is available alongside the plain one.
"""

from __future__ import annotations

import json
import logging
import logging.handlers
import sys
from datetime import datetime
from enum import Enum
from pathlib import Path

from .config import LoggingConfig
from .config import get_logging_config

_RESERVED_RECORD_KEYS = frozenset(
    {
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
        "exc_info",
        "exc_text",
        "stack_info",
        "message",
        "asctime",
    }
)


class LogLevel(str, Enum):
    """Standard log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Available log formats."""

    STANDARD = "standard"
    DETAILED = "detailed"
    JSON = "json"
    CONSOLE = "console"


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "severity": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        # Anything passed through ``extra=`` ends up as a record attribute.
        for key, value in record.__dict__.items():
            if key not in _RESERVED_RECORD_KEYS:
                log_entry[key] = value

        return json.dumps(log_entry, default=str)


def _get_formatter(format_type: LogFormat) -> logging.Formatter:
    formatters = {
        LogFormat.STANDARD: logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        ),
        LogFormat.DETAILED: logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - "
            "%(module)s:%(funcName)s:%(lineno)d - %(message)s"
        ),
        LogFormat.JSON: JSONFormatter(),
        LogFormat.CONSOLE: logging.Formatter("%(levelname)-8s | %(name)-32s | %(message)s"),
    }
    return formatters[format_type]


def setup_logging(
    level: str | LogLevel | None = None,
    format_type: LogFormat | None = None,
    log_file: Path | None = None,
    console: bool | None = None,
    json_output: bool | None = None,
    config: LoggingConfig | None = None,
) -> None:
    """Set up the root logger.

    Explicit arguments win over the values of ``config``; ``config`` itself
    defaults to :func:`get_logging_config`.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_type: Format used for the file handler
        log_file: Optional log file path
        console: Whether to log to stdout
        json_output: Whether to use JSON formatting everywhere
        config: Optional logging configuration object
    """
    if config is None:
        config = get_logging_config()

    level = LogLevel((level or config.level).upper())
    format_type = format_type or LogFormat(config.format_type)
    json_output = config.json_format if json_output is None else json_output
    console = config.console_enabled if console is None else console
    if json_output:
        format_type = LogFormat.JSON

    root_logger = logging.getLogger()

    # Clear existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    numeric_level = getattr(logging, level.value)
    root_logger.setLevel(numeric_level)

    if console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(
            _get_formatter(LogFormat.JSON if json_output else LogFormat.CONSOLE)
        )
        console_handler.setLevel(numeric_level)
        root_logger.addHandler(console_handler)

    file_path = log_file or config.log_file
    if file_path:
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            file_path,
            maxBytes=config.max_file_size,
            backupCount=config.backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(_get_formatter(format_type))
        file_handler.setLevel(numeric_level)
        root_logger.addHandler(file_handler)

    configure_third_party_loggers(LogLevel(config.third_party_level.upper()))


def configure_third_party_loggers(level: LogLevel = LogLevel.WARNING) -> None:
    """Configure log levels for third-party libraries."""
    for logger_name in ("urllib3", "requests", "kubernetes", "google", "grpc"):
        logging.getLogger(logger_name).setLevel(getattr(logging, level.value))


def get_logger(name: str | None = None, level: str | LogLevel | None = None) -> logging.Logger:
    """Get a logger, optionally overriding its level.

    Args:
        name: Logger name, usually ``__name__``
        level: Optional override for logger level

    Returns:
        Logger instance
    """
    logger = logging.getLogger(name or "custom_metrics_e2e")

    if level:
        if isinstance(level, str):
            level = LogLevel(level.upper())
        logger.setLevel(getattr(logging, level.value))

    return logger
