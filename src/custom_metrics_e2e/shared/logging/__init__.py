"""Standardized logging utilities for custom-metrics-e2e.

Every module obtains its logger through :func:`get_logger`; entry points call
:func:`setup_logging` once.
"""

from .config import LoggingConfig
from .config import get_logging_config
from .config import reset_logging_config
from .config import update_logging_config
from .logger import JSONFormatter
from .logger import LogFormat
from .logger import LogLevel
from .logger import get_logger
from .logger import setup_logging

__all__ = [
    "JSONFormatter",
    "LogFormat",
    "LogLevel",
    "LoggingConfig",
    "get_logger",
    "get_logging_config",
    "reset_logging_config",
    "setup_logging",
    "update_logging_config",
]
