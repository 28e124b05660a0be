"""
Logging setup for request publishers.

Example:
    >>> from request_publisher.core.logging import configure_logging, LoggingConfig
    >>> configure_logging(LoggingConfig.create(level="DEBUG", format="json"))
"""

from .config import LoggingConfig, LogLevel, LogFormat
from .logger import configure_logging, reset_logging, PACKAGE_LOGGER
from .formatters import JSONFormatter, TextFormatter, get_formatter
from .handlers import ExtraFieldsFilter, create_console_handler, create_file_handler

__all__ = [
    # Config
    "LoggingConfig",
    "LogLevel",
    "LogFormat",
    # Setup
    "configure_logging",
    "reset_logging",
    "PACKAGE_LOGGER",
    # Formatters
    "JSONFormatter",
    "TextFormatter",
    "get_formatter",
    # Handlers
    "ExtraFieldsFilter",
    "create_console_handler",
    "create_file_handler",
]
