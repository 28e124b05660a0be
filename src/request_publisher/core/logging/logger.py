"""
Setup of the package logger.

Library modules log through ``logging.getLogger(__name__)``; everything ends
up under the ``request_publisher`` logger, which only has a NullHandler until
configure_logging() is called.
"""

import logging
from typing import List, Optional

from .config import LoggingConfig
from .formatters import get_formatter
from .handlers import ExtraFieldsFilter, create_console_handler, create_file_handler

PACKAGE_LOGGER = "request_publisher"

# Handlers installed by configure_logging(), removed on reconfiguration
_installed_handlers: List[logging.Handler] = []


def configure_logging(config: Optional[LoggingConfig] = None) -> logging.Logger:
    """
    Install handlers on the package logger.

    Calling it again replaces the previous configuration.

    Args:
        config: Logging configuration (defaults if None)

    Returns:
        The ``request_publisher`` logger

    Example:
        >>> configure_logging(LoggingConfig.create(level="DEBUG", format="json"))
    """
    config = config or LoggingConfig()
    logger = logging.getLogger(PACKAGE_LOGGER)
    reset_logging()

    level = getattr(logging, config.level.value)
    formatter = get_formatter(config.format.value)
    filters: List[logging.Filter] = []
    if config.extra_fields:
        filters.append(ExtraFieldsFilter(config.extra_fields))

    if config.enable_console:
        _installed_handlers.append(create_console_handler(level, formatter, filters))

    if config.enable_file and config.file_path:
        _installed_handlers.append(create_file_handler(
            file_path=config.file_path,
            level=level,
            formatter=formatter,
            max_bytes=config.max_bytes,
            backup_count=config.backup_count,
            filters=filters,
        ))

    for handler in _installed_handlers:
        logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False

    return logger


def reset_logging() -> None:
    """
    Remove handlers installed by configure_logging(). Idempotent.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)

    while _installed_handlers:
        handler = _installed_handlers.pop()
        logger.removeHandler(handler)
        try:
            handler.flush()
            handler.close()
        except (OSError, ValueError) as e:
            logger.debug("Error closing log handler: %s", e)

    logger.setLevel(logging.NOTSET)
    logger.propagate = True
