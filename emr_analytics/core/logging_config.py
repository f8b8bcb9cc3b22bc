"""
Logging configuration for command-line and embedded use.

The package logger gets two handlers: stderr for the operator and a rotating
file under config.logs_dir that always records at config.log_level. Stdout is
left alone so CLI output can be piped.
"""

import logging
import logging.handlers
import sys
from typing import Optional, Union

from .config import config

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUPS = 5

_CONSOLE_HANDLER = "emr_analytics.console"
_FILE_HANDLER = "emr_analytics.file"


def _find_handler(logger: logging.Logger, name: str) -> Optional[logging.Handler]:
    for handler in logger.handlers:
        if handler.get_name() == name:
            return handler
    return None


def setup_logging(
    logger_name: str = "emr_analytics",
    console_level: Optional[Union[int, str]] = None,
) -> logging.Logger:
    """
    Configure and return the package logger.

    Args:
        logger_name: Logger to configure (the package root by default, so
            every module logger created with getLogger(__name__) inherits it)
        console_level: Threshold for the stderr handler; defaults to
            config.log_level. The CLI raises it to WARNING for quiet runs.

    Returns:
        Configured logger. Calling again reuses the existing handlers and
        only updates the console threshold.
    """
    logger = logging.getLogger(logger_name)
    logger.setLevel(config.log_level)
    level = console_level if console_level is not None else config.log_level

    console_handler = _find_handler(logger, _CONSOLE_HANDLER)
    if console_handler is not None:
        console_handler.setLevel(level)
        return logger

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.set_name(_CONSOLE_HANDLER)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    file_handler = logging.handlers.RotatingFileHandler(
        config.logs_dir / f"{logger_name}.log",
        maxBytes=LOG_FILE_MAX_BYTES,
        backupCount=LOG_FILE_BACKUPS,
        encoding="utf-8",
    )
    file_handler.set_name(_FILE_HANDLER)
    file_handler.setLevel(config.log_level)
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    return logger
