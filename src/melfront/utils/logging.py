"""
Logging utilities.

Library modules only create loggers; handlers are attached by the
application (or by ``setup_logging`` in scripts and notebooks).
"""

import logging
from pathlib import Path
from typing import Optional

from rich.logging import RichHandler

DEFAULT_FORMAT = '%(asctime)s | %(levelname)-8s | %(name)s | %(message)s'


def setup_logging(
    log_file: Optional[str] = None,
    level: int = logging.INFO,
    format_string: Optional[str] = None,
    name: str = 'melfront',
    rich_console: bool = True,
    console_level: int = logging.WARNING,
) -> logging.Logger:
    """
    Set up logging for the melfront package.

    Args:
        log_file: Path to log file (if None, only console output)
        level: Logging level for the logger and the file handler
        format_string: Custom format string for the file handler
        name: Logger name (defaults to the package logger)
        rich_console: Render console records with rich instead of plain text
        console_level: Minimum level shown on the console

    Returns:
        Configured logger
    """
    if format_string is None:
        format_string = DEFAULT_FORMAT

    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Remove existing handlers to avoid duplicates
    for handler in list(logger.handlers):
        if not isinstance(handler, logging.NullHandler):
            logger.removeHandler(handler)

    formatter = logging.Formatter(format_string, datefmt='%Y-%m-%d %H:%M:%S')

    if rich_console:
        console_handler = RichHandler(show_path=False, rich_tracebacks=False)
    else:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
    console_handler.setLevel(console_level)
    logger.addHandler(console_handler)

    if log_file is not None:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path, mode='a', encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get a logger by name.

    Args:
        name: Logger name, usually ``__name__`` of the calling module

    Returns:
        Logger instance
    """
    return logging.getLogger(name)
