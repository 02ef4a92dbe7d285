"""Logging configuration utilities."""

import logging
import logging.handlers
import os
import sys
from typing import List, Optional

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    max_bytes: int = 10_485_760,
    backup_count: int = 5,
    format_string: Optional[str] = None,
    quiet_loggers: Optional[List[str]] = None,
) -> None:
    """Configure logging for the internet monitor.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Optional path of an append-only log file. The file is
            rotated once it grows past ``max_bytes``.
        max_bytes: Size in bytes at which the log file is rotated.
        backup_count: Number of rotated files to keep.
        format_string: Custom format string for log messages.
        quiet_loggers: List of logger names to set to WARNING level.
    """
    if format_string is None:
        format_string = DEFAULT_FORMAT

    # Convert string to logging level
    log_level = getattr(logging, level.upper(), logging.INFO)

    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    file_error = None
    if log_file:
        try:
            directory = os.path.dirname(log_file)
            if directory:
                os.makedirs(directory, exist_ok=True)
            handlers.append(
                logging.handlers.RotatingFileHandler(
                    log_file,
                    maxBytes=max_bytes,
                    backupCount=max(backup_count, 1),
                )
            )
        except OSError as e:
            file_error = e

    logging.basicConfig(
        level=log_level,
        format=format_string,
        handlers=handlers,
        force=True,
    )

    if file_error is not None:
        logging.getLogger(__name__).warning(
            f"Cannot write log file {log_file} ({file_error}), logging to console only"
        )

    # Quiet down verbose third-party loggers
    default_quiet = ["asyncio", "paho"]
    quiet_loggers = (quiet_loggers or []) + default_quiet

    for logger_name in quiet_loggers:
        logging.getLogger(logger_name).setLevel(logging.WARNING)

