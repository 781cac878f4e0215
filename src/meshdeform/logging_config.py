"""
Logging configuration for the ``meshdeform`` logger namespace.

Example::

    from meshdeform.logging_config import setup_logging

    logger = setup_logging(logging.DEBUG, log_file="meshdeform.log")
    logger.info("Body initialized.")
"""

import logging
import logging.handlers
import sys
from typing import Optional

LOGGER_NAME = "meshdeform"


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[str] = None,
    quiet: bool = False,
) -> logging.Logger:
    """
    Configure the package logger.

    Args:
        level: Console logging level.
        log_file: Optional path; when given, everything down to DEBUG is also
            written to a rotating file.
        quiet: Drop the console handler (file logging still applies).

    Returns:
        The configured ``meshdeform`` logger.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)

    # Avoid duplicate output when the demo is restarted in the same process
    if logger.hasHandlers():
        logger.handlers.clear()

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )

    if not quiet:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.handlers.RotatingFileHandler(
            log_file, maxBytes=5_000_000, backupCount=0, encoding="utf-8"
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    if not logger.handlers:
        logger.addHandler(logging.NullHandler())

    logger.debug("Logging initialized.")
    return logger
