"""
Configure logging for agentsync.

All modules log under the ``agentsync`` namespace through
``logging.getLogger(__name__)``; this installs one console handler on that
namespace. Library users who configure logging themselves need not call it.
"""

import logging
import os
import sys

LOGGER_NAME = "agentsync"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str | None = None) -> logging.Logger:
    """
    Configure the agentsync logger with a stdout handler.

    Args:
        level: Log level name; defaults to AGENTSYNC_LOG_LEVEL or INFO

    Returns:
        logging.Logger: The configured logger instance
    """
    level_name = (level or os.getenv("AGENTSYNC_LOG_LEVEL", "INFO")).upper()
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, level_name, logging.INFO))

    # Remove existing handlers if any
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(console_handler)

    # Prevent log propagation to root logger
    logger.propagate = False
    return logger
