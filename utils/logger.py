"""
utils/logger.py
---------------
Logging setup shared by the API process and the schema script.
Modules call `get_logger(__name__)`; the root logger is configured on first use.
"""

import logging
import sys

from config import LOG_LEVEL

_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# The request middleware writes its own access line.
_QUIET_LOGGERS = ("uvicorn.access",)

_configured = False


def configure_logging(level: str = LOG_LEVEL) -> None:
    """
    Send every record to stdout in one format.

    Args:
        level: Root level name such as "INFO" or "DEBUG".
    """
    global _configured
    if _configured:
        return
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(_LOG_FORMAT, _DATE_FORMAT))
    root = logging.getLogger()
    root.setLevel(level)
    root.addHandler(handler)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    _configured = True


def get_logger(name: str) -> logging.Logger:
    """Return the logger for `name`, configuring logging if needed."""
    configure_logging()
    return logging.getLogger(name)
