"""Structured logging configuration for imagepad."""

from __future__ import annotations

import logging
import sys
import warnings
from typing import TextIO

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)-30s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Third-party loggers that flood DEBUG output while decoding and encoding
_NOISY_LOGGERS = ("PIL", "httpx", "urllib3")


def setup_logging(level: str = "INFO", stream: TextIO | None = None) -> logging.Logger:
    """Configure structured logging for the application.

    Args:
        level: Log level string (DEBUG, INFO, WARNING, ERROR).
        stream: Destination for log records. Defaults to stdout.

    Returns:
        The root imagepad logger.
    """
    root_logger = logging.getLogger("imagepad")
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Repeated calls (tests, app reloads) must not stack handlers
    if not root_logger.handlers:
        handler = logging.StreamHandler(stream or sys.stdout)
        handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
        root_logger.addHandler(handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    warnings.filterwarnings("ignore", category=UserWarning, module="torch")
    warnings.filterwarnings("ignore", category=FutureWarning, module="transformers")

    return root_logger
