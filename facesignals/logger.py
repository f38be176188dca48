"""
facesignals Logger
"""

import logging
import sys

from .config import LOG_LEVEL

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)-25s | %(message)s"


def setup_logging(level: str = LOG_LEVEL):
    """Configure logging for all facesignals.* loggers"""
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    logger = logging.getLogger("facesignals")
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Calling twice must not duplicate output
    for existing in list(logger.handlers):
        if getattr(existing, "_facesignals_handler", False):
            logger.removeHandler(existing)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    handler._facesignals_handler = True
    logger.addHandler(handler)

    return logger
