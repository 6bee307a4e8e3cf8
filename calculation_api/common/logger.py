"""Shared logger for the calculation service."""
import logging
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger("calculation_api")


def configure_logging(level: str = "INFO") -> None:
    """
    Attach a stream handler to the package logger and set its level.

    Calling it more than once only updates the level.

    :param str level: Logging level name (e.g. "DEBUG", "INFO")
    """
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    logger.setLevel(level.upper())
