"""
Logging configuration for the script filter.

Alfred reads the item JSON from stdout, so every handler here writes to stderr
(shown in Alfred's workflow debugger).
"""
import logging
import sys

ROOT_LOGGER = "searx_alfred"


def setup_logger(name: str = ROOT_LOGGER, debug: bool = False) -> logging.Logger:
    """
    Set up the package logger with a single stderr handler.

    Args:
        name: Name of the logger
        debug: Log at DEBUG instead of WARNING (alfred_debug)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG if debug else logging.WARNING)

    # Clear existing handlers to avoid duplicate logs
    if logger.hasHandlers():
        logger.handlers.clear()

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    logger.propagate = False

    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger under the package namespace; handlers live on the root package logger.
    """
    return logging.getLogger(name)
