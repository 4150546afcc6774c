"""
Logging setup for the vehicle search pipeline.

Every module logs through a child of the ``carsearch`` logger, e.g.
``carsearch.parsing.parameter_extractor``. The level comes from the
``LOG_LEVEL`` environment variable and can be changed at runtime with
``set_level``.
"""
import logging
import os
import sys

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger("carsearch")
logger.setLevel(LOG_LEVEL)

if not logger.handlers:
    _handler = logging.StreamHandler(sys.stdout)
    _handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    logger.addHandler(_handler)

# Avoid duplicate lines when the host app configures the root logger
logger.propagate = False


def get_logger(name: str = None) -> logging.Logger:
    """
    Get a logger instance.

    Args:
        name: Dotted module path relative to the package (e.g. "search.executor")

    Returns:
        The package logger, or the named child logger
    """
    if name:
        return logging.getLogger(f"carsearch.{name}")
    return logger


def set_level(level: str) -> None:
    """Change the level of the package logger."""
    logger.setLevel(level.upper())


def log_banner(log: logging.Logger, title: str) -> None:
    """Write a separator block around a section heading at INFO level."""
    log.info("=" * 60)
    log.info(title)
    log.info("=" * 60)
