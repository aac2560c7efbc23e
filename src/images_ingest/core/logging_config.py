"""Centralized logging configuration for the images ingest pipeline.

Every logger writes to stdout, which Lambda forwards to CloudWatch.
"""

import os
import sys
import logging
from typing import Optional

ROOT_LOGGER_NAME = "images-ingest"

LOG_FORMATS = {
    "structured": (
        "%(asctime)s | %(name)s | %(levelname)-8s | "
        "%(filename)s:%(lineno)d | %(funcName)s() | %(message)s"
    ),
    "simple": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    # CloudWatch stamps every line already.
    "lambda": "%(levelname)s | %(name)s | %(message)s",
}


def _resolve_level(level: Optional[str]) -> int:
    name = (level or os.getenv("LOG_LEVEL") or "INFO").upper()
    resolved = logging.getLevelName(name)
    return resolved if isinstance(resolved, int) else logging.INFO


def _build_formatter(format_type: str) -> logging.Formatter:
    fmt = LOG_FORMATS.get(format_type, LOG_FORMATS["simple"])
    return logging.Formatter(fmt, datefmt="%Y-%m-%d %H:%M:%S")


def setup_logger(
    name: str = ROOT_LOGGER_NAME,
    level: Optional[str] = None,
    format_type: str = "structured",
) -> logging.Logger:
    """
    Setup a pipeline logger with environment variable configuration.

    Args:
        name: Logger name (defaults to "images-ingest")
        level: Log level override (defaults to env var or INFO)
        format_type: "structured", "simple" or "lambda"

    Returns:
        Configured logger instance

    Environment Variables:
        LOG_LEVEL: Set logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        LOG_FORMAT: Overrides format_type
    """
    logger = logging.getLogger(name)
    logger.setLevel(_resolve_level(level))

    # One stdout handler per logger, however often it is set up.
    if not any(type(h) is logging.StreamHandler for h in logger.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(_build_formatter(os.getenv("LOG_FORMAT", format_type).lower()))
        logger.addHandler(handler)

    logger.propagate = False
    return logger


def get_logger(name: str = ROOT_LOGGER_NAME) -> logging.Logger:
    """Get a pipeline logger with the shared configuration."""
    return setup_logger(name)


def enable_debug_logging(root_name: str = ROOT_LOGGER_NAME) -> None:
    """Switch every pipeline logger created so far, and later ones, to DEBUG."""
    os.environ["LOG_LEVEL"] = "DEBUG"
    for name, existing in list(logging.Logger.manager.loggerDict.items()):
        if isinstance(existing, logging.Logger) and (
            name == root_name or name.startswith(root_name + ".")
        ):
            existing.setLevel(logging.DEBUG)

