"""Centralized logging configuration for the conversion pipeline."""

import os
import sys
import logging
from typing import Dict, Optional

DEFAULT_LOGGER = "conversion-pipeline"

# Record layouts selectable through LOG_FORMAT or PipelineSettings.log_format
FORMATS: Dict[str, str] = {
    "structured": (
        "%(asctime)s | %(name)s | %(levelname)-8s | "
        "%(filename)s:%(lineno)d | %(funcName)s() | %(message)s"
    ),
    "simple": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
}


def resolve_format(format_type: Optional[str] = None) -> str:
    """
    Pick the record layout name.

    An explicit ``format_type`` wins over LOG_FORMAT; unknown names fall
    back to "structured".
    """
    chosen = (format_type or os.getenv("LOG_FORMAT") or "structured").lower()
    return chosen if chosen in FORMATS else "structured"


def _build_formatter(format_type: str) -> logging.Formatter:
    if format_type == "structured":
        return logging.Formatter(FORMATS[format_type], datefmt="%Y-%m-%d %H:%M:%S")
    return logging.Formatter(FORMATS[format_type])


def setup_logger(
    name: str = DEFAULT_LOGGER,
    level: Optional[str] = None,
    format_type: Optional[str] = None,
) -> logging.Logger:
    """
    Configure a pipeline logger writing to stdout.

    Calling it again for the same name keeps the single handler; an explicit
    ``format_type`` replaces that handler's formatter.

    Args:
        name: Logger name
        level: Log level override (defaults to LOG_LEVEL or INFO)
        format_type: "structured" or "simple" (defaults to LOG_FORMAT or structured)

    Returns:
        Configured logger instance

    Environment Variables:
        LOG_LEVEL: Set logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        LOG_FORMAT: Set format type ("structured" or "simple")
    """
    logger = logging.getLogger(name)

    level_name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    logger.setLevel(getattr(logging, level_name, logging.INFO))

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(_build_formatter(resolve_format(format_type)))
        logger.addHandler(handler)
    elif format_type is not None:
        for handler in logger.handlers:
            handler.setFormatter(_build_formatter(resolve_format(format_type)))

    logger.propagate = False
    return logger


def get_logger(name: str = DEFAULT_LOGGER) -> logging.Logger:
    """
    Get a logger instance with consistent configuration.

    Args:
        name: Logger name

    Returns:
        Configured logger instance
    """
    return setup_logger(name)


logger = setup_logger()
