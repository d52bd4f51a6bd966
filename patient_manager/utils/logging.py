"""Logging configuration for the patient manager.

Module loggers come from :func:`get_logger` and carry no level of their own,
so :func:`setup_logging` controls every ``patient_manager.*`` logger through
the package logger.
"""

import logging
import sys
from typing import Literal

from pydantic import BaseModel, field_validator

PACKAGE_LOGGER = "patient_manager"

# HTTP stack loggers that log every request at INFO
HTTP_LOGGERS = ("httpx", "httpcore", "uvicorn.access")


class LogConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"
    stream: Literal["stdout", "stderr"] = "stdout"
    quiet_loggers: tuple[str, ...] = HTTP_LOGGERS

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Normalise the level name and reject unknown ones."""
        name = v.strip().upper()
        if not isinstance(logging.getLevelName(name), int):
            raise ValueError(f"Unknown log level: {v}")
        return name


def setup_logging(config: LogConfig | None = None) -> None:
    """Set up logging for the application.

    Applies ``config.level`` to the root and package loggers. The HTTP stack
    loggers stay at WARNING unless a stricter level was asked for.
    """
    if config is None:
        config = LogConfig()

    level = logging.getLevelName(config.level)
    logging.basicConfig(
        level=level,
        format=config.format,
        datefmt=config.date_format,
        stream=sys.stderr if config.stream == "stderr" else sys.stdout,
        force=True,
    )
    logging.getLogger(PACKAGE_LOGGER).setLevel(level)

    for name in config.quiet_loggers:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def get_logger(name: str, level: str | None = None) -> logging.Logger:
    """Get a logger for a specific module.

    Args:
        name: Module name (typically __name__)
        level: Optional level pinned on this logger only; without it the
            logger follows whatever :func:`setup_logging` configured

    Returns:
        Logger instance
    """
    logger = logging.getLogger(name)
    if level:
        logger.setLevel(level.upper())
    return logger
