"""Logging configuration."""

import logging
import sys

from pydantic import BaseModel, Field

from colleague.config import Settings, get_settings

# Per-request and per-chunk chatter from clients and the server
QUIET_LOGGERS = ["anthropic", "httpx", "httpcore", "uvicorn.access"]


class LogConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"
    quiet_loggers: list[str] = Field(default_factory=lambda: list(QUIET_LOGGERS))

    @classmethod
    def from_settings(cls, settings: Settings) -> "LogConfig":
        return cls(level=settings.log_level)


def setup_logging(config: LogConfig | None = None) -> None:
    """Set up logging configuration for the application."""
    if config is None:
        config = LogConfig.from_settings(get_settings())

    logging.basicConfig(
        level=getattr(logging, config.level.upper(), logging.INFO),
        format=config.format,
        datefmt=config.date_format,
        stream=sys.stdout,
        force=True,  # Override any existing configuration
    )

    for name in config.quiet_loggers:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str, level: str | None = None) -> logging.Logger:
    """Get a logger for a specific module.

    Args:
        name: Module name (typically __name__)
        level: Explicit level, otherwise the configured LOG_LEVEL

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel((level or get_settings().log_level).upper())
    return logger
