"""Logging setup shared by the server and the chat CLI."""

import logging
import os
import sys

from pydantic import BaseModel, Field


class LogConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"
    # Third-party loggers held at WARNING regardless of level
    quiet_loggers: list[str] = Field(default_factory=lambda: ["anthropic", "httpx", "httpcore", "uvicorn.access"])

    @classmethod
    def from_env(cls) -> "LogConfig":
        return cls(level=os.getenv("LOG_LEVEL", "INFO"))


def setup_logging(config: LogConfig | None = None) -> None:
    """Configure the root logger; call once at process start."""
    config = config or LogConfig.from_env()

    logging.basicConfig(
        level=getattr(logging, config.level.upper()),
        format=config.format,
        datefmt=config.date_format,
        stream=sys.stdout,
        force=True,
    )

    for name in config.quiet_loggers:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str, level: str | None = None) -> logging.Logger:
    """Get a module logger.

    Args:
        name: Module name (typically __name__)
        level: Explicit level; LOG_LEVEL applies when omitted

    Returns:
        Logger for the module
    """
    logger = logging.getLogger(name)
    logger.setLevel((level or os.getenv("LOG_LEVEL", "INFO")).upper())
    return logger
