"""Centralized logging configuration for the blog."""

import logging
import sys
from collections.abc import MutableMapping
from typing import Any, Literal

from src.config import get_settings

# Libraries that log far more than we want at DEBUG
_QUIET_LOGGERS = (
    "httpx",
    "httpcore",
    "uvicorn.access",
    "sqlalchemy.engine",
    "sentence_transformers",
    "aiosqlite",
)


def setup_logging(
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] | None = None
) -> None:
    """Configure logging for the application.

    Args:
        level: Override log level (default: INFO for production, DEBUG otherwise)
    """
    settings = get_settings()

    if level is None:
        level = "INFO" if settings.is_production else "DEBUG"

    logging.basicConfig(
        level=getattr(logging, level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the given name (typically ``__name__``)."""
    return logging.getLogger(name)


class LogContext(logging.LoggerAdapter):
    """Logger adapter that prefixes every message with ``[key=value]`` pairs.

    Example:
        log = LogContext(logger, provider="discord")
        log.info("Tokens received")  # "[provider=discord] Tokens received"
    """

    def __init__(self, logger: logging.Logger, **context: Any) -> None:
        super().__init__(logger, context)
        self.prefix = " ".join(f"[{k}={v}]" for k, v in context.items())

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> tuple[Any, MutableMapping[str, Any]]:
        return f"{self.prefix} {msg}", kwargs
