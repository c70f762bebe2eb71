"""Utility modules for the blog application."""

from src.utils.logging import LogContext, get_logger, setup_logging

__all__ = [
    "LogContext",
    "get_logger",
    "setup_logging",
]
