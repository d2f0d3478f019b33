"""
Structured Logging Utilities

Provides utilities for structured logging with provider/query context
throughout the aggregation services.
"""

from __future__ import annotations

import logging
from typing import Any

# Configure structured logging format
STRUCTURED_FORMAT = "%(asctime)s [%(levelname)s] [%(name)s] [%(context)s] %(message)s"


class _DefaultContextFilter(logging.Filter):
    """Fill in context for records that were not logged through the adapter."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "context"):
            record.context = "none"
        return True


class StructuredLoggerAdapter(logging.LoggerAdapter):
    """
    Logger adapter that adds structured context to log messages.

    Usage:
        logger = get_structured_logger(__name__, provider="udemy", query="python")
        logger.info("Dispatching search")  # Logs with context
    """

    def __init__(self, logger: logging.Logger, **context: Any):
        """
        Initialize structured logger adapter.

        Args:
            logger: Base logger instance
            **context: Context fields to include in all log messages
        """
        super().__init__(logger, context)

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        """
        Process log message to add context.

        Args:
            msg: Log message
            kwargs: Logging keyword arguments

        Returns:
            Tuple of (formatted message, updated kwargs)
        """
        kwargs.setdefault("extra", {})["context"] = format_context(self.extra)
        return msg, kwargs


def format_context(context: dict[str, Any]) -> str:
    """Format context as `key=value | key=value`, skipping None values."""
    context_parts = [f"{key}={value}" for key, value in context.items() if value is not None]
    return " | ".join(context_parts) if context_parts else "none"


def get_structured_logger(name: str, **context: Any) -> StructuredLoggerAdapter:
    """
    Get a structured logger with context.

    Args:
        name: Logger name (typically __name__)
        **context: Context fields (e.g., provider="coursera", query="python")

    Returns:
        StructuredLoggerAdapter instance
    """
    base_logger = logging.getLogger(name)
    return StructuredLoggerAdapter(base_logger, **context)


def configure_logging(level: int = logging.INFO) -> None:
    """
    Install a stream handler using STRUCTURED_FORMAT on the root logger.

    Intended for scripts; library code only obtains loggers.
    """
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(STRUCTURED_FORMAT))
    handler.addFilter(_DefaultContextFilter())

    root = logging.getLogger()
    root.setLevel(level)
    root.addHandler(handler)
