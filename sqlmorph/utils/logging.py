"""Logging for sqlmorph.

The translation driver sets the correlation ID to the name of the unit being
translated. :class:`StructuredFormatter` writes it as ``unit`` and nests the
fields a decision was logged with (statement kind, fail-closed reason, SQL,
operations) under ``translation``, so every line can be traced back to the
unit and statement it is about.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from contextvars import ContextVar
from typing import TYPE_CHECKING

from sqlmorph._serialization import encode_json

if TYPE_CHECKING:
    from collections.abc import Iterator
    from logging import LogRecord
    from typing import Any, TextIO

__all__ = (
    "CorrelationIDFilter",
    "StructuredFormatter",
    "configure_logging",
    "correlation_context",
    "correlation_id_var",
    "get_correlation_id",
    "get_logger",
    "set_correlation_id",
)

correlation_id_var: ContextVar[str | None] = ContextVar("sqlmorph_correlation_id", default=None)


def set_correlation_id(correlation_id: str | None) -> None:
    """Set the correlation ID for the current context.

    Args:
        correlation_id: The correlation ID to set, or None to clear
    """
    correlation_id_var.set(correlation_id)


def get_correlation_id() -> str | None:
    """Get the current correlation ID.

    Returns:
        The current correlation ID or None if not set
    """
    return correlation_id_var.get()


@contextmanager
def correlation_context(correlation_id: str | None) -> Iterator[str | None]:
    """Set the correlation ID for the duration of a block.

    The previous value is restored on exit, also when the block raises.

    Args:
        correlation_id: The correlation ID to use inside the block

    Yields:
        The correlation ID
    """
    token = correlation_id_var.set(correlation_id)
    try:
        yield correlation_id
    finally:
        correlation_id_var.reset(token)


class StructuredFormatter(logging.Formatter):
    """JSON formatter for translation decisions.

    ``unit`` is the correlation ID, ``translation`` the record's
    ``extra_fields``. Both are left out when absent.
    """

    def format(self, record: LogRecord) -> str:
        """Format log record as structured JSON.

        Args:
            record: The log record to format

        Returns:
            JSON formatted log entry
        """
        log_entry: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "function": record.funcName,
            "line": record.lineno,
        }

        unit = getattr(record, "correlation_id", None) or get_correlation_id()
        if unit:
            log_entry["unit"] = unit

        translation = getattr(record, "extra_fields", None)
        if translation:
            log_entry["translation"] = dict(translation)

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return encode_json(log_entry)


class CorrelationIDFilter(logging.Filter):
    """Filter that adds correlation ID to log records."""

    def filter(self, record: LogRecord) -> bool:
        """Add correlation ID to record if available.

        Args:
            record: The log record to filter

        Returns:
            Always True to pass the record through
        """
        if correlation_id := get_correlation_id():
            record.correlation_id = correlation_id  # type: ignore[attr-defined]
        return True


def get_logger(name: str | None = None) -> logging.Logger:
    """Get a logger instance with standardized configuration.

    Args:
        name: Logger name. If not provided, returns the root sqlmorph logger.

    Returns:
        Configured logger instance
    """
    if name is None:
        return logging.getLogger("sqlmorph")

    if not name.startswith("sqlmorph"):
        name = f"sqlmorph.{name}"

    logger = logging.getLogger(name)

    if not any(isinstance(f, CorrelationIDFilter) for f in logger.filters):
        logger.addFilter(CorrelationIDFilter())

    return logger


def configure_logging(level: str = "INFO", structured: bool = True, stream: TextIO | None = None) -> None:
    """Send sqlmorph records to one stream handler.

    Only the ``sqlmorph`` logger is touched; it stops propagating to the root
    logger.

    Args:
        level: Logging level name.
        structured: Use :class:`StructuredFormatter`, else a one-line text format.
        stream: Target stream. ``sys.stderr`` when omitted.
    """
    handler = logging.StreamHandler(stream)
    if structured:
        handler.setFormatter(StructuredFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s [%(correlation_id)s] %(name)s: %(message)s"))
        handler.addFilter(_default_correlation_id)

    root_logger = get_logger()
    root_logger.setLevel(level.upper())
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.propagate = False


def _default_correlation_id(record: LogRecord) -> bool:
    if not hasattr(record, "correlation_id"):
        record.correlation_id = "-"  # type: ignore[attr-defined]
    return True
