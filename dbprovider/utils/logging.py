"""Logging for dbprovider.

Loggers live under the ``dbprovider`` namespace. A provider created with a
``correlation_id`` binds it for the duration of each of its operations, and
every record emitted meanwhile carries it as ``record.correlation_id``.
:func:`configure_logging` is the application-side switch for JSON lines output.
"""

import logging
import sys
from collections.abc import Generator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import TYPE_CHECKING, Any, Optional, Union

from dbprovider.utils.serializers import to_json

if TYPE_CHECKING:
    from logging import LogRecord

__all__ = (
    "CorrelationIDFilter",
    "StructuredFormatter",
    "configure_logging",
    "correlation_context",
    "get_correlation_id",
    "get_logger",
)

ROOT_LOGGER_NAME = "dbprovider"

_correlation_id: "ContextVar[Optional[str]]" = ContextVar("dbprovider_correlation_id", default=None)


def get_correlation_id() -> "Optional[str]":
    """Return the correlation id bound to the current context, if any."""
    return _correlation_id.get()


@contextmanager
def correlation_context(correlation_id: "Optional[str]") -> "Generator[None, None, None]":
    """Bind ``correlation_id`` to log records emitted inside the block.

    ``None`` leaves the id already bound by an outer scope in place.
    """
    if correlation_id is None:
        yield
        return
    token = _correlation_id.set(correlation_id)
    try:
        yield
    finally:
        _correlation_id.reset(token)


class StructuredFormatter(logging.Formatter):
    """Format records as one JSON object per line.

    ``extra={"extra_fields": {...}}`` entries are merged into the object.
    """

    def format(self, record: "LogRecord") -> str:
        entry: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        correlation_id = getattr(record, "correlation_id", None) or get_correlation_id()
        if correlation_id:
            entry["correlation_id"] = correlation_id
        entry.update(getattr(record, "extra_fields", None) or {})
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return to_json(entry)


class CorrelationIDFilter(logging.Filter):
    """Copy the bound correlation id onto each record."""

    def filter(self, record: "LogRecord") -> bool:
        correlation_id = get_correlation_id()
        if correlation_id:
            record.correlation_id = correlation_id  # type: ignore[attr-defined]
        return True


def get_logger(name: "Optional[str]" = None) -> logging.Logger:
    """Get a logger under the ``dbprovider`` namespace.

    Args:
        name: Logger name, prefixed with ``dbprovider.`` unless it already is.
            ``None`` returns the namespace root.

    Returns:
        The logger, with a :class:`CorrelationIDFilter` attached.
    """
    if name is None:
        return logging.getLogger(ROOT_LOGGER_NAME)
    if not name.startswith(ROOT_LOGGER_NAME):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    logger = logging.getLogger(name)
    if not any(isinstance(f, CorrelationIDFilter) for f in logger.filters):
        logger.addFilter(CorrelationIDFilter())
    return logger


def configure_logging(
    level: "Union[str, int]" = "INFO",
    format_style: str = "structured",
    log_to_file: "Optional[str]" = None,
    extra_handlers: "Optional[list[logging.Handler]]" = None,
) -> None:
    """Route the ``dbprovider`` namespace to stdout (and optionally a file).

    Replaces the handlers previously installed on the namespace root and stops
    propagation to the root logger.

    Args:
        level: Level name or number.
        format_style: ``"structured"`` for JSON lines, anything else for plain text.
        log_to_file: Path of a file receiving JSON lines as well.
        extra_handlers: Handlers added as they are.
    """
    if format_style == "structured":
        formatter: logging.Formatter = StructuredFormatter()
    else:
        formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    handlers: list[logging.Handler] = [console_handler]
    if log_to_file:
        file_handler = logging.FileHandler(log_to_file)
        file_handler.setFormatter(StructuredFormatter())
        handlers.append(file_handler)
    handlers.extend(extra_handlers or [])

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(level.upper() if isinstance(level, str) else level)
    root_logger.handlers[:] = handlers
    root_logger.propagate = False
    root_logger.debug(
        "dbprovider logging configured",
        extra={"extra_fields": {"level": level, "format_style": format_style, "handlers_count": len(handlers)}},
    )
