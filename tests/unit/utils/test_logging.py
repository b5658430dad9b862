"""Tests for dbprovider logging helpers."""

from __future__ import annotations

import io
import json
import logging
import sys
from collections.abc import Generator
from pathlib import Path

import pytest

from dbprovider.utils.logging import (
    CorrelationIDFilter,
    StructuredFormatter,
    configure_logging,
    correlation_context,
    get_correlation_id,
    get_logger,
)


@pytest.fixture(autouse=True)
def reset_logging() -> Generator[None, None, None]:
    root = logging.getLogger("dbprovider")
    handlers, level, propagate = list(root.handlers), root.level, root.propagate
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
    root.propagate = propagate


def _record(message: str = "hello", **extra: object) -> logging.LogRecord:
    record = logging.LogRecord("dbprovider.test", logging.INFO, __file__, 10, message, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_get_logger_namespaces_name() -> None:
    assert get_logger("provider").name == "dbprovider.provider"
    assert get_logger("dbprovider.config").name == "dbprovider.config"
    assert get_logger().name == "dbprovider"


def test_get_logger_adds_filter_once() -> None:
    logger = get_logger("filter_once")
    get_logger("filter_once")
    assert sum(isinstance(f, CorrelationIDFilter) for f in logger.filters) == 1


def test_correlation_context_binds_and_restores() -> None:
    assert get_correlation_id() is None
    with correlation_context("req-1"):
        assert get_correlation_id() == "req-1"
        with correlation_context("req-1b"):
            assert get_correlation_id() == "req-1b"
        with correlation_context(None):
            assert get_correlation_id() == "req-1"
        assert get_correlation_id() == "req-1"
    assert get_correlation_id() is None


def test_correlation_context_restores_on_error() -> None:
    with pytest.raises(RuntimeError), correlation_context("req-err"):
        raise RuntimeError("boom")
    assert get_correlation_id() is None


def test_filter_attaches_correlation_id() -> None:
    record = _record()
    with correlation_context("req-2"):
        assert CorrelationIDFilter().filter(record) is True
    assert record.correlation_id == "req-2"  # type: ignore[attr-defined]


def test_filter_leaves_record_untagged_without_binding() -> None:
    record = _record()
    assert CorrelationIDFilter().filter(record) is True
    assert not hasattr(record, "correlation_id")


def test_structured_formatter_emits_json() -> None:
    with correlation_context("req-3"):
        payload = json.loads(StructuredFormatter().format(_record(extra_fields={"rowcount": 3})))

    assert payload["message"] == "hello"
    assert payload["level"] == "INFO"
    assert payload["logger"] == "dbprovider.test"
    assert payload["correlation_id"] == "req-3"
    assert payload["rowcount"] == 3


def test_structured_formatter_uses_record_correlation_id() -> None:
    payload = json.loads(StructuredFormatter().format(_record(correlation_id="req-4")))
    assert payload["correlation_id"] == "req-4"


def test_structured_formatter_includes_exception() -> None:
    try:
        raise ValueError("boom")
    except ValueError:
        record = logging.LogRecord("dbprovider.test", logging.ERROR, __file__, 1, "failed", None, sys.exc_info())
    payload = json.loads(StructuredFormatter().format(record))
    assert "ValueError: boom" in payload["exception"]


def test_configure_logging_simple_format() -> None:
    stream = io.StringIO()
    handler = logging.StreamHandler(stream)
    configure_logging(level="DEBUG", format_style="simple", extra_handlers=[handler])

    root = logging.getLogger("dbprovider")
    assert root.level == logging.DEBUG
    assert root.propagate is False
    assert handler in root.handlers
    get_logger("configured").info("visible")
    assert "visible" in stream.getvalue()


def test_configure_logging_numeric_level() -> None:
    configure_logging(level=logging.WARNING, extra_handlers=[logging.NullHandler()])
    assert logging.getLogger("dbprovider").level == logging.WARNING


def test_configure_logging_file_handler(tmp_path: Path) -> None:
    log_file = tmp_path / "dbprovider.log"
    configure_logging(level="INFO", log_to_file=str(log_file))
    with correlation_context("req-5"):
        get_logger("file").info("to file")
    for handler in logging.getLogger("dbprovider").handlers:
        handler.flush()

    entry = json.loads(log_file.read_text().splitlines()[-1])
    assert entry["message"] == "to file"
    assert entry["correlation_id"] == "req-5"
