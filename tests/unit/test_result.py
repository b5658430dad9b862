"""Tests for RowStream over a mocked DB-API cursor."""

from __future__ import annotations

import gc
import weakref
from contextlib import ExitStack
from typing import Any
from unittest.mock import Mock

import pytest

from dbprovider.result import RowStream


def _cursor(rows: list[tuple[Any, ...]], columns: tuple[str, ...] = ("id", "name")) -> Mock:
    cursor = Mock()
    cursor.description = tuple((column, None, None, None, None, None, None) for column in columns)
    cursor.fetchone.side_effect = [*rows, None]
    return cursor


def test_rows_are_converted_lazily() -> None:
    cursor = _cursor([(1, "a"), (2, None)])
    stream: RowStream[dict[str, Any]] = RowStream(cursor, dict)

    cursor.fetchone.assert_not_called()
    assert next(stream) == {"id": 1, "name": "a"}
    assert cursor.fetchone.call_count == 1
    assert next(stream) == {"id": 2, "name": None}
    assert stream.column_names == ["id", "name"]
    assert stream.rows_read == 2


def test_exhaustion_closes_cursor_once() -> None:
    cursor = _cursor([(1, "a")])
    on_close = Mock()
    stream: RowStream[dict[str, Any]] = RowStream(cursor, dict, on_close=on_close)

    assert list(stream) == [{"id": 1, "name": "a"}]
    assert stream.closed
    assert list(stream) == []
    stream.close()

    cursor.close.assert_called_once_with()
    on_close.assert_called_once_with(stream)


def test_early_close_stops_iteration() -> None:
    cursor = _cursor([(1, "a"), (2, "b")])
    stream: RowStream[int] = RowStream(cursor, lambda row: row["id"])

    assert next(stream) == 1
    stream.close()

    assert list(stream) == []
    cursor.close.assert_called_once_with()
    assert cursor.fetchone.call_count == 1


def test_context_manager_closes() -> None:
    cursor = _cursor([(1, "a"), (2, "b")])
    with RowStream(cursor, dict) as stream:
        next(stream)
    assert stream.closed
    cursor.close.assert_called_once_with()


def test_no_result_set_closes_immediately() -> None:
    cursor = Mock()
    cursor.description = None
    on_close = Mock()
    stream: RowStream[dict[str, Any]] = RowStream(cursor, dict, on_close=on_close)

    assert stream.closed
    assert stream.column_names == []
    assert list(stream) == []
    cursor.fetchone.assert_not_called()
    on_close.assert_called_once_with(stream)


def test_on_close_runs_when_cursor_close_fails() -> None:
    cursor = _cursor([])
    cursor.close.side_effect = RuntimeError("cursor gone")
    on_close = Mock()
    stream: RowStream[dict[str, Any]] = RowStream(cursor, dict, on_close=on_close)

    with pytest.raises(RuntimeError, match="cursor gone"):
        stream.close()
    assert stream.closed
    on_close.assert_called_once_with(stream)


def test_repr() -> None:
    stream: RowStream[dict[str, Any]] = RowStream(_cursor([]), dict)
    assert repr(stream) == "RowStream(columns=['id', 'name'], rows_read=0, open)"


def test_converter_error_closes_cursor() -> None:
    cursor = _cursor([(1, "a"), (2, "b")])
    on_close = Mock()
    stream: RowStream[int] = RowStream(cursor, Mock(side_effect=TypeError("bad row")), on_close=on_close)

    with pytest.raises(TypeError, match="bad row"):
        next(stream)

    assert stream.closed
    assert stream.rows_read == 0
    assert list(stream) == []
    cursor.close.assert_called_once_with()
    on_close.assert_called_once_with(stream)


def test_fetch_error_closes_cursor() -> None:
    cursor = _cursor([])
    cursor.fetchone.side_effect = RuntimeError("interrupted")
    stream: RowStream[dict[str, Any]] = RowStream(cursor, dict)

    with pytest.raises(RuntimeError, match="interrupted"):
        next(stream)
    assert stream.closed
    cursor.close.assert_called_once_with()


def test_garbage_collected_stream_closes_cursor_and_resources() -> None:
    cursor = _cursor([(1, "a"), (2, "b")])
    resources = ExitStack()
    exited = Mock()
    resources.callback(exited)
    stream: RowStream[dict[str, Any]] = RowStream(cursor, dict, resources=resources)
    next(stream)
    ref = weakref.ref(stream)

    del stream
    gc.collect()

    assert ref() is None
    cursor.close.assert_called_once_with()
    exited.assert_called_once_with()


def test_resources_released_after_cursor() -> None:
    calls: list[str] = []
    cursor = _cursor([])
    cursor.close.side_effect = lambda: calls.append("cursor")
    resources = ExitStack()
    resources.callback(calls.append, "resources")
    stream: RowStream[dict[str, Any]] = RowStream(cursor, dict, resources=resources)

    assert list(stream) == []
    stream.close()

    assert calls == ["cursor", "resources"]
