"""Lazy, single-pass row stream over an executed cursor."""

import weakref
from collections.abc import Callable, Iterator
from contextlib import ExitStack
from typing import TYPE_CHECKING, Any, Generic, Optional

from dbprovider.typing import SchemaT

if TYPE_CHECKING:
    from typing_extensions import Self

__all__ = ("RowStream",)


def _release(cursor: Any, resources: "Optional[ExitStack]") -> None:
    try:
        cursor.close()
    finally:
        if resources is not None:
            resources.close()


class RowStream(Generic[SchemaT]):
    """Iterate rows of an executed cursor one at a time.

    Each row is turned into a ``column -> value`` dict in column order and handed to
    ``converter``. The cursor is closed when the rows are exhausted, when fetching
    or converting a row raises, on :meth:`close`, when the stream is used as a
    context manager and the block exits, or when the stream is garbage collected.
    A closed stream yields nothing.

    Args:
        cursor: Executed DB-API cursor.
        converter: Builds the yielded item from the row dict.
        on_close: Called once with the stream after an explicit or end-of-rows close.
        resources: Context entered for the statement (e.g. the command timeout),
            exited after the cursor is released.
    """

    __slots__ = (
        "__weakref__",
        "_closed",
        "_converter",
        "_cursor",
        "_finalizer",
        "_on_close",
        "column_names",
        "rows_read",
    )

    def __init__(
        self,
        cursor: Any,
        converter: "Callable[[dict[str, Any]], SchemaT]",
        on_close: "Optional[Callable[[RowStream[Any]], None]]" = None,
        resources: "Optional[ExitStack]" = None,
    ) -> None:
        self._cursor = cursor
        self._converter = converter
        self._on_close = on_close
        self._closed = False
        self._finalizer = weakref.finalize(self, _release, cursor, resources)
        self.rows_read = 0
        description = cursor.description
        self.column_names: list[str] = [column[0] for column in description] if description else []
        if not description:
            # statement produced no result set
            self.close()

    @property
    def closed(self) -> bool:
        return self._closed

    def __iter__(self) -> "Iterator[SchemaT]":
        return self

    def __next__(self) -> SchemaT:
        if self._closed:
            raise StopIteration
        try:
            row = self._cursor.fetchone()
            if row is None:
                raise StopIteration
            item = self._converter(dict(zip(self.column_names, row)))
        except BaseException:
            self.close()
            raise
        self.rows_read += 1
        return item

    def close(self) -> None:
        """Release the cursor. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        try:
            self._finalizer()
        finally:
            if self._on_close is not None:
                self._on_close(self)

    def __enter__(self) -> "Self":
        return self

    def __exit__(self, *_: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"RowStream(columns={self.column_names!r}, rows_read={self.rows_read}, {state})"
