"""Command state: text, kind, bound parameters, timeout and transaction."""

import weakref
from collections.abc import Callable
from contextlib import AbstractContextManager, ExitStack
from typing import Any, Optional

from dbprovider.adapters import resolve_rowcount
from dbprovider.connection import DbConnection
from dbprovider.exceptions import UnsupportedOperationError
from dbprovider.parameters import ParameterCollection
from dbprovider.result import RowStream
from dbprovider.transaction import DbTransaction
from dbprovider.typing import CommandType, SchemaT
from dbprovider.utils.logging import get_logger

__all__ = ("DbCommand",)

logger = get_logger("command")


class DbCommand:
    """A single SQL text command or stored procedure call bound to a connection.

    Row streams opened by :meth:`execute_reader` are tracked weakly and closed
    together with the command. A stream dropped by the caller releases its cursor
    when it is garbage collected.
    """

    __slots__ = ("_closed", "_streams", "command_type", "connection", "parameters", "text", "timeout", "transaction")

    def __init__(
        self,
        connection: DbConnection,
        text: str = "",
        command_type: CommandType = CommandType.TEXT,
        transaction: "Optional[DbTransaction]" = None,
    ) -> None:
        self.connection = connection
        self.text = text
        self.command_type = command_type
        self.transaction = transaction
        self.parameters = ParameterCollection()
        self.timeout: Optional[int] = None
        self._streams: "weakref.WeakSet[RowStream[Any]]" = weakref.WeakSet()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def open_streams(self) -> "list[RowStream[Any]]":
        return [stream for stream in self._streams if not stream.closed]

    def _execute(self, cursor: Any) -> None:
        coerce = self.connection.coerce
        logger.debug(
            "Executing %s",
            self.command_type.value,
            extra={
                "extra_fields": {
                    "command_type": self.command_type.value,
                    "parameter_count": len(self.parameters),
                    "timeout": self.timeout,
                    "in_transaction": self.transaction is not None,
                }
            },
        )
        if self.command_type is CommandType.STORED_PROCEDURE:
            callproc = getattr(cursor, "callproc", None)
            if callproc is None:
                msg = f"Driver {self.connection.config.driver!r} does not support stored procedure calls"
                raise UnsupportedOperationError(msg)
            callproc(self.text, [coerce(value) for value in self.parameters.as_list()])
            return
        parameters = {name: coerce(value) for name, value in self.parameters.as_dict().items()}
        if parameters:
            cursor.execute(self.text, parameters)
        else:
            cursor.execute(self.text)

    def _timeout_scope(self) -> "AbstractContextManager[None]":
        return self.connection.profile.command_timeout(self.connection.raw, self.timeout)

    def execute_non_query(self) -> int:
        """Execute the command and return the number of affected rows (0 when unknown)."""
        cursor = self.connection.cursor()
        try:
            with self._timeout_scope():
                self._execute(cursor)
            rowcount = resolve_rowcount(cursor)
        finally:
            cursor.close()
        logger.debug("Command affected %d rows", rowcount, extra={"extra_fields": {"rowcount": rowcount}})
        return rowcount

    def execute_reader(self, converter: "Callable[[dict[str, Any]], SchemaT]") -> "RowStream[SchemaT]":
        """Execute the command and return a lazy stream of converted rows.

        The command timeout stays in effect until the stream is closed, so it also
        bounds drivers that compute rows lazily while they are fetched.

        Args:
            converter: Builds each yielded item from a ``column -> value`` row dict.

        Returns:
            The open row stream.
        """
        cursor = self.connection.cursor()
        resources = ExitStack()
        try:
            resources.enter_context(self._timeout_scope())
            self._execute(cursor)
        except BaseException:
            try:
                cursor.close()
            finally:
                resources.close()
            raise
        stream = RowStream(cursor, converter, on_close=self._release_stream, resources=resources)
        if not stream.closed:
            self._streams.add(stream)
        return stream

    def _release_stream(self, stream: "RowStream[Any]") -> None:
        self._streams.discard(stream)

    def close(self) -> None:
        """Close open row streams. Safe to call more than once."""
        self._closed = True
        for stream in list(self._streams):
            stream.close()

    def __repr__(self) -> str:
        return (
            f"DbCommand(text={self.text!r}, command_type={self.command_type.name}, "
            f"parameters={len(self.parameters)}, timeout={self.timeout!r})"
        )
