"""Fluent database access provider.

Update a table::

    with DbProvider("reporting") as db:
        rows_affected = (
            db.set_command_from_text("UPDATE settings SET value=@value")
            .with_parameters(value=DbParam.create(DbType.CHAR, "new value"))
            .execute_command()
        )

Select into a class::

    @dataclass
    class RideDetails:
        confirmation_no: str
        pickup_date_time: datetime

    with DbProvider("reporting") as db:
        rides = list(
            db.set_command_from_text(
                "SELECT confirmation_no, req_date_time pickup_date_time FROM rides WHERE affiliate=@affiliate_id"
            )
            .with_parameters(affiliate_id=DbParam.create(DbType.INT, 123))
            .execute_query(RideDetails)
        )
"""

from collections.abc import Mapping
from functools import partial
from typing import TYPE_CHECKING, Any, Optional

from mypy_extensions import mypyc_attr

from dbprovider.command import DbCommand
from dbprovider.config import ConnectionRegistry, connection_strings
from dbprovider.connection import DbConnection
from dbprovider.exceptions import (
    CommandNotCreatedError,
    InvalidParameterTypeError,
    ProviderClosedError,
    TransactionError,
)
from dbprovider.mapping import coerce_value, create_instance, extract_properties
from dbprovider.parameters import DbParam
from dbprovider.transaction import DbTransaction
from dbprovider.typing import CommandType, DictRow, SchemaT
from dbprovider.utils.logging import correlation_context, get_logger
from dbprovider.utils.type_guards import is_db_param, is_value_type

if TYPE_CHECKING:
    from typing_extensions import Self

    from dbprovider.result import RowStream

__all__ = ("DbProvider",)

logger = get_logger("provider")


def _as_row(row: "dict[str, Any]") -> "dict[str, Any]":
    return row


def _first_column(value_type: "type[Any]", row: "dict[str, Any]") -> Any:
    return coerce_value(next(iter(row.values())), value_type)


def _row_converter(schema_type: "type[Any]") -> Any:
    if schema_type is dict:
        return _as_row
    if is_value_type(schema_type):
        return partial(_first_column, schema_type)
    return partial(create_instance, schema_type)


@mypyc_attr(allow_interpreted_subclasses=True)
class DbProvider:
    """Database access provider.

    Holds one connection, at most one active transaction and one current command.
    Configuration calls return the provider so they can be chained; a terminal
    call executes the current command. Use it as a context manager, or call
    :meth:`close`, to release the command, transaction and connection.

    Args:
        connection_name: Name of the connection configuration to use.
        registry: Registry to resolve the name against, the process-wide
            :data:`~dbprovider.config.connection_strings` by default.
        correlation_id: Bound to the log records emitted while the provider
            executes, begins, commits, rolls back or closes.

    Raises:
        ImproperConfigurationError: If the connection name is not registered.
    """

    __slots__ = ("_closed", "_command", "_connection", "_transaction", "connection_name", "correlation_id")

    def __init__(
        self,
        connection_name: str,
        *,
        registry: "Optional[ConnectionRegistry]" = None,
        correlation_id: "Optional[str]" = None,
    ) -> None:
        config = (registry if registry is not None else connection_strings).get_config(connection_name)
        self.connection_name = connection_name
        self.correlation_id = correlation_id
        self._connection = DbConnection(config)
        self._command: Optional[DbCommand] = None
        self._transaction: Optional[DbTransaction] = None
        self._closed = False

    @property
    def connection(self) -> DbConnection:
        return self._connection

    @property
    def command(self) -> "Optional[DbCommand]":
        return self._command

    @property
    def transaction(self) -> "Optional[DbTransaction]":
        return self._transaction

    @property
    def in_transaction(self) -> bool:
        return self._transaction is not None

    @property
    def is_closed(self) -> bool:
        return self._closed

    def _ensure_not_closed(self) -> None:
        if self._closed:
            raise ProviderClosedError

    def _ensure_command(self) -> DbCommand:
        self._ensure_not_closed()
        if self._command is None:
            raise CommandNotCreatedError
        return self._command

    def _create_new_command(self) -> DbCommand:
        self._ensure_not_closed()
        if self._command is not None:
            self._command.close()
        self._command = DbCommand(self._connection, transaction=self._transaction)
        return self._command

    def set_command_from_text(self, command_text: str) -> "Self":
        """Set the SQL command from text, discarding the previous command and its parameters.

        Args:
            command_text: SQL command text

        Returns:
            The provider.
        """
        command = self._create_new_command()
        command.text = command_text
        return self

    def set_stored_procedure_from_text(self, stored_procedure_name: str) -> "Self":
        """Set the command to a stored procedure call.

        Args:
            stored_procedure_name: Stored procedure name

        Returns:
            The provider.
        """
        self.set_command_from_text(stored_procedure_name)
        self._ensure_command().command_type = CommandType.STORED_PROCEDURE
        return self

    def with_parameters(self, parameters: Any = None, /, **named_parameters: Any) -> "Self":
        """Add parameters to the current command from an object's fields and/or keyword arguments.

        Every field of ``parameters`` (a dataclass, namespace, mapping or plain
        object) and every keyword argument must be a :class:`DbParam`; field names
        are used as parameter names.

        Args:
            parameters: Object whose fields are :class:`DbParam` descriptors.
            **named_parameters: Additional descriptors by name.

        Raises:
            CommandNotCreatedError: If no command was set.
            InvalidParameterTypeError: If a value is not a :class:`DbParam`. Nothing is bound.

        Returns:
            The provider.
        """
        self._ensure_command()
        properties = list(extract_properties(parameters)) if parameters is not None else []
        properties.extend(named_parameters.items())
        for name, value in properties:
            if not is_db_param(value):
                raise InvalidParameterTypeError(parameter_name=name)
        return self.with_dictionary_parameters(dict(properties))

    def with_dictionary_parameters(self, parameters: "Mapping[str, DbParam]") -> "Self":
        """Add parameters to the current command.

        Bindings accumulate across calls for the same command. A ``None`` value
        binds a database null; an explicit size is kept; character types without a
        size are bound as text sized to the value's length.

        Args:
            parameters: Parameter name to descriptor mapping.

        Raises:
            CommandNotCreatedError: If no command was set.
            InvalidParameterTypeError: If a value is not a :class:`DbParam`. Nothing is bound.

        Returns:
            The provider.
        """
        command = self._ensure_command()
        for name, parameter in parameters.items():
            if not is_db_param(parameter):
                raise InvalidParameterTypeError(parameter_name=name)

        for name, parameter in parameters.items():
            if parameter.value is None:
                command.parameters.add(name, parameter.type, value=None)
            elif parameter.size > 0:
                command.parameters.add(name, parameter.type, parameter.size, parameter.value)
            elif parameter.is_character:
                value = str(parameter.value)
                command.parameters.add(name, parameter.type, len(value), value)
            else:
                command.parameters.add(name, parameter.type, value=parameter.value)
        return self

    def with_timeout(self, timeout: int) -> "Self":
        """Set the timeout of the current command.

        Args:
            timeout: Timeout in milliseconds

        Raises:
            CommandNotCreatedError: If no command was set.

        Returns:
            The provider.
        """
        self._ensure_command().timeout = timeout
        return self

    def begin_transaction(self) -> "Self":
        """Start a new transaction, opening the connection if needed.

        Raises:
            TransactionError: If a transaction is already active.

        Returns:
            The provider.
        """
        self._ensure_not_closed()
        if self._transaction is not None:
            msg = "A transaction is already active. Commit or roll it back before beginning a new one."
            raise TransactionError(msg)
        with correlation_context(self.correlation_id):
            self._transaction = DbTransaction.begin(self._connection)
        if self._command is not None:
            self._command.transaction = self._transaction
        return self

    def _release_transaction(self) -> None:
        if self._command is not None and self._command.transaction is self._transaction:
            self._command.transaction = None
        self._transaction = None

    def commit_transaction(self) -> "Self":
        """Commit the active transaction. Does nothing when no transaction is active."""
        if self._transaction is not None:
            with correlation_context(self.correlation_id):
                self._transaction.commit()
            self._release_transaction()
        return self

    def rollback_transaction(self) -> "Self":
        """Roll back the active transaction. Does nothing when no transaction is active."""
        if self._transaction is not None:
            with correlation_context(self.correlation_id):
                self._transaction.rollback()
            self._release_transaction()
        return self

    def execute_command(self) -> int:
        """Execute the current command as a non-query.

        Raises:
            CommandNotCreatedError: If no command was set.

        Returns:
            Number of rows affected.
        """
        command = self._ensure_command()
        with correlation_context(self.correlation_id):
            self._connection.open()
            return command.execute_non_query()

    def execute_query(self, schema_type: "type[SchemaT]" = dict) -> "RowStream[SchemaT]":  # type: ignore[assignment]
        """Execute the current command and stream the result rows.

        Scalar types (``int``, ``str``, ``datetime``, ``Decimal``, enums, ...) are
        read from the first column of each row; a database null stays ``None``.
        ``dict`` yields the row maps. Any other class is built per row with
        :func:`~dbprovider.mapping.create_instance`, matching column names to
        field names.

        Args:
            schema_type: Type of each yielded item.

        Raises:
            CommandNotCreatedError: If no command was set.

        Returns:
            A lazy, single-pass stream holding the cursor until exhausted or closed.
        """
        command = self._ensure_command()
        with correlation_context(self.correlation_id):
            self._connection.open()
            return command.execute_reader(_row_converter(schema_type))

    def to_array_of_dictionaries(self) -> "RowStream[DictRow]":
        """Execute the current command and stream each row as a ``column -> value`` dict.

        Database nulls are ``None``.

        Raises:
            CommandNotCreatedError: If no command was set.

        Returns:
            A lazy, single-pass stream of row dicts.
        """
        return self.execute_query(dict)

    def close(self) -> None:
        """Release the command, the transaction (rolled back if active) and the connection."""
        if self._closed:
            return
        self._closed = True
        command, self._command = self._command, None
        transaction, self._transaction = self._transaction, None
        with correlation_context(self.correlation_id):
            try:
                if command is not None:
                    command.close()
            finally:
                try:
                    if transaction is not None:
                        transaction.close()
                finally:
                    self._connection.close()
                    logger.debug("Provider for %s closed", self.connection_name)

    def __enter__(self) -> "Self":
        return self

    def __exit__(self, *_: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        return (
            f"DbProvider(connection_name={self.connection_name!r}, "
            f"command={self._command!r}, in_transaction={self.in_transaction}, closed={self._closed})"
        )
