from enum import Enum
from typing import Any, Final, Literal

from typing_extensions import TypeAlias, TypeVar

__all__ = (
    "BINARY_TYPES",
    "CHARACTER_TYPES",
    "CommandType",
    "ConnectionState",
    "DbType",
    "DictRow",
    "Empty",
    "EmptyType",
    "SchemaT",
    "T",
)

T = TypeVar("T")
SchemaT = TypeVar("SchemaT", default=dict[str, Any])

DictRow: TypeAlias = dict[str, Any]
"""A single result row keyed by column name."""


class _EmptyEnum(Enum):
    """A sentinel enum used as placeholder."""

    EMPTY = 0


EmptyType: TypeAlias = Literal[_EmptyEnum.EMPTY]
Empty: Final = _EmptyEnum.EMPTY
"""Marker for a field that does not exist, distinct from a ``None`` value."""


class DbType(str, Enum):
    """SQL data type tags accepted for bound parameters."""

    BIGINT = "bigint"
    BINARY = "binary"
    BIT = "bit"
    CHAR = "char"
    DATE = "date"
    DATETIME = "datetime"
    DATETIME2 = "datetime2"
    DATETIMEOFFSET = "datetimeoffset"
    DECIMAL = "decimal"
    FLOAT = "float"
    IMAGE = "image"
    INT = "int"
    MONEY = "money"
    NCHAR = "nchar"
    NTEXT = "ntext"
    NVARCHAR = "nvarchar"
    REAL = "real"
    SMALLDATETIME = "smalldatetime"
    SMALLINT = "smallint"
    SMALLMONEY = "smallmoney"
    STRUCTURED = "structured"
    TEXT = "text"
    TIME = "time"
    TIMESTAMP = "timestamp"
    TINYINT = "tinyint"
    UDT = "udt"
    UNIQUEIDENTIFIER = "uniqueidentifier"
    VARBINARY = "varbinary"
    VARCHAR = "varchar"
    VARIANT = "variant"
    XML = "xml"

    def __str__(self) -> str:
        return self.value


CHARACTER_TYPES: Final[frozenset[DbType]] = frozenset(
    {DbType.CHAR, DbType.NCHAR, DbType.VARCHAR, DbType.NVARCHAR, DbType.TEXT, DbType.NTEXT}
)
BINARY_TYPES: Final[frozenset[DbType]] = frozenset({DbType.BINARY, DbType.VARBINARY, DbType.IMAGE})


class CommandType(Enum):
    """How the command text is interpreted."""

    TEXT = "text"
    STORED_PROCEDURE = "stored_procedure"


class ConnectionState(Enum):
    """Lifecycle state of a :class:`~dbprovider.connection.DbConnection`."""

    CLOSED = "closed"
    OPEN = "open"
