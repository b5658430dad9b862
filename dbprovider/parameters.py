"""Parameter descriptors and the bound parameter collection of a command.

Example:
    >>> DbParam.create(DbType.VARCHAR, "new value")
    DbParam(type=<DbType.VARCHAR: 'varchar'>, value='new value', size=0)
"""

from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any, Optional

from dbprovider.typing import BINARY_TYPES, CHARACTER_TYPES, DbType

__all__ = ("BoundParameter", "DbParam", "ParameterCollection", "normalize_parameter_name")

_PARAMETER_PREFIXES = ("@", ":", "$")


def normalize_parameter_name(name: str) -> str:
    """Strip a leading ``@``, ``:`` or ``$`` placeholder marker from a parameter name.

    Args:
        name: Parameter name as supplied by the caller.

    Returns:
        The bare name used as the driver binding key.
    """
    if name.startswith(_PARAMETER_PREFIXES):
        return name[1:]
    return name


@dataclass(frozen=True)
class DbParam:
    """Database parameter descriptor: a SQL type tag, a value and an optional size.

    A ``size`` of ``0`` means unspecified. No validation happens here; invalid
    type/value combinations surface when the command is executed.
    """

    type: DbType
    value: Any = None
    size: int = 0

    @classmethod
    def create(cls, type: DbType, value: Any, size: int = 0) -> "DbParam":  # noqa: A002
        """Create a new parameter descriptor.

        Args:
            type: SQL data type
            value: Value, ``None`` binds a database null
            size: Size/precision, ``0`` when unspecified

        Returns:
            The descriptor.
        """
        return cls(type=type, value=value, size=size)

    @property
    def is_character(self) -> bool:
        return self.type in CHARACTER_TYPES


@dataclass
class BoundParameter:
    """A parameter attached to a command, as it will be handed to the driver."""

    name: str
    db_type: DbType
    size: int = 0
    value: Any = None

    @property
    def is_null(self) -> bool:
        return self.value is None

    def driver_value(self) -> Any:
        """Return the value to bind, truncated to ``size`` for sized character and binary types."""
        value = self.value
        if value is None or self.size <= 0:
            return value
        if self.db_type in CHARACTER_TYPES and isinstance(value, str) and len(value) > self.size:
            return value[: self.size]
        if self.db_type in BINARY_TYPES and isinstance(value, (bytes, bytearray)) and len(value) > self.size:
            return bytes(value[: self.size])
        return value


class ParameterCollection:
    """Ordered name -> :class:`BoundParameter` mapping owned by a command."""

    __slots__ = ("_parameters",)

    def __init__(self) -> None:
        self._parameters: dict[str, BoundParameter] = {}

    def add(self, name: str, db_type: DbType, size: int = 0, value: Any = None) -> BoundParameter:
        """Bind a parameter, replacing any previous binding with the same name.

        Args:
            name: Parameter name, with or without a placeholder marker.
            db_type: Declared SQL type.
            size: Size/precision, ``0`` for driver default sizing.
            value: Value to bind, ``None`` for database null.

        Returns:
            The bound parameter.
        """
        parameter = BoundParameter(name=normalize_parameter_name(name), db_type=db_type, size=size, value=value)
        self._parameters[parameter.name] = parameter
        return parameter

    def get(self, name: str) -> "Optional[BoundParameter]":
        return self._parameters.get(normalize_parameter_name(name))

    def clear(self) -> None:
        self._parameters.clear()

    def as_dict(self) -> "dict[str, Any]":
        """Named driver values in binding order."""
        return {name: parameter.driver_value() for name, parameter in self._parameters.items()}

    def as_list(self) -> "list[Any]":
        """Positional driver values in binding order."""
        return [parameter.driver_value() for parameter in self._parameters.values()]

    def __getitem__(self, name: str) -> BoundParameter:
        return self._parameters[normalize_parameter_name(name)]

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and normalize_parameter_name(name) in self._parameters

    def __iter__(self) -> "Iterator[BoundParameter]":
        return iter(self._parameters.values())

    def __len__(self) -> int:
        return len(self._parameters)

    def __repr__(self) -> str:
        return f"ParameterCollection({list(self._parameters)!r})"
