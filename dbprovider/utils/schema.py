"""Scalar value coercion used when mapping database values onto Python types."""

import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Final, cast
from uuid import UUID

from typing_extensions import TypeVar

from dbprovider.utils.serializers import from_json

__all__ = ("to_value_type",)

ValueT = TypeVar("ValueT")

_BOOL_TRUE_VALUES: Final[frozenset[str]] = frozenset({"true", "1", "yes", "y", "t", "on"})


def _convert_to_int(value: Any) -> int:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float, Decimal)):
        return int(value)
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            # values like "42.0"
            try:
                return int(float(value))
            except ValueError:
                pass
    msg = f"Cannot convert {type(value).__name__} to int"
    raise TypeError(msg)


def _convert_to_float(value: Any) -> float:
    if isinstance(value, (bool, int, float, Decimal)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            pass
    msg = f"Cannot convert {type(value).__name__} to float"
    raise TypeError(msg)


def _convert_to_bool(value: Any) -> bool:
    """Convert a value to bool.

    Strings are compared case-insensitively against the usual truthy spellings.

    Raises:
        TypeError: If value cannot be converted to bool.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float, Decimal)):
        return bool(value)
    if isinstance(value, str):
        return value.strip().lower() in _BOOL_TRUE_VALUES
    msg = f"Cannot convert {type(value).__name__} to bool"
    raise TypeError(msg)


def _convert_to_datetime(value: Any) -> datetime.datetime:
    if isinstance(value, datetime.datetime):
        return value
    if isinstance(value, str):
        try:
            return datetime.datetime.fromisoformat(value)
        except ValueError:
            pass
    if isinstance(value, datetime.date):
        return datetime.datetime.combine(value, datetime.time.min)
    msg = f"Cannot convert {type(value).__name__} to datetime"
    raise TypeError(msg)


def _convert_to_date(value: Any) -> datetime.date:
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    if isinstance(value, str):
        try:
            return datetime.date.fromisoformat(value)
        except ValueError:
            try:
                return datetime.datetime.fromisoformat(value).date()
            except ValueError:
                pass
    msg = f"Cannot convert {type(value).__name__} to date"
    raise TypeError(msg)


def _convert_to_time(value: Any) -> datetime.time:
    if isinstance(value, datetime.datetime):
        return value.time()
    if isinstance(value, datetime.time):
        return value
    if isinstance(value, str):
        try:
            return datetime.time.fromisoformat(value)
        except ValueError:
            pass
    msg = f"Cannot convert {type(value).__name__} to time"
    raise TypeError(msg)


def _convert_to_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, (int, float, str)) and not isinstance(value, bool):
        try:
            return Decimal(str(value))
        except InvalidOperation:
            pass
    msg = f"Cannot convert {type(value).__name__} to Decimal"
    raise TypeError(msg)


def _convert_to_uuid(value: Any) -> UUID:
    if isinstance(value, UUID):
        return value
    if isinstance(value, str):
        try:
            return UUID(value)
        except ValueError:
            pass
    if isinstance(value, bytes):
        try:
            return UUID(bytes=value)
        except ValueError:
            pass
    msg = f"Cannot convert {type(value).__name__} to UUID"
    raise TypeError(msg)


def _convert_to_bytes(value: Any) -> bytes:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, str):
        return value.encode("utf-8")
    msg = f"Cannot convert {type(value).__name__} to bytes"
    raise TypeError(msg)


def _convert_to_dict(value: Any) -> "dict[str, Any]":
    """Convert a JSON text column to dict."""
    if isinstance(value, dict):
        return value
    if isinstance(value, (str, bytes)):
        parsed = from_json(value)
        if isinstance(parsed, dict):
            return parsed
        msg = f"JSON string did not parse to dict, got {type(parsed).__name__}"
        raise TypeError(msg)
    msg = f"Cannot convert {type(value).__name__} to dict"
    raise TypeError(msg)


def _convert_to_list(value: Any) -> "list[Any]":
    """Convert a JSON array column (or any tuple/set) to list."""
    if isinstance(value, list):
        return value
    if isinstance(value, (str, bytes)):
        parsed = from_json(value)
        if isinstance(parsed, list):
            return parsed
        msg = f"JSON string did not parse to list, got {type(parsed).__name__}"
        raise TypeError(msg)
    if isinstance(value, (tuple, set, frozenset)):
        return list(value)
    msg = f"Cannot convert {type(value).__name__} to list"
    raise TypeError(msg)


_CONVERTERS: "Final[dict[type, Any]]" = {
    int: _convert_to_int,
    float: _convert_to_float,
    str: str,
    bool: _convert_to_bool,
    datetime.datetime: _convert_to_datetime,
    datetime.date: _convert_to_date,
    datetime.time: _convert_to_time,
    Decimal: _convert_to_decimal,
    UUID: _convert_to_uuid,
    bytes: _convert_to_bytes,
    dict: _convert_to_dict,
    list: _convert_to_list,
}


def to_value_type(value: Any, value_type: "type[ValueT]") -> "ValueT":
    """Convert a database value to the specified Python type.

    When the value already has the requested type it is returned as-is.

    Args:
        value: The value to convert.
        value_type: The target Python type.

    Returns:
        The converted value of the specified type.

    Raises:
        TypeError: If the value cannot be converted to the specified type.

    Examples:
        >>> to_value_type("42", int)
        42
        >>> to_value_type(True, int)
        1
    """
    # bool subclasses int and datetime subclasses date, so those need an exact match
    if value_type in (int, bool, datetime.date, datetime.time):
        if type(value) is value_type:
            return cast("ValueT", value)
    elif isinstance(value_type, type) and isinstance(value, value_type):
        return value

    converter = _CONVERTERS.get(value_type)  # type: ignore[arg-type]
    if converter is not None:
        return cast("ValueT", converter(value))

    try:
        return value_type(value)  # type: ignore[call-arg]
    except (TypeError, ValueError) as e:
        msg = f"Cannot convert {type(value).__name__} to {getattr(value_type, '__name__', value_type)}"
        raise TypeError(msg) from e
