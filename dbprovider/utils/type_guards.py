"""Type guard functions for runtime type checking in dbprovider.

These checks let the mapper tell dataclasses, msgspec structs, enums and optional
annotations apart without defensive ``hasattr()`` chains at every call site.
"""

import datetime
import types
from collections.abc import Mapping
from decimal import Decimal
from enum import Enum
from typing import Any, Union, get_args, get_origin
from uuid import UUID

import msgspec
from typing_extensions import TypeGuard

from dbprovider.parameters import DbParam

__all__ = (
    "VALUE_TYPES",
    "is_dataclass",
    "is_dataclass_instance",
    "is_db_param",
    "is_enum_type",
    "is_frozen",
    "is_mapping",
    "is_msgspec_struct",
    "is_msgspec_struct_type",
    "is_value_type",
    "unwrap_optional",
)

VALUE_TYPES: "frozenset[type]" = frozenset(
    {int, float, str, bool, bytes, Decimal, datetime.datetime, datetime.date, datetime.time, UUID}
)


def is_dataclass_instance(obj: Any) -> bool:
    """Check if an object is a dataclass instance.

    Args:
        obj: An object to check.

    Returns:
        True if the object is a dataclass instance.
    """
    return not isinstance(obj, type) and hasattr(type(obj), "__dataclass_fields__")


def is_dataclass(obj: Any) -> bool:
    """Check if an object is a dataclass type or instance.

    Args:
        obj: Value to check.

    Returns:
        bool
    """
    if isinstance(obj, type) and hasattr(obj, "__dataclass_fields__"):
        return True
    return is_dataclass_instance(obj)


def is_msgspec_struct(obj: Any) -> "TypeGuard[msgspec.Struct]":
    """Check if a value is a msgspec struct instance.

    Args:
        obj: Value to check.

    Returns:
        bool
    """
    return isinstance(obj, msgspec.Struct)


def is_msgspec_struct_type(obj: Any) -> "TypeGuard[type[msgspec.Struct]]":
    """Check if a value is a msgspec struct class."""
    return isinstance(obj, type) and issubclass(obj, msgspec.Struct)


def is_mapping(obj: Any) -> "TypeGuard[Mapping[str, Any]]":
    return isinstance(obj, Mapping)


def is_db_param(obj: Any) -> "TypeGuard[DbParam]":
    return isinstance(obj, DbParam)


def is_enum_type(obj: Any) -> "TypeGuard[type[Enum]]":
    """Check if a value is an Enum class."""
    return isinstance(obj, type) and get_origin(obj) is None and issubclass(obj, Enum)


def is_value_type(obj: Any) -> bool:
    """Check if a target type is scalar, i.e. coerced from a single column.

    Args:
        obj: Target type to check.

    Returns:
        True for primitives, temporal types, Decimal, UUID, bytes and enums.
    """
    if not isinstance(obj, type) or get_origin(obj) is not None:
        return False
    return obj in VALUE_TYPES or issubclass(obj, Enum)


def is_frozen(obj: Any) -> bool:
    """Check if a dataclass or msgspec struct (type or instance) is frozen."""
    cls = obj if isinstance(obj, type) else type(obj)
    params = getattr(cls, "__dataclass_params__", None)
    if params is not None:
        return bool(params.frozen)
    if is_msgspec_struct_type(cls):
        return bool(cls.__struct_config__.frozen)
    return False


def unwrap_optional(annotation: Any) -> "tuple[Any, bool]":
    """Split ``Optional[X]`` (or ``X | None``) into ``(X, True)``.

    Unions with more than one non-None member are returned unchanged.

    Args:
        annotation: Type annotation to inspect.

    Returns:
        The underlying type and whether the annotation was an optional wrapper.
    """
    origin = get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        members = [arg for arg in get_args(annotation) if arg is not type(None)]
        if len(members) == 1 and len(members) < len(get_args(annotation)):
            return members[0], True
    return annotation, False
