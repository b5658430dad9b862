"""Property mapper: read named fields off objects and populate objects from row maps.

Used in two directions by :class:`~dbprovider.provider.DbProvider`:

- turning a parameters object into named bindings (:func:`extract_properties`)
- populating result objects from a ``column -> value`` row (:func:`apply_properties`,
  :func:`create_instance`)

Readable fields are mapping keys, dataclass fields, msgspec struct fields, annotated
class attributes, public instance attributes and readable properties. Enum values
are read as their member name. On the write side unknown names are skipped and
values are coerced to the declared annotation of the target field.
"""

import dataclasses
from collections.abc import Iterator, Mapping, MutableMapping
from enum import Enum
from functools import lru_cache
from typing import Any, ClassVar, Optional, cast, get_origin, get_type_hints

from dbprovider.typing import Empty, EmptyType, SchemaT
from dbprovider.utils.logging import get_logger
from dbprovider.utils.schema import to_value_type
from dbprovider.utils.type_guards import (
    is_dataclass,
    is_dataclass_instance,
    is_enum_type,
    is_frozen,
    is_mapping,
    is_msgspec_struct,
    is_msgspec_struct_type,
    unwrap_optional,
)

__all__ = (
    "apply_properties",
    "apply_property",
    "coerce_value",
    "create_instance",
    "extract_properties",
    "extract_property",
)

logger = get_logger("mapping")

_NO_ANNOTATION: Any = object()


@lru_cache(maxsize=256)
def _field_types(cls: type) -> "dict[str, Any]":
    """Resolve the annotated fields of a class, ``ClassVar`` entries excluded."""
    try:
        hints = get_type_hints(cls)
    except Exception:  # noqa: BLE001
        # unresolvable forward references: fall back to the raw annotations
        hints = {}
        for base in reversed(cls.__mro__):
            hints.update(getattr(base, "__annotations__", {}))
    return {
        name: hint
        for name, hint in hints.items()
        if get_origin(hint) is not ClassVar and hint is not ClassVar and not name.startswith("_")
    }


@lru_cache(maxsize=256)
def _class_properties(cls: type) -> "dict[str, property]":
    found: dict[str, property] = {}
    for base in reversed(cls.__mro__):
        for name, attr in vars(base).items():
            if isinstance(attr, property) and not name.startswith("_"):
                found[name] = attr
    return found


@lru_cache(maxsize=256)
def _slot_names(cls: type) -> "frozenset[str]":
    names: set[str] = set()
    for base in cls.__mro__:
        slots = vars(base).get("__slots__", ())
        if isinstance(slots, str):
            slots = (slots,)
        names.update(slot for slot in slots if not slot.startswith("_"))
    return frozenset(names)


def _property_annotation(prop: property) -> Any:
    if prop.fget is None:
        return _NO_ANNOTATION
    try:
        return get_type_hints(prop.fget).get("return", _NO_ANNOTATION)
    except Exception:  # noqa: BLE001
        return _NO_ANNOTATION


def _readable_value(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.name
    return value


def _readable_names(obj: Any) -> "list[str]":
    """Public readable field names of ``obj`` in declaration order."""
    if is_dataclass_instance(obj):
        names = [field.name for field in dataclasses.fields(obj)]
    elif is_msgspec_struct(obj):
        names = list(obj.__struct_fields__)
    else:
        # annotated class attributes still holding their default are not in __dict__
        names = [name for name in _field_types(type(obj)) if hasattr(obj, name)]
        names.extend(name for name in getattr(obj, "__dict__", {}) if not name.startswith("_") and name not in names)
        names.extend(name for name in sorted(_slot_names(type(obj))) if hasattr(obj, name) and name not in names)
    names.extend(
        name for name, prop in _class_properties(type(obj)).items() if prop.fget is not None and name not in names
    )
    return [name for name in names if not name.startswith("_")]


def extract_properties(obj: Any) -> "Iterator[tuple[str, Any]]":
    """Yield ``(name, value)`` for every public readable field of ``obj``.

    Args:
        obj: Any object: a mapping, dataclass, msgspec struct, namespace or plain instance.

    Yields:
        Field name and value; enum values are converted to their member name.
    """
    if is_mapping(obj):
        for key, value in obj.items():
            yield str(key), _readable_value(value)
        return
    for name in _readable_names(obj):
        yield name, _readable_value(getattr(obj, name))


def extract_property(obj: Any, name: str) -> "Any | EmptyType":
    """Return the value of a single readable field.

    Args:
        obj: Object to read from.
        name: Field name.

    Returns:
        The value (enums stringified), or :data:`~dbprovider.typing.Empty` if no such field exists.
    """
    if is_mapping(obj):
        return _readable_value(obj[name]) if name in obj else Empty
    if name.startswith("_") or name not in _readable_names(obj):
        return Empty
    return _readable_value(getattr(obj, name))


def _to_enum(enum_type: "type[Enum]", value: Any) -> Enum:
    """Convert a raw value to ``enum_type`` by member name, then by value."""
    if isinstance(value, enum_type):
        return value
    if isinstance(value, str) and value in enum_type.__members__:
        return enum_type[value]
    return enum_type(value)


def coerce_value(value: Any, annotation: Any) -> Any:
    """Coerce ``value`` to the type described by ``annotation``.

    ``None`` passes through. ``Optional[X]`` is unwrapped to ``X``. Enum targets use
    name/value lookup, other concrete types go through
    :func:`~dbprovider.utils.schema.to_value_type`. Annotations that are not
    concrete classes (``Any``, multi-member unions, ``Literal``) leave the value as is.

    Raises:
        TypeError: If the value cannot be converted.
        ValueError: If an enum lookup fails.
    """
    if value is None or annotation is _NO_ANNOTATION or annotation is Any:
        return value
    target, _ = unwrap_optional(annotation)
    origin = get_origin(target)
    if origin is not None:
        target = origin
    if is_enum_type(target):
        return _to_enum(target, value)
    if not isinstance(target, type):
        return value
    return to_value_type(value, target)


def _writable_annotation(obj: Any, name: str) -> Any:
    """Return the annotation of writable field ``name``, ``None`` when the field is not writable."""
    if name.startswith("_") or is_frozen(obj):
        return None
    cls = type(obj)
    prop = _class_properties(cls).get(name)
    if prop is not None:
        return _property_annotation(prop) if prop.fset is not None else None
    hints = _field_types(cls)
    if name in hints:
        return hints[name]
    if name in getattr(obj, "__dict__", {}) or name in _slot_names(cls):
        return _NO_ANNOTATION
    return None


def apply_property(obj: Any, name: str, value: Any) -> bool:
    """Write a single field of ``obj`` with coercion.

    Args:
        obj: Target object.
        name: Field name.
        value: Raw value, ``None`` writes ``None``.

    Returns:
        True if a writable field was found and written, False if it was skipped.
    """
    if isinstance(obj, MutableMapping):
        obj[name] = value
        return True
    annotation = _writable_annotation(obj, name)
    if annotation is None:
        return False
    setattr(obj, name, coerce_value(value, annotation))
    return True


def apply_properties(obj: Any, properties: "Mapping[str, Any]") -> None:
    """Write every entry of ``properties`` onto the matching writable field of ``obj``.

    Entries without a writable field are skipped without error.

    Args:
        obj: Target object.
        properties: Field name to raw value mapping.
    """
    skipped = [name for name, value in properties.items() if not apply_property(obj, name, value)]
    if skipped:
        logger.debug("Skipped fields without a writable target on %s: %s", type(obj).__name__, skipped)


def _init_field_names(schema_type: type) -> "Optional[list[str]]":
    if is_dataclass(schema_type):
        return [field.name for field in dataclasses.fields(schema_type) if field.init]
    if is_msgspec_struct_type(schema_type):
        return list(schema_type.__struct_fields__)
    return None


def create_instance(schema_type: "type[SchemaT]", properties: "Mapping[str, Any]") -> "SchemaT":
    """Build an instance of ``schema_type`` from a name -> value mapping.

    Dataclasses and msgspec structs are constructed with their coerced init
    fields; a missing required field raises the constructor's ``TypeError``.
    Other classes are instantiated without arguments and populated with
    :func:`apply_properties`.

    Args:
        schema_type: Class to build.
        properties: Row map or any field name to value mapping.

    Returns:
        The populated instance.
    """
    init_fields = _init_field_names(schema_type)
    if init_fields is None:
        instance = schema_type()
        apply_properties(instance, properties)
        return instance

    hints = _field_types(schema_type)
    kwargs = {
        name: coerce_value(properties[name], hints.get(name, _NO_ANNOTATION))
        for name in init_fields
        if name in properties
    }
    instance = schema_type(**kwargs)
    remaining = {name: value for name, value in properties.items() if name not in kwargs}
    if remaining and not is_frozen(schema_type):
        apply_properties(instance, remaining)
    return cast("SchemaT", instance)
