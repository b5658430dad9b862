from collections.abc import Callable, Generator, Mapping
from contextlib import AbstractContextManager, contextmanager
from dataclasses import dataclass, field
from typing import Any, Optional

__all__ = ("DriverProfile", "resolve_rowcount")


@contextmanager
def _no_timeout(connection: Any, timeout: "Optional[int]") -> "Generator[None, None, None]":
    yield


def _noop(connection: Any) -> None:
    return None


def resolve_rowcount(cursor: Any) -> int:
    """Resolve rowcount from a DB-API cursor.

    Args:
        cursor: Cursor with optional rowcount metadata.

    Returns:
        Positive rowcount value or 0 when unknown.
    """
    try:
        rowcount = cursor.rowcount
    except AttributeError:
        return 0

    if isinstance(rowcount, int) and rowcount > 0:
        return rowcount
    return 0


@dataclass(frozen=True)
class DriverProfile:
    """Driver-specific hooks applied around plain DB-API calls.

    Attributes:
        name: Driver module name the profile applies to.
        connect_defaults: Keyword arguments passed to ``connect()`` unless overridden.
        type_coercions: Python type -> callable applied to parameter values before binding.
        prepare_connect: Hook receiving ``(connection_string, kwargs)`` and returning final kwargs.
        on_connect: Called once with the fresh connection.
        begin: Starts an explicit transaction on the connection.
        end: Restores autocommit behavior after commit or rollback.
        command_timeout: Context manager factory ``(connection, timeout_ms)`` wrapping execution.
    """

    name: str
    connect_defaults: "Mapping[str, Any]" = field(default_factory=dict)
    type_coercions: "Mapping[type, Callable[[Any], Any]]" = field(default_factory=dict)
    prepare_connect: "Optional[Callable[[str, dict[str, Any]], dict[str, Any]]]" = None
    on_connect: "Callable[[Any], None]" = _noop
    begin: "Callable[[Any], None]" = _noop
    end: "Callable[[Any], None]" = _noop
    command_timeout: "Callable[[Any, Optional[int]], AbstractContextManager[None]]" = _no_timeout

    def build_connect_kwargs(self, connection_string: str, overrides: "Mapping[str, Any]") -> "dict[str, Any]":
        kwargs = {**self.connect_defaults, **overrides}
        if self.prepare_connect is not None:
            kwargs = self.prepare_connect(connection_string, kwargs)
        return kwargs

    def coerce(self, value: Any) -> Any:
        """Apply the driver type coercion registered for ``value``'s type, if any."""
        if value is None or not self.type_coercions:
            return value
        converter = self.type_coercions.get(type(value))
        if converter is None:
            for value_type, candidate in self.type_coercions.items():
                if isinstance(value, value_type):
                    converter = candidate
                    break
            else:
                return value
        return converter(value)
