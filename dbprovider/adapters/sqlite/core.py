"""SQLite pass-through hooks for the stdlib ``sqlite3`` module."""

import time
from collections.abc import Generator
from contextlib import contextmanager
from datetime import date, datetime
from datetime import time as time_of_day
from decimal import Decimal
from typing import Any, Final, Optional
from uuid import UUID

from dbprovider.adapters._profile import DriverProfile
from dbprovider.utils.logging import get_logger

__all__ = ("build_connect_kwargs", "sqlite_profile")

logger = get_logger("adapters.sqlite")

# virtual machine instructions between deadline checks
PROGRESS_HANDLER_STEPS: Final = 1000


def _bool_to_int(value: bool) -> int:
    return int(value)


def _to_iso(value: "datetime | date | time_of_day") -> str:
    return value.isoformat()


def _decimal_to_str(value: Decimal) -> str:
    return str(value)


def _uuid_to_str(value: UUID) -> str:
    return str(value)


def build_connect_kwargs(connection_string: str, kwargs: "dict[str, Any]") -> "dict[str, Any]":
    """Finalize ``sqlite3.connect`` keyword arguments.

    Args:
        connection_string: Database path, ``:memory:`` or a ``file:`` URI.
        kwargs: Defaults merged with configured overrides.

    Returns:
        Keyword arguments for ``sqlite3.connect``.
    """
    if connection_string.startswith("file:") and not kwargs.get("uri"):
        logger.debug(
            "Database URI detected (%s) but uri=True not set. Auto-enabling URI mode.",
            connection_string,
        )
        kwargs["uri"] = True
    return kwargs


def _begin(connection: Any) -> None:
    connection.execute("BEGIN")


class _Deadline:
    """Progress handler that interrupts the running statement once the deadline passes."""

    __slots__ = ("_deadline",)

    def __init__(self, timeout_ms: int) -> None:
        self._deadline = time.monotonic() + timeout_ms / 1000

    def __call__(self) -> int:
        return 1 if time.monotonic() > self._deadline else 0


@contextmanager
def _command_timeout(connection: Any, timeout: "Optional[int]") -> "Generator[None, None, None]":
    """Interrupt statements that run past ``timeout`` milliseconds.

    SQLite reports the interruption as ``sqlite3.OperationalError``.
    """
    if not timeout or timeout <= 0:
        yield
        return
    connection.set_progress_handler(_Deadline(timeout), PROGRESS_HANDLER_STEPS)
    try:
        yield
    finally:
        connection.set_progress_handler(None, 0)


sqlite_profile = DriverProfile(
    name="sqlite3",
    # autocommit outside explicit transactions
    connect_defaults={"isolation_level": None},
    type_coercions={
        bool: _bool_to_int,
        datetime: _to_iso,
        date: _to_iso,
        time_of_day: _to_iso,
        Decimal: _decimal_to_str,
        UUID: _uuid_to_str,
    },
    prepare_connect=build_connect_kwargs,
    begin=_begin,
    command_timeout=_command_timeout,
)
