"""Generic PEP 249 hooks for drivers without a dedicated profile."""

import math
from collections.abc import Generator
from contextlib import contextmanager
from typing import Any, Optional

from dbprovider.adapters._profile import DriverProfile

__all__ = ("dbapi_profile",)


def _set_autocommit(connection: Any, enabled: bool) -> None:
    """Switch autocommit through the attribute (psycopg, pyodbc) or the method (MySQLdb) the driver exposes."""
    autocommit = getattr(connection, "autocommit", None)
    if callable(autocommit):
        autocommit(enabled)
    elif hasattr(connection, "autocommit"):
        connection.autocommit = enabled


def _enable_autocommit(connection: Any) -> None:
    _set_autocommit(connection, True)


def _disable_autocommit(connection: Any) -> None:
    _set_autocommit(connection, False)


@contextmanager
def _command_timeout(connection: Any, timeout: "Optional[int]") -> "Generator[None, None, None]":
    """Map the timeout onto a connection-level ``timeout`` attribute (seconds) when the driver has one."""
    if not timeout or timeout <= 0 or not hasattr(connection, "timeout"):
        yield
        return
    previous = connection.timeout
    connection.timeout = max(1, math.ceil(timeout / 1000))
    try:
        yield
    finally:
        connection.timeout = previous


dbapi_profile = DriverProfile(
    name="dbapi",
    on_connect=_enable_autocommit,
    begin=_disable_autocommit,
    end=_enable_autocommit,
    command_timeout=_command_timeout,
)
