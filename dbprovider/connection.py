"""Lazily opened DB-API connection handle."""

from typing import Any

from dbprovider.adapters import DriverProfile, get_driver_profile
from dbprovider.config import ConnectionConfig
from dbprovider.exceptions import MissingDependencyError
from dbprovider.typing import ConnectionState
from dbprovider.utils.logging import get_logger
from dbprovider.utils.module_loader import import_string

__all__ = ("DbConnection",)

logger = get_logger("connection")


class DbConnection:
    """Owns one DB-API connection, opened on demand.

    Args:
        config: Connection configuration to open.
    """

    __slots__ = ("_connection", "_driver", "config", "profile")

    def __init__(self, config: ConnectionConfig) -> None:
        self.config = config
        self.profile: DriverProfile = get_driver_profile(config.driver)
        self._driver: Any = None
        self._connection: Any = None

    @property
    def state(self) -> ConnectionState:
        return ConnectionState.CLOSED if self._connection is None else ConnectionState.OPEN

    @property
    def raw(self) -> Any:
        """The underlying driver connection, ``None`` while closed."""
        return self._connection

    def _load_driver(self) -> Any:
        if self._driver is None:
            try:
                self._driver = import_string(self.config.driver)
            except ImportError as e:
                raise MissingDependencyError(self.config.driver) from e
        return self._driver

    def open(self) -> Any:
        """Open the connection unless it is already open.

        Returns:
            The underlying driver connection.
        """
        if self._connection is not None:
            return self._connection
        driver = self._load_driver()
        kwargs = self.profile.build_connect_kwargs(self.config.connection_string, self.config.connect_kwargs)
        connection = driver.connect(self.config.connection_string, **kwargs)
        self.profile.on_connect(connection)
        self._connection = connection
        logger.debug(
            "Opened connection %s",
            self.config.name,
            extra={"extra_fields": {"connection": self.config.name, "driver": self.config.driver}},
        )
        return connection

    def cursor(self) -> Any:
        return self.open().cursor()

    def begin(self) -> None:
        self.profile.begin(self.open())

    def commit(self) -> None:
        connection = self.open()
        try:
            connection.commit()
        finally:
            self.profile.end(connection)

    def rollback(self) -> None:
        connection = self.open()
        try:
            connection.rollback()
        finally:
            self.profile.end(connection)

    def coerce(self, value: Any) -> Any:
        return self.profile.coerce(value)

    def close(self) -> None:
        """Close the connection. Closing a closed connection does nothing."""
        connection, self._connection = self._connection, None
        if connection is None:
            return
        connection.close()
        logger.debug("Closed connection %s", self.config.name)

    def __repr__(self) -> str:
        return f"DbConnection(name={self.config.name!r}, driver={self.config.driver!r}, state={self.state.value})"
