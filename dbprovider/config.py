"""Named connection configuration.

A :class:`DbProvider <dbprovider.provider.DbProvider>` is created with a connection
name; the name is resolved against a :class:`ConnectionRegistry`. Entries are
registered in code or read from the environment::

    DBPROVIDER_CONNECTION_REPORTING=/var/lib/app/reporting.db
    DBPROVIDER_DRIVER_REPORTING=sqlite3
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Optional

from dbprovider.exceptions import ImproperConfigurationError
from dbprovider.utils.logging import get_logger

__all__ = (
    "DEFAULT_DRIVER",
    "DRIVER_ENV_PREFIX",
    "ENV_PREFIX",
    "ConnectionConfig",
    "ConnectionRegistry",
    "connection_strings",
)

logger = get_logger("config")

DEFAULT_DRIVER = "sqlite3"
ENV_PREFIX = "DBPROVIDER_CONNECTION_"
DRIVER_ENV_PREFIX = "DBPROVIDER_DRIVER_"


@dataclass(frozen=True)
class ConnectionConfig:
    """A named connection string together with the DB-API module that opens it.

    Attributes:
        name: Lookup key.
        connection_string: Passed as the first positional argument of ``connect()``.
        driver: Dotted import path of a PEP 249 module.
        connect_kwargs: Extra keyword arguments for ``connect()``.
    """

    name: str
    connection_string: str
    driver: str = DEFAULT_DRIVER
    connect_kwargs: "Mapping[str, Any]" = field(default_factory=dict)


class ConnectionRegistry:
    """Registry of named connection configurations."""

    __slots__ = ("_configs",)

    def __init__(self, configs: "Optional[list[ConnectionConfig]]" = None) -> None:
        self._configs: dict[str, ConnectionConfig] = {}
        for config in configs or []:
            self.add_config(config)

    def add_config(self, config: ConnectionConfig) -> ConnectionConfig:
        """Add a configuration, replacing an existing entry with the same name.

        Args:
            config: The configuration to register.

        Returns:
            The registered configuration.
        """
        if config.name in self._configs:
            logger.debug("Configuration for %s already exists. Overwriting...", config.name)
        self._configs[config.name] = config
        return config

    def register(
        self, name: str, connection_string: str, driver: str = DEFAULT_DRIVER, **connect_kwargs: Any
    ) -> ConnectionConfig:
        """Build and add a :class:`ConnectionConfig`."""
        config = ConnectionConfig(
            name=name, connection_string=connection_string, driver=driver, connect_kwargs=connect_kwargs
        )
        return self.add_config(config)

    def get_config(self, name: str) -> ConnectionConfig:
        """Resolve a configuration by name.

        Args:
            name: The connection name.

        Raises:
            ImproperConfigurationError: If no configuration is registered under ``name``.

        Returns:
            The configuration.
        """
        config = self._configs.get(name)
        if config is None:
            msg = f"No connection configuration found for {name!r}"
            raise ImproperConfigurationError(msg)
        return config

    def remove_config(self, name: str) -> None:
        self._configs.pop(name, None)

    def clear(self) -> None:
        self._configs.clear()

    def load_environment(self, environ: "Optional[Mapping[str, str]]" = None, prefix: str = ENV_PREFIX) -> "list[str]":
        """Register every ``<prefix><NAME>=<connection string>`` entry of the environment.

        The connection name is the suffix after ``prefix`` in lower case. A matching
        ``DBPROVIDER_DRIVER_<NAME>`` entry selects the driver module.

        Args:
            environ: Mapping to read, ``os.environ`` by default.
            prefix: Variable name prefix.

        Raises:
            ImproperConfigurationError: If a matching variable has an empty name or value.

        Returns:
            The names that were registered.
        """
        source = os.environ if environ is None else environ
        registered: list[str] = []
        for key, value in source.items():
            if not key.startswith(prefix):
                continue
            suffix = key[len(prefix) :]
            if not suffix or not value:
                msg = f"Environment variable {key!r} must name a connection and carry a connection string"
                raise ImproperConfigurationError(msg)
            driver = source.get(f"{DRIVER_ENV_PREFIX}{suffix}", DEFAULT_DRIVER)
            self.register(suffix.lower(), value, driver=driver)
            registered.append(suffix.lower())
        return registered

    def __contains__(self, name: object) -> bool:
        return name in self._configs

    def __len__(self) -> int:
        return len(self._configs)

    def __repr__(self) -> str:
        return f"ConnectionRegistry({sorted(self._configs)!r})"


connection_strings = ConnectionRegistry()
"""Process-wide default registry."""
