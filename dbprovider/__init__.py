"""dbprovider: a fluent helper for parameterized SQL commands over DB-API drivers."""

from dbprovider import adapters, config, exceptions, mapping, typing, utils
from dbprovider.__metadata__ import __version__
from dbprovider.command import DbCommand
from dbprovider.config import ConnectionConfig, ConnectionRegistry, connection_strings
from dbprovider.connection import DbConnection
from dbprovider.exceptions import (
    CommandNotCreatedError,
    DbProviderError,
    ImproperConfigurationError,
    InvalidParameterTypeError,
    MissingDependencyError,
    ProviderClosedError,
    TransactionError,
    UnsupportedOperationError,
)
from dbprovider.mapping import apply_properties, create_instance, extract_properties, extract_property
from dbprovider.parameters import BoundParameter, DbParam, ParameterCollection
from dbprovider.provider import DbProvider
from dbprovider.result import RowStream
from dbprovider.transaction import DbTransaction
from dbprovider.typing import CommandType, ConnectionState, DbType, Empty

__all__ = (
    "BoundParameter",
    "CommandNotCreatedError",
    "CommandType",
    "ConnectionConfig",
    "ConnectionRegistry",
    "ConnectionState",
    "DbCommand",
    "DbConnection",
    "DbParam",
    "DbProvider",
    "DbProviderError",
    "DbTransaction",
    "DbType",
    "Empty",
    "ImproperConfigurationError",
    "InvalidParameterTypeError",
    "MissingDependencyError",
    "ParameterCollection",
    "ProviderClosedError",
    "RowStream",
    "TransactionError",
    "UnsupportedOperationError",
    "__version__",
    "adapters",
    "apply_properties",
    "config",
    "connection_strings",
    "create_instance",
    "exceptions",
    "extract_properties",
    "extract_property",
    "mapping",
    "typing",
    "utils",
)
