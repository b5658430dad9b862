from __future__ import annotations

import sqlite3
import sys
from collections.abc import Generator
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from dbprovider import ConnectionConfig, ConnectionRegistry, DbProvider

SEED_SQL = """
CREATE TABLE rides (
    id INTEGER PRIMARY KEY,
    confirmation_no TEXT NOT NULL,
    affiliate INTEGER NOT NULL,
    pickup_date_time TEXT,
    fare TEXT,
    status INTEGER,
    notes TEXT
);
INSERT INTO rides VALUES (1, 'A-100', 123, '2024-01-15T08:30:00', '12.50', 1, NULL);
INSERT INTO rides VALUES (2, 'A-101', 123, '2024-01-16T09:45:00', '30.00', 2, 'airport');
INSERT INTO rides VALUES (3, 'B-200', 456, NULL, NULL, NULL, NULL);
CREATE TABLE settings (name TEXT PRIMARY KEY, value TEXT);
INSERT INTO settings VALUES ('theme', 'dark');
INSERT INTO settings VALUES ('locale', 'en');
INSERT INTO settings VALUES ('timezone', 'UTC');
"""


@pytest.fixture
def database_path(tmp_path: Path) -> Path:
    path = tmp_path / "provider.db"
    connection = sqlite3.connect(path)
    try:
        connection.executescript(SEED_SQL)
        connection.commit()
    finally:
        connection.close()
    return path


@pytest.fixture
def registry(database_path: Path) -> ConnectionRegistry:
    registry = ConnectionRegistry()
    registry.register("main", str(database_path))
    return registry


@pytest.fixture
def provider(registry: ConnectionRegistry) -> Generator[DbProvider, None, None]:
    with DbProvider("main", registry=registry) as db:
        yield db


@pytest.fixture
def fake_driver(monkeypatch: pytest.MonkeyPatch) -> MagicMock:
    """A PEP 249 module stand-in registered as ``fake_dbapi``."""
    driver = MagicMock(name="fake_dbapi")
    driver.paramstyle = "named"
    driver.connect.return_value.autocommit = False
    monkeypatch.setitem(sys.modules, "fake_dbapi", driver)
    return driver


@pytest.fixture
def fake_config() -> ConnectionConfig:
    return ConnectionConfig(name="fake", connection_string="dsn://fake", driver="fake_dbapi", connect_kwargs={"x": 1})
