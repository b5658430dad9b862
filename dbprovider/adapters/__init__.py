"""Driver profiles: the few pass-through hooks that differ between DB-API modules."""

from dbprovider.adapters._profile import DriverProfile, resolve_rowcount
from dbprovider.adapters.dbapi import dbapi_profile
from dbprovider.adapters.sqlite import sqlite_profile

__all__ = ("DriverProfile", "dbapi_profile", "get_driver_profile", "resolve_rowcount", "sqlite_profile")

_PROFILES: "dict[str, DriverProfile]" = {sqlite_profile.name: sqlite_profile}


def get_driver_profile(driver: str) -> DriverProfile:
    """Return the profile for a driver module name, the generic DB-API profile when none is registered.

    Args:
        driver: Dotted name of the DB-API module, e.g. ``"sqlite3"`` or ``"psycopg"``.

    Returns:
        The matching driver profile.
    """
    return _PROFILES.get(driver, dbapi_profile)
