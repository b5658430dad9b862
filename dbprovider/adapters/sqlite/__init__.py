from dbprovider.adapters.sqlite.core import build_connect_kwargs, sqlite_profile

__all__ = ("build_connect_kwargs", "sqlite_profile")
