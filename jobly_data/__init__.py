"""Jobly data-access layer: safe SQL fragments, query assembly, and row aggregation."""

from .config import Settings
from .core import *  # noqa: F401,F403
from .core import __all__ as _core_all
from .ports import Database, Dialect, PoolConnector, PostgresDialect, SQLiteDialect, open_database

__all__ = [
    *_core_all,
    "Settings",
    "Database",
    "Dialect",
    "PoolConnector",
    "PostgresDialect",
    "SQLiteDialect",
    "open_database",
]
