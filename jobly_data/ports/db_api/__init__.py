"""DB-API adapter and dialect exports."""

from .connect import open_database
from .database import Database
from .dialects import Dialect, PostgresDialect, SQLiteDialect
from .pool_connector import PoolConnector

__all__ = [
    "Database",
    "Dialect",
    "PoolConnector",
    "PostgresDialect",
    "SQLiteDialect",
    "open_database",
]
