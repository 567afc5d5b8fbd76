"""Public port exports for concrete adapter implementations."""

from .db_api import Database, Dialect, PoolConnector, PostgresDialect, SQLiteDialect, open_database

__all__ = [
    "Database",
    "Dialect",
    "PoolConnector",
    "PostgresDialect",
    "SQLiteDialect",
    "open_database",
]
