"""Core port contracts used by adapters and repositories."""

from __future__ import annotations

from contextlib import AbstractContextManager
from typing import Protocol

from .types import MaybeRow, PositionalParams, Rows


class DialectPort(Protocol):
    """Dialect behavior required by fragment compilation and assembly."""

    paramstyle: str
    like_operator: str

    def q(self, ident: str) -> str: ...

    def qualified(self, table: str, ident: str) -> str: ...

    def placeholder(self, position: int) -> str: ...

    def returning_clause(self, columns_sql: str) -> str: ...


class DatabasePort(Protocol):
    """Statement execution capability required by the repositories."""

    dialect: DialectPort

    def transaction(self) -> AbstractContextManager[None]: ...

    def execute(self, sql: str, params: PositionalParams | None = None) -> int: ...

    def fetchone(self, sql: str, params: PositionalParams | None = None) -> MaybeRow: ...

    def fetchall(self, sql: str, params: PositionalParams | None = None) -> Rows: ...
