"""DB-API adapter implementation for the core database port."""

from __future__ import annotations

import contextlib
import logging
import threading
from typing import Any, Callable, Iterator, List, Mapping

from ...core.errors import StorageError
from ...core.types import MaybeRow, PositionalParams, Record
from .dialects import Dialect
from .pool_connector import PoolConnector

logger = logging.getLogger(__name__)


class Database:
    """Thin DB-API wrapper with scoped connection use and row normalization.

    Every statement borrows a connection, runs, and gives the connection back
    on every exit path. Outside `transaction()` each statement is committed
    on success and rolled back on failure. Inside `transaction()` the calling
    thread keeps one connection until the block ends.
    """

    def __init__(
        self,
        conn: Any | PoolConnector,
        dialect: Dialect,
        *,
        log_sql: bool = False,
    ):
        """Create database adapter.

        Args:
            conn: DB-API connection object or `PoolConnector`.
            dialect: Concrete SQL dialect instance.
            log_sql: Log statement text at DEBUG level.
        """

        self._pool: PoolConnector | None = conn if isinstance(conn, PoolConnector) else None
        self.conn: Any | None = None if self._pool is not None else conn
        self.dialect = dialect
        self.log_sql = log_sql
        self._closed = False
        self._local = threading.local()

    def _require_open(self) -> None:
        if self._closed:
            raise RuntimeError("connection is closed")

    @property
    def in_transaction(self) -> bool:
        return getattr(self._local, "conn", None) is not None

    @contextlib.contextmanager
    def _borrow(self) -> Iterator[Any]:
        self._require_open()
        pinned = getattr(self._local, "conn", None)
        if pinned is not None:
            yield pinned
        elif self._pool is not None:
            with self._pool.connection() as conn:
                yield conn
        else:
            yield self.conn

    def _should_begin_sqlite_transaction(self, conn: Any) -> bool:
        if self.dialect.name != "sqlite":
            return False
        if getattr(conn, "isolation_level", None) is not None:
            return False
        return not bool(getattr(conn, "in_transaction", False))

    @contextlib.contextmanager
    def transaction(self) -> Iterator[None]:
        """Provide commit/rollback transaction scope (re-entrant per thread)."""

        if self.in_transaction:
            yield
            return

        with self._borrow() as conn:
            self._local.conn = conn
            try:
                if self._should_begin_sqlite_transaction(conn):
                    conn.execute("BEGIN")
                yield
                conn.commit()
            except BaseException:
                conn.rollback()
                raise
            finally:
                self._local.conn = None

    def _run(
        self,
        sql: str,
        params: PositionalParams | None,
        collect: Callable[[Any], Any],
    ) -> Any:
        if self.log_sql:
            logger.debug("SQL: %s | %d param(s)", sql, len(params or ()))

        with self._borrow() as conn:
            autocommit = not self.in_transaction
            cur = conn.cursor()
            try:
                if params is None:
                    cur.execute(sql)
                else:
                    cur.execute(sql, params)
                result = collect(cur)
                if autocommit:
                    conn.commit()
                return result
            except Exception as exc:
                if autocommit:
                    conn.rollback()
                logger.warning("Statement failed: %s", exc)
                raise StorageError(str(exc)) from exc
            finally:
                close = getattr(cur, "close", None)
                if callable(close):
                    close()

    def execute(self, sql: str, params: PositionalParams | None = None) -> int:
        """Execute SQL with optional parameters and return the affected row count."""

        return self._run(sql, params, lambda cur: getattr(cur, "rowcount", -1))

    def fetchone(self, sql: str, params: PositionalParams | None = None) -> MaybeRow:
        """Execute query and return the first normalized row mapping."""

        def collect(cur: Any) -> MaybeRow:
            rows = cur.fetchall()
            if not rows:
                return None
            return self._row_to_mapping(cur, rows[0])

        return self._run(sql, params, collect)

    def fetchall(self, sql: str, params: PositionalParams | None = None) -> List[Record]:
        """Execute query and return all rows as normalized mappings."""

        return self._run(
            sql,
            params,
            lambda cur: [self._row_to_mapping(cur, row) for row in cur.fetchall()],
        )

    def _row_to_mapping(self, cursor: Any, row: Any) -> Record:
        """Normalize row object to a plain dict.

        Supports mapping rows directly and tuple/list rows via
        `cursor.description`.
        """

        if isinstance(row, Mapping):
            return dict(row)

        if isinstance(row, (tuple, list)):
            desc = getattr(cursor, "description", None)
            if not desc:
                raise TypeError(
                    "Cursor has no description; cannot map tuple rows to dict."
                )
            cols = [d[0] for d in desc]
            return dict(zip(cols, row))

        keys = getattr(row, "keys", None)
        if callable(keys):
            return {key: row[key] for key in keys()}

        raise TypeError(f"Unsupported row type: {type(row)}")

    def close(self, *, close_pool: bool = False) -> None:
        """Close the direct connection, or the pool when `close_pool` is set."""

        if self._closed:
            return
        self._closed = True
        if self._pool is not None:
            if close_pool:
                self._pool.close()
            return

        conn, self.conn = self.conn, None
        close = getattr(conn, "close", None)
        if callable(close):
            close()

    def __enter__(self) -> Database:
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        self.close()
