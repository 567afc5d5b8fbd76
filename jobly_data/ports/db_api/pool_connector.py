"""Bounded, thread-safe pool of DB-API connections."""

from __future__ import annotations

import contextlib
import logging
import threading
import time
from collections import deque
from collections.abc import Callable, Iterator
from typing import Any

logger = logging.getLogger(__name__)

# psycopg 3 `TransactionStatus.IDLE`
_PG_IDLE = 0


class PoolConnector:
    """Hands out at most `max_size` connections, opening them on demand.

    Connections come back through `release()` (or the `connection()` context
    manager). One that still holds an open transaction is rolled back before
    it is reused; one that cannot be rolled back is closed and its slot freed.
    """

    def __init__(
        self,
        connect: Callable[..., Any],
        *connect_args: Any,
        max_size: int = 5,
        timeout: float | None = None,
        **connect_kwargs: Any,
    ):
        if max_size < 1:
            raise ValueError("max_size must be >= 1.")

        self._factory = lambda: connect(*connect_args, **connect_kwargs)
        self._max_size = max_size
        self._default_timeout = timeout

        self._lock = threading.Condition()
        self._free: deque[Any] = deque()
        self._lent: dict[int, Any] = {}
        self._opened = 0
        self._closed = False

    @property
    def max_size(self) -> int:
        return self._max_size

    @property
    def in_use(self) -> int:
        with self._lock:
            return len(self._lent)

    def acquire(self, timeout: float | None = None) -> Any:
        """Borrow a connection.

        Args:
            timeout: Seconds to wait for a free slot. Falls back to the pool
                default; `None` there means wait indefinitely.

        Raises:
            TimeoutError: No connection became available in time.
            RuntimeError: The pool is closed.
        """

        conn = self._take_or_reserve(self._default_timeout if timeout is None else timeout)
        if conn is not None:
            return conn

        try:
            conn = self._factory()
        except BaseException:
            with self._lock:
                self._opened -= 1
                self._lock.notify()
            raise

        with self._lock:
            self._lent[id(conn)] = conn
            opened = self._opened
        logger.debug("Opened connection %d of %d", opened, self._max_size)
        return conn

    def release(self, conn: Any) -> None:
        """Give a borrowed connection back.

        Raises:
            ValueError: `conn` is not currently lent out by this pool.
        """

        with self._lock:
            if self._lent.pop(id(conn), None) is None:
                raise ValueError("Connection is not lent out by this pool.")

        reusable = self._reset(conn)
        with self._lock:
            keep = reusable and not self._closed
            if keep:
                self._free.append(conn)
            else:
                self._opened -= 1
            self._lock.notify()

        if not keep:
            _close(conn)

    @contextlib.contextmanager
    def connection(self, timeout: float | None = None) -> Iterator[Any]:
        """Borrow a connection for the duration of a `with` block."""

        conn = self.acquire(timeout)
        try:
            yield conn
        finally:
            self.release(conn)

    def close(self) -> None:
        """Close idle connections; borrowed ones are closed as they come back."""

        with self._lock:
            if self._closed:
                return
            self._closed = True
            free = list(self._free)
            self._free.clear()
            self._opened -= len(free)
            self._lock.notify_all()

        for conn in free:
            _close(conn)

    def _take_or_reserve(self, timeout: float | None) -> Any | None:
        """Return an idle connection, or `None` after reserving a new slot."""

        deadline = None if timeout is None else time.monotonic() + timeout
        with self._lock:
            while True:
                if self._closed:
                    raise RuntimeError("PoolConnector is closed.")
                if self._free:
                    conn = self._free.pop()
                    self._lent[id(conn)] = conn
                    return conn
                if self._opened < self._max_size:
                    self._opened += 1
                    return None

                remaining = None if deadline is None else deadline - time.monotonic()
                if remaining is not None and remaining <= 0:
                    raise TimeoutError(
                        f"No pooled connection available within {timeout} seconds."
                    )
                self._lock.wait(remaining)

    @staticmethod
    def _reset(conn: Any) -> bool:
        if not _has_open_transaction(conn):
            return True
        try:
            conn.rollback()
        except Exception:
            logger.warning("Dropping pooled connection after failed rollback", exc_info=True)
            return False
        return True


def _has_open_transaction(conn: Any) -> bool:
    flag = getattr(conn, "in_transaction", None)
    if isinstance(flag, bool):
        return flag

    status = getattr(getattr(conn, "info", None), "transaction_status", None)
    return status is not None and status != _PG_IDLE


def _close(conn: Any) -> None:
    close = getattr(conn, "close", None)
    if callable(close):
        close()
