"""Bounded pool of sqlite3 connections used from worker threads."""

import asyncio
import contextlib
import logging
import sqlite3
from collections.abc import AsyncIterator, Callable
from typing import Any, TypeVar

from jsonstore.domain.exceptions import Unavailable

T = TypeVar("T")

logger = logging.getLogger(__name__)


class SQLiteConnection:
    """Async facade over one sqlite3 connection.

    Each statement runs in a worker thread. If the awaiting task is cancelled
    (e.g. a deadline expired) the running statement is interrupted and the
    thread is awaited before the cancellation propagates, so the connection is
    idle again by the time it goes back to the pool.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    @property
    def in_transaction(self) -> bool:
        return self._conn.in_transaction

    async def _run(self, fn: Callable[..., T], *args: Any) -> T:
        task = asyncio.ensure_future(asyncio.to_thread(fn, *args))
        try:
            return await asyncio.shield(task)
        except asyncio.CancelledError:
            self._conn.interrupt()
            # statement aborts with "interrupted"; the caller only sees the cancellation
            with contextlib.suppress(sqlite3.Error):
                await task
            raise

    async def execute(self, sql: str, params: tuple | list = ()) -> int:
        """Run a statement, return the number of affected rows."""

        def _execute() -> int:
            return self._conn.execute(sql, params).rowcount

        return await self._run(_execute)

    async def fetchone(self, sql: str, params: tuple | list = ()) -> tuple | None:
        def _fetchone() -> tuple | None:
            return self._conn.execute(sql, params).fetchone()

        return await self._run(_fetchone)

    async def fetchall(self, sql: str, params: tuple | list = ()) -> list[tuple]:
        def _fetchall() -> list[tuple]:
            return self._conn.execute(sql, params).fetchall()

        return await self._run(_fetchall)

    def close(self) -> None:
        self._conn.close()


def connect(path: str, *, busy_timeout: float = 5.0) -> sqlite3.Connection:
    """Open a connection in autocommit mode; transactions are issued explicitly."""
    conn = sqlite3.connect(
        path,
        timeout=busy_timeout,
        check_same_thread=False,
        isolation_level=None,
    )
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA synchronous=NORMAL")
    return conn


class SQLitePool:
    """Fixed-size pool; all connections are opened up front by ``open()``.

    ``timeout`` bounds the wait for a free connection; expiry raises
    Unavailable, same as a PostgreSQL pool timeout.
    """

    def __init__(
        self,
        path: str,
        *,
        max_size: int = 10,
        timeout: float = 5.0,
        busy_timeout: float = 5.0,
    ) -> None:
        self.path = path
        self.max_size = max_size
        self._timeout = timeout
        self._busy_timeout = busy_timeout
        self._idle: asyncio.Queue[SQLiteConnection] = asyncio.Queue()
        self._all: list[SQLiteConnection] = []
        self._waiting = 0
        self._closed = True

    async def open(self) -> None:
        if not self._closed:
            return
        for _ in range(self.max_size):
            raw = await asyncio.to_thread(connect, self.path, busy_timeout=self._busy_timeout)
            conn = SQLiteConnection(raw)
            self._all.append(conn)
            self._idle.put_nowait(conn)
        self._closed = False
        logger.debug("SQLite pool opened path=%s size=%d", self.path, self.max_size)

    async def close(self) -> None:
        self._closed = True
        for conn in self._all:
            conn.close()
        self._all.clear()
        self._idle = asyncio.Queue()

    @contextlib.asynccontextmanager
    async def connection(self, timeout: float | None = None) -> AsyncIterator[SQLiteConnection]:
        """Borrow a connection; an open transaction left on it is rolled back on return."""
        if self._closed:
            raise Unavailable("SQLite pool is closed")
        self._waiting += 1
        try:
            async with asyncio.timeout(timeout if timeout is not None else self._timeout):
                conn = await self._idle.get()
        except TimeoutError as e:
            raise Unavailable(f"No SQLite connection available within {self._timeout}s") from e
        finally:
            self._waiting -= 1
        try:
            yield conn
        finally:
            try:
                if conn.in_transaction:
                    with contextlib.suppress(sqlite3.Error):
                        await conn.execute("ROLLBACK")
            finally:
                if not self._closed:
                    self._idle.put_nowait(conn)

    def get_stats(self) -> dict[str, int]:
        """Counters in the same spirit as psycopg_pool's get_stats()."""
        available = self._idle.qsize()
        return {
            "pool_size": len(self._all),
            "pool_available": available,
            "pool_in_use": len(self._all) - available,
            "requests_waiting": self._waiting,
        }
