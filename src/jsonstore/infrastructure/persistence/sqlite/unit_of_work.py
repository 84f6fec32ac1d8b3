"""SQLite Unit of Work implementation."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from jsonstore.infrastructure.persistence.sqlite.connection import SQLiteConnection, SQLitePool
from jsonstore.infrastructure.persistence.sqlite.document_repository import (
    SQLiteDocumentRepository,
)
from jsonstore.infrastructure.persistence.sqlite.errors import translate_errors


def _quote(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


class SQLiteUnitOfWork:
    """SQLite Unit of Work - one pooled connection, one explicit transaction."""

    def __init__(self, conn: SQLiteConnection) -> None:
        self._conn = conn
        self._documents = SQLiteDocumentRepository(conn)

    @property
    def documents(self) -> SQLiteDocumentRepository:
        return self._documents

    @asynccontextmanager
    async def savepoint(self, name: str = "batch_item") -> AsyncIterator[None]:
        """Scope whose failure rolls back to the savepoint, not the transaction."""
        ident = _quote(name)
        with translate_errors("savepoint"):
            await self._conn.execute(f"SAVEPOINT {ident}")
        try:
            yield
        except Exception:
            with translate_errors("rollback to savepoint"):
                await self._conn.execute(f"ROLLBACK TO SAVEPOINT {ident}")
                await self._conn.execute(f"RELEASE SAVEPOINT {ident}")
            raise
        with translate_errors("release savepoint"):
            await self._conn.execute(f"RELEASE SAVEPOINT {ident}")

    async def commit(self) -> None:
        if self._conn.in_transaction:
            await self._conn.execute("COMMIT")

    async def rollback(self) -> None:
        if self._conn.in_transaction:
            await self._conn.execute("ROLLBACK")


def create_uow_factory(pool: SQLitePool) -> object:
    """Create UnitOfWork factory (async context manager).

    Writers start with ``BEGIN IMMEDIATE`` so the write lock is taken up front
    and concurrent writers queue on the busy timeout instead of failing on
    lock upgrade. Read-only units use a deferred ``BEGIN``.
    """

    @asynccontextmanager
    async def factory(*, readonly: bool = False) -> AsyncIterator[SQLiteUnitOfWork]:
        with translate_errors("unit of work"):
            async with pool.connection() as conn:
                await conn.execute("BEGIN" if readonly else "BEGIN IMMEDIATE")
                uow = SQLiteUnitOfWork(conn)
                try:
                    yield uow
                    await uow.commit()
                except BaseException:
                    await uow.rollback()
                    raise

    return factory
