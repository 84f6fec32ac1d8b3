"""PostgreSQL Unit of Work implementation."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from psycopg import sql
from psycopg_pool import AsyncConnectionPool

from jsonstore.infrastructure.persistence.postgres.document_repository import (
    PostgresDocumentRepository,
)
from jsonstore.infrastructure.persistence.postgres.errors import translate_errors


class PostgresUnitOfWork:
    """PostgreSQL Unit of Work - one connection, one transaction."""

    def __init__(self, pool: AsyncConnectionPool) -> None:
        self._pool = pool
        self._conn: object | None = None
        self._conn_cm: object | None = None

    async def __aenter__(self) -> "PostgresUnitOfWork":
        self._conn_cm = self._pool.connection()
        self._conn = await self._conn_cm.__aenter__()
        self._documents = PostgresDocumentRepository(self._conn)
        return self

    async def __aexit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        if exc_type and self._conn:
            await self._conn.rollback()
        if self._conn_cm:
            await self._conn_cm.__aexit__(exc_type, exc_val, exc_tb)

    @property
    def documents(self) -> PostgresDocumentRepository:
        return self._documents

    @asynccontextmanager
    async def savepoint(self, name: str = "batch_item") -> AsyncIterator[None]:
        """Scope whose failure rolls back to the savepoint, not the transaction."""
        ident = sql.Identifier(name)
        with translate_errors("savepoint"):
            await self._conn.execute(sql.SQL("SAVEPOINT {}").format(ident))
        try:
            yield
        except Exception:
            with translate_errors("rollback to savepoint"):
                await self._conn.execute(sql.SQL("ROLLBACK TO SAVEPOINT {}").format(ident))
            raise
        with translate_errors("release savepoint"):
            await self._conn.execute(sql.SQL("RELEASE SAVEPOINT {}").format(ident))

    async def commit(self) -> None:
        if self._conn:
            await self._conn.commit()

    async def rollback(self) -> None:
        if self._conn:
            await self._conn.rollback()


def create_uow_factory(pool: AsyncConnectionPool) -> object:
    """Create UnitOfWork factory (async context manager).

    Commits on clean exit, rolls back on error. Driver and pool errors
    (including failure to get a connection and a failed commit) surface as
    domain errors.
    """

    @asynccontextmanager
    async def factory(*, readonly: bool = False) -> AsyncIterator[PostgresUnitOfWork]:
        with translate_errors("unit of work"):
            uow = PostgresUnitOfWork(pool)
            async with uow:
                try:
                    yield uow
                    await uow.commit()
                except BaseException:
                    await uow.rollback()
                    raise

    return factory
