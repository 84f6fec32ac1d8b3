"""Pytest fixtures for jsonstore tests."""

from __future__ import annotations

import asyncio
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime

import pytest
import pytest_asyncio

from jsonstore.application.dto import DatabaseMetrics, DatabaseStats, TableStats
from jsonstore.application.services import DocumentStore
from jsonstore.domain.entities import Document
from jsonstore.domain.exceptions import StorageError, Unavailable

# --- Fake storage ---


class FakeDatabase:
    """Committed state shared by every unit of work of one fake engine."""

    def __init__(self) -> None:
        self.by_id: dict[str, Document] = {}
        self.by_hash: dict[str, Document] = {}

    def snapshot(self) -> tuple[dict, dict]:
        return dict(self.by_id), dict(self.by_hash)

    def restore(self, snap: tuple[dict, dict]) -> None:
        self.by_id, self.by_hash = dict(snap[0]), dict(snap[1])


class FakeDocumentRepository:
    """In-memory document repository."""

    def __init__(self, db: FakeDatabase, delay: float = 0.0) -> None:
        self._db = db
        self._delay = delay
        self.fail_on_hash: set[str] = set()

    async def get_by_id(self, document_id: str) -> Document | None:
        if self._delay:
            await asyncio.sleep(self._delay)
        return self._db.by_id.get(document_id)

    async def get_by_hash(self, content_hash: str) -> Document | None:
        return self._db.by_hash.get(content_hash)

    async def get_many(self, document_ids: list[str]) -> list[Document]:
        docs = [self._db.by_id[i] for i in document_ids if i in self._db.by_id]
        return sorted(docs, key=lambda d: d.created_at, reverse=True)

    async def insert_or_get(self, document: Document) -> tuple[Document, bool]:
        if document.content_hash in self.fail_on_hash:
            raise StorageError(f"store document: simulated failure for {document.content_hash}")
        existing = self._db.by_hash.get(document.content_hash)
        if existing:
            return existing, False
        self._db.by_id[document.id] = document
        self._db.by_hash[document.content_hash] = document
        return document, True


class FakeUnitOfWork:
    """In-memory Unit of Work; rollback restores the state seen at begin."""

    def __init__(self, db: FakeDatabase, documents: FakeDocumentRepository) -> None:
        self._db = db
        self.documents = documents
        self._begin = db.snapshot()
        self.committed = False

    @asynccontextmanager
    async def savepoint(self, name: str = "batch_item") -> AsyncIterator[None]:
        snap = self._db.snapshot()
        try:
            yield
        except Exception:
            self._db.restore(snap)
            raise

    async def commit(self) -> None:
        self.committed = True

    async def rollback(self) -> None:
        self._db.restore(self._begin)


class FakeStorageEngine:
    """StorageEngine double backed by FakeDatabase."""

    name = "fake"

    def __init__(self, delay: float = 0.0) -> None:
        self.db = FakeDatabase()
        self.documents = FakeDocumentRepository(self.db, delay=delay)
        self.opened = False
        self.closed = False
        self.healthy = True
        self.fail_commit = False
        self.migrations = 0
        self.readonly_calls = 0

    @asynccontextmanager
    async def unit_of_work(self, *, readonly: bool = False) -> AsyncIterator[FakeUnitOfWork]:
        if readonly:
            self.readonly_calls += 1
        uow = FakeUnitOfWork(self.db, self.documents)
        try:
            yield uow
            if self.fail_commit:
                raise StorageError("unit of work: simulated commit failure")
            await uow.commit()
        except BaseException:
            await uow.rollback()
            raise

    async def open(self) -> None:
        self.opened = True

    async def close(self) -> None:
        self.closed = True

    async def health_check(self) -> None:
        if not self.healthy:
            raise Unavailable("fake backend is down")

    async def migrate(self) -> None:
        self.migrations += 1

    async def stats(self) -> DatabaseStats:
        docs = list(self.db.by_id.values())
        sizes = [d.size for d in docs]
        return DatabaseStats(
            total_documents=len(docs),
            total_size=sum(sizes),
            average_size=sum(sizes) / len(sizes) if sizes else 0.0,
            max_size=max(sizes, default=0),
            min_size=min(sizes, default=0),
            unique_hashes=len(self.db.by_hash),
            last_updated=max((d.updated_at for d in docs), default=None),
        )

    async def metrics(self) -> DatabaseMetrics:
        return DatabaseMetrics(
            backend=self.name,
            timestamp=datetime.now(UTC),
            active_connections=1,
            max_connections=1,
            tables=[TableStats(name="json_documents", rows=len(self.db.by_id))],
        )


# --- Fixtures ---


@pytest.fixture
def fake_engine() -> FakeStorageEngine:
    """Fresh in-memory engine for each test."""
    return FakeStorageEngine()


@pytest.fixture
def uow_factory(fake_engine: FakeStorageEngine):
    """Factory returning async context manager with FakeUnitOfWork."""
    return fake_engine.unit_of_work


@pytest.fixture
def store(fake_engine: FakeStorageEngine) -> DocumentStore:
    """DocumentStore facade over the fake engine."""
    return DocumentStore(fake_engine, batch_cap=10)


# --- Real engines ---

POSTGRES_URL_ENV = "JSONSTORE_TEST_DATABASE_URL"


def _engine_params() -> list:
    return [
        pytest.param("sqlite", id="sqlite"),
        pytest.param(
            "postgres",
            id="postgres",
            marks=pytest.mark.skipif(
                not os.environ.get(POSTGRES_URL_ENV),
                reason=f"{POSTGRES_URL_ENV} not set",
            ),
        ),
    ]


@pytest_asyncio.fixture(params=_engine_params())
async def engine(request, tmp_path):
    """Opened and migrated engine with an empty document table."""
    if request.param == "sqlite":
        from jsonstore.infrastructure.persistence.sqlite import SQLitePool, SQLiteStorageEngine

        eng = SQLiteStorageEngine(SQLitePool(str(tmp_path / "test.sqlite3"), max_size=4))
        await eng.open()
        await eng.migrate()
    else:
        from jsonstore.infrastructure.persistence.postgres import (
            PostgresStorageEngine,
            create_pool,
        )

        pool = create_pool(os.environ[POSTGRES_URL_ENV], min_size=1, max_size=4)
        eng = PostgresStorageEngine(pool)
        await eng.open()
        await eng.migrate()
        async with pool.connection() as conn:
            await conn.execute("TRUNCATE json_documents")
    try:
        yield eng
    finally:
        await eng.close()


@pytest.fixture
def engine_store(engine) -> DocumentStore:
    """DocumentStore facade over a real engine."""
    return DocumentStore(engine, batch_cap=10, operation_timeout=30.0)
