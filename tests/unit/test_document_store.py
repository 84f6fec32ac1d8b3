"""Unit tests for the DocumentStore facade."""

import pytest

from jsonstore.application.services import DocumentStore
from jsonstore.domain.exceptions import InvalidDocument, NotFound, Timeout, Unavailable

from tests.conftest import FakeStorageEngine


@pytest.mark.asyncio
async def test_store_and_get_round_trip(store: DocumentStore) -> None:
    out = await store.store_one(b'{"hello": "world"}', {"tag": "a"})

    assert out.is_new
    assert (await store.get_by_id(out.document.id)).json_data == {"hello": "world"}
    assert (await store.get_by_hash(out.document.content_hash)).metadata == {"tag": "a"}


@pytest.mark.asyncio
async def test_store_one_idempotent(store: DocumentStore) -> None:
    first = await store.store_one(b'{"a":[1,2,3]}')
    second = await store.store_one(b'{"a": [1, 2, 3]}')

    assert first.is_new and not second.is_new
    assert first.document.id == second.document.id


@pytest.mark.asyncio
async def test_invalid_and_missing(store: DocumentStore) -> None:
    with pytest.raises(InvalidDocument):
        await store.store_one(b"")
    with pytest.raises(NotFound):
        await store.get_by_id("not-a-uuid")


@pytest.mark.asyncio
async def test_batch_uses_configured_cap(store: DocumentStore) -> None:
    """The fixture store has batch_cap=10; an explicit cap overrides it."""
    out = await store.store_batch([f'{{"i":{i}}}'.encode() for i in range(10)])
    assert out.success_count == 10

    got = await store.get_batch([r.document.id for r in out.results], cap=10)
    assert got.success_count == 10
    assert got.failure_count == 0


@pytest.mark.asyncio
async def test_deadline_raises_timeout() -> None:
    """An operation that outlives its deadline is cancelled with Timeout."""
    engine = FakeStorageEngine(delay=0.5)
    store = DocumentStore(engine)
    out = await store.store_one(b"{}")

    with pytest.raises(Timeout):
        await store.get_by_id(out.document.id, timeout=0.01)


@pytest.mark.asyncio
async def test_default_operation_timeout() -> None:
    engine = FakeStorageEngine(delay=0.5)
    store = DocumentStore(engine, operation_timeout=0.01)
    out = await store.store_one(b"{}")

    with pytest.raises(Timeout):
        await store.get_by_id(out.document.id)
    # an explicit deadline wins over the default
    assert (await store.get_by_id(out.document.id, timeout=5)).id == out.document.id


@pytest.mark.asyncio
async def test_lifecycle_and_health(fake_engine: FakeStorageEngine, store: DocumentStore) -> None:
    await store.open()
    await store.migrate()
    await store.health_check()
    assert fake_engine.opened
    assert fake_engine.migrations == 1
    assert store.backend == "fake"

    fake_engine.healthy = False
    with pytest.raises(Unavailable):
        await store.health_check()

    await store.close()
    assert fake_engine.closed


@pytest.mark.asyncio
async def test_stats_and_metrics(store: DocumentStore) -> None:
    await store.store_one(b'{"a":1}')
    await store.store_one(b'{"bb":22}')

    stats = await store.stats()
    metrics = await store.metrics()

    assert stats.total_documents == 2
    assert stats.unique_hashes == 2
    assert stats.total_size == len(b'{"a":1}') + len(b'{"bb":22}')
    assert stats.min_size == len(b'{"a":1}')
    assert metrics.uptime is not None
    assert metrics.uptime.total_seconds() >= 0
    assert metrics.tables[0].rows == 2
