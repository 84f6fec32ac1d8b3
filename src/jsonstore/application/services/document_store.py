"""Document store facade - single entry point for request handlers."""

import asyncio
import logging
import time
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from dataclasses import replace
from datetime import timedelta
from typing import Any

from jsonstore.application.dto import (
    DatabaseMetrics,
    DatabaseStats,
    DocumentInput,
    GetBatchOutput,
    StoreBatchOutput,
    StoreOutput,
)
from jsonstore.application.ports import StorageEngine
from jsonstore.application.use_cases.document import (
    GetBatchUseCase,
    GetDocumentByHashUseCase,
    GetDocumentUseCase,
    StoreBatchUseCase,
    StoreDocumentUseCase,
)
from jsonstore.application.use_cases.document.store_batch import DEFAULT_BATCH_CAP
from jsonstore.application.use_cases.document.store_document import DEFAULT_MAX_DOCUMENT_SIZE
from jsonstore.domain.entities import Document
from jsonstore.domain.exceptions import Timeout


class DocumentStore:
    """Composes the storage engine and the document use cases.

    Holds no document state: every call goes to the engine. Each operation
    takes an optional ``timeout`` in seconds (falls back to
    ``operation_timeout``); on expiry the in-flight backend call is cancelled
    and ``Timeout`` is raised.
    """

    def __init__(
        self,
        engine: StorageEngine,
        *,
        max_document_size: int = DEFAULT_MAX_DOCUMENT_SIZE,
        batch_cap: int = DEFAULT_BATCH_CAP,
        operation_timeout: float | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._engine = engine
        self._operation_timeout = operation_timeout
        self._logger = logger or logging.getLogger(__name__)
        self._started_at = time.monotonic()
        self._store_document = StoreDocumentUseCase(
            engine.unit_of_work,
            max_document_size=max_document_size,
            logger=self._logger,
        )
        self._store_batch = StoreBatchUseCase(
            engine.unit_of_work,
            self._store_document,
            cap=batch_cap,
            logger=self._logger,
        )
        self._get_document = GetDocumentUseCase(engine.unit_of_work)
        self._get_by_hash = GetDocumentByHashUseCase(engine.unit_of_work)
        self._get_batch = GetBatchUseCase(engine.unit_of_work, cap=batch_cap, logger=self._logger)

    @property
    def backend(self) -> str:
        return self._engine.name

    @asynccontextmanager
    async def _deadline(self, timeout: float | None) -> AsyncIterator[None]:
        seconds = timeout if timeout is not None else self._operation_timeout
        try:
            async with asyncio.timeout(seconds):
                yield
        except TimeoutError as e:
            raise Timeout(f"Operation exceeded deadline of {seconds}s") from e

    async def store_one(
        self,
        content: bytes,
        metadata: dict[str, Any] | None = None,
        *,
        timeout: float | None = None,
    ) -> StoreOutput:
        async with self._deadline(timeout):
            return await self._store_document.execute(content, metadata)

    async def store_batch(
        self,
        items: Sequence[bytes | DocumentInput],
        cap: int | None = None,
        *,
        timeout: float | None = None,
    ) -> StoreBatchOutput:
        async with self._deadline(timeout):
            return await self._store_batch.execute(items, cap)

    async def get_by_id(self, document_id: str, *, timeout: float | None = None) -> Document:
        async with self._deadline(timeout):
            return await self._get_document.execute(document_id)

    async def get_by_hash(self, content_hash: str, *, timeout: float | None = None) -> Document:
        async with self._deadline(timeout):
            return await self._get_by_hash.execute(content_hash)

    async def get_batch(
        self,
        document_ids: Sequence[str],
        cap: int | None = None,
        *,
        timeout: float | None = None,
    ) -> GetBatchOutput:
        async with self._deadline(timeout):
            return await self._get_batch.execute(document_ids, cap)

    async def stats(self, *, timeout: float | None = None) -> DatabaseStats:
        async with self._deadline(timeout):
            return await self._engine.stats()

    async def metrics(self, *, timeout: float | None = None) -> DatabaseMetrics:
        async with self._deadline(timeout):
            metrics = await self._engine.metrics()
        return replace(metrics, uptime=timedelta(seconds=time.monotonic() - self._started_at))

    async def health_check(self) -> None:
        """Engine probe with its own fixed deadline; caller deadlines do not apply."""
        await self._engine.health_check()

    async def migrate(self) -> None:
        await self._engine.migrate()
        self._logger.info("Schema migrated backend=%s", self._engine.name)

    async def open(self) -> None:
        await self._engine.open()

    async def close(self) -> None:
        await self._engine.close()
