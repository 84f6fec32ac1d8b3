"""Store batch use case - per-item partial failure inside one transaction."""

import logging
import time
from collections.abc import Sequence
from datetime import timedelta

from jsonstore.application.dto.document_dto import (
    BatchFailure,
    BatchItemResult,
    DocumentInput,
    StoreBatchOutput,
)
from jsonstore.application.use_cases.document.store_document import StoreDocumentUseCase
from jsonstore.domain.exceptions import InvalidRequest, JSONStoreError
from jsonstore.domain.value_objects import StoreOutcome

DEFAULT_BATCH_CAP = 100


def check_batch_size(size: int, cap: int) -> None:
    """Raise InvalidRequest unless 0 < size <= cap."""
    if size == 0:
        raise InvalidRequest("Batch must contain at least one item")
    if size > cap:
        raise InvalidRequest(f"Batch size {size} exceeds limit of {cap}")


class StoreBatchUseCase:
    """Store a list of documents in one transaction.

    Every item goes through the single-document path inside its own savepoint.
    An item that fails validation or hits a backend error is reported as a
    failure at its index and the batch moves on. The transaction is committed
    once at the end; if that commit fails the whole batch raises.
    """

    def __init__(
        self,
        unit_of_work_factory: type,
        store_document: StoreDocumentUseCase,
        *,
        cap: int = DEFAULT_BATCH_CAP,
        logger: logging.Logger | None = None,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._store_document = store_document
        self._cap = cap
        self._logger = logger or logging.getLogger(__name__)

    async def execute(
        self,
        items: Sequence[bytes | DocumentInput],
        cap: int | None = None,
    ) -> StoreBatchOutput:
        """Store all items; results keep input order."""
        check_batch_size(len(items), self._cap if cap is None else cap)
        start = time.perf_counter()
        inputs = [i if isinstance(i, DocumentInput) else DocumentInput(content=i) for i in items]
        results: list[BatchItemResult] = []
        failures: list[BatchFailure] = []

        async with self._uow_factory() as uow:
            for index, item in enumerate(inputs):
                try:
                    document = self._store_document.prepare(item.content, item.metadata)
                    async with uow.savepoint():
                        output = await self._store_document.store(uow, document)
                except JSONStoreError as e:
                    self._logger.warning("Batch item %d failed: %s", index, e)
                    failures.append(BatchFailure(index=index, error=e.code, message=str(e)))
                    results.append(BatchItemResult(index=index, outcome=StoreOutcome.FAILED))
                    continue
                results.append(
                    BatchItemResult(index=index, outcome=output.outcome, document=output.document)
                )

        out = StoreBatchOutput(
            results=results,
            failures=failures,
            duration=timedelta(seconds=time.perf_counter() - start),
        )
        self._logger.info(
            "JSON batch stored total=%d new=%d existing=%d failed=%d duration_ms=%.1f",
            out.total_count,
            out.new_count,
            out.existing_count,
            out.failure_count,
            out.duration.total_seconds() * 1000,
        )
        return out
