"""Get batch use case."""

import logging
from collections.abc import Sequence

from jsonstore.application.dto.document_dto import BatchFailure, GetBatchOutput
from jsonstore.application.use_cases.document.get_document import normalize_id
from jsonstore.application.use_cases.document.store_batch import (
    DEFAULT_BATCH_CAP,
    check_batch_size,
)


class GetBatchUseCase:
    """Fetch many documents by id in one query; missing ids become failures."""

    def __init__(
        self,
        unit_of_work_factory: type,
        *,
        cap: int = DEFAULT_BATCH_CAP,
        logger: logging.Logger | None = None,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._cap = cap
        self._logger = logger or logging.getLogger(__name__)

    async def execute(self, document_ids: Sequence[str], cap: int | None = None) -> GetBatchOutput:
        """Get documents; each failure carries the index of the requested id."""
        check_batch_size(len(document_ids), self._cap if cap is None else cap)
        keys = [normalize_id(i) for i in document_ids]
        wanted = list(dict.fromkeys(k for k in keys if k is not None))

        documents = []
        if wanted:
            async with self._uow_factory(readonly=True) as uow:
                documents = await uow.documents.get_many(wanted)

        found = {d.id for d in documents}
        failures = [
            BatchFailure(
                index=index,
                error="NOT_FOUND",
                message=f"Document with ID {raw} not found",
            )
            for index, (raw, key) in enumerate(zip(document_ids, keys, strict=True))
            if key not in found
        ]
        self._logger.info(
            "JSON batch retrieved requested=%d found=%d", len(document_ids), len(documents)
        )
        return GetBatchOutput(
            documents=documents, requested_count=len(document_ids), failures=failures
        )
