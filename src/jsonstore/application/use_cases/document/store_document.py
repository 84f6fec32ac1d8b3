"""Store document use case."""

import logging
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from jsonstore.application.dto.document_dto import StoreOutput
from jsonstore.application.ports import UnitOfWork
from jsonstore.domain.entities import Document
from jsonstore.domain.exceptions import InvalidDocument
from jsonstore.domain.services import canonicalize, encode, fingerprint

DEFAULT_MAX_DOCUMENT_SIZE = 10 * 1024 * 1024


def _validate_metadata(metadata: Any) -> dict[str, Any]:
    if metadata is None:
        return {}
    if not isinstance(metadata, dict):
        raise InvalidDocument("Metadata must be a JSON object")
    encode(metadata, "Metadata")
    return metadata


class StoreDocumentUseCase:
    """Store content once per canonical form and return the surviving row.

    Validation happens before any connection is taken. The insert itself is
    delegated to the repository, whose unique constraint on the content hash
    decides the winner when identical content is stored concurrently.
    """

    def __init__(
        self,
        unit_of_work_factory: type,
        *,
        max_document_size: int = DEFAULT_MAX_DOCUMENT_SIZE,
        logger: logging.Logger | None = None,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._max_document_size = max_document_size
        self._logger = logger or logging.getLogger(__name__)

    def prepare(self, content: bytes, metadata: dict[str, Any] | None = None) -> Document:
        """Validate content and build the candidate document (fresh id, timestamps)."""
        if not isinstance(content, (bytes, bytearray, memoryview)):
            raise InvalidDocument("Content must be bytes")
        raw = bytes(content)
        if len(raw) > self._max_document_size:
            raise InvalidDocument(
                f"Document size {len(raw)} exceeds limit of {self._max_document_size} bytes"
            )
        canonical = canonicalize(raw)
        now = datetime.now(UTC)
        return Document(
            id=str(uuid4()),
            content_hash=fingerprint(canonical),
            raw_content=raw,
            size=len(raw),
            created_at=now,
            updated_at=now,
            metadata=_validate_metadata(metadata),
        )

    async def store(self, uow: UnitOfWork, document: Document) -> StoreOutput:
        """Insert the candidate or return the row already holding its hash."""
        stored, created = await uow.documents.insert_or_get(document)
        return StoreOutput(document=stored, is_new=created)

    async def execute(self, content: bytes, metadata: dict[str, Any] | None = None) -> StoreOutput:
        """Store one document."""
        document = self.prepare(content, metadata)
        async with self._uow_factory() as uow:
            output = await self.store(uow, document)
        self._logger.info(
            "JSON stored id=%s hash=%s size=%d is_new=%s",
            output.document.id,
            output.document.content_hash,
            output.document.size,
            output.is_new,
        )
        return output
