"""Get document use cases."""

from uuid import UUID

from jsonstore.domain.entities import Document
from jsonstore.domain.exceptions import NotFound
from jsonstore.domain.value_objects import ContentHash


def normalize_id(document_id: str) -> str | None:
    """Canonical UUID string, or None if the id cannot name any document."""
    try:
        return str(UUID(document_id.strip()))
    except (AttributeError, ValueError):
        return None


def normalize_hash(content_hash: str) -> str | None:
    """Lowercase 64-hex hash, or None if the value cannot be a content hash."""
    try:
        return ContentHash(content_hash.strip().lower()).value
    except (AttributeError, ValueError):
        return None


class GetDocumentUseCase:
    """Get document by id."""

    def __init__(self, unit_of_work_factory: type) -> None:
        self._uow_factory = unit_of_work_factory

    async def execute(self, document_id: str) -> Document:
        """Get document by id. Malformed ids are NotFound, never backend errors."""
        key = normalize_id(document_id)
        if key is None:
            raise NotFound("Document", str(document_id))
        async with self._uow_factory(readonly=True) as uow:
            document = await uow.documents.get_by_id(key)
        if document is None:
            raise NotFound("Document", key)
        return document


class GetDocumentByHashUseCase:
    """Get document by content hash."""

    def __init__(self, unit_of_work_factory: type) -> None:
        self._uow_factory = unit_of_work_factory

    async def execute(self, content_hash: str) -> Document:
        """Get document by content hash."""
        key = normalize_hash(content_hash)
        if key is None:
            raise NotFound("Document", str(content_hash))
        async with self._uow_factory(readonly=True) as uow:
            document = await uow.documents.get_by_hash(key)
        if document is None:
            raise NotFound("Document", key)
        return document
