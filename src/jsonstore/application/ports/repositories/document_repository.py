"""Document repository port."""

from typing import Protocol

from jsonstore.domain.entities import Document


class DocumentRepository(Protocol):
    """Port for document persistence.

    ``insert_or_get`` is where the backends differ: both must leave exactly one
    row per content hash and return that row, with ``created`` telling whether
    this call inserted it.
    """

    async def get_by_id(self, document_id: str) -> Document | None: ...

    async def get_by_hash(self, content_hash: str) -> Document | None: ...

    async def get_many(self, document_ids: list[str]) -> list[Document]: ...

    async def insert_or_get(self, document: Document) -> tuple[Document, bool]: ...
