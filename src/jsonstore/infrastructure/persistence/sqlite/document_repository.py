"""SQLite document repository implementation."""

import json
from datetime import datetime

from jsonstore.domain.entities import Document
from jsonstore.domain.exceptions import StorageError
from jsonstore.domain.services import canonicalize
from jsonstore.infrastructure.persistence.sqlite.connection import SQLiteConnection
from jsonstore.infrastructure.persistence.sqlite.errors import translate_errors

_COLUMNS = "id, content_hash, raw_content, size, metadata, created_at, updated_at"


def format_timestamp(value: datetime) -> str:
    """Fixed-width ISO 8601 so that text order is time order."""
    return value.isoformat(timespec="microseconds")


def _row_to_document(r: tuple) -> Document:
    return Document(
        id=r[0],
        content_hash=r[1],
        raw_content=bytes(r[2]),
        size=r[3],
        metadata=json.loads(r[4]) if r[4] else {},
        created_at=datetime.fromisoformat(r[5]),
        updated_at=datetime.fromisoformat(r[6]),
    )


class SQLiteDocumentRepository:
    """Document repository on a TEXT JSON column.

    JSON validity is checked by the application before insert; the table has
    no JSON constraint. Dedup is a single ``INSERT ... ON CONFLICT DO
    NOTHING``: no affected row means another writer holds the hash.
    """

    def __init__(self, conn: SQLiteConnection) -> None:
        self._conn = conn

    async def get_by_id(self, document_id: str) -> Document | None:
        """Get document by id."""
        with translate_errors("get document by id"):
            r = await self._conn.fetchone(
                f"SELECT {_COLUMNS} FROM json_documents WHERE id = ?", (document_id,)
            )
        return _row_to_document(r) if r else None

    async def get_by_hash(self, content_hash: str) -> Document | None:
        """Get document by content hash."""
        with translate_errors("get document by hash"):
            r = await self._conn.fetchone(
                f"SELECT {_COLUMNS} FROM json_documents WHERE content_hash = ?",
                (content_hash,),
            )
        return _row_to_document(r) if r else None

    async def get_many(self, document_ids: list[str]) -> list[Document]:
        """Get documents by id, newest first."""
        if not document_ids:
            return []
        placeholders = ", ".join("?" for _ in document_ids)
        with translate_errors("get document batch"):
            rows = await self._conn.fetchall(
                f"SELECT {_COLUMNS} FROM json_documents WHERE id IN ({placeholders}) "
                "ORDER BY created_at DESC",
                document_ids,
            )
        return [_row_to_document(r) for r in rows]

    async def insert_or_get(self, document: Document) -> tuple[Document, bool]:
        """Insert document unless its hash exists; return the stored row."""
        with translate_errors("store document"):
            inserted = await self._conn.execute(
                "INSERT INTO json_documents "
                "(id, content_hash, raw_content, json_data, size, metadata, created_at, updated_at) "
                "VALUES (?, ?, ?, ?, ?, ?, ?, ?) "
                "ON CONFLICT(content_hash) DO NOTHING",
                (
                    document.id,
                    document.content_hash,
                    document.raw_content,
                    canonicalize(document.raw_content).decode("utf-8"),
                    document.size,
                    json.dumps(document.metadata, ensure_ascii=False),
                    format_timestamp(document.created_at),
                    format_timestamp(document.updated_at),
                ),
            )
            if inserted:
                return document, True
            existing = await self.get_by_hash(document.content_hash)
        if existing is None:
            raise StorageError(f"Document with hash {document.content_hash} vanished after conflict")
        return existing, False
