"""PostgreSQL document repository implementation."""

from uuid import UUID

from psycopg import AsyncConnection, errors
from psycopg.types.json import Jsonb

from jsonstore.domain.entities import Document
from jsonstore.domain.exceptions import InvalidDocument, StorageError
from jsonstore.domain.services import canonicalize
from jsonstore.infrastructure.persistence.postgres.errors import translate_errors

_COLUMNS = "id, content_hash, raw_content, size, metadata, created_at, updated_at"


def _row_to_document(r: tuple) -> Document:
    return Document(
        id=str(r[0]),
        content_hash=r[1],
        raw_content=bytes(r[2]),
        size=r[3],
        metadata=r[4] or {},
        created_at=r[5],
        updated_at=r[6],
    )


class PostgresDocumentRepository:
    """Document repository on a JSONB table.

    Dedup is probe-then-insert: a lookup by hash answers the common repeat
    case cheaply, and the UNIQUE constraint on ``content_hash`` settles the
    race between probe and insert. The insert runs inside a savepoint so a
    unique violation leaves the surrounding transaction usable for the
    fallback lookup.
    """

    def __init__(self, conn: AsyncConnection) -> None:
        self._conn = conn

    async def get_by_id(self, document_id: str) -> Document | None:
        """Get document by id."""
        with translate_errors("get document by id"):
            cur = await self._conn.execute(
                f"SELECT {_COLUMNS} FROM json_documents WHERE id = %s",
                (UUID(document_id),),
            )
            r = await cur.fetchone()
        return _row_to_document(r) if r else None

    async def get_by_hash(self, content_hash: str) -> Document | None:
        """Get document by content hash."""
        with translate_errors("get document by hash"):
            cur = await self._conn.execute(
                f"SELECT {_COLUMNS} FROM json_documents WHERE content_hash = %s",
                (content_hash,),
            )
            r = await cur.fetchone()
        return _row_to_document(r) if r else None

    async def get_many(self, document_ids: list[str]) -> list[Document]:
        """Get documents by id, newest first."""
        if not document_ids:
            return []
        with translate_errors("get document batch"):
            cur = await self._conn.execute(
                f"SELECT {_COLUMNS} FROM json_documents WHERE id = ANY(%s) "
                "ORDER BY created_at DESC",
                ([UUID(i) for i in document_ids],),
            )
            rows = await cur.fetchall()
        return [_row_to_document(r) for r in rows]

    async def insert_or_get(self, document: Document) -> tuple[Document, bool]:
        """Insert document unless its hash exists; return the stored row."""
        with translate_errors("store document"):
            existing = await self.get_by_hash(document.content_hash)
            if existing:
                return existing, False

            await self._conn.execute("SAVEPOINT insert_document")
            try:
                cur = await self._conn.execute(
                    "INSERT INTO json_documents "
                    "(id, content_hash, raw_content, json_data, size, metadata, created_at, updated_at) "
                    f"VALUES (%s, %s, %s, %s::jsonb, %s, %s, %s, %s) RETURNING {_COLUMNS}",
                    (
                        UUID(document.id),
                        document.content_hash,
                        document.raw_content,
                        canonicalize(document.raw_content).decode("utf-8"),
                        document.size,
                        Jsonb(document.metadata),
                        document.created_at,
                        document.updated_at,
                    ),
                )
                r = await cur.fetchone()
            except errors.UniqueViolation:
                await self._conn.execute("ROLLBACK TO SAVEPOINT insert_document")
            except errors.DataError as e:
                # canonicalization already rejects \u0000; kept for other JSONB limits
                await self._conn.execute("ROLLBACK TO SAVEPOINT insert_document")
                raise InvalidDocument(f"Document rejected by PostgreSQL: {e}") from e
            else:
                await self._conn.execute("RELEASE SAVEPOINT insert_document")
                return _row_to_document(r), True

            winner = await self.get_by_hash(document.content_hash)
        if winner is None:
            raise StorageError(f"Document with hash {document.content_hash} vanished after conflict")
        return winner, False
