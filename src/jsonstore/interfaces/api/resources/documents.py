"""JSON document API resources."""

import json
from typing import Any

import falcon
import falcon.asgi

from jsonstore.application.dto import (
    DocumentInput,
    GetBatchOutput,
    StoreBatchOutput,
    StoreOutput,
)
from jsonstore.application.services import DocumentStore
from jsonstore.domain.entities import Document
from jsonstore.domain.exceptions import InvalidRequest, NotFound
from jsonstore.domain.value_objects import StoreOutcome
from jsonstore.interfaces.api.errors import set_error

_STORED_NEW = "JSON document stored successfully"
_STORED_EXISTING = "JSON document already exists, returning existing ID"


def _encode(body: dict, key: str = "json_data") -> bytes:
    """Raw bytes for the ``json_data`` member; empty when missing so it fails validation.

    Lone surrogates are passed through as invalid UTF-8 so the store rejects them.
    """
    if key not in body:
        return b""
    return json.dumps(body[key], ensure_ascii=False).encode("utf-8", "surrogatepass")


async def _read_object(req: falcon.asgi.Request, resp: falcon.asgi.Response) -> dict | None:
    """Parse a JSON object body, writing a 400 on failure."""
    try:
        body = await req.get_media()
    except (falcon.MediaNotFoundError, falcon.MediaMalformedError) as e:
        set_error(resp, falcon.HTTP_400, "INVALID_REQUEST", f"Invalid request body: {e.description}")
        return None
    if not isinstance(body, dict):
        set_error(resp, falcon.HTTP_400, "INVALID_REQUEST", "Request body must be a JSON object")
        return None
    return body


def document_to_dict(d: Document) -> dict:
    return {
        "id": d.id,
        "content_hash": d.content_hash,
        "json_data": d.json_data,
        "size": d.size,
        "metadata": d.metadata,
        "created_at": d.created_at.isoformat(),
        "updated_at": d.updated_at.isoformat(),
    }


def _store_output_to_dict(out: StoreOutput) -> dict:
    return {
        "id": out.document.id,
        "content_hash": out.document.content_hash,
        "is_new": out.is_new,
        "created_at": out.document.created_at.isoformat(),
        "message": _STORED_NEW if out.is_new else _STORED_EXISTING,
    }


def _failures_to_list(failures: list) -> list[dict]:
    return [{"index": f.index, "error": f.error, "message": f.message} for f in failures]


def _store_batch_to_dict(out: StoreBatchOutput) -> dict:
    results: list[dict[str, Any]] = []
    for r in out.results:
        item: dict[str, Any] = {"index": r.index, "outcome": r.outcome.value}
        if r.document is not None:
            item.update(
                id=r.document.id,
                content_hash=r.document.content_hash,
                is_new=r.outcome is StoreOutcome.NEW,
                created_at=r.document.created_at.isoformat(),
            )
        results.append(item)
    return {
        "total_count": out.total_count,
        "success_count": out.success_count,
        "failure_count": out.failure_count,
        "new_count": out.new_count,
        "existing_count": out.existing_count,
        "duration_ms": round(out.duration.total_seconds() * 1000, 3),
        "results": results,
        "failures": _failures_to_list(out.failures),
    }


def _get_batch_to_dict(out: GetBatchOutput) -> dict:
    return {
        "success_count": out.success_count,
        "failure_count": out.failure_count,
        "documents": [document_to_dict(d) for d in out.documents],
        "failures": _failures_to_list(out.failures),
    }


class JSONDocumentsResource:
    """POST /api/v1/json - store; GET /api/v1/json?hash= - lookup by content hash."""

    def __init__(self, store: DocumentStore) -> None:
        self._store = store

    async def on_post(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        """Store one document. 201 when created, 200 when it already existed."""
        body = await _read_object(req, resp)
        if body is None:
            return
        if "json_data" not in body:
            set_error(resp, falcon.HTTP_400, "INVALID_REQUEST", "json_data is required")
            return

        try:
            out = await self._store.store_one(_encode(body), body.get("metadata"))
        except InvalidRequest as e:
            set_error(resp, falcon.HTTP_400, e.code, str(e))
            return
        resp.media = _store_output_to_dict(out)
        resp.status = falcon.HTTP_201 if out.is_new else falcon.HTTP_200

    async def on_get(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        """Get document by content hash."""
        content_hash = (req.get_param("hash") or "").strip()
        if not content_hash:
            set_error(resp, falcon.HTTP_400, "MISSING_HASH", "Hash parameter is required")
            return
        try:
            document = await self._store.get_by_hash(content_hash)
        except NotFound:
            set_error(
                resp, falcon.HTTP_404, "NOT_FOUND", "Document not found with the provided hash"
            )
            return
        resp.media = document_to_dict(document)
        resp.status = falcon.HTTP_200


class JSONDocumentResource:
    """GET /api/v1/json/{document_id} - get document."""

    def __init__(self, store: DocumentStore) -> None:
        self._store = store

    async def on_get(
        self,
        req: falcon.asgi.Request,
        resp: falcon.asgi.Response,
        document_id: str,
    ) -> None:
        """Get document by id."""
        try:
            document = await self._store.get_by_id(document_id)
        except NotFound:
            set_error(resp, falcon.HTTP_404, "NOT_FOUND", "Document not found")
            return
        resp.media = document_to_dict(document)
        resp.status = falcon.HTTP_200


class JSONBatchResource:
    """POST /api/v1/json/batch - store many; GET /api/v1/json/batch?ids=a,b - get many."""

    def __init__(self, store: DocumentStore, batch_cap: int) -> None:
        self._store = store
        self._batch_cap = batch_cap

    async def on_post(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        """Store a batch; per-item failures are reported, not raised."""
        body = await _read_object(req, resp)
        if body is None:
            return
        documents = body.get("documents")
        if not isinstance(documents, list):
            set_error(resp, falcon.HTTP_400, "INVALID_REQUEST", "documents must be a list")
            return

        items = [
            DocumentInput(content=_encode(d), metadata=d.get("metadata"))
            if isinstance(d, dict)
            else DocumentInput(content=b"")
            for d in documents
        ]
        try:
            out = await self._store.store_batch(items)
        except InvalidRequest as e:
            set_error(resp, falcon.HTTP_400, "VALIDATION_ERROR", str(e))
            return
        resp.media = _store_batch_to_dict(out)
        resp.status = falcon.HTTP_200

    async def on_get(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        """Get documents by comma-separated ids."""
        raw = req.get_param("ids") or ""
        ids = [i.strip() for i in raw.split(",") if i.strip()]
        await _get_batch(self._store, self._batch_cap, ids, resp)


class JSONBatchGetResource:
    """POST /api/v1/json/batch/get - get many, ids in the body."""

    def __init__(self, store: DocumentStore, batch_cap: int) -> None:
        self._store = store
        self._batch_cap = batch_cap

    async def on_post(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        body = await _read_object(req, resp)
        if body is None:
            return
        ids = body.get("ids")
        if ids is not None and not (
            isinstance(ids, list) and all(isinstance(i, str) for i in ids)
        ):
            set_error(resp, falcon.HTTP_400, "INVALID_REQUEST", "ids must be a list of strings")
            return
        await _get_batch(self._store, self._batch_cap, ids or [], resp)


async def _get_batch(
    store: DocumentStore, cap: int, ids: list[str], resp: falcon.asgi.Response
) -> None:
    if not ids:
        set_error(resp, falcon.HTTP_400, "MISSING_IDS", "At least one ID is required")
        return
    if len(ids) > cap:
        set_error(resp, falcon.HTTP_400, "TOO_MANY_IDS", f"Maximum {cap} IDs allowed per request")
        return
    out = await store.get_batch(ids)
    resp.media = _get_batch_to_dict(out)
    resp.status = falcon.HTTP_200
