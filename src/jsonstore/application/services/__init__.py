"""Application services."""

from jsonstore.application.services.document_store import DocumentStore

__all__ = [
    "DocumentStore",
]
