"""Repository ports."""

from jsonstore.application.ports.repositories.document_repository import (
    DocumentRepository,
)

__all__ = [
    "DocumentRepository",
]
