"""Domain entities."""

from jsonstore.domain.entities.document import Document

__all__ = [
    "Document",
]
