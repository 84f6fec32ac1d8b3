"""Application ports - interfaces for external adapters."""

from jsonstore.application.ports.repositories import DocumentRepository
from jsonstore.application.ports.storage_engine import StorageEngine
from jsonstore.application.ports.unit_of_work import UnitOfWork, UnitOfWorkFactory

__all__ = [
    "DocumentRepository",
    "StorageEngine",
    "UnitOfWork",
    "UnitOfWorkFactory",
]
