"""Document use cases."""

from jsonstore.application.use_cases.document.get_batch import GetBatchUseCase
from jsonstore.application.use_cases.document.get_document import (
    GetDocumentByHashUseCase,
    GetDocumentUseCase,
)
from jsonstore.application.use_cases.document.store_batch import StoreBatchUseCase
from jsonstore.application.use_cases.document.store_document import StoreDocumentUseCase

__all__ = [
    "GetBatchUseCase",
    "GetDocumentByHashUseCase",
    "GetDocumentUseCase",
    "StoreBatchUseCase",
    "StoreDocumentUseCase",
]
