"""Application DTOs."""

from jsonstore.application.dto.document_dto import (
    BatchFailure,
    BatchItemResult,
    DocumentInput,
    GetBatchOutput,
    StoreBatchOutput,
    StoreOutput,
)
from jsonstore.application.dto.stats_dto import (
    DatabaseMetrics,
    DatabaseStats,
    DayCount,
    TableStats,
)

__all__ = [
    "BatchFailure",
    "BatchItemResult",
    "DatabaseMetrics",
    "DatabaseStats",
    "DayCount",
    "DocumentInput",
    "GetBatchOutput",
    "StoreBatchOutput",
    "StoreOutput",
    "TableStats",
]
