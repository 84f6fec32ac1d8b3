"""Document DTOs."""

from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any

from jsonstore.domain.entities import Document
from jsonstore.domain.value_objects import StoreOutcome


@dataclass
class DocumentInput:
    """Raw content and optional metadata for one store."""

    content: bytes
    metadata: dict[str, Any] | None = None


@dataclass
class StoreOutput:
    """Result of storing one document."""

    document: Document
    is_new: bool

    @property
    def outcome(self) -> StoreOutcome:
        return StoreOutcome.NEW if self.is_new else StoreOutcome.EXISTING


@dataclass
class BatchFailure:
    """Failure of one batch item, traceable to its input index."""

    index: int
    error: str
    message: str


@dataclass
class BatchItemResult:
    """Outcome for one input item of a store batch."""

    index: int
    outcome: StoreOutcome
    document: Document | None = None


@dataclass
class StoreBatchOutput:
    """Result of a store batch: one entry per input item, in input order."""

    results: list[BatchItemResult]
    failures: list[BatchFailure]
    duration: timedelta

    @property
    def total_count(self) -> int:
        return len(self.results)

    @property
    def new_count(self) -> int:
        return sum(1 for r in self.results if r.outcome is StoreOutcome.NEW)

    @property
    def existing_count(self) -> int:
        return sum(1 for r in self.results if r.outcome is StoreOutcome.EXISTING)

    @property
    def success_count(self) -> int:
        return self.new_count + self.existing_count

    @property
    def failure_count(self) -> int:
        return len(self.failures)


@dataclass
class GetBatchOutput:
    """Result of a batch lookup. Document order is not the request order.

    A document requested more than once appears once in ``documents``, but the
    counts are per requested index: ``success_count + failure_count`` always
    equals ``requested_count``.
    """

    documents: list[Document]
    requested_count: int
    failures: list[BatchFailure] = field(default_factory=list)

    @property
    def success_count(self) -> int:
        return self.requested_count - len(self.failures)

    @property
    def failure_count(self) -> int:
        return len(self.failures)
