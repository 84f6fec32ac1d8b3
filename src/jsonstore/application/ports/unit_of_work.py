"""Unit of Work port - transactional boundary."""

from contextlib import AbstractAsyncContextManager
from typing import Protocol

from jsonstore.application.ports.repositories.document_repository import DocumentRepository


class UnitOfWork(Protocol):
    """Unit of Work - one connection, one transaction, repository access."""

    @property
    def documents(self) -> DocumentRepository: ...

    def savepoint(self, name: str = "batch_item") -> AbstractAsyncContextManager[None]:
        """Nested scope; an exception inside rolls back to the savepoint only."""
        ...

    async def commit(self) -> None: ...

    async def rollback(self) -> None: ...


class UnitOfWorkFactory(Protocol):
    """Factory for creating UnitOfWork instances.

    The returned context manager commits on clean exit and rolls back on error.
    ``readonly`` is a hint; backends may use it to pick a cheaper lock mode.
    """

    def __call__(self, *, readonly: bool = False) -> AbstractAsyncContextManager[UnitOfWork]: ...
