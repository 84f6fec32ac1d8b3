"""Storage engine port - one contract, one adapter per backend."""

from contextlib import AbstractAsyncContextManager
from typing import Protocol

from jsonstore.application.dto.stats_dto import DatabaseMetrics, DatabaseStats
from jsonstore.application.ports.unit_of_work import UnitOfWork


class StorageEngine(Protocol):
    """Backend adapter: connection pool, transactions, schema and diagnostics."""

    name: str

    async def open(self) -> None:
        """Open the connection pool. Pool size is fixed for the engine's lifetime."""
        ...

    async def close(self) -> None: ...

    def unit_of_work(self, *, readonly: bool = False) -> AbstractAsyncContextManager[UnitOfWork]: ...

    async def health_check(self) -> None:
        """Probe the backend within a fixed deadline. Raises Unavailable."""
        ...

    async def migrate(self) -> None:
        """Create schema if missing. Idempotent. Raises MigrationError."""
        ...

    async def stats(self) -> DatabaseStats: ...

    async def metrics(self) -> DatabaseMetrics: ...
