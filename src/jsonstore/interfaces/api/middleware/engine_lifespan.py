"""Engine lifespan middleware - opens and migrates on startup, closes on shutdown."""

from typing import Any

from jsonstore.application.services import DocumentStore


class EngineLifespanMiddleware:
    """Middleware that opens the storage engine on startup and closes it on shutdown."""

    def __init__(self, store: DocumentStore, *, migrate: bool = True) -> None:
        self._store = store
        self._migrate = migrate

    async def process_startup(self, scope: dict[str, Any], event: dict[str, Any]) -> None:
        """Open pool and create schema when the ASGI server starts."""
        await self._store.open()
        if self._migrate:
            await self._store.migrate()

    async def process_shutdown(self, scope: dict[str, Any], event: dict[str, Any]) -> None:
        """Close pool when the ASGI server shuts down."""
        await self._store.close()
