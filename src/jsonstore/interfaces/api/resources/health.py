"""Health, readiness and version endpoints."""

import platform
from datetime import UTC, datetime

import falcon
import falcon.asgi

from jsonstore.application.services import DocumentStore
from jsonstore.domain.exceptions import Unavailable


class HealthResource:
    """Health, readiness and version endpoints."""

    def __init__(self, store: DocumentStore, version: str, environment: str) -> None:
        self._store = store
        self._version = version
        self._environment = environment

    async def _probe(self) -> str | None:
        """None when the database answers, else the failure reason."""
        try:
            await self._store.health_check()
        except Unavailable as e:
            return str(e)
        return None

    async def on_get(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        """GET /api/v1/health - liveness including the database probe."""
        error = await self._probe()
        resp.media = {
            "status": "unhealthy" if error else "healthy",
            "timestamp": datetime.now(UTC).isoformat(),
            "database": error is None,
            "version": self._version,
        }
        resp.status = falcon.HTTP_503 if error else falcon.HTTP_200

    async def on_get_ready(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        """GET /api/v1/ready - readiness with per-check detail."""
        error = await self._probe()
        check = {"name": "database", "status": "failed" if error else "ok"}
        if error:
            check["error"] = error
        resp.media = {
            "ready": error is None,
            "timestamp": datetime.now(UTC).isoformat(),
            "checks": [check],
        }
        resp.status = falcon.HTTP_503 if error else falcon.HTTP_200

    async def on_get_version(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        """GET /api/v1/version"""
        resp.media = {
            "version": self._version,
            "environment": self._environment,
            "backend": self._store.backend,
            "python_version": platform.python_version(),
        }
        resp.status = falcon.HTTP_200
