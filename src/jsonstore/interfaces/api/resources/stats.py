"""Statistics and metrics endpoints (admin only when credentials are configured)."""

import falcon
import falcon.asgi

from jsonstore.application.dto import DatabaseMetrics, DatabaseStats
from jsonstore.application.services import DocumentStore


def stats_to_dict(s: DatabaseStats) -> dict:
    return {
        "total_documents": s.total_documents,
        "total_size_bytes": s.total_size,
        "average_size_bytes": round(s.average_size, 2),
        "max_size_bytes": s.max_size,
        "min_size_bytes": s.min_size,
        "unique_hashes": s.unique_hashes,
        "last_updated": s.last_updated.isoformat() if s.last_updated else None,
        "daily_counts": [
            {"date": d.date, "count": d.count, "size_bytes": d.size} for d in s.daily_counts
        ],
    }


def metrics_to_dict(m: DatabaseMetrics) -> dict:
    return {
        "backend": m.backend,
        "uptime_seconds": round(m.uptime.total_seconds(), 3) if m.uptime else None,
        "active_connections": m.active_connections,
        "max_connections": m.max_connections,
        "cache_hit_ratio": m.cache_hit_ratio,
        "slow_queries": m.slow_queries,
        "database_size_bytes": m.database_size,
        "tables": [
            {
                "name": t.name,
                "rows": t.rows,
                "size_bytes": t.size,
                "index_size_bytes": t.index_size,
                "total_size_bytes": t.total_size,
            }
            for t in m.tables
        ],
        "pool": m.pool,
        "timestamp": m.timestamp.isoformat(),
    }


class StatsResource:
    """GET /api/v1/stats - document statistics."""

    auth_required = True

    def __init__(self, store: DocumentStore) -> None:
        self._store = store

    async def on_get(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        resp.media = stats_to_dict(await self._store.stats())
        resp.status = falcon.HTTP_200


class MetricsResource:
    """GET /api/v1/metrics - backend and pool metrics."""

    auth_required = True

    def __init__(self, store: DocumentStore) -> None:
        self._store = store

    async def on_get(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        resp.media = metrics_to_dict(await self._store.metrics())
        resp.status = falcon.HTTP_200
