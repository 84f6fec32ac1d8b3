"""SQLite storage engine: pool, schema, diagnostics."""

import asyncio
import logging
import sqlite3
from datetime import UTC, datetime
from typing import Any

from jsonstore.application.dto import DatabaseMetrics, DatabaseStats, DayCount, TableStats
from jsonstore.domain.exceptions import MigrationError, Unavailable
from jsonstore.infrastructure.persistence.sqlite.connection import SQLitePool
from jsonstore.infrastructure.persistence.sqlite.errors import translate_errors
from jsonstore.infrastructure.persistence.sqlite.unit_of_work import create_uow_factory

# Same shape as format_timestamp(): 2026-01-31T12:00:00.123000+00:00
_NOW = "strftime('%Y-%m-%dT%H:%M:%f000+00:00', 'now')"

SCHEMA = [
    f"""
    CREATE TABLE IF NOT EXISTS json_documents (
        id TEXT PRIMARY KEY,
        content_hash TEXT NOT NULL UNIQUE,
        raw_content BLOB NOT NULL,
        json_data TEXT NOT NULL,
        size INTEGER NOT NULL DEFAULT 0,
        metadata TEXT NOT NULL DEFAULT '{{}}',
        created_at TEXT NOT NULL DEFAULT ({_NOW}),
        updated_at TEXT NOT NULL DEFAULT ({_NOW})
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_json_documents_created_at ON json_documents (created_at)",
    f"""
    CREATE TRIGGER IF NOT EXISTS trg_json_documents_updated_at
    AFTER UPDATE ON json_documents
    FOR EACH ROW WHEN NEW.updated_at = OLD.updated_at
    BEGIN
        UPDATE json_documents SET updated_at = {_NOW} WHERE id = NEW.id;
    END
    """,
]

_STATS_QUERY = """
    SELECT
        COUNT(*),
        COALESCE(SUM(size), 0),
        COALESCE(AVG(size), 0),
        COALESCE(MAX(size), 0),
        COALESCE(MIN(size), 0),
        COUNT(DISTINCT content_hash),
        MAX(updated_at)
    FROM json_documents
"""

_DAILY_QUERY = """
    SELECT substr(created_at, 1, 10) AS day, COUNT(*), COALESCE(SUM(size), 0)
    FROM json_documents
    WHERE created_at >= date('now', '-7 days')
    GROUP BY day
    ORDER BY day DESC
"""


class SQLiteStorageEngine:
    """SQLite backend: TEXT JSON column, ON CONFLICT DO NOTHING dedup."""

    name = "sqlite"

    def __init__(
        self,
        pool: SQLitePool,
        *,
        health_check_timeout: float = 2.0,
        logger: logging.Logger | None = None,
    ) -> None:
        self._pool = pool
        self._health_check_timeout = health_check_timeout
        self._logger = logger or logging.getLogger(__name__)
        self.unit_of_work = create_uow_factory(pool)

    async def open(self) -> None:
        with translate_errors("open"):
            await self._pool.open()
        self._logger.info(
            "SQLite pool opened path=%s max_size=%d", self._pool.path, self._pool.max_size
        )

    async def close(self) -> None:
        await self._pool.close()

    async def health_check(self) -> None:
        """SELECT 1 within the fixed probe deadline."""
        try:
            async with asyncio.timeout(self._health_check_timeout):
                async with self._pool.connection(timeout=self._health_check_timeout) as conn:
                    await conn.fetchone("SELECT 1")
        except (TimeoutError, Unavailable, sqlite3.Error) as e:
            self._logger.error("SQLite health check failed: %s", e)
            raise Unavailable(f"SQLite health check failed: {e}") from e

    async def migrate(self) -> None:
        """Create table, index and updated_at trigger if missing."""
        try:
            async with self._pool.connection() as conn:
                await conn.execute("BEGIN IMMEDIATE")
                for statement in SCHEMA:
                    await conn.execute(statement)
                await conn.execute("COMMIT")
        except sqlite3.Error as e:
            raise MigrationError(f"SQLite migration failed: {e}") from e

    async def stats(self) -> DatabaseStats:
        with translate_errors("stats"):
            async with self._pool.connection() as conn:
                r = await conn.fetchone(_STATS_QUERY)
        stats = DatabaseStats(
            total_documents=r[0],
            total_size=int(r[1]),
            average_size=float(r[2]),
            max_size=r[3],
            min_size=r[4],
            unique_hashes=r[5],
            last_updated=datetime.fromisoformat(r[6]) if r[6] else None,
        )
        rows = await self._fetch_optional(_DAILY_QUERY, "daily stats", many=True)
        stats.daily_counts = [DayCount(date=d, count=c, size=int(s)) for d, c, s in rows or []]
        return stats

    async def metrics(self) -> DatabaseMetrics:
        pool = self._pool.get_stats()
        metrics = DatabaseMetrics(
            backend=self.name,
            timestamp=datetime.now(UTC),
            active_connections=pool["pool_in_use"],
            max_connections=self._pool.max_size,
            pool=pool,
        )
        page_count = await self._fetch_optional("PRAGMA page_count", "page count")
        page_size = await self._fetch_optional("PRAGMA page_size", "page size")
        if page_count and page_size:
            metrics.database_size = page_count[0] * page_size[0]
        rows = await self._fetch_optional("SELECT COUNT(*) FROM json_documents", "table metrics")
        if rows:
            metrics.tables = [TableStats(name="json_documents", rows=rows[0])]
        return metrics

    async def _fetch_optional(self, query: str, what: str, *, many: bool = False) -> Any:
        """Run a diagnostic query on its own connection; failures are logged, not raised."""
        try:
            async with self._pool.connection() as conn:
                if many:
                    return await conn.fetchall(query)
                return await conn.fetchone(query)
        except (sqlite3.Error, Unavailable) as e:
            self._logger.error("Failed to get %s: %s", what, e)
            return None
