"""PostgreSQL storage engine: pool, schema, diagnostics."""

import asyncio
import logging
from datetime import UTC, datetime
from typing import Any

import psycopg
from psycopg_pool import AsyncConnectionPool

from jsonstore.application.dto import DatabaseMetrics, DatabaseStats, DayCount, TableStats
from jsonstore.domain.exceptions import MigrationError, Unavailable
from jsonstore.infrastructure.persistence.postgres.errors import translate_errors
from jsonstore.infrastructure.persistence.postgres.unit_of_work import create_uow_factory

# Serializes concurrent migrate() calls from several processes
_MIGRATION_LOCK_KEY = 7_302_114_511

SCHEMA = [
    """
    CREATE TABLE IF NOT EXISTS json_documents (
        id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
        content_hash VARCHAR(64) NOT NULL,
        raw_content BYTEA NOT NULL,
        json_data JSONB NOT NULL,
        size BIGINT NOT NULL DEFAULT 0,
        metadata JSONB NOT NULL DEFAULT '{}',
        created_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
        updated_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
        CONSTRAINT uq_json_documents_content_hash UNIQUE (content_hash)
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_json_documents_json_data_gin "
    "ON json_documents USING GIN (json_data)",
    "CREATE INDEX IF NOT EXISTS idx_json_documents_created_at ON json_documents (created_at)",
    """
    CREATE OR REPLACE FUNCTION json_documents_touch_updated_at()
    RETURNS TRIGGER AS $$
    BEGIN
        NEW.updated_at = CURRENT_TIMESTAMP;
        RETURN NEW;
    END;
    $$ LANGUAGE plpgsql
    """,
    "DROP TRIGGER IF EXISTS trg_json_documents_updated_at ON json_documents",
    """
    CREATE TRIGGER trg_json_documents_updated_at
        BEFORE UPDATE ON json_documents
        FOR EACH ROW
        EXECUTE FUNCTION json_documents_touch_updated_at()
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
    SELECT
        to_char((created_at AT TIME ZONE 'UTC')::date, 'YYYY-MM-DD') AS day,
        COUNT(*),
        COALESCE(SUM(size), 0)
    FROM json_documents
    WHERE created_at >= (CURRENT_DATE - INTERVAL '7 days')
    GROUP BY day
    ORDER BY day DESC
"""

_TABLES_QUERY = """
    SELECT
        relname,
        n_live_tup,
        pg_relation_size(relid),
        pg_indexes_size(relid),
        pg_total_relation_size(relid)
    FROM pg_stat_user_tables
    ORDER BY relname
"""


class PostgresStorageEngine:
    """PostgreSQL backend: JSONB column, GIN index, probe-then-insert dedup."""

    name = "postgres"

    def __init__(
        self,
        pool: AsyncConnectionPool,
        *,
        health_check_timeout: float = 2.0,
        logger: logging.Logger | None = None,
    ) -> None:
        self._pool = pool
        self._health_check_timeout = health_check_timeout
        self._logger = logger or logging.getLogger(__name__)
        self.unit_of_work = create_uow_factory(pool)

    async def open(self) -> None:
        await self._pool.open()
        self._logger.info("PostgreSQL pool opened max_size=%d", self._pool.max_size)

    async def close(self) -> None:
        await self._pool.close()

    async def health_check(self) -> None:
        """SELECT 1 within the fixed probe deadline."""
        try:
            async with asyncio.timeout(self._health_check_timeout):
                async with self._pool.connection(timeout=self._health_check_timeout) as conn:
                    await conn.execute("SELECT 1")
        except (TimeoutError, psycopg.Error) as e:
            self._logger.error("PostgreSQL health check failed: %s", e)
            raise Unavailable(f"PostgreSQL health check failed: {e}") from e

    async def migrate(self) -> None:
        """Create table, indexes and updated_at trigger if missing."""
        try:
            async with self._pool.connection() as conn:
                async with conn.transaction():
                    await conn.execute("SELECT pg_advisory_xact_lock(%s)", (_MIGRATION_LOCK_KEY,))
                    for statement in SCHEMA:
                        await conn.execute(statement)
        except psycopg.Error as e:
            raise MigrationError(f"PostgreSQL migration failed: {e}") from e

    async def stats(self) -> DatabaseStats:
        with translate_errors("stats"):
            async with self._pool.connection() as conn:
                cur = await conn.execute(_STATS_QUERY)
                r = await cur.fetchone()
        stats = DatabaseStats(
            total_documents=r[0],
            total_size=int(r[1]),
            average_size=float(r[2]),
            max_size=r[3],
            min_size=r[4],
            unique_hashes=r[5],
            last_updated=r[6],
        )
        rows = await self._fetch_optional(_DAILY_QUERY, "daily stats", many=True)
        stats.daily_counts = [DayCount(date=d, count=c, size=int(s)) for d, c, s in rows or []]
        return stats

    async def metrics(self) -> DatabaseMetrics:
        metrics = DatabaseMetrics(backend=self.name, timestamp=datetime.now(UTC))
        r = await self._fetch_optional(
            "SELECT count(*) FROM pg_stat_activity WHERE datname = current_database()",
            "active connections",
        )
        if r:
            metrics.active_connections = r[0]
        r = await self._fetch_optional("SHOW max_connections", "max connections")
        if r:
            metrics.max_connections = int(r[0])
        r = await self._fetch_optional(
            "SELECT sum(blks_hit)::float / NULLIF(sum(blks_hit) + sum(blks_read), 0) "
            "FROM pg_stat_database WHERE datname = current_database()",
            "cache hit ratio",
        )
        if r and r[0] is not None:
            metrics.cache_hit_ratio = r[0]
        r = await self._fetch_optional(
            "SELECT count(*) FROM pg_stat_activity WHERE state = 'active' "
            "AND now() - query_start > interval '1 second'",
            "slow queries",
        )
        if r:
            metrics.slow_queries = r[0]
        r = await self._fetch_optional(
            "SELECT pg_database_size(current_database())", "database size"
        )
        if r:
            metrics.database_size = r[0]
        rows = await self._fetch_optional(_TABLES_QUERY, "table metrics", many=True)
        metrics.tables = [
            TableStats(name=n, rows=rows_, size=s, index_size=i, total_size=t)
            for n, rows_, s, i, t in rows or []
        ]
        metrics.pool = dict(self._pool.get_stats())
        return metrics

    async def _fetch_optional(self, query: str, what: str, *, many: bool = False) -> Any:
        """Run a diagnostic query on its own connection; failures are logged, not raised."""
        try:
            async with self._pool.connection() as conn:
                cur = await conn.execute(query)
                return await (cur.fetchall() if many else cur.fetchone())
        except psycopg.Error as e:
            self._logger.error("Failed to get %s: %s", what, e)
            return None
