"""Build the configured storage engine."""

import logging

from jsonstore.application.ports import StorageEngine
from jsonstore.config import Settings
from jsonstore.infrastructure.persistence.postgres import PostgresStorageEngine, create_pool
from jsonstore.infrastructure.persistence.sqlite import SQLitePool, SQLiteStorageEngine


def create_engine(settings: Settings, logger: logging.Logger | None = None) -> StorageEngine:
    """Return an unopened engine for ``settings.database_type``.

    The only place that knows which backends exist.
    """
    if settings.database_type == "sqlite":
        pool = SQLitePool(
            settings.sqlite_path,
            max_size=settings.pool_max_size,
            timeout=settings.pool_timeout,
        )
        return SQLiteStorageEngine(
            pool,
            health_check_timeout=settings.health_check_timeout,
            logger=logger,
        )
    if settings.database_type == "postgres":
        pool = create_pool(
            settings.database_url,
            min_size=settings.pool_min_size,
            max_size=settings.pool_max_size,
            timeout=settings.pool_timeout,
        )
        return PostgresStorageEngine(
            pool,
            health_check_timeout=settings.health_check_timeout,
            logger=logger,
        )
    raise ValueError(f"Unsupported database type: {settings.database_type}")
