"""PostgreSQL storage engine (JSONB column, GIN index)."""

from jsonstore.infrastructure.persistence.postgres.connection import create_pool
from jsonstore.infrastructure.persistence.postgres.engine import PostgresStorageEngine

__all__ = ["PostgresStorageEngine", "create_pool"]
