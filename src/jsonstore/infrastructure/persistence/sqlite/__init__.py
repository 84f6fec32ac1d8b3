"""SQLite storage engine (TEXT JSON column, ON CONFLICT dedup)."""

from jsonstore.infrastructure.persistence.sqlite.connection import SQLitePool
from jsonstore.infrastructure.persistence.sqlite.engine import SQLiteStorageEngine

__all__ = ["SQLitePool", "SQLiteStorageEngine"]
