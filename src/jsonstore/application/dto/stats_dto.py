"""Statistics and metrics DTOs."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta


@dataclass
class DayCount:
    """Documents created on one UTC day."""

    date: str
    count: int
    size: int


@dataclass
class DatabaseStats:
    """Aggregate view over stored documents."""

    total_documents: int
    total_size: int
    average_size: float
    max_size: int
    min_size: int
    unique_hashes: int
    last_updated: datetime | None
    daily_counts: list[DayCount] = field(default_factory=list)


@dataclass
class TableStats:
    """Per-table size counters."""

    name: str
    rows: int
    size: int | None = None
    index_size: int | None = None
    total_size: int | None = None


@dataclass
class DatabaseMetrics:
    """Backend-specific operational counters."""

    backend: str
    timestamp: datetime
    active_connections: int = 0
    max_connections: int = 0
    cache_hit_ratio: float | None = None
    slow_queries: int = 0
    database_size: int | None = None
    tables: list[TableStats] = field(default_factory=list)
    pool: dict[str, int] = field(default_factory=dict)
    uptime: timedelta | None = None
