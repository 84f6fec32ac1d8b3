"""Outcome of storing a single document."""

from enum import StrEnum


class StoreOutcome(StrEnum):
    """Whether a store created a row, hit an existing one, or failed."""

    NEW = "new"
    EXISTING = "existing"
    FAILED = "failed"
