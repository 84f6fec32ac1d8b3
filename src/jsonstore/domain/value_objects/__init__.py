"""Domain value objects."""

from jsonstore.domain.value_objects.content_hash import ContentHash
from jsonstore.domain.value_objects.store_outcome import StoreOutcome

__all__ = [
    "ContentHash",
    "StoreOutcome",
]
