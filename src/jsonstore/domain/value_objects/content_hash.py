"""Content hash value object - the deduplication key."""

import re
from dataclasses import dataclass

from jsonstore.domain.services.canonical_json import canonicalize, fingerprint

_HEX64 = re.compile(r"[0-9a-f]{64}")


@dataclass(frozen=True)
class ContentHash:
    """SHA-256 of canonical JSON bytes (lowercase hex)."""

    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str) or not _HEX64.fullmatch(self.value):
            raise ValueError("Content hash must be 64 lowercase hex characters")

    @classmethod
    def of(cls, raw: bytes) -> "ContentHash":
        """Fingerprint raw JSON bytes. Raises InvalidDocument for malformed input."""
        return cls(fingerprint(canonicalize(raw)))

    def __str__(self) -> str:
        return self.value
