"""Domain services."""

from jsonstore.domain.services.canonical_json import (
    canonical_dumps,
    canonicalize,
    check_text,
    content_hash,
    decode,
    encode,
    fingerprint,
)

__all__ = [
    "canonical_dumps",
    "canonicalize",
    "check_text",
    "content_hash",
    "decode",
    "encode",
    "fingerprint",
]
