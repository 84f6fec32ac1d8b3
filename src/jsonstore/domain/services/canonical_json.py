"""Deterministic JSON canonicalization for content-addressed hashing.

Canonical form:
- UTF-8 encoding
- Object keys sorted lexicographically by Unicode codepoint
- No insignificant whitespace
- Numbers keep Python json formatting for finite int/float (``1`` and ``1.0``
  are different documents)
- No NaN/Infinity, including numbers that overflow to infinity (``1e400``)
- No U+0000 and no lone surrogates in strings or keys

Two payloads are the same document iff their canonical bytes are equal.
Malformed input is always rejected; it is never fingerprinted as raw bytes.
"""

import hashlib
import json
from typing import Any

from jsonstore.domain.exceptions import InvalidDocument

FINGERPRINT_LENGTH = 64


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


def decode(raw: bytes) -> Any:
    """Parse raw bytes into a JSON value, raising InvalidDocument on bad input."""
    if not raw:
        raise InvalidDocument("Document is empty")
    try:
        text = bytes(raw).decode("utf-8")
        value = json.loads(text, parse_constant=_reject_constant)
    except (UnicodeDecodeError, ValueError) as e:
        raise InvalidDocument(f"Invalid JSON: {e}") from e
    except RecursionError as e:
        raise InvalidDocument("Invalid JSON: nesting too deep") from e
    if value is None:
        raise InvalidDocument("Document must not be JSON null")
    return value


def check_text(value: Any, what: str = "Document") -> None:
    """Raise InvalidDocument if any string or key in value contains U+0000.

    Walks iteratively so nesting depth is bounded only by the parser.
    """
    stack = [value]
    while stack:
        item = stack.pop()
        if isinstance(item, str):
            if "\x00" in item:
                raise InvalidDocument(f"{what} must not contain U+0000")
        elif isinstance(item, dict):
            for key, child in item.items():
                if isinstance(key, str) and "\x00" in key:
                    raise InvalidDocument(f"{what} must not contain U+0000")
                stack.append(child)
        elif isinstance(item, (list, tuple)):
            stack.extend(item)


def canonical_dumps(value: Any) -> str:
    """Return canonical JSON string with sorted keys and no whitespace."""
    return json.dumps(
        value,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
    )


def encode(value: Any, what: str = "Document") -> bytes:
    """Return the canonical UTF-8 bytes of an already parsed JSON value."""
    check_text(value, what)
    try:
        # UnicodeEncodeError (lone surrogate) is a ValueError
        return canonical_dumps(value).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise InvalidDocument(f"{what} is not valid JSON: {e}") from e
    except RecursionError as e:
        raise InvalidDocument(f"{what} nesting too deep") from e


def canonicalize(raw: bytes) -> bytes:
    """Return the canonical UTF-8 byte form of raw JSON bytes."""
    return encode(decode(raw))


def fingerprint(canonical: bytes) -> str:
    """Return lowercase hex SHA-256 digest of canonical bytes."""
    return hashlib.sha256(canonical).hexdigest()


def content_hash(raw: bytes) -> str:
    """Canonicalize raw JSON bytes and return their fingerprint."""
    return fingerprint(canonicalize(raw))
