"""Unit tests for JSON canonicalization and fingerprinting."""

import hashlib

import pytest

from jsonstore.domain.exceptions import InvalidDocument
from jsonstore.domain.services import canonicalize, check_text, content_hash, encode, fingerprint
from jsonstore.domain.services.canonical_json import FINGERPRINT_LENGTH

DEEP = b"[" * 100_000 + b"]" * 100_000


def test_canonicalize_sorts_keys_and_strips_whitespace() -> None:
    """Key order and insignificant whitespace do not survive canonicalization."""
    assert canonicalize(b'{ "b": 1,\n  "a": [1, 2, {"d": 0, "c": null}] }') == (
        b'{"a":[1,2,{"c":null,"d":0}],"b":1}'
    )


def test_equivalent_payloads_share_fingerprint() -> None:
    """Whitespace/key-order variants hash identically."""
    variants = [
        b'{"a":1,"b":2}',
        b'{"b":2,"a":1}',
        b'  {\n"a" : 1 ,\t"b":2}  ',
    ]
    hashes = {content_hash(v) for v in variants}
    assert len(hashes) == 1


def test_distinct_payloads_have_distinct_fingerprints() -> None:
    assert content_hash(b'{"a":1}') != content_hash(b'{"a":2}')
    assert content_hash(b"[1,2]") != content_hash(b"[2,1]")


def test_int_and_float_are_distinct_documents() -> None:
    """1 and 1.0 keep their own canonical forms."""
    assert canonicalize(b"1") == b"1"
    assert canonicalize(b"1.0") == b"1.0"
    assert content_hash(b'{"n":1}') != content_hash(b'{"n":1.0}')


def test_unicode_is_kept_as_utf8() -> None:
    """Non-ASCII characters are emitted as UTF-8, escapes are normalized."""
    assert canonicalize('{"name":"Документ"}'.encode()) == '{"name":"Документ"}'.encode()
    assert canonicalize(b'{"name":"\\u00e9"}') == '{"name":"é"}'.encode()


def test_duplicate_keys_last_wins() -> None:
    assert canonicalize(b'{"a":1,"a":2}') == b'{"a":2}'


def test_scalars_are_documents() -> None:
    assert canonicalize(b'"text"') == b'"text"'
    assert canonicalize(b"true") == b"true"
    assert canonicalize(b"[]") == b"[]"


@pytest.mark.parametrize(
    "raw",
    [
        b"",
        b"   ",
        b"{",
        b'{"a":}',
        b"{'a': 1}",
        b"null",
        b'{"a": NaN}',
        b"[Infinity]",
        b"-Infinity",
        b"\xff\xfe{}",
        "\ufeff{}".encode(),
        b"1e400",
        b"[-1e400]",
        b'["\\ud800"]',
        b'{"\\udc00":1}',
        b'{"a":"\\u0000"}',
        b'{"\\u0000":1}',
        pytest.param(DEEP, id="deep-nesting"),
    ],
)
def test_invalid_input_rejected(raw: bytes) -> None:
    """Malformed input raises InvalidDocument, never a raw-bytes fallback."""
    with pytest.raises(InvalidDocument):
        canonicalize(raw)


def test_fingerprint_is_lowercase_sha256_hex() -> None:
    canonical = b'{"a":1}'
    digest = fingerprint(canonical)
    assert digest == hashlib.sha256(canonical).hexdigest()
    assert len(digest) == FINGERPRINT_LENGTH
    assert digest == digest.lower()


def test_nul_and_surrogates_rejected_in_parsed_values() -> None:
    """Already parsed values (metadata, HTTP bodies) follow the same text rules."""
    with pytest.raises(InvalidDocument, match="Metadata must not contain U\\+0000"):
        encode({"tags": ["ok", "bad\x00"]}, "Metadata")
    with pytest.raises(InvalidDocument, match="Metadata is not valid JSON"):
        encode({"k": "\ud800"}, "Metadata")
    with pytest.raises(InvalidDocument, match="not valid JSON"):
        encode([float("inf")])
    assert encode({"b": "é", "a": None}) == '{"a":null,"b":"é"}'.encode()


def test_check_text_walks_deep_values() -> None:
    value: list = []
    cursor = value
    for _ in range(5000):
        child: list = []
        cursor.append(child)
        cursor = child
    cursor.append("\x00")

    with pytest.raises(InvalidDocument):
        check_text(value)
