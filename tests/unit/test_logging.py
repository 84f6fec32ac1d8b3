"""Unit tests for logging setup."""

import json
import logging

import pytest

from jsonstore.infrastructure.logging import (
    JSONFormatter,
    RequestIDFilter,
    configure_logging,
    get_request_id,
    request_id_var,
    set_request_id,
)


@pytest.fixture(autouse=True)
def _reset_request_id():
    token = request_id_var.set(None)
    yield
    request_id_var.reset(token)


def _record(msg: str = "hello %s", args: tuple = ("world",)) -> logging.LogRecord:
    return logging.LogRecord("jsonstore.test", logging.INFO, __file__, 1, msg, args, None)


def test_set_request_id_keeps_incoming_value() -> None:
    assert set_request_id("abc-123") == "abc-123"
    assert get_request_id() == "abc-123"


def test_set_request_id_generates_when_empty() -> None:
    request_id = set_request_id(None)
    assert len(request_id) == 36
    assert get_request_id() == request_id


def test_filter_adds_request_id() -> None:
    record = _record()
    assert RequestIDFilter().filter(record)
    assert record.request_id == "-"

    set_request_id("req-1")
    record = _record()
    RequestIDFilter().filter(record)
    assert record.request_id == "req-1"


def test_json_formatter() -> None:
    set_request_id("req-2")
    record = _record()
    RequestIDFilter().filter(record)

    payload = json.loads(JSONFormatter().format(record))

    assert payload["message"] == "hello world"
    assert payload["level"] == "INFO"
    assert payload["request_id"] == "req-2"
    assert payload["logger"] == "jsonstore.test"


def test_configure_logging_installs_single_handler() -> None:
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        configure_logging("debug", "json")
        configure_logging("warning", "json")
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JSONFormatter)
        assert root.level == logging.WARNING
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
