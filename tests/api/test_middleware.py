"""Middleware tests."""

import logging

import falcon
import falcon.asgi
import pytest
from falcon.testing import TestClient

from jsonstore.application.services import DocumentStore
from jsonstore.interfaces.api.middleware.auth import BasicAuthMiddleware, parse_basic_auth
from jsonstore.interfaces.api.middleware.engine_lifespan import EngineLifespanMiddleware
from jsonstore.interfaces.api.middleware.limits import (
    BodySizeLimitMiddleware,
    ConcurrencyLimitMiddleware,
)
from jsonstore.interfaces.api.middleware.request_id import (
    RequestIDMiddleware,
    RequestLoggerMiddleware,
)

from tests.conftest import FakeStorageEngine


class EchoResource:
    async def on_post(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        resp.media = {"ok": True}

    async def on_get(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        resp.media = {"ok": True}


class AdminResource(EchoResource):
    auth_required = True


def _client(*middleware) -> TestClient:
    app = falcon.asgi.App(middleware=list(middleware))
    app.add_route("/echo", EchoResource())
    app.add_route("/admin", AdminResource())
    return TestClient(app)


def test_request_id_echoed_or_generated() -> None:
    client = _client(RequestIDMiddleware())

    given = client.simulate_get("/echo", headers={"X-Request-ID": "abc-1"})
    generated = client.simulate_get("/echo")

    assert given.headers["X-Request-ID"] == "abc-1"
    assert len(generated.headers["X-Request-ID"]) == 36


def test_request_logger_warns_on_slow_requests(caplog: pytest.LogCaptureFixture) -> None:
    client = _client(RequestLoggerMiddleware(slow_threshold=-1.0))

    with caplog.at_level(logging.INFO, logger="jsonstore.access"):
        client.simulate_get("/echo")

    record = next(r for r in caplog.records if r.name == "jsonstore.access")
    assert record.levelno == logging.WARNING
    assert record.getMessage().startswith("GET /echo 200")


def test_body_size_limit() -> None:
    client = _client(BodySizeLimitMiddleware(max_body_size=16))

    ok = client.simulate_post("/echo", json={"a": 1})
    too_big = client.simulate_post("/echo", json={"a": "x" * 100})

    assert ok.status_code == 200
    assert too_big.status_code == 413
    assert too_big.json["error"] == "PAYLOAD_TOO_LARGE"


def test_concurrency_limit() -> None:
    limiter = ConcurrencyLimitMiddleware(max_concurrent=1)
    client = _client(limiter)

    assert client.simulate_get("/echo").status_code == 200
    assert limiter.in_flight == 0

    limiter._in_flight = 1
    r = client.simulate_get("/echo")
    assert r.status_code == 429
    assert r.json["error"] == "TOO_MANY_REQUESTS"
    assert limiter.in_flight == 1


def test_basic_auth_only_guards_marked_resources() -> None:
    client = _client(BasicAuthMiddleware("admin", "pw"))

    assert client.simulate_get("/echo").status_code == 200
    assert client.simulate_get("/admin").status_code == 401
    r = client.simulate_get("/admin", headers={"Authorization": "Basic YWRtaW46cHc="})
    assert r.status_code == 200


def test_basic_auth_disabled_without_credentials() -> None:
    client = _client(BasicAuthMiddleware())
    assert client.simulate_get("/admin").status_code == 200


def test_parse_basic_auth() -> None:
    assert parse_basic_auth("Basic YWRtaW46cHc=") == ("admin", "pw")
    assert parse_basic_auth("Basic bm9jb2xvbg==") is None
    assert parse_basic_auth("Basic !!!") is None
    assert parse_basic_auth("Bearer token") is None
    assert parse_basic_auth(None) is None


@pytest.mark.asyncio
async def test_engine_lifespan(fake_engine: FakeStorageEngine, store: DocumentStore) -> None:
    lifespan = EngineLifespanMiddleware(store)

    await lifespan.process_startup({}, {})
    assert fake_engine.opened
    assert fake_engine.migrations == 1

    await lifespan.process_shutdown({}, {})
    assert fake_engine.closed
