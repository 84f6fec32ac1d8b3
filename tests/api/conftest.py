"""Fixtures for API tests."""

import falcon.asgi
import pytest

from jsonstore.application.services import DocumentStore
from jsonstore.interfaces.api.app import create_app
from jsonstore.interfaces.api.middleware.auth import BasicAuthMiddleware
from jsonstore.interfaces.api.middleware.limits import (
    BodySizeLimitMiddleware,
    ConcurrencyLimitMiddleware,
)
from jsonstore.interfaces.api.middleware.request_id import (
    RequestIDMiddleware,
    RequestLoggerMiddleware,
)

ADMIN = ("admin", "s3cret")


@pytest.fixture
def app(store: DocumentStore) -> falcon.asgi.App:
    """Falcon ASGI app over the fake engine, with the production middleware stack."""
    return create_app(
        store,
        version="1.0.0-test",
        environment="development",
        batch_cap=10,
        middleware=[
            RequestIDMiddleware(),
            RequestLoggerMiddleware(slow_threshold=1.0),
            BodySizeLimitMiddleware(max_body_size=4096),
            ConcurrencyLimitMiddleware(max_concurrent=10),
            BasicAuthMiddleware(*ADMIN),
        ],
    )


@pytest.fixture
def client(app):
    """Falcon ASGI test client."""
    from falcon.testing import TestClient
    return TestClient(app)
