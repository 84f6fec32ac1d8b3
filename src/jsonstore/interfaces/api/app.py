"""Falcon ASGI application."""

import falcon.asgi
from falcon.asgi import App

from jsonstore.application.services import DocumentStore
from jsonstore.domain.exceptions import JSONStoreError
from jsonstore.interfaces.api.errors import handle_store_error, handle_unexpected
from jsonstore.interfaces.api.resources.documents import (
    JSONBatchGetResource,
    JSONBatchResource,
    JSONDocumentResource,
    JSONDocumentsResource,
)
from jsonstore.interfaces.api.resources.health import HealthResource
from jsonstore.interfaces.api.resources.stats import MetricsResource, StatsResource

API_PREFIX = "/api/v1"


def create_app(
    store: DocumentStore,
    *,
    version: str,
    environment: str,
    batch_cap: int,
    middleware: list | None = None,
) -> App:
    """Create Falcon ASGI app with routes and error handlers."""
    app = falcon.asgi.App(middleware=middleware or [])
    app.add_error_handler(Exception, handle_unexpected)
    app.add_error_handler(JSONStoreError, handle_store_error)

    health = HealthResource(store, version, environment)
    app.add_route(f"{API_PREFIX}/health", health)
    app.add_route(f"{API_PREFIX}/ready", health, suffix="ready")
    app.add_route(f"{API_PREFIX}/version", health, suffix="version")

    app.add_route(f"{API_PREFIX}/json", JSONDocumentsResource(store))
    app.add_route(f"{API_PREFIX}/json/batch", JSONBatchResource(store, batch_cap))
    app.add_route(f"{API_PREFIX}/json/batch/get", JSONBatchGetResource(store, batch_cap))
    app.add_route(f"{API_PREFIX}/json/{{document_id}}", JSONDocumentResource(store))

    app.add_route(f"{API_PREFIX}/stats", StatsResource(store))
    app.add_route(f"{API_PREFIX}/metrics", MetricsResource(store))
    return app
