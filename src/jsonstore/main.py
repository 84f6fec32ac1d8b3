"""Application entry point and composition root."""

import asyncio
import logging

from falcon.asgi import App

from jsonstore import __version__
from jsonstore.application.services import DocumentStore
from jsonstore.config import Settings, get_settings
from jsonstore.infrastructure.logging import configure_logging
from jsonstore.infrastructure.persistence.factory import create_engine
from jsonstore.interfaces.api.app import create_app
from jsonstore.interfaces.api.middleware.auth import BasicAuthMiddleware
from jsonstore.interfaces.api.middleware.engine_lifespan import EngineLifespanMiddleware
from jsonstore.interfaces.api.middleware.limits import (
    BodySizeLimitMiddleware,
    ConcurrencyLimitMiddleware,
)
from jsonstore.interfaces.api.middleware.request_id import (
    RequestIDMiddleware,
    RequestLoggerMiddleware,
)

logger = logging.getLogger("jsonstore")


def create_store(settings: Settings) -> DocumentStore:
    """Unopened document store on the configured backend."""
    engine = create_engine(settings, logger=logging.getLogger("jsonstore.storage"))
    return DocumentStore(
        engine,
        max_document_size=settings.max_document_size,
        batch_cap=settings.batch_cap,
        operation_timeout=settings.operation_timeout,
        logger=logger,
    )


def create_jsonstore_app(settings: Settings | None = None) -> App:
    """Composition root - build Falcon app with all dependencies."""
    settings = settings or get_settings()
    store = create_store(settings)
    return create_app(
        store,
        version=__version__,
        environment=settings.environment,
        batch_cap=settings.batch_cap,
        middleware=[
            RequestIDMiddleware(),
            RequestLoggerMiddleware(settings.slow_request_threshold),
            BodySizeLimitMiddleware(settings.max_body_size),
            ConcurrencyLimitMiddleware(settings.max_concurrent_requests),
            BasicAuthMiddleware(settings.admin_username, settings.admin_password),
            EngineLifespanMiddleware(store),
        ],
    )


def main() -> None:
    """CLI entry point - run the HTTP server."""
    import uvicorn

    settings = get_settings()
    configure_logging(settings.log_level, settings.log_format)
    logger.info(
        "Starting jsonstore v%s backend=%s environment=%s",
        __version__,
        settings.database_type,
        settings.environment,
    )
    app = create_jsonstore_app(settings)
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


async def _migrate(settings: Settings) -> None:
    store = create_store(settings)
    await store.open()
    try:
        await store.migrate()
    finally:
        await store.close()


def migrate() -> None:
    """CLI entry point - create the schema and exit."""
    settings = get_settings()
    configure_logging(settings.log_level, settings.log_format)
    asyncio.run(_migrate(settings))


if __name__ == "__main__":
    main()
