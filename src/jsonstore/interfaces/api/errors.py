"""Map domain errors to HTTP responses."""

import logging

import falcon
import falcon.asgi

from jsonstore.domain.exceptions import (
    InvalidRequest,
    JSONStoreError,
    NotFound,
    Timeout,
    Unavailable,
)
from jsonstore.infrastructure.logging import get_request_id

logger = logging.getLogger(__name__)


def set_error(resp: falcon.asgi.Response, status: str, code: str, message: str) -> None:
    """Write the standard error body."""
    resp.status = status
    resp.media = {"error": code, "message": message}


def status_for(ex: JSONStoreError) -> str:
    if isinstance(ex, NotFound):
        return falcon.HTTP_404
    if isinstance(ex, InvalidRequest):
        return falcon.HTTP_400
    if isinstance(ex, Timeout):
        return falcon.HTTP_504
    if isinstance(ex, Unavailable):
        return falcon.HTTP_503
    return falcon.HTTP_500


async def handle_store_error(
    req: falcon.asgi.Request, resp: falcon.asgi.Response, ex: JSONStoreError, params: dict
) -> None:
    """Domain errors that escaped a resource."""
    status = status_for(ex)
    if status == falcon.HTTP_500:
        logger.error("Storage failure on %s %s: %s", req.method, req.path, ex)
    elif status in (falcon.HTTP_503, falcon.HTTP_504):
        logger.warning("%s on %s %s: %s", ex.code, req.method, req.path, ex)
    set_error(resp, status, ex.code, str(ex))


async def handle_unexpected(
    req: falcon.asgi.Request, resp: falcon.asgi.Response, ex: Exception, params: dict
) -> None:
    """Last resort: log with traceback, answer 500 with the request id."""
    logger.error("Unhandled error on %s %s", req.method, req.path, exc_info=ex)
    resp.status = falcon.HTTP_500
    resp.media = {
        "error": "INTERNAL_SERVER_ERROR",
        "message": "Internal server error",
        "request_id": get_request_id(),
    }
