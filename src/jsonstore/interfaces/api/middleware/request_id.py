"""Request ID and access log middleware."""

import logging
import time

import falcon.asgi

from jsonstore.infrastructure.logging import set_request_id

REQUEST_ID_HEADER = "X-Request-ID"


class RequestIDMiddleware:
    """Honor or generate X-Request-ID; echo it back and expose it to logging."""

    async def process_request(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        req.context.request_id = set_request_id(req.get_header(REQUEST_ID_HEADER))

    async def process_response(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, resource, req_succeeded
    ) -> None:
        request_id = getattr(req.context, "request_id", None)
        if request_id:
            resp.set_header(REQUEST_ID_HEADER, request_id)


class RequestLoggerMiddleware:
    """One log line per request; slow requests are logged as WARNING."""

    def __init__(self, slow_threshold: float = 1.0, logger: logging.Logger | None = None) -> None:
        self._slow_threshold = slow_threshold
        self._logger = logger or logging.getLogger("jsonstore.access")

    async def process_request(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        req.context.started_at = time.perf_counter()

    async def process_response(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, resource, req_succeeded
    ) -> None:
        started_at = getattr(req.context, "started_at", None)
        if started_at is None:
            return
        elapsed = time.perf_counter() - started_at
        level = logging.WARNING if elapsed > self._slow_threshold else logging.INFO
        self._logger.log(
            level,
            "%s %s %s %.1fms",
            req.method,
            req.path,
            resp.status,
            elapsed * 1000,
        )
