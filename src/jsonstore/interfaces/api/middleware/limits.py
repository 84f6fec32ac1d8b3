"""Request body size and concurrency limits."""

import falcon
import falcon.asgi

from jsonstore.interfaces.api.errors import set_error


class BodySizeLimitMiddleware:
    """Reject requests whose Content-Length exceeds the limit with 413."""

    def __init__(self, max_body_size: int) -> None:
        self._max_body_size = max_body_size

    async def process_request(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        if req.content_length is not None and req.content_length > self._max_body_size:
            set_error(
                resp,
                falcon.HTTP_413,
                "PAYLOAD_TOO_LARGE",
                f"Request body exceeds {self._max_body_size} bytes",
            )
            resp.complete = True


class ConcurrencyLimitMiddleware:
    """Answer 429 while ``max_concurrent`` requests are already in flight.

    The counter is only touched from the event loop thread, so no lock.
    """

    def __init__(self, max_concurrent: int) -> None:
        self._max_concurrent = max_concurrent
        self._in_flight = 0

    @property
    def in_flight(self) -> int:
        return self._in_flight

    async def process_request(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        if self._in_flight >= self._max_concurrent:
            set_error(resp, falcon.HTTP_429, "TOO_MANY_REQUESTS", "Too many concurrent requests")
            resp.complete = True
            return
        self._in_flight += 1
        req.context.counted = True

    async def process_response(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, resource, req_succeeded
    ) -> None:
        if getattr(req.context, "counted", False):
            req.context.counted = False
            self._in_flight -= 1
