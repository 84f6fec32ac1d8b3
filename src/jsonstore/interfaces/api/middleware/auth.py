"""Basic auth middleware for admin resources."""

import base64
import binascii
import secrets

import falcon
import falcon.asgi

from jsonstore.interfaces.api.errors import set_error


def parse_basic_auth(header: str | None) -> tuple[str, str] | None:
    """(username, password) from an Authorization header, or None."""
    if not header or not header.startswith("Basic "):
        return None
    try:
        decoded = base64.b64decode(header[6:].strip(), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return None
    username, sep, password = decoded.partition(":")
    if not sep:
        return None
    return username, password


class BasicAuthMiddleware:
    """Guard resources that set ``auth_required = True``.

    Without configured credentials the guard is off.
    """

    def __init__(self, username: str = "", password: str = "") -> None:
        self._username = username
        self._password = password

    @property
    def enabled(self) -> bool:
        return bool(self._username and self._password)

    async def process_resource(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, resource, params
    ) -> None:
        if not self.enabled or not getattr(resource, "auth_required", False):
            return
        credentials = parse_basic_auth(req.get_header("Authorization"))
        if credentials is not None:
            username, password = credentials
            user_ok = secrets.compare_digest(username.encode(), self._username.encode())
            password_ok = secrets.compare_digest(password.encode(), self._password.encode())
            if user_ok and password_ok:
                return
        resp.set_header("WWW-Authenticate", 'Basic realm="Restricted"')
        set_error(resp, falcon.HTTP_401, "UNAUTHORIZED", "Authentication required")
        resp.complete = True
