"""Structured logging setup with request ID support."""

import json
import logging
import sys
import uuid
from contextvars import ContextVar
from datetime import UTC, datetime

# Context variable for the current request ID
request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)


def get_request_id() -> str | None:
    """Request ID of the current context, if one was set."""
    return request_id_var.get()


def set_request_id(request_id: str | None = None) -> str:
    """
    Set request ID for current context.

    Args:
        request_id: Incoming ID (e.g. X-Request-ID header); generated when empty

    Returns:
        The request ID now in effect
    """
    request_id = request_id or str(uuid.uuid4())
    request_id_var.set(request_id)
    return request_id


class RequestIDFilter(logging.Filter):
    """Logging filter that adds request_id to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = get_request_id() or "-"  # type: ignore[attr-defined]
        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "time": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "request_id": getattr(record, "request_id", "-"),
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def configure_logging(level: int | str = logging.INFO, fmt: str = "console") -> None:
    """
    Configure root logging once at the composition root.

    Args:
        level: Logging level (name or number)
        fmt: "console" for human-readable lines, "json" for JSON lines
    """
    handler = logging.StreamHandler(sys.stdout)
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s %(levelname)s %(name)s request_id=%(request_id)s %(message)s",
                datefmt="%Y-%m-%dT%H:%M:%S",
            )
        )
    handler.addFilter(RequestIDFilter())

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level.upper() if isinstance(level, str) else level)

    # psycopg pool logs every connection at INFO
    logging.getLogger("psycopg.pool").setLevel(logging.WARNING)
