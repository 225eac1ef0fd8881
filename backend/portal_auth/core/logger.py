"""JSON logging for the auth service.

Every record carries the request id of the HTTP call that produced it, and
bearer tokens or JWTs that slip into a message are masked before output.
"""

from __future__ import annotations

import json
import logging
import re
import sys
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from flask import Flask, Response, g, has_request_context, request

REQUEST_ID_HEADER = "X-Request-ID"
CORRELATION_HEADERS = (REQUEST_ID_HEADER, "X-Correlation-ID")

# Set by ``api.deps.timing``
TIMING_KEYS = ("endpoint", "elapsed_ms")

# header.payload.signature in base64url
_JWT_RE = re.compile(r"eyJ[\w-]+\.[\w-]+\.[\w-]+")
MASK = "[redacted]"


def redact(text: str) -> str:
    return _JWT_RE.sub(MASK, text)


class JSONFormatter(logging.Formatter):
    """One JSON object per line; messages and tracebacks are redacted."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "time": datetime.fromtimestamp(record.created, UTC).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "name": record.name,
            "message": redact(record.getMessage()),
            "request_id": getattr(record, "request_id", None),
        }
        payload.update({k: getattr(record, k) for k in TIMING_KEYS if hasattr(record, k)})
        if record.exc_info:
            payload["exc_info"] = redact(self.formatException(record.exc_info))
        return json.dumps(payload, default=str)


class RequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = current_request_id()
        return True


def current_request_id() -> str | None:
    """Request id of the active request (taken from headers or generated), else ``None``."""

    if not has_request_context():
        return None
    if "request_id" not in g:
        incoming = next(filter(None, (request.headers.get(h) for h in CORRELATION_HEADERS)), None)
        g.request_id = incoming or uuid4().hex
    return g.request_id  # type: ignore[no-any-return]


def configure_logging(level: str | int = "INFO") -> None:
    """Route the root logger to stdout as JSON at ``level``."""

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())
    handler.addFilter(RequestIdFilter())
    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level.upper() if isinstance(level, str) else level)


def init_app(app: Flask) -> None:
    """Echo the request id back on every response."""

    @app.after_request
    def _echo_request_id(response: Response) -> Response:
        request_id = current_request_id()
        if request_id:
            response.headers.setdefault(REQUEST_ID_HEADER, request_id)
        return response


__all__ = ["configure_logging", "init_app", "current_request_id", "redact", "JSONFormatter"]
