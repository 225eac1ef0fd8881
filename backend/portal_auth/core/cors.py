"""CORS configuration for the auth API."""

from __future__ import annotations

from flask import Flask
from flask_cors import CORS

# Headers browsers must be able to read on auth responses
EXPOSED_HEADERS = ["Retry-After", "X-Request-ID"]


def parse_origins(raw: str | None) -> list[str]:
    """Split a comma-separated ``CORS_ORIGINS`` value; ``[]`` means any origin."""
    origins = [o.strip() for o in (raw or "").split(",") if o.strip()]
    return [] if origins == ["*"] else origins


def init_app(app: Flask) -> None:
    """Configure CORS for API endpoints.

    A blank or ``"*"`` ``CORS_ORIGINS`` allows any origin without credentials.
    Bearer tokens travel in the ``Authorization`` header, so it is always
    allowed.
    """
    origins = parse_origins(app.config.get("CORS_ORIGINS"))
    api_base = app.config.get("API_BASE_PREFIX", "/api").rstrip("/")

    CORS(
        app,
        resources={rf"{api_base}/*": {"origins": origins or "*"}},
        supports_credentials=bool(origins),
        allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
        expose_headers=EXPOSED_HEADERS,
        max_age=app.config.get("CORS_MAX_AGE", 600),
    )
