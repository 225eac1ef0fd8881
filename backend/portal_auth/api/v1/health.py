"""Health check endpoint."""

from __future__ import annotations

from flask import Blueprint, current_app

from portal_auth.api.deps import json_response, services, timing
from portal_auth.services._shared.errors import StoreUnavailableError

bp = Blueprint("health", __name__)


@bp.get("/health")
@timing
def healthcheck():
    """Return application and key-value store health information."""

    store_status = "ok"
    try:
        if not services().store.ping():
            store_status = "fail"
    except StoreUnavailableError:
        current_app.logger.exception("healthcheck.store_error")
        store_status = "fail"
    payload = {
        "status": "ok" if store_status == "ok" else "degraded",
        "store": store_status,
        "version": current_app.config.get("APP_VERSION", "dev"),
    }
    return json_response(payload, status=200 if store_status == "ok" else 503)
