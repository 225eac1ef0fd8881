"""Authentication endpoints using the service layer."""

from __future__ import annotations

from flask import Blueprint, current_app, g, request

from portal_auth.api.deps import current_identity, json_response, require_auth, services, timing
from portal_auth.core.extensions import limiter
from portal_auth.schemas import (
    AccessTokenSchema,
    CodeDispatchSchema,
    CodeLoginSchema,
    RefreshSchema,
    SendCodeSchema,
    TokenPairSchema,
    WhoAmISchema,
)
from portal_auth.services.auth import LogoutIn

bp = Blueprint("auth", __name__, url_prefix="/auth")

send_code_schema = SendCodeSchema()
code_login_schema = CodeLoginSchema()
refresh_schema = RefreshSchema()
token_pair_schema = TokenPairSchema()
access_token_schema = AccessTokenSchema()
dispatch_schema = CodeDispatchSchema()
whoami_schema = WhoAmISchema()


def _refresh_rate_limit() -> str:
    return str(current_app.config.get("AUTH_REFRESH_RATE_LIMIT", "30 per minute"))


@bp.post("/codes")
@timing
def send_code():
    """Send a verification code to an email address."""

    dto = send_code_schema.load(request.get_json(silent=True) or {})
    dispatch = services().auth.send_code(dto)
    return json_response({"data": dispatch_schema.dump(dispatch)}, status=202)


@bp.post("/login/code")
@timing
def login_with_code():
    """Exchange a LOGIN verification code for a token pair."""

    dto = code_login_schema.load(request.get_json(silent=True) or {})
    pair = services().auth.login_with_code(dto)
    return json_response({"data": token_pair_schema.dump(pair)})


@bp.post("/refresh")
@limiter.limit(_refresh_rate_limit)
@timing
def refresh():
    """Mint a new access token from the current refresh token."""

    dto = refresh_schema.load(request.get_json(silent=True) or {})
    out = services().auth.refresh(dto)
    return json_response({"data": access_token_schema.dump(out)})


@bp.post("/logout")
@require_auth
@timing
def logout():
    """Revoke the bearer token and drop its sessions."""

    services().auth.logout(LogoutIn(access_token=g.access_token), current_identity())
    return "", 204


@bp.get("/whoami")
@require_auth
@timing
def whoami():
    """Return the identity behind the bearer token."""

    return json_response({"data": whoami_schema.dump(current_identity())})
