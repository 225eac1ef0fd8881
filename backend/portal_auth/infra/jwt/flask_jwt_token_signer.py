# portal_auth/infra/jwt/flask_jwt_token_signer.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, cast

import jwt
from flask_jwt_extended.exceptions import JWTExtendedException

from portal_auth.services._shared.dto import MEMBER_USER_TYPE, Identity
from portal_auth.services._shared.errors import TokenExpiredError, TokenInvalidError
from portal_auth.services._shared.ports import TokenClaims, TokenKind, TokenSigner
from portal_auth.services.tokens.dto import TokenPolicy

CLAIM_USER_ID = "uid"
CLAIM_USER_TYPE = "user_type"
CLAIM_REGISTER_TYPE = "register_type"


@dataclass(slots=True)
class FlaskJWTTokenSigner(TokenSigner):
    """
    Adapter for Flask-JWT-Extended.

    The subject is the username; the member id and user type travel as
    additional claims and the library's ``type`` claim carries the kind.

    .. note::
       Requires an active Flask app context with proper JWT settings
       (``JWT_SECRET_KEY``, ``JWT_ALGORITHM``).
    """

    policy: TokenPolicy

    def _claims_for(self, identity: Identity) -> dict[str, Any]:
        claims: dict[str, Any] = {
            CLAIM_USER_ID: identity.user_id,
            CLAIM_USER_TYPE: identity.user_type,
        }
        if identity.register_type is not None:
            claims[CLAIM_REGISTER_TYPE] = identity.register_type
        return claims

    def sign(self, identity: Identity, kind: TokenKind) -> str:
        from flask_jwt_extended import create_access_token, create_refresh_token

        if kind is TokenKind.ACCESS:
            token = create_access_token(
                identity=identity.username,
                additional_claims=self._claims_for(identity),
                expires_delta=self.policy.access_ttl,
            )
        else:
            token = create_refresh_token(
                identity=identity.username,
                additional_claims=self._claims_for(identity),
                expires_delta=self.policy.refresh_ttl,
            )
        return cast(str, token)

    def verify(self, token: str, *, allow_expired: bool = False) -> TokenClaims:
        from flask_jwt_extended import decode_token

        try:
            payload = cast(dict[str, Any], decode_token(token, allow_expired=allow_expired))
        except jwt.ExpiredSignatureError as exc:
            raise TokenExpiredError() from exc
        except (jwt.InvalidTokenError, JWTExtendedException) as exc:
            raise TokenInvalidError() from exc

        return self._to_claims(payload)

    @staticmethod
    def _to_claims(payload: dict[str, Any]) -> TokenClaims:
        """Build claims from a decoded payload, rejecting anything malformed."""
        username = payload.get("sub")
        user_id = payload.get(CLAIM_USER_ID)
        if not isinstance(username, str) or not username:
            raise TokenInvalidError("Missing subject")
        if isinstance(user_id, bool) or not isinstance(user_id, int):
            raise TokenInvalidError("Missing user id")
        if payload.get(CLAIM_USER_TYPE) != MEMBER_USER_TYPE:
            raise TokenInvalidError("Not a member token")
        try:
            kind = TokenKind(payload.get("type"))
            issued_at = datetime.fromtimestamp(int(payload["iat"]), tz=UTC)
            expires_at = datetime.fromtimestamp(int(payload["exp"]), tz=UTC)
        except (KeyError, TypeError, ValueError) as exc:
            raise TokenInvalidError("Malformed token payload") from exc

        identity = Identity(
            username=username,
            user_id=user_id,
            register_type=payload.get(CLAIM_REGISTER_TYPE),
        )
        return TokenClaims(identity=identity, kind=kind, issued_at=issued_at, expires_at=expires_at)
