"""Authentication-related Marshmallow schemas."""

from __future__ import annotations

from typing import Any

from marshmallow import Schema, fields, post_load, validate

from portal_auth.services.auth import CodeLoginIn, RefreshIn, SendCodeIn
from portal_auth.services.verification import CodePurpose


class SendCodeSchema(Schema):
    """Input payload requesting a verification code."""

    email = fields.Email(required=True, validate=validate.Length(max=254))
    purpose = fields.Enum(CodePurpose, by_value=True, load_default=CodePurpose.LOGIN)

    @post_load
    def to_dto(self, data: dict[str, Any], **_: Any) -> SendCodeIn:
        return SendCodeIn(email=data["email"], purpose=data["purpose"])


class CodeLoginSchema(Schema):
    """Input payload exchanging a LOGIN code for tokens."""

    email = fields.Email(required=True, validate=validate.Length(max=254))
    code = fields.String(required=True, validate=validate.Length(min=1, max=32))

    @post_load
    def to_dto(self, data: dict[str, Any], **_: Any) -> CodeLoginIn:
        return CodeLoginIn(email=data["email"], code=data["code"])


class RefreshSchema(Schema):
    """Input payload carrying a refresh token."""

    refresh_token = fields.String(required=True, validate=validate.Length(min=1))

    @post_load
    def to_dto(self, data: dict[str, Any], **_: Any) -> RefreshIn:
        return RefreshIn(refresh_token=data["refresh_token"])


class TokenPairSchema(Schema):
    """Response payload for a fresh access/refresh pair."""

    access_token = fields.String(required=True)
    refresh_token = fields.String(required=True)
    token_type = fields.String()
    expires_in = fields.Integer()


class AccessTokenSchema(Schema):
    """Response payload for a refreshed access token."""

    access_token = fields.String(required=True)
    token_type = fields.String()
    expires_in = fields.Integer()


class CodeDispatchSchema(Schema):
    """Response payload after a code was sent."""

    purpose = fields.Enum(CodePurpose, by_value=True)
    expires_in = fields.Integer()
    retry_after = fields.Integer()
    remaining_today = fields.Integer()


class WhoAmISchema(Schema):
    """Response payload exposing the identity behind a bearer token."""

    username = fields.String(required=True)
    user_id = fields.Integer(required=True)
    user_type = fields.String()
    register_type = fields.String(allow_none=True)
