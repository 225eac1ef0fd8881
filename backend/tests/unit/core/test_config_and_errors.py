"""Unit tests for configuration selection and service-error translation."""

from __future__ import annotations

from datetime import timedelta
from http import HTTPStatus

import pytest
from portal_auth.core import config as config_module
from portal_auth.core.errors import APIError, ServiceUnavailable, TooManyRequests, Unauthorized
from portal_auth.core.extensions import code_policy_from_config, token_policy_from_config
from portal_auth.services._shared.base import BaseService
from portal_auth.services._shared.errors import (
    AccountDisabledError,
    CodeInvalidOrExpiredError,
    CooldownActiveError,
    DailyQuotaExceededError,
    NotificationFailedError,
    SessionMismatchError,
    StoreUnavailableError,
    TokenExpiredError,
    TokenInvalidError,
    TokenRevokedError,
)
from portal_auth.services.verification import CodeType


@pytest.mark.parametrize(
    ("env", "expected"),
    [
        ("testing", config_module.TestingConfig),
        ("production", config_module.ProductionConfig),
        ("unknown", config_module.DevelopmentConfig),
    ],
)
def test_get_config_follows_app_env(monkeypatch, env, expected):
    monkeypatch.setenv(config_module.ENV_VAR, env)
    assert config_module.get_config() is expected


def test_env_bool(monkeypatch):
    monkeypatch.setenv("FEATURE_X", "Yes")
    assert config_module.env_bool("FEATURE_X") is True
    monkeypatch.setenv("FEATURE_X", "0")
    assert config_module.env_bool("FEATURE_X", True) is False
    monkeypatch.delenv("FEATURE_X")
    assert config_module.env_bool("FEATURE_X", True) is True


def test_policies_are_built_from_app_config(app):
    tokens = token_policy_from_config(app)
    codes = code_policy_from_config(app)

    assert tokens.access_ttl == timedelta(hours=24)
    assert tokens.refresh_ttl == timedelta(days=7)
    assert tokens.revocation_ttl == timedelta(hours=24)
    assert codes.length == 6
    assert codes.code_type is CodeType.NUMERIC
    assert codes.code_ttl == timedelta(minutes=5)
    assert codes.send_interval == timedelta(seconds=60)
    assert codes.max_send_per_day == 3


def test_jwt_uses_hs512(app):
    assert app.config["JWT_ALGORITHM"] == "HS512"


@pytest.mark.parametrize(
    "exc",
    [
        TokenInvalidError(),
        TokenExpiredError(),
        TokenRevokedError(),
        SessionMismatchError(),
        AccountDisabledError(),
    ],
)
def test_token_errors_translate_to_generic_401(exc):
    translated = BaseService.translate_exceptions(exc)

    assert isinstance(translated, Unauthorized)
    assert translated.message == "Invalid or expired credentials"


def test_cooldown_translates_to_429_with_retry_after():
    translated = BaseService.translate_exceptions(CooldownActiveError(retry_after=42))

    assert isinstance(translated, TooManyRequests)
    assert translated.status_code == HTTPStatus.TOO_MANY_REQUESTS
    assert translated.headers == {"Retry-After": "42"}


def test_quota_translates_to_429():
    translated = BaseService.translate_exceptions(DailyQuotaExceededError(limit=20))

    assert isinstance(translated, TooManyRequests)
    assert "Retry-After" not in translated.headers


@pytest.mark.parametrize(
    ("exc", "status"),
    [
        (CodeInvalidOrExpiredError(), HTTPStatus.BAD_REQUEST),
        (NotificationFailedError(), HTTPStatus.BAD_GATEWAY),
        (StoreUnavailableError(), HTTPStatus.SERVICE_UNAVAILABLE),
    ],
)
def test_other_service_errors_translate_by_kind(exc, status):
    translated = BaseService.translate_exceptions(exc)

    assert isinstance(translated, APIError)
    assert translated.status_code == status


def test_store_unavailable_is_a_503():
    assert isinstance(BaseService.translate_exceptions(StoreUnavailableError()), ServiceUnavailable)


def test_non_service_errors_pass_through():
    err = RuntimeError("boom")
    assert BaseService.translate_exceptions(err) is err
