# tests/unit/services/test_token_service.py
from __future__ import annotations

import threading
from datetime import timedelta

import pytest
from portal_auth.services._shared.errors import (
    SessionMismatchError,
    StoreUnavailableError,
    TokenExpiredError,
    TokenInvalidError,
    TokenRevokedError,
)
from portal_auth.services.tokens import RevocationRegistry, SessionStore, TokenPair, TokenService

from tests.factories import IdentityFactory


# ------------------------------ Fixtures ---------------------------------- #
@pytest.fixture()
def tokens(services) -> TokenService:
    """TokenService wired to the in-memory store and the real JWT signer."""
    return services.tokens


@pytest.fixture()
def identity():
    return IdentityFactory()


class _FailingStore:
    """Key-value store double that is always down."""

    def __getattr__(self, name):
        def _fail(*args, **kwargs):
            raise StoreUnavailableError("down")

        return _fail


def _broken(services) -> TokenService:
    return TokenService(
        signer=services.tokens.signer,
        sessions=SessionStore(_FailingStore()),
        revocations=RevocationRegistry(_FailingStore()),
    )


# -------------------------------- Issue ----------------------------------- #
def test_issue_pair_then_validate(tokens, identity):
    pair = tokens.issue_pair(identity)

    assert isinstance(pair, TokenPair)
    assert pair.token_type == "Bearer"
    assert pair.expires_in == 24 * 3600
    assert tokens.validate(pair.access_token) is True
    assert tokens.authenticate(pair.access_token).user_id == identity.user_id


def test_issue_pair_stores_sessions_with_ttls(tokens, identity, store):
    pair = tokens.issue_pair(identity)

    access_key = f"access_token:{identity.username}:{identity.user_id}"
    refresh_key = f"refresh_token:{identity.username}"
    assert store.get(access_key) == pair.access_token
    assert store.get(refresh_key) == pair.refresh_token
    assert store.ttl(access_key) == pytest.approx(24 * 3600, abs=5)
    assert store.ttl(refresh_key) == pytest.approx(7 * 24 * 3600, abs=5)


def test_new_login_supersedes_previous_pair(tokens, identity):
    first = tokens.issue_pair(identity)
    second = tokens.issue_pair(identity)

    assert tokens.validate(first.access_token) is False
    with pytest.raises(SessionMismatchError):
        tokens.authenticate(first.access_token)
    assert tokens.validate(second.access_token) is True


def test_concurrent_issue_pair_leaves_exactly_one_valid(app, tokens, identity):
    results: list[TokenPair] = []
    lock = threading.Lock()
    barrier = threading.Barrier(2)

    def login() -> None:
        with app.app_context():
            barrier.wait()
            pair = tokens.issue_pair(identity)
            with lock:
                results.append(pair)

    threads = [threading.Thread(target=login) for _ in range(2)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(results) == 2
    assert sum(tokens.validate(p.access_token) for p in results) == 1


def test_issue_pair_fails_loud_when_store_down(services, identity):
    broken = _broken(services)
    with pytest.raises(StoreUnavailableError):
        broken.issue_pair(identity)


# ------------------------------- Validate --------------------------------- #
def test_validate_rejects_refresh_token(tokens, identity):
    pair = tokens.issue_pair(identity)

    assert tokens.validate(pair.refresh_token) is False
    with pytest.raises(TokenInvalidError):
        tokens.authenticate(pair.refresh_token)


def test_validate_rejects_garbage(tokens):
    assert tokens.validate("not-a-token") is False


def test_validate_rejects_expired_token(tokens, identity, freeze_time):
    with freeze_time() as frozen:
        pair = tokens.issue_pair(identity)
        frozen.tick(timedelta(hours=24, seconds=1))

        assert tokens.validate(pair.access_token) is False
        with pytest.raises((TokenExpiredError, SessionMismatchError)):
            tokens.authenticate(pair.access_token)


def test_validate_fails_closed_when_store_down(services, identity):
    pair = services.tokens.issue_pair(identity)
    broken = _broken(services)

    assert broken.validate(pair.access_token) is False


def test_expires_within(tokens, identity, freeze_time):
    with freeze_time() as frozen:
        pair = tokens.issue_pair(identity)
        assert tokens.expires_within(pair.access_token) is False

        frozen.tick(timedelta(hours=23, minutes=31))
        assert tokens.expires_within(pair.access_token) is True
    assert tokens.expires_within("garbage") is True


# -------------------------------- Refresh --------------------------------- #
def test_refresh_returns_new_active_access_token(tokens, identity):
    pair = tokens.issue_pair(identity)

    access = tokens.refresh(pair.refresh_token)

    assert access != pair.access_token
    assert tokens.validate(access) is True
    # the previous access token is superseded; the refresh token is kept
    assert tokens.validate(pair.access_token) is False
    assert tokens.refresh(pair.refresh_token)


def test_refresh_with_superseded_refresh_token_fails(tokens, identity):
    old = tokens.issue_pair(identity)
    tokens.issue_pair(identity)

    with pytest.raises(SessionMismatchError):
        tokens.refresh(old.refresh_token)


def test_refresh_rejects_access_token(tokens, identity):
    pair = tokens.issue_pair(identity)

    with pytest.raises(TokenInvalidError):
        tokens.refresh(pair.access_token)


def test_refresh_after_expiry_fails(tokens, identity, freeze_time):
    with freeze_time() as frozen:
        pair = tokens.issue_pair(identity)
        frozen.tick(timedelta(days=7, seconds=1))

        with pytest.raises(TokenExpiredError):
            tokens.refresh(pair.refresh_token)


# -------------------------------- Revoke ---------------------------------- #
def test_revoke_invalidates_until_revocation_ttl(tokens, identity, freeze_time):
    with freeze_time() as frozen:
        pair = tokens.issue_pair(identity)
        tokens.revoke(pair.access_token)

        assert tokens.validate(pair.access_token) is False
        with pytest.raises(TokenRevokedError):
            tokens.authenticate(pair.access_token)
        assert tokens.is_revoked(pair.access_token) is True

        frozen.tick(timedelta(hours=23, minutes=59))
        assert tokens.is_revoked(pair.access_token) is True
        frozen.tick(timedelta(minutes=2))
        assert tokens.is_revoked(pair.access_token) is False


def test_revoke_drops_both_sessions(tokens, identity):
    pair = tokens.issue_pair(identity)
    tokens.revoke(pair.access_token)

    with pytest.raises(SessionMismatchError):
        tokens.refresh(pair.refresh_token)


def test_revoke_unreadable_token_still_blacklists(tokens):
    tokens.revoke("garbled")
    assert tokens.is_revoked("garbled") is True


def test_revoke_with_identity(tokens, identity):
    pair = tokens.issue_pair(identity)
    tokens.revoke_with_identity(pair.access_token, identity)

    assert tokens.validate(pair.access_token) is False
    with pytest.raises(SessionMismatchError):
        tokens.refresh(pair.refresh_token)


def test_revoke_fails_loud_when_store_down(services, identity):
    pair = services.tokens.issue_pair(identity)
    broken = _broken(services)
    with pytest.raises(StoreUnavailableError):
        broken.revoke(pair.access_token)
