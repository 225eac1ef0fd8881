"""Pytest fixtures wiring the auth services to in-process doubles.

Every test gets a fresh application, so the in-memory key-value store, the
outbox notifier and the member directory never leak between cases.
"""

from __future__ import annotations

import os
from collections.abc import Callable, Generator
from typing import Any

import fakeredis
import pytest
from flask import Flask
from portal_auth.core.config import TestingConfig
from portal_auth.core.extensions import AuthServices, get_services
from portal_auth.factory import create_app
from portal_auth.services._shared.dto import Member
from portal_auth.services._shared.ports import (
    InMemoryKeyValueStore,
    InMemoryMemberDirectory,
    InMemoryNotifier,
)

from tests.factories import MemberFactory


class TestConfig(TestingConfig):
    """Testing configuration for creating the Flask app.

    Notes
    -----
    - In-process TTL store and outbox notifier.
    - Short, fixed policy values so limits are easy to hit.
    """

    VERIFICATION_MAX_SEND_PER_DAY = 3
    LOG_LEVEL = "WARNING"


@pytest.fixture()
def app() -> Generator[Flask, None, None]:
    """Create a Flask application configured for testing.

    Yields
    ------
    flask.Flask
        Application with :class:`TestConfig` applied and an app context pushed
        (the JWT signer needs one).
    """
    # Ensure env-based config does not leak into tests
    os.environ.pop("REDIS_URL", None)
    application = create_app(TestConfig, instance_relative_config=False)
    with application.app_context():
        yield application


@pytest.fixture()
def client(app: Flask) -> Any:
    """Return a Flask test client."""

    return app.test_client()


@pytest.fixture()
def services(app: Flask) -> AuthServices:
    """Service graph bound to the test application."""

    return get_services(app)


@pytest.fixture()
def outbox(services: AuthServices) -> InMemoryNotifier:
    notifier = services.notifier
    assert isinstance(notifier, InMemoryNotifier)
    return notifier


@pytest.fixture()
def store(services: AuthServices) -> InMemoryKeyValueStore:
    kv = services.store
    assert isinstance(kv, InMemoryKeyValueStore)
    return kv


@pytest.fixture()
def member(services: AuthServices) -> Member:
    """An enabled member registered in the directory."""

    directory = services.members
    assert isinstance(directory, InMemoryMemberDirectory)
    m = MemberFactory()
    directory.add(m)
    return m


@pytest.fixture()
def fake_redis() -> fakeredis.FakeRedis:
    """Provide a fresh FakeRedis instance for each test."""
    r = fakeredis.FakeRedis()
    r.flushall()
    return r


@pytest.fixture(scope="session")
def faker() -> Any:
    """Provide a :class:`faker.Faker` instance seeded for deterministic tests."""
    from faker import Faker

    fk = Faker()
    Faker.seed(1337)
    return fk


@pytest.fixture()
def freeze_time() -> Callable[[str | None], Any]:
    """Factory returning :func:`freezegun.freeze_time`.

    Examples
    --------
    >>> def test_with_frozen_time(freeze_time):
    ...     with freeze_time("2024-01-01 12:00:00") as frozen:
    ...         frozen.tick(30)
    """

    from freezegun import freeze_time as _freeze_time

    def _factory(target: str | None = None) -> Any:
        return _freeze_time(target or "2024-01-01 12:00:00")

    return _factory
