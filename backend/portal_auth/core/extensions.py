"""Global Flask extension instances and initialization helpers."""

from __future__ import annotations

import atexit
import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import cast

import redis  # type: ignore[import-untyped]
from flask import Flask, current_app
from flask_jwt_extended import JWTManager
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

from portal_auth.infra.jwt.flask_jwt_token_signer import FlaskJWTTokenSigner
from portal_auth.infra.mail.smtp_notifier import RetryPolicy, SmtpEmailNotifier
from portal_auth.infra.redis.redis_key_value_store import RedisKeyValueStore
from portal_auth.services import (
    AuthService,
    CodePolicy,
    CodeStore,
    CodeType,
    RateLimiter,
    RevocationRegistry,
    SessionStore,
    TokenPolicy,
    TokenService,
    VerificationCodeService,
)
from portal_auth.services._shared.ports import (
    InMemoryKeyValueStore,
    InMemoryMemberDirectory,
    InMemoryNotifier,
    KeyValueStore,
    MemberDirectory,
    Notifier,
)

# Global singletons (import-safe)
jwt = JWTManager()
limiter = Limiter(key_func=get_remote_address)
redis_client: redis.Redis | None = None

log = logging.getLogger(__name__)

EXTENSION_KEY = "portal_auth"


@dataclass(slots=True)
class AuthServices:
    """Wired service graph stored in ``app.extensions``."""

    store: KeyValueStore
    tokens: TokenService
    codes: VerificationCodeService
    auth: AuthService
    members: MemberDirectory
    notifier: Notifier


def token_policy_from_config(app: Flask) -> TokenPolicy:
    return TokenPolicy(
        access_ttl=app.config["JWT_ACCESS_TOKEN_EXPIRES"],
        refresh_ttl=app.config["JWT_REFRESH_TOKEN_EXPIRES"],
        revocation_ttl=app.config["TOKEN_REVOCATION_TTL"],
    )


def code_policy_from_config(app: Flask) -> CodePolicy:
    return CodePolicy(
        length=int(app.config["VERIFICATION_CODE_LENGTH"]),
        code_type=CodeType(str(app.config["VERIFICATION_CODE_TYPE"]).upper()),
        code_ttl=timedelta(minutes=int(app.config["VERIFICATION_CODE_EXPIRE_MINUTES"])),
        send_interval=timedelta(seconds=int(app.config["VERIFICATION_SEND_INTERVAL_SECONDS"])),
        max_send_per_day=int(app.config["VERIFICATION_MAX_SEND_PER_DAY"]),
    )


def build_notifier(app: Flask) -> Notifier:
    """Select the notifier from ``MAIL_BACKEND`` (``smtp`` or ``memory``)."""
    backend = str(app.config.get("MAIL_BACKEND", "smtp")).strip().lower()
    if backend == "memory":
        return InMemoryNotifier()
    if backend != "smtp":
        raise RuntimeError(f"Unknown MAIL_BACKEND {backend!r}")
    notifier = SmtpEmailNotifier(
        host=app.config["MAIL_HOST"],
        port=int(app.config["MAIL_PORT"]),
        sender=app.config["MAIL_SENDER"],
        username=app.config.get("MAIL_USERNAME"),
        password=app.config.get("MAIL_PASSWORD"),
        use_tls=bool(app.config.get("MAIL_USE_TLS", True)),
        retry=RetryPolicy(
            max_retries=int(app.config["MAIL_MAX_RETRIES"]),
            base_delay=float(app.config["MAIL_RETRY_BASE_DELAY"]),
        ),
        timeout=float(app.config["MAIL_SEND_TIMEOUT"]),
    )
    # Flask has no app shutdown hook; stop the delivery workers with the process
    atexit.register(notifier.close)
    return notifier


def build_services(
    app: Flask,
    store: KeyValueStore,
    *,
    notifier: Notifier | None = None,
    members: MemberDirectory | None = None,
) -> AuthServices:
    """Wire stores, signer, notifier and member lookup into the service graph.

    Member records live outside this service, so deployments pass their own
    :class:`MemberDirectory`. Without one an empty in-memory directory is used
    and every code login is rejected.
    """
    token_policy = token_policy_from_config(app)
    code_policy = code_policy_from_config(app)

    tokens = TokenService(
        signer=FlaskJWTTokenSigner(policy=token_policy),
        sessions=SessionStore(store),
        revocations=RevocationRegistry(store, ttl=token_policy.revocation_ttl),
        policy=token_policy,
    )
    notifier = notifier or build_notifier(app)
    codes = VerificationCodeService(
        limiter=RateLimiter(
            store,
            interval=code_policy.send_interval,
            daily_max=code_policy.max_send_per_day,
        ),
        codes=CodeStore(store),
        notifier=notifier,
        policy=code_policy,
    )
    if members is None:
        if not app.config.get("TESTING"):
            log.warning(
                "No member directory configured; code login will reject every address"
            )
        members = InMemoryMemberDirectory()
    auth = AuthService(tokens=tokens, codes=codes, members=members)
    return AuthServices(
        store=store, tokens=tokens, codes=codes, auth=auth, members=members, notifier=notifier
    )


def init_app(
    app: Flask,
    *,
    members: MemberDirectory | None = None,
    notifier: Notifier | None = None,
) -> None:
    """Initialize JWT, rate limiting, the key-value store and the services.

    Parameters
    ----------
    app: flask.Flask
        Application used to bind extension instances. When ``REDIS_URL`` is
        unset an in-process TTL store is used instead of Redis.
    members: MemberDirectory, optional
        Lookup of member accounts for code login.
    notifier: Notifier, optional
        Replaces the notifier selected by ``MAIL_BACKEND``.
    """
    jwt.init_app(app)
    limiter.init_app(app)

    global redis_client
    redis_url = app.config.get("REDIS_URL")
    store: KeyValueStore
    if redis_url:
        timeout = float(app.config.get("REDIS_SOCKET_TIMEOUT", 2.0))
        redis_client = redis.Redis.from_url(
            redis_url, socket_timeout=timeout, socket_connect_timeout=timeout
        )
        app.extensions["redis_client"] = redis_client
        store = RedisKeyValueStore(redis_client)
    else:
        redis_client = None
        app.extensions.pop("redis_client", None)
        store = InMemoryKeyValueStore()

    app.extensions[EXTENSION_KEY] = build_services(app, store, notifier=notifier, members=members)


def get_services(app: Flask | None = None) -> AuthServices:
    """Return the service graph bound to ``app`` (default: current app)."""
    target = app or current_app
    services = target.extensions.get(EXTENSION_KEY)
    if services is None:
        raise RuntimeError("Auth services are not initialized. Call init_app() first.")
    return cast(AuthServices, services)
