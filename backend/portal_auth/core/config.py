"""Application settings with environment-based simple classes."""

from __future__ import annotations

import os
from collections.abc import Mapping
from datetime import timedelta
from typing import Final

from dotenv import load_dotenv

# Public selector env var (keep neutral name to avoid collisions)
ENV_VAR: Final[str] = "APP_ENV"  # 'development' | 'testing' | 'production'


# Load .env in development (no-op when missing)
load_dotenv()


def env_bool(name: str, default: bool = False) -> bool:
    """Parse a boolean flag from an environment variable.

    Parameters
    ----------
    name: str
        Environment variable to inspect.
    default: bool, optional
        Value returned when the variable is unset. Defaults to ``False``.

    Returns
    -------
    bool
        ``True`` if the value resembles ``{"1", "true", "yes", "y", "on"}``
        ignoring case; otherwise ``False`` or ``default`` when missing.
    """
    val = os.getenv(name)
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "y", "on"}


def env_int(name: str, default: int) -> int:
    """Parse an integer from an environment variable, ``default`` when unset."""
    val = os.getenv(name)
    if val is None or not val.strip():
        return default
    return int(val)


def env_float(name: str, default: float) -> float:
    val = os.getenv(name)
    if val is None or not val.strip():
        return default
    return float(val)


class BaseConfig:
    """Base configuration shared across environments.

    Attributes
    ----------
    API_BASE_PREFIX: str
        Root path for registering API blueprints.
    SECRET_KEY: str
        Flask secret. Defaults to a development-safe placeholder and should be
        overridden in production.
    JWT_SECRET_KEY: str
        Key used by ``flask-jwt-extended`` for signing tokens.
    JWT_ALGORITHM: str
        Signing algorithm (``HS512``).
    JWT_ACCESS_TOKEN_EXPIRES / JWT_REFRESH_TOKEN_EXPIRES: timedelta
        Token lifetimes (24h / 7 days).
    TOKEN_REVOCATION_TTL: timedelta
        How long a revoked token stays on the blacklist.
    REDIS_URL: str | None
        Redis connection string. When unset an in-process store is used.
    REDIS_SOCKET_TIMEOUT: float
        Per-call timeout in seconds; a timeout counts as a store failure.
    VERIFICATION_*: various
        Code length, alphabet, lifetime, send interval and daily quota.
    MAIL_*: various
        Notifier backend (``smtp`` or ``memory``) and SMTP settings.
    AUTH_REFRESH_RATE_LIMIT: str
        Flask-Limiter expression applied to the refresh endpoint.
    LOG_LEVEL: str
        Root logging verbosity (``INFO`` by default).
    CORS_ORIGINS: str
        Comma-separated list of allowed origins for CORS.

    Notes
    -----
    Values are primarily sourced from environment variables, enabling
    configuration without code changes.
    """

    API_BASE_PREFIX = "/api"

    # Secrets / security
    SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME")
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "CHANGE_ME_JWT")
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS512")
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=env_int("JWT_ACCESS_TOKEN_HOURS", 24))
    JWT_REFRESH_TOKEN_EXPIRES = timedelta(days=env_int("JWT_REFRESH_TOKEN_DAYS", 7))
    TOKEN_REVOCATION_TTL = timedelta(hours=env_int("TOKEN_REVOCATION_HOURS", 24))

    # Key-value store
    REDIS_URL = os.getenv("REDIS_URL") or None
    REDIS_SOCKET_TIMEOUT = env_float("REDIS_SOCKET_TIMEOUT", 2.0)

    # Verification codes
    VERIFICATION_CODE_LENGTH = env_int("VERIFICATION_CODE_LENGTH", 6)
    VERIFICATION_CODE_TYPE = os.getenv("VERIFICATION_CODE_TYPE", "NUMERIC")
    VERIFICATION_CODE_EXPIRE_MINUTES = env_int("VERIFICATION_CODE_EXPIRE_MINUTES", 5)
    VERIFICATION_SEND_INTERVAL_SECONDS = env_int("VERIFICATION_SEND_INTERVAL_SECONDS", 60)
    VERIFICATION_MAX_SEND_PER_DAY = env_int("VERIFICATION_MAX_SEND_PER_DAY", 20)

    # Mail
    MAIL_BACKEND = os.getenv("MAIL_BACKEND", "smtp")
    MAIL_HOST = os.getenv("MAIL_HOST", "localhost")
    MAIL_PORT = env_int("MAIL_PORT", 587)
    MAIL_USERNAME = os.getenv("MAIL_USERNAME") or None
    MAIL_PASSWORD = os.getenv("MAIL_PASSWORD") or None
    MAIL_USE_TLS = env_bool("MAIL_USE_TLS", True)
    MAIL_SENDER = os.getenv("MAIL_SENDER", "no-reply@localhost")
    MAIL_MAX_RETRIES = env_int("MAIL_MAX_RETRIES", 2)
    MAIL_RETRY_BASE_DELAY = env_float("MAIL_RETRY_BASE_DELAY", 0.5)
    MAIL_SEND_TIMEOUT = env_float("MAIL_SEND_TIMEOUT", 10.0)

    # Rate limiting (Flask-Limiter)
    AUTH_REFRESH_RATE_LIMIT = os.getenv("AUTH_REFRESH_RATE_LIMIT", "30 per minute")
    RATELIMIT_ENABLED = env_bool("RATELIMIT_ENABLED", True)
    RATELIMIT_STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI", "memory://")

    # Flask & JSON
    JSON_SORT_KEYS = False
    PROPAGATE_EXCEPTIONS = False

    # Logging & CORS
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:5173")

    # Flask built-ins
    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    """Configuration tailored for local development.

    Notes
    -----
    Enables debug mode by default and prints codes to an in-memory outbox
    unless ``MAIL_BACKEND`` says otherwise.
    """

    DEBUG = env_bool("FLASK_DEBUG", True)
    MAIL_BACKEND = os.getenv("MAIL_BACKEND", "memory")
    CORS_MAX_AGE = 600  # 10 minutes


class TestingConfig(BaseConfig):
    """Configuration for automated test runs.

    Notes
    -----
    - Forces ``TESTING`` mode and disables debug logs.
    - Uses the in-process store and outbox notifier; no Redis, no SMTP.
    - Disables Flask-Limiter so flows can be replayed freely.
    - Propagates exceptions so pytest can surface tracebacks directly.
    """

    TESTING = True
    DEBUG = False
    JWT_SECRET_KEY = "test-secret-key-that-is-long-enough-for-hs512-signing-0123456789"
    REDIS_URL = None
    MAIL_BACKEND = "memory"
    RATELIMIT_ENABLED = False
    PROPAGATE_EXCEPTIONS = True


class ProductionConfig(BaseConfig):
    """Configuration defaults for production deployments.

    Notes
    -----
    Keeps debug disabled while relying on WSGI-level log configuration for
    noise control.
    """

    DEBUG = False
    PROPAGATE_EXCEPTIONS = False


# Map names -> classes (simple, explicit)
CONFIG_MAP: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config() -> type[BaseConfig]:
    """Return the configuration class inferred from ``APP_ENV``.

    Returns
    -------
    type[BaseConfig]
        Class to pass to :meth:`flask.Config.from_object`.

    Notes
    -----
    Falls back to :class:`DevelopmentConfig` when ``APP_ENV`` is unset or
    unknown.
    """
    name = os.getenv(ENV_VAR, "development").strip().lower()
    return CONFIG_MAP.get(name, DevelopmentConfig)
