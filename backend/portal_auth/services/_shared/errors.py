"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and should never import or depend
on Flask, HTTP, or Redis directly. They are the closed set of failure kinds
that token and verification-code callers branch on.

The translation to HTTP responses (RFC 7807) is handled by
``portal_auth/core/errors.py`` via ``BaseService.translate_exceptions()``.
"""

from __future__ import annotations

# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - ``code`` is a stable machine-readable identifier; branch on the type
      or on ``code``, never on the message text.
    """

    code = "service_error"
    default_message = "Service error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class TokenError(ServiceError):
    """Base for failures on the token validation and refresh paths."""

    code = "token_error"


class VerificationError(ServiceError):
    """Base for failures on the verification-code paths."""

    code = "verification_error"


# --------------------------------------------------------------------------- #
# Token errors
# --------------------------------------------------------------------------- #


class TokenInvalidError(TokenError):
    """Bad signature, malformed payload, or wrong token kind."""

    code = "token_invalid"
    default_message = "Token is invalid"


class TokenExpiredError(TokenError):
    """The token's embedded expiry has passed."""

    code = "token_expired"
    default_message = "Token has expired"


class TokenRevokedError(TokenError):
    """The token has an explicit revocation entry."""

    code = "token_revoked"
    default_message = "Token has been revoked"


class SessionMismatchError(TokenError):
    """The presented token is not the one stored for its identity."""

    code = "session_mismatch"
    default_message = "Token does not match the active session"


# --------------------------------------------------------------------------- #
# Verification-code errors
# --------------------------------------------------------------------------- #


class CooldownActiveError(VerificationError):
    """
    Raised when a code was sent too recently to the same recipient.

    :param retry_after: Whole seconds until the next send is allowed.
    :type retry_after: int
    """

    code = "cooldown_active"

    def __init__(self, retry_after: int) -> None:
        self.retry_after = max(0, int(retry_after))
        super().__init__(f"Please wait {self.retry_after}s before requesting another code")


class DailyQuotaExceededError(VerificationError):
    """
    Raised when the recipient has used up today's send quota.

    :param limit: Configured maximum sends per calendar day.
    :type limit: int
    """

    code = "daily_quota_exceeded"

    def __init__(self, limit: int) -> None:
        self.limit = int(limit)
        super().__init__(f"Daily limit of {self.limit} codes reached")


class CodeInvalidOrExpiredError(VerificationError):
    """The submitted code does not match an outstanding code."""

    code = "code_invalid_or_expired"
    default_message = "Verification code is invalid or has expired"


class NotificationFailedError(VerificationError):
    """The notifier could not deliver the code."""

    code = "notification_failed"
    default_message = "Verification code could not be delivered"


# --------------------------------------------------------------------------- #
# Infrastructure
# --------------------------------------------------------------------------- #


class StoreUnavailableError(ServiceError):
    """The key-value store failed or timed out."""

    code = "store_unavailable"
    default_message = "Key-value store unavailable"


class AccountDisabledError(ServiceError):
    """The member account exists but may not sign in."""

    code = "account_disabled"
    default_message = "Account is disabled"
