# portal_auth/services/_shared/base.py
from __future__ import annotations

import logging
from datetime import UTC, datetime
from http import HTTPStatus

from portal_auth.core import errors as api_errors
from portal_auth.services._shared.errors import (
    AccountDisabledError,
    CodeInvalidOrExpiredError,
    CooldownActiveError,
    DailyQuotaExceededError,
    NotificationFailedError,
    ServiceError,
    StoreUnavailableError,
    TokenError,
)


class BaseService:
    """
    Base class for application services.

    Responsibilities
    ----------------
    * Provide a single UTC clock so time can be frozen in tests.
    * Centralize error translation and logging.
    * Keep services thin, orchestration-only, no web/Redis leakage.
    """

    def __init__(self) -> None:
        self.log = logging.getLogger(type(self).__module__)

    @staticmethod
    def now_utc() -> datetime:
        return datetime.now(UTC)

    # -------------------------- Error handling ------------------------------

    @staticmethod
    def translate_exceptions(exc: Exception) -> Exception:
        """
        Map service-level errors to API-level (HTTP) errors.

        Messages are deliberately generic so responses never reveal whether an
        account, code or session exists.

        :param exc: Exception raised within the service.
        :type exc: Exception
        :returns: Translated exception ready to be re-raised.
        :rtype: Exception
        """
        if isinstance(exc, (TokenError, AccountDisabledError)):
            # → 401 Unauthorized
            return api_errors.Unauthorized("Invalid or expired credentials")

        if isinstance(exc, CooldownActiveError):
            return api_errors.TooManyRequests(
                "Verification code requested too frequently",
                retry_after=exc.retry_after,
            )

        if isinstance(exc, DailyQuotaExceededError):
            return api_errors.TooManyRequests("Verification code limit reached for today")

        if isinstance(exc, CodeInvalidOrExpiredError):
            return api_errors.APIError(
                message="Verification code is invalid or has expired",
                status_code=HTTPStatus.BAD_REQUEST,
                code=exc.code,
            )

        if isinstance(exc, NotificationFailedError):
            return api_errors.APIError(
                message="Verification code could not be delivered",
                status_code=HTTPStatus.BAD_GATEWAY,
                code=exc.code,
            )

        if isinstance(exc, StoreUnavailableError):
            return api_errors.ServiceUnavailable()

        # Any other ServiceError subclass → 400 Bad Request
        if isinstance(exc, ServiceError):
            return api_errors.APIError(message=str(exc), status_code=400, code="bad_request")

        # Fallback: return untouched (will bubble up to Flask handler)
        return exc
