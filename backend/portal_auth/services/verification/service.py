# portal_auth/services/verification/service.py
from __future__ import annotations

import math
import secrets
from datetime import timedelta

from portal_auth.services._shared.base import BaseService
from portal_auth.services._shared.errors import (
    CodeInvalidOrExpiredError,
    CooldownActiveError,
    DailyQuotaExceededError,
    NotificationFailedError,
    StoreUnavailableError,
)
from portal_auth.services._shared.ports import Notifier
from portal_auth.services.verification.code_store import CodeStore
from portal_auth.services.verification.dto import CodeDispatch, CodePolicy, CodePurpose
from portal_auth.services.verification.rate_limiter import RateLimiter


def _whole_seconds(delta: timedelta) -> int:
    return math.ceil(delta.total_seconds())


class VerificationCodeService(BaseService):
    """
    One-time verification codes (send / verify).

    Sends are rate limited per recipient by a cooldown claimed atomically
    before delivery and by a daily quota counted only after delivery.
    Verification consumes the code atomically, so each code succeeds once.
    """

    def __init__(
        self,
        *,
        limiter: RateLimiter,
        codes: CodeStore,
        notifier: Notifier,
        policy: CodePolicy | None = None,
    ) -> None:
        """
        Initialize the service with its dependencies.

        :param limiter: Cooldown and daily quota per recipient.
        :param codes: Outstanding code per (recipient, purpose).
        :param notifier: Delivery channel for generated codes.
        :param policy: Code format, lifetime and rate-limit settings.
        """
        super().__init__()
        self.limiter = limiter
        self.codes = codes
        self.notifier = notifier
        self.policy = policy or CodePolicy()

    # ------------------------------------------------------------------ #
    # Send
    # ------------------------------------------------------------------ #

    def send(self, recipient: str, purpose: CodePurpose) -> CodeDispatch:
        """
        Generate, store and deliver a code for ``recipient``.

        If delivery fails the code stays stored until its TTL; a resend
        overwrites it. Neither the cooldown nor the quota is charged when
        any step before delivery completes fails.

        :raises CooldownActiveError: A code was sent too recently.
        :raises DailyQuotaExceededError: Today's quota is used up.
        :raises NotificationFailedError: The notifier did not deliver.
        :raises StoreUnavailableError: The store failed.
        """
        stamp = self.limiter.acquire_cooldown(recipient)
        if stamp is None:
            wait = self.limiter.cooldown_remaining(recipient)
            self.log.warning("Send frequency limit hit for purpose=%s", purpose.value)
            raise CooldownActiveError(retry_after=max(1, _whole_seconds(wait)))

        # Nothing is charged unless the code went out.
        try:
            if self.limiter.quota_remaining(recipient) <= 0:
                self.log.warning("Daily send limit hit for purpose=%s", purpose.value)
                raise DailyQuotaExceededError(limit=self.limiter.daily_max)

            code = self.generate_code()
            self.codes.put(recipient, purpose, code, self.policy.code_ttl)
            self._deliver(recipient, code, purpose)
        except Exception:
            self._release_cooldown(recipient, stamp)
            raise

        self.limiter.record_send(recipient)
        self.log.info("Verification code sent for purpose=%s", purpose.value)
        return CodeDispatch(
            recipient=recipient,
            purpose=purpose,
            expires_in=_whole_seconds(self.policy.code_ttl),
            retry_after=_whole_seconds(self.limiter.interval),
            remaining_today=self.limiter.quota_remaining(recipient),
        )

    def _deliver(self, recipient: str, code: str, purpose: CodePurpose) -> None:
        try:
            delivered = self.notifier.send(
                recipient, code, purpose.description, self.policy.ttl_minutes
            )
        except Exception as exc:
            self.log.error("Verification code delivery raised", exc_info=True)
            raise NotificationFailedError() from exc
        if not delivered:
            self.log.error("Verification code delivery failed for purpose=%s", purpose.value)
            raise NotificationFailedError()

    def _release_cooldown(self, recipient: str, stamp: str) -> None:
        try:
            self.limiter.release_cooldown(recipient, stamp)
        except StoreUnavailableError:
            # The slot still expires on its own after one interval.
            self.log.warning("Could not release send cooldown", exc_info=True)

    def generate_code(self) -> str:
        alphabet = self.policy.code_type.alphabet
        return "".join(secrets.choice(alphabet) for _ in range(self.policy.length))

    # ------------------------------------------------------------------ #
    # Verify
    # ------------------------------------------------------------------ #

    def verify(self, recipient: str, purpose: CodePurpose, code: str | None) -> bool:
        """Consume the outstanding code if it matches. Fails closed on store errors."""
        try:
            ok = self.codes.consume(recipient, purpose, code)
        except StoreUnavailableError:
            self.log.error("Code verification failed closed: store unavailable", exc_info=True)
            return False
        if not ok:
            self.log.warning("Verification code rejected for purpose=%s", purpose.value)
        return ok

    def require_valid(self, recipient: str, purpose: CodePurpose, code: str | None) -> None:
        if not self.verify(recipient, purpose, code):
            raise CodeInvalidOrExpiredError()

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #

    def cooldown_remaining(self, recipient: str) -> int:
        """Whole seconds until ``recipient`` may request another code."""
        return _whole_seconds(self.limiter.cooldown_remaining(recipient))

    def quota_remaining(self, recipient: str) -> int:
        return self.limiter.quota_remaining(recipient)
