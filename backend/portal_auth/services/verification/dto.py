# portal_auth/services/verification/dto.py
from __future__ import annotations

import string
from dataclasses import dataclass
from datetime import timedelta
from enum import Enum

DIGITS = string.digits
LETTERS = string.ascii_uppercase
LETTERS_AND_DIGITS = string.ascii_uppercase + string.digits


class CodePurpose(str, Enum):
    """
    What an outstanding code authorizes; the value is the store-key suffix.

    Only ``LOGIN`` codes are redeemed in this package (code login). Codes for
    ``REGISTER`` and ``RESET_PASSWORD`` are issued here but checked by the
    account services that own member records, through
    :meth:`VerificationCodeService.verify` or ``require_valid``.
    """

    REGISTER = "register"
    LOGIN = "login"
    RESET_PASSWORD = "reset"

    @property
    def description(self) -> str:
        return _PURPOSE_DESCRIPTIONS[self]


_PURPOSE_DESCRIPTIONS = {
    CodePurpose.REGISTER: "Registration",
    CodePurpose.LOGIN: "Sign-in",
    CodePurpose.RESET_PASSWORD: "Password reset",
}


class CodeType(str, Enum):
    """Character set used when generating codes."""

    NUMERIC = "NUMERIC"
    LETTER = "LETTER"
    MIXED = "MIXED"

    @property
    def alphabet(self) -> str:
        if self is CodeType.LETTER:
            return LETTERS
        if self is CodeType.MIXED:
            return LETTERS_AND_DIGITS
        return DIGITS


@dataclass(frozen=True, slots=True)
class CodePolicy:
    """
    Generation and rate-limit settings for verification codes.

    :param length: Number of characters per code.
    :type length: int
    :param code_type: Alphabet selector.
    :type code_type: CodeType
    :param code_ttl: Lifetime of an outstanding code.
    :type code_ttl: timedelta
    :param send_interval: Minimum time between two sends to one recipient.
    :type send_interval: timedelta
    :param max_send_per_day: Sends allowed per recipient per calendar day.
    :type max_send_per_day: int
    """

    length: int = 6
    code_type: CodeType = CodeType.NUMERIC
    code_ttl: timedelta = timedelta(minutes=5)
    send_interval: timedelta = timedelta(seconds=60)
    max_send_per_day: int = 20

    @property
    def ttl_minutes(self) -> int:
        return max(1, int(self.code_ttl.total_seconds() // 60))


@dataclass(frozen=True, slots=True)
class CodeDispatch:
    """
    Outcome of a successful send.

    :param recipient: Address the code went to.
    :type recipient: str
    :param purpose: What the code authorizes.
    :type purpose: CodePurpose
    :param expires_in: Seconds until the code expires.
    :type expires_in: int
    :param retry_after: Seconds until another send is allowed.
    :type retry_after: int
    :param remaining_today: Sends left for the current day.
    :type remaining_today: int
    """

    recipient: str
    purpose: CodePurpose
    expires_in: int
    retry_after: int
    remaining_today: int
