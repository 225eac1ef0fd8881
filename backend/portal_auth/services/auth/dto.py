# portal_auth/services/auth/dto.py
from __future__ import annotations

from dataclasses import dataclass

from portal_auth.services.verification.dto import CodePurpose

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class SendCodeIn:
    """
    Input DTO for requesting a verification code.

    :param email: Recipient address (normalized).
    :type email: str
    :param purpose: What the code will authorize.
    :type purpose: CodePurpose
    """

    email: str
    purpose: CodePurpose


@dataclass(frozen=True, slots=True)
class CodeLoginIn:
    """
    Input DTO for email-code login.

    :param email: Address the code was sent to.
    :type email: str
    :param code: Code typed by the user.
    :type code: str
    """

    email: str
    code: str


@dataclass(frozen=True, slots=True)
class RefreshIn:
    """
    Input DTO for access token refresh.

    :param refresh_token: Encoded refresh JWT.
    :type refresh_token: str
    """

    refresh_token: str


@dataclass(frozen=True, slots=True)
class LogoutIn:
    """
    Input DTO for logout.

    :param access_token: Encoded access JWT being retired.
    :type access_token: str
    """

    access_token: str


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class AccessTokenOut:
    """
    Output DTO for a refreshed access token.

    :param access_token: Encoded access JWT.
    :type access_token: str
    :param expires_in: Lifetime in seconds.
    :type expires_in: int
    """

    access_token: str
    expires_in: int
    token_type: str = "Bearer"
