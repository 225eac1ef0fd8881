# portal_auth/services/tokens/dto.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta

# --------------------------- Policy constants ------------------------------ #

ACCESS_TOKEN_TTL = timedelta(hours=24)
REFRESH_TOKEN_TTL = timedelta(days=7)
REVOCATION_TTL = timedelta(hours=24)
EXPIRING_SOON_WINDOW = timedelta(minutes=30)


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class TokenPair:
    """
    Access/refresh pair returned by a successful issuance.

    :param access_token: Signed access token.
    :type access_token: str
    :param refresh_token: Signed refresh token.
    :type refresh_token: str
    :param issued_at: Issue time (UTC).
    :type issued_at: datetime
    :param access_ttl: Access token lifetime.
    :type access_ttl: timedelta
    :param refresh_ttl: Refresh token lifetime.
    :type refresh_ttl: timedelta
    """

    access_token: str
    refresh_token: str
    issued_at: datetime
    access_ttl: timedelta
    refresh_ttl: timedelta
    token_type: str = field(default="Bearer")

    @property
    def expires_in(self) -> int:
        """Access token lifetime in whole seconds."""
        return int(self.access_ttl.total_seconds())


# ------------------------ Config DTO (optional) --------------------------- #


@dataclass(frozen=True, slots=True)
class TokenPolicy:
    """
    Token lifetime configuration.

    :param access_ttl: Access token lifetime (also the access session TTL).
    :type access_ttl: timedelta
    :param refresh_ttl: Refresh token lifetime (also the refresh session TTL).
    :type refresh_ttl: timedelta
    :param revocation_ttl: Fixed lifetime of a blacklist entry.
    :type revocation_ttl: timedelta
    """

    access_ttl: timedelta = ACCESS_TOKEN_TTL
    refresh_ttl: timedelta = REFRESH_TOKEN_TTL
    revocation_ttl: timedelta = REVOCATION_TTL
