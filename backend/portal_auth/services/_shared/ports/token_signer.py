from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Protocol

from portal_auth.services._shared.dto import Identity


class TokenKind(str, Enum):
    """Kind claim embedded in every signed token."""

    ACCESS = "access"
    REFRESH = "refresh"


@dataclass(frozen=True, slots=True)
class TokenClaims:
    """
    Verified content of a signed token.

    :ivar identity: Identity the token was issued to.
    :ivar kind: ``access`` or ``refresh``.
    :ivar issued_at: Issue time (UTC).
    :ivar expires_at: Absolute expiry (UTC).
    """

    identity: Identity
    kind: TokenKind
    issued_at: datetime
    expires_at: datetime


class TokenSigner(Protocol):
    """Port for signing and verifying tokens. Stateless; owns its key."""

    def sign(self, identity: Identity, kind: TokenKind) -> str:
        """Return a signed token whose expiry follows the policy for ``kind``."""

    def verify(self, token: str, *, allow_expired: bool = False) -> TokenClaims:
        """
        Check signature and expiry and return the embedded claims.

        :raises TokenInvalidError: Bad signature or malformed payload.
        :raises TokenExpiredError: Expiry passed (unless ``allow_expired``).
        """
