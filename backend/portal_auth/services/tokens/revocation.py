from __future__ import annotations

from datetime import timedelta

from portal_auth.services._shared.ports import KeyValueStore
from portal_auth.services.tokens.dto import REVOCATION_TTL

REVOKED_MARKER = "revoked"


class RevocationRegistry:
    """
    Blacklist of explicitly revoked tokens.

    Entries live for a fixed TTL regardless of the token's remaining lifetime.
    """

    def __init__(self, store: KeyValueStore, *, ttl: timedelta = REVOCATION_TTL) -> None:
        self.store = store
        self.ttl = ttl

    @staticmethod
    def _k(token: str) -> str:
        return f"token_blacklist:{token}"

    def revoke(self, token: str) -> None:
        # plain overwrite; idempotent
        self.store.set(self._k(token), REVOKED_MARKER, ttl=self.ttl)

    def is_revoked(self, token: str) -> bool:
        return self.store.exists(self._k(token))
