from __future__ import annotations

from datetime import timedelta

from portal_auth.services._shared.dto import Identity
from portal_auth.services._shared.ports import KeyValueStore


class SessionStore:
    """
    The single current access and refresh token per identity.

    Writes overwrite: the newest issuance wins and older tokens stop matching.
    """

    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    @staticmethod
    def _ka(identity: Identity) -> str:
        return f"access_token:{identity.username}:{identity.user_id}"

    @staticmethod
    def _kr(identity: Identity) -> str:
        return f"refresh_token:{identity.username}"

    def put_access(self, identity: Identity, token: str, ttl: timedelta) -> None:
        self.store.set(self._ka(identity), token, ttl=ttl)

    def put_refresh(self, identity: Identity, token: str, ttl: timedelta) -> None:
        self.store.set(self._kr(identity), token, ttl=ttl)

    def get_access(self, identity: Identity) -> str | None:
        return self.store.get(self._ka(identity))

    def get_refresh(self, identity: Identity) -> str | None:
        return self.store.get(self._kr(identity))

    def delete_access(self, identity: Identity) -> None:
        self.store.delete(self._ka(identity))

    def delete_refresh(self, identity: Identity) -> None:
        self.store.delete(self._kr(identity))
