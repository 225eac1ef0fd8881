from __future__ import annotations

from datetime import timedelta

from portal_auth.services._shared.ports import KeyValueStore
from portal_auth.services.verification.dto import CodePurpose


class CodeStore:
    """One outstanding, single-use code per (recipient, purpose)."""

    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    @staticmethod
    def _k(recipient: str, purpose: CodePurpose) -> str:
        return f"verification_code:{recipient}:{purpose.value}"

    def put(self, recipient: str, purpose: CodePurpose, code: str, ttl: timedelta) -> None:
        # a fresh code replaces any outstanding one
        self.store.set(self._k(recipient, purpose), code, ttl=ttl)

    def consume(self, recipient: str, purpose: CodePurpose, submitted: str | None) -> bool:
        """
        Atomically delete the stored code if ``submitted`` matches it.

        A wrong or blank submission leaves the stored code untouched.
        """
        if submitted is None or not submitted.strip():
            return False
        return self.store.compare_and_delete(self._k(recipient, purpose), submitted.strip())
