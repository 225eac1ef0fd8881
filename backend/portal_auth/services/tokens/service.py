# portal_auth/services/tokens/service.py
from __future__ import annotations

from datetime import timedelta

from portal_auth.services._shared.base import BaseService
from portal_auth.services._shared.dto import Identity
from portal_auth.services._shared.errors import (
    ServiceError,
    SessionMismatchError,
    StoreUnavailableError,
    TokenError,
    TokenInvalidError,
    TokenRevokedError,
)
from portal_auth.services._shared.ports import TokenKind, TokenSigner
from portal_auth.services.tokens.dto import EXPIRING_SOON_WINDOW, TokenPair, TokenPolicy
from portal_auth.services.tokens.revocation import RevocationRegistry
from portal_auth.services.tokens.sessions import SessionStore


class TokenService(BaseService):
    """
    Token lifecycle service (issue / validate / refresh / revoke).

    This service signs tokens via a pluggable TokenSigner, keeps exactly one
    active access/refresh token per identity in the SessionStore, and enforces
    early revocation through the RevocationRegistry.

    Validation paths fail closed (store errors mean "not valid"); issuance
    paths fail loud (store errors surface as ``StoreUnavailableError``).
    """

    def __init__(
        self,
        *,
        signer: TokenSigner,
        sessions: SessionStore,
        revocations: RevocationRegistry,
        policy: TokenPolicy | None = None,
    ) -> None:
        """
        Initialize the service with its dependencies.

        :param signer: Adapter for signing/verifying tokens.
        :param sessions: Current access/refresh token per identity.
        :param revocations: Blacklist of revoked tokens.
        :param policy: Access/refresh lifetimes.
        """
        super().__init__()
        self.signer = signer
        self.sessions = sessions
        self.revocations = revocations
        self.policy = policy or TokenPolicy()

    # ------------------------------------------------------------------ #
    # Issue
    # ------------------------------------------------------------------ #

    def issue_pair(self, identity: Identity) -> TokenPair:
        """
        Sign a new access/refresh pair and make it the identity's only session.

        Any previously issued pair stops validating as soon as the new values
        are stored.

        :param identity: Identity resolved by the credential check.
        :returns: The new token pair.
        :raises StoreUnavailableError: If the session could not be persisted.
        """
        issued_at = self.now_utc()
        access = self.signer.sign(identity, TokenKind.ACCESS)
        refresh = self.signer.sign(identity, TokenKind.REFRESH)

        self.sessions.put_access(identity, access, self.policy.access_ttl)
        self.sessions.put_refresh(identity, refresh, self.policy.refresh_ttl)

        self.log.info("Issued token pair for user_id=%s", identity.user_id)
        return TokenPair(
            access_token=access,
            refresh_token=refresh,
            issued_at=issued_at,
            access_ttl=self.policy.access_ttl,
            refresh_ttl=self.policy.refresh_ttl,
        )

    # ------------------------------------------------------------------ #
    # Validate
    # ------------------------------------------------------------------ #

    def authenticate(self, access_token: str) -> Identity:
        """
        Run the ordered access-token checks and return the token's identity.

        1. Revocation entry → ``TokenRevokedError`` (nothing else is checked).
        2. Signature, expiry and kind → ``TokenInvalidError``/``TokenExpiredError``.
        3. Exact match with the stored session → ``SessionMismatchError``.

        :raises StoreUnavailableError: If the store could not be read.
        """
        if self.revocations.is_revoked(access_token):
            raise TokenRevokedError()

        claims = self.signer.verify(access_token)
        if claims.kind is not TokenKind.ACCESS:
            raise TokenInvalidError("Access token required")

        stored = self.sessions.get_access(claims.identity)
        if stored is None or stored != access_token:
            # covers "never issued" and "replaced by a newer login" alike
            raise SessionMismatchError()
        return claims.identity

    def validate(self, access_token: str) -> bool:
        """Return True only if every access-token check passes."""
        try:
            self.authenticate(access_token)
        except StoreUnavailableError:
            self.log.error("Token validation failed closed: store unavailable", exc_info=True)
            return False
        except ServiceError as exc:
            self.log.debug("Token rejected: %s", exc.code)
            return False
        return True

    def is_revoked(self, token: str) -> bool:
        return self.revocations.is_revoked(token)

    def expires_within(self, token: str, window: timedelta = EXPIRING_SOON_WINDOW) -> bool:
        """
        Tell whether ``token`` expires in less than ``window``.

        Unreadable tokens count as expiring.
        """
        try:
            claims = self.signer.verify(token, allow_expired=True)
        except TokenError:
            return True
        return claims.expires_at - self.now_utc() < window

    # ------------------------------------------------------------------ #
    # Refresh (access token only; the refresh token is not rotated)
    # ------------------------------------------------------------------ #

    def refresh(self, refresh_token: str) -> str:
        """
        Mint a new access token from the identity's current refresh token.

        :param refresh_token: Refresh token presented by the client.
        :returns: New access token, now the identity's active one.
        :raises TokenInvalidError: Bad signature, payload or kind.
        :raises TokenExpiredError: Refresh token expired.
        :raises SessionMismatchError: Not the stored refresh token (superseded or revoked).
        """
        claims = self.signer.verify(refresh_token)
        if claims.kind is not TokenKind.REFRESH:
            raise TokenInvalidError("Refresh token required")

        identity = claims.identity
        stored = self.sessions.get_refresh(identity)
        if stored is None or stored != refresh_token:
            self.log.warning("Refresh token not found or mismatched for user_id=%s", identity.user_id)
            raise SessionMismatchError()

        access = self.signer.sign(identity, TokenKind.ACCESS)
        self.sessions.put_access(identity, access, self.policy.access_ttl)
        self.log.info("Refreshed access token for user_id=%s", identity.user_id)
        return access

    # ------------------------------------------------------------------ #
    # Revoke (logout / forced logout)
    # ------------------------------------------------------------------ #

    def revoke(self, access_token: str) -> None:
        """
        Blacklist ``access_token`` and drop its identity's sessions.

        Identity resolution is best-effort: garbled or foreign tokens are
        still blacklisted, only the session deletion is skipped.
        """
        identity: Identity | None
        try:
            identity = self.signer.verify(access_token, allow_expired=True).identity
        except TokenError:
            identity = None

        self.revocations.revoke(access_token)
        if identity is None:
            self.log.info("Revoked unreadable token; no session to drop")
            return
        self._drop_sessions(identity)

    def revoke_with_identity(self, access_token: str, identity: Identity) -> None:
        """Revoke when the caller already resolved the identity."""
        self.revocations.revoke(access_token)
        self._drop_sessions(identity)

    def _drop_sessions(self, identity: Identity) -> None:
        self.sessions.delete_access(identity)
        self.sessions.delete_refresh(identity)
        self.log.info("Revoked sessions for user_id=%s", identity.user_id)
