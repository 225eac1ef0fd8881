# portal_auth/services/auth/service.py
from __future__ import annotations

from portal_auth.services._shared.base import BaseService
from portal_auth.services._shared.dto import Identity
from portal_auth.services._shared.errors import AccountDisabledError, CodeInvalidOrExpiredError
from portal_auth.services._shared.ports import MemberDirectory
from portal_auth.services.auth.dto import (
    AccessTokenOut,
    CodeLoginIn,
    LogoutIn,
    RefreshIn,
    SendCodeIn,
)
from portal_auth.services.tokens import TokenPair, TokenService
from portal_auth.services.verification import CodeDispatch, CodePurpose, VerificationCodeService


class AuthService(BaseService):
    """
    Authentication flows consumed by the HTTP layer.

    Composes the verification-code service (send / verify) with the token
    service (issue / refresh / revoke). Member lookup is delegated to a
    :class:`MemberDirectory`; credentials and profiles live elsewhere.
    """

    def __init__(
        self,
        *,
        tokens: TokenService,
        codes: VerificationCodeService,
        members: MemberDirectory,
    ) -> None:
        super().__init__()
        self.tokens = tokens
        self.codes = codes
        self.members = members

    @staticmethod
    def _normalize(email: str) -> str:
        return email.strip().lower()

    # ------------------------------------------------------------------ #
    # Verification codes
    # ------------------------------------------------------------------ #

    def send_code(self, dto: SendCodeIn) -> CodeDispatch:
        """Send a code for ``dto.purpose`` to ``dto.email``."""
        return self.codes.send(self._normalize(dto.email), dto.purpose)

    # ------------------------------------------------------------------ #
    # Login / refresh / logout
    # ------------------------------------------------------------------ #

    def login_with_code(self, dto: CodeLoginIn) -> TokenPair:
        """
        Exchange a LOGIN code for a fresh token pair.

        :raises CodeInvalidOrExpiredError: Wrong, used or expired code, or no
            member behind the address (indistinguishable on purpose).
        :raises AccountDisabledError: The member may not sign in.
        """
        email = self._normalize(dto.email)
        self.codes.require_valid(email, CodePurpose.LOGIN, dto.code)

        member = self.members.find_by_email(email)
        if member is None:
            self.log.warning("Code login for an address without a member")
            raise CodeInvalidOrExpiredError()
        if not member.enabled:
            raise AccountDisabledError()

        self.log.info("Code login succeeded for user_id=%s", member.identity.user_id)
        return self.tokens.issue_pair(member.identity)

    def refresh(self, dto: RefreshIn) -> AccessTokenOut:
        access = self.tokens.refresh(dto.refresh_token)
        return AccessTokenOut(
            access_token=access,
            expires_in=int(self.tokens.policy.access_ttl.total_seconds()),
        )

    def logout(self, dto: LogoutIn, identity: Identity | None = None) -> None:
        """Revoke the access token; skip token parsing when ``identity`` is known."""
        if identity is not None:
            self.tokens.revoke_with_identity(dto.access_token, identity)
        else:
            self.tokens.revoke(dto.access_token)
