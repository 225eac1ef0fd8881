"""Service layer public API.

This package exposes the building blocks of the authentication core so that
callers can import from :mod:`portal_auth.services` without knowing internal
structure.

Re-exports
----------
- Base primitives (from ``portal_auth.services._shared``)
    * :class:`BaseService`
    * :class:`Identity`, :class:`Member`

- Token service (from ``portal_auth.services.tokens``)
    * :class:`TokenService`, :class:`SessionStore`, :class:`RevocationRegistry`
    * DTOs: :class:`TokenPair`, :class:`TokenPolicy`

- Verification-code service (from ``portal_auth.services.verification``)
    * :class:`VerificationCodeService`, :class:`RateLimiter`, :class:`CodeStore`
    * DTOs: :class:`CodePurpose`, :class:`CodeType`, :class:`CodePolicy`,
      :class:`CodeDispatch`

- Authentication flows (from ``portal_auth.services.auth``)
    * :class:`AuthService`
"""

from __future__ import annotations

from ._shared.base import BaseService
from ._shared.dto import Identity, Member
from .auth import AuthService
from .tokens import RevocationRegistry, SessionStore, TokenPair, TokenPolicy, TokenService
from .verification import (
    CodeDispatch,
    CodePolicy,
    CodePurpose,
    CodeStore,
    CodeType,
    RateLimiter,
    VerificationCodeService,
)

__all__ = [
    "BaseService",
    "Identity",
    "Member",
    "AuthService",
    "TokenService",
    "SessionStore",
    "RevocationRegistry",
    "TokenPair",
    "TokenPolicy",
    "VerificationCodeService",
    "RateLimiter",
    "CodeStore",
    "CodePurpose",
    "CodeType",
    "CodePolicy",
    "CodeDispatch",
]
