"""Convenience exports for application schemas."""

from __future__ import annotations

from .auth import (
    AccessTokenSchema,
    CodeDispatchSchema,
    CodeLoginSchema,
    RefreshSchema,
    SendCodeSchema,
    TokenPairSchema,
    WhoAmISchema,
)

__all__ = [
    "SendCodeSchema",
    "CodeLoginSchema",
    "RefreshSchema",
    "TokenPairSchema",
    "AccessTokenSchema",
    "CodeDispatchSchema",
    "WhoAmISchema",
]
