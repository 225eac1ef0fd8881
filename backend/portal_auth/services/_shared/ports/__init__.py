"""
portal_auth.services._shared.ports
==================================

Collection of *ports* (hexagonal interfaces) that define the contracts
for token management and verification-code infrastructure.

These ports decouple the service layer from concrete implementations
of storage, signing, delivery and member lookup.

Modules
-------
- :mod:`key_value_store`:
    Defines :class:`~.KeyValueStore`: TTL key-value store shared by every
    component, plus :class:`~.InMemoryKeyValueStore`.

- :mod:`token_signer`:
    Defines :class:`~.TokenSigner`, :class:`~.TokenKind` and
    :class:`~.TokenClaims`: abstraction for signing and verifying tokens.

- :mod:`notifier`:
    Defines :class:`~.Notifier`: fallible delivery of verification codes.

- :mod:`member_directory`:
    Defines :class:`~.MemberDirectory`: lookup of members by email.

Design Notes
------------
Concrete adapters (Redis, Flask-JWT-Extended, SMTP) implement these
interfaces under ``portal_auth.infra``.
"""

from __future__ import annotations

from .key_value_store import InMemoryKeyValueStore, KeyValueStore
from .member_directory import InMemoryMemberDirectory, MemberDirectory
from .notifier import InMemoryNotifier, Notifier, SentMessage
from .token_signer import TokenClaims, TokenKind, TokenSigner

__all__ = [
    "KeyValueStore",
    "InMemoryKeyValueStore",
    "TokenSigner",
    "TokenKind",
    "TokenClaims",
    "Notifier",
    "InMemoryNotifier",
    "SentMessage",
    "MemberDirectory",
    "InMemoryMemberDirectory",
]
