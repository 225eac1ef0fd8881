# comments in English; reST docstrings strict
from __future__ import annotations

from dataclasses import dataclass

MEMBER_USER_TYPE = "member"


@dataclass(frozen=True, slots=True)
class Identity:
    """
    The join key for session, revocation and token state.

    Optional extension attributes are plain typed fields; ``username`` and
    ``user_id`` are the only parts used to build store keys.

    :param username: Unique login name (JWT subject).
    :type username: str
    :param user_id: Numeric member id.
    :type user_id: int
    :param email: Contact address, when known.
    :type email: str | None
    :param user_type: Audience of the token (always ``member`` for the portal).
    :type user_type: str
    :param register_type: How the account was created (``email``, ``google``...).
    :type register_type: str | None
    """

    username: str
    user_id: int
    email: str | None = None
    user_type: str = MEMBER_USER_TYPE
    register_type: str | None = None


@dataclass(frozen=True, slots=True)
class Member:
    """
    Read-model returned by the member directory collaborator.

    :param identity: Token identity of the member.
    :type identity: Identity
    :param enabled: Whether the account may sign in.
    :type enabled: bool
    """

    identity: Identity
    enabled: bool = True
