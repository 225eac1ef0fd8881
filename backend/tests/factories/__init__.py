"""Factory Boy definitions for identities and members."""

from __future__ import annotations

import factory
from portal_auth.services._shared.dto import MEMBER_USER_TYPE, Identity, Member


class IdentityFactory(factory.Factory):
    """Build :class:`Identity` values with unique usernames, ids and emails."""

    class Meta:
        model = Identity

    username = factory.Sequence(lambda n: f"member{n}")
    user_id = factory.Sequence(lambda n: 1000 + n)
    email = factory.LazyAttribute(lambda o: f"{o.username}@example.com")
    user_type = MEMBER_USER_TYPE
    register_type = "email"


class MemberFactory(factory.Factory):
    """Build enabled :class:`Member` read-models."""

    class Meta:
        model = Member

    identity = factory.SubFactory(IdentityFactory)
    enabled = True
