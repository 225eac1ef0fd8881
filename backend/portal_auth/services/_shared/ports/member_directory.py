from __future__ import annotations

from typing import Protocol

from portal_auth.services._shared.dto import Member


class MemberDirectory(Protocol):
    """Looks up members after the caller proved control of an address."""

    def find_by_email(self, email: str) -> Member | None: ...


class InMemoryMemberDirectory(MemberDirectory):
    """Simple in-memory directory keyed by normalized email."""

    def __init__(self, members: list[Member] | None = None) -> None:
        self._by_email: dict[str, Member] = {}
        for member in members or []:
            self.add(member)

    def add(self, member: Member) -> None:
        if not member.identity.email:
            raise ValueError("Member identity needs an email to be indexed.")
        self._by_email[member.identity.email.strip().lower()] = member

    def find_by_email(self, email: str) -> Member | None:
        return self._by_email.get(email.strip().lower())
