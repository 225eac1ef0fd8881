from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Protocol


class Notifier(Protocol):
    """
    Delivers a verification code to its recipient (email, SMS...).

    Retry and backoff, if any, live inside the implementation. Returning
    ``False`` or raising both mean the code was not delivered.
    """

    def send(self, recipient: str, code: str, purpose: str, ttl_minutes: int) -> bool: ...


@dataclass(frozen=True, slots=True)
class SentMessage:
    recipient: str
    code: str
    purpose: str
    ttl_minutes: int


class InMemoryNotifier(Notifier):
    """Outbox notifier used in unit tests and with ``MAIL_BACKEND=memory``."""

    def __init__(self, *, fail: bool = False) -> None:
        self.outbox: list[SentMessage] = []
        self.fail = fail
        self._lock = threading.Lock()

    def send(self, recipient: str, code: str, purpose: str, ttl_minutes: int) -> bool:
        if self.fail:
            return False
        with self._lock:
            self.outbox.append(SentMessage(recipient, code, purpose, ttl_minutes))
        return True

    def last_code(self, recipient: str) -> str | None:
        """Return the most recent code delivered to ``recipient``."""
        for message in reversed(self.outbox):
            if message.recipient == recipient:
                return message.code
        return None
