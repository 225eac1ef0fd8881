from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from datetime import timedelta
from typing import Protocol


class KeyValueStore(Protocol):
    """
    String key-value store with per-key time-to-live.

    Every method is atomic at single-key granularity. Adapters raise
    :class:`~portal_auth.services._shared.errors.StoreUnavailableError` on
    infrastructure failures (including timeouts), never a silent default.
    """

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str, *, ttl: timedelta) -> None:
        """Write ``value`` unconditionally, replacing any previous value and TTL."""

    def set_if_absent(self, key: str, value: str, *, ttl: timedelta) -> bool:
        """Write only when ``key`` does not exist. :returns: True if written."""

    def delete(self, *keys: str) -> int:
        """Remove keys. :returns: Number of keys that existed."""

    def exists(self, key: str) -> bool: ...

    def incr(self, key: str, *, ttl: timedelta) -> int:
        """Increment an integer counter and (re)arm its TTL. :returns: New value."""

    def compare_and_delete(self, key: str, expected: str) -> bool:
        """
        Delete ``key`` only if its current value equals ``expected``.

        Read, compare and delete happen as one atomic step.

        :returns: True if the key matched and was deleted.
        """

    def ping(self) -> bool: ...


@dataclass(slots=True)
class _Entry:
    value: str
    expires_at: float


def _seconds(ttl: timedelta) -> float:
    return max(0.001, ttl.total_seconds())


class InMemoryKeyValueStore(KeyValueStore):
    """
    Process-local TTL store.

    .. note::
       Uses a threading lock for atomicity; expired entries are dropped lazily
       on access. Wall-clock based so tests can move time with freezegun.
    """

    def __init__(self) -> None:
        self._data: dict[str, _Entry] = {}
        self._lock = threading.Lock()

    # ------------------------- helpers -------------------------

    def _live(self, key: str) -> _Entry | None:
        entry = self._data.get(key)
        if entry is None:
            return None
        if entry.expires_at <= time.time():
            del self._data[key]
            return None
        return entry

    def _put(self, key: str, value: str, ttl: timedelta) -> None:
        self._data[key] = _Entry(value=value, expires_at=time.time() + _seconds(ttl))

    # -------------------------- API ----------------------------

    def get(self, key: str) -> str | None:
        with self._lock:
            entry = self._live(key)
            return entry.value if entry else None

    def set(self, key: str, value: str, *, ttl: timedelta) -> None:
        with self._lock:
            self._put(key, value, ttl)

    def set_if_absent(self, key: str, value: str, *, ttl: timedelta) -> bool:
        with self._lock:
            if self._live(key) is not None:
                return False
            self._put(key, value, ttl)
            return True

    def delete(self, *keys: str) -> int:
        with self._lock:
            removed = 0
            for key in keys:
                if self._live(key) is not None:
                    del self._data[key]
                    removed += 1
            return removed

    def exists(self, key: str) -> bool:
        with self._lock:
            return self._live(key) is not None

    def incr(self, key: str, *, ttl: timedelta) -> int:
        with self._lock:
            entry = self._live(key)
            count = int(entry.value) + 1 if entry else 1
            self._put(key, str(count), ttl)
            return count

    def compare_and_delete(self, key: str, expected: str) -> bool:
        with self._lock:
            entry = self._live(key)
            if entry is None or entry.value != expected:
                return False
            del self._data[key]
            return True

    def ping(self) -> bool:
        return True

    def ttl(self, key: str) -> float | None:
        """Seconds left before ``key`` expires (test helper)."""
        with self._lock:
            entry = self._live(key)
            return None if entry is None else entry.expires_at - time.time()
