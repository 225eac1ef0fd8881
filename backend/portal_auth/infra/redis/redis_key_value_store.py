# comments in English; reST docstrings
from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import timedelta
from typing import cast

import redis  # type: ignore[import-untyped]
from redis.exceptions import RedisError  # type: ignore[import-untyped]

from portal_auth.services._shared.errors import StoreUnavailableError
from portal_auth.services._shared.ports import KeyValueStore


@dataclass(slots=True)
class RedisKeyValueStore(KeyValueStore):
    """
    Redis-backed TTL store shared by sessions, revocations, codes and limits.

    :param r: A Redis client (already connected). Configure ``socket_timeout``
        on the client; a timeout surfaces as :class:`StoreUnavailableError`.
    """

    r: redis.Redis

    # -------------------- helpers --------------------

    @staticmethod
    def _ms(ttl: timedelta) -> int:
        return max(1, int(ttl.total_seconds() * 1000))

    @staticmethod
    def _s(value: bytes | str | None) -> str | None:
        if value is None:
            return None
        return value.decode() if isinstance(value, bytes | bytearray) else str(value)

    @contextmanager
    def _guard(self, op: str) -> Iterator[None]:
        try:
            yield
        except RedisError as exc:
            raise StoreUnavailableError(f"Redis {op} failed: {exc}") from exc

    # -------------------- API ------------------------

    def get(self, key: str) -> str | None:
        with self._guard("GET"):
            return self._s(self.r.get(key))

    def set(self, key: str, value: str, *, ttl: timedelta) -> None:
        with self._guard("SET"):
            self.r.set(key, value, px=self._ms(ttl))

    def set_if_absent(self, key: str, value: str, *, ttl: timedelta) -> bool:
        with self._guard("SET NX"):
            # redis-py returns None when NX prevented the write
            return bool(self.r.set(key, value, px=self._ms(ttl), nx=True))

    def delete(self, *keys: str) -> int:
        if not keys:
            return 0
        with self._guard("DEL"):
            return cast(int, self.r.delete(*keys))

    def exists(self, key: str) -> bool:
        with self._guard("EXISTS"):
            return cast(int, self.r.exists(key)) == 1

    def incr(self, key: str, *, ttl: timedelta) -> int:
        with self._guard("INCR"):
            pipe = self.r.pipeline(transaction=True)
            pipe.incr(key)
            pipe.pexpire(key, self._ms(ttl))
            count, _ = pipe.execute()
            return int(count)

    def compare_and_delete(self, key: str, expected: str) -> bool:
        """
        Delete ``key`` only when it still holds ``expected``.

        Uses WATCH/MULTI/EXEC (optimistic locking): if another client touches
        the key between the read and the delete, EXEC aborts and we re-read.
        Two concurrent callers can therefore never both observe a match.
        """
        with self._guard("compare-and-delete"):
            while True:
                try:
                    with self.r.pipeline() as p:
                        p.watch(key)
                        current = self._s(p.get(key))
                        if current is None or current != expected:
                            p.unwatch()
                            return False
                        p.multi()
                        p.delete(key)
                        p.execute()
                        return True
                except redis.WatchError:
                    # Concurrent modification detected; retry loop
                    continue

    def ping(self) -> bool:
        with self._guard("PING"):
            return bool(self.r.ping())
