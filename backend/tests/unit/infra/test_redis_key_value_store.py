# tests/unit/infra/test_redis_key_value_store.py
"""
Unit tests for RedisKeyValueStore using fakeredis.

These tests exercise the store contract against an in-memory Redis:
- set/get with millisecond TTLs
- set-if-absent
- counters with TTL
- compare-and-delete (WATCH/MULTI/EXEC)
- mapping of Redis failures to StoreUnavailableError
"""

from __future__ import annotations

import threading
from datetime import timedelta

import pytest
import redis  # type: ignore[import-untyped]
from portal_auth.infra.redis.redis_key_value_store import RedisKeyValueStore
from portal_auth.services._shared.errors import StoreUnavailableError

TTL = timedelta(minutes=5)


@pytest.fixture
def kv(fake_redis):
    """Provide a RedisKeyValueStore backed by FakeRedis."""
    return RedisKeyValueStore(r=fake_redis)


def test_set_get_roundtrip_decodes_bytes(kv, fake_redis):
    kv.set("verification_code:a@example.com:login", "123456", ttl=TTL)

    assert kv.get("verification_code:a@example.com:login") == "123456"
    # TTL is applied in milliseconds
    pttl = fake_redis.pttl("verification_code:a@example.com:login")
    assert 0 < pttl <= 300_000


def test_get_missing_returns_none(kv):
    assert kv.get("nope") is None
    assert kv.exists("nope") is False


def test_set_if_absent(kv):
    assert kv.set_if_absent("send_time:a@example.com", "1", ttl=TTL) is True
    assert kv.set_if_absent("send_time:a@example.com", "2", ttl=TTL) is False
    assert kv.get("send_time:a@example.com") == "1"


def test_delete_and_exists(kv):
    kv.set("a", "1", ttl=TTL)
    kv.set("b", "2", ttl=TTL)
    assert kv.exists("a") is True
    assert kv.delete("a", "b", "c") == 2
    assert kv.delete() == 0
    assert kv.exists("a") is False


def test_incr_sets_ttl_on_counter(kv, fake_redis):
    assert kv.incr("send_count:a@example.com:20240101", ttl=timedelta(hours=24)) == 1
    assert kv.incr("send_count:a@example.com:20240101", ttl=timedelta(hours=24)) == 2
    assert fake_redis.pttl("send_count:a@example.com:20240101") > 0


def test_compare_and_delete_matches_exact_value(kv):
    kv.set("code", "123456", ttl=TTL)

    assert kv.compare_and_delete("code", "654321") is False
    assert kv.get("code") == "123456"
    assert kv.compare_and_delete("code", "123456") is True
    assert kv.get("code") is None
    assert kv.compare_and_delete("code", "123456") is False


def test_compare_and_delete_concurrent_single_winner(kv):
    kv.set("code", "777777", ttl=TTL)
    results: list[bool] = []
    lock = threading.Lock()
    barrier = threading.Barrier(6)

    def worker() -> None:
        barrier.wait()
        ok = kv.compare_and_delete("code", "777777")
        with lock:
            results.append(ok)

    threads = [threading.Thread(target=worker) for _ in range(6)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert results.count(True) == 1


def test_ping(kv):
    assert kv.ping() is True


class _BrokenRedis:
    """Minimal client double whose every call fails like a dropped connection."""

    def __getattr__(self, name):
        def _fail(*args, **kwargs):
            raise redis.ConnectionError("connection refused")

        return _fail


@pytest.mark.parametrize(
    "call",
    [
        lambda kv: kv.get("k"),
        lambda kv: kv.set("k", "v", ttl=TTL),
        lambda kv: kv.set_if_absent("k", "v", ttl=TTL),
        lambda kv: kv.exists("k"),
        lambda kv: kv.incr("k", ttl=TTL),
        lambda kv: kv.compare_and_delete("k", "v"),
        lambda kv: kv.ping(),
    ],
)
def test_redis_errors_surface_as_store_unavailable(call):
    kv = RedisKeyValueStore(r=_BrokenRedis())
    with pytest.raises(StoreUnavailableError):
        call(kv)


def test_timeouts_surface_as_store_unavailable():
    class _SlowRedis(_BrokenRedis):
        def get(self, key):
            raise redis.TimeoutError("timed out")

    kv = RedisKeyValueStore(r=_SlowRedis())
    with pytest.raises(StoreUnavailableError):
        kv.get("k")
