"""Unit tests for the process-local TTL store."""

from __future__ import annotations

import threading
from datetime import timedelta

import pytest
from portal_auth.services._shared.ports import InMemoryKeyValueStore

TTL = timedelta(seconds=60)


@pytest.fixture
def kv() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


def test_set_get_and_overwrite(kv):
    kv.set("k", "v1", ttl=TTL)
    kv.set("k", "v2", ttl=TTL)
    assert kv.get("k") == "v2"
    assert kv.exists("k") is True


def test_entries_expire_after_ttl(kv, freeze_time):
    with freeze_time() as frozen:
        kv.set("k", "v", ttl=TTL)
        frozen.tick(59)
        assert kv.get("k") == "v"
        frozen.tick(1)
        assert kv.get("k") is None
        assert kv.exists("k") is False


def test_set_if_absent_only_writes_once(kv):
    assert kv.set_if_absent("k", "first", ttl=TTL) is True
    assert kv.set_if_absent("k", "second", ttl=TTL) is False
    assert kv.get("k") == "first"


def test_set_if_absent_succeeds_after_expiry(kv, freeze_time):
    with freeze_time() as frozen:
        kv.set_if_absent("k", "first", ttl=TTL)
        frozen.tick(61)
        assert kv.set_if_absent("k", "second", ttl=TTL) is True
        assert kv.get("k") == "second"


def test_delete_counts_existing_keys(kv):
    kv.set("a", "1", ttl=TTL)
    kv.set("b", "2", ttl=TTL)
    assert kv.delete("a", "b", "missing") == 2
    assert kv.get("a") is None


def test_incr_starts_at_one_and_rearms_ttl(kv):
    assert kv.incr("n", ttl=TTL) == 1
    assert kv.incr("n", ttl=TTL) == 2
    remaining = kv.ttl("n")
    assert remaining is not None and 59 < remaining <= 60


def test_compare_and_delete(kv):
    kv.set("code", "123456", ttl=TTL)
    assert kv.compare_and_delete("code", "000000") is False
    assert kv.get("code") == "123456"
    assert kv.compare_and_delete("code", "123456") is True
    assert kv.get("code") is None
    assert kv.compare_and_delete("code", "123456") is False


def test_compare_and_delete_has_a_single_winner(kv):
    kv.set("code", "424242", ttl=TTL)
    results: list[bool] = []
    barrier = threading.Barrier(8)

    def worker() -> None:
        barrier.wait()
        results.append(kv.compare_and_delete("code", "424242"))

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert results.count(True) == 1
    assert kv.ping() is True
