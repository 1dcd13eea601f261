"""Tests for the bounded TTL response cache"""

from __future__ import annotations

import hashlib
import threading
import time

import pytest

from axonflow.domain.config import CachePolicy
from axonflow.domain.models import ClientResponse, RequestType
from axonflow.infrastructure.cache import ResponseCache, generate_cache_key


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


class TestGetPut:
    def test_put_then_get_returns_value(self, clock):
        cache = ResponseCache(CachePolicy(ttl=60), clock=clock)
        cache.put("k", {"answer": 42})
        assert cache.get("k") == {"answer": 42}

    def test_get_unset_key_returns_none(self, clock):
        cache = ResponseCache(CachePolicy(), clock=clock)
        assert cache.get("missing") is None

    def test_put_replaces_existing_entry(self, clock):
        cache = ResponseCache(CachePolicy(), clock=clock)
        cache.put("k", "old")
        cache.put("k", "new")
        assert cache.get("k") == "new"
        assert len(cache) == 1

    def test_put_none_is_ignored(self, clock):
        cache = ResponseCache(CachePolicy(), clock=clock)
        cache.put("k", None)
        assert len(cache) == 0

    def test_type_mismatch_is_a_miss(self, clock):
        cache = ResponseCache(CachePolicy(), clock=clock)
        cache.put("k", "a plain string")
        assert cache.get("k", ClientResponse) is None
        assert cache.get("k", str) == "a plain string"
        assert cache.stats().misses == 1


class TestExpiry:
    def test_entry_expires_after_ttl(self, clock):
        cache = ResponseCache(CachePolicy(ttl=0.05), clock=clock)
        cache.put("k", "v")
        clock.advance(0.1)
        assert cache.get("k") is None
        # Expired entry is removed on read
        assert len(cache) == 0
        assert cache.stats().expirations == 1

    def test_entry_alive_until_ttl(self, clock):
        cache = ResponseCache(CachePolicy(ttl=10), clock=clock)
        cache.put("k", "v")
        clock.advance(10)
        assert cache.get("k") == "v"

    def test_restore_resets_insert_time(self, clock):
        cache = ResponseCache(CachePolicy(ttl=10), clock=clock)
        cache.put("k", "v1")
        clock.advance(8)
        cache.put("k", "v2")
        clock.advance(8)
        assert cache.get("k") == "v2"

    def test_expiry_with_real_clock(self):
        cache = ResponseCache(CachePolicy(ttl=0.05))
        cache.put("k", "v")
        time.sleep(0.1)
        assert cache.get("k") is None


class TestEviction:
    """Eviction is oldest-inserted first; reads do not change the order"""

    def test_overflow_evicts_exactly_one_oldest_entry(self, clock):
        cache = ResponseCache(CachePolicy(max_entries=3), clock=clock)
        for key in ("a", "b", "c"):
            cache.put(key, key.upper())
            clock.advance(1)

        cache.put("d", "D")

        assert len(cache) == 3
        assert cache.get("a") is None
        assert [cache.get(k) for k in ("b", "c", "d")] == ["B", "C", "D"]
        assert cache.stats().evictions == 1

    def test_reads_do_not_protect_from_eviction(self, clock):
        cache = ResponseCache(CachePolicy(max_entries=2), clock=clock)
        cache.put("a", 1)
        cache.put("b", 2)
        assert cache.get("a") == 1  # would save "a" under LRU

        cache.put("c", 3)

        assert cache.get("a") is None
        assert cache.get("b") == 2

    def test_restore_moves_key_to_newest(self, clock):
        cache = ResponseCache(CachePolicy(max_entries=2), clock=clock)
        cache.put("a", 1)
        cache.put("b", 2)
        cache.put("a", 10)

        cache.put("c", 3)

        assert cache.get("b") is None
        assert cache.get("a") == 10

    def test_overwrite_at_capacity_does_not_evict(self, clock):
        cache = ResponseCache(CachePolicy(max_entries=2), clock=clock)
        cache.put("a", 1)
        cache.put("b", 2)
        cache.put("b", 3)
        assert len(cache) == 2
        assert cache.stats().evictions == 0

    def test_expired_entries_are_dropped_before_capacity_eviction(self, clock):
        cache = ResponseCache(CachePolicy(max_entries=2, ttl=5), clock=clock)
        cache.put("old", 1)
        clock.advance(3)
        cache.put("young", 2)
        clock.advance(3)  # "old" is now expired, "young" is not

        cache.put("new", 3)

        assert cache.get("young") == 2
        assert cache.get("new") == 3
        stats = cache.stats()
        assert stats.evictions == 0
        assert stats.expirations == 1


class TestDisabled:
    def test_disabled_cache_never_stores(self, clock):
        cache = ResponseCache(CachePolicy.disabled(), clock=clock)
        cache.put("k", "v")
        assert cache.get("k") is None
        assert len(cache) == 0
        assert str(cache.stats()) == "Cache disabled"


class TestInvalidateClearStats:
    def test_invalidate_removes_single_entry(self, clock):
        cache = ResponseCache(CachePolicy(), clock=clock)
        cache.put("a", 1)
        cache.put("b", 2)
        cache.invalidate("a")
        cache.invalidate("never-stored")
        assert cache.get("a") is None
        assert cache.get("b") == 2

    def test_clear_removes_everything(self, clock):
        cache = ResponseCache(CachePolicy(), clock=clock)
        for i in range(5):
            cache.put(str(i), i)
        cache.clear()
        assert len(cache) == 0
        assert cache.stats().size == 0

    def test_stats_count_hits_and_misses(self, clock):
        cache = ResponseCache(CachePolicy(), clock=clock)
        cache.put("k", "v")
        cache.get("k")
        cache.get("k")
        cache.get("other")
        stats = cache.stats()
        assert (stats.hits, stats.misses, stats.size) == (2, 1, 1)
        assert "hits=2" in str(stats)


class TestConcurrency:
    def test_concurrent_access_keeps_bookkeeping_consistent(self):
        cache = ResponseCache(CachePolicy(max_entries=50, ttl=60))
        threads_count, ops_per_thread = 8, 500
        errors = []

        def worker(worker_id: int) -> None:
            try:
                for i in range(ops_per_thread):
                    key = f"{worker_id}-{i % 80}"
                    cache.put(key, i)
                    cache.get(key)
                    if i % 50 == 0:
                        cache.invalidate(key)
            except Exception as e:  # pragma: no cover - surfaced by the assertion below
                errors.append(e)

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(threads_count)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        stats = cache.stats()
        assert stats.size <= 50
        assert stats.size == len(cache)
        assert stats.hits + stats.misses == threads_count * ops_per_thread


class TestGenerateCacheKey:
    def test_key_is_deterministic(self):
        assert generate_cache_key("chat", "hello", "user-1") == generate_cache_key("chat", "hello", "user-1")

    def test_key_is_sha256_of_joined_fields(self):
        expected = hashlib.sha256(b"chat:hello:user-1").hexdigest()
        assert generate_cache_key("chat", "hello", "user-1") == expected
        assert len(expected) == 64

    @pytest.mark.parametrize(
        "other",
        [("sql", "hello", "user-1"), ("chat", "hello!", "user-1"), ("chat", "hello", "user-2")],
    )
    def test_changing_any_field_changes_key(self, other):
        assert generate_cache_key("chat", "hello", "user-1") != generate_cache_key(*other)

    @pytest.mark.parametrize(
        "first, second",
        [
            (("chat", "hi:x", "y"), ("chat", "hi", "x:y")),
            (("chat:hi", "x", "y"), ("chat", "hi:x", "y")),
            (("chat", "a\\", ":b"), ("chat", "a\\:", "b")),
        ],
    )
    def test_separator_inside_a_field_does_not_collide(self, first, second):
        assert generate_cache_key(*first) != generate_cache_key(*second)

    def test_separator_in_query_is_escaped_before_hashing(self):
        expected = hashlib.sha256(b"chat:time\\: 10\\:30:user-1").hexdigest()
        assert generate_cache_key("chat", "time: 10:30", "user-1") == expected

    def test_none_fields_are_empty_strings(self):
        assert generate_cache_key(None, None, None) == generate_cache_key("", "", "")
        assert generate_cache_key("chat", None, "u") == generate_cache_key("chat", "", "u")

    def test_enum_request_type_uses_its_value(self):
        assert generate_cache_key(RequestType.CHAT, "q", "u") == generate_cache_key("chat", "q", "u")

    def test_key_does_not_contain_inputs(self):
        key = generate_cache_key("chat", "secret question", "token-abc")
        assert "secret" not in key
        assert "token-abc" not in key

    def test_falls_back_when_sha256_is_unavailable(self, monkeypatch):
        def broken_sha256(*args, **kwargs):
            raise ValueError("unsupported hash type sha256")

        monkeypatch.setattr(hashlib, "sha256", broken_sha256)

        first = generate_cache_key("chat", "hello", "user-1")
        # The fallback is a short CRC32 digest: deterministic but collision-prone
        assert len(first) == 8
        assert first == generate_cache_key("chat", "hello", "user-1")
        assert first != generate_cache_key("chat", "hello", "user-2")
