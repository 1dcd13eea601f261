"""Thread-safe, bounded response cache with per-entry TTL.

Eviction is oldest-inserted first: entries are kept in store order, a store
for an existing key replaces the entry and moves it to the newest position,
and reads never reorder. Expired entries are dropped when read and before a
capacity eviction is considered.
"""

from __future__ import annotations

import hashlib
import logging
import threading
import time
import zlib
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, Optional, Type, TypeVar

from axonflow.domain.config.cache import CachePolicy

logger = logging.getLogger(__name__)

T = TypeVar("T")

KEY_SEPARATOR = ":"


@dataclass(frozen=True)
class CacheEntry:
    key: str
    value: Any
    inserted_at: float


@dataclass(frozen=True)
class CacheStats:
    """Snapshot of cache counters"""

    hits: int = 0
    misses: int = 0
    evictions: int = 0  # Capacity evictions
    expirations: int = 0  # Entries dropped because their TTL ran out
    size: int = 0
    enabled: bool = True

    def __str__(self) -> str:
        if not self.enabled:
            return "Cache disabled"
        return (
            f"CacheStats(hits={self.hits}, misses={self.misses}, evictions={self.evictions}, "
            f"expirations={self.expirations}, size={self.size})"
        )


def _fallback_hash(data: bytes) -> str:
    return f"{zlib.crc32(data):08x}"


def _key_field(value: Any) -> str:
    text = "" if value is None else str(getattr(value, "value", value))
    # Escape so a separator inside one field cannot shift the boundary to the next
    return text.replace("\\", "\\\\").replace(KEY_SEPARATOR, "\\" + KEY_SEPARATOR)


def generate_cache_key(request_type: Optional[str], query: Optional[str], user_token: Optional[str]) -> str:
    """Build a fixed-length cache key from the fields that identify a request.

    None fields count as empty strings. Backslashes and ``:`` inside a field
    are backslash-escaped, then the fields are joined with ``:`` and hashed
    with SHA-256. If SHA-256 is unavailable a CRC32 digest is used instead,
    which is deterministic but collides far more easily.
    """
    data = KEY_SEPARATOR.join(_key_field(p) for p in (request_type, query, user_token)).encode("utf-8")
    try:
        return hashlib.sha256(data).hexdigest()
    except ValueError as e:
        logger.warning(f"SHA-256 unavailable, using fallback cache key hash: {e}")
        return _fallback_hash(data)


class ResponseCache:
    """Bounded key/value cache for Agent responses"""

    def __init__(self, policy: Optional[CachePolicy] = None, clock: Callable[[], float] = time.monotonic):
        """Initialize cache

        Args:
            policy: Cache policy (defaults to ``CachePolicy.defaults()``)
            clock: Monotonic time source in seconds
        """
        self.policy = policy if policy is not None else CachePolicy.defaults()
        self._clock = clock
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0
        self._evictions = 0
        self._expirations = 0

    @property
    def enabled(self) -> bool:
        return self.policy.enabled

    def _is_expired(self, entry: CacheEntry, now: float) -> bool:
        return now - entry.inserted_at > self.policy.ttl

    def _purge_expired(self, now: float) -> None:
        expired = [k for k, e in self._entries.items() if self._is_expired(e, now)]
        for key in expired:
            del self._entries[key]
        self._expirations += len(expired)

    def get(self, key: str, expected_type: Optional[Type[T]] = None) -> Optional[T]:
        """Return the cached value, or None on miss, expiry or type mismatch"""
        if not self.enabled:
            return None

        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and self._is_expired(entry, self._clock()):
                del self._entries[key]
                self._expirations += 1
                entry = None

            if entry is None or (expected_type is not None and not isinstance(entry.value, expected_type)):
                self._misses += 1
                logger.debug(f"Cache miss for key: {key}")
                return None

            self._hits += 1
        logger.debug(f"Cache hit for key: {key}")
        return entry.value

    def put(self, key: str, value: Any) -> None:
        """Store a value, replacing any entry under the same key"""
        if not self.enabled or value is None:
            return

        with self._lock:
            now = self._clock()
            if key in self._entries:
                del self._entries[key]
            elif len(self._entries) >= self.policy.max_entries:
                self._purge_expired(now)
                while len(self._entries) >= self.policy.max_entries:
                    evicted_key, _ = self._entries.popitem(last=False)
                    self._evictions += 1
                    logger.debug(f"Evicted cache entry: {evicted_key}")
            self._entries[key] = CacheEntry(key=key, value=value, inserted_at=now)
        logger.debug(f"Cached response for key: {key}")

    def invalidate(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def stats(self) -> CacheStats:
        with self._lock:
            return CacheStats(
                hits=self._hits,
                misses=self._misses,
                evictions=self._evictions,
                expirations=self._expirations,
                size=len(self._entries),
                enabled=self.enabled,
            )

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
