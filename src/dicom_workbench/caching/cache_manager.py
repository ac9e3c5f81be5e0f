"""
Cache Manager - TTL-based Caching with LRU Eviction.

Provides thread-safe caching for folder-wide scans that the backend
performs on every request (value statistics over thousands of records).

Design Notes:
    - TTL-based expiration for freshness
    - LRU eviction when the entry limit is exceeded
    - Thread-safe with RLock
    - Entries are dropped one key at a time; callers track which keys
      belong to a folder
"""

from __future__ import annotations

import hashlib
import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class CacheEntry:
    """A single cache entry with metadata."""

    value: Any
    created_at: float = field(default_factory=time.time)
    expires_at: Optional[float] = None

    @property
    def is_expired(self) -> bool:
        if self.expires_at is None:
            return False
        return time.time() > self.expires_at


@dataclass
class CacheConfig:
    """Configuration for cache manager."""

    max_entries: int = 64
    # 0 disables expiration
    default_ttl_seconds: float = 300.0
    enabled: bool = True
    log_access: bool = False


@dataclass
class CacheStats:
    """Cache statistics."""

    hits: int = 0
    misses: int = 0
    evictions: int = 0
    expirations: int = 0
    current_entries: int = 0

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total > 0 else 0.0


class CacheManager:
    """
    TTL-based cache with LRU eviction policy.

    Cache Key Format:
        f"{operation}:{scope}:{params_hash}"

        Example: "get_pinned_tag_stats:/data/study:a3f5c2b1..."
    """

    def __init__(self, config: Optional[CacheConfig] = None) -> None:
        self.config = config or CacheConfig()
        self._cache: OrderedDict[str, CacheEntry] = OrderedDict()
        self._lock = threading.RLock()
        self._stats = CacheStats()

    def get(self, key: str) -> Optional[Any]:
        """
        Get value from cache.

        Args:
            key: Cache key

        Returns:
            Cached value or None if not found/expired
        """
        if not self.config.enabled:
            return None

        with self._lock:
            entry = self._cache.get(key)

            if entry is None:
                self._stats.misses += 1
                if self.config.log_access:
                    logger.debug(f"Cache MISS: {key}")
                return None

            if entry.is_expired:
                del self._cache[key]
                self._stats.expirations += 1
                self._stats.misses += 1
                if self.config.log_access:
                    logger.debug(f"Cache EXPIRED: {key}")
                return None

            self._cache.move_to_end(key)
            self._stats.hits += 1
            if self.config.log_access:
                logger.debug(f"Cache HIT: {key}")
            return entry.value

    def set(
        self,
        key: str,
        value: Any,
        ttl_seconds: Optional[float] = None,
    ) -> None:
        """
        Set value in cache.

        Args:
            key: Cache key
            value: Value to cache
            ttl_seconds: TTL in seconds (uses default if None)
        """
        if not self.config.enabled:
            return

        ttl = ttl_seconds if ttl_seconds is not None else self.config.default_ttl_seconds
        expires_at = time.time() + ttl if ttl > 0 else None

        with self._lock:
            self._cache.pop(key, None)
            while len(self._cache) >= self.config.max_entries:
                evicted, _ = self._cache.popitem(last=False)
                self._stats.evictions += 1
                logger.debug(f"Cache EVICTED (LRU): {evicted}")
            self._cache[key] = CacheEntry(value=value, expires_at=expires_at)

            if self.config.log_access:
                logger.debug(f"Cache SET: {key} (TTL={ttl}s)")

    def invalidate(self, key: str) -> bool:
        """Remove one entry; returns True if it existed."""
        with self._lock:
            if key in self._cache:
                del self._cache[key]
                logger.debug(f"Cache INVALIDATED: {key}")
                return True
            return False

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()
        logger.info("Cache CLEARED")

    def get_stats(self) -> CacheStats:
        with self._lock:
            return CacheStats(
                hits=self._stats.hits,
                misses=self._stats.misses,
                evictions=self._stats.evictions,
                expirations=self._stats.expirations,
                current_entries=len(self._cache),
            )

    def get_or_compute(
        self,
        key: str,
        compute_fn: Callable[[], T],
        ttl_seconds: Optional[float] = None,
    ) -> T:
        """Get from cache or compute and store."""
        cached = self.get(key)
        if cached is not None:
            return cached

        value = compute_fn()
        self.set(key, value, ttl_seconds)
        return value

    @staticmethod
    def make_key(operation: str, scope: str, **params: Any) -> str:
        """
        Create a cache key from operation, scope and parameters.

        Args:
            operation: Operation name (e.g. "get_pinned_tag_stats")
            scope: Folder the operation scans
            **params: Parameters to hash

        Returns:
            Cache key in format "operation:scope:params_hash"
        """
        param_str = str(sorted(params.items()))
        param_hash = hashlib.sha256(param_str.encode()).hexdigest()[:16]
        return f"{operation}:{scope}:{param_hash}"
