"""
Unit Tests for CacheManager.

Tests for:
    - Basic get/set operations
    - TTL-based expiration
    - LRU eviction by entry count
    - Thread safety
    - Statistics tracking
"""

from __future__ import annotations

import threading
import time
from concurrent.futures import ThreadPoolExecutor

from dicom_workbench.caching.cache_manager import (
    CacheConfig,
    CacheEntry,
    CacheManager,
)


class TestCacheEntry:
    """Tests for CacheEntry dataclass."""

    def test_entry_not_expired_when_no_expires_at(self) -> None:
        """Entry without expiration time is never expired."""
        entry = CacheEntry(value="test", expires_at=None)
        assert not entry.is_expired

    def test_entry_not_expired_when_future(self) -> None:
        entry = CacheEntry(value="test", expires_at=time.time() + 3600)
        assert not entry.is_expired

    def test_entry_expired_when_past(self) -> None:
        entry = CacheEntry(value="test", expires_at=time.time() - 1)
        assert entry.is_expired


class TestCacheManagerBasic:
    """Basic functionality tests."""

    def test_get_returns_none_for_missing_key(self) -> None:
        cache = CacheManager()
        assert cache.get("nonexistent") is None

    def test_set_and_get(self) -> None:
        """Set followed by get returns the value."""
        cache = CacheManager()
        cache.set("key1", ["stat"])
        assert cache.get("key1") == ["stat"]

    def test_set_overwrites_existing(self) -> None:
        cache = CacheManager()
        cache.set("key1", "value1")
        cache.set("key1", "value2")
        assert cache.get("key1") == "value2"

    def test_empty_list_is_a_hit(self) -> None:
        """An empty folder's statistics are cached like any other value."""
        cache = CacheManager()
        cache.set("key1", [])

        assert cache.get("key1") == []
        assert cache.get_stats().hits == 1

    def test_invalidate_removes_entry(self) -> None:
        cache = CacheManager()
        cache.set("key1", "value1")

        result = cache.invalidate("key1")

        assert result is True
        assert cache.get("key1") is None

    def test_invalidate_returns_false_for_missing(self) -> None:
        cache = CacheManager()
        assert cache.invalidate("nonexistent") is False

    def test_clear_removes_all_entries(self) -> None:
        cache = CacheManager()
        cache.set("key1", "value1")
        cache.set("key2", "value2")

        cache.clear()

        assert cache.get("key1") is None
        assert cache.get("key2") is None


class TestCacheManagerTTL:
    """TTL-based expiration tests."""

    def test_entry_expires_after_ttl(self) -> None:
        cache = CacheManager()
        cache.set("key1", "value1", ttl_seconds=0.1)

        assert cache.get("key1") == "value1"

        time.sleep(0.15)

        assert cache.get("key1") is None
        assert cache.get_stats().expirations == 1

    def test_default_ttl_used_when_not_specified(self) -> None:
        config = CacheConfig(default_ttl_seconds=0.1)
        cache = CacheManager(config)
        cache.set("key1", "value1")

        assert cache.get("key1") == "value1"

        time.sleep(0.15)

        assert cache.get("key1") is None

    def test_zero_ttl_never_expires(self) -> None:
        cache = CacheManager(CacheConfig(default_ttl_seconds=0))
        cache.set("key1", "value1")

        time.sleep(0.05)

        assert cache.get("key1") == "value1"


class TestCacheManagerLRU:
    """LRU eviction policy tests."""

    def test_oldest_entry_evicted_when_full(self) -> None:
        """
        SCENARIO: Third entry added to a two-entry cache
        EXPECTED: First entry evicted
        """
        # Arrange
        cache = CacheManager(CacheConfig(max_entries=2))
        cache.set("key1", 1)
        cache.set("key2", 2)

        # Act
        cache.set("key3", 3)

        # Assert
        assert cache.get("key1") is None
        assert cache.get("key2") == 2
        assert cache.get("key3") == 3
        assert cache.get_stats().evictions == 1

    def test_get_updates_lru_order(self) -> None:
        """
        SCENARIO: Oldest entry read before a new entry is added
        EXPECTED: The unread entry is evicted instead
        """
        # Arrange
        cache = CacheManager(CacheConfig(max_entries=2))
        cache.set("key1", 1)
        cache.set("key2", 2)
        cache.get("key1")

        # Act
        cache.set("key3", 3)

        # Assert
        assert cache.get("key1") == 1
        assert cache.get("key2") is None

    def test_overwrite_does_not_evict(self) -> None:
        cache = CacheManager(CacheConfig(max_entries=2))
        cache.set("key1", 1)
        cache.set("key2", 2)

        cache.set("key2", 20)

        assert cache.get("key1") == 1
        assert cache.get_stats().evictions == 0


class TestCacheManagerStats:
    """Statistics tracking tests."""

    def test_hit_count_incremented(self) -> None:
        cache = CacheManager()
        cache.set("key1", "value1")

        cache.get("key1")
        cache.get("key1")

        assert cache.get_stats().hits == 2

    def test_miss_count_incremented(self) -> None:
        cache = CacheManager()

        cache.get("nonexistent1")
        cache.get("nonexistent2")

        assert cache.get_stats().misses == 2

    def test_hit_rate_calculation(self) -> None:
        cache = CacheManager()
        cache.set("key1", "value1")

        cache.get("key1")  # hit
        cache.get("key1")  # hit
        cache.get("miss1")  # miss
        cache.get("miss2")  # miss

        assert cache.get_stats().hit_rate == 0.5

    def test_current_entries_tracked(self) -> None:
        cache = CacheManager()

        cache.set("key1", "value1")
        cache.set("key2", "value2")
        assert cache.get_stats().current_entries == 2

        cache.invalidate("key1")
        assert cache.get_stats().current_entries == 1


class TestCacheManagerThreadSafety:
    """Thread safety tests."""

    def test_concurrent_writes(self) -> None:
        """Concurrent writes don't corrupt cache."""
        cache = CacheManager(CacheConfig(max_entries=50))
        errors: list = []

        def writer(n: int) -> None:
            try:
                for i in range(100):
                    cache.set(f"key_{n}_{i}", f"value_{n}_{i}")
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=writer, args=(n,)) for n in range(10)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(errors) == 0
        assert cache.get_stats().current_entries == 50

    def test_get_or_compute_thread_safe(self) -> None:
        cache = CacheManager()
        compute_count = [0]
        lock = threading.Lock()

        def compute_fn() -> str:
            with lock:
                compute_count[0] += 1
            time.sleep(0.01)
            return "computed_value"

        with ThreadPoolExecutor(max_workers=10) as executor:
            results = list(
                executor.map(lambda _: cache.get_or_compute("shared_key", compute_fn), range(10))
            )

        assert all(r == "computed_value" for r in results)
        assert compute_count[0] >= 1


class TestCacheManagerDisabled:
    """Tests for disabled cache."""

    def test_get_returns_none_when_disabled(self) -> None:
        cache = CacheManager(CacheConfig(enabled=False))

        cache.set("key1", "value1")

        assert cache.get("key1") is None
        assert cache.get_stats().current_entries == 0


class TestCacheManagerMakeKey:
    """Tests for cache key generation."""

    def test_make_key_contains_operation_and_scope(self) -> None:
        key = CacheManager.make_key("get_pinned_tag_stats", "/data/study", tags=("16-16",))

        assert key.startswith("get_pinned_tag_stats:/data/study:")
        assert len(key.rsplit(":", 1)[1]) == 16

    def test_make_key_order_independent(self) -> None:
        key1 = CacheManager.make_key("op", "/f", a=1, b=2, c=3)
        key2 = CacheManager.make_key("op", "/f", c=3, a=1, b=2)

        assert key1 == key2

    def test_make_key_different_values_different_keys(self) -> None:
        key1 = CacheManager.make_key("op", "/f", a=1)
        key2 = CacheManager.make_key("op", "/f", a=2)

        assert key1 != key2
