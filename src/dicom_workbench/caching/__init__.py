"""
Caching Package - TTL/LRU Result Cache.

Components:
    - CacheManager: Thread-safe cache with TTL expiry and LRU eviction
    - CacheConfig / CacheStats: Settings and counters
"""

from dicom_workbench.caching.cache_manager import CacheConfig, CacheManager, CacheStats

__all__ = ["CacheConfig", "CacheManager", "CacheStats"]
