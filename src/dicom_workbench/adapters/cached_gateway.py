"""
Cached Remote Gateway - Caching Wrapper for Remote Gateways.

Wraps any RemoteGateway implementation to cache folder-wide value
statistics, which the backend recomputes by scanning every record.

Design Notes:
    - Decorator/Wrapper pattern; every other call is delegated unchanged
    - Caches get_pinned_tag_stats() keyed by (folder, tag set)
    - Tracks cache hits/misses via an optional metrics recorder
    - run_pipeline() invalidates entries of every folder above or below
      the folders it writes to, also when the call fails
"""

from __future__ import annotations

import logging
import posixpath
import threading
from pathlib import PurePosixPath
from typing import Any, Dict, List, Optional, Protocol, Set, Tuple

from dicom_workbench.caching.cache_manager import CacheConfig, CacheManager
from dicom_workbench.config.models import StatsConfig
from dicom_workbench.domain.entities import (
    FileDescriptor,
    PipelineRequest,
    PipelineResponse,
    TagDetails,
    TagIdentifier,
    TagRow,
    TagStat,
)
from dicom_workbench.events.event_bus import EventHandler, EventStream, Subscription
from dicom_workbench.interfaces.remote_gateway import RemoteGateway

logger = logging.getLogger(__name__)

STATS_OPERATION = "get_pinned_tag_stats"


def _path_parts(folder: str) -> Tuple[str, ...]:
    return PurePosixPath(posixpath.normpath(folder)).parts


def _related(a: Tuple[str, ...], b: Tuple[str, ...]) -> bool:
    """True if one path is an ancestor of (or equal to) the other."""
    common = min(len(a), len(b))
    return a[:common] == b[:common]


class MetricsRecorder(Protocol):
    """Protocol for metrics collection."""

    def record_count(
        self,
        name: str,
        value: int,
        tags: Optional[Dict[str, str]] = None,
    ) -> None:
        ...


class CachedRemoteGateway:
    """
    Caching wrapper for RemoteGateway implementations.

    Usage:
        gateway = CachedRemoteGateway(MockRemoteGateway())

        # First call: cache miss, the backend scans the folder
        stats = gateway.get_pinned_tag_stats(folder, pins)

        # Same folder and pins (any order): cache hit
        stats = gateway.get_pinned_tag_stats(folder, list(reversed(pins)))
    """

    def __init__(
        self,
        gateway: RemoteGateway,
        cache_manager: Optional[CacheManager] = None,
        cache_config: Optional[CacheConfig] = None,
        metrics: Optional[MetricsRecorder] = None,
    ) -> None:
        """
        Initialize cached gateway.

        Args:
            gateway: Underlying gateway to wrap
            cache_manager: Cache manager instance (creates one if None)
            cache_config: Cache configuration (used if cache_manager is None)
            metrics: Optional metrics recorder for hit/miss counts
        """
        self.gateway = gateway
        self.cache = cache_manager or CacheManager(cache_config)
        self.metrics = metrics
        self._hits = 0
        self._misses = 0
        self._lock = threading.Lock()
        # scope -> cache keys stored for it
        self._scope_keys: Dict[str, Set[str]] = {}

    @classmethod
    def from_config(
        cls,
        gateway: RemoteGateway,
        config: StatsConfig,
        metrics: Optional[MetricsRecorder] = None,
    ) -> RemoteGateway:
        """
        Wrap ``gateway`` according to the stats settings.

        Returns:
            The bare gateway when ``cache_enabled`` is off, otherwise a
            CachedRemoteGateway sized and timed from the config
        """
        if not config.cache_enabled:
            logger.info("Stats cache disabled, using the gateway directly")
            return gateway
        cache_config = CacheConfig(
            enabled=True,
            default_ttl_seconds=config.cache_ttl_seconds,
            max_entries=config.cache_max_entries,
        )
        return cls(gateway, cache_config=cache_config, metrics=metrics)

    def list_records(self, folder: str) -> List[str]:
        return self.gateway.list_records(folder)

    def list_file_descriptors(self, folder: str) -> List[FileDescriptor]:
        return self.gateway.list_file_descriptors(folder)

    def get_tags(self, file_path: str) -> List[TagRow]:
        return self.gateway.get_tags(file_path)

    def get_tag_details(self, folder: str, identifier: TagIdentifier) -> TagDetails:
        # Not cached: the caller listens to scan progress for this call
        return self.gateway.get_tag_details(folder, identifier)

    def get_pinned_tag_stats(
        self,
        folder: str,
        identifiers: List[TagIdentifier],
    ) -> List[TagStat]:
        """
        Get value statistics with caching.

        Results are returned in the order of ``identifiers`` even when the
        cached entry was produced for a different ordering of the same set.
        """
        cache_key = CacheManager.make_key(
            STATS_OPERATION,
            self._scope(folder),
            tags=tuple(sorted(i.key for i in identifiers)),
        )

        cached = self.cache.get(cache_key)
        if cached is not None:
            self._record("cache_hit")
            logger.debug(f"Cache HIT for {STATS_OPERATION}: {folder} ({len(identifiers)} tags)")
            return self._in_order(cached, identifiers)

        self._record("cache_miss")
        logger.debug(f"Cache MISS for {STATS_OPERATION}: {folder} ({len(identifiers)} tags)")
        result = self.gateway.get_pinned_tag_stats(folder, identifiers)
        self.cache.set(cache_key, list(result))
        with self._lock:
            self._scope_keys.setdefault(self._scope(folder), set()).add(cache_key)
        return list(result)

    def run_pipeline(self, request: PipelineRequest) -> PipelineResponse:
        """
        Run the pipeline, then drop statistics the run may have changed.

        Entries are dropped even when the call raises, since the backend
        may have written part of the output before failing.
        """
        written = [
            spec.output_folder
            for spec in (request.anonymize, request.convert)
            if spec is not None
        ]
        try:
            response = self.gateway.run_pipeline(request)
            for report in (response.anonymization, response.conversion):
                if report is not None and report.output_folder:
                    written.append(report.output_folder)
            return response
        finally:
            for folder in written:
                self.invalidate_folder(folder)

    def subscribe(self, stream: EventStream, handler: EventHandler) -> Subscription:
        return self.gateway.subscribe(stream, handler)

    def invalidate_folder(self, folder: str) -> int:
        """
        Drop cached statistics of every folder above or below ``folder``.

        Folders are compared by path components, so ``/data/study`` does
        not affect ``/data/study2``.

        Returns:
            Number of entries dropped
        """
        target = _path_parts(folder)
        with self._lock:
            scopes = [
                scope for scope in self._scope_keys if _related(_path_parts(scope), target)
            ]
            keys = [key for scope in scopes for key in self._scope_keys.pop(scope)]

        dropped = sum(1 for key in keys if self.cache.invalidate(key))
        if dropped:
            logger.debug(f"Invalidated {dropped} cached stats around {folder}")
        return dropped

    def get_cache_stats(self) -> Dict[str, Any]:
        cache_stats = self.cache.get_stats()
        return {
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": cache_stats.hit_rate,
            "evictions": cache_stats.evictions,
            "expirations": cache_stats.expirations,
            "entries": cache_stats.current_entries,
        }

    def _scope(self, folder: str) -> str:
        return posixpath.normpath(folder)

    def _in_order(self, stats: List[TagStat], identifiers: List[TagIdentifier]) -> List[TagStat]:
        by_key = {stat.identifier.key: stat for stat in stats}
        return [by_key[i.key] for i in identifiers if i.key in by_key]

    def _record(self, name: str) -> None:
        if name == "cache_hit":
            self._hits += 1
        else:
            self._misses += 1
        if self.metrics:
            self.metrics.record_count(name, 1, tags={"operation": STATS_OPERATION})
