"""
Stats Aggregator - Value Frequencies of Pinned Tags.

Requests value histograms for a set of tags across every record of a
folder (one batched remote call, the backend does the scanning) and
shapes each histogram for display.

Design Notes:
    - No remote call at all for an empty tag list
    - summarize() is pure: count descending, value ascending on ties,
      top-N kept, percentages rounded to one decimal, 0.0 when the
      histogram sums to zero
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, List, Optional, Sequence

from dicom_workbench.domain.entities import TagIdentifier, TagStat
from dicom_workbench.domain.value_objects import TagStatSummary, ValueShare
from dicom_workbench.interfaces.remote_gateway import RemoteGateway
from dicom_workbench.resilience.error_handler import ErrorHandler

if TYPE_CHECKING:
    from dicom_workbench.observability.observability_manager import ObservabilityManager

logger = logging.getLogger(__name__)

DEFAULT_TOP_N = 10


def summarize(stat: TagStat, top_n: int = DEFAULT_TOP_N) -> TagStatSummary:
    """
    Build the top-N table of one tag histogram.

    Example:
        >>> stat = TagStat(identifier=tag, name="Modality", value_counts={"A": 3, "B": 1})
        >>> [(s.value, s.percentage) for s in summarize(stat).shares]
        [('A', 75.0), ('B', 25.0)]
    """
    total = sum(stat.value_counts.values())
    ordered = sorted(stat.value_counts.items(), key=lambda item: (-item[1], item[0]))
    shares = [
        ValueShare(
            value=value,
            count=count,
            percentage=round(count / total * 100, 1) if total > 0 else 0.0,
        )
        for value, count in ordered[:top_n]
    ]
    return TagStatSummary(
        identifier=stat.identifier,
        name=stat.name,
        total=total,
        shares=shares,
        remaining_values=max(0, len(ordered) - top_n),
    )


class StatsAggregator:
    """Fetches and summarizes value statistics for pinned tags."""

    def __init__(
        self,
        gateway: RemoteGateway,
        error_handler: Optional[ErrorHandler] = None,
        top_n: int = DEFAULT_TOP_N,
        observability: Optional["ObservabilityManager"] = None,
    ) -> None:
        """
        Args:
            gateway: Backend gateway (optionally a CachedRemoteGateway)
            error_handler: Wraps remote rejections
            top_n: Values kept per tag in summaries
            observability: Optional timing recorder
        """
        self.gateway = gateway
        self.error_handler = error_handler or ErrorHandler()
        self.top_n = top_n
        self.observability = observability

    def aggregate(self, folder: str, tags: Sequence[TagIdentifier]) -> List[TagStat]:
        """
        Fetch value histograms for several tags in one remote call.

        Args:
            folder: Folder whose records are scanned
            tags: Tags to aggregate

        Returns:
            One TagStat per tag the backend reported

        Raises:
            InvocationError: If the backend rejects the call
        """
        if not tags:
            logger.debug("No tags to aggregate, skipping remote call")
            return []

        start = time.perf_counter()
        stats = self.error_handler.invoke(
            lambda: self.gateway.get_pinned_tag_stats(folder, list(tags)),
            "get_pinned_tag_stats",
            folder,
        )
        duration = time.perf_counter() - start
        logger.info(f"Aggregated {len(stats)} tags in {folder} ({duration:.2f}s)")
        if self.observability is not None:
            self.observability.record_timing("stats_aggregate_seconds", duration)
        return list(stats)

    def summaries(self, folder: str, tags: Sequence[TagIdentifier]) -> List[TagStatSummary]:
        return [summarize(stat, self.top_n) for stat in self.aggregate(folder, tags)]
