"""
Stats Package - Value Statistics Across a Folder.

Components:
    - StatsAggregator: One batched remote call for all pinned tags
    - summarize: Top-N value shares with guarded percentages
    - TagDetailsLoader: Per-value breakdown of one tag with scan progress
"""

from dicom_workbench.stats.aggregator import DEFAULT_TOP_N, StatsAggregator, summarize
from dicom_workbench.stats.tag_details import TagDetailsLoader

__all__ = [
    "DEFAULT_TOP_N",
    "StatsAggregator",
    "TagDetailsLoader",
    "summarize",
]
