"""
Explorer Package - Tag Dataset Exploration.

This package provides the tag explorer: the rows of one record, a
persisted pin set, a filter/sort view and windowed rendering over it.

Components:
    - PinSet: Duplicate-free set of pinned tags (toggle only)
    - derive_view: Pure filter + pinned-first sort
    - RowLayout / compute_window / ViewWindow: Visible slice of a list
    - TagDataset: Rows + pins + filter with an eagerly derived view
    - FileBrowser: Filtered, paginated record list
    - TagExplorerSession: Folder/record/stats state of the explorer

Design Principles:
    - Derived values are pure functions re-run on input change
    - Only the visible window of a long list is materialized
"""

from dicom_workbench.explorer.file_browser import FileBrowser
from dicom_workbench.explorer.pin_set import PinSet
from dicom_workbench.explorer.session import TagExplorerSession
from dicom_workbench.explorer.tag_dataset import TagDataset
from dicom_workbench.explorer.view_engine import derive_view, filter_rows, row_matches
from dicom_workbench.explorer.windowing import RowLayout, ViewWindow, compute_window

__all__ = [
    "FileBrowser",
    "PinSet",
    "RowLayout",
    "TagDataset",
    "TagExplorerSession",
    "ViewWindow",
    "compute_window",
    "derive_view",
    "filter_rows",
    "row_matches",
]
