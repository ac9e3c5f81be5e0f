"""
Tag Explorer Session - Folder, Record and Tag View State.

Ties the explorer pieces together for one folder:
    - open a folder (persisting it, listing records, loading the first)
    - select a record (rows replaced wholesale; a failed load clears them
      and records the error)
    - filter rows and files, toggle pins, compute the visible window
    - open value statistics for the pinned tags and per-tag details

Design Notes:
    - Remote failures while browsing are recorded on the session, not
      raised; the explorer stays usable and shows the message
    - An empty folder is a warning, never an error
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from dicom_workbench.config.models import WorkbenchConfig
from dicom_workbench.domain.entities import TagDetails, TagIdentifier, TagRow
from dicom_workbench.domain.value_objects import TagStatSummary
from dicom_workbench.explorer.file_browser import FileBrowser
from dicom_workbench.explorer.tag_dataset import TagDataset
from dicom_workbench.explorer.windowing import ViewWindow
from dicom_workbench.interfaces.remote_gateway import RemoteGateway
from dicom_workbench.resilience.error_handler import (
    ErrorHandler,
    InvocationError,
    empty_folder_warning,
)
from dicom_workbench.settings.preferences import Preferences
from dicom_workbench.stats.aggregator import StatsAggregator
from dicom_workbench.stats.tag_details import ProgressCallback, TagDetailsLoader

logger = logging.getLogger(__name__)


class TagExplorerSession:
    """State of the tag explorer screen."""

    def __init__(
        self,
        gateway: RemoteGateway,
        preferences: Preferences,
        config: Optional[WorkbenchConfig] = None,
        error_handler: Optional[ErrorHandler] = None,
        stats: Optional[StatsAggregator] = None,
    ) -> None:
        """
        Initialize session.

        Args:
            gateway: Backend gateway
            preferences: Persisted folder and pin settings
            config: Explorer and stats settings
            error_handler: Wraps remote rejections
            stats: Stats aggregator (created from config if omitted)
        """
        self.config = config or WorkbenchConfig()
        self.gateway = gateway
        self.preferences = preferences
        self.error_handler = error_handler or ErrorHandler()
        self.dataset = TagDataset(preferences, self.config.explorer)
        self.files = FileBrowser(self.config.explorer.files_per_page)
        self.stats = stats or StatsAggregator(
            gateway, self.error_handler, top_n=self.config.stats.top_n
        )
        self.details = TagDetailsLoader(gateway, self.error_handler)

        self.folder: Optional[str] = None
        self.selected_file: Optional[str] = None
        self.error: Optional[str] = None
        self.warnings: List[str] = []

    def resume(self) -> Optional[str]:
        """Re-open the last used folder, if one was saved."""
        folder = self.preferences.tag_viewer_folder
        if folder:
            self.open_folder(folder)
            return folder
        return None

    def open_folder(self, folder: str) -> List[str]:
        """
        Open a folder and load its first record.

        Returns:
            Record paths found in the folder
        """
        self.folder = folder
        self.preferences.tag_viewer_folder = folder
        self.error = None
        self.warnings = []
        self.selected_file = None
        self.dataset.clear()

        try:
            records = self.error_handler.invoke(
                lambda: self.gateway.list_records(folder), "list_records", folder
            )
        except InvocationError as e:
            self.error = e.message
            self.files.set_files([])
            return []

        self.files.set_files(records)
        if not records:
            warning = empty_folder_warning(folder)
            logger.warning(warning)
            self.warnings.append(warning)
            return []

        logger.info(f"Opened {folder}: {len(records)} records")
        self.select_record(records[0])
        return list(records)

    def select_record(self, file_path: str) -> bool:
        """
        Load the tags of one record.

        Returns:
            True on success; on failure rows are cleared and ``error`` set
        """
        self.selected_file = file_path
        self.error = None
        try:
            rows = self.error_handler.invoke(
                lambda: self.gateway.get_tags(file_path), "get_tags", file_path
            )
        except InvocationError as e:
            self.error = e.message
            self.dataset.clear()
            return False

        self.dataset.load_rows(rows)
        return True

    def set_filter(self, text: str) -> List[TagRow]:
        self.dataset.set_filter(text)
        return self.dataset.view

    def set_file_filter(self, text: str) -> List[str]:
        self.files.set_filter(text)
        return self.files.page_items

    def toggle_pin(self, identifier: TagIdentifier) -> bool:
        return self.dataset.toggle_pin(identifier)

    def visible_window(self, offset: float, viewport_extent: float) -> Tuple[ViewWindow, List[TagRow]]:
        return self.dataset.window(offset, viewport_extent)

    def open_stats(self) -> List[TagStatSummary]:
        """
        Summaries of every pinned tag across the open folder.

        No remote call is made when no folder is open or nothing is pinned.

        Raises:
            InvocationError: If the backend rejects the call
        """
        pins = self.dataset.pinned_identifiers()
        if not self.folder or not pins:
            return []
        return self.stats.summaries(self.folder, pins)

    def open_tag_details(
        self,
        identifier: TagIdentifier,
        on_progress: Optional[ProgressCallback] = None,
    ) -> TagDetails:
        """
        Breakdown of one tag across the open folder.

        Raises:
            ValueError: If no folder is open
            InvocationError: If the backend rejects the call
        """
        if not self.folder:
            raise ValueError("No folder is open")
        return self.details.load(self.folder, identifier, on_progress)
