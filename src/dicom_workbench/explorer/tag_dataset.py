"""
Tag Dataset - Rows of the Selected Record Plus the Pin Set.

The dataset owns the tag rows of the currently selected record, the pin
set and the filter text, and keeps the derived view in sync with them.

Design Notes:
    - Rows are replaced wholesale on record load, never edited in place
    - The pin set is loaded once at construction and written through to
      the preferences on every toggle
    - The view is recomputed eagerly after each input change
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Tuple

from dicom_workbench.config.models import ExplorerConfig
from dicom_workbench.domain.entities import TagIdentifier, TagRow
from dicom_workbench.explorer.pin_set import PinSet
from dicom_workbench.explorer.view_engine import derive_view
from dicom_workbench.explorer.windowing import RowLayout, ViewWindow, compute_window
from dicom_workbench.settings.preferences import Preferences

logger = logging.getLogger(__name__)


class TagDataset:
    """In-memory tag rows with pinning, filtering and windowing."""

    def __init__(
        self,
        preferences: Optional[Preferences] = None,
        config: Optional[ExplorerConfig] = None,
        pins: Optional[PinSet] = None,
    ) -> None:
        """
        Args:
            preferences: Source and sink of the persisted pin set; pins are
                kept in memory only when omitted
            config: Row extent and overscan for windowing
            pins: Initial pins, used only without preferences
        """
        self.config = config or ExplorerConfig()
        self.preferences = preferences
        if preferences is not None:
            self.pins = PinSet(preferences.load_pins())
        else:
            self.pins = pins.copy() if pins is not None else PinSet()
        self._rows: Tuple[TagRow, ...] = ()
        self._filter_text = ""
        self._view: List[TagRow] = []
        logger.debug(f"Tag dataset started with {len(self.pins)} pins")

    @property
    def rows(self) -> Tuple[TagRow, ...]:
        return self._rows

    @property
    def filter_text(self) -> str:
        return self._filter_text

    @property
    def view(self) -> List[TagRow]:
        return list(self._view)

    def load_rows(self, rows: Sequence[TagRow]) -> None:
        self._rows = tuple(rows)
        self._recompute()

    def clear(self) -> None:
        self.load_rows(())

    def set_filter(self, text: str) -> None:
        self._filter_text = text
        self._recompute()

    def is_pinned(self, identifier: TagIdentifier) -> bool:
        return self.pins.is_pinned(identifier)

    def toggle_pin(self, identifier: TagIdentifier) -> bool:
        """
        Pin or unpin a tag and persist the new pin set.

        Returns:
            True if the tag is pinned after the call
        """
        pinned = self.pins.toggle(identifier)
        if self.preferences is not None:
            self.preferences.save_pins(self.pins.to_list())
        logger.debug(f"{'Pinned' if pinned else 'Unpinned'} {identifier.label}")
        self._recompute()
        return pinned

    def pinned_identifiers(self) -> List[TagIdentifier]:
        return self.pins.to_list()

    def layout(self) -> RowLayout:
        return RowLayout.uniform(len(self._view), self.config.tag_row_extent)

    def window(self, offset: float, viewport_extent: float) -> Tuple[ViewWindow, List[TagRow]]:
        """Visible window of the current view and its rows."""
        window = compute_window(
            self.layout(), offset, viewport_extent, overscan=self.config.overscan
        )
        return window, window.materialize(self._view)

    def _recompute(self) -> None:
        self._view = derive_view(self._rows, self.pins, self._filter_text)
