"""
Integration Tests for TagExplorerSession.

Tests cover:
    - Opening folders against the mock backend (persisted, first record loaded)
    - Recoverable failures recorded on the session
    - Pins persisted across sessions, stats and tag details
    - File filtering, pagination and windowing
"""

from __future__ import annotations

from typing import Dict, List

import pytest

from dicom_workbench.adapters.cached_gateway import CachedRemoteGateway
from dicom_workbench.adapters.mock_gateway import MockRemoteGateway
from dicom_workbench.adapters.settings_store import InMemorySettingsStore
from dicom_workbench.config.models import ExplorerConfig, WorkbenchConfig
from dicom_workbench.domain.entities import TagIdentifier, TagRow
from dicom_workbench.explorer.session import TagExplorerSession
from dicom_workbench.resilience.error_handler import InvocationError
from dicom_workbench.settings.preferences import Preferences


@pytest.fixture
def gateway(small_records: Dict[str, List[TagRow]]) -> MockRemoteGateway:
    return MockRemoteGateway(records=small_records)


@pytest.fixture
def session(gateway: MockRemoteGateway, preferences: Preferences) -> TagExplorerSession:
    return TagExplorerSession(gateway, preferences)


def names(rows: List[TagRow]) -> List[str]:
    return [row.name for row in rows]


class TestOpenFolder:
    """Opening folders and selecting records."""

    def test_open_folder_loads_first_record(
        self,
        session: TagExplorerSession,
        preferences: Preferences,
    ) -> None:
        """
        SCENARIO: Open /data/small holding three records
        EXPECTED: Folder persisted, a.dcm selected, rows sorted by tag
        """
        # Act
        records = session.open_folder("/data/small")

        # Assert
        assert records == ["/data/small/a.dcm", "/data/small/b.dcm", "/data/small/c.dcm"]
        assert preferences.tag_viewer_folder == "/data/small"
        assert session.selected_file == "/data/small/a.dcm"
        assert names(session.dataset.view) == ["Modality", "PatientName"]
        assert session.error is None
        assert session.warnings == []

    def test_empty_folder_is_warning(self, session: TagExplorerSession, gateway: MockRemoteGateway) -> None:
        records = session.open_folder("/data/none")

        assert records == []
        assert session.warnings == ["No eligible records found in /data/none"]
        assert session.error is None
        assert gateway.call_count("get_tags") == 0

    def test_listing_rejection_recorded(self, session: TagExplorerSession, gateway: MockRemoteGateway) -> None:
        gateway.reject("list_records")

        records = session.open_folder("/data/small")

        assert records == []
        assert session.error.startswith("list_records failed on /data/small")
        assert session.files.files == []

    def test_failed_record_load_clears_rows(self, session: TagExplorerSession) -> None:
        """
        SCENARIO: Record loaded, then an unreadable record is selected
        EXPECTED: Rows cleared, error names the file, session still usable
        """
        # Arrange
        session.open_folder("/data/small")

        # Act
        loaded = session.select_record("/data/small/missing.dcm")

        # Assert
        assert loaded is False
        assert session.dataset.rows == ()
        assert "/data/small/missing.dcm" in session.error

        assert session.select_record("/data/small/b.dcm") is True
        assert session.error is None
        assert len(session.dataset.rows) == 2

    def test_resume_reopens_saved_folder(self, gateway: MockRemoteGateway, settings_store: InMemorySettingsStore) -> None:
        preferences = Preferences(settings_store, default_pins=[])
        preferences.tag_viewer_folder = "/data/small"

        session = TagExplorerSession(gateway, preferences)

        assert session.resume() == "/data/small"
        assert session.selected_file == "/data/small/a.dcm"

    def test_resume_without_saved_folder(self, session: TagExplorerSession, gateway: MockRemoteGateway) -> None:
        assert session.resume() is None
        assert gateway.calls == []


class TestPinsAndFilters:
    """Pinning, filtering and windowing the selected record."""

    def test_pin_moves_row_first_and_persists(
        self,
        session: TagExplorerSession,
        gateway: MockRemoteGateway,
        settings_store: InMemorySettingsStore,
        patient_name: TagIdentifier,
    ) -> None:
        """
        SCENARIO: PatientName pinned, then a new session opened on the same store
        EXPECTED: PatientName listed first in both sessions
        """
        # Arrange
        session.open_folder("/data/small")

        # Act
        pinned = session.toggle_pin(patient_name)
        reopened = TagExplorerSession(gateway, Preferences(settings_store, default_pins=[]))
        reopened.open_folder("/data/small")

        # Assert
        assert pinned is True
        assert names(session.dataset.view) == ["PatientName", "Modality"]
        assert reopened.dataset.pinned_identifiers() == [patient_name]
        assert names(reopened.dataset.view) == ["PatientName", "Modality"]

    def test_filter_matches_value(self, session: TagExplorerSession) -> None:
        session.open_folder("/data/small")
        session.select_record("/data/small/c.dcm")

        view = session.set_filter("mr")

        assert names(view) == ["Modality"]

    def test_filter_survives_record_change(self, session: TagExplorerSession) -> None:
        session.open_folder("/data/small")
        session.set_filter("patient")

        session.select_record("/data/small/b.dcm")

        assert [row.value for row in session.dataset.view] == ["DOE^JANE"]

    def test_visible_window(self, session: TagExplorerSession) -> None:
        session.open_folder("/data/small")

        window, rows = session.visible_window(offset=0, viewport_extent=400)

        assert names(rows) == ["Modality", "PatientName"]
        assert window.total_extent == 80


class TestFileBrowsing:
    """File list filtering and pagination."""

    def test_pagination_and_file_filter(self) -> None:
        """
        SCENARIO: 24 generated records, 10 per page, filter "series3"
        EXPECTED: 3 pages unfiltered, 4 files on a single page filtered
        """
        # Arrange
        config = WorkbenchConfig(explorer=ExplorerConfig(files_per_page=10))
        session = TagExplorerSession(
            MockRemoteGateway(seed=42), Preferences(InMemorySettingsStore(), default_pins=[]), config
        )
        session.open_folder("/data/study")

        # Act
        unfiltered_pages = session.files.page_count
        session.files.next_page()
        items = session.set_file_filter("series3")

        # Assert
        assert unfiltered_pages == 3
        assert len(items) == 4
        assert session.files.page_label == "1 / 1"


class TestStatsAndDetails:
    """Value statistics for pinned tags and per-tag details."""

    def test_no_pins_no_call(self, session: TagExplorerSession, gateway: MockRemoteGateway) -> None:
        session.open_folder("/data/small")

        assert session.open_stats() == []
        assert gateway.call_count("get_pinned_tag_stats") == 0

    def test_stats_through_cached_gateway(
        self,
        small_records: Dict[str, List[TagRow]],
        preferences: Preferences,
        patient_name: TagIdentifier,
        modality: TagIdentifier,
    ) -> None:
        """
        SCENARIO: Two pins, stats opened twice through the cache
        EXPECTED: One backend call, Modality CT 66.7% / MR 33.3%
        """
        # Arrange
        backend = MockRemoteGateway(records=small_records)
        session = TagExplorerSession(CachedRemoteGateway(backend), preferences)
        session.open_folder("/data/small")
        session.toggle_pin(patient_name)
        session.toggle_pin(modality)

        # Act
        session.open_stats()
        summaries = {s.name: s for s in session.open_stats()}

        # Assert
        assert backend.call_count("get_pinned_tag_stats") == 1
        shares = summaries["Modality"].shares
        assert [(s.value, s.count, s.percentage) for s in shares] == [
            ("CT", 2, 66.7),
            ("MR", 1, 33.3),
        ]
        assert summaries["PatientName"].total == 3

    def test_stats_rejection_raises(
        self,
        session: TagExplorerSession,
        gateway: MockRemoteGateway,
        patient_name: TagIdentifier,
    ) -> None:
        session.open_folder("/data/small")
        session.toggle_pin(patient_name)
        gateway.reject("get_pinned_tag_stats")

        with pytest.raises(InvocationError, match="/data/small"):
            session.open_stats()

    def test_tag_details(
        self,
        session: TagExplorerSession,
        gateway: MockRemoteGateway,
        modality: TagIdentifier,
    ) -> None:
        session.open_folder("/data/small")
        progress = []

        details = session.open_tag_details(modality, on_progress=progress.append)

        assert [(v.value, v.count) for v in details.values] == [("CT", 2), ("MR", 1)]
        assert details.values[0].files == ["/data/small/a.dcm", "/data/small/b.dcm"]
        assert [(p.current, p.total) for p in progress] == [(3, 3)]
        assert gateway.events.subscription_count() == 0

    def test_tag_details_requires_folder(self, session: TagExplorerSession, modality: TagIdentifier) -> None:
        with pytest.raises(ValueError):
            session.open_tag_details(modality)
