"""
Unit Tests for Preferences and Settings Stores.

Test Aspects Covered:
    ✅ Business Logic: Typed folder fields, pin set round trip
    ✅ Error Handling: Malformed persisted values fall back to defaults
    ✅ Persistence: YAML store writes through and reloads
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from dicom_workbench.adapters.settings_store import InMemorySettingsStore, YamlFileSettingsStore
from dicom_workbench.config.models import ExplorerConfig, WorkbenchConfig
from dicom_workbench.domain.entities import TagIdentifier
from dicom_workbench.settings.preferences import (
    INPUT_FOLDER,
    PINNED_TAGS_KEY,
    Preferences,
)


class TestPreferences:
    """Test cases for Preferences."""

    def test_folder_defaults_to_empty(self, preferences: Preferences) -> None:
        assert preferences.input_folder == ""
        assert preferences.output_folder == ""
        assert preferences.tag_viewer_folder == ""

    def test_folders_use_fixed_keys(self, settings_store: InMemorySettingsStore) -> None:
        preferences = Preferences(settings_store)

        preferences.input_folder = "/in"
        preferences.output_folder = "/out"
        preferences.tag_viewer_folder = "/view"

        assert settings_store.as_dict() == {
            "dicom-input-path": "/in",
            "dicom-output-path": "/out",
            "dicom-tag-viewer-path": "/view",
        }

    def test_pins_default_to_identity_tags(self, settings_store: InMemorySettingsStore) -> None:
        """
        SCENARIO: Nothing saved yet
        EXPECTED: The five identity tags from the explorer config
        """
        preferences = Preferences(settings_store)

        assert preferences.load_pins() == ExplorerConfig().default_pins
        assert len(preferences.load_pins()) == 5

    def test_pins_saved_as_json_array(self, preferences: Preferences, settings_store: InMemorySettingsStore) -> None:
        preferences.save_pins([TagIdentifier.of(0x0010, 0x0020), TagIdentifier.of(0x0008, 0x0080)])

        raw = json.loads(settings_store.get(PINNED_TAGS_KEY))

        assert raw == [{"group": 8, "element": 128}, {"group": 16, "element": 32}]
        assert preferences.load_pins() == [
            TagIdentifier.of(0x0008, 0x0080),
            TagIdentifier.of(0x0010, 0x0020),
        ]

    @pytest.mark.parametrize(
        "raw",
        ["not json", '{"group": 16}', '[{"group": 70000, "element": 1}]', '[{"group": "x"}]'],
    )
    def test_malformed_pins_fall_back(self, raw: str) -> None:
        """
        SCENARIO: pinnedTags holds garbage
        EXPECTED: Default pins returned, nothing raised
        """
        store = InMemorySettingsStore({PINNED_TAGS_KEY: raw})
        preferences = Preferences(store, default_pins=[TagIdentifier.of(16, 16)])

        assert preferences.load_pins() == [TagIdentifier.of(16, 16)]

    def test_default_is_a_fresh_copy(self, settings_store: InMemorySettingsStore) -> None:
        preferences = Preferences(settings_store, default_pins=[TagIdentifier.of(16, 16)])

        preferences.load_pins().clear()

        assert preferences.load_pins() == [TagIdentifier.of(16, 16)]

    def test_generic_read_write(self, preferences: Preferences) -> None:
        preferences.write(INPUT_FOLDER, "/data")

        assert preferences.read(INPUT_FOLDER) == "/data"


class TestYamlFileSettingsStore:
    """Test cases for YamlFileSettingsStore."""

    def test_write_through_and_reload(self, tmp_path: Path) -> None:
        path = tmp_path / "nested" / "settings.yaml"
        store = YamlFileSettingsStore(path)

        store.set("dicom-input-path", "/data/study")

        assert path.exists()
        assert YamlFileSettingsStore(path).get("dicom-input-path") == "/data/study"

    def test_missing_file_starts_empty(self, tmp_path: Path) -> None:
        store = YamlFileSettingsStore(tmp_path / "absent.yaml")

        assert store.get("dicom-input-path") is None

    def test_malformed_file_starts_empty(self, tmp_path: Path) -> None:
        path = tmp_path / "settings.yaml"
        path.write_text("key: [unclosed")

        store = YamlFileSettingsStore(path)

        assert store.get("key") is None

    def test_non_mapping_file_ignored(self, tmp_path: Path) -> None:
        path = tmp_path / "settings.yaml"
        path.write_text("- just\n- a list\n")

        assert YamlFileSettingsStore(path).get("just") is None

    def test_pins_survive_restart(self, tmp_path: Path) -> None:
        path = tmp_path / "settings.yaml"
        Preferences(YamlFileSettingsStore(path)).save_pins([TagIdentifier.of(0x0008, 0x0060)])

        reloaded = Preferences(YamlFileSettingsStore(path))

        assert reloaded.load_pins() == [TagIdentifier.of(0x0008, 0x0060)]


class TestPreferencesFromConfig:
    """Test cases for Preferences.from_config."""

    def test_in_memory_without_settings_path(self) -> None:
        prefs = Preferences.from_config(WorkbenchConfig())

        assert isinstance(prefs.store, InMemorySettingsStore)
        assert prefs.load_pins() == ExplorerConfig().default_pins

    def test_file_store_with_settings_path(self, tmp_path: Path) -> None:
        """
        SCENARIO: settings_path configured, folder saved, preferences rebuilt
        EXPECTED: Folder read back from the YAML file
        """
        # Arrange
        config = WorkbenchConfig(settings_path=str(tmp_path / "settings.yaml"))
        Preferences.from_config(config).input_folder = "/data/study"

        # Act
        reloaded = Preferences.from_config(config)

        # Assert
        assert isinstance(reloaded.store, YamlFileSettingsStore)
        assert reloaded.input_folder == "/data/study"

    def test_default_pins_taken_from_config(self) -> None:
        config = WorkbenchConfig(
            explorer=ExplorerConfig(default_pins=[TagIdentifier.of(0x0008, 0x0060)])
        )

        assert Preferences.from_config(config).load_pins() == [TagIdentifier.of(0x0008, 0x0060)]
