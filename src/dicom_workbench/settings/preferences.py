"""
Preferences - Typed Access to Persisted Settings.

Each persisted value is declared once as a PersistedField with its key,
default and (de)serialization. Reads never raise: a missing key yields
the default, a malformed value is logged and yields the default.

Persisted keys:
    - dicom-input-path: last input folder on the home screen
    - dicom-output-path: last output folder on the home screen
    - dicom-tag-viewer-path: last folder opened in the tag explorer
    - pinnedTags: JSON array of {"group": int, "element": int}
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Generic, List, Optional, TypeVar

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from dicom_workbench.adapters.settings_store import create_settings_store
from dicom_workbench.config.models import ExplorerConfig, WorkbenchConfig
from dicom_workbench.domain.entities import TagIdentifier
from dicom_workbench.interfaces.settings_store import SettingsStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

_TAG_LIST = TypeAdapter(List[TagIdentifier])


def _decode_pins(raw: str) -> List[TagIdentifier]:
    return _TAG_LIST.validate_json(raw)


def _encode_pins(pins: List[TagIdentifier]) -> str:
    ordered = sorted(pins, key=lambda t: t.sort_key)
    return _TAG_LIST.dump_json(ordered).decode("utf-8")


@dataclass(frozen=True)
class PersistedField(Generic[T]):
    """Declaration of one persisted value."""

    key: str
    default_factory: Callable[[], T]
    decode: Callable[[str], T]
    encode: Callable[[T], str]


INPUT_FOLDER: PersistedField[str] = PersistedField("dicom-input-path", str, str, str)
OUTPUT_FOLDER: PersistedField[str] = PersistedField("dicom-output-path", str, str, str)
TAG_VIEWER_FOLDER: PersistedField[str] = PersistedField("dicom-tag-viewer-path", str, str, str)
PINNED_TAGS_KEY = "pinnedTags"


class Preferences:
    """
    Typed facade over a SettingsStore.

    Example:
        >>> prefs = Preferences(InMemorySettingsStore())
        >>> prefs.input_folder
        ''
        >>> prefs.input_folder = "/data/study"
    """

    def __init__(
        self,
        store: SettingsStore,
        default_pins: Optional[List[TagIdentifier]] = None,
    ) -> None:
        """
        Args:
            store: Backing key-value store
            default_pins: Pins used when none were ever saved (defaults to
                the explorer config's five identity tags)
        """
        self.store = store
        pins = default_pins if default_pins is not None else ExplorerConfig().default_pins
        self.pinned_tags_field: PersistedField[List[TagIdentifier]] = PersistedField(
            PINNED_TAGS_KEY, lambda: list(pins), _decode_pins, _encode_pins
        )

    @classmethod
    def from_config(cls, config: WorkbenchConfig) -> "Preferences":
        """Preferences over the store named by ``settings_path``, default pins from config."""
        store = create_settings_store(config.settings_path)
        return cls(store, default_pins=list(config.explorer.default_pins))

    def read(self, persisted: PersistedField[T]) -> T:
        """Read a field, falling back to its default."""
        raw = self.store.get(persisted.key)
        if raw is None:
            return persisted.default_factory()
        try:
            return persisted.decode(raw)
        except (ValueError, PydanticValidationError) as e:
            logger.warning(
                f"Ignoring malformed setting '{persisted.key}' ({e}); using default"
            )
            return persisted.default_factory()

    def write(self, persisted: PersistedField[T], value: T) -> None:
        self.store.set(persisted.key, persisted.encode(value))
        logger.debug(f"Persisted setting '{persisted.key}'")

    @property
    def input_folder(self) -> str:
        return self.read(INPUT_FOLDER)

    @input_folder.setter
    def input_folder(self, value: str) -> None:
        self.write(INPUT_FOLDER, value)

    @property
    def output_folder(self) -> str:
        return self.read(OUTPUT_FOLDER)

    @output_folder.setter
    def output_folder(self, value: str) -> None:
        self.write(OUTPUT_FOLDER, value)

    @property
    def tag_viewer_folder(self) -> str:
        return self.read(TAG_VIEWER_FOLDER)

    @tag_viewer_folder.setter
    def tag_viewer_folder(self, value: str) -> None:
        self.write(TAG_VIEWER_FOLDER, value)

    def load_pins(self) -> List[TagIdentifier]:
        return self.read(self.pinned_tags_field)

    def save_pins(self, pins: List[TagIdentifier]) -> None:
        self.write(self.pinned_tags_field, pins)
