"""
Settings Stores.

Concrete SettingsStore implementations:
    - InMemorySettingsStore: dict-backed, for tests and ephemeral sessions
    - YamlFileSettingsStore: one YAML mapping on disk, written through on
      every ``set``

Design Notes:
    - Values are opaque strings; typing and defaults live in
      ``settings.preferences``
    - An unreadable or malformed file is logged and treated as empty so
      start-up never fails on persisted state
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Dict, Optional, Union

import yaml

logger = logging.getLogger(__name__)


class InMemorySettingsStore:
    """Dict-backed settings store."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._values: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value

    def as_dict(self) -> Dict[str, str]:
        return dict(self._values)


class YamlFileSettingsStore:
    """
    Settings store persisted as a flat YAML mapping.

    Example:
        >>> store = YamlFileSettingsStore("~/.dicom_workbench/settings.yaml")
        >>> store.set("dicom-input-path", "/data/study")
    """

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path).expanduser()
        self._lock = threading.Lock()
        self._values: Dict[str, str] = self._load()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._values[key] = value
            snapshot = dict(self._values)
        self._save(snapshot)

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            logger.debug(f"No settings file at {self.path}, starting empty")
            return {}

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Failed to load settings from {self.path}: {e}")
            return {}

        if not isinstance(data, dict):
            logger.warning(f"Settings file {self.path} is not a mapping, ignoring it")
            return {}

        logger.info(f"Loaded {len(data)} settings from {self.path.name}")
        return {str(k): str(v) for k, v in data.items() if v is not None}

    def _save(self, values: Dict[str, str]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                yaml.safe_dump(values, f, default_flow_style=False, sort_keys=True)
        except OSError as e:
            logger.warning(f"Failed to save settings to {self.path}: {e}")


def create_settings_store(
    path: Optional[Union[str, Path]] = None,
) -> Union[InMemorySettingsStore, YamlFileSettingsStore]:
    """File-backed store when a path is configured, in-memory otherwise."""
    if path:
        return YamlFileSettingsStore(path)
    logger.info("No settings_path configured, settings will not persist")
    return InMemorySettingsStore()
