"""
Settings Package - Persisted User Preferences.

Components:
    - Preferences: Typed facade over a SettingsStore
    - PersistedField: Key, default and codec of one persisted value
"""

from dicom_workbench.settings.preferences import (
    INPUT_FOLDER,
    OUTPUT_FOLDER,
    PINNED_TAGS_KEY,
    TAG_VIEWER_FOLDER,
    PersistedField,
    Preferences,
)

__all__ = [
    "INPUT_FOLDER",
    "OUTPUT_FOLDER",
    "PINNED_TAGS_KEY",
    "TAG_VIEWER_FOLDER",
    "PersistedField",
    "Preferences",
]
