"""
Settings Store Protocol.

Persisted string key-value storage used for last-used folders and the
pin set. Typed access with defaults lives in ``settings.preferences``.
"""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable


@runtime_checkable
class SettingsStore(Protocol):
    """Abstract interface for persisted settings."""

    def get(self, key: str) -> Optional[str]:
        """Return the stored value, or None if the key was never written."""
        ...

    def set(self, key: str, value: str) -> None:
        """Store a value, persisting it immediately."""
        ...
