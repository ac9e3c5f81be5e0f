"""
Adapters Package - Concrete Implementations of Interfaces.

This package contains concrete implementations of the protocols
defined in the interfaces package.

Adapters:
    - MockRemoteGateway: In-memory backend engine for testing/development
    - CachedRemoteGateway: Stats-caching wrapper around any gateway
    - InMemorySettingsStore / YamlFileSettingsStore: Persisted settings

Design Principles:
    - Each adapter implements exactly one protocol
    - Adapters can be swapped without changing business logic
"""

from dicom_workbench.adapters.cached_gateway import CachedRemoteGateway
from dicom_workbench.adapters.mock_gateway import MockRemoteGateway
from dicom_workbench.adapters.settings_store import (
    InMemorySettingsStore,
    YamlFileSettingsStore,
    create_settings_store,
)

__all__ = [
    "CachedRemoteGateway",
    "InMemorySettingsStore",
    "MockRemoteGateway",
    "YamlFileSettingsStore",
    "create_settings_store",
]
