"""
Interfaces Layer - Abstract Protocols for Dependencies.

This package defines the abstract interfaces (using typing.Protocol) for all
external dependencies. High-level modules depend on these abstractions, not
on the concrete engine bridge or storage mechanism.

Protocols:
    - RemoteGateway: The backend engine's command and event surface
    - SettingsStore: Persisted string key-value storage
    - AuditLogger: Stage start/end and anomaly hooks
    - HealthMonitor: Pre-run and post-run checks

Design Principles:
    - Use typing.Protocol (not ABC) for Pythonic interfaces
    - Interface Segregation: Small, focused interfaces
    - All methods have clear contracts in docstrings
"""

from dicom_workbench.interfaces.audit_logger import AuditLogger
from dicom_workbench.interfaces.health_monitor import HealthMonitor
from dicom_workbench.interfaces.remote_gateway import RemoteCallError, RemoteGateway
from dicom_workbench.interfaces.settings_store import SettingsStore

__all__ = [
    "AuditLogger",
    "HealthMonitor",
    "RemoteCallError",
    "RemoteGateway",
    "SettingsStore",
]
