"""
Observability Package - Structured Logging, Metrics, Health.

This package provides:
    - ObservabilityManager: structlog logging with per-run correlation IDs
    - HealthMonitor: Pre-run and post-run checks

Design Principles:
    - Structured JSON logging via structlog
    - Correlation ID propagation for end-to-end tracing of a run
    - Observability never changes pipeline outcomes
"""

from dicom_workbench.observability.health_monitor import (
    HealthCheck,
    HealthCheckResult,
    HealthMonitor,
    HealthStatus,
)
from dicom_workbench.observability.observability_manager import (
    ObservabilityManager,
    get_correlation_id,
)

__all__ = [
    "HealthCheck",
    "HealthCheckResult",
    "HealthMonitor",
    "HealthStatus",
    "ObservabilityManager",
    "get_correlation_id",
]
